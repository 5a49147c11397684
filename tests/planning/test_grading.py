from study_server.planning.grading import grade_color, hex_to_rgb, interpolate_color
from study_server.planning.models import GradeColor, UserSettings

DEFAULTS = UserSettings()


def test_hex_to_rgb():
    assert hex_to_rgb("#ff8000") == (255, 128, 0)
    assert hex_to_rgb("FF8000") == (255, 128, 0)
    assert hex_to_rgb("blue") is None


def test_interpolate_midpoint():
    assert interpolate_color("#000000", "#ffffff", 0.5) == "#808080"
    assert interpolate_color("#000000", "#ffffff", 0) == "#000000"


def test_interpolate_falls_back_on_named_colors():
    assert interpolate_color("red", "#ffffff", 0.5) == "red"


def test_missing_score_uses_undefined_color():
    assert grade_color(None, DEFAULTS.grade_colors, DEFAULTS.undefined_color) == DEFAULTS.undefined_color
    assert grade_color(70, [], "#123456") == "#123456"


def test_threshold_scores_get_exact_colors():
    assert grade_color(0, DEFAULTS.grade_colors, DEFAULTS.undefined_color) == "#ef4444"
    assert grade_color(50, DEFAULTS.grade_colors, DEFAULTS.undefined_color) == "#eab308"
    assert grade_color(100, DEFAULTS.grade_colors, DEFAULTS.undefined_color) == "#22c55e"


def test_scores_between_thresholds_are_blended():
    colors = [GradeColor(min=100, color="#ffffff"), GradeColor(min=0, color="#000000")]
    assert grade_color(50, colors, "#999999") == "#808080"


def test_scores_outside_thresholds_clamp():
    colors = [GradeColor(min=50, color="#111111"), GradeColor(min=80, color="#222222")]
    assert grade_color(90, colors, "#999999") == "#222222"
    assert grade_color(10, colors, "#999999") == "#111111"
