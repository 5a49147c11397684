# study_server/planning/grading.py

import re
from typing import Optional, Sequence, Tuple

from study_server.planning.models import GradeColor

_HEX_RE = re.compile(r"^#?([a-f\d]{2})([a-f\d]{2})([a-f\d]{2})$", re.IGNORECASE)


def hex_to_rgb(value: str) -> Optional[Tuple[int, int, int]]:
    match = _HEX_RE.match(value)
    if not match:
        return None
    return tuple(int(part, 16) for part in match.groups())


def interpolate_color(color1: str, color2: str, factor: float) -> str:
    """Linear blend in RGB; falls back to `color1` if either colour is not hex."""
    rgb1 = hex_to_rgb(color1)
    rgb2 = hex_to_rgb(color2)
    if not rgb1 or not rgb2:
        return color1
    r, g, b = (round(x + factor * (y - x)) for x, y in zip(rgb1, rgb2))
    return f"#{r:02x}{g:02x}{b:02x}"


def grade_color(score: Optional[float], grade_colors: Sequence[GradeColor], undefined_color: str) -> str:
    """
    Colour for a score, interpolated between the two thresholds around it.
    Scores above the highest threshold get its colour, scores below the lowest
    get the lowest colour.
    """
    if score is None or not grade_colors:
        return undefined_color

    ordered = sorted(grade_colors, key=lambda g: g.min, reverse=True)
    for upper, lower in zip(ordered, ordered[1:]):
        if lower.min <= score <= upper.min:
            span = upper.min - lower.min
            factor = (score - lower.min) / span if span else 0.0
            return interpolate_color(lower.color, upper.color, factor)

    if score > ordered[0].min:
        return ordered[0].color
    return ordered[-1].color
