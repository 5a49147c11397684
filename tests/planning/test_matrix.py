from datetime import date

from study_server.planning.matrix import LEADING_DAYS, TRAILING_DAYS, build_events_matrix
from study_server.planning.models import CourseRecord, EventRecord, UserSettings

COURSES = [CourseRecord(id="c1", title="Algebra"), CourseRecord(id="c2", title="History")]


def test_empty_without_events():
    assert build_events_matrix(COURSES, [], UserSettings()) == []


def test_rows_span_events_with_padding():
    events = [
        EventRecord(id="e1", course_id="c1", title="Quiz", date=date(2024, 1, 10), score=100),
        EventRecord(id="e2", course_id="c1", title="Quiz retake", date=date(2024, 1, 10), score=20),
    ]
    rows = build_events_matrix(COURSES, events, UserSettings())

    assert len(rows) == LEADING_DAYS + TRAILING_DAYS + 1
    assert rows[0].day == date(2024, 1, 8)
    assert rows[-1].day == date(2024, 1, 24)

    quiz_row = next(r for r in rows if r.day == date(2024, 1, 10))
    cell = quiz_row.cells["c1"]
    assert cell.event_id == "e1"
    assert cell.color == "#22c55e"
    assert quiz_row.cells["c2"] is None


def test_weekends_are_flagged():
    events = [EventRecord(id="e1", course_id="c2", title="Essay", date=date(2024, 1, 12))]
    rows = {r.day: r for r in build_events_matrix(COURSES, events, UserSettings())}
    assert rows[date(2024, 1, 13)].is_weekend
    assert rows[date(2024, 1, 14)].is_weekend
    assert not rows[date(2024, 1, 12)].is_weekend
    assert rows[date(2024, 1, 12)].cells["c2"].color == UserSettings().undefined_color
