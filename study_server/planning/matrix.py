# study_server/planning/matrix.py
"""Day-by-course overview of events, coloured by score."""

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Dict, List, Optional, Sequence

from study_server.planning.grading import grade_color
from study_server.planning.models import CourseRecord, EventRecord, UserSettings
from study_server.shared.utils import daterange

LEADING_DAYS = 2
TRAILING_DAYS = 14


@dataclass
class MatrixCell:
    event_id: str
    title: str
    score: Optional[int]
    color: str


@dataclass
class MatrixRow:
    day: date
    is_weekend: bool
    cells: Dict[str, Optional[MatrixCell]] = field(default_factory=dict)


def build_events_matrix(
    courses: Sequence[CourseRecord],
    events: Sequence[EventRecord],
    settings: UserSettings,
) -> List[MatrixRow]:
    if not courses or not events:
        return []

    first = min(e.date for e in events) - timedelta(days=LEADING_DAYS)
    last = max(e.date for e in events) + timedelta(days=TRAILING_DAYS)

    # first event per (course, day) wins
    by_cell: Dict[tuple, EventRecord] = {}
    for event in events:
        by_cell.setdefault((event.course_id, event.date), event)

    rows: List[MatrixRow] = []
    for day in daterange(first, last):
        row = MatrixRow(day=day, is_weekend=day.weekday() >= 5)
        for course in courses:
            event = by_cell.get((course.id, day))
            if event is None:
                row.cells[course.id] = None
                continue
            row.cells[course.id] = MatrixCell(
                event_id=event.id,
                title=event.title,
                score=event.score,
                color=grade_color(event.score, settings.grade_colors, settings.undefined_color),
            )
        rows.append(row)
    return rows
