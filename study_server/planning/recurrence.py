# study_server/planning/recurrence.py
"""
Recurring event generation.

A series is generated from a start day, an inclusive end day and a pattern:
`Weekly` repeats on the weekday of the start day, `Custom` repeats on chosen
weekdays, optionally several times on the same day (e.g. two lab sessions on a
Tuesday). Days inside a break never produce an event.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Union

from study_server.planning.academic_week import is_in_break
from study_server.planning.models import BreakPeriod, EventDraft, EventRecord, new_id
from study_server.planning.title_format import apply_index_tokens
from study_server.shared.utils import daterange, js_weekday

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Weekly:
    """Repeat on the same weekday as the start day."""


@dataclass(frozen=True)
class Custom:
    """Repeat on selected weekdays (0=Sunday..6=Saturday) with a per-day repeat count."""
    days: Mapping[int, int] = field(default_factory=dict)

    def __post_init__(self):
        for weekday, count in self.days.items():
            if not 0 <= weekday <= 6:
                raise ValueError(f"weekday index out of range: {weekday}")
            if count < 1:
                raise ValueError(f"repeat count must be at least 1, got {count} for weekday {weekday}")


RecurrencePattern = Union[Weekly, Custom]


def generate_recurrence_dates(
    start: date,
    end: date,
    pattern: RecurrencePattern,
    breaks: Optional[Sequence[BreakPeriod]] = None,
) -> List[date]:
    """
    Lists every occurrence day from `start` to `end` inclusive, in order.
    Repeat counts above one yield the same day several times on purpose.
    """
    breaks = list(breaks or [])
    start_weekday = js_weekday(start)
    dates: List[date] = []

    for day in daterange(start, end):
        if is_in_break(day, breaks):
            continue
        weekday = js_weekday(day)
        if isinstance(pattern, Weekly):
            if weekday == start_weekday:
                dates.append(day)
        elif isinstance(pattern, Custom):
            count = pattern.days.get(weekday, 0)
            dates.extend([day] * count)
        else:
            raise TypeError(f"Unknown recurrence pattern: {pattern!r}")

    return dates


def build_series(template: EventDraft, dates: Iterable[date], recurrence_id: Optional[str] = None) -> List[EventRecord]:
    """
    Turns generated days into events sharing one recurrence id. `{i}`/`{index}`
    are replaced with the 1-based position in this batch and stay baked into
    the stored title.
    """
    recurrence_id = recurrence_id or new_id()
    events: List[EventRecord] = []
    for index, day in enumerate(dates, start=1):
        events.append(EventRecord(
            id=new_id(),
            course_id=template.course_id,
            title=apply_index_tokens(template.title, index),
            type=template.type,
            date=day,
            is_completed=False,
            score=template.score,
            recurrence_id=recurrence_id,
        ))
    return events


def plan_series_extension(
    anchor: EventRecord,
    members: Sequence[EventRecord],
    end: date,
    pattern: RecurrencePattern,
    breaks: Optional[Sequence[BreakPeriod]] = None,
) -> List[EventRecord]:
    """
    New events that extend the anchor's series from the anchor's day up to `end`.

    Days already held by a member (or by the anchor itself) are skipped. New
    events take the anchor's title, type and score. The index tokens of the
    added events count from 1 within this batch, not across the whole series.
    """
    candidates = generate_recurrence_dates(anchor.date, end, pattern, breaks)
    taken = {m.date for m in members}
    taken.add(anchor.date)
    fresh = [d for d in candidates if d not in taken]

    log.info(f"Series extension from {anchor.date}: {len(candidates)} candidates, {len(fresh)} new")
    if not fresh:
        return []

    template = EventDraft(
        course_id=anchor.course_id,
        title=anchor.title,
        type=anchor.type,
        date=anchor.date,
        score=anchor.score,
    )
    return build_series(template, fresh, anchor.recurrence_id)


def pattern_from_days(days: Optional[Dict[int, int]]) -> RecurrencePattern:
    """`None` or an empty mapping means weekly; otherwise a custom pattern."""
    if not days:
        return Weekly()
    return Custom(days=dict(days))
