# study_server/planning/title_format.py

from datetime import date
from typing import Iterable, Optional, Sequence

from study_server.planning.academic_week import calculate_academic_week
from study_server.planning.models import BreakPeriod, EventRecord

WEEK_TOKEN = "{week}"
WEEKLY_INDEX_TOKEN = "{weekly_index}"
INDEX_TOKENS = ("{i}", "{index}")


def apply_index_tokens(title: str, index: int) -> str:
    """Bakes a 1-based generation index into `{i}` / `{index}` as two digits."""
    for token in INDEX_TOKENS:
        if token in title:
            title = title.replace(token, f"{index:02d}")
    return title


def _weekly_index(
    event: EventRecord,
    all_events: Iterable[EventRecord],
    semester_start: date,
    breaks: Sequence[BreakPeriod],
    workdays: Optional[Iterable[int]],
    current_week: int,
) -> int:
    """1-based position among same-week series members; 0 if `event` is not in `all_events`."""
    series = [e for e in all_events if e.recurrence_id == event.recurrence_id]
    same_week = [
        e for e in series
        if calculate_academic_week(e.date, semester_start, breaks, workdays) == current_week
    ]
    same_week.sort(key=lambda e: e.date)
    return next((i for i, e in enumerate(same_week, start=1) if e.id == event.id), 0)


def format_event_title(
    title: str,
    event: EventRecord,
    all_events: Iterable[EventRecord],
    semester_start: Optional[date],
    breaks: Optional[Sequence[BreakPeriod]] = None,
    workdays: Optional[Iterable[int]] = None,
) -> str:
    """
    Resolves `{week}` and `{weekly_index}` for display. Nothing here is persisted;
    without a semester start the title is returned untouched.
    """
    if semester_start is None:
        return title
    breaks = list(breaks or [])
    workdays = None if workdays is None else list(workdays)

    if WEEK_TOKEN not in title and WEEKLY_INDEX_TOKEN not in title:
        return title

    current_week = calculate_academic_week(event.date, semester_start, breaks, workdays)

    if WEEK_TOKEN in title:
        title = title.replace(WEEK_TOKEN, f"{current_week:02d}")

    if WEEKLY_INDEX_TOKEN in title:
        if not event.recurrence_id:
            index = 1
        else:
            index = _weekly_index(event, all_events, semester_start, breaks, workdays, current_week)
        title = title.replace(WEEKLY_INDEX_TOKEN, str(index))

    return title

