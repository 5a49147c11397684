# study_server/planning/academic_week.py
"""
Academic week numbering.

Weeks are 7-day blocks starting on the Monday on or before the semester start.
A block only consumes a week number if at least one of its days is a configured
workday outside every break, so holiday weeks and workday-less weeks are absorbed
without shifting the numbering of the weeks around them.
"""

from datetime import date, timedelta
from typing import Iterable, Optional, Sequence

from study_server.planning.models import DEFAULT_WORKDAYS, BreakPeriod
from study_server.shared.utils import js_weekday

# Upper bound on blocks walked; roughly one year of weeks.
MAX_WEEKS = 52


def is_in_break(day: date, breaks: Iterable[BreakPeriod]) -> bool:
    return any(b.contains(day) for b in breaks)


def week_start_monday(day: date) -> date:
    """Monday on or before `day` (a Sunday maps back six days)."""
    return day - timedelta(days=day.weekday())


def is_teaching_block(block_start: date, breaks: Sequence[BreakPeriod], workdays: Iterable[int]) -> bool:
    workday_set = set(workdays)
    for offset in range(7):
        day = block_start + timedelta(days=offset)
        if js_weekday(day) not in workday_set:
            continue
        if not is_in_break(day, breaks):
            return True
    return False


def calculate_academic_week(
    day: date,
    semester_start: date,
    breaks: Optional[Sequence[BreakPeriod]] = None,
    workdays: Optional[Iterable[int]] = None,
) -> int:
    """
    Returns the 1-based academic week containing `day`.

    Days before the first Monday resolve to week 1. The walk stops after
    MAX_WEEKS blocks and returns the week reached so far.
    """
    breaks = list(breaks or [])
    workdays = list(DEFAULT_WORKDAYS if workdays is None else workdays)

    block_start = week_start_monday(semester_start)
    week = 1
    walked = 0

    while block_start <= day and walked < MAX_WEEKS:
        next_block = block_start + timedelta(days=7)
        if day < next_block:
            return week
        if is_teaching_block(block_start, breaks, workdays):
            week += 1
        block_start = next_block
        walked += 1

    return max(1, week)
