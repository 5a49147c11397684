from datetime import date, timedelta

from study_server.planning.academic_week import (
    MAX_WEEKS,
    calculate_academic_week,
    is_teaching_block,
    week_start_monday,
)
from study_server.planning.models import BreakPeriod

SEMESTER_START = date(2024, 1, 1)  # a Monday


def test_week_start_monday():
    assert week_start_monday(date(2024, 1, 3)) == date(2024, 1, 1)
    assert week_start_monday(date(2024, 1, 7)) == date(2024, 1, 1)  # Sunday goes back six days
    assert week_start_monday(date(2024, 1, 8)) == date(2024, 1, 8)


def test_consecutive_weeks_without_breaks():
    assert calculate_academic_week(date(2024, 1, 1), SEMESTER_START) == 1
    assert calculate_academic_week(date(2024, 1, 7), SEMESTER_START) == 1
    assert calculate_academic_week(date(2024, 1, 8), SEMESTER_START) == 2
    assert calculate_academic_week(date(2024, 1, 29), SEMESTER_START) == 5


def test_days_before_semester_are_week_one():
    assert calculate_academic_week(date(2023, 12, 20), SEMESTER_START) == 1


def test_mid_week_start_counts_from_monday():
    start = date(2024, 1, 3)  # Wednesday
    assert calculate_academic_week(date(2024, 1, 1), start) == 1
    assert calculate_academic_week(date(2024, 1, 8), start) == 2


def test_full_break_week_does_not_consume_a_number():
    breaks = [BreakPeriod(start_date=date(2024, 1, 8), end_date=date(2024, 1, 14))]
    assert calculate_academic_week(date(2024, 1, 10), SEMESTER_START, breaks) == 2
    assert calculate_academic_week(date(2024, 1, 15), SEMESTER_START, breaks) == 2
    assert calculate_academic_week(date(2024, 1, 22), SEMESTER_START, breaks) == 3


def test_partial_break_week_still_counts():
    # Friday 2024-01-12 is still taught
    breaks = [BreakPeriod(start_date=date(2024, 1, 8), end_date=date(2024, 1, 11))]
    assert calculate_academic_week(date(2024, 1, 15), SEMESTER_START, breaks) == 3


def test_workdays_decide_teaching_blocks():
    # Only Fridays are taught; a break covering Friday empties the week
    breaks = [BreakPeriod(start_date=date(2024, 1, 12), end_date=date(2024, 1, 12))]
    assert not is_teaching_block(date(2024, 1, 8), breaks, [5])
    assert is_teaching_block(date(2024, 1, 8), breaks, [1])
    assert calculate_academic_week(date(2024, 1, 15), SEMESTER_START, breaks, workdays=[5]) == 2


def test_no_workdays_keeps_week_one():
    assert calculate_academic_week(date(2024, 3, 1), SEMESTER_START, workdays=[]) == 1


def test_walk_is_capped():
    assert calculate_academic_week(date(2030, 1, 1), SEMESTER_START) == MAX_WEEKS + 1


def test_week_never_decreases_day_by_day():
    start = date(2024, 1, 10)  # Wednesday
    breaks = [BreakPeriod(start_date=date(2024, 2, 5), end_date=date(2024, 2, 20))]
    previous = 1
    for offset in range(-20, 301):
        day = start + timedelta(days=offset)
        week = calculate_academic_week(day, start, breaks)
        assert week >= 1
        assert week >= previous, day
        previous = week
