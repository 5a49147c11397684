# study_server/planning/focus.py
"""
Focus timer and focus-time statistics.

The timer is a plain state machine driven by one `tick()` per second from the
caller; it performs no scheduling itself. Finishing or stopping the timer hands
back a session draft for the caller to persist.
"""

import enum
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Dict, List, Optional, Sequence, Tuple

from study_server.planning.academic_week import week_start_monday
from study_server.planning.models import EventRecord, FocusSessionDraft, FocusSessionRecord
from study_server.shared.utils import format_duration

log = logging.getLogger(__name__)

UNSPECIFIED_TYPE = "Unspecified"
TOP_EVENTS = 3


class TimerState(str, enum.Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    FINISHED = "finished"


class FocusTimer:
    def __init__(self, duration_minutes: int = 25, course_id: Optional[str] = None, event_id: Optional[str] = None):
        if duration_minutes <= 0:
            raise ValueError("timer duration must be positive")
        self.duration_minutes = duration_minutes
        self.course_id = course_id
        self.event_id = event_id
        self.state = TimerState.IDLE
        self.time_left = duration_minutes * 60

    @property
    def total_seconds(self) -> int:
        return self.duration_minutes * 60

    @property
    def elapsed(self) -> int:
        return self.total_seconds - self.time_left

    @property
    def progress(self) -> float:
        return 100.0 * self.elapsed / self.total_seconds

    def set_duration(self, minutes: int) -> None:
        if self.state != TimerState.IDLE:
            raise RuntimeError("duration can only change while the timer is idle")
        if minutes <= 0:
            raise ValueError("timer duration must be positive")
        self.duration_minutes = minutes
        self.time_left = minutes * 60

    def set_context(self, course_id: Optional[str], event_id: Optional[str] = None) -> None:
        self.course_id = course_id
        self.event_id = event_id

    def start(self) -> None:
        if self.state in (TimerState.IDLE, TimerState.PAUSED):
            self.state = TimerState.RUNNING

    def toggle(self) -> None:
        if self.state == TimerState.RUNNING:
            self.state = TimerState.PAUSED
        else:
            self.start()

    def tick(self) -> bool:
        """Advances one second. Returns True when this tick finished the countdown."""
        if self.state != TimerState.RUNNING:
            return False
        self.time_left = max(0, self.time_left - 1)
        if self.time_left == 0:
            self.state = TimerState.FINISHED
            return True
        return False

    def reset(self) -> None:
        self.state = TimerState.IDLE
        self.time_left = self.total_seconds

    def stop(self, now: Optional[datetime] = None) -> Optional[FocusSessionDraft]:
        """Ends the run. Returns a session draft if any time elapsed on a course."""
        elapsed = self.elapsed
        draft = None
        if elapsed > 0 and self.course_id:
            draft = FocusSessionDraft(
                course_id=self.course_id,
                event_id=self.event_id,
                duration=elapsed,
                created_at=now or datetime.now(),
            )
        elif elapsed > 0:
            log.warning(f"Focus timer stopped after {elapsed}s without a course; session not recorded")
        self.reset()
        return draft


class Timeframe(str, enum.Enum):
    WEEK = "week"
    MONTH = "month"
    SEMESTER = "semester"
    ALL = "all"


def timeframe_start(timeframe: Timeframe, today: date, semester_start: Optional[date] = None) -> Optional[datetime]:
    if timeframe == Timeframe.WEEK:
        return datetime.combine(week_start_monday(today), time.min)
    if timeframe == Timeframe.MONTH:
        return datetime.combine(today.replace(day=1), time.min)
    if timeframe == Timeframe.SEMESTER:
        return datetime.combine(semester_start or date.min, time.min)
    return None


@dataclass
class FocusStats:
    total_seconds: int = 0
    by_type: List[Tuple[str, int]] = field(default_factory=list)
    top_events: List[Tuple[str, int]] = field(default_factory=list)

    @property
    def total_display(self) -> str:
        return format_duration(self.total_seconds)


def focus_statistics(
    course_id: str,
    sessions: Sequence[FocusSessionRecord],
    events: Sequence[EventRecord],
    timeframe: Timeframe = Timeframe.WEEK,
    today: Optional[date] = None,
    semester_start: Optional[date] = None,
) -> FocusStats:
    start = timeframe_start(timeframe, today or date.today(), semester_start)
    events_by_id = {e.id: e for e in events}

    selected = [
        s for s in sessions
        if s.course_id == course_id and (start is None or s.created_at.replace(tzinfo=None) >= start)
    ]

    by_type: Dict[str, int] = defaultdict(int)
    by_event: Dict[str, int] = defaultdict(int)
    for session in selected:
        event = events_by_id.get(session.event_id) if session.event_id else None
        by_type[event.type if event else UNSPECIFIED_TYPE] += session.duration
        if session.event_id:
            by_event[session.event_id] += session.duration

    return FocusStats(
        total_seconds=sum(s.duration for s in selected),
        by_type=sorted(by_type.items(), key=lambda kv: kv[1], reverse=True),
        top_events=sorted(by_event.items(), key=lambda kv: kv[1], reverse=True)[:TOP_EVENTS],
    )
