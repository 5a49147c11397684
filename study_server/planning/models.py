# study_server/planning/models.py

import uuid
from datetime import date, datetime
from typing import Annotated, List, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator

from study_server.shared.utils import to_local_day

# Calendar day accepted as a date, ISO string or epoch-milliseconds.
LocalDay = Annotated[date, BeforeValidator(to_local_day)]

DEFAULT_WORKDAYS: List[int] = [1, 2, 3, 4, 5]
DEFAULT_EVENT_TYPES: List[str] = ["lecture", "homework", "exam", "lab", "other"]
DEFAULT_UNDEFINED_COLOR = "#6b7280"


class RecordNotFoundError(LookupError):
    """Raised when a record id is not present in the user's data."""

    def __init__(self, table: str, record_id: str):
        super().__init__(f"{table} record {record_id!r} not found")
        self.table = table
        self.record_id = record_id


def new_id() -> str:
    return uuid.uuid4().hex


class RecordModel(BaseModel):
    """Base for all records exchanged between the store, the planners and the API."""
    model_config = ConfigDict(from_attributes=True)


class BreakPeriod(RecordModel):
    """A closed interval of days without teaching."""
    id: str = Field(default_factory=new_id)
    start_date: LocalDay
    end_date: LocalDay

    def contains(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date


class GradeColor(RecordModel):
    min: float
    color: str


def _default_grade_colors() -> List[GradeColor]:
    return [
        GradeColor(min=0, color="#ef4444"),
        GradeColor(min=50, color="#eab308"),
        GradeColor(min=100, color="#22c55e"),
    ]


class CourseRecord(RecordModel):
    id: str
    title: str
    code: str = ""
    color: str = "blue"
    semester_id: Optional[str] = None
    position: int = 0
    created_at: Optional[datetime] = None


class SemesterRecord(RecordModel):
    id: str
    name: str
    start_date: LocalDay
    end_date: LocalDay
    breaks: List[BreakPeriod] = Field(default_factory=list)


class EventDraft(RecordModel):
    """An event that has not been stored yet."""
    course_id: str
    title: str
    type: str = "lecture"
    date: LocalDay
    score: Optional[int] = Field(default=None, ge=0, le=100)

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("title is required")
        return v


class EventRecord(RecordModel):
    id: str
    course_id: str
    title: str
    type: str = "lecture"
    date: LocalDay
    is_completed: bool = False
    score: Optional[int] = Field(default=None, ge=0, le=100)
    recurrence_id: Optional[str] = None


class EventChanges(RecordModel):
    """
    Partial update of an event. Only fields that were explicitly set apply, so
    `EventChanges(score=None)` clears a score while `EventChanges()` leaves it alone.
    """
    course_id: Optional[str] = None
    title: Optional[str] = None
    type: Optional[str] = None
    date: Optional[LocalDay] = None
    is_completed: Optional[bool] = None
    score: Optional[int] = Field(default=None, ge=0, le=100)

    def explicit(self) -> dict:
        # score is the only field that may be cleared
        return {
            k: v for k, v in self.model_dump(exclude_unset=True).items()
            if v is not None or k == "score"
        }


class UserSettings(RecordModel):
    id: Optional[str] = None
    workdays: List[int] = Field(default_factory=lambda: list(DEFAULT_WORKDAYS))
    grade_colors: List[GradeColor] = Field(default_factory=_default_grade_colors)
    undefined_color: str = DEFAULT_UNDEFINED_COLOR
    event_types: List[str] = Field(default_factory=lambda: list(DEFAULT_EVENT_TYPES))
    active_semester_id: Optional[str] = None

    @field_validator("workdays")
    @classmethod
    def check_workdays(cls, v: List[int]) -> List[int]:
        for day in v:
            if not 0 <= day <= 6:
                raise ValueError(f"workday index out of range: {day}")
        return sorted(set(v))


class FocusSessionDraft(RecordModel):
    course_id: str
    event_id: Optional[str] = None
    duration: int = Field(ge=0, description="Focused time in seconds.")
    created_at: datetime = Field(default_factory=datetime.now)


class FocusSessionRecord(FocusSessionDraft):
    id: str


class TrackerRecord(RecordModel):
    id: str
    event_id: str
    title: str
    value: int = 0
    max_value: int = 1


class StudyState(BaseModel):
    """Snapshot of one user's data. Replaced wholesale, never mutated in place."""
    user_id: str
    courses: List[CourseRecord] = Field(default_factory=list)
    events: List[EventRecord] = Field(default_factory=list)
    semesters: List[SemesterRecord] = Field(default_factory=list)
    settings: UserSettings = Field(default_factory=UserSettings)
    focus_sessions: List[FocusSessionRecord] = Field(default_factory=list)
    trackers: List[TrackerRecord] = Field(default_factory=list)

    def get_event(self, event_id: str) -> EventRecord:
        for event in self.events:
            if event.id == event_id:
                return event
        raise RecordNotFoundError("events", event_id)

    def get_course(self, course_id: str) -> CourseRecord:
        for course in self.courses:
            if course.id == course_id:
                return course
        raise RecordNotFoundError("courses", course_id)

    def get_semester(self, semester_id: str) -> SemesterRecord:
        for semester in self.semesters:
            if semester.id == semester_id:
                return semester
        raise RecordNotFoundError("semesters", semester_id)

    def series_members(self, recurrence_id: Optional[str]) -> List[EventRecord]:
        if not recurrence_id:
            return []
        members = [e for e in self.events if e.recurrence_id == recurrence_id]
        return sorted(members, key=lambda e: e.date)

    def semester_for_course(self, course_id: str) -> Optional[SemesterRecord]:
        course = next((c for c in self.courses if c.id == course_id), None)
        if course is None or not course.semester_id:
            return None
        return next((s for s in self.semesters if s.id == course.semester_id), None)
