from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import Optional, List, Dict, Tuple
from datetime import datetime, date

from study_server.planning.models import (
    BreakPeriod,
    CourseRecord,
    EventRecord,
    FocusSessionRecord,
    GradeColor,
    LocalDay,
    SemesterRecord,
    TrackerRecord,
    UserSettings,
)
from study_server.planning.recurrence import RecurrencePattern, pattern_from_days

# Base schemas
class BaseSchema(BaseModel):
    """Base schema for all Pydantic models to inherit from."""
    model_config = ConfigDict(from_attributes=True)

# Auth schemas
class Token(BaseSchema):
    """Schema for an authentication token."""
    access_token: str
    token_type: str = "bearer"

class UserCreate(BaseSchema):
    """Schema for registering a new user."""
    username: str = Field(min_length=3, max_length=150)
    password: str = Field(min_length=8, max_length=72)

class User(BaseSchema):
    """Schema for a user as returned by the API."""
    id: str
    username: str

# Course schemas
class CourseCreate(BaseSchema):
    title: str = Field(min_length=1)
    code: str = ""
    color: str = "blue"
    semester_id: Optional[str] = None

class CourseUpdate(BaseSchema):
    title: Optional[str] = Field(default=None, min_length=1)
    code: Optional[str] = None
    color: Optional[str] = None
    semester_id: Optional[str] = None

class CourseOrder(BaseSchema):
    """Course ids in their new display order."""
    course_ids: List[str]

Course = CourseRecord

# Event schemas
class Event(EventRecord):
    """Schema for an event as returned by the API, with its title resolved for display."""
    display_title: str

class RecurrenceRequest(BaseSchema):
    """
    Recurrence up to `end_date` (inclusive). Without `days` the series repeats weekly on
    the weekday of the first occurrence; `days` maps weekday (0=Sunday) to repeat count.
    """
    end_date: LocalDay
    days: Optional[Dict[int, int]] = None

    def pattern(self) -> RecurrencePattern:
        return pattern_from_days(self.days)

class SeriesCreate(RecurrenceRequest):
    course_id: str
    title: str = Field(min_length=1)
    type: str = "lecture"
    date: LocalDay
    score: Optional[int] = Field(default=None, ge=0, le=100)

# Semester schemas
class SemesterCreate(BaseSchema):
    name: str = Field(min_length=1)
    start_date: LocalDay
    end_date: LocalDay
    breaks: List[BreakPeriod] = Field(default_factory=list)

class SemesterUpdate(BaseSchema):
    name: Optional[str] = Field(default=None, min_length=1)
    start_date: Optional[LocalDay] = None
    end_date: Optional[LocalDay] = None
    breaks: Optional[List[BreakPeriod]] = None

Semester = SemesterRecord

class SemesterUpdateResult(BaseSchema):
    semester: SemesterRecord
    deleted_event_ids: List[str]
    retitled_event_ids: List[str]

# Settings schemas
Settings = UserSettings

class SettingsUpdate(BaseSchema):
    workdays: Optional[List[int]] = None
    grade_colors: Optional[List[GradeColor]] = None
    undefined_color: Optional[str] = None
    event_types: Optional[List[str]] = None
    active_semester_id: Optional[str] = None

    @field_validator("event_types")
    @classmethod
    def event_types_not_empty(cls, v):
        if v is not None and not v:
            raise ValueError("at least one event type is required")
        return v

# Matrix schemas
class MatrixCell(BaseSchema):
    event_id: str
    title: str
    score: Optional[int] = None
    color: str

class MatrixRow(BaseSchema):
    date: date
    is_weekend: bool
    cells: Dict[str, Optional[MatrixCell]]

# Focus schemas
class FocusSessionCreate(BaseSchema):
    course_id: str
    event_id: Optional[str] = None
    duration: int = Field(ge=1, description="Focused time in seconds.")
    created_at: Optional[datetime] = None

FocusSession = FocusSessionRecord

class FocusStats(BaseSchema):
    course_id: str
    timeframe: str
    total_seconds: int
    total_display: str
    by_type: List[Tuple[str, int]]
    top_events: List[Tuple[str, int]]

# Tracker schemas
class TrackerCreate(BaseSchema):
    event_id: str
    title: str = Field(min_length=1)
    max_value: int = Field(default=1, ge=1)

class TrackerUpdate(BaseSchema):
    title: Optional[str] = Field(default=None, min_length=1)
    value: Optional[int] = Field(default=None, ge=0)
    max_value: Optional[int] = Field(default=None, ge=1)

Tracker = TrackerRecord

# System schemas
class SystemStatus(BaseSchema):
    """Schema for the system status response."""
    status: str
    version: str
    database_connected: bool
