from sqlalchemy import (
    String, DateTime, Text, ForeignKey, Date, Integer, Boolean, JSON, Index
)
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func
from datetime import datetime, date
from typing import Optional, List, Dict, Any
import uuid as uuid_pkg

from .database import Base

ID_LENGTH = 32

# Event has a column named `date`; annotate it through an alias
Day = date


def _new_id() -> str:
    return uuid_pkg.uuid4().hex


class User(Base):
    """Represents a user of the StudyLog application."""
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(ID_LENGTH), primary_key=True, default=_new_id)
    username: Mapped[str] = mapped_column(String(150), unique=True, nullable=False)
    hashed_password: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())


class Semester(Base):
    """A teaching period with optional breaks (stored as a JSON list of intervals)."""
    __tablename__ = "semesters"

    id: Mapped[str] = mapped_column(String(ID_LENGTH), primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(String(ID_LENGTH), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    breaks: Mapped[List[Dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)


class Course(Base):
    """A course the user follows; optionally bound to a semester."""
    __tablename__ = "courses"

    id: Mapped[str] = mapped_column(String(ID_LENGTH), primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(String(ID_LENGTH), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    code: Mapped[str] = mapped_column(Text, nullable=False, default="")
    color: Mapped[str] = mapped_column(String(32), nullable=False, default="blue")
    semester_id: Mapped[Optional[str]] = mapped_column(
        String(ID_LENGTH),
        ForeignKey("semesters.id", ondelete="SET NULL"),
        nullable=True
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())


class Event(Base):
    """A dated course event (lecture, homework, exam, ...), possibly part of a series."""
    __tablename__ = "events"
    __table_args__ = (
        Index("ix_events_user_course", "user_id", "course_id"),
        Index("ix_events_recurrence", "recurrence_id"),
    )

    id: Mapped[str] = mapped_column(String(ID_LENGTH), primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(String(ID_LENGTH), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    course_id: Mapped[str] = mapped_column(String(ID_LENGTH), ForeignKey("courses.id", ondelete="CASCADE"), nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[str] = mapped_column(String(64), nullable=False, default="lecture")
    date: Mapped[Day] = mapped_column(Date, nullable=False)
    is_completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    score: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    recurrence_id: Mapped[Optional[str]] = mapped_column(String(ID_LENGTH), nullable=True)


class UserSettings(Base):
    """Per-user display and calendar preferences."""
    __tablename__ = "user_settings"

    id: Mapped[str] = mapped_column(String(ID_LENGTH), primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(
        String(ID_LENGTH), ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    workdays: Mapped[List[int]] = mapped_column(JSON, nullable=False)
    grade_colors: Mapped[List[Dict[str, Any]]] = mapped_column(JSON, nullable=False)
    undefined_color: Mapped[str] = mapped_column(String(32), nullable=False)
    event_types: Mapped[List[str]] = mapped_column(JSON, nullable=False)
    active_semester_id: Mapped[Optional[str]] = mapped_column(String(ID_LENGTH), nullable=True)


class FocusSession(Base):
    """Time spent in the focus timer on a course (and optionally one event)."""
    __tablename__ = "focus_sessions"

    id: Mapped[str] = mapped_column(String(ID_LENGTH), primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(String(ID_LENGTH), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    course_id: Mapped[str] = mapped_column(String(ID_LENGTH), ForeignKey("courses.id", ondelete="CASCADE"), nullable=False)
    event_id: Mapped[Optional[str]] = mapped_column(
        String(ID_LENGTH), ForeignKey("events.id", ondelete="SET NULL"), nullable=True
    )
    duration: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class Tracker(Base):
    """A progress counter attached to an event."""
    __tablename__ = "trackers"

    id: Mapped[str] = mapped_column(String(ID_LENGTH), primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(String(ID_LENGTH), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    event_id: Mapped[str] = mapped_column(String(ID_LENGTH), ForeignKey("events.id", ondelete="CASCADE"), nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    value: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    max_value: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
