from datetime import datetime
from typing import List, Optional
from fastapi import APIRouter, Query, status

from study_server.api_service import schemas
from study_server.api_service.api_v1.deps import RepoDep
from study_server.planning.focus import Timeframe
from study_server.planning.models import FocusSessionDraft

router = APIRouter()

@router.get("/sessions", response_model=List[schemas.FocusSession])
async def get_focus_sessions(
    repo: RepoDep,
    course_id: Optional[str] = Query(None, description="Only sessions of this course."),
):
    sessions = repo.state.focus_sessions
    if course_id is not None:
        sessions = [s for s in sessions if s.course_id == course_id]
    return sorted(sessions, key=lambda s: s.created_at, reverse=True)

@router.post("/sessions", response_model=schemas.FocusSession, status_code=status.HTTP_201_CREATED)
async def create_focus_session(session_in: schemas.FocusSessionCreate, repo: RepoDep):
    """Record a finished or stopped focus timer run."""
    draft = FocusSessionDraft(
        course_id=session_in.course_id,
        event_id=session_in.event_id,
        duration=session_in.duration,
        created_at=session_in.created_at or datetime.now(),
    )
    return await repo.add_focus_session(draft)

@router.delete("/sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_focus_session(session_id: str, repo: RepoDep):
    await repo.delete_focus_session(session_id)
    return None

@router.get("/stats/{course_id}", response_model=schemas.FocusStats)
async def get_focus_stats(
    course_id: str,
    repo: RepoDep,
    timeframe: Timeframe = Query(Timeframe.WEEK),
):
    stats = repo.focus_stats(course_id, timeframe)
    return schemas.FocusStats(
        course_id=course_id,
        timeframe=timeframe.value,
        total_seconds=stats.total_seconds,
        total_display=stats.total_display,
        by_type=stats.by_type,
        top_events=stats.top_events,
    )
