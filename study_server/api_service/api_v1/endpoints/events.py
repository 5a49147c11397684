from typing import List, Optional
from fastapi import APIRouter, HTTPException, Query, status

from study_server.api_service import schemas
from study_server.api_service.api_v1.deps import RepoDep
from study_server.planning.matrix import build_events_matrix
from study_server.planning.models import EventChanges, EventDraft, EventRecord
from study_server.planning.series import UpdateMode
from study_server.store.repository import StudyRepository

router = APIRouter()

def to_schema(repo: StudyRepository, event: EventRecord) -> schemas.Event:
    return schemas.Event(**event.model_dump(), display_title=repo.display_title(event))

@router.get("", response_model=List[schemas.Event])
async def read_events(
    repo: RepoDep,
    course_id: Optional[str] = Query(None, description="Only events of this course."),
):
    if course_id is not None:
        repo.state.get_course(course_id)
    return [to_schema(repo, e) for e in repo.events_for_course(course_id)]

@router.get("/matrix", response_model=List[schemas.MatrixRow])
async def read_events_matrix(repo: RepoDep):
    """Day-by-course grid of events coloured by score."""
    rows = build_events_matrix(repo.state.courses, repo.state.events, repo.state.settings)
    return [
        schemas.MatrixRow(
            date=row.day,
            is_weekend=row.is_weekend,
            cells={
                course_id: schemas.MatrixCell.model_validate(cell) if cell else None
                for course_id, cell in row.cells.items()
            },
        )
        for row in rows
    ]

@router.post("", response_model=schemas.Event, status_code=status.HTTP_201_CREATED)
async def create_event(event_in: EventDraft, repo: RepoDep):
    event = await repo.add_event(event_in)
    return to_schema(repo, event)

@router.post("/series", response_model=List[schemas.Event], status_code=status.HTTP_201_CREATED)
async def create_event_series(series_in: schemas.SeriesCreate, repo: RepoDep):
    """Generate a recurring series; days inside the course's semester breaks are skipped."""
    template = EventDraft(
        course_id=series_in.course_id,
        title=series_in.title,
        type=series_in.type,
        date=series_in.date,
        score=series_in.score,
    )
    events = await repo.add_series(template, series_in.end_date, series_in.pattern())
    return [to_schema(repo, e) for e in events]

@router.get("/{event_id}", response_model=schemas.Event)
async def read_event(event_id: str, repo: RepoDep):
    return to_schema(repo, repo.state.get_event(event_id))

@router.patch("/{event_id}", response_model=List[schemas.Event])
async def update_event(
    event_id: str,
    changes: EventChanges,
    repo: RepoDep,
    mode: UpdateMode = Query(UpdateMode.SINGLE, description="'single' detaches the event from its series; 'all' updates every member."),
):
    """Update an event, or its whole series. Returns every event that changed."""
    success = await repo.update_series_member(event_id, changes, mode)
    if not success:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Failed to persist changes"
        )
    target = repo.state.get_event(event_id)
    if mode == UpdateMode.ALL and target.recurrence_id:
        changed = repo.state.series_members(target.recurrence_id)
    else:
        changed = [target]
    return [to_schema(repo, e) for e in changed]

@router.post("/{event_id}/recurrences", response_model=List[schemas.Event], status_code=status.HTTP_201_CREATED)
async def extend_event_series(event_id: str, recurrence: schemas.RecurrenceRequest, repo: RepoDep):
    """Add occurrences to the event's series; days the series already covers are skipped."""
    events = await repo.extend_series(event_id, recurrence.end_date, recurrence.pattern())
    return [to_schema(repo, e) for e in events]

@router.post("/{event_id}/duplicate", response_model=schemas.Event, status_code=status.HTTP_201_CREATED)
async def duplicate_event(event_id: str, repo: RepoDep):
    return to_schema(repo, await repo.duplicate_event(event_id))

@router.post("/{event_id}/toggle", response_model=schemas.Event)
async def toggle_event_completion(event_id: str, repo: RepoDep):
    return to_schema(repo, await repo.toggle_event_completion(event_id))

@router.delete("/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_event(event_id: str, repo: RepoDep):
    await repo.delete_event(event_id)
    return None
