from typing import List
from fastapi import APIRouter, Query, status

from study_server.api_service import schemas
from study_server.api_service.api_v1.deps import RepoDep

router = APIRouter()

@router.get("", response_model=List[schemas.Tracker])
async def get_trackers(repo: RepoDep, event_id: str = Query(..., description="Event the trackers belong to.")):
    repo.state.get_event(event_id)
    return [t for t in repo.state.trackers if t.event_id == event_id]

@router.post("", response_model=schemas.Tracker, status_code=status.HTTP_201_CREATED)
async def create_tracker(tracker_in: schemas.TrackerCreate, repo: RepoDep):
    return await repo.add_tracker(tracker_in.event_id, tracker_in.title, tracker_in.max_value)

@router.patch("/{tracker_id}", response_model=schemas.Tracker)
async def update_tracker(tracker_id: str, tracker_update: schemas.TrackerUpdate, repo: RepoDep):
    return await repo.update_tracker(tracker_id, tracker_update.model_dump(exclude_unset=True))

@router.delete("/{tracker_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_tracker(tracker_id: str, repo: RepoDep):
    await repo.delete_tracker(tracker_id)
    return None
