from fastapi import APIRouter, status

from study_server.api_service import schemas
from study_server.api_service.api_v1.deps import RepoDep

router = APIRouter()

@router.get("", response_model=schemas.Settings)
async def read_settings(repo: RepoDep):
    """Current settings; defaults until the user saves any."""
    return repo.state.settings

@router.patch("", response_model=schemas.Settings)
async def update_settings(settings_update: schemas.SettingsUpdate, repo: RepoDep):
    changes = settings_update.model_dump(exclude_unset=True)
    if changes.get("active_semester_id"):
        repo.state.get_semester(changes["active_semester_id"])
    return await repo.update_settings(changes)

@router.post("/event-types/{event_type}", response_model=schemas.Settings, status_code=status.HTTP_201_CREATED)
async def add_event_type(event_type: str, repo: RepoDep):
    await repo.ensure_event_type(event_type)
    return repo.state.settings

@router.delete("/event-types/{event_type}", response_model=schemas.Settings)
async def delete_event_type(event_type: str, repo: RepoDep):
    return await repo.remove_event_type(event_type)
