from typing import Annotated
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from study_server.api_service.auth import get_current_user
from study_server.api_service.core.database import get_db
from study_server.api_service.core.models import User
from study_server.store.record_store import SqlRecordStore
from study_server.store.repository import StudyRepository

async def get_repository(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> StudyRepository:
    """
    Dependency returning a repository loaded with the current user's data.
    Only the user id reaches the store; it scopes every read and write.
    """
    store = SqlRecordStore(db, current_user.id)
    return await StudyRepository.load(store, current_user.id)

RepoDep = Annotated[StudyRepository, Depends(get_repository)]
