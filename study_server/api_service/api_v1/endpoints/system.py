from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
import logging

from study_server.api_service.core.database import get_db
from study_server.api_service.core.settings import settings
from study_server.api_service import schemas

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("/status", response_model=schemas.SystemStatus)
async def get_system_status(db: AsyncSession = Depends(get_db)):
    """
    Get the current status of the system.
    Reports the service version and whether the database answers.
    """
    database_connected = True
    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"Database status check failed: {e}")
        database_connected = False
    return schemas.SystemStatus(
        status="ok" if database_connected else "degraded",
        version=settings.VERSION,
        database_connected=database_connected,
    )
