# study_server/store/record_store.py
"""
Record store used by the repository.

Records are plain dicts keyed by column name. Every store is bound to one user
id: created records are stamped with it and queries only ever see that user's
rows. Each call is its own transaction; a failed call is rolled back and
surfaces as StoreError.
"""

import logging
from typing import Any, Dict, List, Optional, Protocol, Sequence, Type

from pydantic_core import to_jsonable_python
from sqlalchemy import JSON, delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from study_server.api_service.core import models
from study_server.api_service.core.database import Base
from study_server.planning.models import RecordNotFoundError, new_id

log = logging.getLogger(__name__)

COURSES = "courses"
EVENTS = "events"
SEMESTERS = "semesters"
SETTINGS = "user_settings"
FOCUS_SESSIONS = "focus_sessions"
TRACKERS = "trackers"

TABLES: Dict[str, Type[Base]] = {
    COURSES: models.Course,
    EVENTS: models.Event,
    SEMESTERS: models.Semester,
    SETTINGS: models.UserSettings,
    FOCUS_SESSIONS: models.FocusSession,
    TRACKERS: models.Tracker,
}

Record = Dict[str, Any]


class StoreError(Exception):
    """A create/update/delete/query call was rejected by the backing database."""

    def __init__(self, table: str, operation: str, message: str = ""):
        super().__init__(f"{operation} on {table} failed{': ' + message if message else ''}")
        self.table = table
        self.operation = operation


class RecordStore(Protocol):
    async def create(self, table: str, record: Record) -> Record: ...

    async def create_many(self, table: str, records: Sequence[Record]) -> List[Record]: ...

    async def update(self, table: str, record_id: str, fields: Record) -> None: ...

    async def upsert_many(self, table: str, records: Sequence[Record]) -> None: ...

    async def delete(self, table: str, record_id: str) -> None: ...

    async def query(self, table: str, filters: Optional[Record] = None) -> List[Record]: ...


class SqlRecordStore:
    """RecordStore over an async SQLAlchemy session."""

    def __init__(self, session: AsyncSession, user_id: str):
        self.session = session
        self.user_id = user_id

    def _model(self, table: str) -> Type[Base]:
        try:
            return TABLES[table]
        except KeyError:
            raise ValueError(f"Unknown table: {table}") from None

    def _prepare(self, model: Type[Base], record: Record) -> Record:
        columns = model.__table__.columns
        values: Record = {}
        for key, value in record.items():
            if key not in columns or key == "user_id":
                continue
            if value is None and not columns[key].nullable:
                continue
            if isinstance(columns[key].type, JSON):
                value = to_jsonable_python(value)
            values[key] = value
        return values

    def _to_record(self, obj: Base) -> Record:
        return {
            column.key: getattr(obj, column.key)
            for column in obj.__table__.columns
            if column.key != "user_id"
        }

    async def _fail(self, table: str, operation: str, error: SQLAlchemyError) -> None:
        await self.session.rollback()
        log.error(f"Store {operation} on '{table}' failed: {error}")
        raise StoreError(table, operation, str(error)) from error

    async def create(self, table: str, record: Record) -> Record:
        created = await self.create_many(table, [record])
        return created[0]

    async def create_many(self, table: str, records: Sequence[Record]) -> List[Record]:
        model = self._model(table)
        objects = []
        for record in records:
            values = self._prepare(model, record)
            values.setdefault("id", new_id())
            objects.append(model(user_id=self.user_id, **values))
        try:
            self.session.add_all(objects)
            await self.session.commit()
            for obj in objects:
                await self.session.refresh(obj)
        except SQLAlchemyError as e:
            await self._fail(table, "create", e)
        return [self._to_record(obj) for obj in objects]

    async def update(self, table: str, record_id: str, fields: Record) -> None:
        model = self._model(table)
        values = self._prepare(model, fields)
        values.pop("id", None)
        try:
            result = await self.session.execute(
                update(model)
                .where(model.id == record_id, model.user_id == self.user_id)
                .values(**values)
            )
            if result.rowcount == 0:
                await self.session.rollback()
                raise RecordNotFoundError(table, record_id)
            await self.session.commit()
        except SQLAlchemyError as e:
            await self._fail(table, "update", e)

    async def upsert_many(self, table: str, records: Sequence[Record]) -> None:
        """Writes the whole batch in one transaction; nothing is kept if any row fails."""
        model = self._model(table)
        try:
            for record in records:
                values = self._prepare(model, record)
                await self.session.merge(model(user_id=self.user_id, **values))
            await self.session.commit()
        except SQLAlchemyError as e:
            await self._fail(table, "upsert", e)

    async def delete(self, table: str, record_id: str) -> None:
        model = self._model(table)
        try:
            result = await self.session.execute(
                delete(model).where(model.id == record_id, model.user_id == self.user_id)
            )
            if result.rowcount == 0:
                await self.session.rollback()
                raise RecordNotFoundError(table, record_id)
            await self.session.commit()
        except SQLAlchemyError as e:
            await self._fail(table, "delete", e)

    async def query(self, table: str, filters: Optional[Record] = None) -> List[Record]:
        model = self._model(table)
        stmt = select(model).where(model.user_id == self.user_id)
        for key, value in (filters or {}).items():
            stmt = stmt.where(getattr(model, key) == value)
        try:
            result = await self.session.execute(stmt)
        except SQLAlchemyError as e:
            await self._fail(table, "query", e)
        return [self._to_record(obj) for obj in result.scalars().all()]
