# study_server/store/repository.py
"""
Repository over a RecordStore with an in-memory snapshot of the user's data.

Every mutation follows the same steps: a pure planner from `study_server.planning`
computes the desired records, the store persists them, and only after the store
confirms is the snapshot replaced. A failed store call leaves `state` exactly as
it was.
"""

import logging
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from study_server.planning.event_types import ensure_event_type, remove_event_type
from study_server.planning.focus import FocusStats, Timeframe, focus_statistics
from study_server.planning.models import (
    CourseRecord,
    EventChanges,
    EventDraft,
    EventRecord,
    FocusSessionDraft,
    FocusSessionRecord,
    RecordNotFoundError,
    SemesterRecord,
    StudyState,
    TrackerRecord,
    UserSettings,
    new_id,
)
from study_server.planning.recurrence import (
    RecurrencePattern,
    build_series,
    generate_recurrence_dates,
    plan_series_extension,
)
from study_server.planning.semester_cascade import (
    CascadePlan,
    plan_semester_change,
    semester_schedule_changed,
)
from study_server.planning.series import UpdateMode, plan_series_update
from study_server.planning.title_format import format_event_title
from study_server.store.record_store import (
    COURSES,
    EVENTS,
    FOCUS_SESSIONS,
    SEMESTERS,
    SETTINGS,
    TRACKERS,
    RecordStore,
    StoreError,
)

log = logging.getLogger(__name__)

COPY_SUFFIX = " (Copy)"


def _replace(records: Sequence[Any], updated: Iterable[Any]) -> List[Any]:
    by_id = {r.id: r for r in updated}
    return [by_id.get(r.id, r) for r in records]


def _without(records: Sequence[Any], ids: Iterable[str]) -> List[Any]:
    drop = set(ids)
    return [r for r in records if r.id not in drop]


def _find(records: Sequence[Any], table: str, record_id: str) -> Any:
    for record in records:
        if record.id == record_id:
            return record
    raise RecordNotFoundError(table, record_id)


class StudyRepository:
    def __init__(self, store: RecordStore, state: StudyState):
        self.store = store
        self.state = state

    @classmethod
    async def load(cls, store: RecordStore, user_id: str) -> "StudyRepository":
        """Builds the snapshot for `user_id` from the store."""
        courses = [CourseRecord.model_validate(r) for r in await store.query(COURSES)]
        events = [EventRecord.model_validate(r) for r in await store.query(EVENTS)]
        semesters = [SemesterRecord.model_validate(r) for r in await store.query(SEMESTERS)]
        settings_rows = await store.query(SETTINGS)
        sessions = [FocusSessionRecord.model_validate(r) for r in await store.query(FOCUS_SESSIONS)]
        trackers = [TrackerRecord.model_validate(r) for r in await store.query(TRACKERS)]

        state = StudyState(
            user_id=user_id,
            courses=sorted(courses, key=lambda c: c.position),
            events=sorted(events, key=lambda e: e.date),
            semesters=semesters,
            settings=UserSettings.model_validate(settings_rows[0]) if settings_rows else UserSettings(),
            focus_sessions=sessions,
            trackers=trackers,
        )
        return cls(store, state)

    def _commit(self, **changes: Any) -> None:
        self.state = self.state.model_copy(update=changes)

    # --- Read helpers ---

    def events_for_course(self, course_id: Optional[str] = None) -> List[EventRecord]:
        if course_id is None:
            return list(self.state.events)
        return [e for e in self.state.events if e.course_id == course_id]

    def display_title(self, event: EventRecord) -> str:
        """Title with `{week}`/`{weekly_index}` resolved against the current snapshot."""
        semester = self.state.semester_for_course(event.course_id)
        return format_event_title(
            event.title,
            event,
            self.state.events,
            semester.start_date if semester else None,
            semester.breaks if semester else None,
            self.state.settings.workdays,
        )

    def focus_stats(self, course_id: str, timeframe: Timeframe, today: Optional[date] = None) -> FocusStats:
        self.state.get_course(course_id)
        semester = self.state.semester_for_course(course_id)
        return focus_statistics(
            course_id,
            self.state.focus_sessions,
            self.state.events,
            timeframe,
            today=today,
            semester_start=semester.start_date if semester else None,
        )

    def _breaks_for_course(self, course_id: str):
        semester = self.state.semester_for_course(course_id)
        return semester.breaks if semester else []

    # --- Settings ---

    async def _save_settings(self, settings: UserSettings) -> UserSettings:
        fields = settings.model_dump(exclude={"id"})
        if settings.id is None:
            created = await self.store.create(SETTINGS, fields)
            settings = settings.model_copy(update={"id": created["id"]})
        else:
            await self.store.update(SETTINGS, settings.id, fields)
        self._commit(settings=settings)
        return settings

    async def update_settings(self, changes: Dict[str, Any]) -> UserSettings:
        merged = {**self.state.settings.model_dump(), **changes, "id": self.state.settings.id}
        return await self._save_settings(UserSettings.model_validate(merged))

    async def ensure_event_type(self, event_type: str) -> None:
        updated = ensure_event_type(self.state.settings, event_type)
        if updated is not None:
            log.info(f"Adding new event type '{event_type}' to settings")
            await self._save_settings(updated)

    async def remove_event_type(self, event_type: str) -> UserSettings:
        return await self._save_settings(remove_event_type(self.state.settings, event_type))

    # --- Courses ---

    async def add_course(self, title: str, code: str = "", color: str = "blue",
                         semester_id: Optional[str] = None) -> CourseRecord:
        if semester_id:
            self.state.get_semester(semester_id)
        position = max((c.position for c in self.state.courses), default=-1) + 1
        record = await self.store.create(COURSES, {
            "title": title,
            "code": code,
            "color": color,
            "semester_id": semester_id,
            "position": position,
        })
        course = CourseRecord.model_validate(record)
        self._commit(courses=[*self.state.courses, course])
        return course

    async def update_course(self, course_id: str, changes: Dict[str, Any]) -> CourseRecord:
        course = self.state.get_course(course_id)
        if changes.get("semester_id"):
            self.state.get_semester(changes["semester_id"])
        updated = CourseRecord.model_validate({**course.model_dump(), **changes, "id": course.id})
        await self.store.update(COURSES, course_id, updated.model_dump(exclude={"id", "created_at"}))
        self._commit(courses=_replace(self.state.courses, [updated]))
        return updated

    async def delete_course(self, course_id: str) -> None:
        """Deletes the course together with its events, their trackers and its focus sessions."""
        self.state.get_course(course_id)
        for event in self.events_for_course(course_id):
            await self.delete_event(event.id)
        for session in [s for s in self.state.focus_sessions if s.course_id == course_id]:
            await self.delete_focus_session(session.id)
        await self.store.delete(COURSES, course_id)
        self._commit(courses=_without(self.state.courses, [course_id]))

    async def reorder_courses(self, ordered_ids: Sequence[str]) -> List[CourseRecord]:
        current = {c.id for c in self.state.courses}
        if set(ordered_ids) != current or len(ordered_ids) != len(current):
            raise ValueError("reorder must list every course exactly once")
        reordered = [
            self.state.get_course(course_id).model_copy(update={"position": index})
            for index, course_id in enumerate(ordered_ids)
        ]
        await self.store.upsert_many(COURSES, [c.model_dump() for c in reordered])
        self._commit(courses=reordered)
        return reordered

    # --- Events ---

    async def add_event(self, draft: EventDraft) -> EventRecord:
        self.state.get_course(draft.course_id)
        await self.ensure_event_type(draft.type)
        record = await self.store.create(EVENTS, {
            **draft.model_dump(),
            "id": new_id(),
            "is_completed": False,
            "recurrence_id": None,
        })
        event = EventRecord.model_validate(record)
        self._commit(events=[*self.state.events, event])
        return event

    async def add_series(self, template: EventDraft, end: date, pattern: RecurrencePattern) -> List[EventRecord]:
        """Generates and stores a new series; returns the created events (possibly none)."""
        self.state.get_course(template.course_id)
        dates = generate_recurrence_dates(template.date, end, pattern, self._breaks_for_course(template.course_id))
        if not dates:
            log.info(f"No occurrences between {template.date} and {end}; nothing created")
            return []

        await self.ensure_event_type(template.type)
        planned = build_series(template, dates)
        created = await self.store.create_many(EVENTS, [e.model_dump() for e in planned])
        events = [EventRecord.model_validate(r) for r in created]
        log.info(f"Created series {planned[0].recurrence_id} with {len(events)} events")
        self._commit(events=[*self.state.events, *events])
        return events

    async def update_series_member(self, event_id: str, changes: EventChanges, mode: UpdateMode) -> bool:
        """
        Applies `changes` to one event or its whole series. Returns False when the
        store rejects the batch; the snapshot is then left untouched.
        """
        updated = plan_series_update(self.state.events, event_id, changes, mode)
        explicit = changes.explicit()
        if explicit.get("course_id"):
            self.state.get_course(explicit["course_id"])
        try:
            if explicit.get("type"):
                await self.ensure_event_type(explicit["type"])
            await self.store.upsert_many(EVENTS, [e.model_dump() for e in updated])
        except StoreError as e:
            log.error(f"Failed to update event {event_id} ({mode.value}): {e}")
            return False
        self._commit(events=_replace(self.state.events, updated))
        return True

    async def extend_series(self, event_id: str, end: date, pattern: RecurrencePattern) -> List[EventRecord]:
        """
        Adds occurrences to the event's series up to `end`, skipping days the
        series already covers. A standalone event becomes the first member of a
        new series.
        """
        anchor = self.state.get_event(event_id)
        members = self.state.series_members(anchor.recurrence_id)
        if not anchor.recurrence_id:
            anchor = anchor.model_copy(update={"recurrence_id": new_id()})

        planned = plan_series_extension(anchor, members, end, pattern, self._breaks_for_course(anchor.course_id))
        if not planned:
            return []

        # a standalone anchor joins the series in the same batch as the new events
        batch = planned if members else [anchor, *planned]
        await self.store.upsert_many(EVENTS, [e.model_dump() for e in batch])
        current = self.state.events if members else _replace(self.state.events, [anchor])
        self._commit(events=[*current, *planned])
        return planned

    async def duplicate_event(self, event_id: str) -> EventRecord:
        source = self.state.get_event(event_id)
        return await self.add_event(EventDraft(
            course_id=source.course_id,
            title=source.title + COPY_SUFFIX,
            type=source.type,
            date=source.date,
            score=source.score,
        ))

    async def toggle_event_completion(self, event_id: str) -> EventRecord:
        event = self.state.get_event(event_id)
        toggled = event.model_copy(update={"is_completed": not event.is_completed})
        await self.store.update(EVENTS, event_id, {"is_completed": toggled.is_completed})
        self._commit(events=_replace(self.state.events, [toggled]))
        return toggled

    async def delete_event(self, event_id: str) -> None:
        self.state.get_event(event_id)
        for tracker in [t for t in self.state.trackers if t.event_id == event_id]:
            await self.delete_tracker(tracker.id)
        await self.store.delete(EVENTS, event_id)
        self._commit(events=_without(self.state.events, [event_id]))

    # --- Semesters ---

    async def add_semester(self, semester: SemesterRecord) -> SemesterRecord:
        if semester.end_date < semester.start_date:
            raise ValueError("semester end date is before its start date")
        record = await self.store.create(SEMESTERS, semester.model_dump())
        created = SemesterRecord.model_validate(record)
        self._commit(semesters=[*self.state.semesters, created])
        return created

    async def update_semester(self, semester_id: str, changes: Dict[str, Any]) -> Tuple[SemesterRecord, CascadePlan]:
        """
        Saves the semester and, when its start day or breaks moved, deletes the
        events now inside a break and renumbers week literals in titles.
        """
        old = self.state.get_semester(semester_id)
        new = SemesterRecord.model_validate({**old.model_dump(), **changes, "id": old.id})
        if new.end_date < new.start_date:
            raise ValueError("semester end date is before its start date")

        await self.store.update(SEMESTERS, semester_id, new.model_dump(exclude={"id"}))
        self._commit(semesters=_replace(self.state.semesters, [new]))

        if not semester_schedule_changed(old, new):
            return new, CascadePlan()

        plan = plan_semester_change(old, new, self.state.courses, self.state.events, self.state.settings.workdays)
        for event_id in plan.deleted_ids:
            await self.delete_event(event_id)
        if plan.retitled:
            await self.store.upsert_many(EVENTS, [e.model_dump() for e in plan.retitled])
            self._commit(events=_replace(self.state.events, plan.retitled))
        return new, plan

    async def delete_semester(self, semester_id: str) -> None:
        """Deletes the semester; its courses stay and become semester-less."""
        self.state.get_semester(semester_id)
        unbound = [
            c.model_copy(update={"semester_id": None})
            for c in self.state.courses if c.semester_id == semester_id
        ]
        if unbound:
            await self.store.upsert_many(COURSES, [c.model_dump() for c in unbound])
            self._commit(courses=_replace(self.state.courses, unbound))
        if self.state.settings.active_semester_id == semester_id:
            await self.update_settings({"active_semester_id": None})
        await self.store.delete(SEMESTERS, semester_id)
        self._commit(semesters=_without(self.state.semesters, [semester_id]))

    # --- Focus sessions ---

    async def add_focus_session(self, draft: FocusSessionDraft) -> FocusSessionRecord:
        self.state.get_course(draft.course_id)
        if draft.event_id:
            self.state.get_event(draft.event_id)
        record = await self.store.create(FOCUS_SESSIONS, draft.model_dump())
        session = FocusSessionRecord.model_validate(record)
        self._commit(focus_sessions=[*self.state.focus_sessions, session])
        return session

    async def delete_focus_session(self, session_id: str) -> None:
        _find(self.state.focus_sessions, FOCUS_SESSIONS, session_id)
        await self.store.delete(FOCUS_SESSIONS, session_id)
        self._commit(focus_sessions=_without(self.state.focus_sessions, [session_id]))

    # --- Trackers ---

    async def add_tracker(self, event_id: str, title: str, max_value: int = 1) -> TrackerRecord:
        self.state.get_event(event_id)
        record = await self.store.create(TRACKERS, {
            "event_id": event_id,
            "title": title,
            "value": 0,
            "max_value": max_value,
        })
        tracker = TrackerRecord.model_validate(record)
        self._commit(trackers=[*self.state.trackers, tracker])
        return tracker

    async def update_tracker(self, tracker_id: str, changes: Dict[str, Any]) -> TrackerRecord:
        tracker = _find(self.state.trackers, TRACKERS, tracker_id)
        updated = TrackerRecord.model_validate({**tracker.model_dump(), **changes, "id": tracker.id})
        if not 0 <= updated.value <= updated.max_value:
            raise ValueError("tracker value must be between 0 and max_value")
        await self.store.update(TRACKERS, tracker_id, updated.model_dump(exclude={"id"}))
        self._commit(trackers=_replace(self.state.trackers, [updated]))
        return updated

    async def delete_tracker(self, tracker_id: str) -> None:
        _find(self.state.trackers, TRACKERS, tracker_id)
        await self.store.delete(TRACKERS, tracker_id)
        self._commit(trackers=_without(self.state.trackers, [tracker_id]))
