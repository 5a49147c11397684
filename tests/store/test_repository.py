import pytest
from datetime import date

from study_server.planning.models import (
    BreakPeriod,
    EventChanges,
    EventDraft,
    FocusSessionDraft,
    RecordNotFoundError,
    SemesterRecord,
    StudyState,
    new_id,
)
from study_server.planning.recurrence import Weekly
from study_server.planning.series import UpdateMode
from study_server.store.record_store import COURSES, EVENTS, SEMESTERS, SETTINGS, TRACKERS, StoreError
from study_server.store.repository import StudyRepository
from tests.conftest import FailingRecordStore

pytestmark = pytest.mark.asyncio


async def test_courses_get_increasing_positions(repo, store):
    first = await repo.add_course("Algebra", code="MATH101")
    second = await repo.add_course("History")
    assert (first.position, second.position) == (0, 1)
    assert set(store.tables[COURSES]) == {first.id, second.id}


async def test_reorder_requires_every_course(repo):
    a = await repo.add_course("A")
    b = await repo.add_course("B")
    with pytest.raises(ValueError):
        await repo.reorder_courses([a.id])

    reordered = await repo.reorder_courses([b.id, a.id])
    assert [c.id for c in reordered] == [b.id, a.id]
    assert [c.position for c in repo.state.courses] == [0, 1]


async def test_new_event_type_is_saved_to_settings(repo, store):
    course = await repo.add_course("Algebra")
    await repo.add_event(EventDraft(course_id=course.id, title="Guest talk", type="seminar", date=date(2024, 1, 3)))

    assert "seminar" in repo.state.settings.event_types
    assert repo.state.settings.id is not None
    stored = store.tables[SETTINGS][repo.state.settings.id]
    assert "seminar" in stored["event_types"]


async def test_add_event_to_unknown_course_fails(repo):
    with pytest.raises(RecordNotFoundError):
        await repo.add_event(EventDraft(course_id="missing", title="Quiz", date=date(2024, 1, 3)))


async def test_series_respects_semester_breaks(repo, store):
    semester = await repo.add_semester(SemesterRecord(
        id=new_id(),
        name="Spring",
        start_date=date(2024, 1, 1),
        end_date=date(2024, 5, 31),
        breaks=[BreakPeriod(start_date=date(2024, 1, 8), end_date=date(2024, 1, 14))],
    ))
    course = await repo.add_course("Algebra", semester_id=semester.id)
    template = EventDraft(course_id=course.id, title="Lecture {i}", date=date(2024, 1, 1))
    events = await repo.add_series(template, date(2024, 1, 22), Weekly())

    assert [e.date for e in events] == [date(2024, 1, 1), date(2024, 1, 15), date(2024, 1, 22)]
    assert [e.title for e in events] == ["Lecture 01", "Lecture 02", "Lecture 03"]
    assert len(store.tables[EVENTS]) == 3


async def test_empty_series_creates_nothing(repo, store):
    course = await repo.add_course("Algebra")
    template = EventDraft(course_id=course.id, title="Lecture", date=date(2024, 1, 10))
    assert await repo.add_series(template, date(2024, 1, 1), Weekly()) == []
    assert not store.tables[EVENTS]


async def test_series_update_all_members(repo):
    course = await repo.add_course("Algebra")
    template = EventDraft(course_id=course.id, title="Lecture", date=date(2024, 1, 1))
    events = await repo.add_series(template, date(2024, 1, 29), Weekly())

    ok = await repo.update_series_member(events[1].id, EventChanges(title="Lecture B", score=70), UpdateMode.ALL)

    assert ok
    members = repo.state.series_members(events[0].recurrence_id)
    assert len(members) == 5
    assert all(m.title == "Lecture B" for m in members)
    assert [m.score for m in members] == [None, 70, None, None, None]


async def test_failed_series_update_leaves_state_untouched():
    store = FailingRecordStore(fail_on=())
    repo = StudyRepository(store, StudyState(user_id="user-1"))
    course = await repo.add_course("Algebra")
    template = EventDraft(course_id=course.id, title="Lecture", date=date(2024, 1, 1))
    events = await repo.add_series(template, date(2024, 1, 29), Weekly())

    store.fail_on = {"upsert"}
    before = repo.state
    ok = await repo.update_series_member(events[2].id, EventChanges(title="Changed"), UpdateMode.ALL)

    assert not ok
    assert repo.state is before
    assert all(e.title == "Lecture" for e in repo.state.events)


async def test_failed_create_raises_store_error():
    store = FailingRecordStore(fail_on={"create"})
    repo = StudyRepository(store, StudyState(user_id="user-1"))
    with pytest.raises(StoreError):
        await repo.add_course("Algebra")
    assert repo.state.courses == []


async def test_extend_standalone_event_starts_series(repo, store):
    course = await repo.add_course("Algebra")
    anchor = await repo.add_event(EventDraft(course_id=course.id, title="Tutorial", date=date(2024, 1, 1)))

    added = await repo.extend_series(anchor.id, date(2024, 1, 15), Weekly())

    anchor = repo.state.get_event(anchor.id)
    assert anchor.recurrence_id is not None
    assert [e.date for e in added] == [date(2024, 1, 8), date(2024, 1, 15)]
    assert all(e.recurrence_id == anchor.recurrence_id for e in added)
    assert store.tables[EVENTS][anchor.id]["recurrence_id"] == anchor.recurrence_id


async def test_failed_extension_leaves_anchor_standalone():
    store = FailingRecordStore(fail_on=())
    repo = StudyRepository(store, StudyState(user_id="user-1"))
    course = await repo.add_course("Algebra")
    anchor = await repo.add_event(EventDraft(course_id=course.id, title="Tutorial", date=date(2024, 1, 1)))

    store.fail_on = {"create", "update", "upsert"}
    before = repo.state
    with pytest.raises(StoreError):
        await repo.extend_series(anchor.id, date(2024, 1, 15), Weekly())

    assert repo.state is before
    assert repo.state.get_event(anchor.id).recurrence_id is None
    assert store.tables[EVENTS][anchor.id]["recurrence_id"] is None
    assert list(store.tables[EVENTS]) == [anchor.id]


async def test_extend_over_existing_days_adds_nothing(repo, store):
    course = await repo.add_course("Algebra")
    template = EventDraft(course_id=course.id, title="Lecture", date=date(2024, 1, 1))
    events = await repo.add_series(template, date(2024, 1, 22), Weekly())

    added = await repo.extend_series(events[0].id, date(2024, 1, 22), Weekly())

    assert added == []
    assert len(store.tables[EVENTS]) == 4


async def test_duplicate_and_toggle(repo):
    course = await repo.add_course("Algebra")
    event = await repo.add_event(EventDraft(course_id=course.id, title="Quiz", date=date(2024, 1, 3), score=60))

    copy = await repo.duplicate_event(event.id)
    toggled = await repo.toggle_event_completion(event.id)

    assert copy.title == "Quiz (Copy)"
    assert copy.id != event.id
    assert copy.score == 60
    assert toggled.is_completed
    assert repo.state.get_event(event.id).is_completed


async def test_semester_change_cascades_to_events(repo, store):
    semester = await repo.add_semester(SemesterRecord(
        id=new_id(), name="Spring", start_date=date(2024, 1, 1), end_date=date(2024, 5, 31)
    ))
    course = await repo.add_course("Algebra", semester_id=semester.id)
    in_break = await repo.add_event(EventDraft(course_id=course.id, title="Lecture 02", date=date(2024, 1, 10)))
    later = await repo.add_event(EventDraft(course_id=course.id, title="Lecture 05", date=date(2024, 1, 29)))

    updated, plan = await repo.update_semester(semester.id, {
        "breaks": [BreakPeriod(start_date=date(2024, 1, 8), end_date=date(2024, 1, 14))],
    })

    assert len(updated.breaks) == 1
    assert plan.deleted_ids == [in_break.id]
    assert in_break.id not in store.tables[EVENTS]
    assert repo.state.get_event(later.id).title == "Lecture 04"
    assert store.tables[EVENTS][later.id]["title"] == "Lecture 04"


async def test_semester_rename_does_not_cascade(repo):
    semester = await repo.add_semester(SemesterRecord(
        id=new_id(), name="Spring", start_date=date(2024, 1, 1), end_date=date(2024, 5, 31)
    ))
    updated, plan = await repo.update_semester(semester.id, {"name": "Spring 2024"})
    assert updated.name == "Spring 2024"
    assert plan.is_empty


async def test_semester_end_before_start_is_rejected(repo):
    with pytest.raises(ValueError):
        await repo.add_semester(SemesterRecord(
            id=new_id(), name="Broken", start_date=date(2024, 5, 1), end_date=date(2024, 1, 1)
        ))


async def test_delete_semester_unbinds_courses(repo, store):
    semester = await repo.add_semester(SemesterRecord(
        id=new_id(), name="Spring", start_date=date(2024, 1, 1), end_date=date(2024, 5, 31)
    ))
    course = await repo.add_course("Algebra", semester_id=semester.id)
    await repo.update_settings({"active_semester_id": semester.id})

    await repo.delete_semester(semester.id)

    assert repo.state.get_course(course.id).semester_id is None
    assert repo.state.settings.active_semester_id is None
    assert semester.id not in store.tables[SEMESTERS]


async def test_delete_course_removes_dependents(repo, store):
    course = await repo.add_course("Algebra")
    event = await repo.add_event(EventDraft(course_id=course.id, title="Quiz", date=date(2024, 1, 3)))
    await repo.add_tracker(event.id, "Exercises", max_value=5)
    await repo.add_focus_session(FocusSessionDraft(course_id=course.id, event_id=event.id, duration=600))

    await repo.delete_course(course.id)

    assert repo.state.courses == []
    assert repo.state.events == []
    assert repo.state.trackers == []
    assert repo.state.focus_sessions == []
    assert not store.tables[TRACKERS]


async def test_tracker_value_is_bounded(repo):
    course = await repo.add_course("Algebra")
    event = await repo.add_event(EventDraft(course_id=course.id, title="Sheet", date=date(2024, 1, 3)))
    tracker = await repo.add_tracker(event.id, "Exercises", max_value=3)

    updated = await repo.update_tracker(tracker.id, {"value": 3})
    assert updated.value == 3
    with pytest.raises(ValueError):
        await repo.update_tracker(tracker.id, {"value": 4})


async def test_load_rebuilds_sorted_snapshot(repo, store):
    course = await repo.add_course("Algebra")
    await repo.add_event(EventDraft(course_id=course.id, title="Later", date=date(2024, 2, 1)))
    await repo.add_event(EventDraft(course_id=course.id, title="Earlier", date=date(2024, 1, 1)))

    loaded = await StudyRepository.load(store, "user-1")

    assert [e.title for e in loaded.state.events] == ["Earlier", "Later"]
    assert loaded.state.settings.event_types == repo.state.settings.event_types
