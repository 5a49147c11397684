# study_server/planning/series.py
"""
Series reconciliation: applying an edit of one event to its recurrence series.

`single` edits only the target and detaches it from the series. `all` applies the
shared fields (title, type, course) to every member and shifts every member's day
by the same delta as the target, while per-event results (score, completion)
stay with the target.
"""

import enum
from typing import List, Sequence

from study_server.planning.models import EventChanges, EventRecord, RecordNotFoundError

SHARED_FIELDS = ("title", "type", "course_id")
PER_EVENT_FIELDS = ("score", "is_completed")


class UpdateMode(str, enum.Enum):
    SINGLE = "single"
    ALL = "all"


def _find(events: Sequence[EventRecord], event_id: str) -> EventRecord:
    for event in events:
        if event.id == event_id:
            return event
    raise RecordNotFoundError("events", event_id)


def plan_series_update(
    events: Sequence[EventRecord],
    event_id: str,
    changes: EventChanges,
    mode: UpdateMode,
) -> List[EventRecord]:
    """
    Returns the updated records to persist. Input records are left untouched.
    Raises RecordNotFoundError when `event_id` is unknown.
    """
    target = _find(events, event_id)
    explicit = changes.explicit()

    if mode == UpdateMode.SINGLE or not target.recurrence_id:
        update = dict(explicit)
        if mode == UpdateMode.SINGLE:
            update["recurrence_id"] = None
        return [target.model_copy(update=update)]

    new_date = explicit.get("date", target.date)
    delta = new_date - target.date
    shared = {k: v for k, v in explicit.items() if k in SHARED_FIELDS}

    updated: List[EventRecord] = []
    for member in events:
        if member.recurrence_id != target.recurrence_id:
            continue
        update = dict(shared)
        if member.id == target.id:
            update["date"] = new_date
            update.update({k: v for k, v in explicit.items() if k in PER_EVENT_FIELDS})
        elif delta:
            update["date"] = member.date + delta
        updated.append(member.model_copy(update=update))

    return updated
