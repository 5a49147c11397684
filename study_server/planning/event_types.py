# study_server/planning/event_types.py
"""The event type vocabulary is open: unseen types are appended on first use."""

from typing import Optional

from study_server.planning.models import UserSettings


def normalize_event_type(event_type: str) -> str:
    cleaned = (event_type or "").strip()
    if not cleaned:
        raise ValueError("event type must not be blank")
    return cleaned


def ensure_event_type(settings: UserSettings, event_type: str) -> Optional[UserSettings]:
    """Returns settings with `event_type` appended, or None if it is already known."""
    event_type = normalize_event_type(event_type)
    if event_type in settings.event_types:
        return None
    return settings.model_copy(update={"event_types": [*settings.event_types, event_type]})


def remove_event_type(settings: UserSettings, event_type: str) -> UserSettings:
    if event_type not in settings.event_types:
        return settings
    if len(settings.event_types) <= 1:
        raise ValueError("cannot remove the last event type")
    return settings.model_copy(
        update={"event_types": [t for t in settings.event_types if t != event_type]}
    )
