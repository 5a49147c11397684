# study_server/planning/semester_cascade.py
"""
Keeps stored events consistent when a semester's start day or breaks change.

Events that now fall inside a break are deleted. Week numbers that were typed
into titles as literals are rewritten when the event's academic week moves;
live `{week}` tokens need no rewrite since they are resolved at display time.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence

from study_server.planning.academic_week import calculate_academic_week, is_in_break
from study_server.planning.models import CourseRecord, EventRecord, SemesterRecord

log = logging.getLogger(__name__)


@dataclass
class CascadePlan:
    deleted_ids: List[str] = field(default_factory=list)
    retitled: List[EventRecord] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.deleted_ids and not self.retitled


def semester_schedule_changed(old: SemesterRecord, new: SemesterRecord) -> bool:
    old_breaks = sorted((b.start_date, b.end_date) for b in old.breaks)
    new_breaks = sorted((b.start_date, b.end_date) for b in new.breaks)
    return old.start_date != new.start_date or old_breaks != new_breaks


def renumber_week_in_title(title: str, old_week: int, new_week: int) -> Optional[str]:
    """
    Replaces the first literal occurrence of `old_week` in `title`.

    The zero-padded form ("05") is tried first, then the bare numeral on word
    boundaries so that "10" is not touched when renumbering "1". Returns None
    when neither form is present.
    """
    padded_old = f"{old_week:02d}"
    if padded_old in title:
        return title.replace(padded_old, f"{new_week:02d}", 1)

    pattern = re.compile(rf"\b{old_week}\b")
    if pattern.search(title):
        return pattern.sub(str(new_week), title, count=1)
    return None


def plan_semester_change(
    old: SemesterRecord,
    new: SemesterRecord,
    courses: Iterable[CourseRecord],
    events: Sequence[EventRecord],
    workdays: Optional[Iterable[int]] = None,
) -> CascadePlan:
    course_ids = {c.id for c in courses if c.semester_id == new.id}
    workdays = None if workdays is None else list(workdays)
    plan = CascadePlan()

    for event in events:
        if event.course_id not in course_ids:
            continue

        if is_in_break(event.date, new.breaks):
            plan.deleted_ids.append(event.id)
            continue

        old_week = calculate_academic_week(event.date, old.start_date, old.breaks, workdays)
        new_week = calculate_academic_week(event.date, new.start_date, new.breaks, workdays)
        if old_week == new_week:
            continue

        title = renumber_week_in_title(event.title, old_week, new_week)
        if title is None:
            log.debug(f"No week literal {old_week} in title {event.title!r}; left unchanged")
            continue
        plan.retitled.append(event.model_copy(update={"title": title}))

    log.info(
        f"Semester {new.id} change: {len(plan.deleted_ids)} events in breaks, "
        f"{len(plan.retitled)} titles renumbered"
    )
    return plan
