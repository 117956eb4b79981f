"""Who is involved in an event.

Solo sorties carry only the pilot; everything else pairs an instructor with
a student. Attendee lists (group ground school, briefings) are layered on
top regardless of flight type.
"""

from __future__ import annotations

from typing import Callable

from flightgrid.domain.models import ScheduleEvent

PersonnelRule = Callable[[ScheduleEvent], list[str]]


def _ordered_unique(names: list[str | None]) -> list[str]:
    seen: dict[str, None] = {}
    for name in names:
        if name:
            seen.setdefault(name, None)
    return list(seen)


def crew_of(event: ScheduleEvent) -> list[str]:
    """Pilot for a solo, otherwise instructor then student."""
    if event.flight_type == "Solo":
        return _ordered_unique([event.pilot])
    return _ordered_unique([event.instructor, event.student])


def personnel_of(event: ScheduleEvent) -> list[str]:
    """Crew plus every attendee, in insertion order without duplicates."""
    return _ordered_unique([*crew_of(event), *(event.attendees or [])])
