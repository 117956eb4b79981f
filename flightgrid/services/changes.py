"""Service for flagging events that differ from a published baseline."""

from __future__ import annotations

from flightgrid.domain.models import ScheduleEvent

_COMPARED_FIELDS = ("resource_id", "instructor", "student", "pilot")


def is_changed(event: ScheduleEvent, baseline: dict[str, ScheduleEvent]) -> bool:
    """True when the event is new or has moved, been re-crewed or re-area'd."""
    original = baseline.get(event.id)
    if original is None:
        return True
    if event.start_minutes != original.start_minutes:
        return True
    if event.duration_minutes != original.duration_minutes:
        return True
    if (event.area or "") != (original.area or ""):
        return True
    return any(getattr(event, f) != getattr(original, f) for f in _COMPARED_FIELDS)


def changed_event_ids(
    events: list[ScheduleEvent], baseline: list[ScheduleEvent]
) -> list[str]:
    """Ids of events that differ from ``baseline``, in ``events`` order."""
    by_id = {e.id: e for e in baseline}
    return [e.id for e in events if is_changed(e, by_id)]
