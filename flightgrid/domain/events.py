"""Domain events emitted by the drag engine and the selection controller."""

from __future__ import annotations

from pydantic import BaseModel

from flightgrid.domain.models import CptConflict, EventUpdate


class DragStarted(BaseModel):
    """Fired when a pointer-down captures one or more events for dragging."""

    main_event_id: str
    event_ids: list[str]


class DragPreviewed(BaseModel):
    """Fired on every pointer-move with the full batch of proposed positions."""

    main_event_id: str
    updates: list[EventUpdate]


class EventsRepositioned(BaseModel):
    """Fired once on drop; the batch the caller applies to its event store."""

    updates: list[EventUpdate]


class DragCancelled(BaseModel):
    """Fired when a drag is abandoned and its preview discarded."""

    main_event_id: str


class CptConflictFlagged(BaseModel):
    """Fired at drop time when a dragged CPT event double-books a person."""

    conflict: CptConflict


class SelectionChanged(BaseModel):
    """Fired whenever the selection set is replaced."""

    event_ids: list[str]
