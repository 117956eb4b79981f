"""Drag-to-reschedule engine for the day grid.

One ``DragEngine`` serves every grid view; what differs between views is
injected: the row layout (resource rows or person rows), the personnel rule
and, optionally, a unified conflict detector.

Lifecycle: ``Idle -> Dragging -> Idle``. While dragging, each pointer move
recomputes the whole group's positions from the positions captured at
pointer-down, so errors never accumulate across moves. Positions go into a
shadow copy held by the session; the event store is written once, on drop,
through an ``EventsRepositioned`` bus event. ``cancel`` discards the shadow
copy.
"""

from __future__ import annotations

import math
from typing import Callable, Iterable

from flightgrid.domain.bus import EventBus
from flightgrid.domain.events import (
    CptConflictFlagged,
    DragCancelled,
    DragPreviewed,
    DragStarted,
    EventsRepositioned,
)
from flightgrid.domain.models import (
    ConflictReport,
    ConflictType,
    CptConflict,
    DragFrame,
    DragOutcome,
    Dragging,
    DragState,
    EventUpdate,
    GridGeometry,
    Idle,
    InitialPosition,
    PersonnelConflict,
    Pointer,
    ScheduleEvent,
)
from flightgrid.logging import get_logger
from flightgrid.services.conflicts import (
    ConflictDetector,
    SyllabusLookup,
    cpt_conflict_from,
    find_personnel_conflict,
    find_resource_conflict,
    is_cpt_event,
)
from flightgrid.services.layout import RowLayout
from flightgrid.services.personnel import PersonnelRule, personnel_of

log = get_logger(__name__)

EventSource = Callable[[], list[ScheduleEvent]]

PRIMARY_BUTTON = 0


class DragEngine:
    """Pointer-drag state machine for one grid view."""

    def __init__(
        self,
        events: EventSource,
        layout: RowLayout,
        syllabus: SyllabusLookup,
        geometry: GridGeometry,
        personnel: PersonnelRule = personnel_of,
        conflict_detector: ConflictDetector | None = None,
        bus: EventBus | None = None,
    ) -> None:
        self._events = events
        self.layout = layout
        self.syllabus = syllabus
        self.geometry = geometry
        self.personnel = personnel
        self.conflict_detector = conflict_detector
        self.bus = bus
        self.state: DragState = Idle()

    @property
    def is_dragging(self) -> bool:
        return isinstance(self.state, Dragging)

    def _publish(self, event: object) -> None:
        if self.bus is not None:
            self.bus.publish(event)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def begin(
        self,
        event_id: str,
        pointer: Pointer,
        *,
        multi_select: bool = False,
        selected_ids: Iterable[str] = (),
    ) -> bool:
        """Start dragging ``event_id`` (and the selection, if it is part of it).

        Returns False and stays idle for a non-primary button, an unknown
        event, an event whose row is not in the layout, or while another
        drag is already in progress.
        """
        if pointer.button != PRIMARY_BUTTON or self.is_dragging:
            return False

        current = self._events()
        grabbed = next((e for e in current if e.id == event_id), None)
        if grabbed is None:
            return False

        selected = set(selected_ids)
        if multi_select and event_id in selected:
            group = [e for e in current if e.id in selected]
        else:
            group = [grabbed]

        initial_positions: dict[str, InitialPosition] = {}
        for event in group:
            row = self.layout.row_of(event)
            if row is None:
                continue
            initial_positions[event.id] = InitialPosition(
                start_minutes=event.start_minutes, row_index=row
            )

        main = initial_positions.get(event_id)
        if main is None:
            log.debug("drag.not_started", event_id=event_id, resource_id=grabbed.resource_id)
            return False

        g = self.geometry
        self.state = Dragging(
            main_event_id=event_id,
            x_offset=(pointer.x - g.x_of(main.start_minutes)) / g.zoom,
            y_offset=pointer.y - g.top_of(main.row_index),
            initial_positions=initial_positions,
        )
        log.info("drag.begin", event_id=event_id, group_size=len(initial_positions))
        self._publish(DragStarted(main_event_id=event_id, event_ids=list(initial_positions)))
        return True

    def move(self, pointer: Pointer) -> DragFrame | None:
        """Reposition the drag group under the pointer.

        Returns the full batch of proposed positions, or None when idle.
        """
        state = self.state
        if not isinstance(state, Dragging):
            return None

        g = self.geometry
        main = state.initial_positions[state.main_event_id]
        time_shift = g.minutes_at(pointer.x / g.zoom - state.x_offset) - main.start_minutes
        if self.layout.locks_rows:
            row_shift = 0
        else:
            row_shift = (
                math.floor((pointer.y - state.y_offset + g.row_height / 2) / g.row_height)
                - main.row_index
            )

        current = {e.id: e for e in self._events()}
        last_row = len(self.layout.rows) - 1
        updates: list[EventUpdate] = []
        preview: dict[str, ScheduleEvent] = {}

        for event_id, initial in state.initial_positions.items():
            event = current.get(event_id)
            if event is None:
                continue
            new_start = g.place(initial.start_minutes + time_shift, event.duration_minutes)
            if self.layout.locks_rows:
                new_resource_id = None
                moved = event.moved(start_minutes=new_start)
            else:
                new_row = min(max(initial.row_index + row_shift, 0), last_row)
                new_resource_id = self.layout.resource_at(new_row)
                moved = event.moved(start_minutes=new_start, resource_id=new_resource_id)
            updates.append(
                EventUpdate(
                    event_id=event_id,
                    new_start_minutes=new_start,
                    new_resource_id=new_resource_id,
                )
            )
            preview[event_id] = moved

        others = [e for e in current.values() if e.id not in state.initial_positions]

        resource_conflict_id = None
        for moved in preview.values():
            hit = find_resource_conflict(
                moved,
                moved.resource_id,
                moved.start_minutes,
                others,
                exclude_ids=state.initial_positions,
            )
            if hit is not None:
                resource_conflict_id = hit.id
                break

        personnel_conflict, cpt_conflict, report = self._personnel_conflict(
            state.main_event_id, preview, others
        )

        state.preview = preview
        state.updates = updates
        state.personnel_conflict = personnel_conflict
        state.resource_conflict_id = resource_conflict_id
        state.pending_cpt_conflict = cpt_conflict

        self._publish(DragPreviewed(main_event_id=state.main_event_id, updates=updates))
        return DragFrame(
            updates=updates,
            personnel_conflict=personnel_conflict,
            resource_conflict_id=resource_conflict_id,
            cpt_conflict=cpt_conflict,
            conflict_report=report,
        )

    def end(self, pointer: Pointer | None = None) -> DragOutcome | None:
        """Drop: flag any CPT conflict, then commit the last batch.

        Returns None when no drag was in progress.
        """
        state = self.state
        if not isinstance(state, Dragging):
            return None

        cpt_conflict = state.pending_cpt_conflict
        if cpt_conflict is not None:
            log.info(
                "drag.cpt_conflict",
                event_id=cpt_conflict.new_event.id,
                conflicting_event_id=cpt_conflict.conflicting_event.id,
            )
            self._publish(CptConflictFlagged(conflict=cpt_conflict))

        self.state = Idle()
        updates = list(state.updates)
        if updates:
            self._publish(EventsRepositioned(updates=updates))
        log.info("drag.commit", event_id=state.main_event_id, updates=len(updates))
        return DragOutcome(updates=updates, cpt_conflict=cpt_conflict)

    def cancel(self) -> bool:
        """Abandon the drag; the event store is left as it was at pointer-down."""
        state = self.state
        if not isinstance(state, Dragging):
            return False
        self.state = Idle()
        log.info("drag.cancel", event_id=state.main_event_id)
        self._publish(DragCancelled(main_event_id=state.main_event_id))
        return True

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def events_view(self) -> list[ScheduleEvent]:
        """Store events with the drag preview laid over them."""
        preview = self.state.preview if isinstance(self.state, Dragging) else {}
        return [preview.get(e.id, e) for e in self._events()]

    def _personnel_conflict(
        self,
        main_event_id: str,
        preview: dict[str, ScheduleEvent],
        others: list[ScheduleEvent],
    ) -> tuple[PersonnelConflict | None, CptConflict | None, ConflictReport | None]:
        main = preview.get(main_event_id)
        if main is None:
            return None, None, None

        report = None
        if self.conflict_detector is not None:
            report = self.conflict_detector(main, others)
            if not report.has_conflict or report.conflict_type != ConflictType.PERSONNEL:
                return None, None, report
            conflicting = next(
                (e for e in others if e.id == report.conflicting_event_id), None
            )
            if conflicting is None:
                return None, None, report
            conflict = PersonnelConflict(
                candidate=main,
                conflicting_event=conflicting,
                person_name=report.conflicted_personnel or "",
            )
        else:
            candidates = [main, *(e for i, e in preview.items() if i != main_event_id)]
            conflict = find_personnel_conflict(
                candidates, others, self.syllabus, self.personnel
            )
            if conflict is None:
                return None, None, None

        cpt_conflict = cpt_conflict_from(conflict) if is_cpt_event(conflict.candidate) else None
        return conflict, cpt_conflict, report
