"""Pointer routing for one grid view, independent of any rendering.

A press on a tile starts a drag; a press on empty space starts a marquee
(multi-select mode only). Leaving the grid ends whatever is in progress,
exactly like releasing the button. Escape cancels a drag.
"""

from __future__ import annotations

from flightgrid.config import GridSettings
from flightgrid.domain.bus import EventBus
from flightgrid.domain.models import DragFrame, DragOutcome, Pointer
from flightgrid.logging import bind_grid_context
from flightgrid.repos.memory import EventRepository, SelectionRepository
from flightgrid.services.conflicts import SyllabusLookup, UnifiedConflictDetector
from flightgrid.services.drag import DragEngine, EventSource
from flightgrid.services.layout import (
    ResourceRowLayout,
    RowLayout,
    instructor_layout,
    trainee_layout,
)
from flightgrid.services.personnel import crew_of, personnel_of
from flightgrid.services.selection import MarqueeSelector


class GridController:
    def __init__(
        self,
        drag: DragEngine,
        marquee: MarqueeSelector,
        multi_select: bool = False,
    ) -> None:
        self.drag = drag
        self.marquee = marquee
        self.multi_select = multi_select

    def pointer_down(self, pointer: Pointer, event_id: str | None = None) -> bool:
        if event_id is not None:
            return self.drag.begin(
                event_id,
                pointer,
                multi_select=self.multi_select,
                selected_ids=self.marquee.selection.get(),
            )
        return self.marquee.begin(pointer, self.multi_select)

    def pointer_move(self, pointer: Pointer) -> DragFrame | set[str] | None:
        if self.marquee.is_active:
            return self.marquee.move(pointer)
        return self.drag.move(pointer)

    def pointer_up(self, pointer: Pointer) -> DragOutcome | None:
        outcome = self.drag.end(pointer)
        if self.marquee.is_active:
            self.marquee.end(pointer)
        return outcome

    def pointer_leave(self, pointer: Pointer) -> DragOutcome | None:
        return self.pointer_up(pointer)

    def escape(self) -> bool:
        return self.drag.cancel()


def day_source(event_repo: EventRepository, date: str | None) -> EventSource:
    """Events of one day, or the whole store when no day is given."""
    if date is None:
        return event_repo.list_all
    return lambda: event_repo.list_for_date(date)


def _controller(
    view: str,
    layout: RowLayout,
    events: EventSource,
    syllabus: SyllabusLookup,
    selection_repo: SelectionRepository,
    settings: GridSettings,
    bus: EventBus | None,
    date: str | None,
    zoom: float,
    multi_select: bool,
    personnel=personnel_of,
) -> GridController:
    bind_grid_context(view, date, zoom)
    geometry = settings.geometry(zoom)
    detector = None
    if settings.conflict_mode == "unified":
        detector = UnifiedConflictDetector(
            syllabus,
            flight_turnaround_minutes=settings.flight_turnaround_minutes,
            ftd_turnaround_minutes=settings.ftd_turnaround_minutes,
            personnel=personnel,
        )
    drag = DragEngine(
        events,
        layout,
        syllabus,
        geometry,
        personnel=personnel,
        conflict_detector=detector,
        bus=bus,
    )
    marquee = MarqueeSelector(events, layout, geometry, selection_repo, bus=bus)
    return GridController(drag, marquee, multi_select=multi_select)


def resource_grid(
    event_repo: EventRepository,
    syllabus: SyllabusLookup,
    selection_repo: SelectionRepository,
    settings: GridSettings,
    bus: EventBus | None = None,
    date: str | None = None,
    zoom: float = 1.0,
    multi_select: bool = False,
) -> GridController:
    """The main day grid: resource rows, full personnel incl. attendees.

    Rows, conflicts and marquee hits only consider events on ``date``.
    """
    events = day_source(event_repo, date)
    return _controller(
        "resource",
        ResourceRowLayout.for_day(events()),
        events,
        syllabus,
        selection_repo,
        settings,
        bus,
        date,
        zoom,
        multi_select,
    )


def instructor_grid(
    instructors: list[str],
    event_repo: EventRepository,
    syllabus: SyllabusLookup,
    selection_repo: SelectionRepository,
    settings: GridSettings,
    bus: EventBus | None = None,
    date: str | None = None,
    zoom: float = 1.0,
) -> GridController:
    """One row per instructor; time-only drags, crew-only personnel."""
    return _controller(
        "instructor",
        instructor_layout(instructors),
        day_source(event_repo, date),
        syllabus,
        selection_repo,
        settings,
        bus,
        date,
        zoom,
        multi_select=False,
        personnel=crew_of,
    )


def trainee_grid(
    trainees: list[str],
    event_repo: EventRepository,
    syllabus: SyllabusLookup,
    selection_repo: SelectionRepository,
    settings: GridSettings,
    bus: EventBus | None = None,
    date: str | None = None,
    zoom: float = 1.0,
) -> GridController:
    """One row per trainee; time-only drags, crew-only personnel."""
    return _controller(
        "trainee",
        trainee_layout(trainees),
        day_source(event_repo, date),
        syllabus,
        selection_repo,
        settings,
        bus,
        date,
        zoom,
        multi_select=False,
        personnel=crew_of,
    )
