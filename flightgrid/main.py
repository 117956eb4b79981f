"""FastAPI application exposing the schedule grid engine in-process."""

from __future__ import annotations

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from flightgrid.config import get_settings
from flightgrid.domain.bus import EventBus
from flightgrid.domain.handlers import HandlerRegistry
from flightgrid.domain.models import (
    ConflictReport,
    ConflictReview,
    DetectConflictRequest,
    DragBeginRequest,
    DragFrame,
    DragOutcome,
    MarqueeBeginRequest,
    PersonnelConflict,
    PersonnelConflictRequest,
    Pointer,
    ResourceConflictRequest,
    ScheduleEvent,
    SyllabusItem,
)
from flightgrid.errors import InvalidStateError, UnknownEventError
from flightgrid.logging import get_logger, setup_logging
from flightgrid.repos.memory import (
    ConflictReviewRepository,
    EventRepository,
    SelectionRepository,
    SyllabusRepository,
)
from flightgrid.services.changes import changed_event_ids
from flightgrid.services.conflicts import (
    SyllabusLookup,
    UnifiedConflictDetector,
    find_personnel_conflict,
    find_resource_conflict,
)
from flightgrid.services.grid import GridController, day_source, resource_grid
from flightgrid.services.layout import build_resource_rows, category_boundaries

settings = get_settings()
setup_logging(json_output=settings.log_json, log_level=settings.log_level)
log = get_logger(__name__)

app = FastAPI(title="Flight Training Schedule Grid")

# ── Singletons (created at import time for simplicity) ────────────────
event_bus = EventBus()
event_repo = EventRepository()
syllabus_repo = SyllabusRepository()
selection_repo = SelectionRepository()
review_repo = ConflictReviewRepository()

handler_registry = HandlerRegistry(
    bus=event_bus,
    event_repo=event_repo,
    selection_repo=selection_repo,
    review_repo=review_repo,
)

# The controller of the interaction in progress; rebuilt on each pointer-down
# so the row layout reflects the current day.
_grid: GridController | None = None


def _syllabus() -> SyllabusLookup:
    return SyllabusLookup(syllabus_repo.list_all())


def _fresh_grid(zoom: float, multi_select: bool, date: str | None) -> GridController:
    global _grid
    _grid = resource_grid(
        event_repo,
        _syllabus(),
        selection_repo,
        settings,
        bus=event_bus,
        date=date,
        zoom=zoom,
        multi_select=multi_select,
    )
    log.debug("grid.rebuilt", rows=len(_grid.drag.layout.rows), zoom=zoom)
    return _grid


def _active_grid() -> GridController:
    if _grid is None:
        raise InvalidStateError("No grid interaction in progress")
    return _grid


def _require_event(event_id: str) -> ScheduleEvent:
    event = event_repo.get(event_id)
    if event is None:
        raise UnknownEventError(event_id)
    return event


# ── Error mapping ─────────────────────────────────────────────────────


@app.exception_handler(UnknownEventError)
async def _unknown_event(request: Request, exc: UnknownEventError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": "Event not found"})


@app.exception_handler(InvalidStateError)
async def _invalid_state(request: Request, exc: InvalidStateError) -> JSONResponse:
    return JSONResponse(status_code=409, content={"detail": str(exc)})


# ── Events & syllabus ─────────────────────────────────────────────────


@app.get("/events", response_model=list[ScheduleEvent])
def list_events(date: str | None = None) -> list[ScheduleEvent]:
    """Return stored events in insertion order, optionally for one day."""
    if date is None:
        return event_repo.list_all()
    return event_repo.list_for_date(date)


@app.post("/events", response_model=ScheduleEvent, status_code=201)
def add_event(event: ScheduleEvent) -> ScheduleEvent:
    event_repo.add(event)
    return event


@app.get("/events/{event_id}", response_model=ScheduleEvent)
def get_event(event_id: str) -> ScheduleEvent:
    return _require_event(event_id)


@app.post("/events/changed", response_model=list[str])
def list_changed_events(baseline: list[ScheduleEvent]) -> list[str]:
    """Ids of stored events that differ from the posted baseline."""
    return changed_event_ids(event_repo.list_all(), baseline)


@app.get("/syllabus", response_model=list[SyllabusItem])
def list_syllabus() -> list[SyllabusItem]:
    return syllabus_repo.list_all()


@app.post("/syllabus", response_model=SyllabusItem, status_code=201)
def add_syllabus_item(item: SyllabusItem) -> SyllabusItem:
    syllabus_repo.add(item)
    return item


@app.get("/layout/rows")
def layout_rows(date: str | None = None) -> dict:
    """Resource row ordering for one day plus category boundaries."""
    rows = build_resource_rows(day_source(event_repo, date)())
    return {"rows": rows, "boundaries": category_boundaries(rows)}


# ── Conflict checks ───────────────────────────────────────────────────


@app.post("/conflicts/personnel", response_model=PersonnelConflict | None)
def check_personnel(body: PersonnelConflictRequest) -> PersonnelConflict | None:
    return find_personnel_conflict(body.candidates, body.existing, _syllabus())


@app.post("/conflicts/resource", response_model=ScheduleEvent | None)
def check_resource(body: ResourceConflictRequest) -> ScheduleEvent | None:
    return find_resource_conflict(
        body.candidate,
        body.new_resource_id,
        body.new_start_minutes,
        body.existing,
        exclude_ids=body.exclude_ids,
    )


@app.post("/conflicts/detect", response_model=ConflictReport)
def detect_conflict(body: DetectConflictRequest) -> ConflictReport:
    detector = UnifiedConflictDetector(
        _syllabus(),
        flight_turnaround_minutes=settings.flight_turnaround_minutes,
        ftd_turnaround_minutes=settings.ftd_turnaround_minutes,
    )
    return detector(body.event, body.others)


# ── Drag session ──────────────────────────────────────────────────────


@app.post("/drag/begin")
def drag_begin(body: DragBeginRequest) -> dict:
    event = _require_event(body.event_id)
    if _grid is not None and _grid.drag.is_dragging:
        return {"started": False}
    grid = _fresh_grid(body.zoom, body.multi_select, body.date or event.date)
    return {"started": grid.pointer_down(body.pointer, event_id=body.event_id)}


@app.post("/drag/move", response_model=DragFrame)
def drag_move(pointer: Pointer) -> DragFrame:
    frame = _active_grid().drag.move(pointer)
    if frame is None:
        raise InvalidStateError("No drag in progress")
    return frame


@app.post("/drag/end", response_model=DragOutcome)
def drag_end(pointer: Pointer) -> DragOutcome:
    outcome = _active_grid().pointer_up(pointer)
    if outcome is None:
        raise InvalidStateError("No drag in progress")
    return outcome


@app.post("/drag/cancel")
def drag_cancel() -> dict:
    cancelled = _grid.escape() if _grid is not None else False
    return {"cancelled": cancelled}


@app.get("/drag/preview", response_model=list[ScheduleEvent])
def drag_preview() -> list[ScheduleEvent]:
    """Events as the grid should render them right now."""
    if _grid is None:
        return event_repo.list_all()
    return _grid.drag.events_view()


# ── Selection ─────────────────────────────────────────────────────────


@app.post("/selection/marquee/begin")
def marquee_begin(body: MarqueeBeginRequest) -> dict:
    if _grid is not None and _grid.drag.is_dragging:
        raise InvalidStateError("A drag is in progress")
    grid = _fresh_grid(body.zoom, body.multi_select, body.date)
    return {"started": grid.pointer_down(body.pointer)}


@app.post("/selection/marquee/move")
def marquee_move(pointer: Pointer) -> dict:
    grid = _active_grid()
    if not grid.marquee.is_active:
        raise InvalidStateError("No marquee in progress")
    return {"selected": sorted(grid.pointer_move(pointer))}


@app.post("/selection/marquee/end")
def marquee_end(pointer: Pointer) -> dict:
    grid = _active_grid()
    if not grid.marquee.is_active:
        raise InvalidStateError("No marquee in progress")
    grid.pointer_up(pointer)
    return {"selected": sorted(selection_repo.get())}


@app.post("/selection/toggle/{event_id}")
def toggle_selection(event_id: str) -> dict:
    event = _require_event(event_id)
    grid = _grid
    if grid is None or not (grid.drag.is_dragging or grid.marquee.is_active):
        grid = _fresh_grid(1.0, multi_select=True, date=event.date)
    return {"selected": sorted(grid.marquee.toggle(event_id))}


@app.get("/selection")
def get_selection() -> dict:
    return {"selected": sorted(selection_repo.get())}


@app.delete("/selection")
def clear_selection() -> dict:
    selection_repo.clear()
    return {"selected": []}


# ── Conflict reviews ──────────────────────────────────────────────────


@app.get("/reviews", response_model=list[ConflictReview])
def list_reviews() -> list[ConflictReview]:
    """CPT conflicts flagged at drop time and not yet resolved."""
    return review_repo.list_pending()


@app.post("/reviews/{review_id}/resolve", response_model=ConflictReview)
def resolve_review(review_id: str) -> ConflictReview:
    review = review_repo.get(review_id)
    if review is None:
        raise HTTPException(status_code=404, detail="Review not found")
    review_repo.resolve(review_id)
    return review
