"""Marquee (rubber-band) and click-toggle selection over the day grid."""

from __future__ import annotations

from flightgrid.domain.bus import EventBus
from flightgrid.domain.events import SelectionChanged
from flightgrid.domain.models import GridGeometry, Pointer
from flightgrid.logging import get_logger
from flightgrid.repos.memory import SelectionRepository
from flightgrid.services.drag import PRIMARY_BUTTON, EventSource
from flightgrid.services.layout import RowLayout

log = get_logger(__name__)

Rect = tuple[float, float, float, float]  # left, top, right, bottom


class MarqueeSelector:
    """Keeps the selection set in step with a rectangle dragged over empty grid.

    The set is recomputed from scratch on every move: an event is selected
    when its tile strictly intersects the rectangle (shared edges do not
    count).
    """

    def __init__(
        self,
        events: EventSource,
        layout: RowLayout,
        geometry: GridGeometry,
        selection: SelectionRepository,
        bus: EventBus | None = None,
    ) -> None:
        self._events = events
        self.layout = layout
        self.geometry = geometry
        self.selection = selection
        self.bus = bus
        self.rect: Rect | None = None
        self._origin: tuple[float, float] | None = None
        self._moved = False

    @property
    def is_active(self) -> bool:
        return self._origin is not None

    def begin(self, pointer: Pointer, multi_select: bool) -> bool:
        if pointer.button != PRIMARY_BUTTON or not multi_select:
            return False
        self._origin = (pointer.x, pointer.y)
        self._moved = False
        self.rect = (pointer.x, pointer.y, pointer.x, pointer.y)
        return True

    def move(self, pointer: Pointer) -> set[str] | None:
        if self._origin is None:
            return None
        self._moved = True
        ox, oy = self._origin
        self.rect = (
            min(ox, pointer.x),
            min(oy, pointer.y),
            max(ox, pointer.x),
            max(oy, pointer.y),
        )
        hits = self.hit_test(self.rect)
        self._replace(hits)
        return set(hits)

    def end(self, pointer: Pointer) -> set[str]:
        """Finish the marquee.

        A press-and-release without movement on empty space (and without
        shift) clears the selection.
        """
        if self._origin is not None:
            if not self._moved and not pointer.shift and not pointer.on_tile:
                self._replace([])
            self._origin = None
            self.rect = None
            self._moved = False
        selected = self.selection.get()
        log.debug("selection.end", selected=len(selected))
        return selected

    def hit_test(self, rect: Rect) -> list[str]:
        left, top, right, bottom = rect
        g = self.geometry
        hits: list[str] = []
        for event in self._events():
            row = self.layout.row_of(event)
            if row is None:
                continue
            tile_top = g.top_of(row)
            tile_bottom = tile_top + g.row_height
            tile_left = g.x_of(event.start_minutes)
            tile_right = tile_left + g.width_of(event.duration_minutes)
            if left < tile_right and right > tile_left and top < tile_bottom and bottom > tile_top:
                hits.append(event.id)
        return hits

    def toggle(self, event_id: str) -> set[str]:
        ids = self.selection.get()
        ids ^= {event_id}
        self._replace([e.id for e in self._events() if e.id in ids])
        return self.selection.get()

    def clear(self) -> None:
        self._replace([])

    def _replace(self, event_ids: list[str]) -> None:
        if self.bus is None:
            self.selection.replace(event_ids)
            return
        self.bus.publish(SelectionChanged(event_ids=event_ids))
