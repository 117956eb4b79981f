"""Domain event handlers, wired up at application startup."""

from __future__ import annotations

from flightgrid.domain.bus import EventBus
from flightgrid.domain.events import (
    CptConflictFlagged,
    EventsRepositioned,
    SelectionChanged,
)
from flightgrid.domain.models import ConflictReview
from flightgrid.logging import get_logger
from flightgrid.repos.memory import (
    ConflictReviewRepository,
    EventRepository,
    SelectionRepository,
)

log = get_logger(__name__)


class HandlerRegistry:
    """Wires domain-event handlers to the bus with access to the repositories."""

    def __init__(
        self,
        bus: EventBus,
        event_repo: EventRepository,
        selection_repo: SelectionRepository,
        review_repo: ConflictReviewRepository,
    ) -> None:
        self.bus = bus
        self.event_repo = event_repo
        self.selection_repo = selection_repo
        self.review_repo = review_repo
        self._register()

    def _register(self) -> None:
        self.bus.subscribe(EventsRepositioned, self.on_events_repositioned)
        self.bus.subscribe(CptConflictFlagged, self.on_cpt_conflict_flagged)
        self.bus.subscribe(SelectionChanged, self.on_selection_changed)

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def on_events_repositioned(self, event: EventsRepositioned) -> None:
        applied = self.event_repo.apply_updates(event.updates)
        log.info(
            "events.repositioned",
            requested=len(event.updates),
            applied=len(applied),
        )

    def on_cpt_conflict_flagged(self, event: CptConflictFlagged) -> None:
        review = ConflictReview(conflict=event.conflict)
        self.review_repo.add(review)
        log.warning(
            "review.queued",
            review_id=review.id,
            event_id=event.conflict.new_event.id,
            person=event.conflict.person_name,
        )

    def on_selection_changed(self, event: SelectionChanged) -> None:
        self.selection_repo.replace(event.event_ids)
