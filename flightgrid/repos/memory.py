"""In-memory repositories for schedule events, syllabus items and selections."""

from __future__ import annotations

from typing import Iterable

from flightgrid.domain.models import (
    ConflictReview,
    EventUpdate,
    ScheduleEvent,
    SyllabusItem,
)


class EventRepository:
    """Dict-backed store for ScheduleEvent instances, keyed by id.

    Insertion order is preserved; the conflict finder's first-match result
    depends on it.
    """

    def __init__(self) -> None:
        self._store: dict[str, ScheduleEvent] = {}

    def add(self, event: ScheduleEvent) -> None:
        self._store[event.id] = event

    def get(self, event_id: str) -> ScheduleEvent | None:
        return self._store.get(event_id)

    def list_all(self) -> list[ScheduleEvent]:
        return list(self._store.values())

    def list_for_date(self, date: str) -> list[ScheduleEvent]:
        return [e for e in self._store.values() if e.date == date]

    def apply_updates(self, updates: Iterable[EventUpdate]) -> list[ScheduleEvent]:
        """Apply a batch of position updates; unknown ids are ignored."""
        applied: list[ScheduleEvent] = []
        for update in updates:
            current = self._store.get(update.event_id)
            if current is None:
                continue
            moved = current.moved(
                start_minutes=update.new_start_minutes,
                resource_id=update.new_resource_id,
            )
            self._store[update.event_id] = moved
            applied.append(moved)
        return applied

    def delete(self, event_id: str) -> None:
        self._store.pop(event_id, None)


class SyllabusRepository:
    """Dict-backed store for SyllabusItem instances, keyed by id."""

    def __init__(self) -> None:
        self._store: dict[str, SyllabusItem] = {}

    def add(self, item: SyllabusItem) -> None:
        self._store[item.id] = item

    def list_all(self) -> list[SyllabusItem]:
        return list(self._store.values())


class SelectionRepository:
    """Holds the current selection set; survives drags until cleared."""

    def __init__(self) -> None:
        self._ids: set[str] = set()

    def get(self) -> set[str]:
        return set(self._ids)

    def replace(self, event_ids: Iterable[str]) -> None:
        self._ids = set(event_ids)

    def clear(self) -> None:
        self._ids.clear()


class ConflictReviewRepository:
    """List-backed queue of CPT conflicts flagged for manual review."""

    def __init__(self) -> None:
        self._reviews: list[ConflictReview] = []

    def add(self, review: ConflictReview) -> None:
        self._reviews.append(review)

    def get(self, review_id: str) -> ConflictReview | None:
        for review in self._reviews:
            if review.id == review_id:
                return review
        return None

    def list_pending(self) -> list[ConflictReview]:
        return [r for r in self._reviews if not r.resolved]

    def resolve(self, review_id: str) -> None:
        review = self.get(review_id)
        if review is not None:
            review.resolved = True


# ---------------------------------------------------------------------------
# Seed data: a small training day useful for drag and conflict testing
# ---------------------------------------------------------------------------


def _seed_events(repo: EventRepository) -> None:
    repo.add(
        ScheduleEvent(
            flight_number="BGF1",
            start_minutes="08:00",
            duration_minutes=90,
            resource_id="PC-21 1",
            instructor="FLTLT Smith",
            student="OFFCDT Jones",
        )
    )
    repo.add(
        ScheduleEvent(
            flight_number="BGF2",
            start_minutes="11:00",
            duration_minutes=90,
            resource_id="PC-21 2",
            instructor="FLTLT Smith",
            student="OFFCDT Brown",
        )
    )
    repo.add(
        ScheduleEvent(
            flight_number="BGS1",
            flight_type="Solo",
            start_minutes="11:00",
            duration_minutes=60,
            resource_id="PC-21 3",
            pilot="OFFCDT Jones",
        )
    )
    repo.add(
        ScheduleEvent(
            type="ftd",
            flight_number="BIF1 CPT",
            start_minutes="14:00",
            duration_minutes=60,
            resource_id="CPT 1",
            instructor="SQNLDR Lee",
            student="OFFCDT Brown",
        )
    )
    repo.add(
        ScheduleEvent(
            type="ground",
            flight_number="GS-NAV",
            start_minutes="06:00",
            duration_minutes=60,
            resource_id="Ground 1",
            instructor="SQNLDR Lee",
            attendees=["OFFCDT Jones", "OFFCDT Brown"],
        )
    )


def _seed_syllabus(repo: SyllabusRepository) -> None:
    for code, pre, post in (
        ("BGF1", 60, 30),
        ("BGF2", 60, 30),
        ("BGS1", 45, 30),
        ("BIF1 CPT", 15, 15),
        ("GS-NAV", 0, 0),
    ):
        repo.add(SyllabusItem(id=code, pre_flight_minutes=pre, post_flight_minutes=post))


def create_event_repository() -> EventRepository:
    """Return an EventRepository pre-loaded with sample data."""
    repo = EventRepository()
    _seed_events(repo)
    return repo


def create_syllabus_repository() -> SyllabusRepository:
    """Return a SyllabusRepository pre-loaded with sample buffers."""
    repo = SyllabusRepository()
    _seed_syllabus(repo)
    return repo
