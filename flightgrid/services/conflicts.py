"""Service for detecting scheduling conflicts between events.

Two independent checks run against a proposed placement:

* personnel: the same person booked on two events whose buffered intervals
  (pre-flight brief .. post-flight debrief) overlap;
* resource: two events on the same row whose raw intervals overlap.

Both are first-match: the interactive grid only highlights one problem at a
time.
"""

from __future__ import annotations

from typing import Callable, Iterable

from flightgrid.domain.models import (
    ConflictReport,
    ConflictType,
    CptConflict,
    EventType,
    PersonnelConflict,
    ScheduleEvent,
    SyllabusItem,
)
from flightgrid.logging import get_logger
from flightgrid.services.intervals import buffered_overlaps, interval_gap, overlaps
from flightgrid.services.layout import STANDBY_PREFIXES
from flightgrid.services.personnel import PersonnelRule, personnel_of

log = get_logger(__name__)

ConflictDetector = Callable[[ScheduleEvent, list[ScheduleEvent]], ConflictReport]


class SyllabusLookup:
    """Syllabus items indexed by both ``id`` and ``code``."""

    def __init__(self, items: Iterable[SyllabusItem]) -> None:
        self._by_key: dict[str, SyllabusItem] = {}
        for item in items:
            self._by_key.setdefault(item.id, item)
            self._by_key.setdefault(item.code, item)

    def get(self, flight_number: str) -> SyllabusItem | None:
        return self._by_key.get(flight_number)


def find_personnel_conflict(
    candidates: list[ScheduleEvent],
    existing: list[ScheduleEvent],
    syllabus: SyllabusLookup,
    personnel: PersonnelRule = personnel_of,
) -> PersonnelConflict | None:
    """Return the first existing event that double-books someone on a candidate.

    Candidates and existing events are walked in input order. Events whose
    ``flight_number`` has no syllabus entry are skipped on either side, as
    are existing events that are themselves candidates. The reported person
    is the first of the candidate's personnel who is also on the existing
    event.
    """
    candidate_ids = {c.id for c in candidates}
    for candidate in candidates:
        candidate_item = syllabus.get(candidate.flight_number)
        if candidate_item is None:
            continue
        candidate_people = personnel(candidate)

        for other in existing:
            if other.id in candidate_ids:
                continue
            other_item = syllabus.get(other.flight_number)
            if other_item is None:
                continue
            if not buffered_overlaps(candidate, candidate_item, other, other_item):
                continue

            other_people = set(personnel(other))
            shared = next((p for p in candidate_people if p in other_people), None)
            if shared is not None:
                log.debug(
                    "conflict.personnel",
                    event_id=candidate.id,
                    conflicting_event_id=other.id,
                    person=shared,
                )
                return PersonnelConflict(
                    candidate=candidate, conflicting_event=other, person_name=shared
                )
    return None


def find_resource_conflict(
    candidate: ScheduleEvent,
    new_resource_id: str,
    new_start_minutes: int,
    existing: list[ScheduleEvent],
    exclude_ids: Iterable[str] = (),
) -> ScheduleEvent | None:
    """Return the first event already occupying the proposed row and time.

    No briefing buffers apply: a resource is only double-booked when the
    events themselves overlap. The candidate and ``exclude_ids`` (the rest of
    its drag group) are never reported.
    """
    proposed = candidate.moved(start_minutes=new_start_minutes, resource_id=new_resource_id)
    excluded = {candidate.id, *exclude_ids}
    for other in existing:
        if other.id in excluded or other.resource_id != new_resource_id:
            continue
        if overlaps(proposed, other):
            return other
    return None


def is_cpt_event(event: ScheduleEvent) -> bool:
    return "CPT" in event.flight_number


def cpt_conflict_from(conflict: PersonnelConflict) -> CptConflict:
    """Escalation descriptor for a CPT event that double-books a person."""
    return CptConflict(
        conflicting_event=conflict.conflicting_event,
        new_event=conflict.candidate,
        conflicted_person="trainee",
        person_name=conflict.person_name,
    )


class UnifiedConflictDetector:
    """Classifies the first conflict of one event against the rest of the day.

    Priority: personnel (buffered), then resource (raw overlap on the same
    row), then turnaround (same row, gap shorter than the event type's
    turnaround). Standby rows carry no turnaround.
    """

    def __init__(
        self,
        syllabus: SyllabusLookup,
        flight_turnaround_minutes: int = 30,
        ftd_turnaround_minutes: int = 15,
        personnel: PersonnelRule = personnel_of,
    ) -> None:
        self.syllabus = syllabus
        self.flight_turnaround_minutes = flight_turnaround_minutes
        self.ftd_turnaround_minutes = ftd_turnaround_minutes
        self.personnel = personnel

    def turnaround_for(self, event: ScheduleEvent) -> int:
        if event.resource_id.startswith(STANDBY_PREFIXES):
            return 0
        if event.type == EventType.FLIGHT:
            return self.flight_turnaround_minutes
        if event.type == EventType.FTD:
            return self.ftd_turnaround_minutes
        return 0

    def __call__(
        self, event: ScheduleEvent, others: list[ScheduleEvent]
    ) -> ConflictReport:
        personnel_conflict = find_personnel_conflict(
            [event], others, self.syllabus, self.personnel
        )
        if personnel_conflict is not None:
            return ConflictReport(
                has_conflict=True,
                conflicting_event_id=personnel_conflict.conflicting_event.id,
                conflict_type=ConflictType.PERSONNEL,
                conflicted_personnel=personnel_conflict.person_name,
            )

        same_row = [
            o for o in others if o.id != event.id and o.resource_id == event.resource_id
        ]
        for other in same_row:
            if overlaps(event, other):
                return ConflictReport(
                    has_conflict=True,
                    conflicting_event_id=other.id,
                    conflict_type=ConflictType.RESOURCE,
                )

        turnaround = self.turnaround_for(event)
        if turnaround > 0 and event.duration_minutes > 0:
            for other in same_row:
                if other.duration_minutes <= 0:
                    continue
                if 0 <= interval_gap(event, other) < turnaround:
                    return ConflictReport(
                        has_conflict=True,
                        conflicting_event_id=other.id,
                        conflict_type=ConflictType.TURNAROUND,
                    )

        return ConflictReport()
