"""Tests for the conflict-detection service."""

from flightgrid.domain.models import ConflictType, ScheduleEvent, SyllabusItem
from flightgrid.services.conflicts import (
    SyllabusLookup,
    UnifiedConflictDetector,
    cpt_conflict_from,
    find_personnel_conflict,
    find_resource_conflict,
    is_cpt_event,
)


def _make_event(**overrides) -> ScheduleEvent:
    defaults = dict(
        flight_number="BGF1",
        start_minutes=480,
        duration_minutes=60,
        resource_id="PC-21 1",
        instructor="Smith",
    )
    defaults.update(overrides)
    return ScheduleEvent(**defaults)


def _syllabus(*items: SyllabusItem) -> SyllabusLookup:
    return SyllabusLookup(items or [SyllabusItem(id="BGF1")])


# ---------------------------------------------------------------------------
# Personnel conflicts
# ---------------------------------------------------------------------------


def test_simple_personnel_conflict():
    """Same instructor on 08:00-09:00 and 08:30-09:30 is a conflict."""
    a = _make_event(id="A", start_minutes=480)
    b = _make_event(id="B", start_minutes=510, resource_id="PC-21 2")

    conflict = find_personnel_conflict([a], [b], _syllabus())

    assert conflict is not None
    assert conflict.conflicting_event.id == "B"
    assert conflict.person_name == "Smith"
    assert conflict.candidate.id == "A"


def test_buffer_induced_conflict():
    """A 30 min debrief after 09:00 collides with the same instructor at 09:15."""
    syllabus = _syllabus(
        SyllabusItem(id="BGF1", post_flight_minutes=30),
        SyllabusItem(id="BGF2"),
    )
    a = _make_event(id="A", start_minutes=480, duration_minutes=60)
    b = _make_event(id="B", flight_number="BGF2", start_minutes=555, duration_minutes=60)

    conflict = find_personnel_conflict([a], [b], syllabus)

    assert conflict is not None
    assert conflict.conflicting_event.id == "B"


def test_no_conflict_without_shared_person():
    """Overlapping events with different crews are fine."""
    a = _make_event(id="A", instructor="Smith", student="Jones")
    b = _make_event(id="B", instructor="Lee", student="Brown")

    assert find_personnel_conflict([a], [b], _syllabus()) is None


def test_no_conflict_when_buffers_only_touch():
    """Padded intervals that meet exactly at an endpoint do not conflict."""
    syllabus = _syllabus(SyllabusItem(id="BGF1", pre_flight_minutes=15, post_flight_minutes=15))
    a = _make_event(id="A", start_minutes=480, duration_minutes=60)  # padded 465-555
    b = _make_event(id="B", start_minutes=570, duration_minutes=60)  # padded 555-645

    assert find_personnel_conflict([a], [b], syllabus) is None


def test_missing_syllabus_entry_never_conflicts():
    """Unknown event types are skipped on either side."""
    a = _make_event(id="A", flight_number="UNKNOWN")
    b = _make_event(id="B", start_minutes=510)
    c = _make_event(id="C", start_minutes=510, flight_number="ALSO-UNKNOWN")

    assert find_personnel_conflict([a], [b], _syllabus()) is None
    assert find_personnel_conflict([b], [c], _syllabus()) is None


def test_existing_events_that_are_candidates_are_skipped():
    """A drag group never conflicts with itself."""
    a = _make_event(id="A")
    b = _make_event(id="B", start_minutes=510)

    assert find_personnel_conflict([a, b], [a, b], _syllabus()) is None


def test_first_match_is_deterministic():
    """With several conflicts, the first existing event in input order wins."""
    a = _make_event(id="A", student="Jones")
    first = _make_event(id="first", instructor="Lee", student="Jones", start_minutes=500)
    second = _make_event(id="second", start_minutes=490)

    results = {
        (c.conflicting_event.id, c.person_name)
        for c in (
            find_personnel_conflict([a], [first, second], _syllabus()) for _ in range(5)
        )
    }

    assert results == {("first", "Jones")}


def test_person_name_follows_candidate_personnel_order():
    """Instructor comes before student in a dual event's personnel."""
    a = _make_event(id="A", instructor="Smith", student="Jones")
    b = _make_event(id="B", instructor="Jones", student="Smith", start_minutes=500)

    conflict = find_personnel_conflict([a], [b], _syllabus())

    assert conflict.person_name == "Smith"


def test_attendee_conflict_with_ground_event():
    """Ground school attendees count as personnel."""
    syllabus = _syllabus(SyllabusItem(id="BGF1"), SyllabusItem(id="GS-NAV"))
    flight = _make_event(id="F", instructor="Smith", student="Jones")
    ground = _make_event(
        id="G",
        flight_number="GS-NAV",
        type="ground",
        resource_id="Ground 1",
        instructor="Lee",
        attendees=["Brown", "Jones"],
        start_minutes=500,
    )

    conflict = find_personnel_conflict([flight], [ground], syllabus)

    assert conflict.person_name == "Jones"


def test_syllabus_lookup_by_code():
    """Syllabus items resolve by id or by code."""
    lookup = SyllabusLookup([SyllabusItem(id="item-1", code="BGF1", post_flight_minutes=10)])

    assert lookup.get("BGF1").id == "item-1"
    assert lookup.get("item-1").code == "BGF1"
    assert lookup.get("nope") is None


# ---------------------------------------------------------------------------
# Resource conflicts
# ---------------------------------------------------------------------------


def test_resource_conflict_on_same_row():
    """An overlapping event on the target row is returned."""
    a = _make_event(id="A", resource_id="PC-21 1", start_minutes=480)
    b = _make_event(id="B", resource_id="PC-21 2", start_minutes=540, instructor="Lee")

    hit = find_resource_conflict(a, "PC-21 2", 510, [a, b])

    assert hit is not None and hit.id == "B"


def test_resource_conflict_ignores_buffers():
    """Adjacent bookings on one airframe are fine regardless of briefing time."""
    a = _make_event(id="A", start_minutes=480)
    b = _make_event(id="B", start_minutes=540, instructor="Lee")

    assert find_resource_conflict(a, "PC-21 1", 480, [b]) is None


def test_resource_conflict_excludes_drag_group():
    """Events in the drag group are never resource conflicts."""
    a = _make_event(id="A")
    b = _make_event(id="B", resource_id="PC-21 2")

    assert find_resource_conflict(a, "PC-21 2", 480, [b], exclude_ids=["B"]) is None


def test_resource_conflict_other_row_is_free():
    """Overlap on a different row is not a resource conflict."""
    a = _make_event(id="A")
    b = _make_event(id="B", resource_id="PC-21 2")

    assert find_resource_conflict(a, "PC-21 3", 480, [b]) is None


# ---------------------------------------------------------------------------
# Unified detector and CPT escalation
# ---------------------------------------------------------------------------


def test_unified_detector_prefers_personnel():
    """Personnel wins over resource when both apply."""
    event = _make_event(id="A")
    same_person_same_row = _make_event(id="B", start_minutes=500)

    report = UnifiedConflictDetector(_syllabus())(event, [same_person_same_row])

    assert report.has_conflict
    assert report.conflict_type == ConflictType.PERSONNEL
    assert report.conflicting_event_id == "B"
    assert report.conflicted_personnel == "Smith"


def test_unified_detector_resource():
    """Raw overlap on the same row with a different crew."""
    event = _make_event(id="A")
    other = _make_event(id="B", start_minutes=500, instructor="Lee")

    report = UnifiedConflictDetector(_syllabus())(event, [other])

    assert report.conflict_type == ConflictType.RESOURCE
    assert report.conflicted_personnel is None


def test_unified_detector_turnaround():
    """A flight landing 10 minutes before the next one on the same airframe."""
    event = _make_event(id="A", start_minutes=480, duration_minutes=60)
    other = _make_event(id="B", start_minutes=550, instructor="Lee")

    detector = UnifiedConflictDetector(_syllabus(), flight_turnaround_minutes=30)
    report = detector(event, [other])

    assert report.conflict_type == ConflictType.TURNAROUND
    assert report.conflicting_event_id == "B"


def test_unified_detector_turnaround_satisfied():
    """A 30 minute gap meets the flight turnaround."""
    event = _make_event(id="A", start_minutes=480, duration_minutes=60)
    other = _make_event(id="B", start_minutes=570, instructor="Lee")

    report = UnifiedConflictDetector(_syllabus(), flight_turnaround_minutes=30)(event, [other])

    assert not report.has_conflict
    assert report.conflict_type is None


def test_standby_rows_have_no_turnaround():
    """Standby rows skip the turnaround check."""
    event = _make_event(id="A", resource_id="STBY 1", start_minutes=480)
    other = _make_event(id="B", resource_id="STBY 1", start_minutes=545, instructor="Lee")

    report = UnifiedConflictDetector(_syllabus())(event, [other])

    assert not report.has_conflict


def test_cpt_conflict_descriptor():
    """The escalation names both events and the person."""
    cpt = _make_event(id="C", flight_number="BIF1 CPT", resource_id="CPT 1")
    other = _make_event(id="B", start_minutes=500)

    conflict = find_personnel_conflict(
        [cpt], [other], _syllabus(SyllabusItem(id="BIF1 CPT"), SyllabusItem(id="BGF1"))
    )
    descriptor = cpt_conflict_from(conflict)

    assert is_cpt_event(cpt)
    assert not is_cpt_event(other)
    assert descriptor.new_event.id == "C"
    assert descriptor.conflicting_event.id == "B"
    assert descriptor.conflicted_person == "trainee"
    assert descriptor.person_name == "Smith"
