"""Tests for resource row ordering and row mapping strategies."""

from flightgrid.domain.models import ScheduleEvent
from flightgrid.services.layout import (
    ResourceRowLayout,
    build_resource_rows,
    category_boundaries,
    category_of,
    instructor_layout,
    trainee_layout,
)


def _make_event(resource_id: str, **overrides) -> ScheduleEvent:
    return ScheduleEvent(
        start_minutes=480, duration_minutes=60, resource_id=resource_id, **overrides
    )


def test_empty_day_has_fixed_rows():
    """Airframes, duty sup, four standby, FTDs and CPTs."""
    rows = build_resource_rows([])

    assert len(rows) == 24 + 1 + 4 + 5 + 4
    assert rows[0] == "PC-21 1"
    assert rows[23] == "PC-21 24"
    assert rows[24] == "Duty Sup"
    assert rows[25:29] == ["STBY 1", "STBY 2", "STBY 3", "STBY 4"]
    assert rows[29:34] == [f"FTD {i}" for i in range(1, 6)]
    assert rows[34:] == [f"CPT {i}" for i in range(1, 5)]


def test_standby_rows_grow_beyond_minimum():
    """Six standby ids in use give six standby rows."""
    events = [_make_event(f"STBY {i}") for i in (1, 2, 3, 4, 5, 6)]

    rows = build_resource_rows(events)

    standby = [r for r in rows if category_of(r) == "STBY"]
    assert standby == [f"STBY {i}" for i in range(1, 7)]


def test_standby_rows_keep_used_ids_and_pad():
    """Used standby ids are kept and padded to four."""
    rows = build_resource_rows([_make_event("STBY 3"), _make_event("BNF-STBY 1")])

    standby = rows[25:29]
    assert standby == ["BNF-STBY 1", "STBY 1", "STBY 2", "STBY 3"]


def test_ground_rows_only_when_used():
    """Ground rows appear once each, naturally sorted."""
    events = [_make_event("Ground 10"), _make_event("Ground 2"), _make_event("Ground 2")]

    rows = build_resource_rows(events)

    assert rows[-2:] == ["Ground 2", "Ground 10"]
    assert len(rows) == 38 + 2


def test_category_boundaries_on_empty_day():
    """Boundaries fall where the category changes."""
    assert category_boundaries(build_resource_rows([])) == [24, 25, 29, 34]


def test_resource_layout_maps_rows():
    """Resource rows map both ways; unknown ids have no row."""
    layout = ResourceRowLayout(["PC-21 1", "PC-21 2"])

    assert layout.row_of(_make_event("PC-21 2")) == 1
    assert layout.row_of(_make_event("Mystery")) is None
    assert layout.resource_at(0) == "PC-21 1"
    assert not layout.locks_rows


def test_person_layouts_lock_rows():
    """Person views lock rows and key on instructor or trainee."""
    instructors = instructor_layout(["Smith", "Lee"])
    trainees = trainee_layout(["Jones", "Brown"])
    dual = _make_event("PC-21 1", instructor="Lee", student="Jones")
    solo = _make_event("PC-21 2", flight_type="Solo", pilot="Brown")

    assert instructors.locks_rows and trainees.locks_rows
    assert instructors.row_of(dual) == 1
    assert instructors.row_of(solo) is None
    assert trainees.row_of(dual) == 0
    assert trainees.row_of(solo) == 1
