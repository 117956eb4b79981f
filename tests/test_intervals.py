"""Tests for interval overlap primitives."""

import pytest

from flightgrid.domain.models import ScheduleEvent, SyllabusItem
from flightgrid.services.intervals import (
    buffered_overlaps,
    interval_gap,
    overlaps,
    padded_interval,
)


def _make_event(start: int, duration: int = 60, **overrides) -> ScheduleEvent:
    return ScheduleEvent(
        start_minutes=start, duration_minutes=duration, resource_id="PC-21 1", **overrides
    )


NO_BUFFER = SyllabusItem(id="X")


@pytest.mark.parametrize(
    "a_start,b_start,expected",
    [
        (480, 510, True),
        (480, 540, False),  # touching at 09:00
        (480, 420, False),  # touching at 08:00
        (480, 600, False),
        (480, 480, True),
    ],
)
def test_overlap_is_symmetric(a_start, b_start, expected):
    """Overlap gives the same answer either way round."""
    a = _make_event(a_start)
    b = _make_event(b_start)

    assert overlaps(a, b) is expected
    assert overlaps(b, a) is expected


def test_zero_duration_never_overlaps():
    """Zero-length events never overlap, buffered or not."""
    point = _make_event(500, duration=0)
    block = _make_event(480, duration=60)

    assert not overlaps(point, block)
    assert not overlaps(block, point)
    assert not buffered_overlaps(point, SyllabusItem(id="X", post_flight_minutes=60), block, NO_BUFFER)


def test_padded_interval():
    """Buffers widen the interval on both sides."""
    item = SyllabusItem(id="BGF1", pre_flight_minutes=60, post_flight_minutes=30)

    assert padded_interval(_make_event(480, 90), item) == (420, 600)


def test_buffers_only_grow_the_conflict_set():
    """Any raw overlap is still an overlap once buffers are added."""
    padded = SyllabusItem(id="P", pre_flight_minutes=15, post_flight_minutes=20)
    starts = range(360, 660, 5)
    base = _make_event(480)

    for start in starts:
        other = _make_event(start)
        if overlaps(base, other):
            assert buffered_overlaps(base, padded, other, padded)
            assert buffered_overlaps(base, NO_BUFFER, other, padded)


def test_buffer_turns_gap_into_overlap():
    """A debrief buffer closes a 15 minute gap."""
    a = _make_event(480)
    b = _make_event(555)
    debrief = SyllabusItem(id="A", post_flight_minutes=30)

    assert not overlaps(a, b)
    assert not buffered_overlaps(a, NO_BUFFER, b, NO_BUFFER)
    assert buffered_overlaps(a, debrief, b, NO_BUFFER)


def test_interval_gap():
    """Gap is symmetric and negative for overlaps."""
    a = _make_event(480)
    b = _make_event(555)

    assert interval_gap(a, b) == 15
    assert interval_gap(b, a) == 15
    assert interval_gap(a, _make_event(510)) == -30
