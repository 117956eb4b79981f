"""Interval overlap primitives for schedule events.

Overlap rule: ``a.start < b.end AND a.end > b.start``. Intervals are
half-open, so events that touch at an endpoint do not overlap. An event with
a non-positive duration never overlaps anything.
"""

from __future__ import annotations

from flightgrid.domain.models import ScheduleEvent, SyllabusItem


def _overlap(a_start: int, a_end: int, b_start: int, b_end: int) -> bool:
    return a_start < b_end and a_end > b_start


def overlaps(a: ScheduleEvent, b: ScheduleEvent) -> bool:
    """Raw time overlap, no briefing buffers."""
    if a.duration_minutes <= 0 or b.duration_minutes <= 0:
        return False
    return _overlap(a.start_minutes, a.end_minutes, b.start_minutes, b.end_minutes)


def padded_interval(event: ScheduleEvent, item: SyllabusItem) -> tuple[int, int]:
    """The event's interval widened by its pre- and post-flight buffers."""
    return (
        event.start_minutes - item.pre_flight_minutes,
        event.end_minutes + item.post_flight_minutes,
    )


def buffered_overlaps(
    a: ScheduleEvent,
    a_item: SyllabusItem,
    b: ScheduleEvent,
    b_item: SyllabusItem,
) -> bool:
    """Overlap of both events once padded with their syllabus buffers."""
    if a.duration_minutes <= 0 or b.duration_minutes <= 0:
        return False
    return _overlap(*padded_interval(a, a_item), *padded_interval(b, b_item))


def interval_gap(a: ScheduleEvent, b: ScheduleEvent) -> int:
    """Minutes between the earlier event's end and the later one's start.

    Negative when the two overlap.
    """
    first, second = (a, b) if a.start_minutes <= b.start_minutes else (b, a)
    return second.start_minutes - first.end_minutes
