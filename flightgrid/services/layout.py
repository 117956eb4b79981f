"""Row ordering for the day grid and the row <-> resource mapping strategies.

The main grid has a fixed shape: 24 airframes, the duty supervisor, a
standby block of at least four rows, five FTDs, four CPTs, then one row per
ground resource in use that day. Person-row views (instructor and trainee
schedules) instead give every person a row and only allow time moves.
"""

from __future__ import annotations

import re
from typing import Callable, Iterable, Protocol

from flightgrid.domain.models import ScheduleEvent

AIRFRAME_COUNT = 24
MIN_STANDBY_ROWS = 4
FTD_COUNT = 5
CPT_COUNT = 4

DUTY_SUP = "Duty Sup"
STANDBY_PREFIXES = ("STBY", "BNF-STBY")
GROUND_PREFIX = "Ground"

_CATEGORY_PREFIXES = (
    ("PC-21", "PC-21"),
    ("Deployed", "PC-21"),
    ("STBY", "STBY"),
    ("BNF-STBY", "STBY"),
    ("FTD", "FTD"),
    ("CPT", "CPT"),
    (GROUND_PREFIX, "Ground"),
)


def _natural_key(resource_id: str) -> tuple:
    return tuple(
        int(part) if part.isdigit() else part for part in re.split(r"(\d+)", resource_id)
    )


def _distinct(resource_ids: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(resource_ids))


def _standby_rows(events: list[ScheduleEvent]) -> list[str]:
    rows = _distinct(
        e.resource_id for e in events if e.resource_id.startswith(STANDBY_PREFIXES)
    )
    n = 1
    while len(rows) < MIN_STANDBY_ROWS:
        filler = f"STBY {n}"
        if filler not in rows:
            rows.append(filler)
        n += 1
    return sorted(rows, key=_natural_key)


def build_resource_rows(events: list[ScheduleEvent]) -> list[str]:
    """Ordered resource ids for one day's grid.

    Standby rows in use keep their ids and are padded with ``STBY n`` rows up
    to the minimum; ground rows only exist for ground resources in use.
    """
    rows = [f"PC-21 {i}" for i in range(1, AIRFRAME_COUNT + 1)]
    rows.append(DUTY_SUP)
    rows.extend(_standby_rows(events))
    rows.extend(f"FTD {i}" for i in range(1, FTD_COUNT + 1))
    rows.extend(f"CPT {i}" for i in range(1, CPT_COUNT + 1))
    ground = _distinct(
        e.resource_id for e in events if e.resource_id.startswith(GROUND_PREFIX)
    )
    rows.extend(sorted(ground, key=_natural_key))
    return rows


def category_of(resource_id: str) -> str:
    if resource_id == DUTY_SUP:
        return DUTY_SUP
    if resource_id == "TWR DI":
        return "TWR DI"
    for prefix, category in _CATEGORY_PREFIXES:
        if resource_id.startswith(prefix):
            return category
    return "Other"


def category_boundaries(rows: list[str]) -> list[int]:
    """Row indices at which a new resource category begins (row 0 excluded)."""
    return [
        i
        for i in range(1, len(rows))
        if category_of(rows[i]) != category_of(rows[i - 1])
    ]


# ---------------------------------------------------------------------------
# Row mapping strategies
# ---------------------------------------------------------------------------


class RowLayout(Protocol):
    rows: list[str]
    locks_rows: bool

    def row_of(self, event: ScheduleEvent) -> int | None: ...

    def resource_at(self, row_index: int) -> str: ...


class ResourceRowLayout:
    """One row per resource id; dragging vertically changes the resource."""

    locks_rows = False

    def __init__(self, rows: Iterable[str]) -> None:
        self.rows = list(rows)

    @classmethod
    def for_day(cls, events: list[ScheduleEvent]) -> ResourceRowLayout:
        return cls(build_resource_rows(events))

    def row_of(self, event: ScheduleEvent) -> int | None:
        try:
            return self.rows.index(event.resource_id)
        except ValueError:
            return None

    def resource_at(self, row_index: int) -> str:
        return self.rows[row_index]


class PersonRowLayout:
    """One row per person; events keep their resource and move in time only."""

    locks_rows = True

    def __init__(
        self, people: Iterable[str], key: Callable[[ScheduleEvent], str | None]
    ) -> None:
        self.rows = list(people)
        self._key = key

    def row_of(self, event: ScheduleEvent) -> int | None:
        name = self._key(event)
        if not name or name not in self.rows:
            return None
        return self.rows.index(name)

    def resource_at(self, row_index: int) -> str:
        return self.rows[row_index]


def instructor_layout(instructors: Iterable[str]) -> PersonRowLayout:
    return PersonRowLayout(instructors, key=lambda e: e.instructor)


def trainee_layout(trainees: Iterable[str]) -> PersonRowLayout:
    return PersonRowLayout(trainees, key=lambda e: e.student or e.pilot)
