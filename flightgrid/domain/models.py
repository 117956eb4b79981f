"""Domain models for the schedule grid engine.

All times are integer minutes since midnight. Float hours (``8.25`` for
08:15) only appear at the edges through ``hours_to_minutes`` and the
``start_time`` / ``end_time`` read-only properties.
"""

from __future__ import annotations

import math
import uuid
from datetime import datetime, timezone
from enum import StrEnum
from typing import Literal

from dateutil import parser as dateutil_parser
from pydantic import BaseModel, Field, field_validator, model_validator

MINUTES_PER_HOUR = 60
MINUTES_PER_DAY = 24 * MINUTES_PER_HOUR


class EventType(StrEnum):
    FLIGHT = "flight"
    FTD = "ftd"
    GROUND = "ground"
    CPT = "cpt"
    DEPLOYMENT = "deployment"
    UNAVAILABILITY = "unavailability"
    OTHER = "other"


class ConflictType(StrEnum):
    TURNAROUND = "turnaround"
    RESOURCE = "resource"
    PERSONNEL = "personnel"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


def hours_to_minutes(hours: float) -> int:
    """Convert float hours (``8.25``) into whole minutes (``495``)."""
    return int(round(hours * MINUTES_PER_HOUR))


def minutes_to_hours(minutes: float) -> float:
    return minutes / MINUTES_PER_HOUR


def clock_to_minutes(raw: str) -> int:
    """Parse a clock string such as ``"08:15"`` or ``"8:15 pm"`` into minutes."""
    parsed = dateutil_parser.parse(raw)
    return parsed.hour * MINUTES_PER_HOUR + parsed.minute


# ---------------------------------------------------------------------------
# Core domain models
# ---------------------------------------------------------------------------


class ScheduleEvent(BaseModel):
    id: str = Field(default_factory=_new_id)
    date: str | None = None
    type: EventType = EventType.FLIGHT
    flight_number: str = ""
    flight_type: str = "Dual"
    start_minutes: int
    duration_minutes: int = Field(ge=0)
    resource_id: str
    instructor: str | None = None
    student: str | None = None
    pilot: str | None = None
    attendees: list[str] | None = None
    group_trainee_ids: list[int | str] | None = None
    callsign: str | None = None
    area: str | None = None

    @field_validator("start_minutes", mode="before")
    @classmethod
    def _parse_clock(cls, value: object) -> object:
        if isinstance(value, str):
            return clock_to_minutes(value)
        return value

    @property
    def end_minutes(self) -> int:
        return self.start_minutes + self.duration_minutes

    @property
    def start_time(self) -> float:
        """Start in float hours from midnight."""
        return minutes_to_hours(self.start_minutes)

    @property
    def end_time(self) -> float:
        return minutes_to_hours(self.end_minutes)

    def moved(
        self, start_minutes: int | None = None, resource_id: str | None = None
    ) -> ScheduleEvent:
        """Return a copy placed at a new start and/or resource."""
        update: dict = {}
        if start_minutes is not None:
            update["start_minutes"] = start_minutes
        if resource_id is not None:
            update["resource_id"] = resource_id
        return self.model_copy(update=update)


class SyllabusItem(BaseModel):
    """Per-event-type briefing buffers, looked up by ``flight_number``."""

    id: str
    code: str = ""
    pre_flight_minutes: int = Field(default=0, ge=0)
    post_flight_minutes: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def _code_defaults_to_id(self) -> SyllabusItem:
        if not self.code:
            self.code = self.id
        return self


class EventUpdate(BaseModel):
    event_id: str
    new_start_minutes: int | None = None
    new_resource_id: str | None = None


class PersonnelConflict(BaseModel):
    candidate: ScheduleEvent
    conflicting_event: ScheduleEvent
    person_name: str


class ConflictReport(BaseModel):
    has_conflict: bool = False
    conflicting_event_id: str | None = None
    conflict_type: ConflictType | None = None
    conflicted_personnel: str | None = None


class CptConflict(BaseModel):
    conflicting_event: ScheduleEvent
    new_event: ScheduleEvent
    conflicted_person: Literal["instructor", "trainee"] = "trainee"
    person_name: str | None = None


class ConflictReview(BaseModel):
    id: str = Field(default_factory=_new_id)
    conflict: CptConflict
    created_at: datetime = Field(default_factory=_utcnow)
    resolved: bool = False


# ---------------------------------------------------------------------------
# Pointer input and grid geometry
# ---------------------------------------------------------------------------


class Pointer(BaseModel):
    """A pointer sample in grid-relative pixels."""

    x: float
    y: float
    button: int = 0
    shift: bool = False
    on_tile: bool = False


class GridGeometry(BaseModel):
    pixels_per_hour: float = Field(default=200, gt=0)
    row_height: float = Field(default=32, gt=0)
    day_start_minutes: int = 0
    day_end_minutes: int = MINUTES_PER_DAY
    snap_minutes: int = Field(default=5, gt=0)
    zoom: float = Field(default=1.0, gt=0)

    def x_of(self, minutes: float) -> float:
        """Left pixel edge of a time, zoom applied."""
        return (
            minutes_to_hours(minutes - self.day_start_minutes)
            * self.pixels_per_hour
            * self.zoom
        )

    def width_of(self, duration_minutes: float) -> float:
        return minutes_to_hours(duration_minutes) * self.pixels_per_hour * self.zoom

    def top_of(self, row_index: int) -> float:
        return row_index * self.row_height

    def minutes_at(self, unzoomed_x: float) -> float:
        """Time under an unzoomed pixel offset from the grid's left edge."""
        return (
            unzoomed_x / self.pixels_per_hour * MINUTES_PER_HOUR
            + self.day_start_minutes
        )

    def row_at(self, y: float) -> int:
        return math.floor(y / self.row_height)

    def snap(self, minutes: float) -> int:
        """Round half-up to the nearest snap quantum."""
        q = self.snap_minutes
        return int(math.floor(minutes / q + 0.5)) * q

    def place(self, minutes: float, duration_minutes: int) -> int:
        """Clamp a start into the day window, then snap it.

        A snapped start never pushes the event past the day end; when the
        nearest quantum would, the next quantum down is used instead.
        """
        latest = self.day_end_minutes - duration_minutes
        if minutes < self.day_start_minutes:
            minutes = self.day_start_minutes
        if minutes > latest:
            minutes = latest
        snapped = self.snap(minutes)
        if snapped > latest:
            snapped = math.floor(latest / self.snap_minutes) * self.snap_minutes
        if snapped < self.day_start_minutes:
            snapped = math.ceil(self.day_start_minutes / self.snap_minutes) * self.snap_minutes
        return snapped


# ---------------------------------------------------------------------------
# Drag session state (tagged union)
# ---------------------------------------------------------------------------


class InitialPosition(BaseModel):
    start_minutes: int
    row_index: int


class Idle(BaseModel):
    state: Literal["idle"] = "idle"


class Dragging(BaseModel):
    state: Literal["dragging"] = "dragging"
    main_event_id: str
    x_offset: float
    y_offset: float
    initial_positions: dict[str, InitialPosition]
    preview: dict[str, ScheduleEvent] = Field(default_factory=dict)
    updates: list[EventUpdate] = Field(default_factory=list)
    personnel_conflict: PersonnelConflict | None = None
    resource_conflict_id: str | None = None
    pending_cpt_conflict: CptConflict | None = None


DragState = Idle | Dragging


class DragFrame(BaseModel):
    """What one pointer-move produced: the whole batch plus highlight state."""

    updates: list[EventUpdate]
    personnel_conflict: PersonnelConflict | None = None
    resource_conflict_id: str | None = None
    cpt_conflict: CptConflict | None = None
    conflict_report: ConflictReport | None = None


class DragOutcome(BaseModel):
    updates: list[EventUpdate] = Field(default_factory=list)
    cpt_conflict: CptConflict | None = None


# ---------------------------------------------------------------------------
# Request / Response DTOs
# ---------------------------------------------------------------------------


class PersonnelConflictRequest(BaseModel):
    candidates: list[ScheduleEvent]
    existing: list[ScheduleEvent]


class ResourceConflictRequest(BaseModel):
    candidate: ScheduleEvent
    new_resource_id: str
    new_start_minutes: int
    existing: list[ScheduleEvent]
    exclude_ids: list[str] = Field(default_factory=list)


class DetectConflictRequest(BaseModel):
    event: ScheduleEvent
    others: list[ScheduleEvent]


class DragBeginRequest(BaseModel):
    event_id: str
    pointer: Pointer
    date: str | None = None
    zoom: float = Field(default=1.0, gt=0)
    multi_select: bool = False


class MarqueeBeginRequest(BaseModel):
    pointer: Pointer
    date: str | None = None
    zoom: float = Field(default=1.0, gt=0)
    multi_select: bool = True
