"""Exceptions raised at the service and HTTP seams.

The drag and conflict engine itself never raises for bad input; it clamps,
skips or stays idle. These errors cover lookups and out-of-order requests
coming through the API.
"""


class SchedulingError(Exception):
    """Base exception for the grid service."""

    pass


class UnknownEventError(SchedulingError):
    """An event id that is not in the event store."""

    def __init__(self, event_id: str) -> None:
        super().__init__(f"Event not found: {event_id}")
        self.event_id = event_id


class InvalidStateError(SchedulingError):
    """An interaction step requested while its session is not active.

    Examples: a drag move with no drag in progress, a marquee end with no
    marquee started.
    """

    pass
