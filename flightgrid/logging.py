"""structlog setup for the grid service.

Every line carries ``service``; while a grid interaction is open the
controller's view, day and zoom are bound too, so drag and selection logs
from the engine modules can be told apart without passing context around.
"""

import logging
import sys

import structlog

SERVICE_NAME = "flightgrid"


def setup_logging(json_output: bool = False, log_level: str = "INFO") -> None:
    """Configure structlog and route stdlib logging (uvicorn, fastapi) to stdout.

    Args:
        json_output: JSON lines when True, coloured console output otherwise.
        log_level: Minimum level name, e.g. ``"DEBUG"``.
    """
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info if json_output else structlog.dev.set_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    root = logging.getLogger()
    root.handlers = [logging.StreamHandler(sys.stdout)]
    root.setLevel(numeric_level)

    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(service=SERVICE_NAME)


def bind_grid_context(view: str, date: str | None, zoom: float) -> None:
    """Tag subsequent log lines with the grid interaction they belong to."""
    structlog.contextvars.unbind_contextvars("view", "date", "zoom")
    structlog.contextvars.bind_contextvars(view=view, date=date, zoom=zoom)


def get_logger(name: str) -> structlog.BoundLogger:
    return structlog.get_logger(name)
