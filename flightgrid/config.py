"""Grid engine settings loaded from environment variables.

Every field can be overridden with a ``FLIGHTGRID_`` prefixed variable or a
``.env`` file in the working directory.
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings

from flightgrid.domain.models import GridGeometry


class GridSettings(BaseSettings):
    # Pixel geometry of the day grid
    pixels_per_hour: float = Field(default=200, description="Unzoomed tile width of one hour")
    row_height: float = Field(default=32, description="Height of one resource row in pixels")

    # Scheduling day window and drag quantum
    day_start_minutes: int = Field(default=0, description="First minute of the grid")
    day_end_minutes: int = Field(default=24 * 60, description="Last minute of the grid")
    snap_minutes: int = Field(default=5, description="Drag snap quantum")

    # Turnaround between consecutive events on one resource
    flight_turnaround_minutes: int = Field(default=30, description="Aircraft turnaround")
    ftd_turnaround_minutes: int = Field(default=15, description="Simulator turnaround")

    # "personnel": buffered personnel check only. "unified": classify
    # personnel, resource and turnaround conflicts in one pass.
    conflict_mode: Literal["personnel", "unified"] = Field(default="personnel")

    # Logging
    log_json: bool = Field(default=False, description="Output logs in JSON format")
    log_level: str = Field(default="INFO", description="Log level")

    model_config = {
        "env_prefix": "FLIGHTGRID_",
        "case_sensitive": False,
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    def geometry(self, zoom: float = 1.0) -> GridGeometry:
        return GridGeometry(
            pixels_per_hour=self.pixels_per_hour,
            row_height=self.row_height,
            day_start_minutes=self.day_start_minutes,
            day_end_minutes=self.day_end_minutes,
            snap_minutes=self.snap_minutes,
            zoom=zoom,
        )


_settings: GridSettings | None = None


def get_settings() -> GridSettings:
    """Return the process-wide settings singleton."""
    global _settings
    if _settings is None:
        _settings = GridSettings()
    return _settings
