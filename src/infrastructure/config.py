"""Runtime configuration read from the environment.

Variables:
    LOS_STEP_CELLS         Ray march step as a multiple of the cell size (1.0)
    LOS_REFINE             Interpolate crossings between samples ("1")
    LOS_MAX_VIEW_DISTANCE  Default search radius in grid units (5000)
    LOS_LOG_LEVEL          Level for the ``domain`` and ``infrastructure`` loggers

Nothing in the library reads these settings implicitly. Callers build a
calculator from them::

    settings = Settings.from_env()
    configure_logging(settings)
    calculator = LineOfSightCalculator(settings.line_of_sight_settings())
    result = calculator.intersect(observer, grid, settings.max_view_distance)
"""

from __future__ import annotations

import logging
import logging.config
import os

from pydantic import BaseModel, ConfigDict, Field

from domain.terrain.value_objects import LineOfSightSettings

_TRUTHY = {"1", "true", "True", "yes"}


class Settings(BaseModel):
    step_cells: float = Field(default=1.0, gt=0)
    refine: bool = True
    max_view_distance: float = Field(default=5000.0, gt=0)
    log_level: str = "WARNING"

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            step_cells=float(os.getenv("LOS_STEP_CELLS", "1.0")),
            refine=os.getenv("LOS_REFINE", "1") in _TRUTHY,
            max_view_distance=float(os.getenv("LOS_MAX_VIEW_DISTANCE", "5000")),
            log_level=os.getenv("LOS_LOG_LEVEL", "WARNING").upper(),
        )

    def line_of_sight_settings(self) -> LineOfSightSettings:
        return LineOfSightSettings(step_cells=self.step_cells, refine=self.refine)


def configure_logging(settings: Settings) -> None:
    """Route package loggers to stderr at the configured level."""
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "standard": {
                    "format": "%(asctime)s %(levelname)s %(name)s: %(message)s"
                }
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "standard",
                }
            },
            "loggers": {
                name: {
                    "handlers": ["console"],
                    "level": settings.log_level,
                    "propagate": False,
                }
                for name in ("domain", "infrastructure")
            },
        }
    )
