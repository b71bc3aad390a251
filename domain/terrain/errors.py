"""Terrain Bounded Context - Error Hierarchy.

Custom exceptions for terrain operations.

Ingestion errors abort construction of a TerrainGrid. Sampling errors are
raised per query point. Line-of-sight errors abort a single query; the grid
stays valid for later queries.
"""

from __future__ import annotations

import enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from domain.terrain.value_objects import GridParameters


class TerrainError(Exception):
    """Base error for terrain operations."""


# ---------------------------------------------------------------------------
# Ingestion Errors
# ---------------------------------------------------------------------------
class RasterFormatError(TerrainError):
    """Raster source violates the expected layout or holds unparsable values.

    Attributes:
        line_number: 1-based line of the offending input (None if unknown)
        field: Header field or data column involved (None if unknown)
    """

    def __init__(
        self,
        message: str,
        *,
        line_number: int | None = None,
        field: str | None = None,
    ) -> None:
        self.line_number = line_number
        self.field = field
        location = ""
        if line_number is not None:
            location = f"line {line_number}"
            if field is not None:
                location += f" ({field})"
            location += ": "
        super().__init__(f"{location}{message}")


class InvalidGeotransformError(TerrainError):
    """Raster has a rotated, non-square, or invalid geotransform."""


class InsufficientMemoryError(TerrainError):
    """Operation requires more memory than allowed or available."""


class MissingCRSError(TerrainError):
    """Grid has no CRS, so geographic coordinates cannot be projected onto it."""


# ---------------------------------------------------------------------------
# Sampling Errors
# ---------------------------------------------------------------------------
class PointOutOfBoundsError(TerrainError):
    """Point is outside the terrain grid extent.

    Attributes:
        easting: X coordinate of the offending point
        northing: Y coordinate of the offending point
        params: The grid's GridParameters
    """

    def __init__(
        self, easting: float, northing: float, params: "GridParameters"
    ) -> None:
        self.easting = easting
        self.northing = northing
        self.params = params
        super().__init__(
            f"Point ({easting:.3f}, {northing:.3f}) outside grid "
            f"[x: {params.xll_corner:.3f} to {params.x_max:.3f}, "
            f"y: {params.yll_corner:.3f} to {params.y_max:.3f}]"
        )


class NoDataEncounteredError(TerrainError):
    """A grid cell contributing to the sample holds the no-data sentinel."""

    def __init__(self, easting: float, northing: float) -> None:
        self.easting = easting
        self.northing = northing
        super().__init__(f"No data at ({easting:.3f}, {northing:.3f})")


# ---------------------------------------------------------------------------
# Line-of-Sight Errors
# ---------------------------------------------------------------------------
class IntersectionFailure(enum.Enum):
    """Discriminant carried by every IntersectionError."""

    INVALID_OBSERVER = "invalid_observer"
    OBSERVER_OUT_OF_BOUNDS = "observer_out_of_bounds"
    OBSERVER_NO_DATA = "observer_no_data"
    NO_INTERSECTION = "no_intersection"


class IntersectionError(TerrainError):
    """Line-of-sight computation failed.

    Callers may catch the class or match on ``kind``.
    """

    def __init__(self, message: str, kind: IntersectionFailure) -> None:
        self.kind = kind
        super().__init__(message)


class NoIntersectionError(IntersectionError):
    """Ray met no terrain within the maximum view distance.

    This is an expected negative result, not a defect.

    Attributes:
        max_view_distance: Distance limit of the search
        searched_distance: Last ray distance that was sampled
        left_grid: True if the search ended because the ray left the grid
    """

    def __init__(
        self,
        max_view_distance: float,
        searched_distance: float,
        *,
        left_grid: bool = False,
    ) -> None:
        self.max_view_distance = max_view_distance
        self.searched_distance = searched_distance
        self.left_grid = left_grid
        if left_grid:
            reason = f"ray left the grid after {searched_distance:.2f}m"
        else:
            reason = f"searched {searched_distance:.2f}m"
        super().__init__(
            f"No intersection within {max_view_distance:.2f}m ({reason})",
            IntersectionFailure.NO_INTERSECTION,
        )
