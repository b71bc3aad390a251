"""Terrain Bounded Context - Value Objects.

Immutable data structures describing the elevation surface, the observer of
a line-of-sight query, and the query result.
All validation occurs at construction time via Pydantic.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray
from pydantic import BaseModel, ConfigDict, Field, model_validator

# ---------------------------------------------------------------------------
# Numeric Constants
# ---------------------------------------------------------------------------
DEFAULT_NO_DATA_VALUE = -9999.0  # ESRI ASCII grid convention


# ---------------------------------------------------------------------------
# GridParameters
# ---------------------------------------------------------------------------
class GridParameters(BaseModel):
    """Raster geometry of an elevation grid (Value Object).

    Grid nodes sit on a regular lattice. Node (row, col) lies at
    easting = xll_corner + col * cell_size and
    northing = yll_corner + (num_rows - 1 - row) * cell_size,
    so row 0 is the northern-most row.

    cell_size keeps full floating precision (it is never truncated).
    """

    num_rows: int = Field(ge=1)
    num_cols: int = Field(ge=1)
    xll_corner: float = Field(allow_inf_nan=False)
    yll_corner: float = Field(allow_inf_nan=False)
    cell_size: float = Field(gt=0, allow_inf_nan=False)
    no_data_value: float = DEFAULT_NO_DATA_VALUE
    crs: str | None = None  # e.g. "EPSG:27700"; ASCII grids carry none

    model_config = ConfigDict(frozen=True)

    @property
    def x_max(self) -> float:
        """Easting of the eastern-most node column."""
        return self.xll_corner + (self.num_cols - 1) * self.cell_size

    @property
    def y_max(self) -> float:
        """Northing of the northern-most node row."""
        return self.yll_corner + (self.num_rows - 1) * self.cell_size

    @property
    def cell_count(self) -> int:
        return self.num_rows * self.num_cols


# ---------------------------------------------------------------------------
# TerrainGrid
# ---------------------------------------------------------------------------
class TerrainGrid(BaseModel):
    """Immutable elevation grid with its raster parameters (Value Object).

    The data array is copied into an owned, read-only float64 buffer at
    construction time, so the grid never shares memory with the caller and
    can be sampled from any number of threads without locking.
    """

    params: GridParameters
    data: NDArray[np.float64]  # 2D array (num_rows x num_cols), read-only
    source: str | None = None  # File name when loaded from disk

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    @model_validator(mode="after")
    def validate_grid(self) -> "TerrainGrid":
        if self.data.ndim != 2:
            raise ValueError(f"Data must be 2D, got {self.data.ndim}D")
        expected = (self.params.num_rows, self.params.num_cols)
        if self.data.shape != expected:
            raise ValueError(
                f"Data shape {self.data.shape} does not match parameters {expected}"
            )
        if not (
            np.issubdtype(self.data.dtype, np.integer)
            or np.issubdtype(self.data.dtype, np.floating)
        ):
            raise ValueError(f"Data must be real numeric, got {self.data.dtype}")

        # Owned, contiguous copy; the caller's array is never frozen in place.
        immutable = np.array(self.data, dtype=np.float64, copy=True, order="C")
        immutable.flags.writeable = False
        object.__setattr__(self, "data", immutable)

        return self

    @classmethod
    def from_array(
        cls,
        data: NDArray[np.floating] | list[list[float]],
        *,
        xll_corner: float,
        yll_corner: float,
        cell_size: float,
        no_data_value: float = DEFAULT_NO_DATA_VALUE,
        crs: str | None = None,
        source: str | None = None,
    ) -> "TerrainGrid":
        """Build a grid from in-memory heights, deriving rows/cols from the shape."""
        array = np.asarray(data, dtype=np.float64)
        if array.ndim != 2:
            raise ValueError(f"Data must be 2D, got {array.ndim}D")
        params = GridParameters(
            num_rows=array.shape[0],
            num_cols=array.shape[1],
            xll_corner=xll_corner,
            yll_corner=yll_corner,
            cell_size=cell_size,
            no_data_value=no_data_value,
            crs=crs,
        )
        return cls(params=params, data=array, source=source)

    def __str__(self) -> str:
        return self.source if self.source is not None else "in-memory grid"

    def is_nodata(self, value: float) -> bool:
        """True if value is the grid's sentinel (or NaN)."""
        return value != value or value == self.params.no_data_value


# ---------------------------------------------------------------------------
# GeoPoint
# ---------------------------------------------------------------------------
class GeoPoint(BaseModel):
    """Geographic coordinate in WGS84 (Value Object).

    Invariants:
        GP-1: latitude in [-90, 90]
        GP-2: longitude in [-180, 180]
    """

    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)

    model_config = ConfigDict(frozen=True)


# ---------------------------------------------------------------------------
# Observer
# ---------------------------------------------------------------------------
class Observer(BaseModel):
    """Position and sight direction of a line-of-sight query (Value Object).

    bearing is in compass degrees (0 = north, clockwise) and is normalised
    into [0, 360), so 0 and 360 describe the same observer.
    tilt is in degrees from horizontal; negative looks down.
    eye_height is meters above the terrain under the observer.
    """

    easting: float = Field(allow_inf_nan=False)
    northing: float = Field(allow_inf_nan=False)
    eye_height: float = Field(ge=0, allow_inf_nan=False)
    bearing: float = Field(allow_inf_nan=False)
    tilt: float = Field(ge=-90, le=90)

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def normalise_bearing(self) -> "Observer":
        object.__setattr__(self, "bearing", self.bearing % 360.0)
        return self


# ---------------------------------------------------------------------------
# IntersectionResult
# ---------------------------------------------------------------------------
class IntersectionResult(BaseModel):
    """First terrain crossing of a sight ray (Value Object).

    ground_distance is the horizontal distance from the observer to the
    crossing, resolved to the marching step (refined by linear interpolation
    between the two bracketing samples when possible).
    slant_distance is the 3D distance from the eye point to
    (easting, northing, terrain_elevation).
    """

    ground_distance: float = Field(ge=0)
    terrain_elevation: float
    easting: float
    northing: float
    slant_distance: float = Field(ge=0)

    model_config = ConfigDict(frozen=True)

    def as_tuple(self) -> tuple[float, float, float, float, float]:
        """Return the five result fields in declaration order."""
        return (
            self.ground_distance,
            self.terrain_elevation,
            self.easting,
            self.northing,
            self.slant_distance,
        )


# ---------------------------------------------------------------------------
# LineOfSightSettings
# ---------------------------------------------------------------------------
class LineOfSightSettings(BaseModel):
    """Tuning knobs of the ray march.

    step_cells: Step length along the ray as a multiple of the grid cell size.
    refine: Interpolate the crossing between the two bracketing samples.
    """

    step_cells: float = Field(default=1.0, gt=0, allow_inf_nan=False)
    refine: bool = True

    model_config = ConfigDict(frozen=True)
