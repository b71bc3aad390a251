"""Terrain Bounded Context - Domain Services.

Pure domain logic for terrain sampling.
NO I/O operations - file loading is implemented by infrastructure adapters
under `src/infrastructure/terrain/` via domain ports.
"""

from __future__ import annotations

import math

from domain.terrain.errors import NoDataEncounteredError, PointOutOfBoundsError
from domain.terrain.value_objects import TerrainGrid

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
# Fractional grid coordinates closer than this to an integer are snapped to it,
# so node queries return the stored value exactly.
GRID_SNAP_TOLERANCE = 1e-9


def _snap(value: float) -> float:
    nearest = round(value)
    if abs(value - nearest) <= GRID_SNAP_TOLERANCE:
        return float(nearest)
    return value


# ---------------------------------------------------------------------------
# Helper: World -> Grid Coordinates
# ---------------------------------------------------------------------------
def to_grid_coordinates(
    grid: TerrainGrid, easting: float, northing: float
) -> tuple[float, float]:
    """Convert world coordinates to fractional (col, row) grid coordinates.

    Row 0 is the northern edge, so the row axis is inverted.
    """
    params = grid.params
    col = (easting - params.xll_corner) / params.cell_size
    row = (params.num_rows - 1) - (northing - params.yll_corner) / params.cell_size
    return _snap(col), _snap(row)


def is_within_grid(grid: TerrainGrid, easting: float, northing: float) -> bool:
    """Check if a world point lies inside the grid's node extent (inclusive)."""
    col, row = to_grid_coordinates(grid, easting, northing)
    return (
        0.0 <= col <= grid.params.num_cols - 1
        and 0.0 <= row <= grid.params.num_rows - 1
    )


# ---------------------------------------------------------------------------
# Bilinear Interpolation
# ---------------------------------------------------------------------------
def bilinear_interpolate(grid: TerrainGrid, col: float, row: float) -> tuple[float, bool]:
    """Interpolate elevation at fractional grid coordinates.

    Returns (elevation, is_nodata).
    Only cells with a non-zero weight contribute. If any contributing cell is
    the no-data sentinel, returns (NaN, True) without mixing it in.

    Boundary behavior:
        Indices past the last row/column are clamped. The clamped neighbour
        always has zero weight, so bilinear degrades to linear (on edges) or
        nearest (on corners) and exact node queries return the stored value.

    Args:
        grid: TerrainGrid with elevation data
        col: Fractional column, expected in [0, num_cols - 1]
        row: Fractional row, expected in [0, num_rows - 1]

    Returns:
        Tuple of (elevation, is_nodata)
    """
    height, width = grid.data.shape

    x0 = int(math.floor(col))
    y0 = int(math.floor(row))
    x1 = min(x0 + 1, width - 1)
    y1 = min(y0 + 1, height - 1)

    # Bilinear weights (fractional part)
    fx = col - x0
    fy = row - y0

    corners = (
        (y0, x0, (1 - fx) * (1 - fy)),  # top-left
        (y0, x1, fx * (1 - fy)),  # top-right
        (y1, x0, (1 - fx) * fy),  # bottom-left
        (y1, x1, fx * fy),  # bottom-right
    )

    elevation = 0.0
    for y, x, weight in corners:
        if weight == 0.0:
            continue
        value = float(grid.data[y, x])
        if grid.is_nodata(value):
            return (float("nan"), True)
        elevation += value * weight

    return (elevation, False)


# ---------------------------------------------------------------------------
# Main Service: sample_elevation
# ---------------------------------------------------------------------------
def sample_elevation(grid: TerrainGrid, easting: float, northing: float) -> float:
    """Return the interpolated terrain elevation at a world point.

    Args:
        grid: Elevation grid
        easting: World X coordinate (grid CRS units)
        northing: World Y coordinate (grid CRS units)

    Returns:
        Elevation in grid units

    Raises:
        PointOutOfBoundsError: If the point is outside the grid's node extent
        NoDataEncounteredError: If a contributing cell holds the no-data value

    Example:
        >>> grid = TerrainGrid.from_array(
        ...     [[10.0, 20.0], [30.0, 40.0]], xll_corner=0, yll_corner=0, cell_size=1
        ... )
        >>> sample_elevation(grid, 0.5, 0.5)
        25.0
    """
    col, row = to_grid_coordinates(grid, easting, northing)
    if not (
        0.0 <= col <= grid.params.num_cols - 1
        and 0.0 <= row <= grid.params.num_rows - 1
    ):
        raise PointOutOfBoundsError(easting, northing, grid.params)

    elevation, is_nodata = bilinear_interpolate(grid, col, row)
    if is_nodata:
        raise NoDataEncounteredError(easting, northing)
    return elevation
