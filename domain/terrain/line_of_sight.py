"""Terrain Bounded Context - Line of Sight.

Casts a sight ray from an observer over a TerrainGrid and reports the first
point where the ray reaches or drops below the terrain surface.

Search states: SEARCHING -> REFINING -> FOUND, or SEARCHING -> EXHAUSTED.

Policies (fixed for every query):
    - A sample that lands on no-data is skipped; marching continues.
    - A sample outside the grid ends the search as exhausted, since no
      crossing is possible beyond the grid.
    - With refinement enabled, the crossing is interpolated linearly between
      the last sample above ground and the first sample at or below it.
"""

from __future__ import annotations

import enum
import logging
import math

from pydantic import ValidationError

from domain.terrain.errors import (
    IntersectionError,
    IntersectionFailure,
    NoDataEncounteredError,
    NoIntersectionError,
    PointOutOfBoundsError,
)
from domain.terrain.services import sample_elevation
from domain.terrain.value_objects import (
    IntersectionResult,
    LineOfSightSettings,
    Observer,
    TerrainGrid,
)

logger = logging.getLogger(__name__)


class SearchState(enum.Enum):
    SEARCHING = "searching"
    REFINING = "refining"
    FOUND = "found"
    EXHAUSTED = "exhausted"


def direction_vector(bearing: float, tilt: float) -> tuple[float, float, float]:
    """Return the (east, north, up) unit vector of a sight direction.

    Args:
        bearing: Compass degrees, 0 = north, clockwise
        tilt: Degrees from horizontal, negative = downward
    """
    b = math.radians(bearing % 360.0)
    t = math.radians(tilt)
    horizontal = math.cos(t)
    return (math.sin(b) * horizontal, math.cos(b) * horizontal, math.sin(t))


class LineOfSightCalculator:
    """Ray-marching intersection engine.

    Stateless across calls: a single instance (and a single TerrainGrid) may
    be shared by concurrent queries.

    Parameters
    ----------
    settings: LineOfSightSettings | None
        Step length and refinement policy. Defaults to LineOfSightSettings().
    """

    def __init__(self, settings: LineOfSightSettings | None = None) -> None:
        self.settings = settings or LineOfSightSettings()

    def intersect(
        self, observer: Observer, grid: TerrainGrid, max_view_distance: float
    ) -> IntersectionResult:
        """Find the first terrain crossing of the observer's sight ray.

        Args:
            observer: Observer position and sight direction
            grid: Elevation grid in the same planar CRS as the observer
            max_view_distance: Maximum distance along the ray to search

        Returns:
            IntersectionResult for the first crossing

        Raises:
            IntersectionError: Invalid distance, or the observer is off-grid
                or on no-data (see ``kind``)
            NoIntersectionError: No crossing within max_view_distance, or the
                ray left the grid first
        """
        if not (math.isfinite(max_view_distance) and max_view_distance > 0):
            raise IntersectionError(
                f"max_view_distance must be positive and finite, got {max_view_distance}",
                IntersectionFailure.INVALID_OBSERVER,
            )

        try:
            ground = sample_elevation(grid, observer.easting, observer.northing)
        except PointOutOfBoundsError as e:
            raise IntersectionError(
                str(e), IntersectionFailure.OBSERVER_OUT_OF_BOUNDS
            ) from e
        except NoDataEncounteredError as e:
            raise IntersectionError(str(e), IntersectionFailure.OBSERVER_NO_DATA) from e

        eye_z = ground + observer.eye_height
        dx, dy, dz = direction_vector(observer.bearing, observer.tilt)
        step = self.settings.step_cells * grid.params.cell_size

        state = SearchState.SEARCHING
        # Last valid sample above ground: (s, altitude gap)
        previous: tuple[float, float] | None = None
        searched = 0.0
        k = 0

        while True:
            s = k * step
            if s > max_view_distance:
                break
            k += 1

            x = observer.easting + s * dx
            y = observer.northing + s * dy
            z = eye_z + s * dz

            try:
                terrain = sample_elevation(grid, x, y)
            except NoDataEncounteredError:
                previous = None
                searched = s
                continue
            except PointOutOfBoundsError as e:
                state = SearchState.EXHAUSTED
                logger.debug(
                    "LoS %s: %s, ray left grid at s=%.2f (bearing=%.2f, tilt=%.2f)",
                    grid,
                    state.value,
                    s,
                    observer.bearing,
                    observer.tilt,
                )
                raise NoIntersectionError(
                    max_view_distance, searched, left_grid=True
                ) from e

            searched = s
            gap = z - terrain
            if gap > 0:
                previous = (s, gap)
                continue

            state = SearchState.REFINING
            result = self._refine(
                observer, grid, eye_z, (dx, dy, dz), previous, s, gap, terrain
            )
            state = SearchState.FOUND
            logger.debug(
                "LoS %s: %s at ground distance %.2f (elevation %.2f)",
                grid,
                state.value,
                result.ground_distance,
                result.terrain_elevation,
            )
            return result

        state = SearchState.EXHAUSTED
        logger.debug(
            "LoS %s: %s after %.2f of %.2f",
            grid,
            state.value,
            searched,
            max_view_distance,
        )
        raise NoIntersectionError(max_view_distance, searched)

    def _refine(
        self,
        observer: Observer,
        grid: TerrainGrid,
        eye_z: float,
        direction: tuple[float, float, float],
        previous: tuple[float, float] | None,
        s: float,
        gap: float,
        terrain: float,
    ) -> IntersectionResult:
        dx, dy, dz = direction
        if self.settings.refine and previous is not None:
            prev_s, prev_gap = previous
            refined_s = prev_s + (s - prev_s) * prev_gap / (prev_gap - gap)
            x = observer.easting + refined_s * dx
            y = observer.northing + refined_s * dy
            try:
                # Bracketing samples are in bounds, so only no-data can fail here
                refined_terrain = sample_elevation(grid, x, y)
            except NoDataEncounteredError:
                logger.debug("LoS %s: refinement hit no-data, using step sample", grid)
            else:
                return _build_result(observer, eye_z, refined_s, x, y, refined_terrain)

        x = observer.easting + s * dx
        y = observer.northing + s * dy
        return _build_result(observer, eye_z, s, x, y, terrain)


def _build_result(
    observer: Observer,
    eye_z: float,
    s: float,
    easting: float,
    northing: float,
    terrain: float,
) -> IntersectionResult:
    ground_distance = s * math.cos(math.radians(observer.tilt))
    slant_distance = math.sqrt(
        (easting - observer.easting) ** 2
        + (northing - observer.northing) ** 2
        + (terrain - eye_z) ** 2
    )
    return IntersectionResult(
        ground_distance=max(0.0, ground_distance),
        terrain_elevation=terrain,
        easting=easting,
        northing=northing,
        slant_distance=slant_distance,
    )


# ---------------------------------------------------------------------------
# Entry Point: line_of_sight
# ---------------------------------------------------------------------------
def line_of_sight(
    easting: float,
    northing: float,
    bearing: float,
    tilt: float,
    eye_height: float,
    grid: TerrainGrid,
    max_view_distance: float,
    *,
    settings: LineOfSightSettings | None = None,
) -> IntersectionResult:
    """Resolve where an observer's line of sight first meets the terrain.

    Args:
        easting: Observer X coordinate (grid CRS units)
        northing: Observer Y coordinate (grid CRS units)
        bearing: Compass bearing in degrees, 0 = north, clockwise
        tilt: Degrees from horizontal, negative = downward, in [-90, 90]
        eye_height: Eye height above terrain, >= 0
        grid: Elevation grid
        max_view_distance: Maximum distance along the ray to search
        settings: Optional march settings

    Returns:
        IntersectionResult

    Raises:
        IntersectionError: kind INVALID_OBSERVER for malformed input,
            OBSERVER_OUT_OF_BOUNDS / OBSERVER_NO_DATA for an unusable position
        NoIntersectionError: No crossing found within range

    Example:
        >>> result = line_of_sight(265365, 289115, 0, -1, 1.5, grid, 1000)
        >>> result.ground_distance, result.terrain_elevation
    """
    try:
        observer = Observer(
            easting=easting,
            northing=northing,
            eye_height=eye_height,
            bearing=bearing,
            tilt=tilt,
        )
    except ValidationError as e:
        raise IntersectionError(
            f"Invalid observer: {e}", IntersectionFailure.INVALID_OBSERVER
        ) from e

    return LineOfSightCalculator(settings).intersect(observer, grid, max_view_distance)
