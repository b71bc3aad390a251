"""Terrain Bounded Context - Geographic Projection.

Converts WGS84 positions (e.g. from GPS) into a grid's planar CRS and back,
so observers can be placed on a projected DEM such as British National Grid.
"""

from __future__ import annotations

from functools import lru_cache

from pyproj import Transformer

from domain.terrain.errors import MissingCRSError
from domain.terrain.value_objects import GeoPoint, Observer, TerrainGrid

WGS84 = "EPSG:4326"


@lru_cache(maxsize=16)
def _transformer(src_crs: str, dst_crs: str) -> Transformer:
    # always_xy keeps (lon, lat) / (easting, northing) ordering for every CRS
    return Transformer.from_crs(src_crs, dst_crs, always_xy=True)


def project_geopoint(point: GeoPoint, crs: str) -> tuple[float, float]:
    """Project a WGS84 point into (easting, northing) of the given CRS."""
    easting, northing = _transformer(WGS84, crs).transform(
        point.longitude, point.latitude
    )
    return float(easting), float(northing)


def unproject(easting: float, northing: float, crs: str) -> GeoPoint:
    """Convert (easting, northing) in the given CRS back to a WGS84 GeoPoint."""
    lon, lat = _transformer(crs, WGS84).transform(easting, northing)
    return GeoPoint(latitude=float(lat), longitude=float(lon))


def observer_from_geopoint(
    point: GeoPoint,
    grid: TerrainGrid,
    *,
    bearing: float,
    tilt: float,
    eye_height: float,
) -> Observer:
    """Place an observer given in WGS84 onto the grid's planar CRS.

    Raises:
        MissingCRSError: If the grid carries no CRS
    """
    if grid.params.crs is None:
        raise MissingCRSError(f"Grid {grid} has no CRS defined")
    easting, northing = project_geopoint(point, grid.params.crs)
    return Observer(
        easting=easting,
        northing=northing,
        eye_height=eye_height,
        bearing=bearing,
        tilt=tilt,
    )
