"""Tests for WGS84 <-> grid CRS helpers (pyproj)."""

from __future__ import annotations

import numpy as np
import pytest

from domain.terrain.errors import MissingCRSError
from domain.terrain.projection import (
    observer_from_geopoint,
    project_geopoint,
    unproject,
)
from domain.terrain.value_objects import GeoPoint, TerrainGrid


def test_project_origin_web_mercator():
    easting, northing = project_geopoint(
        GeoPoint(latitude=0.0, longitude=0.0), "EPSG:3857"
    )

    assert easting == pytest.approx(0.0, abs=1e-6)
    assert northing == pytest.approx(0.0, abs=1e-6)


def test_project_then_unproject_british_national_grid():
    point = GeoPoint(latitude=52.62, longitude=-4.05)

    easting, northing = project_geopoint(point, "EPSG:27700")
    back = unproject(easting, northing, "EPSG:27700")

    # Wales lies well inside the British National Grid false origin
    assert 100_000 < easting < 400_000
    assert 200_000 < northing < 400_000
    assert back.latitude == pytest.approx(point.latitude, abs=1e-7)
    assert back.longitude == pytest.approx(point.longitude, abs=1e-7)


def test_observer_from_geopoint_uses_grid_crs():
    grid = TerrainGrid.from_array(
        np.zeros((2, 2)), xll_corner=0, yll_corner=0, cell_size=1, crs="EPSG:3857"
    )
    point = GeoPoint(latitude=1.0, longitude=2.0)

    observer = observer_from_geopoint(point, grid, bearing=360.0, tilt=-1.0, eye_height=1.5)

    expected = project_geopoint(point, "EPSG:3857")
    assert (observer.easting, observer.northing) == pytest.approx(expected)
    assert observer.bearing == 0.0
    assert observer.tilt == -1.0
    assert observer.eye_height == 1.5


def test_observer_from_geopoint_requires_crs():
    grid = TerrainGrid.from_array(
        np.zeros((2, 2)), xll_corner=0, yll_corner=0, cell_size=1
    )

    with pytest.raises(MissingCRSError):
        observer_from_geopoint(
            GeoPoint(latitude=0.0, longitude=0.0),
            grid,
            bearing=0.0,
            tilt=0.0,
            eye_height=1.5,
        )
