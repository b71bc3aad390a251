"""Tests for terrain value objects.

Grids are built directly from numpy arrays; no infrastructure involved.
"""

from __future__ import annotations

import numpy as np
import pytest
from pydantic import ValidationError

from domain.terrain.value_objects import (
    DEFAULT_NO_DATA_VALUE,
    GridParameters,
    IntersectionResult,
    LineOfSightSettings,
    Observer,
    TerrainGrid,
)


def make_params(**overrides) -> GridParameters:
    values = dict(
        num_rows=3,
        num_cols=4,
        xll_corner=1000.0,
        yll_corner=2000.0,
        cell_size=10.0,
    )
    values.update(overrides)
    return GridParameters(**values)


# ===========================================================================
# GridParameters
# ===========================================================================
def test_grid_parameters_extents():
    params = make_params()

    assert params.x_max == 1030.0
    assert params.y_max == 2020.0
    assert params.cell_count == 12
    assert params.no_data_value == DEFAULT_NO_DATA_VALUE
    assert params.crs is None


def test_grid_parameters_keeps_fractional_cell_size():
    params = make_params(cell_size=0.5)

    assert params.cell_size == 0.5
    assert params.x_max == 1001.5


@pytest.mark.parametrize(
    "overrides",
    [
        {"num_rows": 0},
        {"num_cols": 0},
        {"cell_size": 0.0},
        {"cell_size": -1.0},
        {"xll_corner": float("nan")},
        {"yll_corner": float("inf")},
    ],
)
def test_grid_parameters_rejects_invalid(overrides):
    with pytest.raises(ValidationError):
        make_params(**overrides)


def test_grid_parameters_frozen():
    params = make_params()
    with pytest.raises(ValidationError):
        params.cell_size = 5.0


# ===========================================================================
# TerrainGrid
# ===========================================================================
def test_terrain_grid_copies_and_freezes_data():
    source = np.arange(12, dtype=np.float32).reshape(3, 4)
    grid = TerrainGrid(params=make_params(), data=source)

    assert grid.data.dtype == np.float64
    assert not grid.data.flags.writeable
    # Caller's array is untouched and independent
    assert source.flags.writeable
    source[0, 0] = 99.0
    assert grid.data[0, 0] == 0.0

    with pytest.raises(ValueError):
        grid.data[0, 0] = 1.0


def test_terrain_grid_shape_must_match_parameters():
    with pytest.raises(ValidationError, match="does not match"):
        TerrainGrid(params=make_params(), data=np.zeros((4, 3)))


def test_terrain_grid_rejects_non_2d():
    with pytest.raises(ValidationError, match="2D"):
        TerrainGrid(params=make_params(), data=np.zeros(12))


def test_terrain_grid_from_array_derives_shape():
    grid = TerrainGrid.from_array(
        [[1.0, 2.0, 3.0], [4.0, 5.0, 6.0]],
        xll_corner=0.0,
        yll_corner=0.0,
        cell_size=2.5,
        crs="EPSG:27700",
    )

    assert grid.params.num_rows == 2
    assert grid.params.num_cols == 3
    assert grid.params.cell_size == 2.5
    assert grid.params.crs == "EPSG:27700"
    assert str(grid) == "in-memory grid"


def test_terrain_grid_str_uses_source():
    grid = TerrainGrid.from_array(
        np.zeros((2, 2)), xll_corner=0, yll_corner=0, cell_size=1, source="dem.asc"
    )
    assert str(grid) == "dem.asc"


def test_terrain_grid_is_nodata():
    grid = TerrainGrid.from_array(
        np.zeros((2, 2)), xll_corner=0, yll_corner=0, cell_size=1, no_data_value=-1.0
    )

    assert grid.is_nodata(-1.0)
    assert grid.is_nodata(float("nan"))
    assert not grid.is_nodata(0.0)


# ===========================================================================
# Observer
# ===========================================================================
@pytest.mark.parametrize(
    "bearing, expected",
    [(0.0, 0.0), (360.0, 0.0), (450.0, 90.0), (-90.0, 270.0), (359.5, 359.5)],
)
def test_observer_normalises_bearing(bearing, expected):
    observer = Observer(easting=0, northing=0, eye_height=1.5, bearing=bearing, tilt=0)
    assert observer.bearing == pytest.approx(expected)


@pytest.mark.parametrize(
    "overrides",
    [
        {"tilt": -90.5},
        {"tilt": 91.0},
        {"eye_height": -0.1},
        {"easting": float("nan")},
        {"bearing": float("inf")},
    ],
)
def test_observer_rejects_invalid(overrides):
    values = dict(easting=0.0, northing=0.0, eye_height=1.5, bearing=0.0, tilt=-1.0)
    values.update(overrides)
    with pytest.raises(ValidationError):
        Observer(**values)


# ===========================================================================
# IntersectionResult / LineOfSightSettings
# ===========================================================================
def test_intersection_result_as_tuple_order():
    result = IntersectionResult(
        ground_distance=8.1,
        terrain_elevation=49.43426,
        easting=265365.0,
        northing=289123.0,
        slant_distance=45.0,
    )

    assert result.as_tuple() == (8.1, 49.43426, 265365.0, 289123.0, 45.0)


def test_intersection_result_rejects_negative_distance():
    with pytest.raises(ValidationError):
        IntersectionResult(
            ground_distance=-1.0,
            terrain_elevation=0.0,
            easting=0.0,
            northing=0.0,
            slant_distance=0.0,
        )


def test_line_of_sight_settings_defaults():
    settings = LineOfSightSettings()

    assert settings.step_cells == 1.0
    assert settings.refine is True
    with pytest.raises(ValidationError):
        LineOfSightSettings(step_cells=0)
