"""Sanity tests for the committed ASCII grid fixtures.

These tests validate that each fixture exists and that the well-formed ones
parse to the shapes the behavioral tests rely on. Behavioral tests are in
test_ascii_grid_adapter.py.
"""

from pathlib import Path

import pytest

from infrastructure.terrain.ascii_grid_adapter import AsciiGridTerrainAdapter
from tests.fixtures_expected import EXPECTED_FIXTURE_COUNT, EXPECTED_FIXTURES

FIXTURES_DIR = Path(__file__).parent.parent / "fixtures"


class TestFixturesExist:
    """Verify all required fixtures exist."""

    @pytest.mark.parametrize("filename", EXPECTED_FIXTURES)
    def test_fixture_exists(self, filename: str) -> None:
        path = FIXTURES_DIR / filename
        assert path.exists(), f"Missing fixture: {filename}"

    def test_no_unexpected_fixtures(self) -> None:
        found = sorted(p.name for p in FIXTURES_DIR.glob("*.asc"))
        assert found == sorted(EXPECTED_FIXTURES)
        assert len(found) == EXPECTED_FIXTURE_COUNT


class TestValidGrids:
    """Verify well-formed fixtures parse with the expected geometry."""

    @pytest.mark.parametrize(
        "filename, shape",
        [
            ("grid_known_values.asc", (3, 4)),
            ("grid_with_nodata.asc", (3, 4)),
            ("grid_ridge.asc", (6, 5)),
        ],
    )
    def test_shape(self, filename: str, shape: tuple[int, int]) -> None:
        grid = AsciiGridTerrainAdapter().load_dem(FIXTURES_DIR / filename)
        assert grid.data.shape == shape

    def test_ridge_extent(self) -> None:
        grid = AsciiGridTerrainAdapter().load_dem(FIXTURES_DIR / "grid_ridge.asc")
        assert grid.params.xll_corner == 265340.0
        assert grid.params.y_max == 289150.0
