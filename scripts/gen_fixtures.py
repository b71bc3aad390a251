#!/usr/bin/env python3
"""Generate the ESRI ASCII grid fixtures used by the test suite.

Fixtures are tiny synthetic grids - not real terrain data - small enough to
be reviewed by eye and committed.

Usage:
    python scripts/gen_fixtures.py

Output:
    tests/fixtures/*.asc

Dependencies:
    This script imports from shared/fixtures_expected.py (not tests/) to avoid
    circular dependencies between scripts and tests packages.
"""

from __future__ import annotations

from pathlib import Path

import numpy as np
from numpy.typing import NDArray

from shared.fixtures_expected import EXPECTED_FIXTURE_COUNT, EXPECTED_FIXTURES

# Output directory
FIXTURES_DIR = Path(__file__).parent.parent / "tests" / "fixtures"

NODATA = -9999

# Known-values grid: 4 cols x 3 rows, 10 m cells, node (r, c) = 10 * (r + 1) + c
KNOWN_XLL, KNOWN_YLL, KNOWN_CELL = 1000, 2000, 10

# Ridge grid: 5 cols x 6 rows, 10 m cells in British National Grid coordinates.
# Southern three rows at 40 m, northern three rows at 60 m.
RIDGE_XLL, RIDGE_YLL, RIDGE_CELL = 265340, 289100, 10


def _fmt(value: float) -> str:
    value = float(value)
    return str(int(value)) if value.is_integer() else repr(value)


def header(
    ncols: int, nrows: int, xll: float, yll: float, cellsize: float, nodata: float
) -> list[str]:
    """Build the six header lines."""
    fields = (
        ("ncols", ncols),
        ("nrows", nrows),
        ("xllcorner", xll),
        ("yllcorner", yll),
        ("cellsize", cellsize),
        ("NODATA_value", nodata),
    )
    return [f"{label:<14}{_fmt(value)}" for label, value in fields]


def rows(data: NDArray[np.float64]) -> list[str]:
    return [" ".join(_fmt(v) for v in row) for row in data]


def write_grid(name: str, lines: list[str]) -> None:
    path = FIXTURES_DIR / name
    path.write_text("\n".join(lines) + "\n", encoding="ascii")
    print(f"  Created: {name}")


def known_values() -> NDArray[np.float64]:
    return np.array(
        [[10 * (r + 1) + c for c in range(4)] for r in range(3)], dtype=np.float64
    )


def ridge() -> NDArray[np.float64]:
    data = np.full((6, 5), 40.0)
    data[:3, :] = 60.0
    return data


def main() -> int:
    FIXTURES_DIR.mkdir(parents=True, exist_ok=True)
    print(f"Output directory: {FIXTURES_DIR}")

    known_header = header(4, 3, KNOWN_XLL, KNOWN_YLL, KNOWN_CELL, NODATA)
    known_rows = rows(known_values())

    write_grid("grid_known_values.asc", known_header + known_rows)

    with_nodata = known_values()
    with_nodata[1, 2] = NODATA
    write_grid("grid_with_nodata.asc", known_header + rows(with_nodata))

    write_grid(
        "grid_ridge.asc",
        header(5, 6, RIDGE_XLL, RIDGE_YLL, RIDGE_CELL, NODATA) + rows(ridge()),
    )

    bad_label = list(known_header)
    bad_label[0], bad_label[1] = bad_label[1], bad_label[0]
    write_grid("grid_bad_label.asc", bad_label + known_rows)

    bad_value = list(known_header)
    bad_value[4] = "cellsize      ten"
    write_grid("grid_bad_value.asc", bad_value + known_rows)

    short_row = list(known_rows)
    short_row[1] = "20 21 22"
    write_grid("grid_short_row.asc", known_header + short_row)

    bad_token = list(known_rows)
    bad_token[2] = "30 31 x32 33"
    write_grid("grid_bad_token.asc", known_header + bad_token)

    write_grid("grid_missing_rows.asc", known_header + known_rows[:2])

    generated = sorted(f.name for f in FIXTURES_DIR.glob("*.asc"))
    if generated != sorted(EXPECTED_FIXTURES):
        print("ERROR: Fixture filenames do not match expected list!")
        print(f"  Missing: {sorted(set(EXPECTED_FIXTURES) - set(generated))}")
        print(f"  Extra: {sorted(set(generated) - set(EXPECTED_FIXTURES))}")
        print("\nUpdate shared/fixtures_expected.py to match generated fixtures.")
        return 1

    print(f"\nAll {EXPECTED_FIXTURE_COUNT} fixtures verified successfully.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
