"""Single source of truth for expected test fixtures.

This module defines the list of expected fixture filenames used by both:
- scripts/gen_fixtures.py (generation verification)
- tests/gis/test_fixtures_sanity.py (existence verification)

Location: shared/ (not tests/) to avoid scripts->tests dependency.

When adding/removing fixtures, update ONLY this list.
"""

from __future__ import annotations

# Sorted alphabetically for deterministic comparison.
EXPECTED_FIXTURES: list[str] = sorted(
    [
        "grid_bad_label.asc",  # Header label out of order
        "grid_bad_token.asc",  # Unparsable data value
        "grid_bad_value.asc",  # Unparsable header value
        "grid_known_values.asc",  # 4x3 grid with known node values
        "grid_missing_rows.asc",  # Fewer rows than nrows
        "grid_ridge.asc",  # 5x6 grid: flat south, ridge to the north
        "grid_short_row.asc",  # Row with fewer values than ncols
        "grid_with_nodata.asc",  # Known values with one no-data cell
    ]
)

# Count derived from list for verification
EXPECTED_FIXTURE_COUNT: int = len(EXPECTED_FIXTURES)
