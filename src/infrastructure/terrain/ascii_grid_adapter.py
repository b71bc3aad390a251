"""ESRI ASCII grid adapter for TerrainRepository.

Parses the text raster format:

    ncols         4
    nrows         3
    xllcorner     265000.0
    yllcorner     289000.0
    cellsize      1.0
    NODATA_value  -9999
    <nrows lines of ncols whitespace-separated values, northern row first>

Header lines are tokenised as ``label value`` (labels are case-insensitive
and must appear in the order above), so incidental whitespace differences do
not matter. The result is a TerrainGrid holding its own copy of the data.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable
from pathlib import Path

import numpy as np

from domain.terrain.errors import InsufficientMemoryError, RasterFormatError
from domain.terrain.value_objects import GridParameters, TerrainGrid

# Module-level logger (reused across all calls)
logger = logging.getLogger(__name__)

HEADER_FIELDS: tuple[str, ...] = (
    "ncols",
    "nrows",
    "xllcorner",
    "yllcorner",
    "cellsize",
    "nodata_value",
)
ALLOWED_SUFFIXES = (".asc", ".txt", ".grd")
HIGH_NODATA_PCT = 80.0


def _parse_header(lines: Iterable[str]) -> dict[str, float]:
    header: dict[str, float] = {}
    it = iter(lines)
    for line_number, name in enumerate(HEADER_FIELDS, start=1):
        line = next(it, None)
        if line is None:
            raise RasterFormatError(
                "Unexpected end of input in header", line_number=line_number, field=name
            )
        tokens = line.split()
        if len(tokens) != 2:
            raise RasterFormatError(
                f"Expected '<label> <value>', got {line.strip()!r}",
                line_number=line_number,
                field=name,
            )
        label, raw = tokens
        if label.lower() != name:
            raise RasterFormatError(
                f"Expected label {name!r}, got {label!r}",
                line_number=line_number,
                field=name,
            )
        try:
            value = float(raw)
        except ValueError as e:
            raise RasterFormatError(
                f"Not a number: {raw!r}", line_number=line_number, field=name
            ) from e
        if not math.isfinite(value):
            raise RasterFormatError(
                f"Value must be finite: {raw!r}", line_number=line_number, field=name
            )
        header[name] = value

    for name in ("ncols", "nrows"):
        value = header[name]
        if not value.is_integer() or value < 1:
            raise RasterFormatError(
                f"{name} must be a positive integer, got {value}",
                line_number=HEADER_FIELDS.index(name) + 1,
                field=name,
            )
    if header["cellsize"] <= 0:
        raise RasterFormatError(
            f"cellsize must be positive, got {header['cellsize']}",
            line_number=HEADER_FIELDS.index("cellsize") + 1,
            field="cellsize",
        )
    return header


def _parse_row(line: str, line_number: int, row: int, ncols: int) -> np.ndarray:
    tokens = line.split()
    if len(tokens) != ncols:
        raise RasterFormatError(
            f"Expected {ncols} values, got {len(tokens)}",
            line_number=line_number,
            field=f"row {row}",
        )
    try:
        return np.asarray(tokens, dtype=np.float64)
    except ValueError:
        # Locate the offending token for the error message
        for col, token in enumerate(tokens):
            try:
                float(token)
            except ValueError as e:
                raise RasterFormatError(
                    f"Not a number: {token!r}",
                    line_number=line_number,
                    field=f"row {row}, col {col}",
                ) from e
        raise


def parse_ascii_grid(
    lines: Iterable[str],
    *,
    source: str | None = None,
    crs: str | None = None,
    max_bytes: int | None = None,
) -> TerrainGrid:
    """Parse an ESRI ASCII grid from an iterable of text lines.

    Args:
        lines: Text lines (e.g. an open file or ``text.splitlines()``)
        source: Label stored on the grid (file name)
        crs: CRS of the grid coordinates, if known (the format has none)
        max_bytes: Optional memory budget for the float64 height array

    Returns:
        TerrainGrid

    Raises:
        RasterFormatError: Malformed header, row width mismatch, wrong row
            count, or an unparsable value
        InsufficientMemoryError: Grid would exceed max_bytes or cannot be
            allocated
    """
    it = iter(lines)
    header = _parse_header(it)
    ncols = int(header["ncols"])
    nrows = int(header["nrows"])

    if max_bytes is not None:
        est_bytes = ncols * nrows * 8  # float64 = 8 bytes
        if est_bytes > max_bytes:
            raise InsufficientMemoryError(
                f"Estimated grid size {est_bytes}B exceeds budget {max_bytes}B"
            )

    params = GridParameters(
        num_rows=nrows,
        num_cols=ncols,
        xll_corner=header["xllcorner"],
        yll_corner=header["yllcorner"],
        cell_size=header["cellsize"],
        no_data_value=header["nodata_value"],
        crs=crs,
    )

    rows: list[np.ndarray] = []
    try:
        for line_number, line in enumerate(it, start=len(HEADER_FIELDS) + 1):
            if not line.strip():
                continue
            if len(rows) == nrows:
                raise RasterFormatError(
                    f"Unexpected data after {nrows} rows", line_number=line_number
                )
            rows.append(_parse_row(line, line_number, len(rows), ncols))

        if len(rows) != nrows:
            raise RasterFormatError(f"Expected {nrows} data rows, got {len(rows)}")

        data = np.vstack(rows)
    except MemoryError as e:
        raise InsufficientMemoryError("Insufficient memory to load grid") from e

    return TerrainGrid(params=params, data=data, source=source)


class AsciiGridTerrainAdapter:
    """Infrastructure adapter for loading DEMs from ESRI ASCII grid files.

    Parameters
    ----------
    crs: str | None
        CRS to attach to loaded grids; the file format does not carry one.
    max_bytes: int | None
        Optional memory budget for the resulting float64 grid
        (nrows*ncols*8). Exceeding it raises InsufficientMemoryError.
    """

    def __init__(self, crs: str | None = None, max_bytes: int | None = None) -> None:
        self.crs = crs
        self.max_bytes = max_bytes

    def load_dem(self, file_path: Path | str) -> TerrainGrid:
        """Load an ASCII grid file and return a TerrainGrid.

        Raises:
            FileNotFoundError: File does not exist
            OSError: File cannot be read
            RasterFormatError: Unsupported extension, empty file, or malformed content
            InsufficientMemoryError: Grid exceeds max_bytes or cannot be allocated
        """
        path = Path(file_path)

        if not path.exists():
            raise FileNotFoundError(str(path))

        if path.suffix.lower() not in ALLOWED_SUFFIXES:
            raise RasterFormatError(f"Unsupported file extension: {path.suffix}")

        try:
            if path.stat().st_size == 0:
                raise RasterFormatError("Empty file")
            with path.open("r", encoding="ascii") as fh:
                grid = parse_ascii_grid(
                    fh, source=path.name, crs=self.crs, max_bytes=self.max_bytes
                )
        except UnicodeDecodeError as e:
            raise RasterFormatError(f"File is not ASCII text: {e.reason}") from e
        except OSError as e:
            # Log only filename, errno, and strerror to avoid leaking absolute paths
            logger.error(
                "Failed to read %s (errno=%s, strerror=%s)",
                path.name,
                getattr(e, "errno", "unknown"),
                getattr(e, "strerror", "unknown"),
            )
            raise

        nodata_pct = float(
            np.mean((grid.data == grid.params.no_data_value) | np.isnan(grid.data))
            * 100.0
        )
        if nodata_pct > HIGH_NODATA_PCT:
            logger.warning(
                "DEM %s: %.1f%% NoData cells detected", path.name, nodata_pct
            )
        logger.debug(
            "DEM %s: Loaded %dx%d grid",
            path.name,
            grid.params.num_cols,
            grid.params.num_rows,
        )
        return grid
