"""Rasterio adapter for TerrainRepository.

Loads single-band, north-up DEM rasters (GeoTIFF, AAIGrid, or anything else
GDAL reads) through rasterio and returns a domain TerrainGrid in the raster's
own planar CRS. No reprojection is done: line-of-sight geometry needs
metric, unrotated coordinates.

Lifecycle (to avoid resource leaks):
1) Open dataset with context manager (rasterio.open) inside rasterio.Env
2) Read metadata and validate preconditions (band count, transform)
3) Read band 1 as float64; masked pixels are written as the nodata sentinel
4) Convert pixel-is-area geometry to the node lattice used by sampling
5) Exit contexts to release GDAL handles
6) Return TerrainGrid
"""

from __future__ import annotations

import logging
import math
from pathlib import Path

import numpy as np
import rasterio
from affine import Affine
from rasterio.errors import RasterioError

from domain.terrain.errors import (
    InsufficientMemoryError,
    InvalidGeotransformError,
    RasterFormatError,
)
from domain.terrain.value_objects import (
    DEFAULT_NO_DATA_VALUE,
    GridParameters,
    TerrainGrid,
)

# Module-level logger (reused across all calls)
logger = logging.getLogger(__name__)

ALLOWED_SUFFIXES = (".tif", ".tiff", ".asc")
HIGH_NODATA_PCT = 80.0
# Relative tolerance when checking that pixels are square
_SQUARE_PIXEL_RTOL = 1e-9


def _validate_transform(transform: Affine) -> None:
    if not isinstance(transform, Affine):
        raise InvalidGeotransformError("Missing affine transform")
    if any(
        math.isnan(v) or math.isinf(v)
        for v in (
            transform.a,
            transform.b,
            transform.c,
            transform.d,
            transform.e,
            transform.f,
        )
    ):
        raise InvalidGeotransformError("Invalid (NaN/Inf) transform values")
    if transform.a == 0 or transform.e == 0:
        raise InvalidGeotransformError("Invalid transform scale (zero)")
    if transform.b != 0 or transform.d != 0:
        raise InvalidGeotransformError("Rotated rasters are not supported")
    if transform.a < 0 or transform.e > 0:
        raise InvalidGeotransformError("Raster must be north-up")
    if not math.isclose(transform.a, -transform.e, rel_tol=_SQUARE_PIXEL_RTOL):
        raise InvalidGeotransformError(
            f"Pixels must be square, got {transform.a} x {-transform.e}"
        )


class RasterTerrainAdapter:
    """Infrastructure adapter for loading DEMs through rasterio.

    Parameters
    ----------
    max_bytes: int | None
        Optional memory budget for the resulting float64 grid (height*width*8).
        If exceeded by the estimated size, InsufficientMemoryError is raised
        before any pixel data is read.
    """

    def __init__(self, max_bytes: int | None = None) -> None:
        self.max_bytes = max_bytes

    def load_dem(self, file_path: Path | str) -> TerrainGrid:
        """Load a DEM raster and return a TerrainGrid.

        Raises:
            FileNotFoundError: File does not exist
            RasterFormatError: Unsupported, empty, multi-band or corrupted raster
            InvalidGeotransformError: Rotated, non-square or invalid transform
            InsufficientMemoryError: Grid exceeds the memory budget
        """
        path = Path(file_path)

        if not path.exists():
            raise FileNotFoundError(str(path))

        if path.suffix.lower() not in ALLOWED_SUFFIXES:
            raise RasterFormatError(f"Unsupported file extension: {path.suffix}")

        try:
            st = path.stat()
            if st.st_size == 0:
                raise RasterFormatError("Empty file")
        except OSError as e:
            # Log only filename, errno, and strerror to avoid leaking absolute paths
            logger.error(
                "Failed to stat %s (errno=%s, strerror=%s)",
                path.name,
                getattr(e, "errno", "unknown"),
                getattr(e, "strerror", "unknown"),
            )
            raise

        try:
            with rasterio.Env():
                with rasterio.open(path) as src:
                    if src.count == 0:
                        raise RasterFormatError("Empty or bandless file")
                    if src.count != 1:
                        raise RasterFormatError(f"Expected 1 band, got {src.count}")

                    transform = src.transform
                    _validate_transform(transform)

                    # Memory budget check BEFORE allocation
                    if self.max_bytes is not None:
                        est_bytes = src.width * src.height * 8  # float64 = 8 bytes
                        if est_bytes > self.max_bytes:
                            raise InsufficientMemoryError(
                                f"Estimated grid size {est_bytes}B exceeds budget {self.max_bytes}B"
                            )

                    nodata = (
                        float(src.nodata)
                        if src.nodata is not None
                        else DEFAULT_NO_DATA_VALUE
                    )
                    data = src.read(1, masked=True, out_dtype="float64")
                    data = np.ma.filled(data, nodata)

                    height, width = data.shape
                    # Pixel centres become grid nodes
                    params = GridParameters(
                        num_rows=height,
                        num_cols=width,
                        xll_corner=transform.c + transform.a * 0.5,
                        yll_corner=transform.f + transform.e * (height - 0.5),
                        cell_size=transform.a,
                        no_data_value=nodata,
                        crs=src.crs.to_string() if src.crs is not None else None,
                    )
                    grid = TerrainGrid(params=params, data=data, source=path.name)

        except PermissionError as e:
            # Re-raise with filename only to avoid leaking full path in logs
            raise PermissionError(path.name) from e
        except RasterioError as e:
            raise RasterFormatError(f"Corrupted or invalid raster: {e}") from e
        except MemoryError as e:
            raise InsufficientMemoryError("Insufficient memory to load raster") from e

        nodata_pct = float(np.mean(data == nodata) * 100.0)
        if nodata_pct > HIGH_NODATA_PCT:
            logger.warning(
                "DEM %s: %.1f%% NoData pixels detected", path.name, nodata_pct
            )
        logger.debug("DEM %s: Loaded %dx%d grid", path.name, width, height)
        return grid
