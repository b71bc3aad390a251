"""Infrastructure adapters for the terrain bounded context.

This module provides the infrastructure layer implementations for terrain
operations: loading DEMs from ESRI ASCII grids and from GDAL rasters.

Adapters exported for simplified imports.
"""

from .ascii_grid_adapter import AsciiGridTerrainAdapter, parse_ascii_grid
from .raster_adapter import RasterTerrainAdapter

__all__ = ["AsciiGridTerrainAdapter", "RasterTerrainAdapter", "parse_ascii_grid"]
