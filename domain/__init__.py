"""Line-of-Sight Domain Layer.

This package contains the core logic organized by bounded contexts:
- terrain: Elevation grids, height sampling, line-of-sight intersection
"""

from domain import terrain

__all__ = ["terrain"]
