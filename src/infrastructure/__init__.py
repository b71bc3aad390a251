"""Infrastructure Layer.

Adapters that perform I/O (raster files, environment) and return domain
Value Objects.
"""
