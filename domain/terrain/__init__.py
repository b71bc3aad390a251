"""Terrain Bounded Context.

Responsible for elevation surfaces and sight-line calculations:
- Value Objects: GridParameters, TerrainGrid, Observer, IntersectionResult
- Services: sample_elevation (bilinear height sampler)
- Line of Sight: LineOfSightCalculator, line_of_sight
"""
