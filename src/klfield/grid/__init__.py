"""
Grid geometry for uniform rectilinear domains.

- Domain description (corners, grid points, periodicity)
- Periodic-aware squared distances
- Index to coordinate mapping
"""

from .geometry import (
    DomainSpec,
    make_domain,
    squared_distance,
    pairwise_squared_distances,
    grid_coordinates,
    grid_index,
)

__all__ = [
    "DomainSpec",
    "make_domain",
    "squared_distance",
    "pairwise_squared_distances",
    "grid_coordinates",
    "grid_index",
]
