"""
klfield - Karhunen-Loève Random Fields on Uniform Grids.

A Python package for generating spatially-correlated Gaussian random fields
on uniform 1D/2D/3D grids by truncated spectral decomposition of a
covariance kernel, with the decomposition cached on disk between runs.

    Features
    --------
    - Periodic-aware distances, independently per axis
    - Squared-exponential covariance (any kernel of squared distance)
    - Fixed-count truncation of the covariance spectrum
    - Binary on-disk cache keyed by a parameter fingerprint
- Covariance diagnostics for sampled realizations

Quick Start
-----------
>>> import numpy as np
>>> from klfield import UniformGridRandomFieldGenerator
>>> rng = np.random.default_rng(42)
>>> gen = UniformGridRandomFieldGenerator(
...     [0, 0], [1, 1], [16, 16], [True, True], num_eigenvals=32, length_scale=0.2
... )
>>> field = gen.sample_grid(rng=rng)

References
----------
Ghanem, R.G. and Spanos, P.D., 1991. Stochastic Finite Elements: A Spectral
Approach. Springer. DOI: 10.1007/978-1-4612-3094-6

License
-------
BSD-3-Clause
"""

__version__ = "0.1.0"

from .exceptions import ConfigurationError, CacheFormatError

# Main generator
from .generators import UniformGridRandomFieldGenerator

# Building blocks
from .grid import (
    DomainSpec,
    make_domain,
    squared_distance,
    pairwise_squared_distances,
    grid_coordinates,
    grid_index,
)
from .spectral import (
    squared_exponential,
    SpectralTruncation,
    EigenPairs,
    covariance_matrix,
    truncated_eigenpairs,
    compute_eigenpairs,
)
from .cache import (
    cache_filename,
    cache_relpath,
    save_cache,
    load_cache,
    OutputDirectory,
)

# Analysis tools
from .analysis import (
    empirical_covariance,
    truncated_covariance,
    relative_covariance_error,
    explained_variance_ratio,
)

__all__ = [
    # Version
    "__version__",
    # Errors
    "ConfigurationError",
    "CacheFormatError",
    # Generator
    "UniformGridRandomFieldGenerator",
    # Grid
    "DomainSpec",
    "make_domain",
    "squared_distance",
    "pairwise_squared_distances",
    "grid_coordinates",
    "grid_index",
    # Spectral
    "squared_exponential",
    "SpectralTruncation",
    "EigenPairs",
    "covariance_matrix",
    "truncated_eigenpairs",
    "compute_eigenpairs",
    # Cache
    "cache_filename",
    "cache_relpath",
    "save_cache",
    "load_cache",
    "OutputDirectory",
    # Analysis
    "empirical_covariance",
    "truncated_covariance",
    "relative_covariance_error",
    "explained_variance_ratio",
]
