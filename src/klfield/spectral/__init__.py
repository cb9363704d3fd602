"""
Covariance construction and truncated spectral decomposition.
"""

from .kernels import squared_exponential
from .covariance import (
    SpectralTruncation,
    EigenPairs,
    covariance_matrix,
    truncated_eigenpairs,
    compute_eigenpairs,
)

__all__ = [
    "squared_exponential",
    "SpectralTruncation",
    "EigenPairs",
    "covariance_matrix",
    "truncated_eigenpairs",
    "compute_eigenpairs",
]
