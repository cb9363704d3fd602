"""
Analysis tools for sampled random fields.

- Empirical covariance of realizations
- Covariance represented by truncated eigenpairs
- Explained variance of a truncation
"""

from .covariance import (
    empirical_covariance,
    truncated_covariance,
    relative_covariance_error,
    explained_variance_ratio,
)

__all__ = [
    "empirical_covariance",
    "truncated_covariance",
    "relative_covariance_error",
    "explained_variance_ratio",
]
