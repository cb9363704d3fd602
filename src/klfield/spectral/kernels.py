"""
Covariance kernels of squared distance.

A kernel is any callable ``kernel(r2, length_scale)`` taking an array of
squared distances and a positive length scale, and returning covariances
of the same shape. It must be symmetric and positive semi-definite so that
the covariance matrix has a valid eigendecomposition.

License: BSD-3-Clause
"""

from __future__ import annotations

from collections.abc import Callable

import numpy as np

Kernel = Callable[[np.ndarray, float], np.ndarray]


def squared_exponential(r2: np.ndarray | float, length_scale: float) -> np.ndarray | float:
    """
    Squared-exponential (Gaussian) covariance.

        C(r) = exp(-r² / (2 ℓ²))

    Parameters
    ----------
    r2 : array_like or float
        Squared distance(s).
    length_scale : float
        Correlation length ℓ (ℓ > 0).

    Returns
    -------
    C : array_like or float
        Covariance, equal to 1 at zero distance.
    """
    return np.exp(-np.asarray(r2) / (2.0 * length_scale**2))
