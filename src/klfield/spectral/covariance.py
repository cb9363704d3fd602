"""
Dense covariance matrix and truncated Karhunen-Loève eigendecomposition.

The covariance between grid points i and j is

    C[i, j] = kernel(d²(x_i, x_j), ℓ)

with d² the periodic-aware squared distance of the domain. Only the
``num_eigenvals`` largest eigenpairs of C are kept.

Cost: building C is O(M² · dim), the decomposition O(M³) for M grid points.
This is why results are cached on disk by the generator.

Reference:
    Ghanem, R.G. and Spanos, P.D., 1991. Stochastic Finite Elements:
    A Spectral Approach. Springer. Chapter 2.

License: BSD-3-Clause
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from scipy.linalg import eigh

from ..exceptions import ConfigurationError
from ..grid.geometry import DomainSpec, grid_coordinates, pairwise_squared_distances
from .kernels import Kernel, squared_exponential


@dataclass(frozen=True)
class SpectralTruncation:
    """Number of retained modes and kernel correlation length."""

    num_eigenvals: int
    length_scale: float

    def __post_init__(self):
        if self.num_eigenvals < 1:
            raise ConfigurationError("num_eigenvals must be positive")
        if not self.length_scale > 0:
            raise ConfigurationError("length_scale must be > 0")


@dataclass(frozen=True, eq=False)
class EigenPairs:
    """
    Retained eigenpairs of a covariance matrix.

    Parameters
    ----------
    eigenvalues : ndarray
        Shape (k,), non-increasing.
    eigenvectors : ndarray
        Shape (M, k); column j belongs to ``eigenvalues[j]``.
    """

    eigenvalues: np.ndarray
    eigenvectors: np.ndarray

    def __post_init__(self):
        # Copies are frozen; the caller's arrays stay writable
        eigenvalues = np.array(self.eigenvalues, dtype=np.float64)
        eigenvectors = np.array(self.eigenvectors, dtype=np.float64, order="F")
        if eigenvalues.ndim != 1 or eigenvectors.ndim != 2:
            raise ValueError("eigenvalues must be 1D and eigenvectors 2D")
        if eigenvectors.shape[1] != eigenvalues.size:
            raise ValueError(
                f"{eigenvalues.size} eigenvalues but "
                f"{eigenvectors.shape[1]} eigenvector columns"
            )
        if np.any(np.diff(eigenvalues) > 0):
            raise ValueError("eigenvalues must be non-increasing")
        eigenvalues.setflags(write=False)
        eigenvectors.setflags(write=False)
        object.__setattr__(self, "eigenvalues", eigenvalues)
        object.__setattr__(self, "eigenvectors", eigenvectors)

    @property
    def num_modes(self) -> int:
        return self.eigenvalues.size

    @property
    def num_points(self) -> int:
        return self.eigenvectors.shape[0]


def covariance_matrix(
    domain: DomainSpec,
    length_scale: float,
    kernel: Kernel = squared_exponential,
) -> np.ndarray:
    """
    Build the dense covariance matrix of all grid points.

    Parameters
    ----------
    domain : DomainSpec
        Grid and periodicity.
    length_scale : float
        Correlation length passed to the kernel.
    kernel : callable, optional
        Covariance as a function of squared distance and length scale.
        Default is :func:`squared_exponential`.

    Returns
    -------
    C : ndarray
        Symmetric array of shape (M, M), rows ordered by linear grid index.
    """
    coords = grid_coordinates(domain)
    D2 = pairwise_squared_distances(coords, domain)
    C = np.asarray(kernel(D2, length_scale), dtype=float)
    if C.shape != D2.shape:
        raise ValueError("kernel must return an array with the same shape as its input")
    # Round-off in the periodic branch can break exact symmetry
    return 0.5 * (C + C.T)


def truncated_eigenpairs(cov: np.ndarray, num_eigenvals: int) -> EigenPairs:
    """
    Largest eigenpairs of a symmetric matrix, sorted by descending eigenvalue.

    Ties keep the solver's order (stable sort). Each eigenvector is signed so
    that its largest-magnitude entry is positive, which makes repeated
    computations on the same input reproduce each other.

    Parameters
    ----------
    cov : ndarray
        Symmetric (M, M) matrix.
    num_eigenvals : int
        Number of modes to keep (1 <= k <= M).

    Returns
    -------
    pairs : EigenPairs

    Raises
    ------
    ConfigurationError
        If ``num_eigenvals`` is outside [1, M].
    """
    M = cov.shape[0]
    if not 1 <= num_eigenvals <= M:
        raise ConfigurationError(
            f"num_eigenvals must be in [1, {M}] for {M} grid points, got {num_eigenvals}"
        )

    vals, vecs = eigh(cov, subset_by_index=[M - num_eigenvals, M - 1])

    order = np.argsort(-vals, kind="stable")
    vals = vals[order]
    vecs = vecs[:, order]

    # Sign convention
    pivot = np.argmax(np.abs(vecs), axis=0)
    signs = np.sign(vecs[pivot, np.arange(vecs.shape[1])])
    signs[signs == 0] = 1.0
    vecs = vecs * signs

    return EigenPairs(
        eigenvalues=np.ascontiguousarray(vals, dtype=np.float64),
        eigenvectors=np.asfortranarray(vecs, dtype=np.float64),
    )


def compute_eigenpairs(
    domain: DomainSpec,
    truncation: SpectralTruncation,
    kernel: Kernel = squared_exponential,
) -> EigenPairs:
    """
    Build the covariance matrix of ``domain`` and truncate its spectrum.

    Raises
    ------
    ConfigurationError
        If more modes are requested than the grid has points. This is checked
        before the O(M²) matrix is built.
    """
    M = domain.total_grid_pts
    if truncation.num_eigenvals > M:
        raise ConfigurationError(
            f"num_eigenvals must be in [1, {M}] for {M} grid points, "
            f"got {truncation.num_eigenvals}"
        )
    cov = covariance_matrix(domain, truncation.length_scale, kernel)
    return truncated_eigenpairs(cov, truncation.num_eigenvals)
