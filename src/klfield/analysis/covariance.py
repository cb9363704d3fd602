"""
Covariance diagnostics for sampled random fields.

Used to check realizations of a truncated Karhunen-Loève expansion against
the covariance it is meant to reproduce.

License: BSD-3-Clause
"""

import numpy as np


def empirical_covariance(samples: np.ndarray, mean: float | None = None) -> np.ndarray:
    """
    Sample covariance of a set of flat realizations.

    Parameters
    ----------
    samples : ndarray
        Array of shape (n_samples, M), one realization per row.
    mean : float, optional
        Known mean of the field. If None, the sample mean of each grid
        point is subtracted instead. Default is None.

    Returns
    -------
    C : ndarray
        Covariance estimate of shape (M, M).
    """
    samples = np.asarray(samples, dtype=float)
    if samples.ndim != 2:
        raise ValueError(f"Expected 2D array of samples, got shape {samples.shape}")

    n = samples.shape[0]
    if mean is None:
        if n < 2:
            raise ValueError("At least two samples are needed to estimate the mean")
        centered = samples - samples.mean(axis=0)
        return centered.T @ centered / (n - 1)

    centered = samples - mean
    return centered.T @ centered / n


def truncated_covariance(eigenvalues: np.ndarray, eigenvectors: np.ndarray) -> np.ndarray:
    """
    Covariance represented by a set of eigenpairs.

        C_k = V · diag(λ) · Vᵀ

    Parameters
    ----------
    eigenvalues : ndarray
        Shape (k,).
    eigenvectors : ndarray
        Shape (M, k).

    Returns
    -------
    C_k : ndarray
        Shape (M, M).
    """
    eigenvalues = np.clip(np.asarray(eigenvalues, dtype=float), 0.0, None)
    eigenvectors = np.asarray(eigenvectors, dtype=float)
    return (eigenvectors * eigenvalues) @ eigenvectors.T


def relative_covariance_error(estimate: np.ndarray, reference: np.ndarray) -> float:
    """Frobenius-norm error of ``estimate`` relative to ``reference``."""
    reference = np.asarray(reference, dtype=float)
    norm = np.linalg.norm(reference)
    if norm == 0:
        raise ValueError("Reference covariance is zero")
    return float(np.linalg.norm(np.asarray(estimate, dtype=float) - reference) / norm)


def explained_variance_ratio(eigenvalues: np.ndarray, total_variance: float) -> float:
    """
    Fraction of the total variance carried by a set of eigenvalues.

    Parameters
    ----------
    eigenvalues : ndarray
        Retained eigenvalues.
    total_variance : float
        Trace of the full covariance matrix.
    """
    if total_variance <= 0:
        raise ValueError("total_variance must be > 0")
    return float(np.sum(np.clip(eigenvalues, 0.0, None)) / total_variance)
