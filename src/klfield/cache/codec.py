"""
Binary cache records for truncated eigendecompositions.

Layout (little-endian, no padding, no length prefixes):

    lower_corner   dim x float64
    upper_corner   dim x float64
    num_grid_pts   dim x uint32
    periodicity    dim x uint8
    num_eigenvals  uint32
    length_scale   float64
    eigenvalues    k x float64
    eigenvectors   M*k x float64, column-major (mode 0 first)

Array lengths are derived from the header. There is no format tag: a file
written for a different dimension is misread without error as long as it
is long enough. A file that is too short raises CacheFormatError.

License: BSD-3-Clause
"""

from __future__ import annotations

import os
import struct

import numpy as np

from ..exceptions import CacheFormatError, ConfigurationError
from ..grid.geometry import DomainSpec
from ..spectral.covariance import EigenPairs, SpectralTruncation

_FLOAT = np.dtype("<f8")


def _header_struct(dim: int) -> struct.Struct:
    if dim not in (1, 2, 3):
        raise ConfigurationError(f"Dimension must be 1, 2, or 3, got {dim}")
    return struct.Struct(f"<{dim}d{dim}d{dim}I{dim}BId")


def header_size(dim: int) -> int:
    """Size in bytes of the parameter header for a given dimension."""
    return _header_struct(dim).size


def record_size(dim: int, num_grid_pts: int, num_eigenvals: int) -> int:
    """Total size in bytes of a cache record."""
    return header_size(dim) + _FLOAT.itemsize * num_eigenvals * (1 + num_grid_pts)


def save_cache(
    path: str | os.PathLike,
    domain: DomainSpec,
    truncation: SpectralTruncation,
    eigenpairs: EigenPairs,
) -> None:
    """
    Write a cache record.

    Parameters
    ----------
    path : str or path-like
        Destination file. Its directory must exist.
    domain : DomainSpec
    truncation : SpectralTruncation
    eigenpairs : EigenPairs
        Must hold ``truncation.num_eigenvals`` modes over
        ``domain.total_grid_pts`` points.

    Raises
    ------
    OSError
        If the file cannot be opened for writing.
    ValueError
        If the eigenpairs do not match the header.
    """
    M = domain.total_grid_pts
    k = truncation.num_eigenvals
    if eigenpairs.eigenvectors.shape != (M, k):
        raise ValueError(
            f"Eigenvectors of shape {eigenpairs.eigenvectors.shape} "
            f"do not match header ({M}, {k})"
        )

    header = _header_struct(domain.dim).pack(
        *domain.lower_corner,
        *domain.upper_corner,
        *domain.num_grid_pts,
        *(int(p) for p in domain.periodicity),
        k,
        truncation.length_scale,
    )

    with open(path, "wb") as f:
        f.write(header)
        f.write(np.asarray(eigenpairs.eigenvalues, dtype=_FLOAT).tobytes())
        f.write(np.asarray(eigenpairs.eigenvectors, dtype=_FLOAT).tobytes(order="F"))


def load_cache(
    path: str | os.PathLike,
    dim: int,
) -> tuple[DomainSpec, SpectralTruncation, EigenPairs]:
    """
    Read a cache record.

    Parameters
    ----------
    path : str or path-like
        Cache file.
    dim : int
        Spatial dimension the file was written for (1, 2 or 3).

    Returns
    -------
    domain : DomainSpec
    truncation : SpectralTruncation
    eigenpairs : EigenPairs

    Raises
    ------
    OSError
        If the file cannot be opened for reading.
    CacheFormatError
        If the file ends before the data its header announces, or the
        stored eigenvalues are not in non-increasing order.
    """
    header_struct = _header_struct(dim)

    with open(path, "rb") as f:
        raw = f.read(header_struct.size)
        if len(raw) < header_struct.size:
            raise CacheFormatError(f"{path}: truncated header")
        values = header_struct.unpack(raw)

        lower = values[0:dim]
        upper = values[dim : 2 * dim]
        grid_pts = values[2 * dim : 3 * dim]
        periodicity = values[3 * dim : 4 * dim]
        k, length_scale = values[4 * dim], values[4 * dim + 1]

        M = 1
        for n in grid_pts:
            M *= n

        # Header counts are untrusted: check the size before allocating the read
        expected = record_size(dim, M, k)
        found = os.fstat(f.fileno()).st_size
        if found < expected:
            raise CacheFormatError(
                f"{path}: expected {k} eigenvalues and {M * k} eigenvector entries "
                f"({expected} bytes), found {found} bytes"
            )

        payload = f.read(_FLOAT.itemsize * k * (1 + M))

    if len(payload) < _FLOAT.itemsize * k * (1 + M):
        raise CacheFormatError(f"{path}: file shrank while reading")

    eigenvalues = np.frombuffer(payload, dtype=_FLOAT, count=k).astype(np.float64)
    eigenvectors = (
        np.frombuffer(payload, dtype=_FLOAT, count=M * k, offset=_FLOAT.itemsize * k)
        .astype(np.float64)
        .reshape((M, k), order="F")
    )

    domain = DomainSpec(
        lower_corner=tuple(lower),
        upper_corner=tuple(upper),
        num_grid_pts=tuple(grid_pts),
        periodicity=tuple(bool(p) for p in periodicity),
    )
    truncation = SpectralTruncation(num_eigenvals=k, length_scale=length_scale)
    try:
        eigenpairs = EigenPairs(eigenvalues, eigenvectors)
    except ValueError as exc:
        raise CacheFormatError(f"{path}: {exc}") from exc
    return domain, truncation, eigenpairs
