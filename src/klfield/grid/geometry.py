"""
Uniform rectilinear grid geometry.

A domain is an axis-aligned box [lower, upper] in 1, 2 or 3 dimensions,
sampled on a uniform grid with an independent periodicity flag per axis.
Distances between grid points are computed with the minimum-image
convention on periodic axes.

Grid spacing convention:
    - non-periodic axis: endpoints included, spacing = width / (n - 1)
    - periodic axis: upper corner is the image of the lower corner,
      spacing = width / n

Linear indices run with the first axis fastest:
    i = i0 + n0 * (i1 + n1 * i2)

License: BSD-3-Clause
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np

from ..exceptions import ConfigurationError


@dataclass(frozen=True)
class DomainSpec:
    """
    Axis-aligned box sampled on a uniform grid.

    Parameters
    ----------
    lower_corner : tuple of float
        Lower corner of the box, one value per axis.
    upper_corner : tuple of float
        Upper corner of the box, one value per axis.
    num_grid_pts : tuple of int
        Number of grid points along each axis.
    periodicity : tuple of bool
        Whether each axis wraps around.
    """

    lower_corner: tuple[float, ...]
    upper_corner: tuple[float, ...]
    num_grid_pts: tuple[int, ...]
    periodicity: tuple[bool, ...]

    def __post_init__(self):
        dim = len(self.lower_corner)
        if dim not in (1, 2, 3):
            raise ConfigurationError(f"Dimension must be 1, 2, or 3, got {dim}")
        for name in ("upper_corner", "num_grid_pts", "periodicity"):
            if len(getattr(self, name)) != dim:
                raise ConfigurationError(
                    f"{name} has {len(getattr(self, name))} entries, expected {dim}"
                )
        for lo, hi in zip(self.lower_corner, self.upper_corner):
            if not lo < hi:
                raise ConfigurationError("Require lower_corner < upper_corner on every axis")
        if any(n < 1 for n in self.num_grid_pts):
            raise ConfigurationError("num_grid_pts must be positive on every axis")

    @property
    def dim(self) -> int:
        return len(self.lower_corner)

    @property
    def shape(self) -> tuple[int, ...]:
        return tuple(self.num_grid_pts)

    @property
    def total_grid_pts(self) -> int:
        return int(np.prod(self.num_grid_pts))

    @property
    def width(self) -> np.ndarray:
        return np.asarray(self.upper_corner, dtype=float) - np.asarray(self.lower_corner, dtype=float)

    @property
    def spacing(self) -> np.ndarray:
        """Grid spacing along each axis."""
        spacing = np.zeros(self.dim)
        for d, (w, n, periodic) in enumerate(zip(self.width, self.num_grid_pts, self.periodicity)):
            if periodic:
                spacing[d] = w / n
            elif n > 1:
                spacing[d] = w / (n - 1)
        return spacing


def as_count(value, name: str) -> int:
    """
    Convert a grid or mode count to int, rejecting non-integral values.

    Raises
    ------
    ConfigurationError
        If ``value`` has a fractional part.
    """
    count = int(value)
    if count != value:
        raise ConfigurationError(f"{name} must be an integer, got {value!r}")
    return count


def make_domain(
    lower_corner: Sequence[float],
    upper_corner: Sequence[float],
    num_grid_pts: Sequence[int],
    periodicity: Sequence[bool] | None = None,
) -> DomainSpec:
    """
    Build a DomainSpec from plain sequences.

    Parameters
    ----------
    lower_corner, upper_corner : sequence of float
        Box corners.
    num_grid_pts : sequence of int
        Grid points per axis.
    periodicity : sequence of bool, optional
        Periodicity flags. Default is non-periodic on every axis.

    Returns
    -------
    domain : DomainSpec

    Raises
    ------
    ConfigurationError
        If the dimension is not 1, 2 or 3, the axes are inconsistent, or a
        grid count is not an integer.
    """
    if periodicity is None:
        periodicity = (False,) * len(lower_corner)
    return DomainSpec(
        lower_corner=tuple(float(x) for x in lower_corner),
        upper_corner=tuple(float(x) for x in upper_corner),
        num_grid_pts=tuple(as_count(n, "num_grid_pts") for n in num_grid_pts),
        periodicity=tuple(bool(p) for p in periodicity),
    )


def squared_distance(p1, p2, domain: DomainSpec) -> float:
    """
    Squared distance between two locations, respecting periodic axes.

    On a periodic axis of width W the separation along that axis is
    min(|dx|, W - |dx|).

    Parameters
    ----------
    p1, p2 : array_like
        Locations with one coordinate per axis.
    domain : DomainSpec
        Domain providing the widths and periodicity flags.

    Returns
    -------
    d2 : float
        Squared distance.

    Examples
    --------
    >>> domain = make_domain([0.0], [1.0], [11], [True])
    >>> squared_distance([0.0], [0.9], domain)  # doctest: +ELLIPSIS
    0.0100...
    """
    width = domain.width
    dist_squared = 0.0
    for d in range(domain.dim):
        delta = abs(float(p2[d]) - float(p1[d]))
        if domain.periodicity[d]:
            delta = min(delta, width[d] - delta)
        dist_squared += delta * delta
    return dist_squared


def pairwise_squared_distances(points: np.ndarray, domain: DomainSpec) -> np.ndarray:
    """
    Matrix of squared distances between all pairs of points.

    Vectorised form of :func:`squared_distance`.

    Parameters
    ----------
    points : ndarray
        Array of shape (M, dim).
    domain : DomainSpec

    Returns
    -------
    D2 : ndarray
        Symmetric array of shape (M, M).
    """
    points = np.asarray(points, dtype=float)
    if points.ndim != 2 or points.shape[1] != domain.dim:
        raise ValueError(f"Expected points of shape (M, {domain.dim}), got {points.shape}")

    width = domain.width
    D2 = np.zeros((points.shape[0], points.shape[0]))
    for d in range(domain.dim):
        delta = np.abs(points[None, :, d] - points[:, None, d])
        if domain.periodicity[d]:
            delta = np.minimum(delta, width[d] - delta)
        D2 += delta**2
    return D2


def grid_coordinates(domain: DomainSpec) -> np.ndarray:
    """
    Physical coordinates of every grid point.

    Parameters
    ----------
    domain : DomainSpec

    Returns
    -------
    coords : ndarray
        Array of shape (M, dim); row i holds the coordinates of linear
        index i (first axis fastest).
    """
    axes = [
        lo + h * np.arange(n)
        for lo, h, n in zip(domain.lower_corner, domain.spacing, domain.num_grid_pts)
    ]
    mesh = np.meshgrid(*axes, indexing="ij")
    return np.stack([m.ravel(order="F") for m in mesh], axis=1)


def grid_index(location, domain: DomainSpec) -> int:
    """
    Linear index of the grid point nearest to a location.

    Periodic axes wrap the location back into the box; non-periodic axes
    clamp to the first/last grid point.
    """
    index = 0
    stride = 1
    for d in range(domain.dim):
        n = domain.num_grid_pts[d]
        h = domain.spacing[d]
        if h > 0:
            i = int(np.rint((float(location[d]) - domain.lower_corner[d]) / h))
        else:
            i = 0
        if domain.periodicity[d]:
            i %= n
        else:
            i = min(max(i, 0), n - 1)
        index += i * stride
        stride *= n
    return index
