"""
Cache fingerprints.

The file name of a cached decomposition encodes every generator parameter:

    <tag>_<lower...>_<upper...>_<gridpts...>_<periodicity...>_<k>_<ℓ>.rfg

with tag ``x``, ``xy`` or ``xyz``. Floating-point fields are written with
three fixed decimals, so parameter sets that agree to three decimals share
a file.

License: BSD-3-Clause
"""

from __future__ import annotations

from ..exceptions import ConfigurationError
from ..grid.geometry import DomainSpec
from ..spectral.covariance import SpectralTruncation

CACHE_DIRECTORY = "CachedRandomFields"
CACHE_EXTENSION = ".rfg"

_DIM_TAGS = {1: "x", 2: "xy", 3: "xyz"}


def cache_filename(domain: DomainSpec, truncation: SpectralTruncation) -> str:
    """
    File name identifying a parameter set.

    Examples
    --------
    >>> from klfield.grid import make_domain
    >>> domain = make_domain([0, 0], [1, 1], [3, 3], [False, False])
    >>> cache_filename(domain, SpectralTruncation(4, 0.5))
    'xy_0.000_0.000_1.000_1.000_3_3_0_0_4_0.500.rfg'
    """
    try:
        tag = _DIM_TAGS[domain.dim]
    except KeyError:
        raise ConfigurationError(f"Dimension must be 1, 2, or 3, got {domain.dim}") from None

    fields = [tag]
    fields += [f"{x:.3f}" for x in domain.lower_corner]
    fields += [f"{x:.3f}" for x in domain.upper_corner]
    fields += [f"{int(n)}" for n in domain.num_grid_pts]
    fields += [f"{int(bool(p))}" for p in domain.periodicity]
    fields.append(f"{int(truncation.num_eigenvals)}")
    fields.append(f"{truncation.length_scale:.3f}")

    return "_".join(fields) + CACHE_EXTENSION


def cache_relpath(domain: DomainSpec, truncation: SpectralTruncation) -> str:
    """Cache file path relative to the output root."""
    return f"{CACHE_DIRECTORY}/{cache_filename(domain, truncation)}"
