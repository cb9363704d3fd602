"""
Exceptions raised by klfield.

License: BSD-3-Clause
"""


class ConfigurationError(ValueError):
    """Invalid generator parameters (dimension, grid, truncation)."""


class CacheFormatError(ValueError):
    """A cache file is shorter than the record its header describes."""
