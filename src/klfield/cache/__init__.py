"""
On-disk caching of truncated eigendecompositions.

- Parameter fingerprints (cache file names)
- Binary record encoding
- Output-root path resolution
"""

from .keys import CACHE_DIRECTORY, CACHE_EXTENSION, cache_filename, cache_relpath
from .codec import header_size, record_size, save_cache, load_cache
from .paths import OUTPUT_ENV_VAR, OutputDirectory, PathResolver

__all__ = [
    "CACHE_DIRECTORY",
    "CACHE_EXTENSION",
    "cache_filename",
    "cache_relpath",
    "header_size",
    "record_size",
    "save_cache",
    "load_cache",
    "OUTPUT_ENV_VAR",
    "OutputDirectory",
    "PathResolver",
]
