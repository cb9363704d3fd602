"""
Resolution of cache paths relative to an output root.

Any object with ``exists(relpath)`` and ``resolve(relpath)`` can be passed
to the generator as a resolver. :class:`OutputDirectory` is the default:
its root is the ``KLFIELD_OUTPUT`` environment variable, or the current
working directory when the variable is unset.

License: BSD-3-Clause
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Protocol

OUTPUT_ENV_VAR = "KLFIELD_OUTPUT"


class PathResolver(Protocol):
    def exists(self, relpath: str) -> bool: ...

    def resolve(self, relpath: str) -> Path: ...


class OutputDirectory:
    """
    Resolve relative paths under a root directory.

    Parameters
    ----------
    root : str or path-like, optional
        Output root. Default is ``$KLFIELD_OUTPUT`` or the current
        working directory.
    """

    def __init__(self, root: str | os.PathLike | None = None):
        if root is None:
            root = os.environ.get(OUTPUT_ENV_VAR) or Path.cwd()
        self.root = Path(root)

    def exists(self, relpath: str) -> bool:
        return self.resolve(relpath).is_file()

    def resolve(self, relpath: str) -> Path:
        return (self.root / relpath).absolute()

    def __repr__(self) -> str:
        return f"OutputDirectory({str(self.root)!r})"
