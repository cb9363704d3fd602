"""
Random field generators.

- Karhunen-Loève expansion on a uniform 1D/2D/3D grid, with the
  eigendecomposition cached on disk between runs
"""

from .uniform_grid import UniformGridRandomFieldGenerator

__all__ = [
    "UniformGridRandomFieldGenerator",
]
