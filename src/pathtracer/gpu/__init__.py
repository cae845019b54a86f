"""Taichi-accelerated rendering.

Components:
    renderer: TaichiRenderer tracing one pass over all pixels per kernel launch

Importing this package requires taichi, and ``ti.init`` must be called
before a renderer is created.
"""

from .renderer import MAX_SPHERES, TaichiRenderer

__all__ = [
    "TaichiRenderer",
    "MAX_SPHERES",
]
