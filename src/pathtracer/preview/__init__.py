"""Preview module for rendered output.

Components:
    export: Plain-text PPM and PNG export utilities

Example:
    >>> from pathtracer.preview import save_png
    >>> renderer.render(100)
    >>> save_png(renderer, "output.png")
"""

from pathtracer.preview.export import (
    compute_rmse,
    save_png,
    save_png_from_array,
    save_ppm,
    write_ppm,
)

__all__ = [
    "write_ppm",
    "save_ppm",
    "save_png",
    "save_png_from_array",
    "compute_rmse",
]
