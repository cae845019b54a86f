"""Image export utilities for rendered images.

Images handed to this module are already gamma corrected (the accumulator
stores square-root tone mapped values), so export only scales to 8 bits.

Supported formats:
    - Plain-text PPM (P3): magic line, "<width> <height>", max value 255,
      then one "r g b" line per pixel, top row first
    - PNG (8-bit via Pillow)

Example:
    >>> from pathtracer.preview.export import save_png, save_ppm
    >>>
    >>> renderer.render(100)
    >>> save_png(renderer, "output.png")
    >>> save_ppm(renderer, "output.ppm")
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, TextIO

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

from pathtracer.core.progressive import image_to_uint8

if TYPE_CHECKING:
    from pathtracer.core.progressive import ProgressiveRenderer


def _as_uint8(image: npt.NDArray[np.generic]) -> npt.NDArray[np.uint8]:
    if image.dtype == np.uint8:
        return image
    return image_to_uint8(image)


def write_ppm(stream: TextIO, image: npt.NDArray[np.generic]) -> None:
    """Write an image as plain-text PPM.

    Args:
        stream: Text stream to write to (file, ``sys.stdout``, StringIO).
        image: Array of shape (H, W, 3), either uint8 or gamma-corrected
            floats in [0, 1].
    """
    pixels = _as_uint8(image)
    height, width = pixels.shape[:2]
    stream.write(f"P3\n{width} {height}\n255\n")
    for r, g, b in pixels.reshape(-1, 3):
        stream.write(f"{r} {g} {b}\n")


def save_ppm(renderer: ProgressiveRenderer, filepath: str | Path) -> None:
    """Save the rendered image as a plain-text PPM file."""
    with open(filepath, "w", encoding="ascii") as stream:
        write_ppm(stream, renderer.get_image_uint8())


def save_png(renderer: ProgressiveRenderer, filepath: str | Path) -> None:
    """Save the rendered image as an 8-bit PNG file."""
    save_png_from_array(renderer.get_image_uint8(), filepath)


def save_png_from_array(image: npt.NDArray[np.generic], filepath: str | Path) -> None:
    """Save a (H, W, 3) uint8 or gamma-corrected float array as PNG."""
    # (H, W, 3) uint8 is read as RGB
    pil_image = PILImage.fromarray(np.ascontiguousarray(_as_uint8(image)))
    pil_image.save(filepath)


def compute_rmse(
    image_a: npt.NDArray[np.floating[npt.NBitBase]],
    image_b: npt.NDArray[np.floating[npt.NBitBase]],
) -> float:
    """Compute root mean squared error between two images.

    Args:
        image_a: First image array.
        image_b: Second image array (must have same shape as image_a).

    Returns:
        RMSE value (lower is more similar).

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(
            f"Image shapes must match: {image_a.shape} vs {image_b.shape}"
        )

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
