"""Render configuration.

Example:
    >>> from pathtracer.config import RenderConfig
    >>> config = RenderConfig(width=400, seed=7)
    >>> config.height
    225
    >>> rng = config.make_rng()
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

import numpy as np

# Shading used per sample: full path tracing, or surface normals as color
ShadingMode = Literal["path", "normals"]


@dataclass
class RenderConfig:
    """Parameters of a progressive render.

    Attributes:
        width: Image width in pixels.
        aspect_ratio: Width divided by height. Used to derive ``height``
            when it is not given explicitly.
        height: Image height in pixels (default: ``int(width / aspect_ratio)``).
        max_depth: Maximum ray bounces per sample.
        max_samples: Passes after which the renderer stops refining the
            image. None renders for as long as it is asked to.
        seed: Seed for the random source. None draws fresh OS entropy.
        mode: Shading mode, "path" or "normals".
    """

    width: int = 480
    aspect_ratio: float = 16.0 / 9.0
    height: int | None = None
    max_depth: int = 50
    max_samples: int | None = 100
    seed: int | None = None
    mode: ShadingMode = "path"

    def __post_init__(self) -> None:
        if self.height is None:
            self.height = int(self.width / self.aspect_ratio)
        self.validate()

    def validate(self) -> None:
        """Check the configuration.

        Raises:
            ValueError: If any parameter is out of range.
        """
        if self.width < 2 or self.height is None or self.height < 2:
            raise ValueError(
                f"Image dimensions ({self.width}x{self.height}) must be at least 2x2"
            )
        if self.max_depth < 0:
            raise ValueError(f"max_depth = {self.max_depth} must be non-negative")
        if self.max_samples is not None and self.max_samples <= 0:
            raise ValueError(f"max_samples = {self.max_samples} must be positive or None")
        if self.mode not in ("path", "normals"):
            raise ValueError(f"Unknown shading mode: {self.mode}")

    def make_rng(self) -> np.random.Generator:
        """Create the random source for this render."""
        return np.random.default_rng(self.seed)
