"""Progressive renderer for iterative sample accumulation.

Each pixel stores a gamma-corrected (square-root tone mapped) running value,
and the renderer keeps a single sample counter shared by every pixel. For
sample index ``i`` (0-based), a new linear sample ``new`` and the stored value
``prev_gamma``:

    prev_linear_weighted = i * prev_gamma^2
    updated_linear_avg   = (new + prev_linear_weighted) / (i + 1)
    stored_gamma         = sqrt(updated_linear_avg)

Squaring undoes the gamma curve, so the stored value is always the square
root of the arithmetic mean of every linear sample seen so far, without
keeping a separate linear buffer.

Example:
    >>> from pathtracer.config import RenderConfig
    >>> from pathtracer.core.progressive import ProgressiveRenderer
    >>> from pathtracer.scene.presets import create_two_sphere_scene
    >>>
    >>> world, camera = create_two_sphere_scene()
    >>> renderer = ProgressiveRenderer(world, camera, RenderConfig(width=64, seed=1))
    >>> renderer.render(10)  # Render 10 SPP
    >>> image = renderer.get_image_uint8()
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Generator
from typing import Any

import numpy as np
import numpy.typing as npt

from pathtracer.camera.pinhole import Camera
from pathtracer.config import RenderConfig
from pathtracer.core.integrator import normal_color, render_sample
from pathtracer.core.vec3 import Color
from pathtracer.scene.world import World

logger = logging.getLogger(__name__)

# Type alias for progress callback
# Callback receives (current_samples, total_target_samples)
ProgressCallback = Callable[[int, int], None]


# =============================================================================
# Accumulation
# =============================================================================


def accumulate_channel(prev_gamma: float, new_linear: float, sample_index: int) -> float:
    """Merge one linear sample into a gamma-corrected running average."""
    prev_linear_weighted = sample_index * prev_gamma * prev_gamma
    updated_linear_avg = (new_linear + prev_linear_weighted) / (sample_index + 1)
    return math.sqrt(updated_linear_avg)


def accumulate(existing_gamma: Color, new_linear: Color, sample_index: int) -> Color:
    """Merge a linear-space sample into a stored gamma-corrected color.

    Args:
        existing_gamma: The stored gamma-corrected value (ignored at index 0).
        new_linear: The newly computed linear RGB sample.
        sample_index: 0-based index of ``new_linear`` among this pixel's samples.

    Returns:
        The updated gamma-corrected color.
    """
    return Color(
        accumulate_channel(existing_gamma.x, new_linear.x, sample_index),
        accumulate_channel(existing_gamma.y, new_linear.y, sample_index),
        accumulate_channel(existing_gamma.z, new_linear.z, sample_index),
    )


def accumulate_buffer(
    buffer: npt.NDArray[np.float64],
    samples: npt.NDArray[np.float64],
    sample_index: int,
) -> npt.NDArray[np.float64]:
    """Vectorized ``accumulate`` over a whole image buffer."""
    return np.sqrt((samples + sample_index * buffer * buffer) / (sample_index + 1))


def to_rgb8(color: Color) -> tuple[int, int, int]:
    """Scale a gamma-corrected color to 8-bit channels.

    Each channel is ``clamp(c * 255, 0, 255)`` truncated to an integer.
    """
    return tuple(int(min(max(c * 255.0, 0.0), 255.0)) for c in color)  # type: ignore[return-value]


def image_to_uint8(image: npt.NDArray[np.floating[Any]]) -> npt.NDArray[np.uint8]:
    """Vectorized ``to_rgb8`` for a gamma-corrected image array."""
    return np.clip(image * 255.0, 0.0, 255.0).astype(np.uint8)


# =============================================================================
# Progressive Renderer
# =============================================================================


class ProgressiveRenderer:
    """A progressive renderer that accumulates samples over time.

    The renderer owns the per-pixel gamma buffer and the shared sample
    counter. Passes are strictly sequential: pass ``i + 1`` reads the values
    left by pass ``i``. Any change to the camera or the world must go through
    ``update_camera``/``update_world`` (or be followed by ``reset``) so no
    partially refined image survives a parameter change.

    Attributes:
        world: The scene being rendered.
        camera: The camera generating primary rays.
        config: Image size, depth and sampling parameters.
    """

    def __init__(
        self,
        world: World,
        camera: Camera,
        config: RenderConfig | None = None,
        rng: np.random.Generator | None = None,
    ) -> None:
        """Initialize the progressive renderer.

        Args:
            world: The scene to render.
            camera: The camera to render from.
            config: Render parameters (defaults to ``RenderConfig()``).
            rng: Random source. Defaults to ``config.make_rng()``.
        """
        self.world = world
        self.camera = camera
        self.config = config if config is not None else RenderConfig()
        self.rng = rng if rng is not None else self.config.make_rng()

        self._buffer = np.zeros((self.height, self.width, 3), dtype=np.float64)
        self._sample_count = 0

    @property
    def width(self) -> int:
        """Get the image width."""
        return self.config.width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self.config.height  # type: ignore[return-value]

    @property
    def sample_count(self) -> int:
        """Get the current number of accumulated samples per pixel."""
        return self._sample_count

    @property
    def is_converged(self) -> bool:
        """True once ``config.max_samples`` passes have been accumulated."""
        max_samples = self.config.max_samples
        return max_samples is not None and self._sample_count >= max_samples

    def reset(self) -> None:
        """Reset the accumulator for a new render.

        Clears the color buffer and sample count, allowing a fresh render
        without changing the image dimensions.
        """
        self._buffer.fill(0.0)
        self._sample_count = 0
        logger.debug("Accumulator reset")

    def update_camera(self, **changes: Any) -> None:
        """Change camera parameters, recompute its basis, and reset.

        Args:
            **changes: Camera attributes to set, e.g. ``origin=Point3(...)``,
                ``vertical_fov_degrees=60.0``.

        Raises:
            AttributeError: If a name is not a camera parameter.
        """
        for name, value in changes.items():
            if name not in _CAMERA_PARAMETERS:
                raise AttributeError(f"Camera has no parameter named {name!r}")
            setattr(self.camera, name, value)
        self.camera.recompute_basis()
        self.reset()

    def update_world(self, mutate: Callable[[World], None]) -> None:
        """Apply ``mutate`` to the world between passes, then reset."""
        mutate(self.world)
        self.reset()

    # =========================================================================
    # Rendering
    # =========================================================================

    def _sample(self, u: float, v: float) -> Color:
        if self.config.mode == "normals":
            return normal_color(self.camera.ray_for(u, v), self.world)
        return render_sample(self.camera, self.world, u, v, self.config.max_depth, self.rng)

    def render_pass(self) -> None:
        """Trace one jittered sample through every pixel and accumulate it.

        Row 0 is the top of the image, so ``v`` runs from 1 at the top row to
        0 at the bottom row.
        """
        width, height = self.width, self.height
        sample_index = self._sample_count
        samples = np.empty_like(self._buffer)

        for row in range(height):
            for col in range(width):
                u = (col + self.rng.random()) / (width - 1)
                v = (height - row - 1 + self.rng.random()) / (height - 1)
                samples[row, col] = self._sample(u, v).to_tuple()

        self._buffer = accumulate_buffer(self._buffer, samples, sample_index)
        self._sample_count += 1
        logger.debug("Finished pass %d (%dx%d)", self._sample_count, width, height)

    def render(
        self,
        num_samples: int = 1,
        batch_size: int = 1,
        callback: ProgressCallback | None = None,
    ) -> None:
        """Render samples progressively with optional progress callback.

        Accumulates up to ``num_samples`` more passes into the existing
        buffer, stopping early once ``config.max_samples`` is reached.

        Args:
            num_samples: Total number of samples to add.
            batch_size: Number of samples to render before each callback.
            callback: Optional callback function called after each batch.
                Receives (current_total_samples, target_total_samples).

        Example:
            >>> def progress(current, target):
            ...     print(f"Progress: {current}/{target} samples")
            >>> renderer.render(100, batch_size=10, callback=progress)
        """
        for current, target in self.render_progressive(num_samples, batch_size):
            if callback is not None:
                callback(current, target)

    def render_progressive(
        self,
        num_samples: int = 1,
        batch_size: int = 1,
    ) -> Generator[tuple[int, int], None, None]:
        """Render samples progressively, yielding progress after each batch.

        Args:
            num_samples: Total number of samples to add.
            batch_size: Number of samples to render before each yield.

        Yields:
            Tuple of (current_total_samples, target_total_samples).
        """
        if num_samples <= 0:
            return

        target_samples = self._sample_count + num_samples
        if self.config.max_samples is not None:
            target_samples = min(target_samples, self.config.max_samples)

        while self._sample_count < target_samples:
            batch = min(batch_size, target_samples - self._sample_count)
            for _ in range(batch):
                self.render_pass()
            yield (self._sample_count, target_samples)

    # =========================================================================
    # Output
    # =========================================================================

    def get_pixel(self, row: int, col: int) -> Color:
        """Get the stored gamma-corrected color of one pixel."""
        return Color.from_iterable(self._buffer[row, col])

    def get_image_numpy(self) -> npt.NDArray[np.float64]:
        """Get a copy of the gamma-corrected image, shape (height, width, 3)."""
        return self._buffer.copy()

    def get_image_uint8(self) -> npt.NDArray[np.uint8]:
        """Get the image as 8-bit channels, shape (height, width, 3)."""
        return image_to_uint8(self._buffer)

    def __repr__(self) -> str:
        """Return a string representation of the renderer state."""
        return (
            f"ProgressiveRenderer(width={self.width}, height={self.height}, "
            f"samples={self.sample_count})"
        )


_CAMERA_PARAMETERS = frozenset(
    {
        "origin",
        "direction",
        "up_hint",
        "vertical_fov_degrees",
        "focal_length",
        "aspect_ratio",
    }
)
