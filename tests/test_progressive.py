"""Unit tests for progressive accumulation.

Tests cover:
- Gamma-space running average formula
- 8-bit conversion (truncation and clamping)
- ProgressiveRenderer sample counting, caps, callbacks and resets
- Reproducibility for a fixed seed
"""

import math

import numpy as np
import pytest

from pathtracer.config import RenderConfig
from pathtracer.core.progressive import (
    ProgressiveRenderer,
    accumulate,
    accumulate_buffer,
    accumulate_channel,
    image_to_uint8,
    to_rgb8,
)
from pathtracer.core.vec3 import Color, Point3
from pathtracer.geometry.sphere import Sphere
from pathtracer.materials import Lambertian
from pathtracer.scene.presets import create_two_sphere_scene
from pathtracer.scene.world import World


def make_renderer(world=None, **config):
    scene_world, camera = create_two_sphere_scene(aspect_ratio=2.0)
    params = {"width": 8, "height": 4, "max_depth": 10, "max_samples": None, "seed": 7}
    params.update(config)
    return ProgressiveRenderer(
        scene_world if world is None else world, camera, RenderConfig(**params)
    )


class TestAccumulate:
    """Tests for the accumulation formula."""

    def test_first_sample_is_square_root(self):
        result = accumulate(Color(0.9, 0.9, 0.9), Color(0.25, 0.64, 1.0), 0)
        assert result.isclose(Color(0.5, 0.8, 1.0))

    def test_result_is_sqrt_of_mean(self):
        samples = [0.1, 0.9, 0.4, 0.0, 0.6]
        value = 0.0
        for i, s in enumerate(samples):
            value = accumulate_channel(value, s, i)
        assert value == pytest.approx(math.sqrt(sum(samples) / len(samples)))

    def test_order_independent(self):
        samples = [0.3, 0.05, 0.8, 0.5]
        forward = 0.0
        backward = 0.0
        for i, s in enumerate(samples):
            forward = accumulate_channel(forward, s, i)
        for i, s in enumerate(reversed(samples)):
            backward = accumulate_channel(backward, s, i)
        assert forward == pytest.approx(backward)

    def test_constant_samples_fixed_point(self):
        value = 0.0
        for i in range(10):
            value = accumulate_channel(value, 0.36, i)
        assert value == pytest.approx(0.6)

    def test_buffer_matches_scalar(self):
        rng = np.random.default_rng(3)
        buffer = rng.random((2, 3, 3))
        samples = rng.random((2, 3, 3))
        result = accumulate_buffer(buffer, samples, 4)
        assert result[1, 2, 0] == pytest.approx(
            accumulate_channel(buffer[1, 2, 0], samples[1, 2, 0], 4)
        )


class TestRgb8:
    """Tests for 8-bit conversion."""

    def test_truncates(self):
        assert to_rgb8(Color(1.0, 0.5, 0.0)) == (255, 127, 0)
        assert to_rgb8(Color(0.999, 0.999, 0.999)) == (254, 254, 254)

    def test_clamps(self):
        assert to_rgb8(Color(1.2, -0.1, 0.5)) == (255, 0, 127)

    def test_image_matches_scalar(self):
        image = np.array([[[1.0, 0.5, 0.0], [1.2, -0.1, 0.999]]])
        result = image_to_uint8(image)
        assert result.dtype == np.uint8
        assert result.tolist() == [[[255, 127, 0], [255, 0, 254]]]


class TestProgressiveRenderer:
    """Tests for ProgressiveRenderer."""

    def test_initial_state(self):
        renderer = make_renderer()
        assert renderer.sample_count == 0
        assert renderer.get_image_numpy().shape == (4, 8, 3)
        assert not renderer.get_image_numpy().any()

    def test_render_counts_samples(self):
        renderer = make_renderer()
        renderer.render(3)
        assert renderer.sample_count == 3
        renderer.render(2)
        assert renderer.sample_count == 5

    def test_render_zero_samples(self):
        renderer = make_renderer()
        renderer.render(0)
        assert renderer.sample_count == 0

    def test_max_samples_cap(self):
        renderer = make_renderer(max_samples=3)
        renderer.render(10)
        assert renderer.sample_count == 3
        assert renderer.is_converged
        renderer.render(5)
        assert renderer.sample_count == 3

    def test_callback_batches(self):
        renderer = make_renderer()
        calls = []
        renderer.render(5, batch_size=2, callback=lambda current, target: calls.append((current, target)))
        assert calls == [(2, 5), (4, 5), (5, 5)]

    def test_render_progressive_yields(self):
        renderer = make_renderer()
        progress = list(renderer.render_progressive(3))
        assert progress == [(1, 3), (2, 3), (3, 3)]

    def test_values_in_unit_range(self):
        renderer = make_renderer()
        renderer.render(2)
        image = renderer.get_image_numpy()
        assert np.all(image >= 0.0)
        assert np.all(image <= 1.0 + 1e-12)

    def test_empty_world_shows_sky(self):
        """Without objects every pixel is the background, blue channel 1."""
        renderer = make_renderer(world=World())
        renderer.render(2)
        image = renderer.get_image_numpy()
        np.testing.assert_allclose(image[:, :, 2], 1.0)
        # Red channel shrinks toward the top of the image
        assert image[0, :, 0].mean() < image[-1, :, 0].mean()
        assert np.all(image[:, :, 0] >= math.sqrt(0.5) - 1e-9)

    def test_zero_depth_renders_black(self):
        renderer = make_renderer(max_depth=0)
        renderer.render(2)
        assert renderer.sample_count == 2
        assert not renderer.get_image_numpy().any()

    def test_reset(self):
        renderer = make_renderer()
        renderer.render(2)
        renderer.reset()
        assert renderer.sample_count == 0
        assert not renderer.get_image_numpy().any()

    def test_get_image_returns_copy(self):
        renderer = make_renderer()
        renderer.render(1)
        image = renderer.get_image_numpy()
        image[:] = 0.0
        assert renderer.get_image_numpy().any()

    def test_get_pixel(self):
        renderer = make_renderer()
        renderer.render(1)
        pixel = renderer.get_pixel(1, 2)
        assert pixel.to_tuple() == tuple(renderer.get_image_numpy()[1, 2])

    def test_same_seed_reproducible(self):
        a = make_renderer(seed=11)
        b = make_renderer(seed=11)
        a.render(2)
        b.render(2)
        np.testing.assert_array_equal(a.get_image_numpy(), b.get_image_numpy())

    def test_uint8_image(self):
        renderer = make_renderer()
        renderer.render(1)
        image = renderer.get_image_uint8()
        assert image.dtype == np.uint8
        assert image.shape == (4, 8, 3)


class TestParameterChanges:
    """Tests for camera/world updates between passes."""

    def test_update_camera_recomputes_and_resets(self):
        renderer = make_renderer()
        renderer.render(2)
        renderer.update_camera(vertical_fov_degrees=60.0)

        assert renderer.sample_count == 0
        assert renderer.camera.vertical_vector.length() == pytest.approx(
            2.0 * math.tan(math.radians(30.0))
        )

    def test_update_camera_unknown_parameter(self):
        renderer = make_renderer()
        with pytest.raises(AttributeError):
            renderer.update_camera(zoom=2.0)

    def test_update_world_resets(self):
        renderer = make_renderer()
        renderer.render(2)
        gray = Lambertian(Color(0.5, 0.5, 0.5))
        renderer.update_world(lambda world: world.add(Sphere(Point3(1.0, 0.0, -1.0), 0.5, gray)))

        assert renderer.sample_count == 0
        assert len(renderer.world) == 3


class TestNormalsMode:
    """Tests for the normal shading mode."""

    def test_normals_mode_center_pixel(self):
        world, camera = create_two_sphere_scene(aspect_ratio=2.0)
        config = RenderConfig(width=32, height=16, max_samples=None, seed=1, mode="normals")
        renderer = ProgressiveRenderer(world, camera, config)
        renderer.render(4)
        # Front of the small sphere faces +z: normal color near (0.5, 0.5, 1),
        # gamma-corrected to about (0.71, 0.71, 1)
        pixel = renderer.get_pixel(8, 16)
        assert pixel.z == pytest.approx(1.0, abs=0.02)
        assert pixel.x == pytest.approx(math.sqrt(0.5), abs=0.1)
        assert pixel.y == pytest.approx(math.sqrt(0.5), abs=0.08)
