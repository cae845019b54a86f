"""Tests for the Taichi renderer.

Tests cover:
- Uploading worlds and cameras into Taichi fields
- Capacity and primitive-type errors
- Sample counting and resets
- Agreement with the CPU renderer on the same scene
"""

import math

import numpy as np
import pytest

from pathtracer.config import RenderConfig
from pathtracer.core.progressive import ProgressiveRenderer
from pathtracer.scene.presets import create_material_showcase_scene, create_two_sphere_scene
from pathtracer.scene.world import World

pytest.importorskip("taichi")


class NotASphere:
    def hit(self, ray, t_min, t_max):
        return None


@pytest.fixture
def config():
    return RenderConfig(width=16, height=8, max_depth=10, max_samples=None)


@pytest.fixture
def renderer(taichi_runtime, config):
    from pathtracer.gpu.renderer import TaichiRenderer

    world, camera = create_two_sphere_scene(aspect_ratio=2.0)
    renderer = TaichiRenderer(config, max_spheres=8)
    renderer.upload_world(world)
    renderer.upload_camera(camera)
    return renderer


class TestUpload:
    """Tests for scene and camera upload."""

    def test_sphere_count(self, renderer):
        assert renderer.get_sphere_count() == 2
        assert renderer.sphere_radii[1] == pytest.approx(100.0)
        assert renderer.sphere_centers[1][1] == pytest.approx(-100.5)

    def test_material_fields(self, taichi_runtime, config):
        from pathtracer.gpu.renderer import TaichiRenderer

        world, camera = create_material_showcase_scene()
        renderer = TaichiRenderer(config, max_spheres=8)
        renderer.upload_world(world)

        # ground, glass, metal, diffuse
        assert [renderer.material_types[i] for i in range(4)] == [0, 2, 1, 0]
        assert renderer.material_params[1] == pytest.approx(1.5)
        assert renderer.material_params[2] == pytest.approx(1.0)
        assert renderer.material_albedos[1][0] == pytest.approx(1.0)

    def test_camera_vectors(self, renderer):
        assert renderer.viewport_horizontal[None][0] == pytest.approx(4.0)
        assert renderer.viewport_vertical[None][1] == pytest.approx(2.0)
        assert renderer.lower_left_corner[None][2] == pytest.approx(-1.0)

    def test_capacity_exceeded(self, taichi_runtime, config):
        from pathtracer.gpu.renderer import TaichiRenderer

        world, _ = create_two_sphere_scene()
        renderer = TaichiRenderer(config, max_spheres=1)
        with pytest.raises(RuntimeError, match="Maximum number of spheres"):
            renderer.upload_world(world)

    def test_non_sphere_rejected(self, renderer):
        with pytest.raises(TypeError):
            renderer.upload_world(World([NotASphere()]))

    def test_normals_mode_rejected(self, taichi_runtime):
        from pathtracer.gpu.renderer import TaichiRenderer

        with pytest.raises(ValueError):
            TaichiRenderer(RenderConfig(width=16, height=8, mode="normals"))


class TestRendering:
    """Tests for progressive rendering in the kernel."""

    def test_render_counts_and_reset(self, renderer):
        renderer.render(3)
        assert renderer.sample_count == 3
        renderer.reset()
        assert renderer.sample_count == 0
        assert not renderer.get_image_numpy().any()

    def test_max_samples_cap(self, taichi_runtime):
        from pathtracer.gpu.renderer import TaichiRenderer

        world, camera = create_two_sphere_scene(aspect_ratio=2.0)
        renderer = TaichiRenderer(RenderConfig(width=16, height=8, max_samples=2))
        renderer.upload_world(world)
        renderer.upload_camera(camera)
        calls = []
        renderer.render(5, callback=lambda current, target: calls.append((current, target)))
        assert renderer.sample_count == 2
        assert calls == [(1, 2), (2, 2)]

    def test_zero_depth_renders_black(self, taichi_runtime):
        from pathtracer.gpu.renderer import TaichiRenderer

        world, camera = create_two_sphere_scene(aspect_ratio=2.0)
        renderer = TaichiRenderer(RenderConfig(width=16, height=8, max_depth=0, max_samples=None))
        renderer.upload_world(world)
        renderer.upload_camera(camera)
        renderer.render(2)
        assert not renderer.get_image_numpy().any()

    def test_upload_resets_accumulator(self, renderer):
        world, camera = create_two_sphere_scene(aspect_ratio=2.0)
        renderer.render(2)
        renderer.upload_camera(camera)
        assert renderer.sample_count == 0

    def test_image_shape_and_range(self, renderer):
        renderer.render(4)
        image = renderer.get_image_numpy()
        assert image.shape == (8, 16, 3)
        assert np.all(image >= 0.0)
        assert np.all(image <= 1.0 + 1e-5)
        assert renderer.get_image_uint8().dtype == np.uint8

    def test_empty_world_shows_sky(self, renderer):
        renderer.upload_world(World())
        renderer.render(2)
        image = renderer.get_image_numpy()
        np.testing.assert_allclose(image[:, :, 2], 1.0, atol=1e-5)
        # Top row first: red shrinks toward the top of the image
        assert image[0, :, 0].mean() < image[-1, :, 0].mean()
        assert np.all(image[:, :, 0] >= math.sqrt(0.5) - 1e-5)

    def test_matches_cpu_renderer(self, renderer, config):
        """Both renderers estimate the same image."""
        world, camera = create_two_sphere_scene(aspect_ratio=2.0)
        cpu = ProgressiveRenderer(world, camera, RenderConfig(
            width=16, height=8, max_depth=10, max_samples=None, seed=5
        ))
        cpu.render(32)
        renderer.render(32)

        cpu_image = cpu.get_image_numpy()
        gpu_image = renderer.get_image_numpy()
        assert abs(cpu_image.mean() - gpu_image.mean()) < 0.03
        # Per-row averages agree (sky at the top, ground at the bottom)
        np.testing.assert_allclose(
            cpu_image.mean(axis=(1, 2)), gpu_image.mean(axis=(1, 2)), atol=0.06
        )
