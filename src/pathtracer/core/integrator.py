"""Path tracing integrator for Monte Carlo light transport.

This module estimates the radiance arriving along a ray by following it
through the scene: at each hit the surface material either scatters the ray
(multiplying the path throughput by its attenuation) or absorbs it. Rays that
escape the scene pick up the sky gradient.

The recursion of the classic formulation

    ray_color(ray, depth) = attenuation * ray_color(scattered, depth - 1)

is unrolled into a loop accumulating the attenuation product, bounded by
``max_depth`` bounces. Exhausting the depth budget yields black.

Example:
    >>> import numpy as np
    >>> from pathtracer.core.integrator import render_sample
    >>> from pathtracer.scene.presets import create_two_sphere_scene
    >>>
    >>> world, camera = create_two_sphere_scene()
    >>> rng = np.random.default_rng(0)
    >>> color = render_sample(camera, world, 0.5, 0.5, max_depth=50, rng=rng)
"""

from __future__ import annotations

import math

import numpy as np

from pathtracer.camera.pinhole import Camera
from pathtracer.core.ray import Ray
from pathtracer.core.vec3 import Color
from pathtracer.scene.world import World

# =============================================================================
# Rendering Constants
# =============================================================================

# Maximum ray bounces (path length)
MAX_DEPTH = 50

# t_min and t_max for ray intersection. The lower bound keeps a scattered
# ray from re-hitting the surface it starts on ("shadow acne").
T_MIN = 0.001
T_MAX = math.inf

BLACK = Color(0.0, 0.0, 0.0)
WHITE = Color(1.0, 1.0, 1.0)
SKY_BLUE = Color(0.5, 0.7, 1.0)


def background_color(ray: Ray) -> Color:
    """Vertical white-to-blue gradient seen by rays that escape the scene."""
    unit_direction = ray.direction.unit()
    t = 0.5 * (unit_direction.y + 1.0)
    return (1.0 - t) * WHITE + t * SKY_BLUE


def ray_color(ray: Ray, world: World, depth: int, rng: np.random.Generator) -> Color:
    """Estimate the radiance carried back along ``ray``.

    Args:
        ray: The ray to trace.
        world: The scene to intersect.
        depth: Remaining bounce budget. 0 returns black immediately.
        rng: Random source passed to every material scatter.

    Returns:
        The linear RGB radiance estimate for this path.
    """
    throughput = Color(1.0, 1.0, 1.0)

    for _ in range(depth):
        hit = world.hit(ray, T_MIN, T_MAX)
        if hit is None:
            return throughput * background_color(ray)

        scatter = hit.material.scatter(ray, hit, rng)
        if scatter is None:
            # Ray was absorbed
            return Color(0.0, 0.0, 0.0)

        throughput = throughput * scatter.attenuation
        ray = scatter.ray

    # Bounce budget exhausted
    return Color(0.0, 0.0, 0.0)


def normal_color(ray: Ray, world: World) -> Color:
    """Shade by surface normal, mapping each component from [-1, 1] to [0, 1].

    A deterministic debugging view of the scene geometry: no scattering,
    background on a miss.
    """
    hit = world.hit(ray, T_MIN, T_MAX)
    if hit is None:
        return background_color(ray)
    return 0.5 * (hit.normal + WHITE)


def render_sample(
    camera: Camera,
    world: World,
    u: float,
    v: float,
    max_depth: int,
    rng: np.random.Generator,
) -> Color:
    """Render a single linear-RGB sample through image coordinates (u, v).

    Args:
        camera: The camera generating the primary ray.
        world: The scene.
        u: Horizontal image coordinate in [0, 1].
        v: Vertical image coordinate in [0, 1].
        max_depth: Maximum number of bounces.
        rng: Random source for scattering.

    Returns:
        The estimated radiance (linear RGB) for this sample.
    """
    return ray_color(camera.ray_for(u, v), world, max_depth, rng)
