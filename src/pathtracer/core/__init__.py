"""Core rendering module.

Components:
    vec3: Vec3 value type, reflection/refraction and random sampling helpers
    ray: Ray data structure
    integrator: Path-traced radiance estimate along one ray
    progressive: Gamma-space accumulation and the progressive renderer

The integrator follows a ray through at most ``max_depth`` bounces,
multiplying the attenuation of each scattering event, and returns the
background gradient once the path escapes the scene.
"""

from .ray import Ray
from .vec3 import (
    Color,
    Point3,
    Vec3,
    random_in_unit_sphere,
    random_unit_vector,
    random_vec3,
    reflect,
    refract,
)

# Note: integrator and progressive are NOT imported here to avoid circular imports.
# Import directly from pathtracer.core.integrator or pathtracer.core.progressive when needed.
#
# For progressive rendering, use:
#   from pathtracer.core.progressive import ProgressiveRenderer

__all__ = [
    "Ray",
    "Vec3",
    "Point3",
    "Color",
    "reflect",
    "refract",
    "random_vec3",
    "random_in_unit_sphere",
    "random_unit_vector",
]
