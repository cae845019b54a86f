"""Ray data structure.

Example:
    >>> from pathtracer.core.ray import Ray
    >>> from pathtracer.core.vec3 import Vec3
    >>> ray = Ray(origin=Vec3(0.0, 0.0, 0.0), direction=Vec3(0.0, 0.0, -1.0))
    >>> ray.at(5.0)  # Point 5 units along the ray
    Vec3(0.0, 0.0, -5.0)
"""

from __future__ import annotations

from dataclasses import dataclass

from pathtracer.core.vec3 import Point3, Vec3


@dataclass(frozen=True)
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray.
        direction: The direction vector of the ray. Not required to be
            normalized; consumers normalize when they need to.
    """

    origin: Point3
    direction: Vec3

    def at(self, t: float) -> Point3:
        """Compute the point ``origin + t * direction``."""
        return self.origin + t * self.direction
