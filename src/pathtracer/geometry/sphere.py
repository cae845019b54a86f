"""Sphere primitive with ray-sphere intersection.

The ray-sphere intersection is found by solving:
    |origin + t * direction - center|^2 = radius^2

which expands to the quadratic a*t^2 + b*t + c = 0 with:
    oc = origin - center
    a = dot(direction, direction)
    b = 2 * dot(direction, oc)
    c = dot(oc, oc) - radius^2

The nearer root is preferred; the farther root is used when the nearer one
falls outside the accepted [t_min, t_max] interval (e.g. the ray starts inside
the sphere).

Example:
    >>> from pathtracer.core.ray import Ray
    >>> from pathtracer.core.vec3 import Color, Vec3
    >>> from pathtracer.geometry.sphere import Sphere
    >>> from pathtracer.materials import Lambertian
    >>> sphere = Sphere(Vec3(0, 0, -1), 0.5, Lambertian(Color(0.5, 0.5, 0.5)))
    >>> record = sphere.hit(Ray(Vec3(0, 0, 0), Vec3(0, 0, -1)), 0.001, float("inf"))
    >>> record.t
    0.5
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from pathtracer.core.ray import Ray
from pathtracer.core.vec3 import Point3, Vec3

if TYPE_CHECKING:
    from pathtracer.materials.material import Material


class FaceKind(Enum):
    """Which side of a surface a ray hit."""

    FRONT = "front"
    BACK = "back"


@dataclass(frozen=True)
class HitRecord:
    """Record of a ray-surface intersection.

    Attributes:
        t: The ray parameter of the intersection.
        point: The 3D point where the ray intersected the surface.
        normal: The surface normal at the intersection (unit length). Always
            points against the incident ray: outward for front face hits,
            inward for back face hits.
        face: Whether the ray hit the front (outside) or back (inside) face.
        material: The material of the hit primitive.
    """

    t: float
    point: Point3
    normal: Vec3
    face: FaceKind
    material: Material

    @property
    def front_face(self) -> bool:
        return self.face is FaceKind.FRONT

    @classmethod
    def from_outward_normal(
        cls,
        ray: Ray,
        t: float,
        point: Point3,
        outward_normal: Vec3,
        material: Material,
    ) -> HitRecord:
        """Build a record, orienting the normal against the incident ray.

        Front face: ray direction and outward normal point in opposite
        directions. Otherwise the ray is inside the surface and the normal
        is flipped.
        """
        if ray.direction.dot(outward_normal) < 0.0:
            return cls(t, point, outward_normal, FaceKind.FRONT, material)
        return cls(t, point, -outward_normal, FaceKind.BACK, material)


@dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere.
        radius: The radius of the sphere. Must be positive; non-positive
            radii never report a hit.
        material: The material shared with any other primitive using it.
    """

    center: Point3
    radius: float
    material: Material

    def hit(self, ray: Ray, t_min: float, t_max: float) -> HitRecord | None:
        """Test for ray-sphere intersection within [t_min, t_max].

        Args:
            ray: The ray to test (direction need not be normalized).
            t_min: Minimum accepted ray parameter (avoids self-intersection).
            t_max: Maximum accepted ray parameter.

        Returns:
            The hit record of the nearest accepted root, or None on a miss.
        """
        if self.radius <= 0.0:
            return None

        oc = ray.origin - self.center
        a = ray.direction.dot(ray.direction)
        b = 2.0 * ray.direction.dot(oc)
        c = oc.dot(oc) - self.radius * self.radius

        discriminant = b * b - 4.0 * a * c
        if discriminant < 0.0:
            return None
        sqrt_d = math.sqrt(discriminant)

        root = (-b - sqrt_d) / (2.0 * a)
        if root < t_min or root > t_max:
            root = (-b + sqrt_d) / (2.0 * a)
            if root < t_min or root > t_max:
                return None

        point = ray.at(root)
        # Already unit length because the radius is positive
        outward_normal = (point - self.center) / self.radius
        return HitRecord.from_outward_normal(ray, root, point, outward_normal, self.material)
