"""Pinhole camera model for perspective projection ray generation.

The camera builds an orthonormal basis from its view parameters:
- w: ``unit(direction)``, the camera's backward axis (from the scene
  toward the eye). The camera looks along -w.
- right: ``unit(up_hint x w)``, points right in the image plane
- true_up: ``w x right``, points up in the image plane

The viewport is a virtual image plane ``focal_length`` units in front of the
eye. Its height is ``2 * tan(vfov / 2)`` and its width ``height * aspect``.

There is no dirty tracking: after mutating ``origin``, ``direction``,
``up_hint``, ``vertical_fov_degrees``, ``focal_length`` or ``aspect_ratio``
the caller must call ``recompute_basis()`` before generating more rays.

Example:
    >>> from pathtracer.camera.pinhole import Camera
    >>> from pathtracer.core.vec3 import Point3, Vec3
    >>>
    >>> # Camera at the origin looking down -z
    >>> camera = Camera(
    ...     origin=Point3(0.0, 0.0, 0.0),
    ...     direction=Vec3(0.0, 0.0, 1.0),
    ...     up_hint=Vec3(0.0, 1.0, 0.0),
    ...     vertical_fov_degrees=90.0,
    ...     focal_length=1.0,
    ...     aspect_ratio=16.0 / 9.0,
    ... )
    >>> ray = camera.ray_for(0.5, 0.5)  # Ray through image center
"""

from __future__ import annotations

import math
from typing import Any

from pathtracer.core.ray import Ray
from pathtracer.core.vec3 import Point3, Vec3


class Camera:
    """A pinhole (perspective) camera.

    Attributes:
        origin: Eye position in world space.
        direction: Backward view axis (eye minus look-at point). Normalized
            internally, any positive length is accepted.
        up_hint: Approximate up direction used to orient the image plane.
        vertical_fov_degrees: Vertical field of view in degrees.
        focal_length: Distance from the eye to the viewport.
        aspect_ratio: Width divided by height of the output image.
        horizontal_vector: Derived. Full viewport width along the right axis.
        vertical_vector: Derived. Full viewport height along the up axis.
        lower_left_corner: Derived. Lower-left corner of the viewport.
    """

    def __init__(
        self,
        origin: Point3,
        direction: Vec3,
        up_hint: Vec3,
        vertical_fov_degrees: float,
        focal_length: float,
        aspect_ratio: float,
    ) -> None:
        self.origin = Point3.from_iterable(origin)
        self.direction = Vec3.from_iterable(direction)
        self.up_hint = Vec3.from_iterable(up_hint)
        self.vertical_fov_degrees = vertical_fov_degrees
        self.focal_length = focal_length
        self.aspect_ratio = aspect_ratio

        self.horizontal_vector = Vec3()
        self.vertical_vector = Vec3()
        self.lower_left_corner = Point3()
        self.recompute_basis()

    @classmethod
    def look_at(
        cls,
        lookfrom: Point3,
        lookat: Point3,
        vup: Vec3 | None = None,
        vfov: float = 90.0,
        focal_length: float = 1.0,
        aspect_ratio: float = 16.0 / 9.0,
    ) -> Camera:
        """Create a camera at ``lookfrom`` aimed at ``lookat``."""
        if vup is None:
            vup = Vec3(0.0, 1.0, 0.0)
        return cls(
            origin=lookfrom,
            direction=(lookfrom - lookat).unit(),
            up_hint=vup,
            vertical_fov_degrees=vfov,
            focal_length=focal_length,
            aspect_ratio=aspect_ratio,
        )

    def recompute_basis(self) -> None:
        """Recompute the viewport vectors from the current parameters."""
        theta = math.radians(self.vertical_fov_degrees)
        viewport_height = 2.0 * math.tan(theta / 2.0)
        viewport_width = viewport_height * self.aspect_ratio

        w = self.direction.unit()
        right = self.up_hint.cross(w).unit()
        true_up = w.cross(right)

        self.horizontal_vector = viewport_width * right
        self.vertical_vector = viewport_height * true_up
        self.lower_left_corner = (
            self.origin
            - self.horizontal_vector / 2.0
            - self.vertical_vector / 2.0
            - self.focal_length * w
        )

    def ray_for(self, u: float, v: float) -> Ray:
        """Generate a ray through normalized image coordinates (u, v).

        Args:
            u: Horizontal coordinate, 0 = left edge, 1 = right edge.
            v: Vertical coordinate, 0 = bottom edge, 1 = top edge.

        Returns:
            A ray from the eye through the viewport point, direction normalized.
        """
        target = self.lower_left_corner + u * self.horizontal_vector + v * self.vertical_vector
        return Ray(self.origin, (target - self.origin).unit())

    def get_info(self) -> dict[str, tuple[float, float, float]]:
        """Get current camera vectors for debugging."""
        return {
            "origin": self.origin.to_tuple(),
            "direction": self.direction.to_tuple(),
            "horizontal": self.horizontal_vector.to_tuple(),
            "vertical": self.vertical_vector.to_tuple(),
            "lower_left": self.lower_left_corner.to_tuple(),
        }

    def to_config(self) -> dict[str, Any]:
        return {
            "origin": list(self.origin),
            "direction": list(self.direction),
            "up_hint": list(self.up_hint),
            "vertical_fov_degrees": self.vertical_fov_degrees,
            "focal_length": self.focal_length,
            "aspect_ratio": self.aspect_ratio,
        }

    def __repr__(self) -> str:
        return (
            f"Camera(origin={self.origin!r}, direction={self.direction!r}, "
            f"vfov={self.vertical_fov_degrees}, focal_length={self.focal_length})"
        )
