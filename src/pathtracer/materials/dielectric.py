"""Dielectric (glass/water) material implementation.

Key physics:
    - Snell's law for refraction: n1 * sin(theta1) = n2 * sin(theta2)
    - Schlick's approximation for Fresnel reflectance
    - Total internal reflection when (n1 / n2) * sin(theta1) > 1

The surface is assumed to separate the material from vacuum (no nested
media): a ray hitting the front face travels from n1 = 1 into n2 = ior, a ray
hitting the back face travels from n1 = ior out to n2 = 1.

The material randomly chooses between reflection and refraction based on the
Fresnel reflectance, which increases at grazing angles. The choice draws from
the generator passed to ``scatter``, so the material itself holds no state.

Example:
    >>> from pathtracer.materials.dielectric import Dielectric, reflectance
    >>> glass = Dielectric(index_of_refraction=1.5)
    >>> round(reflectance(1.0, 1.0, 1.5), 6)  # normal incidence
    0.04
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar

import numpy as np

from pathtracer.core.ray import Ray
from pathtracer.core.vec3 import Color, reflect, refract
from pathtracer.materials.material import MaterialType, ScatterRecord

if TYPE_CHECKING:
    from pathtracer.geometry.sphere import HitRecord


def reflectance(cosine: float, n1: float, n2: float) -> float:
    """Compute Fresnel reflectance using Schlick's approximation.

    Args:
        cosine: Cosine of the angle between the incident direction and the
            normal.
        n1: Refractive index of the medium the ray travels from.
        n2: Refractive index of the medium the ray travels into.

    Returns:
        The approximate Fresnel reflectance coefficient in [0, 1].
    """
    r0 = ((n1 - n2) / (n1 + n2)) ** 2
    return r0 + (1.0 - r0) * (1.0 - cosine) ** 5


@dataclass(frozen=True)
class Dielectric:
    """Dielectric (glass/water) material properties.

    Attributes:
        index_of_refraction: Index of refraction. Common values:
            - Air: 1.0
            - Water: 1.33
            - Glass: 1.5
            - Diamond: 2.4
    """

    index_of_refraction: float = 1.5

    material_type: ClassVar[MaterialType] = MaterialType.DIELECTRIC

    def __post_init__(self) -> None:
        if self.index_of_refraction <= 0.0:
            raise ValueError(
                f"Index of refraction = {self.index_of_refraction} must be positive."
            )

    def media(self, front_face: bool) -> tuple[float, float]:
        """Return (n1, n2) for a ray entering (front) or leaving (back)."""
        if front_face:
            return 1.0, self.index_of_refraction
        return self.index_of_refraction, 1.0

    def scatter(self, ray: Ray, hit: HitRecord, rng: np.random.Generator) -> ScatterRecord:
        """Reflect or refract the incoming ray. Dielectrics never absorb.

        Args:
            ray: The incoming ray.
            hit: The intersection being shaded.
            rng: Random source for the reflect/refract choice.

        Returns:
            A ScatterRecord with white attenuation.
        """
        n1, n2 = self.media(hit.front_face)
        refraction_ratio = n1 / n2

        unit_direction = ray.direction.unit()
        cos_theta = min(-unit_direction.dot(hit.normal), 1.0)
        sin_theta = math.sqrt(max(0.0, 1.0 - cos_theta * cos_theta))

        # Total internal reflection: sin(theta_t) would exceed 1
        cannot_refract = refraction_ratio * sin_theta > 1.0

        if cannot_refract or rng.random() < reflectance(cos_theta, n1, n2):
            direction = reflect(unit_direction, hit.normal)
        else:
            direction = refract(unit_direction, hit.normal, refraction_ratio)

        # Dielectrics don't absorb light
        return ScatterRecord(ray=Ray(hit.point, direction), attenuation=Color(1.0, 1.0, 1.0))

    def to_config(self) -> dict[str, Any]:
        return {"type": "dielectric", "ior": self.index_of_refraction}
