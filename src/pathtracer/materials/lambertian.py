"""Lambertian (ideal diffuse) material implementation.

Scattered directions are drawn as ``normal + random_unit_vector()``, which
produces a cosine-weighted distribution about the normal. With that sampling
the BRDF and pdf cancel, so the attenuation of every bounce is simply the
albedo:

    attenuation = (albedo / pi) * cos_theta / (cos_theta / pi) = albedo

Example:
    >>> from pathtracer.core.vec3 import Color
    >>> from pathtracer.materials.lambertian import Lambertian
    >>> material = Lambertian(albedo=Color(0.8, 0.3, 0.3))
    >>> # record = material.scatter(ray, hit, rng)
    >>> # record.attenuation == material.albedo
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar

import numpy as np

from pathtracer.core.ray import Ray
from pathtracer.core.vec3 import Color, Vec3, random_unit_vector
from pathtracer.materials.material import MaterialType, ScatterRecord, validate_albedo

if TYPE_CHECKING:
    from pathtracer.geometry.sphere import HitRecord


@dataclass(frozen=True)
class Lambertian:
    """Lambertian (ideal diffuse) material properties.

    Attributes:
        albedo: The diffuse reflectance color (RGB, each component in [0, 1]).
            Represents the fraction of light reflected for each color channel.
    """

    albedo: Color

    material_type: ClassVar[MaterialType] = MaterialType.LAMBERTIAN

    def __post_init__(self) -> None:
        object.__setattr__(self, "albedo", Vec3.from_iterable(self.albedo))
        validate_albedo(self.albedo)

    def scatter(self, ray: Ray, hit: HitRecord, rng: np.random.Generator) -> ScatterRecord:
        """Sample a diffuse bounce. Lambertian surfaces never absorb.

        Args:
            ray: The incoming ray (unused, diffuse scattering ignores it).
            hit: The intersection being shaded.
            rng: Random source for the direction sample.

        Returns:
            A ScatterRecord whose attenuation equals the albedo.
        """
        scatter_direction = hit.normal + random_unit_vector(rng)

        # The sample can cancel the normal almost exactly; a zero direction
        # would turn into NaN once normalized further down the path.
        if scatter_direction.near_zero():
            scatter_direction = hit.normal

        return ScatterRecord(
            ray=Ray(hit.point, scatter_direction), attenuation=Vec3.from_iterable(self.albedo)
        )

    def to_config(self) -> dict[str, Any]:
        return {"type": "lambertian", "albedo": list(self.albedo)}
