"""Metal (specular reflective) material implementation.

Perfect metals (fuzz=0) produce mirror reflections; rougher metals perturb
the mirror direction by a random offset inside a sphere of radius ``fuzz``.

The reflection formula is:
    R = I - 2(I . N)N

where I is the normalized incident direction and N is the surface normal.
Rays whose perturbed direction points into the surface are absorbed.

Example:
    >>> from pathtracer.core.vec3 import Color
    >>> from pathtracer.materials.metal import Metal
    >>> gold = Metal(albedo=Color(0.8, 0.6, 0.2), fuzz=0.3)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar

import numpy as np

from pathtracer.core.ray import Ray
from pathtracer.core.vec3 import Color, Vec3, random_in_unit_sphere, reflect
from pathtracer.materials.material import MaterialType, ScatterRecord, validate_albedo

if TYPE_CHECKING:
    from pathtracer.geometry.sphere import HitRecord


@dataclass(frozen=True)
class Metal:
    """Metal (specular reflective) material properties.

    Attributes:
        albedo: The reflective color (RGB, each component in [0, 1]).
        fuzz: Roughness of the reflection in [0, 1].
            0 = perfect mirror, 1 = maximum fuzziness.
    """

    albedo: Color
    fuzz: float = 0.0

    material_type: ClassVar[MaterialType] = MaterialType.METAL

    def __post_init__(self) -> None:
        object.__setattr__(self, "albedo", Vec3.from_iterable(self.albedo))
        validate_albedo(self.albedo)

        if self.fuzz < 0.0 or self.fuzz > 1.0:
            raise ValueError(
                f"Fuzz = {self.fuzz} is outside [0, 1]. "
                "Fuzz must be between 0 (perfect mirror) and 1 (maximum fuzz)."
            )

    def scatter(
        self, ray: Ray, hit: HitRecord, rng: np.random.Generator
    ) -> ScatterRecord | None:
        """Reflect the incoming ray, perturbed by fuzz.

        Args:
            ray: The incoming ray.
            hit: The intersection being shaded.
            rng: Random source for the fuzz perturbation.

        Returns:
            A ScatterRecord with attenuation equal to the albedo, or None if
            the perturbed direction ends up below the surface.
        """
        reflected = reflect(ray.direction.unit(), hit.normal)
        scattered_direction = reflected + self.fuzz * random_in_unit_sphere(rng)

        if scattered_direction.dot(hit.normal) <= 0.0:
            return None

        return ScatterRecord(
            ray=Ray(hit.point, scattered_direction), attenuation=Vec3.from_iterable(self.albedo)
        )

    def to_config(self) -> dict[str, Any]:
        return {"type": "metal", "albedo": list(self.albedo), "fuzz": self.fuzz}
