"""Material interface shared by all scattering models.

A material decides how an incoming ray continues after hitting a surface:
either it returns a ScatterRecord (new ray plus per-channel attenuation) or
None, meaning the ray is absorbed.

Materials are immutable once constructed so a single instance can be shared
by any number of primitives. All randomness comes from the generator passed
to ``scatter``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import TYPE_CHECKING, Protocol, runtime_checkable

import numpy as np

from pathtracer.core.ray import Ray
from pathtracer.core.vec3 import Color

if TYPE_CHECKING:
    from pathtracer.geometry.sphere import HitRecord


class MaterialType(IntEnum):
    """Enumeration of supported material types.

    Used as the dispatch tag when a scene is flattened into GPU fields and
    as the ``type`` key of serialized scene configurations.
    """

    LAMBERTIAN = 0
    METAL = 1
    DIELECTRIC = 2


@dataclass(frozen=True)
class ScatterRecord:
    """Result of a successful scatter.

    Attributes:
        ray: The scattered ray leaving the surface.
        attenuation: Multiplicative per-channel light loss for this bounce.
    """

    ray: Ray
    attenuation: Color


@runtime_checkable
class Material(Protocol):
    """Capability implemented by every material model."""

    material_type: MaterialType

    def scatter(
        self, ray: Ray, hit: HitRecord, rng: np.random.Generator
    ) -> ScatterRecord | None:
        """Scatter ``ray`` at ``hit`` or return None if it is absorbed."""
        ...

    def to_config(self) -> dict:
        """Serialize the material parameters to a plain dictionary."""
        ...


def validate_albedo(albedo: Color) -> None:
    """Check that every albedo component lies in [0, 1].

    Raises:
        ValueError: If any component is outside [0, 1], which would violate
            energy conservation.
    """
    for i, component in enumerate(albedo):
        if component < 0.0 or component > 1.0:
            raise ValueError(
                f"Albedo component {i} = {component} is outside [0, 1]. "
                "This would violate energy conservation."
            )
