"""Materials module for light-scattering models.

Components:
    material: Material protocol, ScatterRecord and the MaterialType tag
    lambertian: Ideal diffuse (Lambertian) reflection
    metal: Mirror reflection with optional fuzz
    dielectric: Glass-like materials with refraction (Schlick Fresnel)

Each material provides ``scatter(ray, hit, rng)`` returning either a
ScatterRecord (scattered ray plus attenuation) or None when the ray is
absorbed. Materials are immutable and can be shared between primitives.
"""

from .dielectric import Dielectric, reflectance
from .lambertian import Lambertian
from .material import Material, MaterialType, ScatterRecord, validate_albedo
from .metal import Metal

__all__ = [
    "Material",
    "MaterialType",
    "ScatterRecord",
    "validate_albedo",
    "Lambertian",
    "Metal",
    "Dielectric",
    "reflectance",
]
