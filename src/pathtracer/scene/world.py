"""Scene container holding the primitives a ray can hit.

The World is scanned linearly: every primitive is tested in insertion order
and the closest accepted hit so far shrinks the upper bound passed to the
next primitive, so farther primitives are rejected by their own
intersection test.

The scene is built once before rendering and must not change during a pass.
Between passes it may be cleared and re-populated; whoever owns the
accumulator is responsible for resetting it afterwards.

Example:
    >>> from pathtracer.core.vec3 import Color, Point3
    >>> from pathtracer.geometry.sphere import Sphere
    >>> from pathtracer.materials import Lambertian
    >>> from pathtracer.scene.world import new_world
    >>> world = new_world()
    >>> gray = Lambertian(Color(0.5, 0.5, 0.5))
    >>> world.add(Sphere(Point3(0, 0, -1), 0.5, gray))
    >>> world.add(Sphere(Point3(0, -100.5, -1), 100, gray))
    >>> len(world)
    2
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from pathtracer.core.ray import Ray
from pathtracer.core.vec3 import Vec3
from pathtracer.geometry.sphere import HitRecord, Sphere
from pathtracer.materials.dielectric import Dielectric
from pathtracer.materials.lambertian import Lambertian
from pathtracer.materials.material import Material
from pathtracer.materials.metal import Metal

logger = logging.getLogger(__name__)


@runtime_checkable
class Primitive(Protocol):
    """Capability implemented by everything the integrator can hit."""

    def hit(self, ray: Ray, t_min: float, t_max: float) -> HitRecord | None:
        ...


@dataclass
class SceneConfig:
    """Configuration for scene serialization.

    Attributes:
        materials: List of material configurations.
        spheres: List of sphere configurations, each referencing a material
            by its index in ``materials``.
    """

    materials: list[dict[str, Any]] = field(default_factory=list)
    spheres: list[dict[str, Any]] = field(default_factory=list)


class World:
    """Ordered collection of primitives with a nearest-hit query."""

    def __init__(self, objects: list[Primitive] | None = None) -> None:
        self.objects: list[Primitive] = list(objects) if objects else []

    def add(self, primitive: Primitive) -> None:
        """Append a primitive. No validation is performed."""
        self.objects.append(primitive)

    def clear(self) -> None:
        """Remove every primitive."""
        self.objects.clear()

    def __len__(self) -> int:
        return len(self.objects)

    def __iter__(self) -> Iterator[Primitive]:
        return iter(self.objects)

    def hit(self, ray: Ray, t_min: float, t_max: float) -> HitRecord | None:
        """Find the nearest intersection within [t_min, t_max].

        Args:
            ray: The ray to test.
            t_min: Minimum accepted ray parameter.
            t_max: Maximum accepted ray parameter.

        Returns:
            The hit record of the closest primitive, or None if nothing was hit.
        """
        closest_so_far = t_max
        result: HitRecord | None = None

        for primitive in self.objects:
            record = primitive.hit(ray, t_min, closest_so_far)
            if record is not None:
                closest_so_far = record.t
                result = record

        return result

    # =========================================================================
    # Serialization
    # =========================================================================

    def to_config(self) -> SceneConfig:
        """Export the scene to a configuration object.

        Materials shared between spheres are exported once and referenced by
        index.

        Returns:
            A SceneConfig containing all materials and spheres.

        Raises:
            TypeError: If the world contains a primitive other than a Sphere.
        """
        config = SceneConfig()
        material_ids: dict[int, int] = {}

        for primitive in self.objects:
            if not isinstance(primitive, Sphere):
                raise TypeError(
                    f"Cannot serialize primitive of type {type(primitive).__name__}"
                )
            key = id(primitive.material)
            if key not in material_ids:
                material_ids[key] = len(config.materials)
                config.materials.append(primitive.material.to_config())

            config.spheres.append(
                {
                    "center": list(primitive.center),
                    "radius": primitive.radius,
                    "material_id": material_ids[key],
                }
            )

        return config

    def from_config(self, config: SceneConfig) -> None:
        """Load a scene from a configuration object.

        Clears the current scene and loads the configuration.

        Args:
            config: The scene configuration to load.

        Raises:
            ValueError: If the configuration contains an unknown material
                type, invalid material parameters, or a sphere referencing a
                material index that does not exist.
        """
        materials = [material_from_config(mat_config) for mat_config in config.materials]

        self.clear()
        for sphere_config in config.spheres:
            material_id = sphere_config.get("material_id", 0)
            if not 0 <= material_id < len(materials):
                raise ValueError(
                    f"Sphere references material_id {material_id}, but only "
                    f"{len(materials)} materials are defined"
                )
            self.add(
                Sphere(
                    center=Vec3.from_iterable(sphere_config["center"]),
                    radius=float(sphere_config["radius"]),
                    material=materials[material_id],
                )
            )

        logger.debug(
            "Loaded scene with %d materials and %d spheres", len(materials), len(self)
        )

    def to_dict(self) -> dict[str, Any]:
        """Export the scene to a dictionary (for JSON serialization)."""
        config = self.to_config()
        return {"materials": config.materials, "spheres": config.spheres}

    def from_dict(self, data: dict[str, Any]) -> None:
        """Load a scene from a dictionary with 'materials' and 'spheres' keys."""
        self.from_config(
            SceneConfig(
                materials=data.get("materials", []),
                spheres=data.get("spheres", []),
            )
        )


def material_from_config(mat_config: dict[str, Any]) -> Material:
    """Build a material from its serialized form.

    Raises:
        ValueError: If the material type is unknown or its parameters are
            out of range.
    """
    mat_type = mat_config.get("type", "").lower()
    if mat_type == "lambertian":
        return Lambertian(albedo=Vec3.from_iterable(mat_config.get("albedo", [0.5, 0.5, 0.5])))
    if mat_type == "metal":
        return Metal(
            albedo=Vec3.from_iterable(mat_config.get("albedo", [0.8, 0.8, 0.8])),
            fuzz=float(mat_config.get("fuzz", 0.0)),
        )
    if mat_type == "dielectric":
        return Dielectric(index_of_refraction=float(mat_config.get("ior", 1.5)))
    raise ValueError(f"Unknown material type: {mat_type!r}")


def new_world() -> World:
    """Create an empty World."""
    return World()
