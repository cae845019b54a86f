"""Demo scenes.

Two scenes are provided:

- ``create_two_sphere_scene``: a gray diffuse sphere resting on a huge
  "ground" sphere, seen from the origin looking down -z (vfov 90, 16:9).
- ``create_material_showcase_scene``: a yellow ground with a glass sphere in
  the middle, a fuzzy gold metal sphere on the right and a diffuse sphere on
  the left, seen from above and to the left (vfov 60).

Both return a freshly built ``(World, Camera)`` pair.

Example:
    >>> from pathtracer.scene.presets import create_material_showcase_scene
    >>> world, camera = create_material_showcase_scene()
    >>> len(world)
    4
"""

from __future__ import annotations

from dataclasses import dataclass

from pathtracer.camera.pinhole import Camera
from pathtracer.core.vec3 import Color, Point3, Vec3
from pathtracer.geometry.sphere import Sphere
from pathtracer.materials import Dielectric, Lambertian, Metal
from pathtracer.scene.world import World, new_world


@dataclass
class ShowcaseParams:
    """Adjustable parameters of the material showcase scene.

    Attributes:
        ground_albedo: Color of the ground sphere.
        diffuse_albedo: Color of the left (diffuse) sphere.
        metal_albedo: Color of the right (metal) sphere.
        metal_fuzz: Fuzz of the right sphere.
        glass_ior: Index of refraction of the center sphere.
        camera_origin: Eye position.
        vfov: Vertical field of view in degrees.
        aspect_ratio: Image width divided by height.
    """

    ground_albedo: tuple[float, float, float] = (0.8, 0.8, 0.0)
    diffuse_albedo: tuple[float, float, float] = (0.7, 0.3, 0.2)
    metal_albedo: tuple[float, float, float] = (0.8, 0.6, 0.2)
    metal_fuzz: float = 1.0
    glass_ior: float = 1.5
    camera_origin: tuple[float, float, float] = (-2.0, 2.0, 2.0)
    vfov: float = 60.0
    aspect_ratio: float = 16.0 / 9.0


def create_two_sphere_scene(aspect_ratio: float = 16.0 / 9.0) -> tuple[World, Camera]:
    """Create the gray-sphere-on-ground scene.

    Returns:
        Tuple of (world, camera).
    """
    gray = Lambertian(albedo=Color(0.5, 0.5, 0.5))

    world = new_world()
    world.add(Sphere(center=Point3(0.0, 0.0, -1.0), radius=0.5, material=gray))
    world.add(Sphere(center=Point3(0.0, -100.5, -1.0), radius=100.0, material=gray))

    camera = Camera(
        origin=Point3(0.0, 0.0, 0.0),
        direction=Vec3(0.0, 0.0, 1.0),
        up_hint=Vec3(0.0, 1.0, 0.0),
        vertical_fov_degrees=90.0,
        focal_length=1.0,
        aspect_ratio=aspect_ratio,
    )
    return world, camera


def create_material_showcase_scene(
    params: ShowcaseParams | None = None,
) -> tuple[World, Camera]:
    """Create the ground + glass/metal/diffuse spheres scene.

    Args:
        params: Scene parameters. Defaults to ``ShowcaseParams()``.

    Returns:
        Tuple of (world, camera).
    """
    if params is None:
        params = ShowcaseParams()

    ground = Lambertian(albedo=Color(*params.ground_albedo))
    left = Lambertian(albedo=Color(*params.diffuse_albedo))
    right = Metal(albedo=Color(*params.metal_albedo), fuzz=params.metal_fuzz)
    center = Dielectric(index_of_refraction=params.glass_ior)

    world = new_world()
    world.add(Sphere(Point3(0.0, -100.5, -1.0), 100.0, ground))
    world.add(Sphere(Point3(0.0, 0.0, -1.0), 0.5, center))
    world.add(Sphere(Point3(1.0, 0.0, -1.0), 0.5, right))
    world.add(Sphere(Point3(-1.0, 0.0, -1.0), 0.5, left))

    camera = Camera.look_at(
        lookfrom=Point3(*params.camera_origin),
        lookat=Point3(0.0, 0.0, -1.0),
        vup=Vec3(0.0, 1.0, 0.0),
        vfov=params.vfov,
        focal_length=1.0,
        aspect_ratio=params.aspect_ratio,
    )
    return world, camera
