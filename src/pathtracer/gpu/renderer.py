"""Data-parallel Taichi renderer.

This module renders the same scenes as the CPU ``ProgressiveRenderer`` but
traces every pixel of a pass in parallel inside a single Taichi kernel. The
scene is flattened into Structure-of-Arrays fields (one slot per sphere,
with its material parameters stored alongside) and the camera's derived
vectors are copied into 0-d fields.

Each pixel is written by exactly one kernel thread per pass, and passes are
launched sequentially with the shared sample index, so the accumulated image
follows the same update as ``pathtracer.core.progressive.accumulate``.
Randomness comes from Taichi's per-thread generator; seed it with
``ti.init(random_seed=...)`` for reproducible renders.

Taichi must be initialized before a TaichiRenderer is created, because the
constructor allocates fields.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.gpu, random_seed=7)
    >>> from pathtracer.config import RenderConfig
    >>> from pathtracer.gpu.renderer import TaichiRenderer
    >>> from pathtracer.scene.presets import create_material_showcase_scene
    >>>
    >>> world, camera = create_material_showcase_scene()
    >>> renderer = TaichiRenderer(RenderConfig(width=400))
    >>> renderer.upload_world(world)
    >>> renderer.upload_camera(camera)
    >>> renderer.render(100)
    >>> image = renderer.get_image_uint8()
"""

import logging

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from pathtracer.camera.pinhole import Camera
from pathtracer.config import RenderConfig
from pathtracer.core.progressive import ProgressCallback, image_to_uint8
from pathtracer.geometry.sphere import Sphere
from pathtracer.materials import Dielectric, MaterialType, Metal
from pathtracer.scene.world import World

logger = logging.getLogger(__name__)

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Maximum number of spheres a renderer can hold
MAX_SPHERES = 1024

# t_min and t_max for ray intersection
T_MIN = 0.001
T_MAX = 1e10


@ti.dataclass
class SceneHitRecord:
    """Record of a ray-scene intersection.

    Attributes:
        hit: 1 if the ray intersected any sphere, 0 on a miss.
        t: Ray parameter of the intersection. Only valid if hit == 1.
        point: Intersection point. Only valid if hit == 1.
        normal: Unit normal facing the incident ray. Only valid if hit == 1.
        front_face: 1 if the ray hit the outside of the sphere, 0 otherwise.
        sphere_id: Index of the hit sphere, -1 on a miss.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    front_face: ti.i32
    sphere_id: ti.i32


# =============================================================================
# Sampling and Vector Utilities (Taichi functions)
# =============================================================================


@ti.func
def random_in_unit_sphere() -> vec3:
    """Generate a random point inside the unit sphere by rejection sampling."""
    p = vec3(0.0, 0.0, 0.0)
    found = False
    for _ in range(100):  # Max iterations to avoid infinite loops
        if not found:
            p = vec3(
                ti.random(ti.f32) * 2.0 - 1.0,
                ti.random(ti.f32) * 2.0 - 1.0,
                ti.random(ti.f32) * 2.0 - 1.0,
            )
            if tm.dot(p, p) < 1.0:
                found = True
    return p


@ti.func
def random_unit_vector() -> vec3:
    return tm.normalize(random_in_unit_sphere())


@ti.func
def near_zero(v: vec3) -> ti.i32:
    s = 1e-8
    return ti.abs(v.x) < s and ti.abs(v.y) < s and ti.abs(v.z) < s


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    return incident - 2.0 * tm.dot(incident, normal) * normal


@ti.func
def refract(unit_incident: vec3, normal: vec3, eta_ratio: ti.f32) -> vec3:
    """Snell's law refraction via perpendicular/parallel decomposition."""
    cos_theta = tm.min(-tm.dot(unit_incident, normal), 1.0)
    r_out_perp = eta_ratio * (unit_incident + cos_theta * normal)
    r_out_parallel = -ti.sqrt(ti.abs(1.0 - tm.dot(r_out_perp, r_out_perp))) * normal
    return r_out_perp + r_out_parallel


@ti.func
def schlick_reflectance(cosine: ti.f32, n1: ti.f32, n2: ti.f32) -> ti.f32:
    r0 = ((n1 - n2) / (n1 + n2)) ** 2
    return r0 + (1.0 - r0) * ((1.0 - cosine) ** 5)


@ti.func
def hit_sphere(
    ray_origin: vec3,
    ray_direction: vec3,
    center: vec3,
    radius: ti.f32,
    t_min: ti.f32,
    t_max: ti.f32,
):
    """Test for ray-sphere intersection within [t_min, t_max].

    Returns:
        A tuple (did_hit, t). The nearer root is preferred; the farther one
        is used when the nearer lies outside the interval.
    """
    oc = ray_origin - center
    a = tm.dot(ray_direction, ray_direction)
    b = 2.0 * tm.dot(ray_direction, oc)
    c = tm.dot(oc, oc) - radius * radius
    discriminant = b * b - 4.0 * a * c

    did_hit = 0
    hit_t = 0.0

    if radius > 0.0 and discriminant >= 0.0:
        sqrt_d = ti.sqrt(discriminant)
        root = (-b - sqrt_d) / (2.0 * a)
        if root < t_min or root > t_max:
            root = (-b + sqrt_d) / (2.0 * a)
        if root >= t_min and root <= t_max:
            did_hit = 1
            hit_t = root

    return did_hit, hit_t


# =============================================================================
# Renderer
# =============================================================================


@ti.data_oriented
class TaichiRenderer:
    """Progressive renderer running one Taichi kernel launch per pass.

    Attributes:
        config: Image size, depth and sampling parameters.
        max_spheres: Capacity of the sphere fields.
        image: Gamma-corrected accumulation buffer, shape (width, height),
            with j = 0 at the bottom row.
    """

    def __init__(self, config: RenderConfig | None = None, max_spheres: int = MAX_SPHERES) -> None:
        """Allocate scene, camera and image fields.

        Args:
            config: Render parameters (defaults to ``RenderConfig()``).
            max_spheres: Capacity of the sphere storage.

        Raises:
            ValueError: If ``config.mode`` is not "path".
        """
        self.config = config if config is not None else RenderConfig()
        if self.config.mode != "path":
            raise ValueError(f"TaichiRenderer only supports path mode, got {self.config.mode!r}")
        self.max_spheres = max_spheres
        self.width = self.config.width
        self.height = self.config.height

        # Sphere storage: Structure of Arrays layout
        self.sphere_centers = ti.Vector.field(3, dtype=ti.f32, shape=max_spheres)
        self.sphere_radii = ti.field(dtype=ti.f32, shape=max_spheres)
        self.material_types = ti.field(dtype=ti.i32, shape=max_spheres)
        self.material_albedos = ti.Vector.field(3, dtype=ti.f32, shape=max_spheres)
        # Fuzz for metals, index of refraction for dielectrics
        self.material_params = ti.field(dtype=ti.f32, shape=max_spheres)
        self.num_spheres = ti.field(dtype=ti.i32, shape=())

        # Camera origin and viewport vectors
        self.camera_origin = ti.Vector.field(3, dtype=ti.f32, shape=())
        self.viewport_horizontal = ti.Vector.field(3, dtype=ti.f32, shape=())
        self.viewport_vertical = ti.Vector.field(3, dtype=ti.f32, shape=())
        self.lower_left_corner = ti.Vector.field(3, dtype=ti.f32, shape=())

        self.image = ti.Vector.field(3, dtype=ti.f32, shape=(self.width, self.height))
        self._sample_count = 0

    # =========================================================================
    # Scene / camera upload (Python-side)
    # =========================================================================

    def upload_world(self, world: World) -> None:
        """Copy the world's spheres and materials into Taichi fields.

        Resets the accumulator.

        Raises:
            TypeError: If the world contains a primitive other than a Sphere.
            RuntimeError: If the world holds more than ``max_spheres`` spheres.
        """
        spheres = list(world)
        for primitive in spheres:
            if not isinstance(primitive, Sphere):
                raise TypeError(
                    f"TaichiRenderer only supports spheres, got {type(primitive).__name__}"
                )
        if len(spheres) > self.max_spheres:
            raise RuntimeError(f"Maximum number of spheres ({self.max_spheres}) exceeded")

        for idx, sphere in enumerate(spheres):
            material = sphere.material
            albedo = [1.0, 1.0, 1.0]
            param = 0.0
            if isinstance(material, Dielectric):
                param = material.index_of_refraction
            elif isinstance(material, Metal):
                albedo = list(material.albedo)
                param = material.fuzz
            else:
                albedo = list(material.albedo)

            self.sphere_centers[idx] = list(sphere.center)
            self.sphere_radii[idx] = sphere.radius
            self.material_types[idx] = int(material.material_type)
            self.material_albedos[idx] = albedo
            self.material_params[idx] = param

        self.num_spheres[None] = len(spheres)
        logger.debug("Uploaded %d spheres", len(spheres))
        self.reset()

    def upload_camera(self, camera: Camera) -> None:
        """Copy the camera's origin and derived viewport vectors.

        The camera basis must be current (call ``camera.recompute_basis()``
        after mutating it). Resets the accumulator.
        """
        self.camera_origin[None] = list(camera.origin)
        self.viewport_horizontal[None] = list(camera.horizontal_vector)
        self.viewport_vertical[None] = list(camera.vertical_vector)
        self.lower_left_corner[None] = list(camera.lower_left_corner)
        self.reset()

    def get_sphere_count(self) -> int:
        """Get the number of spheres in the uploaded scene."""
        return int(self.num_spheres[None])

    # =========================================================================
    # Taichi functions
    # =========================================================================

    @ti.func
    def _intersect(self, ray_origin: vec3, ray_direction: vec3) -> SceneHitRecord:
        """Find the closest sphere hit, shrinking t_max as hits are found."""
        closest_t = T_MAX
        result = SceneHitRecord(
            hit=0,
            t=0.0,
            point=vec3(0.0, 0.0, 0.0),
            normal=vec3(0.0, 0.0, 0.0),
            front_face=0,
            sphere_id=-1,
        )

        for k in range(self.num_spheres[None]):
            center = self.sphere_centers[k]
            radius = self.sphere_radii[k]
            did_hit, t = hit_sphere(ray_origin, ray_direction, center, radius, T_MIN, closest_t)
            if did_hit == 1:
                closest_t = t
                point = ray_origin + t * ray_direction
                outward_normal = (point - center) / radius
                normal = outward_normal
                front_face = 1
                if tm.dot(ray_direction, outward_normal) >= 0.0:
                    normal = -outward_normal
                    front_face = 0
                result = SceneHitRecord(
                    hit=1,
                    t=t,
                    point=point,
                    normal=normal,
                    front_face=front_face,
                    sphere_id=k,
                )

        return result

    @ti.func
    def _scatter(self, rec: SceneHitRecord, direction: vec3):
        """Dispatch to the scattering model of the hit sphere's material.

        Returns:
            A tuple of (scattered_direction, attenuation, did_scatter).
        """
        k = rec.sphere_id
        mat_type = self.material_types[k]
        albedo = self.material_albedos[k]
        param = self.material_params[k]

        scattered = vec3(0.0, 0.0, 0.0)
        attenuation = vec3(0.0, 0.0, 0.0)
        did_scatter = 0

        if mat_type == int(MaterialType.LAMBERTIAN):
            scattered = rec.normal + random_unit_vector()
            if near_zero(scattered):
                scattered = rec.normal
            attenuation = albedo
            did_scatter = 1

        elif mat_type == int(MaterialType.METAL):
            reflected = reflect(tm.normalize(direction), rec.normal)
            scattered = reflected + param * random_in_unit_sphere()
            attenuation = albedo
            if tm.dot(scattered, rec.normal) > 0.0:
                did_scatter = 1

        elif mat_type == int(MaterialType.DIELECTRIC):
            n1 = 1.0
            n2 = param
            if rec.front_face == 0:
                n1 = param
                n2 = 1.0
            refraction_ratio = n1 / n2

            unit_direction = tm.normalize(direction)
            cos_theta = tm.min(-tm.dot(unit_direction, rec.normal), 1.0)
            sin_theta = ti.sqrt(tm.max(1.0 - cos_theta * cos_theta, 0.0))

            cannot_refract = refraction_ratio * sin_theta > 1.0
            if cannot_refract or ti.random(ti.f32) < schlick_reflectance(cos_theta, n1, n2):
                scattered = reflect(unit_direction, rec.normal)
            else:
                scattered = refract(unit_direction, rec.normal, refraction_ratio)
            attenuation = vec3(1.0, 1.0, 1.0)
            did_scatter = 1

        return scattered, attenuation, did_scatter

    @ti.func
    def _trace(self, origin: vec3, direction: vec3, max_depth: ti.i32) -> vec3:
        """Follow one path for at most max_depth bounces."""
        color = vec3(0.0, 0.0, 0.0)
        throughput = vec3(1.0, 1.0, 1.0)

        # Active flag for path continuation
        active = 1

        for _ in range(max_depth):
            if active == 1:
                rec = self._intersect(origin, direction)

                if rec.hit == 0:
                    # Ray escaped - sky gradient
                    unit_direction = tm.normalize(direction)
                    t = 0.5 * (unit_direction.y + 1.0)
                    sky = (1.0 - t) * vec3(1.0, 1.0, 1.0) + t * vec3(0.5, 0.7, 1.0)
                    color = throughput * sky
                    active = 0
                else:
                    scattered, attenuation, did_scatter = self._scatter(rec, direction)
                    if did_scatter == 0:
                        # Ray was absorbed
                        active = 0
                    else:
                        throughput *= attenuation
                        origin = rec.point
                        direction = scattered

        return color

    # =========================================================================
    # Kernels
    # =========================================================================

    @ti.kernel
    def _render_pass(self, sample_index: ti.i32, max_depth: ti.i32):
        """Trace one jittered sample per pixel and fold it into the image."""
        for i, j in self.image:
            u = (ti.cast(i, ti.f32) + ti.random(ti.f32)) / ti.cast(self.width - 1, ti.f32)
            v = (ti.cast(j, ti.f32) + ti.random(ti.f32)) / ti.cast(self.height - 1, ti.f32)

            origin = self.camera_origin[None]
            target = (
                self.lower_left_corner[None]
                + u * self.viewport_horizontal[None]
                + v * self.viewport_vertical[None]
            )
            color = self._trace(origin, tm.normalize(target - origin), max_depth)

            # Gamma-space running average: sqrt((new + i * prev^2) / (i + 1))
            prev = self.image[i, j]
            n = ti.cast(sample_index, ti.f32)
            average = (color + n * prev * prev) / (n + 1.0)
            self.image[i, j] = vec3(ti.sqrt(average.x), ti.sqrt(average.y), ti.sqrt(average.z))

    # =========================================================================
    # Public Rendering API
    # =========================================================================

    @property
    def sample_count(self) -> int:
        """Get the current number of accumulated samples per pixel."""
        return self._sample_count

    def reset(self) -> None:
        """Clear the image and the sample counter."""
        self.image.fill(0.0)
        self._sample_count = 0

    def render(
        self,
        num_samples: int = 1,
        batch_size: int = 1,
        callback: ProgressCallback | None = None,
    ) -> None:
        """Render up to ``num_samples`` more passes.

        Stops early once ``config.max_samples`` is reached.

        Args:
            num_samples: Number of passes to add.
            batch_size: Number of passes between callbacks.
            callback: Optional callback receiving
                (current_total_samples, target_total_samples).
        """
        if num_samples <= 0:
            return

        target_samples = self._sample_count + num_samples
        if self.config.max_samples is not None:
            target_samples = min(target_samples, self.config.max_samples)

        while self._sample_count < target_samples:
            batch = min(batch_size, target_samples - self._sample_count)
            for _ in range(batch):
                self._render_pass(self._sample_count, self.config.max_depth)
                self._sample_count += 1
            if callback is not None:
                callback(self._sample_count, target_samples)

    def get_image_numpy(self) -> npt.NDArray[np.float64]:
        """Get the gamma-corrected image, shape (height, width, 3), top row first."""
        image = self.image.to_numpy()
        # (width, height, 3) with j = 0 at the bottom -> (height, width, 3)
        image = np.flipud(np.transpose(image, (1, 0, 2)))
        return image.astype(np.float64)

    def get_image_uint8(self) -> npt.NDArray[np.uint8]:
        """Get the image as 8-bit channels, shape (height, width, 3)."""
        return image_to_uint8(self.get_image_numpy())

    def __repr__(self) -> str:
        return (
            f"TaichiRenderer(width={self.width}, height={self.height}, "
            f"samples={self.sample_count})"
        )
