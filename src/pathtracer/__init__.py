"""Progressive Monte Carlo path tracer.

This package renders scenes of spheres with diffuse, metallic and glass
materials, refining the image one jittered sample per pixel at a time:
- Recursive scattering with a sky-gradient background
- Material models (Lambertian, metal, dielectric)
- Sphere primitives in a flat world list
- Progressive rendering with gamma-space accumulation

Subpackages:
    core: Vectors, rays, the integrator and the progressive renderer
    geometry: Sphere primitive and hit records
    materials: Light-scattering material models
    scene: World container, scene serialization and demo scenes
    camera: Pinhole camera with ray generation
    preview: PPM/PNG export utilities
    gpu: Data-parallel Taichi renderer (imports taichi)
"""

__version__ = "0.1.0"
