"""Geometry module for shape primitives.

Components:
    sphere: Sphere primitive with ray-sphere intersection and HitRecord

Ray-object intersection follows the pattern:
    record = shape.hit(ray, t_min, t_max)  # HitRecord or None
"""

from .sphere import FaceKind, HitRecord, Sphere

__all__ = [
    "Sphere",
    "HitRecord",
    "FaceKind",
]
