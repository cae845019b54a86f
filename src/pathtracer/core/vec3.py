"""Vector algebra and random sampling utilities for CPU-side ray tracing.

This module provides the ``Vec3`` value type used throughout the renderer as a
point, a direction, or an RGB color, together with the reflection helpers and
the Monte Carlo sampling routines the materials rely on.

All sampling routines take an explicit ``numpy.random.Generator`` so that a
render is reproducible for a given seed.

Example:
    >>> import numpy as np
    >>> from pathtracer.core.vec3 import Vec3, random_unit_vector
    >>> rng = np.random.default_rng(42)
    >>> v = Vec3(1.0, 2.0, 2.0)
    >>> v.length()
    3.0
    >>> d = random_unit_vector(rng)  # uniformly distributed on the unit sphere
"""

from __future__ import annotations

import math
from collections.abc import Iterator

import numpy as np

# Components below this magnitude are treated as zero by near_zero()
NEAR_ZERO_EPSILON = 1e-8


class Vec3:
    """A 3-component floating-point vector.

    Arithmetic operators never mutate their operands. ``accumulate`` is the
    only in-place operation.

    Attributes:
        x: First component (red channel when used as a color).
        y: Second component (green channel when used as a color).
        z: Third component (blue channel when used as a color).
    """

    __slots__ = ("x", "y", "z")

    def __init__(self, x: float = 0.0, y: float = 0.0, z: float = 0.0) -> None:
        self.x = float(x)
        self.y = float(y)
        self.z = float(z)

    @classmethod
    def from_iterable(cls, values) -> Vec3:
        """Build a vector from any 3-element iterable (tuple, list, ndarray)."""
        x, y, z = values
        return cls(x, y, z)

    # =========================================================================
    # Arithmetic
    # =========================================================================

    def __add__(self, other: Vec3) -> Vec3:
        return Vec3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: Vec3) -> Vec3:
        return Vec3(self.x - other.x, self.y - other.y, self.z - other.z)

    def __mul__(self, other: Vec3 | float) -> Vec3:
        if isinstance(other, Vec3):
            return Vec3(self.x * other.x, self.y * other.y, self.z * other.z)
        return Vec3(self.x * other, self.y * other, self.z * other)

    def __rmul__(self, other: float) -> Vec3:
        return Vec3(self.x * other, self.y * other, self.z * other)

    def __truediv__(self, t: float) -> Vec3:
        return Vec3(self.x / t, self.y / t, self.z / t)

    def __neg__(self) -> Vec3:
        return Vec3(-self.x, -self.y, -self.z)

    def accumulate(self, other: Vec3) -> Vec3:
        """Add ``other`` into this vector in place and return it."""
        self.x += other.x
        self.y += other.y
        self.z += other.z
        return self

    # =========================================================================
    # Geometry
    # =========================================================================

    def dot(self, other: Vec3) -> float:
        return self.x * other.x + self.y * other.y + self.z * other.z

    def cross(self, other: Vec3) -> Vec3:
        return Vec3(
            self.y * other.z - self.z * other.y,
            self.z * other.x - self.x * other.z,
            self.x * other.y - self.y * other.x,
        )

    def length_squared(self) -> float:
        return self.x * self.x + self.y * self.y + self.z * self.z

    def length(self) -> float:
        return math.sqrt(self.length_squared())

    def unit(self) -> Vec3:
        """Return this vector scaled to unit length.

        A zero vector divides by zero; callers that may produce one
        (e.g. scatter directions) check ``near_zero`` first.
        """
        return self / self.length()

    def near_zero(self) -> bool:
        """Check if every component is within NEAR_ZERO_EPSILON of zero."""
        return (
            abs(self.x) < NEAR_ZERO_EPSILON
            and abs(self.y) < NEAR_ZERO_EPSILON
            and abs(self.z) < NEAR_ZERO_EPSILON
        )

    # =========================================================================
    # Conversions
    # =========================================================================

    def __iter__(self) -> Iterator[float]:
        yield self.x
        yield self.y
        yield self.z

    def to_tuple(self) -> tuple[float, float, float]:
        return (self.x, self.y, self.z)

    def isclose(self, other: Vec3, abs_tol: float = 1e-9) -> bool:
        """Componentwise ``math.isclose`` with an absolute tolerance."""
        return all(math.isclose(a, b, abs_tol=abs_tol) for a, b in zip(self, other))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Vec3):
            return NotImplemented
        return self.x == other.x and self.y == other.y and self.z == other.z

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Vec3({self.x!r}, {self.y!r}, {self.z!r})"


# Aliases documenting intent at call sites
Point3 = Vec3
Color = Vec3


# =============================================================================
# Reflection / Refraction
# =============================================================================


def reflect(incident: Vec3, normal: Vec3) -> Vec3:
    """Mirror ``incident`` about ``normal`` (unit length): I - 2(I.N)N."""
    return incident - 2.0 * incident.dot(normal) * normal


def refract(unit_incident: Vec3, normal: Vec3, eta_ratio: float) -> Vec3:
    """Refract a unit direction through a surface using Snell's law.

    The incident direction is split into components perpendicular and
    parallel to the normal. The caller is responsible for detecting total
    internal reflection beforehand (``eta_ratio * sin_theta > 1``).

    Args:
        unit_incident: The incoming direction, normalized.
        normal: The surface normal, normalized and facing the incident ray.
        eta_ratio: Ratio n1 / n2 of the refractive indices.

    Returns:
        The refracted direction.
    """
    cos_theta = min(-unit_incident.dot(normal), 1.0)
    r_out_perp = eta_ratio * (unit_incident + cos_theta * normal)
    r_out_parallel = -math.sqrt(abs(1.0 - r_out_perp.length_squared())) * normal
    return r_out_perp + r_out_parallel


# =============================================================================
# Random Sampling Utilities for Monte Carlo
# =============================================================================


def random_vec3(rng: np.random.Generator, low: float = 0.0, high: float = 1.0) -> Vec3:
    """Draw a vector with components uniform in [low, high)."""
    x, y, z = rng.uniform(low, high, size=3)
    return Vec3(x, y, z)


def random_in_unit_sphere(rng: np.random.Generator) -> Vec3:
    """Generate a uniformly distributed point strictly inside the unit sphere.

    Uses rejection sampling from the enclosing cube.
    """
    while True:
        p = random_vec3(rng, -1.0, 1.0)
        if p.length_squared() < 1.0:
            return p


def random_unit_vector(rng: np.random.Generator) -> Vec3:
    """Generate a random unit vector uniformly distributed on the sphere."""
    while True:
        p = random_vec3(rng, -1.0, 1.0)
        length_squared = p.length_squared()
        # Reject the origin neighbourhood so normalization stays finite
        if 1e-160 < length_squared < 1.0:
            return p / math.sqrt(length_squared)
