"""Unit tests for the Dielectric material.

Tests cover:
- Schlick reflectance values
- Media ordering for front and back face hits
- Total internal reflection
- Reflect/refract split at normal incidence
- Index of refraction validation
"""

import math

import pytest

from pathtracer.core.ray import Ray
from pathtracer.core.vec3 import Color, Point3, Vec3
from pathtracer.geometry.sphere import FaceKind, HitRecord
from pathtracer.materials import Dielectric, MaterialType, reflectance

UP = Vec3(0.0, 1.0, 0.0)


def make_hit(material, face=FaceKind.FRONT):
    return HitRecord(t=1.0, point=Point3(0.0, 0.0, 0.0), normal=UP, face=face, material=material)


class TestReflectance:
    """Tests for Schlick's approximation."""

    def test_normal_incidence_equals_r0(self):
        assert reflectance(1.0, 1.0, 1.5) == pytest.approx(((1.0 - 1.5) / (1.0 + 1.5)) ** 2)
        assert reflectance(1.0, 1.0, 1.5) == pytest.approx(0.04)

    def test_grazing_incidence_is_total(self):
        assert reflectance(0.0, 1.0, 1.5) == pytest.approx(1.0)

    def test_symmetric_in_media(self):
        assert reflectance(0.7, 1.0, 1.5) == pytest.approx(reflectance(0.7, 1.5, 1.0))

    def test_increases_toward_grazing(self):
        values = [reflectance(c, 1.0, 1.5) for c in (1.0, 0.8, 0.5, 0.2, 0.0)]
        assert values == sorted(values)


class TestDielectricScatter:
    """Tests for Dielectric.scatter."""

    def test_media(self):
        glass = Dielectric(index_of_refraction=1.5)
        assert glass.media(True) == (1.0, 1.5)
        assert glass.media(False) == (1.5, 1.0)

    def test_total_internal_reflection(self, rng):
        """Leaving glass at 60 degrees, 1.5 * sin(60) > 1 always reflects."""
        glass = Dielectric(index_of_refraction=1.5)
        hit = make_hit(glass, face=FaceKind.BACK)
        theta = math.radians(60.0)
        incoming = Ray(Point3(-1.0, 1.0, 0.0), Vec3(math.sin(theta), -math.cos(theta), 0.0))

        for _ in range(100):
            record = glass.scatter(incoming, hit, rng)
            assert record.ray.direction.isclose(Vec3(math.sin(theta), math.cos(theta), 0.0))
            assert record.attenuation == Color(1.0, 1.0, 1.0)

    def test_normal_incidence_split(self, rng):
        """About 4% of rays reflect straight back, the rest pass through."""
        glass = Dielectric(index_of_refraction=1.5)
        hit = make_hit(glass)
        incoming = Ray(Point3(0.0, 1.0, 0.0), Vec3(0.0, -1.0, 0.0))

        n = 2000
        reflected = 0
        for _ in range(n):
            record = glass.scatter(incoming, hit, rng)
            direction = record.ray.direction
            if direction.isclose(UP):
                reflected += 1
            else:
                assert direction.isclose(Vec3(0.0, -1.0, 0.0))
        assert 0.02 < reflected / n < 0.07

    def test_refraction_obeys_snell(self, rng):
        glass = Dielectric(index_of_refraction=1.5)
        hit = make_hit(glass)
        theta = math.radians(30.0)
        incoming = Ray(Point3(-1.0, 1.0, 0.0), Vec3(math.sin(theta), -math.cos(theta), 0.0))

        for _ in range(100):
            direction = glass.scatter(incoming, hit, rng).ray.direction
            if direction.y < 0.0:
                # n1 sin(theta_i) = n2 sin(theta_t)
                assert direction.unit().x * 1.5 == pytest.approx(math.sin(theta))

    def test_attenuation_not_shared(self, rng):
        glass = Dielectric(index_of_refraction=1.5)
        hit = make_hit(glass)
        incoming = Ray(Point3(0.0, 1.0, 0.0), Vec3(0.0, -1.0, 0.0))

        first = glass.scatter(incoming, hit, rng)
        first.attenuation.accumulate(Color(1.0, 1.0, 1.0))
        second = glass.scatter(incoming, hit, rng)
        assert second.attenuation == Color(1.0, 1.0, 1.0)
        assert second.attenuation is not first.attenuation


class TestDielectricValidation:
    """Tests for construction and serialization."""

    @pytest.mark.parametrize("ior", [0.0, -1.5])
    def test_non_positive_ior(self, ior):
        with pytest.raises(ValueError):
            Dielectric(index_of_refraction=ior)

    def test_defaults(self):
        glass = Dielectric()
        assert glass.index_of_refraction == 1.5
        assert glass.material_type is MaterialType.DIELECTRIC

    def test_to_config(self):
        assert Dielectric(2.4).to_config() == {"type": "dielectric", "ior": 2.4}
