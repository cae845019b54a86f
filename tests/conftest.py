"""Pytest configuration for path tracer tests.

This module provides shared fixtures for all test modules: a seeded random
source for the CPU renderer, and Taichi initialization for the GPU tests,
which must happen once per session.
"""

import numpy as np
import pytest


@pytest.fixture
def rng():
    """Seeded random source so stochastic tests are reproducible."""
    return np.random.default_rng(42)


@pytest.fixture(scope="session")
def taichi_runtime():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts.
    """
    ti = pytest.importorskip("taichi")
    ti.init(arch=ti.cpu, random_seed=42)
    yield ti
    # Note: We don't call ti.reset() here as fields allocated by other
    # tests in the session would be invalidated


@pytest.fixture
def two_sphere_scene():
    """Fresh (world, camera) pair of the gray sphere resting on the ground."""
    from pathtracer.scene.presets import create_two_sphere_scene

    return create_two_sphere_scene()
