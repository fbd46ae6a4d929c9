"""Pytest configuration for lensing renderer tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts.
    """
    ti.init(arch=ti.cpu, random_seed=42)
    yield


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear scene data, lights and the massive body around each test."""
    # Import here so Taichi is initialized before any field is declared
    from src.lensing.core.integrator import clear_render_target
    from src.lensing.core.lensing import clear_massive_body
    from src.lensing.materials.surface import clear_surface_colors
    from src.lensing.scene.intersection import clear_scene
    from src.lensing.scene.lights import clear_lights

    def _clear_all():
        clear_scene()
        clear_surface_colors()
        clear_lights()
        clear_massive_body()
        clear_render_target()

    _clear_all()

    yield

    _clear_all()


@pytest.fixture
def rng():
    """A seeded random generator for deterministic sampling tests."""
    import numpy as np

    return np.random.default_rng(1234)
