"""Pytest configuration for path tracer tests.

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
    # Note: We don't call ti.reset() here as it can cause issues
    # with subsequent tests if any cleanup happens after


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear scene and material tables before and after each test.

    This ensures tests are isolated from each other.
    """
    # Import here so Taichi is initialized before any field is declared
    from pathtracer.core.integrator import clear_render_target
    from pathtracer.materials.material import clear_materials
    from pathtracer.scene.intersection import clear_scene

    def _clear_all():
        clear_scene()
        clear_materials()
        clear_render_target()

    _clear_all()

    yield

    _clear_all()


@pytest.fixture
def default_camera():
    """Upload the eye-at-origin camera with a 4 x 2 image plane at z = -1."""
    from pathtracer.camera.pinhole import setup_camera
    from pathtracer.scene.presets import DEFAULT_CAMERA

    setup_camera(DEFAULT_CAMERA)
    return DEFAULT_CAMERA
