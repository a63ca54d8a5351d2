"""Scene module for scene storage and construction.

Components:
    intersection: Global sphere table and nearest-hit queries
    manager: SceneManager coordinating spheres and materials
    presets: Ready-made scenes with matching cameras

Scene data uses a Structure-of-Arrays layout in Taichi fields, written from
Python and read-only inside kernels.
"""

from .intersection import (
    MAX_SPHERES,
    add_sphere,
    clear_scene,
    get_sphere_count,
    intersect_scene,
)
from .manager import SceneConfig, SceneManager, SphereInfo
from .presets import (
    PRESETS,
    create_four_spheres_scene,
    create_glass_scene,
    create_preset_scene,
    create_two_spheres_scene,
)

__all__ = [
    # Intersection module
    "add_sphere",
    "clear_scene",
    "get_sphere_count",
    "intersect_scene",
    "MAX_SPHERES",
    # Manager module
    "SceneManager",
    "SceneConfig",
    "SphereInfo",
    # Presets
    "PRESETS",
    "create_preset_scene",
    "create_four_spheres_scene",
    "create_two_spheres_scene",
    "create_glass_scene",
]
