"""Camera module for primary ray generation.

Components:
    pinhole: Pinhole camera (explicit image plane or look-at construction)

Ray generation uses normalized image coordinates:
    u in [0, 1]: across the horizontal edge of the image plane
    v in [0, 1]: across the vertical edge of the image plane
"""

from .pinhole import (
    Camera,
    get_camera_info,
    get_ray_jittered,
    look_at,
    raycast,
    setup_camera,
)

__all__ = [
    "Camera",
    "look_at",
    "setup_camera",
    "raycast",
    "get_ray_jittered",
    "get_camera_info",
]
