"""Pinhole camera model for primary ray generation.

The camera is a fixed eye point and a rectangular image plane described by
three vectors expressed relative to the eye:

    lower_left_corner: offset from the eye to the plane's (u=0, v=0) corner
    horizontal: edge spanning u from 0 to 1
    vertical: edge spanning v from 0 to 1

A ray through image coordinates (u, v) starts at the eye with direction
lower_left_corner + u * horizontal + v * vertical. The direction is not
normalized.

Cameras can be given explicitly or built from a look-at description
(lookfrom, lookat, vup, vertical field of view, aspect ratio).

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.camera.pinhole import look_at, setup_camera, raycast
    >>>
    >>> camera = look_at(
    ...     lookfrom=(0.0, 0.0, 3.0),
    ...     lookat=(0.0, 0.0, 0.0),
    ...     vup=(0.0, 1.0, 0.0),
    ...     vfov=60.0,
    ...     aspect_ratio=16.0 / 9.0,
    ... )
    >>> setup_camera(camera)
    >>>
    >>> @ti.kernel
    ... def render():
    ...     ray = raycast(0.5, 0.5)  # Ray through image center
"""

import math
from dataclasses import dataclass

import numpy as np
import taichi as ti

from pathtracer.core.ray import Ray, make_ray
from pathtracer.core.sampler import random_f32

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass(frozen=True)
class Camera:
    """A fixed eye point and the image plane it looks through.

    Attributes:
        origin: Eye position in world space (x, y, z).
        lower_left_corner: Offset from the eye to the (u=0, v=0) corner of the
            image plane.
        horizontal: Image plane edge covered by u in [0, 1].
        vertical: Image plane edge covered by v in [0, 1].
    """

    origin: tuple[float, float, float]
    lower_left_corner: tuple[float, float, float]
    horizontal: tuple[float, float, float]
    vertical: tuple[float, float, float]


def look_at(
    lookfrom: tuple[float, float, float],
    lookat: tuple[float, float, float],
    vup: tuple[float, float, float] = (0.0, 1.0, 0.0),
    vfov: float = 90.0,
    aspect_ratio: float = 16.0 / 9.0,
) -> Camera:
    """Build a camera from a look-at description.

    The camera builds an orthonormal basis (u, v, w) from the view parameters:
    - w: points from lookat toward lookfrom (opposite view direction)
    - u: points right in the image plane
    - v: points up in the image plane

    The image plane sits at unit distance in front of the eye, so v grows
    upward in the resulting image.

    Args:
        lookfrom: Camera position in world space.
        lookat: Point the camera is looking at.
        vup: Up direction used to orient the camera.
        vfov: Vertical field of view in degrees.
        aspect_ratio: Width divided by height of the output image.

    Returns:
        The corresponding Camera.

    Raises:
        ValueError: If lookfrom equals lookat or vup is parallel to the view
            direction.
    """
    theta = math.radians(vfov)
    h = math.tan(theta / 2.0)

    # Viewport dimensions at unit distance
    viewport_height = 2.0 * h
    viewport_width = aspect_ratio * viewport_height

    eye = np.array(lookfrom, dtype=np.float64)
    target = np.array(lookat, dtype=np.float64)
    up = np.array(vup, dtype=np.float64)

    w = eye - target
    w_norm = np.linalg.norm(w)
    if w_norm == 0.0:
        raise ValueError("lookfrom and lookat must be different points")
    w = w / w_norm

    u = np.cross(up, w)
    u_norm = np.linalg.norm(u)
    if u_norm == 0.0:
        raise ValueError("vup must not be parallel to the view direction")
    u = u / u_norm

    v = np.cross(w, u)

    horizontal = viewport_width * u
    vertical = viewport_height * v
    lower_left = -w - horizontal / 2.0 - vertical / 2.0

    return Camera(
        origin=_as_tuple(eye),
        lower_left_corner=_as_tuple(lower_left),
        horizontal=_as_tuple(horizontal),
        vertical=_as_tuple(vertical),
    )


def _as_tuple(values: np.ndarray) -> tuple[float, float, float]:
    return (float(values[0]), float(values[1]), float(values[2]))


# =============================================================================
# Taichi Fields for Camera State (read-only inside kernels)
# =============================================================================

_camera_origin = ti.Vector.field(3, dtype=ti.f32, shape=())
_lower_left_corner = ti.Vector.field(3, dtype=ti.f32, shape=())
_horizontal = ti.Vector.field(3, dtype=ti.f32, shape=())
_vertical = ti.Vector.field(3, dtype=ti.f32, shape=())


def setup_camera(camera: Camera) -> None:
    """Upload a camera so kernels can generate rays from it.

    Must be called from Python before rendering. The camera state is shared
    read-only by every pixel computation.

    Args:
        camera: The camera to use for subsequent renders.
    """
    _camera_origin[None] = list(camera.origin)
    _lower_left_corner[None] = list(camera.lower_left_corner)
    _horizontal[None] = list(camera.horizontal)
    _vertical[None] = list(camera.vertical)


# =============================================================================
# Ray Generation (Taichi-compatible)
# =============================================================================


@ti.func
def raycast(u: ti.f32, v: ti.f32) -> Ray:
    """Generate the ray through image-plane coordinates (u, v).

    Values of u and v outside [0, 1] are not clamped; they address points
    outside the framed rectangle.

    Args:
        u: Horizontal coordinate (0 = lower-left corner side).
        v: Vertical coordinate (0 = lower-left corner side).

    Returns:
        A Ray from the eye toward the image plane point.
    """
    direction = _lower_left_corner[None] + u * _horizontal[None] + v * _vertical[None]
    return make_ray(_camera_origin[None], direction)


@ti.func
def get_ray_jittered(
    pixel_i: ti.i32,
    pixel_j: ti.i32,
    width: ti.i32,
    height: ti.i32,
    stream: ti.i32,
) -> Ray:
    """Generate a ray through a random point of a pixel for anti-aliasing.

    The jitter is uniformly distributed within the pixel area:
        u = (i + xi_u) / width,  v = (j + xi_v) / height

    Args:
        pixel_i: Pixel column.
        pixel_j: Pixel row along the camera's vertical axis.
        width: Image width in pixels.
        height: Image height in pixels.
        stream: The pixel's RNG stream.

    Returns:
        A Ray with random sub-pixel offset.
    """
    jitter_u = random_f32(stream)
    jitter_v = random_f32(stream)

    u = (ti.cast(pixel_i, ti.f32) + jitter_u) / ti.cast(width, ti.f32)
    v = (ti.cast(pixel_j, ti.f32) + jitter_v) / ti.cast(height, ti.f32)

    return raycast(u, v)


# =============================================================================
# Utility Functions
# =============================================================================


def get_camera_info() -> dict[str, tuple[float, float, float]]:
    """Get the uploaded camera state for debugging.

    Returns:
        Dictionary with origin, lower_left_corner, horizontal and vertical.
    """

    def _read(field: "ti.MatrixField") -> tuple[float, float, float]:
        vec = field[None]
        return (float(vec[0]), float(vec[1]), float(vec[2]))

    return {
        "origin": _read(_camera_origin),
        "lower_left_corner": _read(_lower_left_corner),
        "horizontal": _read(_horizontal),
        "vertical": _read(_vertical),
    }
