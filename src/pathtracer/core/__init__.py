"""Core rendering module.

Components:
    ray: Ray data structure and vector helpers (reflect, refract, Schlick)
    sampler: Per-pixel random number streams and sphere sampling
    integrator: Path tracing kernels and the render target
    renderer: Render configuration, batching and cancellation

All compute-intensive operations use Taichi kernels.
"""

from .ray import (
    Ray,
    length_squared,
    make_ray,
    near_zero,
    ray_at,
    reflect,
    reflectance,
    refract,
    vec3,
)
from .sampler import (
    random_f32,
    random_in_unit_sphere,
    random_unit_vector,
    seed_stream,
    seed_streams,
)

# Note: integrator and renderer are NOT imported here to avoid circular imports
# (the integrator depends on camera, materials and scene).
#
# For rendering, use:
#   from pathtracer.core.renderer import RenderConfig, Renderer, render

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "length_squared",
    "reflect",
    "refract",
    "reflectance",
    "near_zero",
    "random_f32",
    "random_in_unit_sphere",
    "random_unit_vector",
    "seed_stream",
    "seed_streams",
]
