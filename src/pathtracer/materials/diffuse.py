"""Diffuse (Lambertian) material scattering.

A diffuse bounce aims at a random point on the unit sphere tangent to the
surface at the hit point:

    direction = normal + random_unit_vector()

With the unit vector uniform on the sphere this yields a cosine-weighted
distribution around the normal, so the BRDF and pdf cancel and the
attenuation is simply the albedo.

Example:
    >>> # Within a Taichi kernel:
    >>> # record = scatter_diffuse(albedo, hit_record, stream)
"""

import taichi as ti
import taichi.math as tm

from pathtracer.core.ray import near_zero
from pathtracer.core.sampler import random_unit_vector
from pathtracer.geometry.sphere import HitRecord
from pathtracer.materials.material import ScatterRecord

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def scatter_diffuse(albedo: vec3, rec: HitRecord, stream: ti.i32) -> ScatterRecord:
    """Scatter a ray off a diffuse surface.

    Args:
        albedo: The diffuse reflectance color (RGB, each component in [0, 1]).
        rec: The hit record at the surface.
        stream: The RNG stream of the pixel being traced.

    Returns:
        A ScatterRecord that always scatters, starting at the hit point.
    """
    direction = rec.normal + random_unit_vector(stream)

    # The random vector can (almost) cancel the normal
    if near_zero(direction):
        direction = rec.normal

    return ScatterRecord(
        scattered=1,
        origin=rec.point,
        direction=direction,
        attenuation=albedo,
    )
