"""Dielectric (glass/water) material scattering.

Key physics:
    - Snell's law for refraction: n1 * sin(theta1) = n2 * sin(theta2)
    - Schlick's approximation for Fresnel reflectance
    - Total internal reflection when ratio * sin(theta) > 1

At every hit the material picks reflection or refraction at random, with the
reflection probability given by Schlick's approximation. Dielectrics never
absorb: the attenuation is always white.

Example:
    >>> # Within a Taichi kernel:
    >>> # record = scatter_dielectric(ior, ray, hit_record, stream)
"""

import taichi as ti
import taichi.math as tm

from pathtracer.core.ray import Ray, reflect, reflectance, refract
from pathtracer.core.sampler import random_f32
from pathtracer.geometry.sphere import HitRecord
from pathtracer.materials.material import ScatterRecord

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def refraction_ratio_for(ior: ti.f32, front_face: ti.i32) -> ti.f32:
    """Ratio eta_incident / eta_transmitted for a hit on either side.

    Entering from outside (front_face=1) gives 1 / ior; leaving the material
    (front_face=0) gives ior.
    """
    ratio = 1.0 / ior
    if front_face == 0:
        ratio = ior
    return ratio


@ti.func
def scatter_dielectric(ior: ti.f32, ray_in: Ray, rec: HitRecord, stream: ti.i32) -> ScatterRecord:
    """Scatter a ray through a dielectric surface.

    Args:
        ior: Index of refraction of the material.
        ray_in: The incoming ray.
        rec: The hit record at the surface. The normal faces the incoming ray.
        stream: The RNG stream of the pixel being traced.

    Returns:
        A ScatterRecord that always scatters with white attenuation.
    """
    ratio = refraction_ratio_for(ior, rec.front_face)

    unit_direction = tm.normalize(ray_in.direction)
    cos_theta = tm.min(tm.dot(-unit_direction, rec.normal), 1.0)
    sin_theta = ti.sqrt(tm.max(0.0, 1.0 - cos_theta * cos_theta))

    # One draw per hit, total internal reflection included
    fresnel_draw = random_f32(stream)

    direction = vec3(0.0, 0.0, 0.0)
    if ratio * sin_theta > 1.0 or reflectance(cos_theta, ratio) > fresnel_draw:
        direction = reflect(unit_direction, rec.normal)
    else:
        direction = refract(unit_direction, rec.normal, ratio)

    return ScatterRecord(
        scattered=1,
        origin=rec.point,
        direction=direction,
        attenuation=vec3(1.0, 1.0, 1.0),
    )
