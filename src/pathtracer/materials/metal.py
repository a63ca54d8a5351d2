"""Metal (specular reflective) material scattering.

Perfect metals (fuzziness=0) produce mirror reflections; rougher metals
perturb the mirror direction by a random point inside a ball whose radius is
the fuzziness:

    direction = reflect(unit(d), n) + fuzziness * random_in_unit_sphere()

Perturbed directions that end up below the surface are absorbed rather than
allowed to re-enter the solid.

Example:
    >>> # Within a Taichi kernel:
    >>> # record = scatter_metal(albedo, fuzziness, ray, hit_record, stream)
"""

import taichi as ti
import taichi.math as tm

from pathtracer.core.ray import Ray, reflect
from pathtracer.core.sampler import random_in_unit_sphere
from pathtracer.geometry.sphere import HitRecord
from pathtracer.materials.material import ScatterRecord, make_absorbed

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def scatter_metal(
    albedo: vec3,
    fuzziness: ti.f32,
    ray_in: Ray,
    rec: HitRecord,
    stream: ti.i32,
) -> ScatterRecord:
    """Scatter a ray off a metal surface.

    Args:
        albedo: The reflective color (RGB, each component in [0, 1]).
        fuzziness: Mirror perturbation radius in [0, 1].
        ray_in: The incoming ray.
        rec: The hit record at the surface.
        stream: The RNG stream of the pixel being traced.

    Returns:
        A ScatterRecord with attenuation = albedo, or an absorbed record if
        the perturbed direction points into the surface.
    """
    reflected = reflect(tm.normalize(ray_in.direction), rec.normal)
    direction = reflected + fuzziness * random_in_unit_sphere(stream)

    result = make_absorbed()
    if tm.dot(direction, rec.normal) > 0.0:
        result = ScatterRecord(
            scattered=1,
            origin=rec.point,
            direction=direction,
            attenuation=albedo,
        )
    return result
