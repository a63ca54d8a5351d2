"""Sphere primitive with ray-sphere intersection.

The intersection solves the quadratic obtained by substituting the ray
parametrization into |P - center|^2 = radius^2, using the half-b form:

    a = |d|^2
    half_b = (o - center) . d
    c = |o - center|^2 - radius^2
    t = (-half_b -/+ sqrt(half_b^2 - a*c)) / a

The radius is signed. A negative radius flips the outward normal, which turns
the sphere into a hollow shell (used for bubbles inside glass).

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.geometry.sphere import Sphere, hit_sphere
    >>> sphere = Sphere(center=ti.math.vec3(0, 0, -1), radius=0.5, material_id=0)
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from pathtracer.core.ray import Ray, ray_at

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point, signed radius and material.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The signed radius. Negative values flip the surface normal.
        material_id: Index into the material table.
    """

    center: vec3
    radius: ti.f32
    material_id: ti.i32


@ti.dataclass
class HitRecord:
    """Record of a ray-surface intersection.

    Attributes:
        hit: Whether the ray intersected the surface (1 if hit, 0 if miss).
        t: The ray parameter of the intersection. Only valid if hit == 1.
        point: The intersection point. Only valid if hit == 1.
        normal: The unit surface normal, always facing the incoming ray.
            Only valid if hit == 1.
        front_face: 1 if the ray arrived from the outward side of the surface,
            0 if the geometric normal had to be flipped. Only valid if hit == 1.
        material_id: The material of the hit surface, -1 on a miss.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    front_face: ti.i32
    material_id: ti.i32


@ti.func
def make_miss_record() -> HitRecord:
    """Create a HitRecord indicating no intersection."""
    return HitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        front_face=0,
        material_id=-1,
    )


@ti.func
def hit_sphere(ray: Ray, sphere: Sphere, t_min: ti.f32, t_max: ti.f32) -> HitRecord:
    """Test for ray-sphere intersection inside the open interval (t_min, t_max).

    The nearer root is accepted first; if it falls outside the interval the
    farther root is tried (this is the case for rays starting inside the
    sphere).

    Args:
        ray: The ray to test. The direction need not be normalized.
        sphere: The sphere to test against.
        t_min: Lower bound on accepted t (exclusive).
        t_max: Upper bound on accepted t (exclusive).

    Returns:
        A HitRecord. Check the hit field to determine if intersection occurred.
    """
    oc = ray.origin - sphere.center
    a = tm.dot(ray.direction, ray.direction)
    half_b = tm.dot(oc, ray.direction)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius
    discriminant = half_b * half_b - a * c

    # Taichi requires outer-scope declaration
    result = make_miss_record()

    if discriminant >= 0.0:
        sqrt_d = ti.sqrt(discriminant)

        t = (-half_b - sqrt_d) / a
        valid = (t > t_min) and (t < t_max)

        if not valid:
            t = (-half_b + sqrt_d) / a
            valid = (t > t_min) and (t < t_max)

        if valid:
            point = ray_at(ray, t)
            outward_normal = (point - sphere.center) / sphere.radius

            front_face = 1
            normal = outward_normal
            if tm.dot(ray.direction, outward_normal) >= 0.0:
                front_face = 0
                normal = -outward_normal

            result = HitRecord(
                hit=1,
                t=t,
                point=point,
                normal=normal,
                front_face=front_face,
                material_id=sphere.material_id,
            )

    return result
