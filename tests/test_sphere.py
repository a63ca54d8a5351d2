"""Unit tests for sphere intersection.

Tests cover:
- Ray hitting sphere from outside (front face)
- Ray missing sphere
- Ray starting inside sphere (back face)
- Negative radius (hollow sphere) normal flip
- Open t interval bounds
"""

import math

import pytest
import taichi as ti


def _hit(origin, direction, center, radius, t_min=0.001, t_max=1000.0):
    """Run hit_sphere for one ray and return the record's fields."""
    from pathtracer.core.ray import make_ray, vec3
    from pathtracer.geometry.sphere import Sphere, hit_sphere

    hit = ti.field(dtype=ti.i32, shape=())
    t_val = ti.field(dtype=ti.f32, shape=())
    point = ti.field(dtype=ti.math.vec3, shape=())
    normal = ti.field(dtype=ti.math.vec3, shape=())
    front_face = ti.field(dtype=ti.i32, shape=())
    material_id = ti.field(dtype=ti.i32, shape=())

    @ti.kernel
    def test_kernel(o: vec3, d: vec3, c: vec3, r: ti.f32, lo: ti.f32, hi: ti.f32):
        sphere = Sphere(center=c, radius=r, material_id=3)
        record = hit_sphere(make_ray(o, d), sphere, lo, hi)
        hit[None] = record.hit
        t_val[None] = record.t
        point[None] = record.point
        normal[None] = record.normal
        front_face[None] = record.front_face
        material_id[None] = record.material_id

    test_kernel(vec3(*origin), vec3(*direction), vec3(*center), radius, t_min, t_max)
    return {
        "hit": hit[None],
        "t": t_val[None],
        "point": tuple(point[None]),
        "normal": tuple(normal[None]),
        "front_face": front_face[None],
        "material_id": material_id[None],
    }


class TestSphereIntersection:
    """Tests for ray-sphere intersection."""

    def test_hit_sphere_direct_hit(self):
        """Test ray hitting sphere head-on from outside."""
        rec = _hit((0.0, 0.0, 5.0), (0.0, 0.0, -1.0), (0.0, 0.0, 0.0), 1.0)

        assert rec["hit"] == 1
        # Should hit at z=1 (front of sphere), so t=4
        assert abs(rec["t"] - 4.0) < 1e-5
        assert rec["point"] == pytest.approx((0.0, 0.0, 1.0), abs=1e-5)
        assert rec["normal"] == pytest.approx((0.0, 0.0, 1.0), abs=1e-5)
        assert rec["front_face"] == 1
        assert rec["material_id"] == 3

    def test_hit_point_lies_on_sphere(self):
        """Test the hit point is at distance |radius| from the center."""
        rec = _hit((0.3, 0.2, 0.0), (0.1, -0.05, -1.0), (0.0, 0.0, -1.0), 0.5)

        assert rec["hit"] == 1
        dx, dy, dz = rec["point"][0], rec["point"][1], rec["point"][2] + 1.0
        assert abs(math.sqrt(dx * dx + dy * dy + dz * dz) - 0.5) < 1e-4

    def test_unnormalized_direction(self):
        """Test t is measured in units of the given direction."""
        rec = _hit((0.0, 0.0, 5.0), (0.0, 0.0, -2.0), (0.0, 0.0, 0.0), 1.0)

        assert rec["hit"] == 1
        assert abs(rec["t"] - 2.0) < 1e-5
        assert rec["normal"] == pytest.approx((0.0, 0.0, 1.0), abs=1e-5)

    def test_hit_sphere_miss(self):
        """Test ray missing sphere entirely."""
        rec = _hit((5.0, 0.0, 0.0), (0.0, 0.0, -1.0), (0.0, 0.0, 0.0), 1.0)
        assert rec["hit"] == 0

    def test_sphere_behind_ray(self):
        """Test a sphere behind the ray origin is not hit."""
        rec = _hit((0.0, 0.0, 5.0), (0.0, 0.0, 1.0), (0.0, 0.0, 0.0), 1.0)
        assert rec["hit"] == 0

    def test_hit_sphere_inside(self):
        """Test ray starting inside sphere hits the far side as a back face."""
        rec = _hit((0.0, 0.0, 0.0), (0.0, 0.0, 1.0), (0.0, 0.0, 0.0), 1.0)

        assert rec["hit"] == 1
        assert abs(rec["t"] - 1.0) < 1e-5
        assert rec["front_face"] == 0
        # Normal faces back toward the ray
        assert rec["normal"] == pytest.approx((0.0, 0.0, -1.0), abs=1e-5)

    def test_normal_is_unit_length(self):
        """Test the stored normal is unit length for a large sphere."""
        rec = _hit((0.0, 0.0, 0.0), (0.2, -1.0, -1.0), (0.0, -100.5, -1.0), 100.0)

        assert rec["hit"] == 1
        n = rec["normal"]
        assert abs(math.sqrt(n[0] ** 2 + n[1] ** 2 + n[2] ** 2) - 1.0) < 1e-5


class TestNegativeRadius:
    """Tests for hollow spheres modelled with a negative radius."""

    def test_negative_radius_from_outside(self):
        """Test the outward normal of a negative sphere points inward."""
        rec = _hit((0.0, 0.0, 5.0), (0.0, 0.0, -1.0), (0.0, 0.0, 0.0), -1.0)

        assert rec["hit"] == 1
        assert abs(rec["t"] - 4.0) < 1e-5
        # The flipped outward normal points along the ray, so it is a back face
        assert rec["front_face"] == 0
        assert rec["normal"] == pytest.approx((0.0, 0.0, 1.0), abs=1e-5)

    def test_negative_radius_from_inside(self):
        """Test a ray leaving a hollow sphere sees a front face."""
        rec = _hit((0.0, 0.0, 0.0), (0.0, 0.0, 1.0), (0.0, 0.0, 0.0), -1.0)

        assert rec["hit"] == 1
        assert rec["front_face"] == 1
        assert rec["normal"] == pytest.approx((0.0, 0.0, -1.0), abs=1e-5)


class TestIntervalBounds:
    """Tests for the open (t_min, t_max) interval."""

    def test_near_root_below_t_min_uses_far_root(self):
        """Test the far root is returned when the near root is rejected."""
        rec = _hit((0.0, 0.0, 5.0), (0.0, 0.0, -1.0), (0.0, 0.0, 0.0), 1.0, t_min=4.5)

        assert rec["hit"] == 1
        assert abs(rec["t"] - 6.0) < 1e-5
        assert rec["front_face"] == 0

    def test_both_roots_beyond_t_max(self):
        """Test no hit when both roots exceed t_max."""
        rec = _hit((0.0, 0.0, 5.0), (0.0, 0.0, -1.0), (0.0, 0.0, 0.0), 1.0, t_max=3.0)
        assert rec["hit"] == 0

    def test_root_equal_to_t_max_excluded(self):
        """Test a root exactly at t_max is outside the open interval."""
        rec = _hit((0.0, 0.0, 5.0), (0.0, 0.0, -1.0), (0.0, 0.0, 0.0), 1.0, t_max=4.0)
        # The far root (t=6) is also out of range
        assert rec["hit"] == 0
