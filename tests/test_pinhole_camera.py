"""Unit tests for the pinhole camera.

Tests cover:
- Uploading a camera and reading it back
- raycast at the corners and center of the image plane
- u, v outside [0, 1]
- Jittered rays stay inside their pixel
- look_at basis construction and validation
"""

import math

import numpy as np
import pytest
import taichi as ti


def _raycast(u, v):
    from pathtracer.camera.pinhole import raycast

    origin = ti.field(dtype=ti.math.vec3, shape=())
    direction = ti.field(dtype=ti.math.vec3, shape=())

    @ti.kernel
    def test_kernel(u: ti.f32, v: ti.f32):
        ray = raycast(u, v)
        origin[None] = ray.origin
        direction[None] = ray.direction

    test_kernel(u, v)
    return np.array(origin[None]), np.array(direction[None])


class TestCameraSetup:
    """Tests for setup_camera and get_camera_info."""

    def test_setup_camera_roundtrip(self):
        """Test the uploaded camera reads back unchanged."""
        from pathtracer.camera.pinhole import Camera, get_camera_info, setup_camera

        camera = Camera(
            origin=(1.0, 2.0, 3.0),
            lower_left_corner=(-2.0, -1.0, -1.0),
            horizontal=(4.0, 0.0, 0.0),
            vertical=(0.0, 2.0, 0.0),
        )
        setup_camera(camera)

        info = get_camera_info()
        assert info["origin"] == pytest.approx(camera.origin)
        assert info["lower_left_corner"] == pytest.approx(camera.lower_left_corner)
        assert info["horizontal"] == pytest.approx(camera.horizontal)
        assert info["vertical"] == pytest.approx(camera.vertical)


class TestRaycast:
    """Tests for raycast."""

    @pytest.mark.parametrize(
        "u,v,expected",
        [
            (0.0, 0.0, (-2.0, -1.0, -1.0)),
            (1.0, 0.0, (2.0, -1.0, -1.0)),
            (0.0, 1.0, (-2.0, 1.0, -1.0)),
            (0.5, 0.5, (0.0, 0.0, -1.0)),
        ],
    )
    def test_raycast_image_plane(self, default_camera, u, v, expected):
        """Test the direction reaches the image plane point at (u, v)."""
        origin, direction = _raycast(u, v)
        np.testing.assert_allclose(origin, (0.0, 0.0, 0.0), atol=1e-6)
        np.testing.assert_allclose(direction, expected, atol=1e-6)

    def test_raycast_outside_unit_square(self, default_camera):
        """Test u, v outside [0, 1] extrapolate without clamping."""
        _, direction = _raycast(1.5, -0.5)
        np.testing.assert_allclose(direction, (4.0, -2.0, -1.0), atol=1e-6)

    def test_raycast_uses_eye_position(self):
        """Test rays start at the camera origin."""
        from pathtracer.camera.pinhole import Camera, setup_camera

        setup_camera(
            Camera(
                origin=(0.0, 1.0, 5.0),
                lower_left_corner=(-1.0, -1.0, -1.0),
                horizontal=(2.0, 0.0, 0.0),
                vertical=(0.0, 2.0, 0.0),
            )
        )
        origin, direction = _raycast(0.5, 0.5)
        np.testing.assert_allclose(origin, (0.0, 1.0, 5.0), atol=1e-6)
        np.testing.assert_allclose(direction, (0.0, 0.0, -1.0), atol=1e-6)


class TestJitteredRays:
    """Tests for get_ray_jittered."""

    def test_jitter_stays_within_pixel(self, default_camera):
        """Test jittered rays pass through their own pixel footprint."""
        from pathtracer.camera.pinhole import get_ray_jittered
        from pathtracer.core.sampler import seed_stream

        width, height = 8, 4
        pixel_i, pixel_j = 3, 2
        count = 128
        directions = ti.Vector.field(3, dtype=ti.f32, shape=count)

        @ti.kernel
        def test_kernel():
            seed_stream(0, 77)
            ti.loop_config(serialize=True)
            for k in range(count):
                directions[k] = get_ray_jittered(pixel_i, pixel_j, width, height, 0).direction

        test_kernel()
        d = directions.to_numpy()
        # direction = (-2 + 4u, -1 + 2v, -1)
        u = (d[:, 0] + 2.0) / 4.0
        v = (d[:, 1] + 1.0) / 2.0
        assert np.all(u >= pixel_i / width - 1e-6)
        assert np.all(u < (pixel_i + 1) / width + 1e-6)
        assert np.all(v >= pixel_j / height - 1e-6)
        assert np.all(v < (pixel_j + 1) / height + 1e-6)
        assert u.std() > 0.0


class TestLookAt:
    """Tests for look_at."""

    def test_look_at_down_negative_z(self):
        """Test the canonical view reproduces the 90 degree, 2:1 camera."""
        from pathtracer.camera.pinhole import look_at

        camera = look_at(
            lookfrom=(0.0, 0.0, 0.0),
            lookat=(0.0, 0.0, -1.0),
            vup=(0.0, 1.0, 0.0),
            vfov=90.0,
            aspect_ratio=2.0,
        )
        assert camera.origin == pytest.approx((0.0, 0.0, 0.0))
        assert camera.horizontal == pytest.approx((4.0, 0.0, 0.0))
        assert camera.vertical == pytest.approx((0.0, 2.0, 0.0))
        assert camera.lower_left_corner == pytest.approx((-2.0, -1.0, -1.0))

    def test_look_at_centre_ray_hits_target(self):
        """Test the ray through (0.5, 0.5) points at lookat."""
        from pathtracer.camera.pinhole import look_at, setup_camera

        lookfrom = (3.0, 3.0, 2.0)
        lookat = (0.0, 0.0, -1.0)
        setup_camera(look_at(lookfrom, lookat, vfov=20.0, aspect_ratio=16.0 / 9.0))

        origin, direction = _raycast(0.5, 0.5)
        expected = np.subtract(lookat, lookfrom)
        expected /= np.linalg.norm(expected)
        np.testing.assert_allclose(origin, lookfrom, atol=1e-5)
        np.testing.assert_allclose(direction / np.linalg.norm(direction), expected, atol=1e-5)

    def test_look_at_fov(self):
        """Test the vertical edge spans the requested field of view."""
        from pathtracer.camera.pinhole import look_at

        camera = look_at((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), vfov=60.0, aspect_ratio=1.0)
        assert np.linalg.norm(camera.vertical) == pytest.approx(2.0 * math.tan(math.radians(30.0)))

    def test_look_at_same_points(self):
        """Test coincident lookfrom and lookat raise ValueError."""
        from pathtracer.camera.pinhole import look_at

        with pytest.raises(ValueError, match="different points"):
            look_at((1.0, 1.0, 1.0), (1.0, 1.0, 1.0))

    def test_look_at_parallel_vup(self):
        """Test vup parallel to the view direction raises ValueError."""
        from pathtracer.camera.pinhole import look_at

        with pytest.raises(ValueError, match="parallel"):
            look_at((0.0, 0.0, 0.0), (0.0, 5.0, 0.0), vup=(0.0, 1.0, 0.0))
