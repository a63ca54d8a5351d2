"""Taichi-based stochastic path tracer for sphere scenes.

This package renders scenes made of spheres with diffuse, metal and
dielectric materials, lit by a sky gradient, using Monte Carlo path tracing
parallelized over pixels with Taichi.

Subpackages:
    core: Ray utilities, random streams, the path tracing integrator and the
        render driver
    geometry: Sphere primitive and ray-sphere intersection
    materials: Material descriptors and scatter functions
    scene: Scene storage, scene manager and preset scenes
    camera: Pinhole camera with ray generation
    preview: PNG export

Taichi must be initialized (ti.init) before importing the subpackages, since
they declare Taichi fields at import time.
"""

__version__ = "0.1.0"
