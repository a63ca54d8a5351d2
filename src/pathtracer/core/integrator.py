"""Path tracing integrator and per-pixel sampling kernels.

This module implements the rendering kernels: the color integrator that
follows one light path through the scene, and the sampling driver that
averages many jittered paths per pixel into display-ready bytes.

The integrator is the loop form of the classic recursive estimator

    color(ray, depth) = black                                if depth >= max_depth
                      = attenuation * color(scattered, depth + 1)   on scatter
                      = black                                on absorption
                      = sky(ray)                             on miss

carrying the product of attenuations along the path as a throughput.

Key features:
    - Material dispatch over the closed set of material kinds
    - Hard bounce limit (rays that exhaust it contribute black)
    - Sky gradient background (the only light source)
    - One RNG stream per pixel, seeded from the pixel's linear index
    - Parallel per-pixel evaluation into disjoint buffer slots

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.core.integrator import (
    ...     setup_render_target, seed_render_target, render_samples, resolve_pixels
    ... )
    >>> setup_render_target(400, 200)
    >>> seed_render_target(seed=0)
    >>> render_samples(num_samples=100, max_depth=50)
    >>> pixels = resolve_pixels()  # (200, 400, 3) uint8
"""

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from pathtracer.camera.pinhole import get_ray_jittered
from pathtracer.core.ray import Ray, make_ray
from pathtracer.core.sampler import seed_stream, seed_streams
from pathtracer.geometry.sphere import HitRecord
from pathtracer.materials.dielectric import scatter_dielectric
from pathtracer.materials.diffuse import scatter_diffuse
from pathtracer.materials.material import (
    MaterialKind,
    ScatterRecord,
    get_material_albedo,
    get_material_fuzziness,
    get_material_ior,
    get_material_kind,
    make_absorbed,
)
from pathtracer.materials.metal import scatter_metal
from pathtracer.scene.intersection import intersect_scene

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Rendering Constants
# =============================================================================

# t_min avoids re-hitting the surface a bounce starts on (shadow acne)
T_MIN = 0.001
# Stands in for +infinity
T_MAX = 1e10

# Sky gradient endpoints (horizon-ish to zenith)
SKY_BOTTOM_COLOR = vec3(1.0, 1.0, 1.0)
SKY_TOP_COLOR = vec3(0.5, 0.7, 1.0)

# Output encoding: values are clamped below 1 before scaling to bytes
MAX_INTENSITY = 0.999
BYTE_SCALE = 256.0

# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

# Image dimensions (actual active size)
_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Sum of sample colors per pixel (preallocated to max size)
_color_sum = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

# Sample count per pixel (preallocated to max size)
_sample_count = ti.field(dtype=ti.i32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

# Gamma-corrected output bytes per pixel
_pixel_bytes = ti.Vector.field(3, dtype=ti.u8, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

# Flag to track if render target is initialized
_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Initialize the render target buffers.

    Sets the active image dimensions and clears the buffers. The buffers are
    preallocated to MAX_IMAGE_WIDTH x MAX_IMAGE_HEIGHT so that resizing never
    recompiles kernels.

    Args:
        width: Image width in pixels (max MAX_IMAGE_WIDTH).
        height: Image height in pixels (max MAX_IMAGE_HEIGHT).

    Raises:
        ValueError: If a dimension is not positive or exceeds the maximum.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions ({width}x{height}) must be positive")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1

    clear_render_target()


def clear_render_target() -> None:
    """Clear the accumulation buffers to zero."""
    _color_sum.fill(0.0)
    _sample_count.fill(0)
    _pixel_bytes.fill(0)


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions.

    Returns:
        Tuple of (width, height).
    """
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    """Check if render target is initialized and raise if not."""
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


# =============================================================================
# Material Dispatch
# =============================================================================


@ti.func
def _scatter_material(ray_in: Ray, rec: HitRecord, stream: ti.i32) -> ScatterRecord:
    """Dispatch to the scatter function of the hit material's kind.

    Unknown material IDs absorb the ray.
    """
    kind = get_material_kind(rec.material_id)
    result = make_absorbed()

    if kind == int(MaterialKind.DIFFUSE):
        result = scatter_diffuse(get_material_albedo(rec.material_id), rec, stream)

    elif kind == int(MaterialKind.METAL):
        result = scatter_metal(
            get_material_albedo(rec.material_id),
            get_material_fuzziness(rec.material_id),
            ray_in,
            rec,
            stream,
        )

    elif kind == int(MaterialKind.DIELECTRIC):
        result = scatter_dielectric(get_material_ior(rec.material_id), ray_in, rec, stream)

    return result


# =============================================================================
# Color Integrator
# =============================================================================


@ti.func
def background_color(ray: Ray) -> vec3:
    """Sky color seen along a ray that escapes the scene.

    Linearly blends white into sky blue by t = 0.5 * (unit(direction).y + 1).
    """
    unit_direction = tm.normalize(ray.direction)
    t = 0.5 * (unit_direction.y + 1.0)
    return (1.0 - t) * SKY_BOTTOM_COLOR + t * SKY_TOP_COLOR


@ti.func
def trace_color(ray: Ray, max_depth: ti.i32, stream: ti.i32) -> vec3:
    """Estimate the radiance arriving along a ray.

    Follows at most max_depth surface interactions. A path still bouncing
    after that contributes black, as do absorbed paths.

    Args:
        ray: The ray to trace.
        max_depth: Maximum number of surface interactions.
        stream: The RNG stream of the pixel being traced.

    Returns:
        The estimated radiance (RGB).
    """
    origin = ray.origin
    direction = ray.direction

    radiance = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)

    # Active flag for path continuation
    active = 1

    for _ in range(max_depth):
        if active == 1:
            current = make_ray(origin, direction)
            rec = intersect_scene(current, T_MIN, T_MAX)

            if rec.hit == 0:
                radiance = throughput * background_color(current)
                active = 0
            else:
                scatter = _scatter_material(current, rec, stream)
                if scatter.scattered == 0:
                    active = 0
                else:
                    throughput *= scatter.attenuation
                    origin = scatter.origin
                    direction = scatter.direction

    return radiance


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.func
def _pixel_stream(pixel_i: ti.i32, pixel_j: ti.i32, width: ti.i32) -> ti.i32:
    """Linear (row-major) index of a pixel, used as its RNG stream."""
    return pixel_j * width + pixel_i


@ti.kernel
def _accumulate_samples(width: ti.i32, height: ti.i32, num_samples: ti.i32, max_depth: ti.i32):
    """Trace num_samples jittered paths through every pixel and accumulate.

    The outer loop runs pixels in parallel; each pixel reads only shared
    read-only scene state and writes only its own buffer and stream slots.
    """
    for i, j in ti.ndrange(width, height):
        stream = _pixel_stream(i, j, width)
        # Samples are added one by one onto the stored sum, whatever the batching
        total = _color_sum[i, j]

        for _ in range(num_samples):
            ray = get_ray_jittered(i, j, width, height, stream)
            color = trace_color(ray, max_depth, stream)

            # Replace NaN/Inf from degenerate geometry with zero
            for c in ti.static(range(3)):
                if tm.isnan(color[c]) or tm.isinf(color[c]):
                    color[c] = 0.0

            total += color

        _color_sum[i, j] = total
        _sample_count[i, j] += num_samples


@ti.kernel
def _resolve_pixel_bytes(width: ti.i32, height: ti.i32):
    """Average, gamma-correct (gamma 2) and quantize every pixel."""
    for i, j in ti.ndrange(width, height):
        n = _sample_count[i, j]
        color = vec3(0.0, 0.0, 0.0)
        if n > 0:
            color = _color_sum[i, j] / ti.cast(n, ti.f32)

        color = tm.sqrt(tm.max(color, vec3(0.0, 0.0, 0.0)))
        color = tm.clamp(color, 0.0, MAX_INTENSITY)

        for c in ti.static(range(3)):
            _pixel_bytes[i, j][c] = ti.cast(BYTE_SCALE * color[c], ti.u8)


@ti.kernel
def _trace_single_ray(origin: vec3, direction: vec3, max_depth: ti.i32, seed: ti.i32) -> vec3:
    seed_stream(0, seed)
    return trace_color(make_ray(origin, direction), max_depth, 0)


# =============================================================================
# Public Rendering API
# =============================================================================


def seed_render_target(seed: int) -> None:
    """Seed one RNG stream per pixel of the active render target.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()
    width, height = get_image_dimensions()
    seed_streams(width * height, seed)


def render_samples(num_samples: int, max_depth: int) -> None:
    """Accumulate num_samples paths per pixel into the render target.

    Can be called repeatedly; each pixel's RNG stream continues where the
    previous call stopped, so splitting a render into several calls gives
    the same result as one call with the total sample count.

    Args:
        num_samples: Number of samples to add per pixel.
        max_depth: Maximum number of surface interactions per path.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()
    width, height = get_image_dimensions()
    _accumulate_samples(width, height, num_samples, max_depth)


def resolve_pixels() -> npt.NDArray[np.uint8]:
    """Convert the accumulated samples to 8-bit RGB pixels.

    Rows are reassembled in order regardless of how pixels were scheduled:
    row j of the result holds the pixels at v = (j + jitter) / height, so the
    first row is the bottom of the image when the camera's vertical vector
    points up.

    Returns:
        Array of shape (height, width, 3) with dtype uint8.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()
    width, height = get_image_dimensions()
    _resolve_pixel_bytes(width, height)

    full = _pixel_bytes.to_numpy()
    # (width, height, 3) -> (height, width, 3)
    pixels = np.transpose(full[:width, :height, :], (1, 0, 2))
    return np.ascontiguousarray(pixels, dtype=np.uint8)


def get_linear_image_numpy() -> npt.NDArray[np.float32]:
    """Get the averaged linear (not gamma-corrected) image.

    Returns:
        Array of shape (height, width, 3) with dtype float32, same row order
        as resolve_pixels().

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()
    width, height = get_image_dimensions()

    sums = _color_sum.to_numpy()[:width, :height, :]
    counts = _sample_count.to_numpy()[:width, :height]
    image = sums / np.maximum(counts, 1)[..., np.newaxis]
    return np.transpose(image, (1, 0, 2)).astype(np.float32)


def get_total_samples() -> int:
    """Get the number of samples accumulated per pixel.

    Returns the sample count from pixel (0, 0), which is the same for all
    pixels of the active region.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()
    return int(_sample_count[0, 0])


def trace_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    max_depth: int = 50,
    seed: int = 0,
) -> tuple[float, float, float]:
    """Trace a single ray through the current scene.

    Python-callable entry point for inspecting the integrator outside a full
    render. Uses RNG stream 0.

    Args:
        origin: Ray origin.
        direction: Ray direction.
        max_depth: Maximum number of surface interactions.
        seed: Seed for the ray's random stream.

    Returns:
        Tuple of (R, G, B) linear radiance.
    """
    color = _trace_single_ray(vec3(*origin), vec3(*direction), max_depth, seed)
    return (float(color[0]), float(color[1]), float(color[2]))
