"""Per-pixel random number streams for Monte Carlo sampling.

Every pixel of the render target owns one RNG stream: a slot in a global
``u32`` field holding a xorshift32 state. A stream is seeded from the render
seed and the pixel's linear index through an integer hash, so that

- the random sequence of each pixel is reproducible for a given seed,
- neighbouring pixels get decorrelated sequences, and
- parallel pixel threads never touch each other's state (no locks, no atomics).

Sampling functions take the stream index and advance that slot in place.

Example:
    >>> @ti.kernel
    ... def draw() -> ti.f32:
    ...     seed_stream(0, 1234)
    ...     return random_f32(0)
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors
vec3 = tm.vec3

# One stream per pixel of the largest supported render target (2048 x 2048).
MAX_STREAMS = 2048 * 2048

# Maximum rejection-sampling attempts for points in the unit ball
MAX_REJECTION_ATTEMPTS = 64

# xorshift32 never leaves the zero state, so seeds hashing to 0 use this
_FALLBACK_STATE = 0x2545F491

_rng_states = ti.field(dtype=ti.u32, shape=MAX_STREAMS)


@ti.func
def hash_u32(value: ti.u32) -> ti.u32:
    """Scramble a 32-bit integer (Thomas Wang's integer hash)."""
    x = (value ^ ti.cast(61, ti.u32)) ^ (value >> ti.cast(16, ti.u32))
    x = x * ti.cast(9, ti.u32)
    x = x ^ (x >> ti.cast(4, ti.u32))
    x = x * ti.cast(0x27D4EB2D, ti.u32)
    x = x ^ (x >> ti.cast(15, ti.u32))
    return x


@ti.func
def seed_stream(stream: ti.i32, seed: ti.i32):
    """Seed a stream from the render seed and the stream (pixel) index.

    Args:
        stream: The stream index, normally the pixel's linear index.
        seed: The render-wide seed.
    """
    state = hash_u32(hash_u32(ti.cast(seed, ti.u32)) ^ ti.cast(stream, ti.u32))
    if state == ti.cast(0, ti.u32):
        state = ti.cast(_FALLBACK_STATE, ti.u32)
    _rng_states[stream] = state


@ti.func
def next_u32(stream: ti.i32) -> ti.u32:
    """Advance a stream by one xorshift32 step and return the new state."""
    x = _rng_states[stream]
    x = x ^ (x << ti.cast(13, ti.u32))
    x = x ^ (x >> ti.cast(17, ti.u32))
    x = x ^ (x << ti.cast(5, ti.u32))
    _rng_states[stream] = x
    return x


@ti.func
def random_f32(stream: ti.i32) -> ti.f32:
    """Draw a uniform float in [0, 1) from a stream.

    Uses the top 24 bits of the state so the result is exactly representable
    in f32 and never rounds up to 1.0.
    """
    bits = next_u32(stream) >> ti.cast(8, ti.u32)
    return ti.cast(bits, ti.f32) * (1.0 / 16777216.0)


@ti.func
def random_range(stream: ti.i32, low: ti.f32, high: ti.f32) -> ti.f32:
    """Draw a uniform float in [low, high) from a stream."""
    return low + (high - low) * random_f32(stream)


@ti.func
def random_in_unit_sphere(stream: ti.i32) -> vec3:
    """Generate a random point strictly inside the unit ball.

    Rejection samples the [-1, 1)^3 cube. After MAX_REJECTION_ATTEMPTS
    failures (probability ~1e-21) the origin is returned.

    Returns:
        A random point with length < 1.
    """
    p = vec3(0.0, 0.0, 0.0)
    found = 0
    for _ in range(MAX_REJECTION_ATTEMPTS):
        if found == 0:
            candidate = vec3(
                random_range(stream, -1.0, 1.0),
                random_range(stream, -1.0, 1.0),
                random_range(stream, -1.0, 1.0),
            )
            if tm.dot(candidate, candidate) < 1.0:
                p = candidate
                found = 1
    return p


@ti.func
def random_unit_vector(stream: ti.i32) -> vec3:
    """Generate a random unit vector uniformly distributed on the sphere.

    Samples z uniformly in [-1, 1) and the azimuth uniformly in [0, 2*pi),
    which is uniform over the sphere surface (Archimedes' hat-box theorem).
    """
    z = random_range(stream, -1.0, 1.0)
    phi = 2.0 * tm.pi * random_f32(stream)
    r = ti.sqrt(tm.max(0.0, 1.0 - z * z))
    return vec3(r * ti.cos(phi), r * ti.sin(phi), z)


@ti.kernel
def seed_streams(count: ti.i32, seed: ti.i32):
    """Seed streams 0..count-1 in parallel from the render seed."""
    for stream in range(count):
        seed_stream(stream, seed)
