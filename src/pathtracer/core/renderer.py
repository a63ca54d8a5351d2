"""Render driver: configuration, batched sampling and cancellation.

This module wraps the integrator kernels with a small Python API:
- RenderConfig carries the image size, sample budget, depth limit and seed
- Renderer accumulates samples in batches with progress callbacks
- Cooperative cancellation between batches
- render() runs a whole render in one call and returns the pixels

Each pixel's random stream is seeded once in reset() and then carried across
batches, so the batch size never changes the resulting image.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.gpu)
    >>> from pathtracer.camera.pinhole import setup_camera
    >>> from pathtracer.core.renderer import RenderConfig, render
    >>> from pathtracer.scene.presets import create_four_spheres_scene
    >>>
    >>> scene, camera = create_four_spheres_scene()
    >>> setup_camera(camera)
    >>> pixels = render(RenderConfig(width=200, height=100, samples_per_pixel=100))
"""

import time
from collections.abc import Callable, Generator
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt
from loguru import logger

from pathtracer.core.integrator import (
    MAX_IMAGE_HEIGHT,
    MAX_IMAGE_WIDTH,
    get_total_samples,
    render_samples,
    resolve_pixels,
    seed_render_target,
    setup_render_target,
)

# Type alias for progress callback
# Callback receives (current_samples, total_target_samples)
ProgressCallback = Callable[[int, int], None]

# Polled between batches; returning True stops the render
CancelCheck = Callable[[], bool]

DEFAULT_MAX_DEPTH = 50


class RenderCancelledError(RuntimeError):
    """Raised when a render is stopped through its cancellation check.

    Attributes:
        completed_samples: Samples per pixel accumulated before stopping.
    """

    def __init__(self, completed_samples: int) -> None:
        super().__init__(f"Render cancelled after {completed_samples} samples per pixel")
        self.completed_samples = completed_samples


@dataclass(frozen=True)
class RenderConfig:
    """Parameters of a render.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        samples_per_pixel: Number of paths averaged per pixel.
        max_depth: Maximum number of surface interactions per path.
        seed: Render-wide seed for the per-pixel random streams.
        batch_size: Samples per pixel accumulated per kernel launch.
    """

    width: int
    height: int
    samples_per_pixel: int
    max_depth: int = DEFAULT_MAX_DEPTH
    seed: int = 0
    batch_size: int = 16

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Image dimensions ({self.width}x{self.height}) must be positive")
        if self.width > MAX_IMAGE_WIDTH or self.height > MAX_IMAGE_HEIGHT:
            raise ValueError(
                f"Image dimensions ({self.width}x{self.height}) exceed maximum supported "
                f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
            )
        if self.samples_per_pixel <= 0:
            raise ValueError(f"samples_per_pixel must be positive, got {self.samples_per_pixel}")
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be non-negative, got {self.max_depth}")
        if self.batch_size < 1:
            raise ValueError(f"batch_size must be at least 1, got {self.batch_size}")
        # Seeds are passed to kernels as 32-bit integers
        if not -(2**31) <= self.seed < 2**31:
            raise ValueError(f"seed must fit in a signed 32-bit integer, got {self.seed}")


class Renderer:
    """Batched renderer over the global render target.

    The renderer owns the render target dimensions and delegates the work to
    the integrator kernels. The scene, materials and camera must be set up
    before calling render().

    Attributes:
        config: The render configuration.
    """

    def __init__(self, config: RenderConfig) -> None:
        """Initialize the renderer and seed every pixel's random stream.

        Args:
            config: The render configuration.
        """
        self.config = config
        self.reset()

    @property
    def width(self) -> int:
        """Get the image width."""
        return self.config.width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self.config.height

    @property
    def sample_count(self) -> int:
        """Get the current number of accumulated samples per pixel."""
        return get_total_samples()

    def reset(self) -> None:
        """Clear the accumulator and reseed the random streams.

        A reset renderer reproduces exactly the same image as a new one.
        """
        setup_render_target(self.config.width, self.config.height)
        seed_render_target(self.config.seed)

    def render(
        self,
        callback: ProgressCallback | None = None,
        should_cancel: CancelCheck | None = None,
    ) -> npt.NDArray[np.uint8]:
        """Accumulate the remaining samples and return the pixels.

        Samples are added batch_size at a time. After each batch the callback
        (if any) receives (current_samples, target_samples), and should_cancel
        (if any) is polled.

        Args:
            callback: Optional progress callback.
            should_cancel: Optional cancellation check.

        Returns:
            Array of shape (height, width, 3) with dtype uint8.

        Raises:
            RenderCancelledError: If should_cancel returned True before all
                samples were accumulated. The partial image remains
                available through get_pixels().
        """
        target = self.config.samples_per_pixel
        logger.info(
            "Rendering {}x{} at {} spp (max depth {}, seed {})",
            self.width,
            self.height,
            target,
            self.config.max_depth,
            self.config.seed,
        )
        start_time = time.perf_counter()

        for current, target in self.render_progressive():
            if callback is not None:
                callback(current, target)
            if should_cancel is not None and current < target and should_cancel():
                logger.info("Render cancelled at {}/{} spp", current, target)
                raise RenderCancelledError(current)

        logger.info("Render finished in {:.2f}s", time.perf_counter() - start_time)
        return self.get_pixels()

    def render_progressive(self) -> Generator[tuple[int, int], None, None]:
        """Accumulate the remaining samples, yielding after each batch.

        Yields:
            Tuple of (current_total_samples, target_total_samples).
        """
        target = self.config.samples_per_pixel
        while self.sample_count < target:
            batch = min(self.config.batch_size, target - self.sample_count)
            render_samples(batch, self.config.max_depth)
            logger.debug("Accumulated {}/{} spp", self.sample_count, target)
            yield (self.sample_count, target)

    def get_pixels(self) -> npt.NDArray[np.uint8]:
        """Get the gamma-corrected 8-bit image accumulated so far.

        Returns:
            Array of shape (height, width, 3) with dtype uint8. Row j is the
            pixel row at v = (j + jitter) / height.
        """
        return resolve_pixels()

    def save_png(self, filepath: str, flip_vertical: bool = True) -> None:
        """Save the current image as PNG.

        Args:
            filepath: Output path.
            flip_vertical: Write the last row first (top of the image when the
                camera's vertical vector points up).
        """
        from pathtracer.preview.export import save_png

        save_png(self.get_pixels(), filepath, flip_vertical=flip_vertical)

    def __repr__(self) -> str:
        """Return a string representation of the renderer state."""
        return (
            f"Renderer(width={self.width}, height={self.height}, "
            f"samples={self.sample_count}/{self.config.samples_per_pixel})"
        )


def render(
    config: RenderConfig,
    callback: ProgressCallback | None = None,
    should_cancel: CancelCheck | None = None,
) -> npt.NDArray[np.uint8]:
    """Render the current scene through the current camera.

    Args:
        config: The render configuration.
        callback: Optional progress callback.
        should_cancel: Optional cancellation check, polled between batches.

    Returns:
        Array of shape (height, width, 3) with dtype uint8.
    """
    return Renderer(config).render(callback=callback, should_cancel=should_cancel)
