"""Image export utilities for rendered images.

Rendered pixels come out of the renderer with row 0 at the bottom of the
image (v = 0). Image files store the top row first, so save_png flips the
rows by default.

Supported formats:
    - PNG (8-bit RGB via Pillow)

Example:
    >>> from pathtracer.preview.export import save_png
    >>> pixels = renderer.render()
    >>> save_png(pixels, "output.png")
"""

from __future__ import annotations

from pathlib import Path

import numpy as np
import numpy.typing as npt
from loguru import logger
from PIL import Image as PILImage


def save_png(
    pixels: npt.NDArray[np.uint8],
    filepath: str | Path,
    *,
    flip_vertical: bool = True,
) -> Path:
    """Save 8-bit RGB pixels as a PNG file.

    Args:
        pixels: Array of shape (height, width, 3) with dtype uint8.
        filepath: Output file path (should end in .png).
        flip_vertical: Write the last row first.

    Returns:
        The path written to.

    Raises:
        ValueError: If the array is not an (H, W, 3) uint8 image.
    """
    if pixels.ndim != 3 or pixels.shape[2] != 3:
        raise ValueError(f"Expected an (H, W, 3) image, got shape {pixels.shape}")
    if pixels.dtype != np.uint8:
        raise ValueError(f"Expected uint8 pixels, got {pixels.dtype}")

    if flip_vertical:
        pixels = pixels[::-1]

    path = Path(filepath)
    pil_image = PILImage.fromarray(np.ascontiguousarray(pixels))
    pil_image.save(path)
    logger.debug("Saved {}x{} image to {}", pixels.shape[1], pixels.shape[0], path)
    return path


def load_png(filepath: str | Path, *, flip_vertical: bool = True) -> npt.NDArray[np.uint8]:
    """Load a PNG written by save_png back into renderer row order."""
    with PILImage.open(filepath) as image:
        pixels = np.asarray(image.convert("RGB"), dtype=np.uint8)
    if flip_vertical:
        pixels = pixels[::-1]
    return np.ascontiguousarray(pixels)


def compute_rmse(
    image_a: npt.NDArray[np.generic],
    image_b: npt.NDArray[np.generic],
) -> float:
    """Compute root mean squared error between two images.

    Args:
        image_a: First image array.
        image_b: Second image array (must have same shape as image_a).

    Returns:
        RMSE value (lower is more similar).

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(
            f"Image shapes must match: {image_a.shape} vs {image_b.shape}"
        )

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
