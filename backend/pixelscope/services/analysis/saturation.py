"""Average HSL saturation of an RGBA buffer."""

import numpy as np
from loguru import logger

from .pixels import PixelBuffer, as_pixel_view


def compute_average_saturation(pixels: PixelBuffer) -> float:
    """
    Average HSL saturation over all pixels.

    Returns:
        Value between 0 (grayscale) and 1 (fully saturated)

    Raises:
        InvalidBufferLength: If the buffer is not made of whole RGBA groups
        EmptyImage: If the buffer holds no pixels
    """
    view = as_pixel_view(pixels)
    view.require_pixels("Saturation")

    rgb = view.rgb.astype(np.float64) / 255.0
    c_max = rgb.max(axis=1)
    c_min = rgb.min(axis=1)
    chroma = c_max - c_min
    lightness = (c_max + c_min) / 2.0

    denominator = np.where(lightness <= 0.5, c_max + c_min, 2.0 - c_max - c_min)
    # Achromatic pixels (max == min) stay at 0
    saturation = np.divide(
        chroma, denominator,
        out=np.zeros_like(chroma),
        where=c_max != c_min,
    )

    average = float(np.clip(saturation.mean(), 0.0, 1.0))
    logger.debug(f"Average saturation over {view.pixel_count} pixels: {average:.4f}")
    return average
