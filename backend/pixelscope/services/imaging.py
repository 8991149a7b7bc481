"""
PixelScope Imaging Utilities
Dimension and size helpers used alongside the analysis engine.
"""
from dataclasses import dataclass

BYTES_IN_KB = 1024
SIZE_UNITS = ("B", "KB", "MB")
BYTES_PER_PIXEL = 4  # RGBA


@dataclass(frozen=True)
class ImageDimensions:
    width: float
    height: float


def _gcd(a: float, b: float) -> float:
    while b != 0:
        a, b = b, a % b
    return a


def reduce_aspect_ratio(width: float, height: float) -> ImageDimensions:
    """
    Reduce width and height by their greatest common divisor.

    Args:
        width: Image width
        height: Image height

    Returns:
        ImageDimensions of the reduced ratio, e.g. 16x9 for 1920x1080

    Raises:
        ValueError: For negative dimensions or when both are zero
    """
    if width < 0 or height < 0:
        raise ValueError(f"Dimensions must be non-negative, got {width}x{height}")

    divisor = _gcd(width, height)
    if divisor == 0:
        raise ValueError("Aspect ratio is undefined for a 0x0 image")

    return ImageDimensions(width=width / divisor, height=height / divisor)


def format_byte_size(size_in_bytes: float) -> str:
    """
    Format a byte count for display.

    Args:
        size_in_bytes: Size in bytes

    Returns:
        Size with two decimals and a B/KB/MB unit, e.g. "2.00 KB"
    """
    unit_idx = 0
    size = float(size_in_bytes)

    while size >= BYTES_IN_KB and unit_idx < len(SIZE_UNITS) - 1:
        size /= BYTES_IN_KB
        unit_idx += 1

    return f"{size:.2f} {SIZE_UNITS[unit_idx]}"


def estimate_memory_usage_mb(width: int, height: int) -> float:
    """
    Approximate decoded RGBA memory footprint in MB.

    Uses 4 bytes per pixel: width * height * 4 / (1024 * 1024).
    """
    total_bytes = width * height * BYTES_PER_PIXEL
    return round(total_bytes / (BYTES_IN_KB * BYTES_IN_KB), 2)


def estimate_rendering_impact(width: int, height: int) -> str:
    """
    Rendering cost bucket by pixel count.

    - High: more than 4 MP
    - Medium: more than 1 MP
    - Low: otherwise
    """
    total_pixels = width * height
    if total_pixels > 4_000_000:
        return "High"
    if total_pixels > 1_000_000:
        return "Medium"
    return "Low"
