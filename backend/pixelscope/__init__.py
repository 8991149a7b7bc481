"""
PixelScope

Color and luminance statistics and dominant-color clustering over raw
RGBA pixel buffers, with a FastAPI surface for image analysis front ends.
"""

__version__ = "1.0.0"
