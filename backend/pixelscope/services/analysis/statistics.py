"""
Channel statistics for RGBA pixel buffers.

A single pass produces per-channel histograms, the relative balance of the
three channels and the BT.601 grayscale average on the 0-255 scale.
"""

from dataclasses import dataclass
from typing import Tuple

import numpy as np
from loguru import logger

from .errors import DegenerateBalance
from .pixels import PixelBuffer, PixelView, as_pixel_view

HISTOGRAM_BINS = 256


@dataclass(frozen=True)
class ColorHistogram:
    """Per-channel intensity counts, 256 buckets each."""
    red: Tuple[int, ...]
    green: Tuple[int, ...]
    blue: Tuple[int, ...]

    @property
    def total(self) -> int:
        return sum(self.red)


@dataclass(frozen=True)
class ColorBalance:
    """Share of total channel mass per channel, in percent."""
    red_pct: float
    green_pct: float
    blue_pct: float


@dataclass(frozen=True)
class ChannelStatistics:
    histogram: ColorHistogram
    balance: ColorBalance
    grayscale_average: float  # 0-255 scale
    pixel_count: int


def _histogram(view: PixelView) -> ColorHistogram:
    red, green, blue = (
        tuple(np.bincount(view.channel(i), minlength=HISTOGRAM_BINS).tolist())
        for i in range(3)
    )
    return ColorHistogram(red=red, green=green, blue=blue)


def _balance(view: PixelView) -> ColorBalance:
    totals = view.rgb.sum(axis=0, dtype=np.uint64)
    red_total, green_total, blue_total = (int(t) for t in totals)
    total_all = red_total + green_total + blue_total

    if total_all == 0:
        raise DegenerateBalance(
            "Color balance is undefined: every channel total is zero (pure black image)"
        )

    return ColorBalance(
        red_pct=red_total / total_all * 100.0,
        green_pct=green_total / total_all * 100.0,
        blue_pct=blue_total / total_all * 100.0,
    )


def compute_statistics(pixels: PixelBuffer) -> ChannelStatistics:
    """
    Compute histograms, color balance and grayscale average.

    Args:
        pixels: Flat RGBA buffer (length a multiple of 4)

    Returns:
        ChannelStatistics with the 0-255 grayscale average

    Raises:
        InvalidBufferLength: If the buffer is not made of whole RGBA groups
        EmptyImage: If the buffer holds no pixels
        DegenerateBalance: If all channel totals are zero
    """
    view = as_pixel_view(pixels)
    view.require_pixels("Channel statistics")

    histogram = _histogram(view)
    balance = _balance(view)
    grayscale_average = view.luma_sum() / view.pixel_count

    logger.debug(
        f"Channel statistics over {view.pixel_count} pixels: "
        f"balance=({balance.red_pct:.2f}, {balance.green_pct:.2f}, {balance.blue_pct:.2f}), "
        f"gray={grayscale_average:.3f}"
    )

    return ChannelStatistics(
        histogram=histogram,
        balance=balance,
        grayscale_average=grayscale_average,
        pixel_count=view.pixel_count,
    )


def compute_color_balance(pixels: PixelBuffer) -> ColorBalance:
    """Channel balance percentages only."""
    view = as_pixel_view(pixels)
    view.require_pixels("Color balance")
    return _balance(view)


def compute_grayscale_average(pixels: PixelBuffer) -> float:
    """BT.601 grayscale average on the 0-255 scale."""
    view = as_pixel_view(pixels)
    view.require_pixels("Grayscale average")
    return view.luma_sum() / view.pixel_count
