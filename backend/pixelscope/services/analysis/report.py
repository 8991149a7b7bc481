"""
Aggregate analysis of a single pixel buffer.

``analyze_image`` validates every requested part up front, then runs each
analysis as an independent pass over the same read-only view.
"""

from dataclasses import dataclass
from typing import Optional

import numpy as np
from loguru import logger

from ..imaging import ImageDimensions, reduce_aspect_ratio
from ..observability import performance_monitor
from .clustering import ClusteringResult, cluster_colors
from .errors import DimensionMismatch, InvalidK
from .luminance import LuminanceAnalysis, analyze_luminance, compute_average_luminance
from .pixels import PixelBuffer, as_pixel_view
from .saturation import compute_average_saturation
from .statistics import ChannelStatistics, compute_statistics

# Stage samples are recorded as "report.<stage>", apart from whole-request samples
STAGE_PREFIX = "report."


@dataclass(frozen=True)
class AnalysisReport:
    """Immutable result of analyze_image; holds no reference to the buffer."""
    statistics: ChannelStatistics
    saturation: float
    average_luminance: Optional[float] = None  # 0-1 scale, needs dimensions
    dominant_colors: Optional[ClusteringResult] = None
    luminance: Optional[LuminanceAnalysis] = None
    dimensions: Optional[ImageDimensions] = None
    aspect_ratio: Optional[ImageDimensions] = None

    @property
    def pixel_count(self) -> int:
        return self.statistics.pixel_count


def analyze_image(pixels: PixelBuffer,
                  width: Optional[int] = None,
                  height: Optional[int] = None,
                  k: Optional[int] = None,
                  max_iterations: int = 20,
                  rng: Optional[np.random.Generator] = None,
                  include_luminance: bool = False) -> AnalysisReport:
    """
    Run channel statistics and saturation, plus optional extras.

    Args:
        pixels: Flat RGBA buffer
        width: Image width; with height enables the normalized luminance
        height: Image height
        k: Number of dominant colors to extract (None skips clustering)
        max_iterations: k-means iteration bound
        rng: Generator for centroid initialization, required when k is set
        include_luminance: Also run the tonal luminance analysis

    Returns:
        AnalysisReport

    Raises:
        AnalysisError subclasses for invalid input (before any computation)
        ValueError: If k is given without rng, or only one dimension is given
    """
    view = as_pixel_view(pixels)
    view.require_pixels("Image analysis")

    if (width is None) != (height is None):
        raise ValueError("width and height must be given together")
    if width is not None and (width < 0 or height < 0 or width * height != view.pixel_count):
        raise DimensionMismatch(
            f"Dimensions {width}x{height} do not match {view.pixel_count} pixels"
        )
    if k is not None:
        if rng is None:
            raise ValueError("Dominant color extraction requires an explicit random generator")
        if k < 1 or k > view.pixel_count:
            raise InvalidK(f"k must be between 1 and the pixel count ({view.pixel_count}), got {k}")
        if max_iterations < 0:
            raise ValueError(f"max_iterations must be non-negative, got {max_iterations}")

    pixel_count = view.pixel_count
    logger.info(f"Analyzing {pixel_count} pixels (k={k}, luminance={include_luminance})")

    with performance_monitor(f"{STAGE_PREFIX}channel_statistics", pixel_count=pixel_count):
        statistics = compute_statistics(view)

    with performance_monitor(f"{STAGE_PREFIX}saturation", pixel_count=pixel_count):
        saturation = compute_average_saturation(view)

    average_luminance = None
    dimensions = None
    aspect_ratio = None
    if width is not None:
        average_luminance = compute_average_luminance(view, width, height)
        dimensions = ImageDimensions(width=float(width), height=float(height))
        aspect_ratio = reduce_aspect_ratio(width, height)

    dominant_colors = None
    if k is not None:
        with performance_monitor(f"{STAGE_PREFIX}dominant_colors", pixel_count=pixel_count, cluster_count=k):
            dominant_colors = cluster_colors(view, k, max_iterations, rng)

    luminance = None
    if include_luminance:
        with performance_monitor(f"{STAGE_PREFIX}luminance_analysis", pixel_count=pixel_count):
            luminance = analyze_luminance(view)

    return AnalysisReport(
        statistics=statistics,
        saturation=saturation,
        average_luminance=average_luminance,
        dominant_colors=dominant_colors,
        luminance=luminance,
        dimensions=dimensions,
        aspect_ratio=aspect_ratio,
    )
