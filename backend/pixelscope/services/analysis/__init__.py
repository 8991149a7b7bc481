"""
PixelScope Analysis Engine

Histogram, balance and grayscale statistics, HSL saturation, luminance
measurements and k-means dominant colors over flat RGBA buffers.
"""

from .errors import (
    AnalysisError,
    InvalidBufferLength,
    EmptyImage,
    InvalidK,
    DegenerateBalance,
    DimensionMismatch,
)
from .pixels import PixelView
from .statistics import (
    ColorHistogram,
    ColorBalance,
    ChannelStatistics,
    compute_statistics,
    compute_color_balance,
    compute_grayscale_average,
)
from .saturation import compute_average_saturation
from .clustering import Color, ClusteringResult, cluster_colors, find_dominant_colors
from .luminance import LuminanceAnalysis, compute_average_luminance, analyze_luminance
from .report import AnalysisReport, analyze_image

__all__ = [
    'AnalysisError',
    'InvalidBufferLength',
    'EmptyImage',
    'InvalidK',
    'DegenerateBalance',
    'DimensionMismatch',
    'PixelView',
    'ColorHistogram',
    'ColorBalance',
    'ChannelStatistics',
    'compute_statistics',
    'compute_color_balance',
    'compute_grayscale_average',
    'compute_average_saturation',
    'Color',
    'ClusteringResult',
    'cluster_colors',
    'find_dominant_colors',
    'LuminanceAnalysis',
    'compute_average_luminance',
    'analyze_luminance',
    'AnalysisReport',
    'analyze_image',
]
