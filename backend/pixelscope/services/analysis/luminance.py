"""
Luminance measurements.

Two families live here:

* ``compute_average_luminance`` - the BT.601 luma average normalized to
  0-1 against the declared image size. It is deliberately separate from the
  0-255 ``grayscale_average`` reported by channel statistics.
* ``analyze_luminance`` - tonal analysis on Rec.709 relative luminance
  (0-255 scale): brightness distribution, luminance histogram, dark/light
  regions, dynamic range, gamma estimate and clipping.
"""

import math
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np
from loguru import logger

from .errors import DimensionMismatch
from .pixels import PixelBuffer, PixelView, as_pixel_view

# Rec.709 relative luminance weights
REC709_LUMINANCE = np.array([0.2126, 0.7152, 0.0722], dtype=np.float64)

BRIGHTNESS_RANGES = (
    (0, 51, "Very Dark"),
    (51, 102, "Dark"),
    (102, 153, "Medium"),
    (153, 204, "Bright"),
    (204, 255, "Very Bright"),
)

TONAL_ZONES = ("Shadows", "Dark Mid-tones", "Mid-tones", "Light Mid-tones", "Highlights")
ZONE_SIZE = 51

DARK_THRESHOLD = 64
LIGHT_THRESHOLD = 192
SHADOW_CLIP_THRESHOLD = 5
HIGHLIGHT_CLIP_THRESHOLD = 250
MID_GRAY_LOW = 117
MID_GRAY_HIGH = 137
IDEAL_GAMMA = 2.2


def compute_average_luminance(pixels: PixelBuffer, width: int, height: int) -> float:
    """
    Average BT.601 luma normalized to the 0-1 range.

    Args:
        pixels: Flat RGBA buffer
        width: Image width in pixels
        height: Image height in pixels

    Returns:
        luma_sum / (width * height) / 255

    Raises:
        InvalidBufferLength: If the buffer is not made of whole RGBA groups
        EmptyImage: If the buffer holds no pixels
        DimensionMismatch: If width * height differs from the pixel count
    """
    view = as_pixel_view(pixels)
    view.require_pixels("Average luminance")

    if width < 0 or height < 0 or width * height != view.pixel_count:
        raise DimensionMismatch(
            f"Dimensions {width}x{height} do not match {view.pixel_count} pixels"
        )

    return view.luma_sum() / (width * height) / 255.0


@dataclass(frozen=True)
class BrightnessRange:
    label: str
    percentage: float


@dataclass(frozen=True)
class BrightnessDistribution:
    mean_brightness: float
    distribution: Tuple[BrightnessRange, ...]
    assessment: str


@dataclass(frozen=True)
class RegionShare:
    percentage: float
    significance: str


@dataclass(frozen=True)
class RegionAnalysis:
    dark_regions: RegionShare
    light_regions: RegionShare
    assessment: str


@dataclass(frozen=True)
class TonalZone:
    zone: str
    presence: float


@dataclass(frozen=True)
class DynamicRangeAnalysis:
    range: float
    effective_range: float
    assessment: str
    zones: Tuple[TonalZone, ...]


@dataclass(frozen=True)
class GammaCurveAnalysis:
    """Gamma estimated from mid-gray pixels; None when there are none."""
    estimated_gamma: Optional[float]
    ideal_gamma: float
    correction: Optional[float]
    assessment: str


@dataclass(frozen=True)
class ClippingAnalysis:
    shadow_clipping: float
    highlight_clipping: float
    assessment: str
    recommendations: Tuple[str, ...]


@dataclass(frozen=True)
class LuminanceAnalysis:
    brightness_distribution: BrightnessDistribution
    histogram: Tuple[float, ...]  # percentage of pixels per rounded level
    regions: RegionAnalysis
    dynamic_range: DynamicRangeAnalysis
    gamma_curve: GammaCurveAnalysis
    clipping: ClippingAnalysis


def relative_luminance(view: PixelView) -> np.ndarray:
    """Per-pixel Rec.709 luminance on the 0-255 scale."""
    # Weights sum to 1; clip float drift on pure white
    return np.clip(view.rgb.astype(np.float64) @ REC709_LUMINANCE, 0.0, 255.0)


def _percent(count: int, total: int) -> float:
    return count / total * 100.0


def _level_histogram(values: np.ndarray) -> np.ndarray:
    levels = np.clip(np.floor(values + 0.5), 0, 255).astype(np.intp)
    return np.bincount(levels, minlength=256)


def _brightness_distribution(values: np.ndarray) -> BrightnessDistribution:
    total = values.size
    mean_brightness = float(values.mean())

    distribution = []
    for low, high, label in BRIGHTNESS_RANGES:
        if high == 255:
            in_range = (values >= low) & (values <= high)
        else:
            in_range = (values >= low) & (values < high)
        distribution.append(BrightnessRange(label=label, percentage=_percent(int(in_range.sum()), total)))

    if mean_brightness < 85:
        assessment = "The image tends to be dark, which might affect visibility in low-light conditions."
    elif mean_brightness > 170:
        assessment = "The image is generally bright, which might cause eye strain in dark environments."
    else:
        assessment = "The image has a balanced brightness distribution."

    return BrightnessDistribution(
        mean_brightness=mean_brightness,
        distribution=tuple(distribution),
        assessment=assessment,
    )


def _dark_significance(percentage: float) -> str:
    if percentage > 40:
        return "Dominant dark regions may obscure details"
    if percentage > 20:
        return "Balanced dark areas provide good contrast"
    return "Limited dark areas maintain good visibility"


def _light_significance(percentage: float) -> str:
    if percentage > 40:
        return "Large bright areas might cause glare"
    if percentage > 20:
        return "Well-balanced highlight areas"
    return "Conservative use of bright regions"


def _regions(values: np.ndarray) -> RegionAnalysis:
    total = values.size
    dark_pct = _percent(int((values < DARK_THRESHOLD).sum()), total)
    light_pct = _percent(int((values > LIGHT_THRESHOLD).sum()), total)

    if dark_pct > 40 and light_pct > 40:
        assessment = "High contrast image with potential loss of mid-tone details"
    elif dark_pct < 10 and light_pct < 10:
        assessment = "Low contrast image that might appear flat"
    else:
        assessment = "Well-balanced distribution of dark and light regions"

    return RegionAnalysis(
        dark_regions=RegionShare(percentage=dark_pct, significance=_dark_significance(dark_pct)),
        light_regions=RegionShare(percentage=light_pct, significance=_light_significance(light_pct)),
        assessment=assessment,
    )


def _dynamic_range(values: np.ndarray, level_counts: np.ndarray) -> DynamicRangeAnalysis:
    total = values.size

    zone_index = np.minimum(len(TONAL_ZONES) - 1, np.floor(values / ZONE_SIZE).astype(np.intp))
    zone_counts = np.bincount(zone_index, minlength=len(TONAL_ZONES))

    # 1st percentile scanning up, 99th percentile scanning down
    rising = np.cumsum(level_counts)
    percentile1 = int(np.argmax(rising >= total * 0.01))
    falling = np.cumsum(level_counts[::-1])
    percentile99 = 255 - int(np.argmax(falling >= total - total * 0.99))

    absolute_range = float(values.max() - values.min())
    effective_range = float(percentile99 - percentile1)

    if effective_range > 200:
        assessment = "Very high dynamic range - ensure display capability matches"
    elif effective_range > 150:
        assessment = "Good dynamic range for most displays"
    elif effective_range > 100:
        assessment = "Moderate dynamic range - suitable for web display"
    else:
        assessment = "Limited dynamic range - consider contrast enhancement"

    return DynamicRangeAnalysis(
        range=absolute_range,
        effective_range=effective_range,
        assessment=assessment,
        zones=tuple(
            TonalZone(zone=name, presence=_percent(int(count), total))
            for name, count in zip(TONAL_ZONES, zone_counts)
        ),
    )


def _gamma_curve(values: np.ndarray) -> GammaCurveAnalysis:
    mid_gray = values[(values > MID_GRAY_LOW) & (values < MID_GRAY_HIGH)]
    if mid_gray.size == 0:
        return GammaCurveAnalysis(
            estimated_gamma=None,
            ideal_gamma=IDEAL_GAMMA,
            correction=None,
            assessment="Not enough mid-tone pixels to estimate gamma",
        )

    estimated = math.log(float(mid_gray.mean()) / 255.0) / math.log(0.5)

    if estimated < 1.8:
        assessment = "Image appears dark - gamma correction might improve visibility"
    elif estimated > 2.6:
        assessment = "Image appears bright - consider reducing gamma"
    else:
        assessment = "Gamma is well-balanced for standard displays"

    return GammaCurveAnalysis(
        estimated_gamma=estimated,
        ideal_gamma=IDEAL_GAMMA,
        correction=IDEAL_GAMMA / estimated,
        assessment=assessment,
    )


def _clipping(values: np.ndarray) -> ClippingAnalysis:
    total = values.size
    shadow_pct = _percent(int((values < SHADOW_CLIP_THRESHOLD).sum()), total)
    highlight_pct = _percent(int((values > HIGHLIGHT_CLIP_THRESHOLD).sum()), total)

    recommendations = []
    if shadow_pct > 5:
        recommendations.append("Consider lifting shadows to recover detail")
    if highlight_pct > 5:
        recommendations.append("Reduce exposure to recover highlight detail")
    if shadow_pct > 2 and highlight_pct > 2:
        recommendations.append("Consider using HDR techniques to preserve detail")

    if shadow_pct > 5 and highlight_pct > 5:
        assessment = "Significant detail loss in both shadows and highlights"
    elif shadow_pct > 5:
        assessment = "Notable shadow detail loss"
    elif highlight_pct > 5:
        assessment = "Significant highlight clipping"
    else:
        assessment = "Good detail preservation across tonal range"

    return ClippingAnalysis(
        shadow_clipping=shadow_pct,
        highlight_clipping=highlight_pct,
        assessment=assessment,
        recommendations=tuple(recommendations),
    )


def analyze_luminance(pixels: PixelBuffer) -> LuminanceAnalysis:
    """
    Tonal analysis of a buffer on Rec.709 luminance.

    Raises:
        InvalidBufferLength: If the buffer is not made of whole RGBA groups
        EmptyImage: If the buffer holds no pixels
    """
    view = as_pixel_view(pixels)
    view.require_pixels("Luminance analysis")

    values = relative_luminance(view)
    level_counts = _level_histogram(values)
    total = values.size

    analysis = LuminanceAnalysis(
        brightness_distribution=_brightness_distribution(values),
        histogram=tuple(_percent(int(c), total) for c in level_counts),
        regions=_regions(values),
        dynamic_range=_dynamic_range(values, level_counts),
        gamma_curve=_gamma_curve(values),
        clipping=_clipping(values),
    )

    logger.debug(
        f"Luminance analysis over {total} pixels: "
        f"mean={analysis.brightness_distribution.mean_brightness:.1f}, "
        f"effective_range={analysis.dynamic_range.effective_range:.0f}"
    )
    return analysis
