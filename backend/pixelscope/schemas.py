"""
PixelScope API Schemas
Pydantic models for analysis request/response validation.
"""
from typing import List, Optional
from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Health check response."""
    ok: bool = Field(True, description="Service health status")
    version: str = Field(..., description="Service version")
    service: str = Field("pixelscope-analysis", description="Service name")


class AnalysisErrorDetail(BaseModel):
    """Body of a 422 response raised by the analysis engine."""
    error: str = Field(..., description="Stable error code, e.g. 'invalid_buffer_length'")
    message: str = Field(..., description="Human-readable explanation")


# ============================================================================
# REQUESTS
# ============================================================================

class PixelBufferRequest(BaseModel):
    """Raw RGBA pixel buffer, base64 encoded."""
    pixels_b64: str = Field(
        ...,
        description="Base64 of the flat RGBA bytes (4 bytes per pixel, not an encoded image file)"
    )
    width: Optional[int] = Field(None, ge=0, description="Image width in pixels")
    height: Optional[int] = Field(None, ge=0, description="Image height in pixels")


# ============================================================================
# CHANNEL STATISTICS
# ============================================================================

class HistogramSchema(BaseModel):
    """Per-channel intensity counts, 256 buckets each."""
    red: List[int] = Field(..., min_length=256, max_length=256)
    green: List[int] = Field(..., min_length=256, max_length=256)
    blue: List[int] = Field(..., min_length=256, max_length=256)


class BalanceSchema(BaseModel):
    """Share of total channel mass per channel."""
    red_pct: float = Field(..., ge=0.0, le=100.0)
    green_pct: float = Field(..., ge=0.0, le=100.0)
    blue_pct: float = Field(..., ge=0.0, le=100.0)


class StatisticsResponse(BaseModel):
    """Histogram, balance and grayscale average of a buffer."""
    pixel_count: int = Field(..., ge=1)
    histogram: HistogramSchema
    balance: BalanceSchema
    grayscale_average: float = Field(
        ...,
        ge=0.0,
        description="BT.601 luma average on the 0-255 scale"
    )


class SaturationResponse(BaseModel):
    pixel_count: int = Field(..., ge=1)
    saturation: float = Field(..., ge=0.0, le=1.0, description="Average HSL saturation")


class LuminanceResponse(BaseModel):
    width: int
    height: int
    average_luminance: float = Field(
        ...,
        ge=0.0,
        description="BT.601 luma average normalized to 0-1"
    )


# ============================================================================
# DOMINANT COLORS
# ============================================================================

class ColorSchema(BaseModel):
    """Single 8-bit RGB color."""
    r: int = Field(..., ge=0, le=255)
    g: int = Field(..., ge=0, le=255)
    b: int = Field(..., ge=0, le=255)
    hex: str = Field(..., pattern=r"^#[0-9A-Fa-f]{6}$", description="Hex color code #RRGGBB")


class DominantColorsResponse(BaseModel):
    """k-means result; converged=False means max_iterations was reached."""
    k: int = Field(..., ge=1)
    max_iterations: int = Field(..., ge=0)
    seed: Optional[int] = Field(None, description="Seed used for centroid initialization, if any")
    iterations: int = Field(..., ge=0)
    converged: bool
    colors: List[ColorSchema]
    cluster_sizes: List[int]


# ============================================================================
# TONAL LUMINANCE ANALYSIS
# ============================================================================

class BrightnessRangeSchema(BaseModel):
    range: str
    percentage: float


class BrightnessDistributionSchema(BaseModel):
    mean_brightness: float
    distribution: List[BrightnessRangeSchema]
    assessment: str


class RegionShareSchema(BaseModel):
    percentage: float
    significance: str


class RegionAnalysisSchema(BaseModel):
    dark_regions: RegionShareSchema
    light_regions: RegionShareSchema
    assessment: str


class TonalZoneSchema(BaseModel):
    zone: str
    presence: float


class DynamicRangeSchema(BaseModel):
    range: float
    effective_range: float
    assessment: str
    zones: List[TonalZoneSchema]


class GammaCurveSchema(BaseModel):
    estimated_gamma: Optional[float] = None
    ideal_gamma: float
    correction: Optional[float] = None
    assessment: str


class ClippingSchema(BaseModel):
    shadow_clipping: float
    highlight_clipping: float
    assessment: str
    recommendations: List[str]


class LuminanceAnalysisResponse(BaseModel):
    """Rec.709 tonal analysis of a buffer."""
    brightness_distribution: BrightnessDistributionSchema
    histogram: List[float] = Field(
        ...,
        min_length=256,
        max_length=256,
        description="Percentage of pixels at each rounded luminance level"
    )
    regions: RegionAnalysisSchema
    dynamic_range: DynamicRangeSchema
    gamma_curve: GammaCurveSchema
    clipping: ClippingSchema


# ============================================================================
# UTILITIES AND REPORT
# ============================================================================

class ImageDimensionsResponse(BaseModel):
    width: float
    height: float


class FormattedSizeResponse(BaseModel):
    size_in_bytes: float
    formatted: str = Field(..., description="Size with unit, e.g. '2.00 KB'")


class FootprintSchema(BaseModel):
    """Decoded memory footprint and rendering cost estimate."""
    memory_usage_mb: float
    rendering_impact: str = Field(..., pattern="^(Low|Medium|High)$")


class AnalysisReportResponse(BaseModel):
    """Aggregate analysis of a single buffer."""
    request_id: str
    pixel_count: int = Field(..., ge=1)
    statistics: StatisticsResponse
    saturation: float = Field(..., ge=0.0, le=1.0)
    average_luminance: Optional[float] = Field(None, ge=0.0)
    dominant_colors: Optional[DominantColorsResponse] = None
    luminance: Optional[LuminanceAnalysisResponse] = None
    dimensions: Optional[ImageDimensionsResponse] = None
    aspect_ratio: Optional[ImageDimensionsResponse] = None
    footprint: Optional[FootprintSchema] = None
