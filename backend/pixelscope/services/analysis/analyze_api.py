"""
Analysis API Orchestrator

Decodes request buffers, runs the analysis engine and copies its results
into the response schemas. The ``to_*_response`` builders only copy
already-validated data and can be used without the HTTP layer.
"""

import base64
import binascii
import time
from typing import Callable, Optional, TypeVar

import numpy as np
from fastapi import HTTPException

from pixelscope.config import config
from pixelscope.schemas import (
    AnalysisReportResponse, BalanceSchema, BrightnessDistributionSchema,
    BrightnessRangeSchema, ClippingSchema, ColorSchema, DominantColorsResponse,
    DynamicRangeSchema, FootprintSchema, FormattedSizeResponse, GammaCurveSchema,
    HistogramSchema, ImageDimensionsResponse, LuminanceAnalysisResponse,
    LuminanceResponse, PixelBufferRequest, RegionAnalysisSchema, RegionShareSchema,
    SaturationResponse, StatisticsResponse, TonalZoneSchema
)
from pixelscope.services.imaging import (
    ImageDimensions, estimate_memory_usage_mb, estimate_rendering_impact,
    format_byte_size, reduce_aspect_ratio
)
from pixelscope.services.observability import performance_monitor
from pixelscope.utils.ids import generate_request_id
from pixelscope.utils.logging import get_request_logger
from pixelscope.utils.metrics import get_metrics

from .clustering import ClusteringResult, cluster_colors
from .errors import AnalysisError
from .luminance import LuminanceAnalysis, analyze_luminance, compute_average_luminance
from .pixels import PixelView
from .report import AnalysisReport, analyze_image
from .saturation import compute_average_saturation
from .statistics import ChannelStatistics, compute_statistics

T = TypeVar('T')


# ============================================================================
# RESULT BUILDERS
# ============================================================================

def to_statistics_response(stats: ChannelStatistics) -> StatisticsResponse:
    return StatisticsResponse(
        pixel_count=stats.pixel_count,
        histogram=HistogramSchema(
            red=list(stats.histogram.red),
            green=list(stats.histogram.green),
            blue=list(stats.histogram.blue)
        ),
        balance=BalanceSchema(
            red_pct=stats.balance.red_pct,
            green_pct=stats.balance.green_pct,
            blue_pct=stats.balance.blue_pct
        ),
        grayscale_average=stats.grayscale_average
    )


def to_dominant_colors_response(result: ClusteringResult, k: int, max_iterations: int,
                                seed: Optional[int] = None) -> DominantColorsResponse:
    return DominantColorsResponse(
        k=k,
        max_iterations=max_iterations,
        seed=seed,
        iterations=result.iterations,
        converged=result.converged,
        colors=[ColorSchema(r=c.r, g=c.g, b=c.b, hex=c.hex) for c in result.colors],
        cluster_sizes=list(result.cluster_sizes)
    )


def to_luminance_analysis_response(analysis: LuminanceAnalysis) -> LuminanceAnalysisResponse:
    brightness = analysis.brightness_distribution
    regions = analysis.regions
    dynamic_range = analysis.dynamic_range
    gamma = analysis.gamma_curve
    clipping = analysis.clipping

    return LuminanceAnalysisResponse(
        brightness_distribution=BrightnessDistributionSchema(
            mean_brightness=brightness.mean_brightness,
            distribution=[
                BrightnessRangeSchema(range=r.label, percentage=r.percentage)
                for r in brightness.distribution
            ],
            assessment=brightness.assessment
        ),
        histogram=list(analysis.histogram),
        regions=RegionAnalysisSchema(
            dark_regions=RegionShareSchema(
                percentage=regions.dark_regions.percentage,
                significance=regions.dark_regions.significance
            ),
            light_regions=RegionShareSchema(
                percentage=regions.light_regions.percentage,
                significance=regions.light_regions.significance
            ),
            assessment=regions.assessment
        ),
        dynamic_range=DynamicRangeSchema(
            range=dynamic_range.range,
            effective_range=dynamic_range.effective_range,
            assessment=dynamic_range.assessment,
            zones=[TonalZoneSchema(zone=z.zone, presence=z.presence) for z in dynamic_range.zones]
        ),
        gamma_curve=GammaCurveSchema(
            estimated_gamma=gamma.estimated_gamma,
            ideal_gamma=gamma.ideal_gamma,
            correction=gamma.correction,
            assessment=gamma.assessment
        ),
        clipping=ClippingSchema(
            shadow_clipping=clipping.shadow_clipping,
            highlight_clipping=clipping.highlight_clipping,
            assessment=clipping.assessment,
            recommendations=list(clipping.recommendations)
        )
    )


def to_dimensions_response(dimensions: ImageDimensions) -> ImageDimensionsResponse:
    return ImageDimensionsResponse(width=dimensions.width, height=dimensions.height)


def to_report_response(report: AnalysisReport, request_id: str,
                       k: Optional[int] = None, max_iterations: int = 0,
                       seed: Optional[int] = None) -> AnalysisReportResponse:
    """Copy an AnalysisReport into its response schema."""
    dominant_colors = None
    if report.dominant_colors is not None:
        dominant_colors = to_dominant_colors_response(
            report.dominant_colors, k=k, max_iterations=max_iterations, seed=seed
        )

    footprint = None
    if report.dimensions is not None:
        width = int(report.dimensions.width)
        height = int(report.dimensions.height)
        footprint = FootprintSchema(
            memory_usage_mb=estimate_memory_usage_mb(width, height),
            rendering_impact=estimate_rendering_impact(width, height)
        )

    return AnalysisReportResponse(
        request_id=request_id,
        pixel_count=report.pixel_count,
        statistics=to_statistics_response(report.statistics),
        saturation=report.saturation,
        average_luminance=report.average_luminance,
        dominant_colors=dominant_colors,
        luminance=(
            to_luminance_analysis_response(report.luminance)
            if report.luminance is not None else None
        ),
        dimensions=to_dimensions_response(report.dimensions) if report.dimensions else None,
        aspect_ratio=to_dimensions_response(report.aspect_ratio) if report.aspect_ratio else None,
        footprint=footprint
    )


# ============================================================================
# REQUEST HANDLING
# ============================================================================

def decode_pixel_buffer(pixels_b64: str) -> bytes:
    """
    Decode a base64 RGBA buffer.

    Raises:
        ValueError: For invalid base64 or buffers above the configured limit
    """
    # Remove data URL prefix if present
    if ',' in pixels_b64:
        pixels_b64 = pixels_b64.split(',', 1)[1]

    try:
        raw = base64.b64decode(pixels_b64, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"Invalid base64 pixel data: {str(e)}")

    if not config.validate_buffer_size(len(raw)):
        raise ValueError(f"Pixel buffer too large. Maximum size: {config.MAX_BUFFER_MB}MB")

    return raw


def _make_rng(seed: Optional[int]) -> np.random.Generator:
    """Fresh generator per request; the configured seed applies when none is given."""
    if seed is None:
        seed = config.CLUSTER_SEED
    return np.random.default_rng(seed)


async def _execute(operation: str, request: PixelBufferRequest,
                   compute: Callable[[PixelView, str], T]) -> T:
    """
    Decode the request buffer and run one analysis with logging and metrics.

    Engine errors map to 422, undecodable input to 400 and anything
    unexpected to 500.
    """
    request_id = generate_request_id("analysis")
    log = get_request_logger(request_id, operation)
    metrics = get_metrics()
    start_time = time.time()

    metrics.record_request(operation)
    log.info(f"Starting {operation}")

    try:
        try:
            raw = decode_pixel_buffer(request.pixels_b64)
        except ValueError as e:
            log.warning(f"{operation} rejected undecodable input: {str(e)}")
            metrics.record_failure(operation, "decode")
            raise HTTPException(status_code=400, detail=str(e))

        view = PixelView(raw)
        with performance_monitor(operation, pixel_count=view.pixel_count):
            response = compute(view, request_id)

        total_time = int((time.time() - start_time) * 1000)
        log.bind(pixel_count=view.pixel_count, ms_total=total_time).info(f"{operation} completed")
        metrics.record_success(operation, total_time, view.pixel_count)
        return response

    except HTTPException:
        raise
    except AnalysisError as e:
        log.bind(error_type=e.code).warning(f"{operation} rejected: {str(e)}")
        metrics.record_failure(operation, e.code)
        raise HTTPException(status_code=422, detail={"error": e.code, "message": str(e)})
    except Exception as e:
        total_time = int((time.time() - start_time) * 1000)
        log.bind(ms_total=total_time, error_type="unexpected").exception(
            f"Unexpected error in {operation}: {str(e)}"
        )
        metrics.record_failure(operation, "unexpected")
        raise HTTPException(status_code=500, detail=f"Internal {operation} error")


def _require_dimensions(request: PixelBufferRequest) -> None:
    if request.width is None or request.height is None:
        raise HTTPException(status_code=400, detail="width and height are required")


def _validate_clustering_params(k: int, max_iterations: int) -> None:
    if not config.validate_k(k):
        raise HTTPException(status_code=400, detail=f"k must be between 1 and {config.MAX_K}")
    if not config.validate_max_iterations(max_iterations):
        raise HTTPException(
            status_code=400,
            detail=f"max_iterations must be between 0 and {config.MAX_ITERATIONS_LIMIT}"
        )


async def handle_statistics(request: PixelBufferRequest) -> StatisticsResponse:
    return await _execute(
        "statistics", request,
        lambda view, _: to_statistics_response(compute_statistics(view))
    )


async def handle_saturation(request: PixelBufferRequest) -> SaturationResponse:
    def compute(view: PixelView, _: str) -> SaturationResponse:
        return SaturationResponse(
            pixel_count=view.pixel_count,
            saturation=compute_average_saturation(view)
        )

    return await _execute("saturation", request, compute)


async def handle_luminance(request: PixelBufferRequest) -> LuminanceResponse:
    _require_dimensions(request)

    def compute(view: PixelView, _: str) -> LuminanceResponse:
        return LuminanceResponse(
            width=request.width,
            height=request.height,
            average_luminance=compute_average_luminance(view, request.width, request.height)
        )

    return await _execute("luminance", request, compute)


async def handle_luminance_analysis(request: PixelBufferRequest) -> LuminanceAnalysisResponse:
    return await _execute(
        "luminance_analysis", request,
        lambda view, _: to_luminance_analysis_response(analyze_luminance(view))
    )


async def handle_dominant_colors(request: PixelBufferRequest, k: int, max_iterations: int,
                                 seed: Optional[int] = None) -> DominantColorsResponse:
    _validate_clustering_params(k, max_iterations)

    def compute(view: PixelView, _: str) -> DominantColorsResponse:
        result = cluster_colors(view, k, max_iterations, _make_rng(seed))
        return to_dominant_colors_response(result, k=k, max_iterations=max_iterations, seed=seed)

    return await _execute("dominant_colors", request, compute)


async def handle_report(request: PixelBufferRequest, k: Optional[int], max_iterations: int,
                        seed: Optional[int] = None,
                        include_luminance: bool = False) -> AnalysisReportResponse:
    if k is not None:
        _validate_clustering_params(k, max_iterations)
    if (request.width is None) != (request.height is None):
        raise HTTPException(status_code=400, detail="width and height must be given together")

    def compute(view: PixelView, request_id: str) -> AnalysisReportResponse:
        report = analyze_image(
            view,
            width=request.width,
            height=request.height,
            k=k,
            max_iterations=max_iterations,
            rng=_make_rng(seed) if k is not None else None,
            include_luminance=include_luminance
        )
        return to_report_response(report, request_id, k=k, max_iterations=max_iterations, seed=seed)

    return await _execute("report", request, compute)


def handle_aspect_ratio(width: float, height: float) -> ImageDimensionsResponse:
    try:
        return to_dimensions_response(reduce_aspect_ratio(width, height))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


def handle_format_size(size_in_bytes: float) -> FormattedSizeResponse:
    return FormattedSizeResponse(
        size_in_bytes=size_in_bytes,
        formatted=format_byte_size(size_in_bytes)
    )
