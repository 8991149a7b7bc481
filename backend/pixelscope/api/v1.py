"""
PixelScope v1 API Routes
Analysis endpoints over base64 encoded RGBA buffers, plus unit helpers.
"""
from typing import Optional

from fastapi import APIRouter, Query

from pixelscope.config import config
from pixelscope.schemas import (
    AnalysisReportResponse, DominantColorsResponse, FormattedSizeResponse,
    ImageDimensionsResponse, LuminanceAnalysisResponse, LuminanceResponse,
    PixelBufferRequest, SaturationResponse, StatisticsResponse
)
from pixelscope.services.analysis.analyze_api import (
    handle_aspect_ratio, handle_dominant_colors, handle_format_size,
    handle_luminance, handle_luminance_analysis, handle_report,
    handle_saturation, handle_statistics
)

router = APIRouter(prefix="/v1", tags=["Analysis"])


@router.post("/analysis/statistics", response_model=StatisticsResponse)
async def analysis_statistics(request: PixelBufferRequest):
    """
    Per-channel histograms, color balance and grayscale average (0-255).

    Returns 422 with `degenerate_balance` for a pure black image.
    """
    return await handle_statistics(request)


@router.post("/analysis/saturation", response_model=SaturationResponse)
async def analysis_saturation(request: PixelBufferRequest):
    """Average HSL saturation (0-1)."""
    return await handle_saturation(request)


@router.post("/analysis/luminance", response_model=LuminanceResponse)
async def analysis_luminance(request: PixelBufferRequest):
    """Average BT.601 luminance normalized to 0-1. Requires width and height."""
    return await handle_luminance(request)


@router.post("/analysis/luminance/tonal", response_model=LuminanceAnalysisResponse)
async def analysis_luminance_tonal(request: PixelBufferRequest):
    """Brightness distribution, regions, dynamic range, gamma and clipping."""
    return await handle_luminance_analysis(request)


@router.post("/analysis/dominant-colors", response_model=DominantColorsResponse)
async def analysis_dominant_colors(
    request: PixelBufferRequest,
    k: int = Query(config.DEFAULT_K, ge=1, description="Number of dominant colors"),
    max_iterations: int = Query(config.DEFAULT_MAX_ITERATIONS, ge=0, description="k-means iteration bound"),
    seed: Optional[int] = Query(None, ge=0, description="Seed for reproducible centroid initialization")
):
    """
    Dominant colors by k-means clustering.

    - **k**: number of colors, at most the pixel count
    - **max_iterations**: hard bound on clustering passes; `converged` reports early stops
    - **seed**: identical seed and buffer give identical colors
    """
    return await handle_dominant_colors(request, k=k, max_iterations=max_iterations, seed=seed)


@router.post("/analysis/report", response_model=AnalysisReportResponse)
async def analysis_report(
    request: PixelBufferRequest,
    k: Optional[int] = Query(None, ge=1, description="Dominant colors to extract (omit to skip)"),
    max_iterations: int = Query(config.DEFAULT_MAX_ITERATIONS, ge=0, description="k-means iteration bound"),
    seed: Optional[int] = Query(None, ge=0, description="Seed for reproducible centroid initialization"),
    include_luminance: bool = Query(False, description="Include tonal luminance analysis")
):
    """Combined statistics, saturation and optional luminance and dominant colors."""
    return await handle_report(
        request,
        k=k,
        max_iterations=max_iterations,
        seed=seed,
        include_luminance=include_luminance
    )


@router.get("/utils/aspect-ratio", response_model=ImageDimensionsResponse)
def utils_aspect_ratio(
    width: float = Query(..., ge=0),
    height: float = Query(..., ge=0)
):
    """Reduced aspect ratio, e.g. 1920x1080 -> 16x9."""
    return handle_aspect_ratio(width, height)


@router.get("/utils/format-size", response_model=FormattedSizeResponse)
def utils_format_size(size_in_bytes: float = Query(..., ge=0)):
    """Human-readable byte size, e.g. 2048 -> '2.00 KB'."""
    return handle_format_size(size_in_bytes)
