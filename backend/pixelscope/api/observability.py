"""
Observability endpoints for the PixelScope analysis service.

Exposes request counters, timing statistics and per-operation
performance samples.
"""

from typing import Any, Dict, List

from fastapi import APIRouter, HTTPException, Query

from pixelscope.config import config
from pixelscope.services.observability import get_performance_collector
from pixelscope.utils.metrics import get_metrics


router = APIRouter(prefix="/metrics", tags=["observability"])


def _require_metrics_enabled() -> None:
    if not config.METRICS_ENABLED:
        raise HTTPException(status_code=404, detail="Metrics are disabled")


@router.get("/summary")
def get_metrics_summary() -> Dict[str, Any]:
    """Request counters, timing statistics and uptime."""
    _require_metrics_enabled()
    return get_metrics().get_summary()


@router.get("/operations")
def get_operation_stats() -> Dict[str, Any]:
    """Aggregated duration and memory statistics per analysis operation."""
    _require_metrics_enabled()
    return get_performance_collector().get_all_stats()


@router.get("/operations/recent")
def get_recent_operations(limit: int = Query(10, ge=1, le=100)) -> List[Dict[str, Any]]:
    """Most recent raw performance samples."""
    _require_metrics_enabled()
    return get_performance_collector().get_recent_metrics(limit=limit)
