"""
Performance monitoring for PixelScope analysis passes.

Records duration and process memory for each analysis stage so the
metrics endpoints can report per-operation statistics.
"""

import time
import threading
from collections import defaultdict, deque
from contextlib import contextmanager
from dataclasses import dataclass, asdict
from typing import Dict, Any, Optional, List

import numpy as np
import psutil
from loguru import logger


@dataclass
class PerformanceMetrics:
    """Performance metrics for a single analysis operation."""
    operation_name: str
    duration_ms: float
    memory_usage_mb: float
    pixel_count: int
    cluster_count: int
    timestamp: float
    error: Optional[str] = None


class PerformanceCollector:
    """Thread-safe collector for analysis performance samples."""

    def __init__(self, max_history: int = 1000):
        self.max_history = max_history
        self._lock = threading.Lock()
        self._metrics_history: deque = deque(maxlen=max_history)
        self._operation_counts = defaultdict(int)
        self._error_counts = defaultdict(int)
        self._performance_stats = defaultdict(list)

    def record_performance(self, metrics: PerformanceMetrics) -> None:
        """Record performance metrics for an operation."""
        with self._lock:
            self._metrics_history.append(metrics)
            self._operation_counts[metrics.operation_name] += 1

            if metrics.error:
                self._error_counts[metrics.operation_name] += 1

            self._performance_stats[metrics.operation_name].append({
                'duration_ms': metrics.duration_ms,
                'memory_mb': metrics.memory_usage_mb
            })

            # Keep only recent stats to prevent memory growth
            if len(self._performance_stats[metrics.operation_name]) > 100:
                self._performance_stats[metrics.operation_name].pop(0)

    def get_operation_stats(self, operation_name: str) -> Dict[str, Any]:
        """Get aggregated statistics for a specific operation."""
        with self._lock:
            stats = self._performance_stats.get(operation_name)
            if not stats:
                return {}

            durations = [s['duration_ms'] for s in stats]
            memory_usage = [s['memory_mb'] for s in stats]

            return {
                'operation_name': operation_name,
                'total_calls': self._operation_counts[operation_name],
                'error_count': self._error_counts[operation_name],
                'error_rate': self._error_counts[operation_name] / max(1, self._operation_counts[operation_name]),
                'duration_stats': {
                    'mean_ms': float(np.mean(durations)),
                    'median_ms': float(np.median(durations)),
                    'p95_ms': float(np.percentile(durations, 95)),
                    'min_ms': float(np.min(durations)),
                    'max_ms': float(np.max(durations))
                },
                'memory_stats': {
                    'mean_mb': float(np.mean(memory_usage)),
                    'peak_mb': float(np.max(memory_usage))
                }
            }

    def get_all_stats(self) -> Dict[str, Any]:
        """Get statistics for every recorded operation."""
        with self._lock:
            operations = list(self._performance_stats.keys())
        return {name: self.get_operation_stats(name) for name in operations}

    def get_recent_metrics(self, limit: int = 10) -> List[Dict[str, Any]]:
        """Get the most recent raw samples."""
        with self._lock:
            recent = list(self._metrics_history)[-limit:]
        return [asdict(m) for m in recent]

    def reset(self) -> None:
        """Drop all recorded samples (for testing)."""
        with self._lock:
            self._metrics_history.clear()
            self._operation_counts.clear()
            self._error_counts.clear()
            self._performance_stats.clear()


_performance_collector = PerformanceCollector()


def get_performance_collector() -> PerformanceCollector:
    """Get the global performance collector instance."""
    return _performance_collector


def _rss_mb() -> float:
    return psutil.Process().memory_info().rss / 1024 / 1024


@contextmanager
def performance_monitor(operation_name: str, pixel_count: int = 0, cluster_count: int = 0):
    """Context manager for monitoring performance of analysis operations."""
    start_time = time.time()
    start_memory = _rss_mb()

    error_msg = None

    try:
        yield
    except Exception as e:
        error_msg = str(e)
        raise
    finally:
        end_time = time.time()
        end_memory = _rss_mb()

        metrics = PerformanceMetrics(
            operation_name=operation_name,
            duration_ms=(end_time - start_time) * 1000,
            memory_usage_mb=max(end_memory, start_memory),
            pixel_count=pixel_count,
            cluster_count=cluster_count,
            timestamp=end_time,
            error=error_msg
        )

        _performance_collector.record_performance(metrics)

        if error_msg:
            logger.error(f"Operation {operation_name} failed after {metrics.duration_ms:.1f}ms: {error_msg}")
        else:
            logger.debug(f"Operation {operation_name} completed in {metrics.duration_ms:.1f}ms "
                         f"(memory: {metrics.memory_usage_mb:.1f}MB, pixels: {pixel_count})")
