"""
PixelScope request metrics.

Per-operation request, failure, latency and pixel throughput figures for
the analysis endpoints, kept in process.
"""
import time
from collections import Counter, defaultdict
from dataclasses import dataclass, field
from threading import Lock
from typing import Any, Dict, List, Optional

import numpy as np


@dataclass
class OperationMetrics:
    """Running figures for one analysis operation."""
    requests: int = 0
    failures: Counter = field(default_factory=Counter)  # error code -> count
    latencies_ms: List[float] = field(default_factory=list)
    pixels_analyzed: int = 0

    def summary(self) -> Dict[str, Any]:
        failed = sum(self.failures.values())
        latency: Dict[str, float] = {}
        if self.latencies_ms:
            samples = np.asarray(self.latencies_ms, dtype=np.float64)
            latency = {
                "count": int(samples.size),
                "mean": float(samples.mean()),
                "min": float(samples.min()),
                "max": float(samples.max()),
                "p50": float(np.percentile(samples, 50)),
                "p95": float(np.percentile(samples, 95)),
            }
        return {
            "requests": self.requests,
            "failed": failed,
            "failure_rate": failed / self.requests if self.requests else 0.0,
            "failures": dict(self.failures),
            "pixels_analyzed": self.pixels_analyzed,
            "latency_ms": latency,
        }


class MetricsCollector:
    """Thread-safe per-operation metrics for the analysis endpoints."""

    def __init__(self):
        self._lock = Lock()
        self._operations: Dict[str, OperationMetrics] = defaultdict(OperationMetrics)
        self._start_time = time.time()

    def record_request(self, operation: str) -> None:
        with self._lock:
            self._operations[operation].requests += 1

    def record_failure(self, operation: str, error_code: str) -> None:
        """Count a rejected or failed request under its error code."""
        with self._lock:
            self._operations[operation].failures[error_code] += 1

    def record_success(self, operation: str, duration_ms: float, pixel_count: int) -> None:
        with self._lock:
            metrics = self._operations[operation]
            metrics.latencies_ms.append(duration_ms)
            metrics.pixels_analyzed += pixel_count

    def get_counters(self) -> Dict[str, int]:
        """Flat counter view: request totals and failures by error code."""
        with self._lock:
            counters: Dict[str, int] = {
                "analysis_requests_total": sum(m.requests for m in self._operations.values()),
                "analysis_pixels_total": sum(m.pixels_analyzed for m in self._operations.values()),
            }
            failures: Counter = Counter()
            for operation, metrics in self._operations.items():
                counters[f"analysis_requests_total_{operation}"] = metrics.requests
                failures.update(metrics.failures)
            for code, count in failures.items():
                counters[f"analysis_failed_total_{code}"] = count
            return counters

    def get_operation_summary(self) -> Dict[str, Dict[str, Any]]:
        with self._lock:
            return {name: metrics.summary() for name, metrics in self._operations.items()}

    def get_uptime_seconds(self) -> float:
        return time.time() - self._start_time

    def get_summary(self) -> Dict[str, Any]:
        return {
            "uptime_seconds": self.get_uptime_seconds(),
            "counters": self.get_counters(),
            "operations": self.get_operation_summary(),
        }

    def reset(self) -> None:
        """Reset all metrics (for testing)."""
        with self._lock:
            self._operations.clear()
            self._start_time = time.time()


_metrics: Optional[MetricsCollector] = None


def get_metrics() -> MetricsCollector:
    """Get or create global metrics collector."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsCollector()
    return _metrics


def reset_metrics() -> None:
    """Reset global metrics (for testing)."""
    if _metrics is not None:
        _metrics.reset()
