"""
PixelScope Configuration
Manages environment variables and defaults for the analysis service.
"""
import os
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


def _optional_int(name: str) -> Optional[int]:
    value = os.environ.get(name)
    if value is None or value == "":
        return None
    return int(value)


class Config:
    """Configuration class for PixelScope services."""

    # Request limits
    MAX_BUFFER_MB: int = int(os.environ.get("PIXELSCOPE_MAX_BUFFER_MB", "64"))

    # Clustering defaults
    DEFAULT_K: int = int(os.environ.get("PIXELSCOPE_DEFAULT_K", "5"))
    MAX_K: int = int(os.environ.get("PIXELSCOPE_MAX_K", "32"))
    DEFAULT_MAX_ITERATIONS: int = int(os.environ.get("PIXELSCOPE_DEFAULT_MAX_ITERATIONS", "20"))
    MAX_ITERATIONS_LIMIT: int = int(os.environ.get("PIXELSCOPE_MAX_ITERATIONS_LIMIT", "500"))
    CLUSTER_SEED: Optional[int] = _optional_int("PIXELSCOPE_CLUSTER_SEED")

    # Logging
    LOG_LEVEL: str = os.environ.get("PIXELSCOPE_LOG_LEVEL", "INFO")

    # Observability
    METRICS_ENABLED: bool = bool(int(os.environ.get("PIXELSCOPE_METRICS_ENABLED", "1")))

    SERVICE_NAME = "pixelscope-analysis"
    SERVICE_VERSION = "v1.0.0"

    @classmethod
    def validate_k(cls, k: int) -> bool:
        """Validate cluster count parameter."""
        return 1 <= k <= cls.MAX_K

    @classmethod
    def validate_max_iterations(cls, max_iterations: int) -> bool:
        """Validate clustering iteration bound."""
        return 0 <= max_iterations <= cls.MAX_ITERATIONS_LIMIT

    @classmethod
    def validate_buffer_size(cls, size_in_bytes: int) -> bool:
        """Validate decoded pixel buffer size."""
        return size_in_bytes <= cls.MAX_BUFFER_MB * 1024 * 1024


# Global config instance
config = Config()
