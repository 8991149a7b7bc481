"""
Test configuration and fixtures for PixelScope analysis tests.
"""
import base64

import pytest
from fastapi.testclient import TestClient

from pixelscope.main import app
from pixelscope.services.observability import get_performance_collector
from pixelscope.utils.metrics import reset_metrics as reset_request_metrics


@pytest.fixture
def test_client():
    """Create test client for the FastAPI app."""
    return TestClient(app)


@pytest.fixture(autouse=True)
def reset_metrics():
    """Reset request metrics and performance samples before each test."""
    reset_request_metrics()
    get_performance_collector().reset()


@pytest.fixture
def make_rgba():
    """Build a flat RGBA byte buffer from (r, g, b) tuples."""
    def _make(colors, alpha=255):
        return bytes(v for r, g, b in colors for v in (r, g, b, alpha))
    return _make


@pytest.fixture
def encode_pixels():
    """Base64 encode a raw buffer for request bodies."""
    def _encode(raw):
        return base64.b64encode(raw).decode("ascii")
    return _encode


@pytest.fixture
def red_2x2(make_rgba):
    """2x2 opaque pure red image."""
    return make_rgba([(255, 0, 0)] * 4)
