from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pixelscope import __version__
from pixelscope.api.observability import router as observability_router
from pixelscope.api.v1 import router as v1_router
from pixelscope.config import config
from pixelscope.schemas import HealthResponse
from pixelscope.utils.logging import configure_logging

configure_logging()

app = FastAPI(
    title="PixelScope Analysis Service",
    description="Color statistics, luminance and dominant colors for raw RGBA pixel buffers",
    version=__version__
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://localhost:5173"],
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)

app.include_router(v1_router)
app.include_router(observability_router)


@app.get("/healthz", response_model=HealthResponse)
def health_check():
    """Analysis service health check."""
    return HealthResponse(
        ok=True,
        version=config.SERVICE_VERSION,
        service=config.SERVICE_NAME
    )
