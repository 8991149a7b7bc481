"""
PixelScope logging setup.

The service writes one stdout stream. Request handlers log through a
loguru logger bound to the request id and operation, so every line of a
request carries them in ``{extra}`` without repeating them per call.
"""
import sys
from typing import Optional

from loguru import logger

from pixelscope.config import config

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level} | {message} | {extra}"

_sink_id: Optional[int] = None


def configure_logging(level: Optional[str] = None) -> None:
    """Replace loguru's default handler with the service sink (once)."""
    global _sink_id
    if _sink_id is not None:
        return
    logger.remove()
    _sink_id = logger.add(sys.stdout, format=LOG_FORMAT, level=level or config.LOG_LEVEL)


def get_request_logger(request_id: str, operation: str):
    """Logger bound to a single analysis request."""
    configure_logging()
    return logger.bind(request_id=request_id, operation=operation)
