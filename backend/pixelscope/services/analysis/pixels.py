"""
Read-only view over flat RGBA pixel buffers.

Every analysis pass builds a PixelView over the caller's buffer for the
duration of the call. Bytes-like buffers are wrapped without copying.
"""

from typing import Iterator, Tuple, Union, Sequence

import numpy as np

from .errors import InvalidBufferLength, EmptyImage

CHANNELS = 4  # R, G, B, A

# ITU-R BT.601 luma weights
BT601_LUMA = np.array([0.299, 0.587, 0.114], dtype=np.float64)

PixelSample = Tuple[int, int, int]
PixelBuffer = Union[bytes, bytearray, memoryview, np.ndarray, Sequence[int]]


def _as_uint8_array(buffer: PixelBuffer) -> np.ndarray:
    """Interpret a caller buffer as a flat uint8 array."""
    if isinstance(buffer, PixelView):
        return buffer._rgba.reshape(-1)

    if isinstance(buffer, (bytes, bytearray, memoryview)):
        return np.frombuffer(buffer, dtype=np.uint8)

    if isinstance(buffer, np.ndarray):
        if buffer.dtype == np.uint8:
            return buffer.reshape(-1)
        if not np.issubdtype(buffer.dtype, np.integer):
            raise TypeError(f"Pixel arrays must hold integers, got dtype {buffer.dtype}")
        flat = buffer.reshape(-1)
    else:
        flat = np.asarray(list(buffer), dtype=np.int64)

    if flat.size and (flat.min() < 0 or flat.max() > 255):
        raise ValueError("Pixel values must be in the range 0-255")
    return flat.astype(np.uint8)


class PixelView:
    """
    Borrowed, read-only view of an RGBA buffer as 3-channel samples.

    The alpha channel is accepted but never read by any analysis.
    """

    __slots__ = ("_rgba",)

    def __init__(self, buffer: PixelBuffer):
        data = _as_uint8_array(buffer)
        if data.size % CHANNELS != 0:
            raise InvalidBufferLength(
                f"Buffer length {data.size} is not a multiple of {CHANNELS} (RGBA)"
            )
        rgba = data.reshape(-1, CHANNELS).view()
        rgba.flags.writeable = False
        self._rgba = rgba

    @property
    def pixel_count(self) -> int:
        return self._rgba.shape[0]

    def __len__(self) -> int:
        return self.pixel_count

    def __iter__(self) -> Iterator[PixelSample]:
        for r, g, b in self.rgb.tolist():
            yield (r, g, b)

    @property
    def rgb(self) -> np.ndarray:
        """(n, 3) uint8 view of the color channels."""
        return self._rgba[:, :3]

    def channel(self, index: int) -> np.ndarray:
        """1-D view of a single color channel (0=R, 1=G, 2=B)."""
        if not 0 <= index < 3:
            raise IndexError(f"Channel index must be 0, 1 or 2, got {index}")
        return self._rgba[:, index]

    def points(self) -> np.ndarray:
        """Fresh (n, 3) float64 copy of the samples, used as clustering points."""
        return self.rgb.astype(np.float64)

    def require_pixels(self, operation: str) -> None:
        """Raise EmptyImage when the view holds no pixels."""
        if self.pixel_count == 0:
            raise EmptyImage(f"{operation} requires at least one pixel")

    def luma(self) -> np.ndarray:
        """Per-pixel BT.601 luma on the 0-255 scale."""
        return self.rgb.astype(np.float64) @ BT601_LUMA

    def luma_sum(self) -> float:
        return float(self.luma().sum())


def as_pixel_view(buffer: PixelBuffer) -> PixelView:
    """Wrap a buffer in a PixelView, reusing an existing view."""
    if isinstance(buffer, PixelView):
        return buffer
    return PixelView(buffer)
