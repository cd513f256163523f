from __future__ import annotations
import asyncio
import logging
from typing import Optional

from .sources import ImageSource, offscreen_target
from .types import CaptureError, EncodedImage
from ...utils.image_converter import encode_png, from_rgb_bytes, to_base64

logger = logging.getLogger(__name__)


def _render_png(source: ImageSource, width: int, height: int) -> bytes:
    with offscreen_target(source, width, height) as buffer:
        source.render_into(width, height)
        pixels = bytes(buffer.pixels)
    return encode_png(from_rgb_bytes(pixels, width, height))


class FrameEncoder:
    """Reads the current frame of an image source back as base64 PNG."""

    async def capture_and_encode(self, source: Optional[ImageSource], width: int, height: int) -> EncodedImage:
        if source is None:
            raise CaptureError("No camera available for capture")
        if not source.is_available():
            raise CaptureError(f"{source.name} is not available or not enabled")
        if width <= 0 or height <= 0:
            raise CaptureError(f"Invalid capture size {width}x{height}")

        # pixels are only valid once the frame has finished rendering
        await source.wait_for_frame()

        # grab, scale and PNG encode off the event loop
        try:
            data = await asyncio.to_thread(_render_png, source, width, height)
        except Exception as e:
            raise CaptureError(f"Failed to capture image: {e}") from e

        if not data:
            raise CaptureError("Failed to capture image: encoded image is empty")

        encoded = to_base64(data)
        if not encoded:
            raise CaptureError("Failed to capture image: base64 conversion produced no data")

        logger.debug("Image captured and converted. Size: %dx%d (%d bytes png)", width, height, len(data))
        return EncodedImage(width=width, height=height, data=data, base64=encoded)
