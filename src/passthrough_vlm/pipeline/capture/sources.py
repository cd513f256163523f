"""
Image sources the capture pipeline can read frames from.

A source renders into whatever target is currently bound to it: None means
its normal on-screen output, an OffscreenBuffer means the frame is redirected
there for readback. The encoder owns swapping that binding in and out.
"""
from __future__ import annotations
import asyncio
import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Union

from PIL import Image, ImageGrab

from ...utils.image_converter import load_image, to_rgb

logger = logging.getLogger(__name__)


class OffscreenBuffer:
    """Temporary RGB24 render target."""

    def __init__(self, width: int, height: int):
        self.width = width
        self.height = height
        self.pixels = bytearray(width * height * 3)
        self.released = False

    def write(self, pixels: bytes) -> None:
        if self.released:
            raise RuntimeError("Offscreen buffer already released")
        if len(pixels) != len(self.pixels):
            raise ValueError(f"Frame is {len(pixels)} bytes, buffer holds {len(self.pixels)}")
        self.pixels[:] = pixels

    def release(self) -> None:
        self.pixels = bytearray()
        self.released = True


class ImageSource(ABC):
    name = "image source"

    def __init__(self):
        self.target: Optional[OffscreenBuffer] = None
        self.enabled = True

    def is_available(self) -> bool:
        return self.enabled

    async def wait_for_frame(self) -> None:
        """Suspend until the current frame has finished rendering."""
        await asyncio.sleep(0)

    @abstractmethod
    def current_frame(self) -> Image.Image:
        raise NotImplementedError

    def render_into(self, width: int, height: int) -> bytes:
        """Render the current frame at width x height into the bound target and return RGB24 rows."""
        frame = to_rgb(self.current_frame())
        if frame.size != (width, height):
            frame = frame.resize((width, height), Image.Resampling.BILINEAR)
        pixels = frame.tobytes()
        if self.target is not None:
            self.target.write(pixels)
        return pixels

    def preview(self) -> Optional[Image.Image]:
        if not self.is_available():
            return None
        return self.current_frame()


class StaticImageSource(ImageSource):
    """A fixed image or texture, e.g. a file on disk or a frame handed over by another component."""
    name = "static image"

    def __init__(self, image: Union[str, Path, bytes, Image.Image]):
        super().__init__()
        self._image = load_image(image)

    def current_frame(self) -> Image.Image:
        return self._image

    def update(self, image: Union[str, Path, bytes, Image.Image]) -> None:
        self._image = load_image(image)


class ScreenImageSource(ImageSource):
    """Live screen contents via PIL.ImageGrab."""
    name = "screen"

    def __init__(self, bbox: Optional[tuple] = None, frame_interval_s: float = 0.0):
        super().__init__()
        self.bbox = bbox
        self.frame_interval_s = frame_interval_s

    async def wait_for_frame(self) -> None:
        await asyncio.sleep(self.frame_interval_s)

    def current_frame(self) -> Image.Image:
        return ImageGrab.grab(bbox=self.bbox)


@contextmanager
def offscreen_target(source: ImageSource, width: int, height: int) -> Iterator[OffscreenBuffer]:
    """Bind a fresh offscreen buffer to source, restoring the previous binding on exit."""
    previous = source.target
    buffer = OffscreenBuffer(width, height)
    source.target = buffer
    try:
        yield buffer
    finally:
        source.target = previous
        buffer.release()
        logger.debug("Released %dx%d offscreen buffer for %s", width, height, source.name)
