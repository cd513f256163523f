from __future__ import annotations
from pathlib import Path
from typing import Union
import base64
import io
from PIL import Image


def load_image(image_data: Union[str, Path, bytes, Image.Image]) -> Image.Image:
    if isinstance(image_data, Image.Image):
        return image_data

    if isinstance(image_data, (str, Path)):
        path = Path(image_data)
        if not path.exists():
            raise FileNotFoundError(f"Image file not found: {image_data}")
        with Image.open(path) as img:
            img.load()
            return img.copy()

    if isinstance(image_data, bytes):
        with Image.open(io.BytesIO(image_data)) as img:
            img.load()
            return img.copy()

    raise ValueError(f"Unsupported image data type: {type(image_data)}")


def to_rgb(image: Image.Image) -> Image.Image:
    if image.mode != 'RGB':
        image = image.convert('RGB')
    return image


def from_rgb_bytes(pixels: bytes, width: int, height: int) -> Image.Image:
    expected = width * height * 3
    if len(pixels) != expected:
        raise ValueError(f"Pixel buffer is {len(pixels)} bytes, expected {expected} for {width}x{height} RGB")
    return Image.frombytes('RGB', (width, height), bytes(pixels))


def encode_png(image: Image.Image) -> bytes:
    buffer = io.BytesIO()
    to_rgb(image).save(buffer, format='PNG')
    return buffer.getvalue()


def to_base64(image_data: Union[str, Path, bytes, Image.Image]) -> str:
    # raw bytes are assumed to already be an encoded image
    if isinstance(image_data, bytes):
        return base64.b64encode(image_data).decode('utf-8')
    return base64.b64encode(encode_png(load_image(image_data))).decode('utf-8')
