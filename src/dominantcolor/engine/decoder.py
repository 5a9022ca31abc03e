"""Image decoding: path, raw bytes or base64 text into a PixelBuffer."""

from __future__ import annotations

import base64
import binascii
import io
import logging
from typing import TYPE_CHECKING

import numpy as np
from PIL import Image, UnidentifiedImageError

from dominantcolor.engine.pixels import PixelBuffer
from dominantcolor.errors import DecodeError

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

_ALPHA_MODES = {"RGBA", "LA", "PA", "RGBa", "La"}


def _has_transparency(image: Image.Image) -> bool:
    return image.mode in _ALPHA_MODES or "transparency" in image.info


def _to_buffer(image: Image.Image, *, max_pixels: int | None, sample_size: int | None) -> PixelBuffer:
    width, height = image.size
    if max_pixels is not None and width * height > max_pixels:
        raise DecodeError(f"Image is {width}x{height}, exceeding the {max_pixels} pixel limit")

    image.load()
    image = image.convert("RGBA" if _has_transparency(image) else "RGB")
    if sample_size:
        image.thumbnail((sample_size, sample_size), Image.Resampling.NEAREST)
    return PixelBuffer(np.asarray(image, dtype=np.uint8))


def decode_bytes(data: bytes, *, max_pixels: int | None = None, sample_size: int | None = None) -> PixelBuffer:
    """Decode encoded image bytes (any format Pillow reads).

    Args:
        data: Raw file bytes.
        max_pixels: Reject images larger than this many pixels.
        sample_size: Shrink the image to fit a ``sample_size`` square first.

    Raises:
        DecodeError: If the bytes are not a readable image or exceed limits.
    """
    try:
        with Image.open(io.BytesIO(data)) as image:
            return _to_buffer(image, max_pixels=max_pixels, sample_size=sample_size)
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError, EOFError, ValueError) as exc:
        logger.warning("Failed to decode %d-byte image: %s", len(data), exc)
        raise DecodeError(f"Cannot decode image: {exc}") from exc


def decode_file(path: str | Path, *, max_pixels: int | None = None, sample_size: int | None = None) -> PixelBuffer:
    """Decode the image file at ``path``."""
    try:
        with open(path, "rb") as fh:
            data = fh.read()
    except OSError as exc:
        logger.warning("Failed to read image file %s: %s", path, exc)
        raise DecodeError(f"Cannot read image file {path}: {exc}") from exc
    return decode_bytes(data, max_pixels=max_pixels, sample_size=sample_size)


def decode_base64(text: str, *, max_pixels: int | None = None, sample_size: int | None = None) -> PixelBuffer:
    """Decode a standard base64 image, optionally prefixed with a ``data:`` URI header.

    Line breaks and other whitespace (as in MIME-wrapped base64) are ignored.
    """
    if text.startswith("data:"):
        _, _, text = text.partition(",")
    text = "".join(text.split())
    try:
        data = base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as exc:
        logger.warning("Invalid base64 image payload: %s", exc)
        raise DecodeError(f"Invalid base64 image data: {exc}") from exc
    return decode_bytes(data, max_pixels=max_pixels, sample_size=sample_size)
