"""In-memory test images."""

from __future__ import annotations

import base64
import io

import numpy as np
from PIL import Image


def solid_array(color: tuple[int, ...], width: int = 4, height: int = 4) -> np.ndarray:
    return np.tile(np.array(color, dtype=np.uint8), (height, width, 1))


def encode_png(array: np.ndarray) -> bytes:
    buffer = io.BytesIO()
    Image.fromarray(array).save(buffer, format="PNG")
    return buffer.getvalue()


def encode_base64_png(array: np.ndarray) -> str:
    return base64.b64encode(encode_png(array)).decode("ascii")
