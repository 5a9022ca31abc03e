"""Pixel buffer and color result types."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from collections.abc import Sequence

    from numpy.typing import NDArray


@dataclass(frozen=True)
class Color:
    """An 8-bit RGB color."""

    r: int
    g: int
    b: int

    def __post_init__(self) -> None:
        for channel in (self.r, self.g, self.b):
            if not 0 <= channel <= 255:
                raise ValueError(f"Channel value {channel} outside [0, 255]")

    @property
    def hex(self) -> str:
        """Lowercase ``rrggbb`` form without a leading ``#``."""
        return f"{self.r:02x}{self.g:02x}{self.b:02x}"

    @property
    def packed(self) -> int:
        """The color packed as ``0xRRGGBB``."""
        return (self.r << 16) | (self.g << 8) | self.b

    def as_tuple(self) -> tuple[int, int, int]:
        return (self.r, self.g, self.b)


@dataclass(frozen=True, eq=False)
class PixelBuffer:
    """Decoded image pixels as a read-only HxWx3 (RGB) or HxWx4 (RGBA) uint8 array."""

    pixels: NDArray[np.uint8]

    def __post_init__(self) -> None:
        array = np.asarray(self.pixels)
        if array.dtype != np.uint8:
            if array.size and (array.min() < 0 or array.max() > 255):
                raise ValueError(f"Channel values outside [0, 255] in a {array.dtype} array")
            array = array.astype(np.uint8)
        if array.ndim != 3 or array.shape[2] not in (3, 4):
            raise ValueError(f"Expected an HxWx3 or HxWx4 array, got shape {array.shape}")
        view = array.view()
        view.flags.writeable = False
        object.__setattr__(self, "pixels", view)

    @classmethod
    def from_pixels(cls, pixels: Sequence[Sequence[int]], width: int, height: int) -> PixelBuffer:
        """Build a buffer from a flat, row-major sequence of RGB or RGBA tuples."""
        if width * height != len(pixels):
            raise ValueError(f"{len(pixels)} pixels do not fill a {width}x{height} buffer")
        channels = len(pixels[0]) if pixels else 3
        array = np.array(pixels).reshape(height, width, channels)
        return cls(array)

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def pixel_count(self) -> int:
        return self.width * self.height

    @property
    def has_alpha(self) -> bool:
        return self.pixels.shape[2] == 4

    def eligible_rgb(self, ignore_alpha_below: int = 0) -> NDArray[np.uint8]:
        """Return an Nx3 array of the pixels whose alpha is at least ``ignore_alpha_below``."""
        flat = self.pixels.reshape(-1, self.pixels.shape[2])
        if self.has_alpha and ignore_alpha_below > 0:
            flat = flat[flat[:, 3] >= ignore_alpha_below]
        return flat[:, :3]
