"""Histogram-bucket dominant color extraction.

Each eligible pixel is reduced to the ``quantization_bits`` most significant
bits per channel, so near-identical colors share one bucket. The most
populated bucket wins (smallest bucket key on ties) and is expanded back to
the midpoint of its quantization range.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from dominantcolor.engine.pixels import Color
from dominantcolor.errors import EmptyInputError, InvalidConfigError

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from dominantcolor.engine.pixels import PixelBuffer

logger = logging.getLogger(__name__)

DEFAULT_QUANTIZATION_BITS: int = 5
# Largest key space (in bits) counted with a dense bincount; wider spaces use a hash count.
DENSE_KEY_BITS: int = 21


@dataclass(frozen=True)
class ExtractionConfig:
    """Options for histogram extraction."""

    quantization_bits: int = DEFAULT_QUANTIZATION_BITS
    ignore_alpha_below: int = 0

    def __post_init__(self) -> None:
        if not 1 <= self.quantization_bits <= 8:
            raise InvalidConfigError(f"quantization_bits must be in [1, 8], got {self.quantization_bits}")
        if not 0 <= self.ignore_alpha_below <= 255:
            raise InvalidConfigError(f"ignore_alpha_below must be in [0, 255], got {self.ignore_alpha_below}")


def bucket_keys(rgb: NDArray[np.uint8], bits: int) -> NDArray[np.int64]:
    """Map an Nx3 array of colors to their packed quantized bucket keys."""
    shift = 8 - bits
    levels = rgb.astype(np.int64) >> shift
    return (levels[:, 0] << (2 * bits)) | (levels[:, 1] << bits) | levels[:, 2]


def expand_key(key: int, bits: int) -> Color:
    """Expand a bucket key to the midpoint color of its quantization range."""
    shift = 8 - bits
    mask = (1 << bits) - 1
    half_step = (1 << shift) >> 1
    r_level = (key >> (2 * bits)) & mask
    g_level = (key >> bits) & mask
    b_level = key & mask
    return Color(
        r=(r_level << shift) + half_step,
        g=(g_level << shift) + half_step,
        b=(b_level << shift) + half_step,
    )


def _most_common_key(keys: NDArray[np.int64], bits: int) -> tuple[int, int, int]:
    """Return (key, count, distinct buckets) for the most frequent key, smallest key on ties."""
    if 3 * bits <= DENSE_KEY_BITS:
        counts = np.bincount(keys, minlength=1 << (3 * bits))
        winner = int(np.argmax(counts))
        return winner, int(counts[winner]), int(np.count_nonzero(counts))
    counter = Counter(keys.tolist())
    key, count = max(counter.items(), key=lambda item: (item[1], -item[0]))
    return key, count, len(counter)


def extract_dominant_color(buffer: PixelBuffer, config: ExtractionConfig | None = None) -> Color:
    """Return the dominant color of ``buffer``.

    Raises:
        EmptyInputError: If the buffer has no pixels, or every pixel is
            excluded by ``ignore_alpha_below``.
    """
    config = config or ExtractionConfig()
    if buffer.pixel_count == 0:
        raise EmptyInputError("Pixel buffer is empty")

    rgb = buffer.eligible_rgb(config.ignore_alpha_below)
    if len(rgb) == 0:
        raise EmptyInputError(f"All {buffer.pixel_count} pixels have alpha below {config.ignore_alpha_below}")

    keys = bucket_keys(rgb, config.quantization_bits)
    key, count, buckets = _most_common_key(keys, config.quantization_bits)
    logger.debug(
        "Histogram: %d eligible pixels, %d buckets, winner key=%d count=%d",
        len(rgb),
        buckets,
        key,
        count,
    )
    return expand_key(key, config.quantization_bits)
