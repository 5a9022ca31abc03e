"""Vibrant swatch extraction.

A palette is built by median-cut quantization of a 5-bit-per-channel
histogram, and the swatch that best matches the "vibrant" target
(saturated, mid-lightness, well populated) is returned.

Quantization: while there are fewer boxes than ``maximum_color_count``,
split the box with the largest volume along its longest channel at the
population median. Each box's population-weighted mean becomes a swatch.
When the image already has no more distinct colors than the limit, every
color is its own swatch.

Near-black, near-white and low-saturation skin-tone colors are ignored, both
when building the histogram and when emitting swatches.
"""

from __future__ import annotations

import colorsys
import heapq
import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from dominantcolor.engine.histogram import bucket_keys
from dominantcolor.engine.pixels import Color
from dominantcolor.errors import EmptyInputError, InvalidConfigError

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from dominantcolor.engine.pixels import PixelBuffer

logger = logging.getLogger(__name__)

QUANTIZE_WORD_WIDTH: int = 5

BLACK_MAX_LIGHTNESS: float = 0.05
WHITE_MIN_LIGHTNESS: float = 0.95
I_LINE_HUE_RANGE: tuple[float, float] = (10.0, 37.0)
I_LINE_MAX_SATURATION: float = 0.82


@dataclass(frozen=True)
class VibrantTarget:
    """Lightness/saturation window and scoring weights for a swatch target."""

    minimum_saturation: float = 0.35
    target_saturation: float = 1.0
    maximum_saturation: float = 1.0
    minimum_lightness: float = 0.3
    target_lightness: float = 0.5
    maximum_lightness: float = 0.7
    saturation_weight: float = 0.24
    lightness_weight: float = 0.52
    population_weight: float = 0.24

    def accepts(self, saturation: float, lightness: float) -> bool:
        return (
            self.minimum_saturation <= saturation <= self.maximum_saturation
            and self.minimum_lightness <= lightness <= self.maximum_lightness
        )

    def score(self, saturation: float, lightness: float, population: int, max_population: int) -> float:
        return (
            self.saturation_weight * (1 - abs(saturation - self.target_saturation))
            + self.lightness_weight * (1 - abs(lightness - self.target_lightness))
            + self.population_weight * (population / max_population)
        )


VIBRANT = VibrantTarget()


@dataclass(frozen=True)
class VibrantConfig:
    """Options for vibrant swatch extraction."""

    maximum_color_count: int = 16
    ignore_alpha_below: int = 0

    def __post_init__(self) -> None:
        if self.maximum_color_count < 1:
            raise InvalidConfigError(f"maximum_color_count must be >= 1, got {self.maximum_color_count}")
        if not 0 <= self.ignore_alpha_below <= 255:
            raise InvalidConfigError(f"ignore_alpha_below must be in [0, 255], got {self.ignore_alpha_below}")


@dataclass(frozen=True)
class Swatch:
    """A palette color and the number of pixels it stands for."""

    color: Color
    population: int

    @property
    def hls(self) -> tuple[float, float, float]:
        return colorsys.rgb_to_hls(self.color.r / 255, self.color.g / 255, self.color.b / 255)


def _expand_level(level: int) -> int:
    return level << (8 - QUANTIZE_WORD_WIDTH)


def should_ignore(color: Color) -> bool:
    """True for near-black, near-white and colors on the skin-tone "I-line"."""
    hue, lightness, saturation = colorsys.rgb_to_hls(color.r / 255, color.g / 255, color.b / 255)
    if lightness <= BLACK_MAX_LIGHTNESS or lightness >= WHITE_MIN_LIGHTNESS:
        return True
    low, high = I_LINE_HUE_RANGE
    return low <= hue * 360 <= high and saturation <= I_LINE_MAX_SATURATION


class _Box:
    """A set of histogram colors (row indices into ``levels``)."""

    def __init__(
        self,
        members: NDArray[np.intp],
        levels: NDArray[np.int64],
        populations: NDArray[np.int64],
    ) -> None:
        self.members = members
        self._levels = levels
        self._populations = populations
        box_levels = levels[members]
        self.minimum = box_levels.min(axis=0)
        self.maximum = box_levels.max(axis=0)
        self.population = int(populations[members].sum())

    @property
    def volume(self) -> int:
        return int(np.prod(self.maximum - self.minimum + 1))

    def can_split(self) -> bool:
        return len(self.members) > 1

    def longest_dimension(self) -> int:
        r_len, g_len, b_len = (self.maximum - self.minimum).tolist()
        if r_len >= g_len and r_len >= b_len:
            return 0
        if g_len >= r_len and g_len >= b_len:
            return 1
        return 2

    def split(self) -> tuple[_Box, _Box]:
        dimension = self.longest_dimension()
        others = [c for c in range(3) if c != dimension]
        box_levels = self._levels[self.members]
        # np.lexsort sorts by its last key first.
        order = np.lexsort((box_levels[:, others[1]], box_levels[:, others[0]], box_levels[:, dimension]))
        members = self.members[order]

        running = np.cumsum(self._populations[members])
        midpoint = self.population // 2
        split_at = min(len(members) - 2, int(np.argmax(running >= midpoint)))
        return (
            _Box(members[: split_at + 1], self._levels, self._populations),
            _Box(members[split_at + 1 :], self._levels, self._populations),
        )

    def average(self) -> Swatch:
        weights = self._populations[self.members]
        means = (self._levels[self.members] * weights[:, None]).sum(axis=0) / self.population
        # Round half up on the quantized levels before widening back to 8 bits.
        r, g, b = (_expand_level(math.floor(m + 0.5)) for m in means.tolist())
        return Swatch(Color(r, g, b), self.population)


def quantize(levels: NDArray[np.int64], populations: NDArray[np.int64], maximum_color_count: int) -> list[Swatch]:
    """Reduce distinct 5-bit colors to at most ``maximum_color_count`` swatches."""
    if len(levels) <= maximum_color_count:
        return [
            Swatch(Color(*(_expand_level(int(c)) for c in row)), int(count))
            for row, count in zip(levels, populations, strict=True)
        ]

    # Heap of (-volume, sequence, box): largest volume first, then oldest box.
    sequence = 0
    root = _Box(np.arange(len(levels)), levels, populations)
    heap: list[tuple[int, int, _Box]] = [(-root.volume, sequence, root)]
    while len(heap) < maximum_color_count:
        entry = heapq.heappop(heap)
        box = entry[2]
        if not box.can_split():
            heapq.heappush(heap, entry)
            break
        for part in box.split():
            sequence += 1
            heapq.heappush(heap, (-part.volume, sequence, part))

    boxes = [box for _, _, box in sorted(heap, key=lambda entry: entry[1])]
    return [swatch for swatch in (box.average() for box in boxes) if not should_ignore(swatch.color)]


def build_palette(buffer: PixelBuffer, config: VibrantConfig | None = None) -> list[Swatch]:
    """Quantize the eligible pixels of ``buffer`` into a swatch palette."""
    config = config or VibrantConfig()
    rgb = buffer.eligible_rgb(config.ignore_alpha_below)
    if len(rgb) == 0:
        return []

    counts = np.bincount(bucket_keys(rgb, QUANTIZE_WORD_WIDTH), minlength=1 << (3 * QUANTIZE_WORD_WIDTH))
    keys = np.flatnonzero(counts)
    mask = (1 << QUANTIZE_WORD_WIDTH) - 1
    levels = np.stack(
        [(keys >> (2 * QUANTIZE_WORD_WIDTH)) & mask, (keys >> QUANTIZE_WORD_WIDTH) & mask, keys & mask],
        axis=1,
    ).astype(np.int64)

    kept = np.array(
        [not should_ignore(Color(*(_expand_level(int(c)) for c in row))) for row in levels],
        dtype=bool,
    )
    if not kept.any():
        return []
    return quantize(levels[kept], counts[keys][kept].astype(np.int64), config.maximum_color_count)


def select_swatch(swatches: list[Swatch], target: VibrantTarget = VIBRANT) -> Swatch | None:
    """Return the highest-scoring swatch inside the target window, or None."""
    if not swatches:
        return None
    max_population = max(swatch.population for swatch in swatches)
    best: Swatch | None = None
    best_score = -math.inf
    for swatch in swatches:
        _, lightness, saturation = swatch.hls
        if not target.accepts(saturation, lightness):
            continue
        score = target.score(saturation, lightness, swatch.population, max_population)
        if score > best_score:
            best, best_score = swatch, score
    return best


def extract_vibrant_color(buffer: PixelBuffer, config: VibrantConfig | None = None) -> Color:
    """Return the color of the vibrant swatch of ``buffer``.

    Raises:
        EmptyInputError: If the buffer has no eligible pixels, or no swatch
            falls inside the vibrant saturation/lightness window.
    """
    config = config or VibrantConfig()
    if buffer.pixel_count == 0:
        raise EmptyInputError("Pixel buffer is empty")

    palette = build_palette(buffer, config)
    swatch = select_swatch(palette)
    logger.debug("Vibrant: %d swatches, selected=%s", len(palette), swatch)
    if swatch is None:
        raise EmptyInputError(f"No vibrant swatch among {len(palette)} palette colors")
    return swatch.color
