"""Algorithm selection for dominant color extraction."""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING

from dominantcolor.engine.histogram import ExtractionConfig, extract_dominant_color
from dominantcolor.engine.kmeans import KMeansConfig, extract_kmeans_color
from dominantcolor.engine.vibrant import VibrantConfig, extract_vibrant_color

if TYPE_CHECKING:
    from dominantcolor.engine.pixels import Color, PixelBuffer


class Algorithm(StrEnum):
    HISTOGRAM = "histogram"
    KMEANS = "kmeans"
    VIBRANT = "vibrant"


def extract(
    buffer: PixelBuffer,
    algorithm: Algorithm = Algorithm.HISTOGRAM,
    *,
    histogram: ExtractionConfig | None = None,
    kmeans: KMeansConfig | None = None,
    vibrant: VibrantConfig | None = None,
) -> Color:
    """Run the extractor selected by ``algorithm`` with its matching config."""
    if algorithm == Algorithm.KMEANS:
        return extract_kmeans_color(buffer, kmeans)
    if algorithm == Algorithm.VIBRANT:
        return extract_vibrant_color(buffer, vibrant)
    return extract_dominant_color(buffer, histogram)
