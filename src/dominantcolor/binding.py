"""Caller-facing entry points: image reference in, hex color out.

``from_image_uri`` and ``from_base64_image`` take an image the way a
scripting caller holds it (a path or a base64 string) and return the
dominant color as lowercase ``rrggbb``. Failures surface as
``DominantColorError`` subclasses.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING
from urllib.parse import unquote, urlparse

from dominantcolor.engine.decoder import decode_base64, decode_bytes, decode_file
from dominantcolor.engine.extract import Algorithm, extract
from dominantcolor.engine.histogram import DEFAULT_QUANTIZATION_BITS, ExtractionConfig
from dominantcolor.engine.kmeans import KMeansConfig
from dominantcolor.engine.vibrant import VibrantConfig
from dominantcolor.errors import DecodeError

if TYPE_CHECKING:
    from dominantcolor.config import Settings
    from dominantcolor.engine.pixels import Color, PixelBuffer

logger = logging.getLogger(__name__)

DEFAULT_SAMPLE_IMAGE_SIZE: int = 256


@dataclass(frozen=True)
class ExtractionOptions:
    """Everything needed to go from encoded image to dominant color."""

    algorithm: Algorithm = Algorithm.HISTOGRAM
    quantization_bits: int = DEFAULT_QUANTIZATION_BITS
    ignore_alpha_below: int = 0
    sample_size: int | None = DEFAULT_SAMPLE_IMAGE_SIZE
    max_pixels: int | None = None
    kmeans: KMeansConfig = field(default_factory=KMeansConfig)
    vibrant: VibrantConfig = field(default_factory=VibrantConfig)
    histogram: ExtractionConfig = field(init=False)

    def __post_init__(self) -> None:
        histogram = ExtractionConfig(
            quantization_bits=self.quantization_bits,
            ignore_alpha_below=self.ignore_alpha_below,
        )
        object.__setattr__(self, "histogram", histogram)

    @classmethod
    def from_settings(cls, settings: Settings) -> ExtractionOptions:
        return cls(
            algorithm=Algorithm(settings.algorithm),
            quantization_bits=settings.quantization_bits,
            ignore_alpha_below=settings.ignore_alpha_below,
            sample_size=settings.sample_image_size or None,
            max_pixels=settings.max_image_pixels,
            kmeans=KMeansConfig(
                number_of_clusters=settings.kmeans_clusters,
                unique_color_search_retries=settings.kmeans_color_search_retries,
                convergence_iterations=settings.kmeans_convergence_iterations,
                maximum_brightness_threshold=settings.kmeans_brightness_threshold,
                maximum_darkness_threshold=settings.kmeans_darkness_threshold,
                ignore_alpha_below=settings.ignore_alpha_below,
            ),
            vibrant=VibrantConfig(
                maximum_color_count=settings.vibrant_max_colors,
                ignore_alpha_below=settings.ignore_alpha_below,
            ),
        )

    def override(
        self,
        *,
        algorithm: Algorithm | None = None,
        quantization_bits: int | None = None,
        ignore_alpha_below: int | None = None,
    ) -> ExtractionOptions:
        """Return a copy with per-request overrides applied."""
        options = self
        if algorithm is not None:
            options = replace(options, algorithm=algorithm)
        if quantization_bits is not None:
            options = replace(options, quantization_bits=quantization_bits)
        if ignore_alpha_below is not None:
            options = replace(
                options,
                ignore_alpha_below=ignore_alpha_below,
                kmeans=replace(options.kmeans, ignore_alpha_below=ignore_alpha_below),
                vibrant=replace(options.vibrant, ignore_alpha_below=ignore_alpha_below),
            )
        return options


def _extract(buffer: PixelBuffer, options: ExtractionOptions) -> Color:
    color = extract(
        buffer,
        options.algorithm,
        histogram=options.histogram,
        kmeans=options.kmeans,
        vibrant=options.vibrant,
    )
    logger.debug(
        "Extracted #%s from %dx%d image (algorithm=%s)",
        color.hex,
        buffer.width,
        buffer.height,
        options.algorithm,
    )
    return color


def dominant_color(data: bytes, options: ExtractionOptions | None = None) -> Color:
    """Decode encoded image bytes and return their dominant color."""
    options = options or ExtractionOptions()
    buffer = decode_bytes(data, max_pixels=options.max_pixels, sample_size=options.sample_size)
    return _extract(buffer, options)


def dominant_color_base64(text: str, options: ExtractionOptions | None = None) -> Color:
    """Decode a base64 image and return its dominant color."""
    options = options or ExtractionOptions()
    buffer = decode_base64(text, max_pixels=options.max_pixels, sample_size=options.sample_size)
    return _extract(buffer, options)


def _uri_to_path(uri: str) -> str:
    parsed = urlparse(uri)
    if parsed.scheme == "file":
        return unquote(parsed.path)
    if parsed.scheme and len(parsed.scheme) > 1:
        raise DecodeError(f"Unsupported image URI scheme: {parsed.scheme!r}")
    return uri


def from_image_uri(uri: str, options: ExtractionOptions | None = None) -> str:
    """Return the dominant color of the image at ``uri`` (path or ``file://`` URI) as hex."""
    options = options or ExtractionOptions()
    buffer = decode_file(_uri_to_path(uri), max_pixels=options.max_pixels, sample_size=options.sample_size)
    return _extract(buffer, options).hex


def from_base64_image(text: str, options: ExtractionOptions | None = None) -> str:
    """Return the dominant color of a base64-encoded image as hex."""
    return dominant_color_base64(text, options).hex
