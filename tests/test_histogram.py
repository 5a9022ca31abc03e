"""Tests for histogram-bucket extraction."""

from __future__ import annotations

import numpy as np
import pytest

from dominantcolor.engine.histogram import (
    ExtractionConfig,
    _most_common_key,
    bucket_keys,
    expand_key,
    extract_dominant_color,
)
from dominantcolor.engine.pixels import Color, PixelBuffer
from dominantcolor.errors import EmptyInputError, InvalidConfigError

RED = (255, 0, 0)
BLUE = (0, 0, 255)


def _quantized(color: tuple[int, int, int], bits: int = 5) -> tuple[int, ...]:
    return tuple(c >> (8 - bits) for c in color)


class TestConfig:
    @pytest.mark.parametrize("bits", [0, 9, -1])
    def test_quantization_bits_out_of_range(self, bits: int) -> None:
        with pytest.raises(InvalidConfigError, match="quantization_bits"):
            ExtractionConfig(quantization_bits=bits)

    @pytest.mark.parametrize("bits", [1, 5, 8])
    def test_quantization_bits_in_range(self, bits: int) -> None:
        assert ExtractionConfig(quantization_bits=bits).quantization_bits == bits

    @pytest.mark.parametrize("threshold", [-1, 256])
    def test_alpha_threshold_out_of_range(self, threshold: int) -> None:
        with pytest.raises(InvalidConfigError, match="ignore_alpha_below"):
            ExtractionConfig(ignore_alpha_below=threshold)


class TestBuckets:
    def test_keys_pack_channels(self) -> None:
        rgb = np.array([[255, 0, 0], [0, 0, 255], [8, 16, 24]], dtype=np.uint8)
        keys = bucket_keys(rgb, 5)
        assert keys.tolist() == [31 << 10, 31, (1 << 10) | (2 << 5) | 3]

    def test_near_colors_share_a_bucket(self) -> None:
        rgb = np.array([[200, 100, 50], [203, 101, 54]], dtype=np.uint8)
        keys = bucket_keys(rgb, 5)
        assert keys[0] == keys[1]

    def test_expand_uses_range_midpoint(self) -> None:
        assert expand_key(31 << 10, 5) == Color(252, 4, 4)

    def test_expand_full_precision_is_exact(self) -> None:
        key = int(bucket_keys(np.array([[12, 34, 56]], dtype=np.uint8), 8)[0])
        assert expand_key(key, 8) == Color(12, 34, 56)

    def test_expand_one_bit(self) -> None:
        assert expand_key(0b111, 1) == Color(192, 192, 192)
        assert expand_key(0, 1) == Color(64, 64, 64)


class TestMostCommonKey:
    @pytest.mark.parametrize("bits", [3, 7, 8])
    def test_count_and_tie_break(self, bits: int) -> None:
        keys = np.array([5, 3, 5, 3, 9], dtype=np.int64)
        assert _most_common_key(keys, bits) == (3, 2, 3)

    def test_full_precision_counts_wide_keys(self) -> None:
        keys = np.array([(1 << 24) - 1, 7, (1 << 24) - 1], dtype=np.int64)
        assert _most_common_key(keys, 8) == ((1 << 24) - 1, 2, 2)


class TestExtractDominantColor:
    def test_red_majority(self) -> None:
        buffer = PixelBuffer.from_pixels([RED, RED, RED, BLUE], 2, 2)
        color = extract_dominant_color(buffer)
        assert _quantized(color.as_tuple()) == _quantized(RED)

    @pytest.mark.parametrize("bits", [1, 3, 5, 8])
    @pytest.mark.parametrize("uniform", [(0, 0, 0), (255, 255, 255), (17, 130, 201)])
    def test_uniform_color_within_one_step(self, bits: int, uniform: tuple[int, int, int]) -> None:
        buffer = PixelBuffer(np.tile(np.array(uniform, dtype=np.uint8), (3, 3, 1)))
        color = extract_dominant_color(buffer, ExtractionConfig(quantization_bits=bits))
        step = 1 << (8 - bits)
        for got, expected in zip(color.as_tuple(), uniform, strict=True):
            assert abs(got - expected) < step

    def test_channels_in_range_for_random_images(self) -> None:
        rng = np.random.default_rng(7)
        for bits in range(1, 9):
            buffer = PixelBuffer(rng.integers(0, 256, size=(16, 16, 3), dtype=np.uint8))
            color = extract_dominant_color(buffer, ExtractionConfig(quantization_bits=bits))
            assert all(0 <= c <= 255 for c in color.as_tuple())

    def test_deterministic(self) -> None:
        rng = np.random.default_rng(11)
        buffer = PixelBuffer(rng.integers(0, 256, size=(32, 32, 4), dtype=np.uint8))
        config = ExtractionConfig(quantization_bits=3, ignore_alpha_below=10)
        assert extract_dominant_color(buffer, config) == extract_dominant_color(buffer, config)

    @pytest.mark.parametrize("bits", [5, 7, 8])
    def test_tie_breaks_on_smallest_key(self, bits: int) -> None:
        # Blue packs to a smaller key than red at every precision.
        buffer = PixelBuffer.from_pixels([RED, BLUE, RED, BLUE], 4, 1)
        color = extract_dominant_color(buffer, ExtractionConfig(quantization_bits=bits))
        assert _quantized(color.as_tuple(), bits) == _quantized(BLUE, bits)

    def test_tie_break_independent_of_order(self) -> None:
        first = extract_dominant_color(PixelBuffer.from_pixels([RED, BLUE], 2, 1))
        second = extract_dominant_color(PixelBuffer.from_pixels([BLUE, RED], 2, 1))
        assert first == second

    def test_empty_buffer(self) -> None:
        with pytest.raises(EmptyInputError):
            extract_dominant_color(PixelBuffer(np.zeros((0, 0, 3), dtype=np.uint8)))

    def test_all_pixels_below_alpha_threshold(self) -> None:
        buffer = PixelBuffer.from_pixels([(255, 0, 0, 10), (0, 255, 0, 99)], 2, 1)
        with pytest.raises(EmptyInputError, match="alpha"):
            extract_dominant_color(buffer, ExtractionConfig(ignore_alpha_below=100))

    def test_transparent_pixels_excluded(self) -> None:
        pixels = [(0, 0, 255, 0)] * 5 + [(255, 0, 0, 255)] * 2
        buffer = PixelBuffer.from_pixels(pixels, 7, 1)
        color = extract_dominant_color(buffer, ExtractionConfig(ignore_alpha_below=1))
        assert _quantized(color.as_tuple()) == _quantized(RED)

    def test_transparent_pixels_counted_without_threshold(self) -> None:
        pixels = [(0, 0, 255, 0)] * 5 + [(255, 0, 0, 255)] * 2
        buffer = PixelBuffer.from_pixels(pixels, 7, 1)
        color = extract_dominant_color(buffer)
        assert _quantized(color.as_tuple()) == _quantized(BLUE)

    def test_coarser_quantization_merges_shades(self) -> None:
        # Two close greens outnumber one exact grey only once they share a bucket.
        pixels = [(0, 200, 0), (0, 207, 0), (128, 128, 128), (128, 128, 128)]
        buffer = PixelBuffer.from_pixels(pixels, 4, 1)
        fine = extract_dominant_color(buffer, ExtractionConfig(quantization_bits=8))
        coarse = extract_dominant_color(buffer, ExtractionConfig(quantization_bits=4))
        assert fine == Color(128, 128, 128)
        assert coarse.g > coarse.r
