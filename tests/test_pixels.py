"""Tests for the pixel buffer and color types."""

from __future__ import annotations

import numpy as np
import pytest

from dominantcolor.engine.pixels import Color, PixelBuffer


class TestColor:
    def test_hex_is_lowercase_without_hash(self) -> None:
        assert Color(255, 171, 0).hex == "ffab00"

    def test_packed(self) -> None:
        assert Color(0x12, 0x34, 0x56).packed == 0x123456

    def test_as_tuple(self) -> None:
        assert Color(1, 2, 3).as_tuple() == (1, 2, 3)

    @pytest.mark.parametrize("channels", [(-1, 0, 0), (0, 256, 0), (0, 0, 1000)])
    def test_out_of_range_channel_rejected(self, channels: tuple[int, int, int]) -> None:
        with pytest.raises(ValueError, match="outside"):
            Color(*channels)


class TestPixelBuffer:
    def test_dimensions(self) -> None:
        buffer = PixelBuffer(np.zeros((3, 5, 3), dtype=np.uint8))
        assert buffer.width == 5
        assert buffer.height == 3
        assert buffer.pixel_count == 15
        assert buffer.has_alpha is False

    def test_rgba_has_alpha(self) -> None:
        assert PixelBuffer(np.zeros((1, 1, 4), dtype=np.uint8)).has_alpha is True

    def test_pixels_are_read_only(self) -> None:
        source = np.zeros((2, 2, 3), dtype=np.uint8)
        buffer = PixelBuffer(source)
        with pytest.raises(ValueError):
            buffer.pixels[0, 0, 0] = 1
        # The caller's array stays writable.
        source[0, 0, 0] = 1

    @pytest.mark.parametrize("values", [[[[300, 0, 0]]], [[[-1, 0, 0]]], [[[0, 0, 256]]]])
    def test_out_of_range_values_rejected(self, values: list[list[list[int]]]) -> None:
        with pytest.raises(ValueError, match="outside"):
            PixelBuffer(np.array(values))

    def test_from_pixels_out_of_range_rejected(self) -> None:
        with pytest.raises(ValueError, match="outside"):
            PixelBuffer.from_pixels([(0, 0, 999)], 1, 1)

    def test_wider_dtype_in_range_converted(self) -> None:
        buffer = PixelBuffer(np.array([[[255, 0, 128]]], dtype=np.int64))
        assert buffer.pixels.dtype == np.uint8
        assert buffer.pixels.tolist() == [[[255, 0, 128]]]

    @pytest.mark.parametrize("shape", [(4, 4), (4, 4, 2), (4, 4, 5), (2, 2, 2, 3)])
    def test_bad_shape_rejected(self, shape: tuple[int, ...]) -> None:
        with pytest.raises(ValueError, match="Expected"):
            PixelBuffer(np.zeros(shape, dtype=np.uint8))

    def test_from_pixels_row_major(self) -> None:
        buffer = PixelBuffer.from_pixels([(1, 1, 1), (2, 2, 2), (3, 3, 3), (4, 4, 4), (5, 5, 5), (6, 6, 6)], 3, 2)
        assert buffer.width == 3
        assert buffer.height == 2
        assert buffer.pixels[1, 0].tolist() == [4, 4, 4]

    def test_from_pixels_size_mismatch(self) -> None:
        with pytest.raises(ValueError, match="do not fill"):
            PixelBuffer.from_pixels([(0, 0, 0)], 2, 2)

    def test_from_pixels_empty(self) -> None:
        assert PixelBuffer.from_pixels([], 0, 0).pixel_count == 0

    def test_eligible_rgb_filters_by_alpha(self) -> None:
        buffer = PixelBuffer.from_pixels([(10, 20, 30, 255), (40, 50, 60, 0), (70, 80, 90, 128)], 3, 1)
        eligible = buffer.eligible_rgb(128)
        assert eligible.tolist() == [[10, 20, 30], [70, 80, 90]]

    def test_eligible_rgb_without_threshold_keeps_transparent(self) -> None:
        buffer = PixelBuffer.from_pixels([(1, 2, 3, 0)], 1, 1)
        assert buffer.eligible_rgb(0).tolist() == [[1, 2, 3]]
