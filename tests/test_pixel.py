"""Tests for pixel.py - 555/565 colour conversion."""

import numpy as np
import pytest

from praykit.pixel import (
    PIXEL_FORMAT_555, PIXEL_FORMAT_565,
    is_555, decode_555, decode_565, encode_555, encode_565,
    decode_pixel, encode_pixel, decode_pixels, encode_pixels,
)


class TestScalarConversion:
    """Test single-pixel decode and encode."""

    def test_white_555(self):
        assert decode_555(0x7FFF) == (248, 248, 248, 255)

    def test_white_565(self):
        assert decode_565(0xFFFF) == (248, 252, 248, 255)

    def test_black(self):
        assert decode_555(0) == (0, 0, 0, 255)
        assert decode_565(0) == (0, 0, 0, 255)

    def test_channels_565(self):
        assert decode_565(0xF800) == (248, 0, 0, 255)
        assert decode_565(0x07E0) == (0, 252, 0, 255)
        assert decode_565(0x001F) == (0, 0, 248, 255)

    def test_channels_555(self):
        assert decode_555(0x7C00) == (248, 0, 0, 255)
        assert decode_555(0x03E0) == (0, 248, 0, 255)
        assert decode_555(0x001F) == (0, 0, 248, 255)

    def test_encode_truncates_low_bits(self):
        assert encode_565(255, 255, 255) == 0xFFFF
        assert encode_555(255, 255, 255) == 0x7FFF
        assert encode_565(7, 3, 7) == 0
        assert encode_555(7, 7, 7) == 0

    def test_format_code(self):
        """Only 2 means 555; every other code is 565."""
        assert is_555(PIXEL_FORMAT_555)
        assert not is_555(PIXEL_FORMAT_565)
        assert not is_555(0)
        assert decode_pixel(0xFFFF, 0) == (248, 252, 248, 255)
        assert decode_pixel(0x7FFF, 2) == (248, 248, 248, 255)

    def test_encode_pixel_dispatch(self):
        assert encode_pixel(248, 252, 248, PIXEL_FORMAT_565) == 0xFFFF
        assert encode_pixel(248, 248, 248, PIXEL_FORMAT_555) == 0x7FFF


class TestVectorizedConversion:
    """Test numpy decode and encode."""

    def test_matches_scalar(self):
        samples = np.array([0x0000, 0x001F, 0x07E0, 0xF800, 0x1234, 0xFFFF], dtype=np.uint16)
        for pixel_format in (PIXEL_FORMAT_555, PIXEL_FORMAT_565):
            rgba = decode_pixels(samples, pixel_format)
            for i, value in enumerate(samples):
                assert tuple(rgba[i]) == decode_pixel(int(value), pixel_format)

    def test_decode_shape(self):
        rgba = decode_pixels(np.zeros((3, 5), dtype=np.uint16), PIXEL_FORMAT_565)
        assert rgba.shape == (3, 5, 4)
        assert rgba.dtype == np.uint8
        assert (rgba[..., 3] == 255).all()

    def test_565_decode_encode_lossless(self):
        packed = np.arange(0x10000, dtype=np.uint32).astype(np.uint16)
        assert np.array_equal(encode_pixels(decode_pixels(packed, 3), 3), packed)

    def test_555_decode_encode_lossless(self):
        packed = np.arange(0x8000, dtype=np.uint16)
        assert np.array_equal(encode_pixels(decode_pixels(packed, 2), 2), packed)

    def test_encode_ignores_alpha(self):
        rgba = np.array([[248, 252, 248, 0], [248, 252, 248, 255]], dtype=np.uint8)
        assert list(encode_pixels(rgba, PIXEL_FORMAT_565)) == [0xFFFF, 0xFFFF]

    def test_encode_rgb(self):
        rgb = np.array([[255, 255, 255]], dtype=np.uint8)
        assert encode_pixels(rgb, PIXEL_FORMAT_555)[0] == 0x7FFF
