"""
16-bit packed colour conversion for Creatures sprite files.

Sprite files carry a ``pixel_format`` code in their header:
- 2: 555 (x RRRRR GGGGG BBBBB)
- anything else (3 in practice): 565 (RRRRR GGGGGG BBBBB)

Decoding shifts each channel up to 8 bits without filling the low bits, so
pure white decodes to (248, 248, 248) in 555 and (248, 252, 248) in 565.
Encoding truncates the low bits, which makes decode -> encode lossless.
"""

from typing import Tuple

import numpy as np

PIXEL_FORMAT_555 = 2
PIXEL_FORMAT_565 = 3

RGBA = Tuple[int, int, int, int]


def is_555(pixel_format: int) -> bool:
    return pixel_format == PIXEL_FORMAT_555


def decode_555(pixel: int) -> RGBA:
    r = (pixel & 0x7C00) >> 7
    g = (pixel & 0x03E0) >> 2
    b = (pixel & 0x001F) << 3
    return (r, g, b, 255)


def decode_565(pixel: int) -> RGBA:
    r = (pixel & 0xF800) >> 8
    g = (pixel & 0x07E0) >> 3
    b = (pixel & 0x001F) << 3
    return (r, g, b, 255)


def encode_555(r: int, g: int, b: int) -> int:
    return ((r >> 3) << 10) | ((g >> 3) << 5) | (b >> 3)


def encode_565(r: int, g: int, b: int) -> int:
    return ((r >> 3) << 11) | ((g >> 2) << 5) | (b >> 3)


def decode_pixel(pixel: int, pixel_format: int) -> RGBA:
    """Decode one packed pixel according to a file's pixel format code."""
    if is_555(pixel_format):
        return decode_555(pixel)
    return decode_565(pixel)


def encode_pixel(r: int, g: int, b: int, pixel_format: int) -> int:
    if is_555(pixel_format):
        return encode_555(r, g, b)
    return encode_565(r, g, b)


def decode_pixels(packed: np.ndarray, pixel_format: int) -> np.ndarray:
    """
    Vectorized decode of packed pixels.

    Args:
        packed: Array of uint16 packed pixels, any shape
        pixel_format: File pixel format code

    Returns:
        uint8 array with an extra trailing axis of 4 (RGBA), alpha 255
    """
    packed = np.asarray(packed, dtype=np.uint16)
    rgba = np.empty(packed.shape + (4,), dtype=np.uint8)

    if is_555(pixel_format):
        rgba[..., 0] = (packed & 0x7C00) >> 7
        rgba[..., 1] = (packed & 0x03E0) >> 2
    else:
        rgba[..., 0] = (packed & 0xF800) >> 8
        rgba[..., 1] = (packed & 0x07E0) >> 3
    rgba[..., 2] = (packed & 0x001F) << 3
    rgba[..., 3] = 255
    return rgba


def encode_pixels(rgba: np.ndarray, pixel_format: int) -> np.ndarray:
    """
    Vectorized encode of RGBA (or RGB) pixels to packed uint16.

    Alpha is ignored; callers decide what transparent pixels become.
    """
    rgba = np.asarray(rgba, dtype=np.uint8)
    r = rgba[..., 0].astype(np.uint16)
    g = rgba[..., 1].astype(np.uint16)
    b = rgba[..., 2].astype(np.uint16)

    if is_555(pixel_format):
        packed = ((r >> 3) << 10) | ((g >> 3) << 5) | (b >> 3)
    else:
        packed = ((r >> 3) << 11) | ((g >> 2) << 5) | (b >> 3)
    return packed.astype(np.uint16)
