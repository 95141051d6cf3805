"""Tests for sprites.py - BLK, S16 and C16 codecs."""

import struct

import numpy as np
import pytest

from praykit.errors import (
    InvalidImageDimensions, InvalidPixelData, TruncatedInput, UnsupportedFileType,
)
from praykit.sprites import (
    decode_blk, encode_blk, stitch_background, split_background,
    decode_blk_background, encode_blk_background,
    decode_s16, encode_s16, decode_c16, encode_c16,
    decode_sprite, encode_sprite, get_sprite_stats,
)

WHITE_565 = (248, 252, 248, 255)


def _quantized_frame(height, width, seed=0, transparent=False):
    """Random RGBA frame whose colours survive 565 quantization."""
    rng = np.random.default_rng(seed)
    frame = np.empty((height, width, 4), dtype=np.uint8)
    frame[..., 0] = rng.integers(0, 32, (height, width)) * 8
    frame[..., 1] = rng.integers(0, 64, (height, width)) * 4
    frame[..., 2] = rng.integers(0, 32, (height, width)) * 8
    frame[..., 3] = 255
    if transparent:
        mask = rng.random((height, width)) < 0.4
        frame[mask] = 0
    return frame


def _two_frame_c16():
    """8x1 frame [4 transparent][4 x 0xFFFF], then a 2x2 frame."""
    header = struct.pack("<IH", 3, 2)
    header += struct.pack("<IHH", 26, 8, 1)
    header += struct.pack("<IHH", 42, 2, 2) + struct.pack("<I", 50)

    frame0 = struct.pack("<HH", (4 << 1) | 0, (4 << 1) | 1)
    frame0 += struct.pack("<4H", *[0xFFFF] * 4)
    frame0 += struct.pack("<HH", 0, 0)

    frame1 = struct.pack("<H", (2 << 1) | 1) + struct.pack("<HH", 0x001F, 0x001F)
    frame1 += struct.pack("<H", 0)
    frame1 += struct.pack("<HH", (2 << 1) | 0, 0)
    frame1 += struct.pack("<H", 0)

    return header + frame0 + frame1


def _single_line_c16(width, runs):
    """One-line C16 file from (length, colour) runs; colour runs use 0xFFFF."""
    line = b""
    for length, colour in runs:
        line += struct.pack("<H", (length << 1) | colour)
        if colour:
            line += struct.pack(f"<{length}H", *[0xFFFF] * length)
    line += struct.pack("<HH", 0, 0)
    return struct.pack("<IH", 3, 1) + struct.pack("<IHH", 14, width, 1) + line


class TestBLK:
    """Test BLK backgrounds."""

    def test_frame_must_be_128(self):
        data = struct.pack("<IHHH", 3, 1, 1, 1) + struct.pack("<IHH", 14, 64, 64)
        with pytest.raises(InvalidImageDimensions, match="128 x 128"):
            decode_blk(data)

    def test_encode_rejects_other_sizes(self):
        with pytest.raises(InvalidImageDimensions, match="128 x 128"):
            encode_blk([np.zeros((64, 64, 4), dtype=np.uint8)])

    def test_offset_bias(self):
        data = encode_blk([_quantized_frame(128, 128)])
        # 10-byte file header + one 8-byte image header; stored offset is 4 less
        assert struct.unpack_from("<I", data, 10)[0] == 18 - 4
        assert len(data) == 18 + 128 * 128 * 2

    def test_roundtrip(self):
        frames = [_quantized_frame(128, 128, seed=i) for i in range(2)]
        decoded = decode_blk(encode_blk(frames, cols=2, rows=1))

        assert len(decoded) == 2
        for original, result in zip(frames, decoded):
            assert np.array_equal(original, result)

    def test_always_opaque(self):
        frame = np.zeros((128, 128, 4), dtype=np.uint8)
        (decoded,) = decode_blk(encode_blk([frame]))
        assert (decoded[..., 3] == 255).all()

    def test_tile_count_mismatch(self):
        with pytest.raises(InvalidImageDimensions, match="does not match"):
            encode_blk([_quantized_frame(128, 128)], cols=2, rows=2)

    def test_stitch_column_major(self):
        frames = []
        for i in range(4):
            frame = np.zeros((128, 128, 4), dtype=np.uint8)
            frame[..., 0] = i * 8
            frame[..., 3] = 255
            frames.append(frame)

        image = stitch_background(frames, cols=2, rows=2)

        assert image.shape == (256, 256, 4)
        assert image[0, 0, 0] == 0
        assert image[128, 0, 0] == 8  # second tile goes below the first
        assert image[0, 128, 0] == 16
        assert image[128, 128, 0] == 24

    def test_split_inverts_stitch(self):
        frames = [_quantized_frame(128, 128, seed=i) for i in range(6)]
        tiles, cols, rows = split_background(stitch_background(frames, cols=3, rows=2))

        assert (cols, rows) == (3, 2)
        for original, tile in zip(frames, tiles):
            assert np.array_equal(original, tile)

    def test_background_roundtrip(self):
        image = _quantized_frame(256, 384)
        decoded = decode_blk_background(encode_blk_background(image))
        assert np.array_equal(image, decoded)

    def test_background_size_must_divide(self):
        with pytest.raises(InvalidImageDimensions, match="multiple of 128"):
            split_background(np.zeros((100, 128, 4), dtype=np.uint8))

    def test_stats(self):
        frames = [_quantized_frame(128, 128)] * 2
        stats = get_sprite_stats("room.blk", encode_blk(frames, cols=1, rows=2))

        assert stats["format"] == "blk"
        assert stats["cols"] == 1
        assert stats["rows"] == 2
        assert stats["frame_sizes"] == [(128, 128), (128, 128)]


class TestS16:
    """Test S16 sprites."""

    def test_black_is_transparent(self):
        data = struct.pack("<IH", 3, 1) + struct.pack("<IHH", 14, 3, 1)
        data += struct.pack("<3H", 0x0000, 0xFFFF, 0x0001)
        (frame,) = decode_s16(data)

        assert tuple(frame[0, 0]) == (0, 0, 0, 0)
        assert tuple(frame[0, 1]) == WHITE_565
        assert tuple(frame[0, 2]) == (0, 0, 8, 255)

    def test_555(self):
        data = struct.pack("<IH", 2, 1) + struct.pack("<IHH", 14, 1, 1)
        data += struct.pack("<H", 0x7FFF)
        (frame,) = decode_s16(data)
        assert tuple(frame[0, 0]) == (248, 248, 248, 255)

    def test_roundtrip(self):
        frames = [_quantized_frame(5, 7, seed=1, transparent=True), _quantized_frame(3, 2, seed=2)]
        for frame in frames:
            # Opaque black would come back transparent
            black = (frame[..., :3] == 0).all(axis=-1)
            frame[black] = 0

        decoded = decode_s16(encode_s16(frames))

        assert len(decoded) == 2
        for original, result in zip(frames, decoded):
            assert np.array_equal(original, result)

    def test_transparent_written_as_black(self):
        frame = np.full((1, 1, 4), 200, dtype=np.uint8)
        frame[..., 3] = 0
        data = encode_s16([frame])
        assert data[-2:] == b"\x00\x00"

    def test_pixel_data_cut_short(self):
        data = struct.pack("<IH", 3, 1) + struct.pack("<IHH", 14, 2, 1) + b"\xff\xff"
        with pytest.raises(InvalidPixelData):
            decode_s16(data)

    def test_header_cut_short(self):
        with pytest.raises(TruncatedInput):
            decode_s16(struct.pack("<IH", 3, 1) + b"\x00\x00")

    def test_bad_frame_shape(self):
        with pytest.raises(InvalidImageDimensions):
            encode_s16([np.zeros((2, 2), dtype=np.uint8)])


class TestC16:
    """Test C16 run-length sprites."""

    def test_two_frames(self):
        frames = decode_c16(_two_frame_c16())

        assert len(frames) == 2
        row = frames[0][0]
        for x in range(4):
            assert tuple(row[x]) == (0, 0, 0, 0)
        for x in range(4, 8):
            assert tuple(row[x]) == WHITE_565

        assert frames[1].shape == (2, 2, 4)
        assert tuple(frames[1][0, 0]) == (0, 0, 248, 255)
        assert tuple(frames[1][1, 1]) == (0, 0, 0, 0)

    def test_stats(self):
        stats = get_sprite_stats("ball.c16", _two_frame_c16())
        assert stats["pixel_format"] == "565"
        assert stats["frame_count"] == 2
        assert stats["frame_sizes"] == [(8, 1), (2, 2)]

    def test_runs_short_of_width(self):
        data = _single_line_c16(4, [(1, 0), (2, 1)])
        with pytest.raises(InvalidPixelData, match="ends at x=3"):
            decode_c16(data)

    def test_runs_past_width(self):
        data = _single_line_c16(4, [(2, 0), (3, 1)])
        with pytest.raises(InvalidPixelData, match="overruns"):
            decode_c16(data)

    def test_runs_exact_width(self):
        (frame,) = decode_c16(_single_line_c16(4, [(2, 0), (2, 1)]))
        assert frame.shape == (1, 4, 4)

    def test_colour_run_cut_short(self):
        data = _single_line_c16(4, [(4, 1)])
        with pytest.raises(InvalidPixelData, match="cut short"):
            decode_c16(data[:16])

    def test_header_cut_short(self):
        with pytest.raises(TruncatedInput):
            decode_c16(struct.pack("<IH", 3, 1))

    def test_encoded_layout(self):
        frame = np.zeros((1, 3, 4), dtype=np.uint8)
        frame[0, 1:] = WHITE_565
        data = encode_c16([frame])

        assert data[:14] == struct.pack("<IHIHH", 3, 1, 14, 3, 1)
        assert data[14:] == struct.pack("<6H", 1 << 1, (2 << 1) | 1, 0xFFFF, 0xFFFF, 0, 0)

    def test_long_runs_split(self):
        frame = np.zeros((1, 40000, 4), dtype=np.uint8)
        data = encode_c16([frame])

        assert data[14:] == struct.pack("<4H", 32767 << 1, 7233 << 1, 0, 0)
        (decoded,) = decode_c16(data)
        assert decoded.shape == (1, 40000, 4)

    def test_roundtrip(self):
        frames = [
            _quantized_frame(6, 9, seed=3, transparent=True),
            _quantized_frame(1, 1, seed=4),
            _quantized_frame(4, 3, seed=5, transparent=True),
        ]
        decoded = decode_c16(encode_c16(frames))

        assert len(decoded) == 3
        for original, result in zip(frames, decoded):
            assert np.array_equal(original, result)

    def test_555_roundtrip(self):
        frame = np.zeros((2, 2, 4), dtype=np.uint8)
        frame[0, 0] = (248, 248, 248, 255)
        frame[1, 1] = (8, 16, 24, 255)
        (decoded,) = decode_c16(encode_c16([frame], pixel_format=2))
        assert np.array_equal(frame, decoded)

    def test_partial_alpha_is_opaque(self):
        frame = np.zeros((1, 1, 4), dtype=np.uint8)
        frame[0, 0] = (248, 252, 248, 10)
        (decoded,) = decode_c16(encode_c16([frame]))
        assert tuple(decoded[0, 0]) == WHITE_565

    def test_rgb_input(self):
        frame = _quantized_frame(2, 2)[..., :3]
        (decoded,) = decode_c16(encode_c16([frame]))
        assert (decoded[..., 3] == 255).all()

    def test_no_frames(self):
        data = encode_c16([])
        assert data == struct.pack("<IH", 3, 0)
        assert decode_c16(data) == []


class TestDispatch:
    """Test extension-based codec selection."""

    def test_decode_by_extension(self):
        frames = decode_sprite("BALL.C16", _two_frame_c16())
        assert len(frames) == 2

    def test_encode_by_extension(self):
        frame = _quantized_frame(2, 2)
        assert encode_sprite("ball.s16", [frame]) == encode_s16([frame])
        assert encode_sprite("ball.c16", [frame]) == encode_c16([frame])

    def test_unsupported(self):
        with pytest.raises(UnsupportedFileType):
            decode_sprite("ball.png", b"")
        with pytest.raises(UnsupportedFileType):
            encode_sprite("ball.png", [])
        with pytest.raises(UnsupportedFileType):
            get_sprite_stats("ball.wav", b"")
