"""
Sprite codecs for the three Creatures raster formats: BLK, S16 and C16.

Frames are numpy arrays of shape [height, width, 4] (RGBA, uint8). All
integers are little-endian, and every offset stored in a sprite file is
absolute from the start of that file's bytes.

BLK (backgrounds):
- Header: pixel_format (uint32), cols (uint16), rows (uint16), image_count (uint16)
- Per image: offset - 4 (uint32), width (uint16), height (uint16)
- Every frame is a 128 x 128 tile; pixels row-major, 2 bytes each, opaque
- Tiles are ordered column by column when assembled into the background

S16:
- Header: pixel_format (uint32), image_count (uint16)
- Per image: offset (uint32), width (uint16), height (uint16)
- Pixels row-major, 2 bytes each; a pixel that decodes to black is transparent

C16:
- Header: pixel_format (uint32), image_count (uint16)
- Per image: first line offset (uint32), width (uint16), height (uint16),
  then height - 1 more line offsets (uint32)
- Each scanline is a sequence of runs: header (uint16) where bit 0 is the
  run type (0 = transparent, 1 = colour) and the upper 15 bits the length;
  colour runs are followed by their pixels
- Sum of run lengths in a scanline must equal the frame width
- Encoded lines end with a 0 run header, and each image with one more
"""

from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from praykit.binary import ByteReader, pack_u16, pack_u32
from praykit.errors import (
    InvalidImageDimensions,
    InvalidPixelData,
    UnsupportedFileType,
)
from praykit.pixel import PIXEL_FORMAT_565, decode_pixels, encode_pixels, is_555

# Constants
BLK_TILE_SIZE = 128
BLK_OFFSET_BIAS = 4
MAX_RUN_LENGTH = 0x7FFF
MAX_FRAME_SIDE = 0xFFFF
SPRITE_EXTENSIONS = ("blk", "s16", "c16")

RUN_TRANSPARENT = 0
RUN_COLOUR = 1


def _read_pixel_block(
    data: bytes,
    offset: int,
    width: int,
    height: int,
    pixel_format: int,
) -> np.ndarray:
    """Read width * height packed pixels starting at an absolute offset."""
    count = width * height
    if count == 0:
        return np.zeros((height, width, 4), dtype=np.uint8)

    end = offset + count * 2
    if offset > len(data) or end > len(data):
        raise InvalidPixelData(
            f"Frame of {width}x{height} at offset {offset} needs {count * 2} bytes, "
            f"only {max(len(data) - offset, 0)} available"
        )

    packed = np.frombuffer(data, dtype="<u2", count=count, offset=offset)
    return decode_pixels(packed.reshape(height, width), pixel_format)


def _as_rgba(frame: np.ndarray) -> np.ndarray:
    """Normalize a frame to a [height, width, 4] uint8 array."""
    frame = np.asarray(frame)
    if frame.ndim != 3 or frame.shape[2] not in (3, 4):
        raise InvalidImageDimensions(
            f"Frame must have shape [height, width, 3 or 4], got {frame.shape}"
        )

    height, width = frame.shape[:2]
    if height > MAX_FRAME_SIDE or width > MAX_FRAME_SIDE:
        raise InvalidImageDimensions(f"Frame of {width}x{height} is too large")

    frame = frame.astype(np.uint8, copy=False)
    if frame.shape[2] == 3:
        alpha = np.full((height, width, 1), 255, dtype=np.uint8)
        frame = np.concatenate([frame, alpha], axis=2)
    return frame


def _pack_frame(frame: np.ndarray, pixel_format: int) -> bytes:
    """Pack a frame row-major, writing transparent pixels as 0x0000."""
    packed = encode_pixels(frame, pixel_format)
    packed[frame[..., 3] == 0] = 0
    return packed.astype("<u2").tobytes()


# ---------------------------------------------------------------------------
# BLK
# ---------------------------------------------------------------------------

def read_blk_header(data: bytes) -> Tuple[int, int, int, List[int]]:
    """
    Read a BLK file and image headers.

    Returns:
        Tuple of (pixel_format, cols, rows, tile_offsets) where the offsets
        already include the +4 bias

    Raises:
        InvalidImageDimensions: If any frame is not 128 x 128
        TruncatedInput: If the headers are cut short
    """
    reader = ByteReader(data)
    pixel_format = reader.read_u32("the BLK file header")
    cols = reader.read_u16("the BLK file header")
    rows = reader.read_u16("the BLK file header")
    image_count = reader.read_u16("the BLK file header")

    offsets = []
    for index in range(image_count):
        offset = reader.read_u32(f"BLK image header {index}") + BLK_OFFSET_BIAS
        width = reader.read_u16(f"BLK image header {index}")
        height = reader.read_u16(f"BLK image header {index}")
        if width != BLK_TILE_SIZE or height != BLK_TILE_SIZE:
            raise InvalidImageDimensions(
                f"Frame {index} is {width}x{height}. "
                f"All frames in a BLK file must be {BLK_TILE_SIZE} x {BLK_TILE_SIZE} px."
            )
        offsets.append(offset)

    return pixel_format, cols, rows, offsets


def decode_blk(data: bytes) -> List[np.ndarray]:
    """
    Decode every tile of a BLK file.

    Args:
        data: Complete BLK file bytes

    Returns:
        List of [128, 128, 4] RGBA frames, all fully opaque
    """
    pixel_format, _cols, _rows, offsets = read_blk_header(data)
    return [
        _read_pixel_block(data, offset, BLK_TILE_SIZE, BLK_TILE_SIZE, pixel_format)
        for offset in offsets
    ]


def encode_blk(
    frames: Sequence[np.ndarray],
    cols: Optional[int] = None,
    rows: Optional[int] = None,
    pixel_format: int = PIXEL_FORMAT_565,
) -> bytes:
    """
    Encode 128 x 128 tiles as a BLK file.

    Args:
        frames: Tiles in file order (column by column)
        cols: Background width in tiles (defaults to the number of frames)
        rows: Background height in tiles (defaults to 1)
        pixel_format: 2 for 555, 3 for 565

    Returns:
        BLK file bytes
    """
    frames = [_as_rgba(frame) for frame in frames]
    for index, frame in enumerate(frames):
        if frame.shape[:2] != (BLK_TILE_SIZE, BLK_TILE_SIZE):
            raise InvalidImageDimensions(
                f"Frame {index} is {frame.shape[1]}x{frame.shape[0]}. "
                f"All frames in a BLK file must be {BLK_TILE_SIZE} x {BLK_TILE_SIZE} px."
            )

    if cols is None and rows is None:
        cols, rows = len(frames), 1
    elif cols is None:
        cols = len(frames) // rows if rows else 0
    elif rows is None:
        rows = len(frames) // cols if cols else 0
    if cols * rows != len(frames):
        raise InvalidImageDimensions(
            f"{cols} x {rows} tiles does not match {len(frames)} frames"
        )

    header = bytearray()
    header += pack_u32(pixel_format)
    header += pack_u16(cols)
    header += pack_u16(rows)
    header += pack_u16(len(frames))

    data_offset = len(header) + 8 * len(frames)
    tile_size = BLK_TILE_SIZE * BLK_TILE_SIZE * 2
    payload = bytearray()
    for index, frame in enumerate(frames):
        header += pack_u32(data_offset + index * tile_size - BLK_OFFSET_BIAS)
        header += pack_u16(BLK_TILE_SIZE)
        header += pack_u16(BLK_TILE_SIZE)
        # BLK has no transparency: every pixel is written with its colour
        payload += encode_pixels(frame, pixel_format).astype("<u2").tobytes()

    return bytes(header + payload)


def stitch_background(frames: Sequence[np.ndarray], cols: int, rows: int) -> np.ndarray:
    """
    Assemble BLK tiles into one background image.

    Tiles run top to bottom within a column, then left to right.
    """
    if cols * rows != len(frames):
        raise InvalidImageDimensions(
            f"{cols} x {rows} tiles does not match {len(frames)} frames"
        )

    image = np.zeros((rows * BLK_TILE_SIZE, cols * BLK_TILE_SIZE, 4), dtype=np.uint8)
    for index, frame in enumerate(frames):
        col, row = divmod(index, rows)
        y = row * BLK_TILE_SIZE
        x = col * BLK_TILE_SIZE
        image[y:y + BLK_TILE_SIZE, x:x + BLK_TILE_SIZE] = _as_rgba(frame)
    return image


def split_background(image: np.ndarray) -> Tuple[List[np.ndarray], int, int]:
    """
    Cut a background image into BLK tiles.

    Returns:
        Tuple of (tiles in column order, cols, rows)
    """
    image = _as_rgba(image)
    height, width = image.shape[:2]
    if height % BLK_TILE_SIZE or width % BLK_TILE_SIZE:
        raise InvalidImageDimensions(
            f"Background of {width}x{height} is not a multiple of {BLK_TILE_SIZE} px"
        )

    cols = width // BLK_TILE_SIZE
    rows = height // BLK_TILE_SIZE
    tiles = []
    for col in range(cols):
        for row in range(rows):
            y = row * BLK_TILE_SIZE
            x = col * BLK_TILE_SIZE
            tiles.append(image[y:y + BLK_TILE_SIZE, x:x + BLK_TILE_SIZE].copy())
    return tiles, cols, rows


def decode_blk_background(data: bytes) -> np.ndarray:
    """Decode a BLK file straight to its assembled background image."""
    _pixel_format, cols, rows, _offsets = read_blk_header(data)
    return stitch_background(decode_blk(data), cols, rows)


def encode_blk_background(image: np.ndarray, pixel_format: int = PIXEL_FORMAT_565) -> bytes:
    """Encode a whole background image as a BLK file."""
    tiles, cols, rows = split_background(image)
    return encode_blk(tiles, cols=cols, rows=rows, pixel_format=pixel_format)


# ---------------------------------------------------------------------------
# S16
# ---------------------------------------------------------------------------

def _read_s16_headers(data: bytes) -> Tuple[int, List[Tuple[int, int, int]]]:
    reader = ByteReader(data)
    pixel_format = reader.read_u32("the S16 file header")
    image_count = reader.read_u16("the S16 file header")

    headers = []
    for index in range(image_count):
        offset = reader.read_u32(f"S16 image header {index}")
        width = reader.read_u16(f"S16 image header {index}")
        height = reader.read_u16(f"S16 image header {index}")
        headers.append((offset, width, height))
    return pixel_format, headers


def decode_s16(data: bytes) -> List[np.ndarray]:
    """
    Decode every frame of an S16 file.

    Black is the colour key: any pixel whose RGB decodes to (0, 0, 0) gets
    alpha 0, including pixels that were meant to be opaque black.
    """
    pixel_format, headers = _read_s16_headers(data)

    frames = []
    for offset, width, height in headers:
        frame = _read_pixel_block(data, offset, width, height, pixel_format)
        black = (frame[..., :3] == 0).all(axis=-1)
        frame[black, 3] = 0
        frames.append(frame)
    return frames


def encode_s16(frames: Sequence[np.ndarray], pixel_format: int = PIXEL_FORMAT_565) -> bytes:
    """Encode frames as an S16 file. Transparent pixels are written as black."""
    frames = [_as_rgba(frame) for frame in frames]

    header = bytearray()
    header += pack_u32(pixel_format)
    header += pack_u16(len(frames))

    data_offset = len(header) + 8 * len(frames)
    payload = bytearray()
    for frame in frames:
        height, width = frame.shape[:2]
        header += pack_u32(data_offset + len(payload))
        header += pack_u16(width)
        header += pack_u16(height)
        payload += _pack_frame(frame, pixel_format)

    return bytes(header + payload)


# ---------------------------------------------------------------------------
# C16
# ---------------------------------------------------------------------------

def _read_c16_headers(data: bytes) -> Tuple[int, List[Tuple[int, int, List[int]]]]:
    reader = ByteReader(data)
    pixel_format = reader.read_u32("the C16 file header")
    image_count = reader.read_u16("the C16 file header")

    headers = []
    for index in range(image_count):
        what = f"C16 image header {index}"
        line_offsets = [reader.read_u32(what)]
        width = reader.read_u16(what)
        height = reader.read_u16(what)
        for _ in range(max(height - 1, 0)):
            line_offsets.append(reader.read_u32(what))
        headers.append((width, height, line_offsets[:height]))
    return pixel_format, headers


def _decode_c16_line(
    data: bytes,
    offset: int,
    width: int,
    pixel_format: int,
    y: int,
) -> np.ndarray:
    """Run-length decode one scanline into a [width, 4] array."""
    line = np.zeros((width, 4), dtype=np.uint8)
    reader = ByteReader(data, offset)

    x = 0
    while x < width:
        run_header = reader.read_u16(f"a run header in scanline {y}")
        run_type = run_header & 0x1
        run_length = run_header >> 1

        if run_length == 0:
            raise InvalidPixelData(
                f"Scanline {y} ends at x={x}, expected {width} pixels"
            )
        if x + run_length > width:
            raise InvalidPixelData(
                f"Run of {run_length} at x={x} overruns scanline {y} of width {width}"
            )

        if run_type == RUN_COLOUR:
            if reader.remaining < run_length * 2:
                raise InvalidPixelData(
                    f"Scanline {y} colour run of {run_length} at x={x} is cut short"
                )
            packed = np.frombuffer(reader.read_bytes(run_length * 2), dtype="<u2")
            line[x:x + run_length] = decode_pixels(packed, pixel_format)

        x += run_length

    return line


def decode_c16(data: bytes) -> List[np.ndarray]:
    """
    Decode every frame of a C16 file.

    Raises:
        InvalidPixelData: If a scanline's runs do not add up to the frame width
        TruncatedInput: If a header or run header is cut short
    """
    pixel_format, headers = _read_c16_headers(data)

    frames = []
    for width, height, line_offsets in headers:
        frame = np.zeros((height, width, 4), dtype=np.uint8)
        for y, line_offset in enumerate(line_offsets):
            frame[y] = _decode_c16_line(data, line_offset, width, pixel_format, y)
        frames.append(frame)
    return frames


def _encode_rle_row(row: np.ndarray) -> list:
    """
    Encode a 1D boolean array as RLE runs.

    Args:
        row: 1D boolean array

    Returns:
        List of (run_length, value) tuples
    """
    if len(row) == 0:
        return []

    runs = []
    current_value = int(row[0])
    run_length = 1

    for i in range(1, len(row)):
        value = int(row[i])
        if value == current_value:
            run_length += 1
        else:
            runs.append((run_length, current_value))
            current_value = value
            run_length = 1

    runs.append((run_length, current_value))
    return runs


def _encode_c16_line(row: np.ndarray, pixel_format: int) -> bytes:
    """Encode one [width, 4] scanline, including its terminating 0 header."""
    packed = encode_pixels(row, pixel_format).astype("<u2")
    opaque = row[:, 3] != 0

    out = bytearray()
    x = 0
    for run_length, value in _encode_rle_row(opaque):
        # Split long runs (run_length max is 32767)
        remaining = run_length
        while remaining > 0:
            chunk = min(remaining, MAX_RUN_LENGTH)
            out += pack_u16((chunk << 1) | value)
            if value == RUN_COLOUR:
                out += packed[x:x + chunk].tobytes()
            x += chunk
            remaining -= chunk

    out += pack_u16(0)
    return bytes(out)


def encode_c16(frames: Sequence[np.ndarray], pixel_format: int = PIXEL_FORMAT_565) -> bytes:
    """
    Encode frames as a C16 file.

    Pixels with alpha 0 become transparent runs; every other pixel is written
    as colour (partial alpha is treated as opaque).
    """
    frames = [_as_rgba(frame) for frame in frames]

    header_size = 6 + sum(8 + 4 * max(frame.shape[0] - 1, 0) for frame in frames)

    header = bytearray()
    header += pack_u32(pixel_format)
    header += pack_u16(len(frames))

    payload = bytearray()
    for frame in frames:
        height, width = frame.shape[:2]
        line_offsets = []
        for y in range(height):
            line_offsets.append(header_size + len(payload))
            payload += _encode_c16_line(frame[y], pixel_format)
        payload += pack_u16(0)

        header += pack_u32(line_offsets[0] if line_offsets else header_size + len(payload))
        header += pack_u16(width)
        header += pack_u16(height)
        for line_offset in line_offsets[1:]:
            header += pack_u32(line_offset)

    return bytes(header + payload)


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------

DECODERS = {
    "blk": decode_blk,
    "s16": decode_s16,
    "c16": decode_c16,
}

ENCODERS = {
    "blk": encode_blk,
    "s16": encode_s16,
    "c16": encode_c16,
}


def sprite_extension(filename: str) -> str:
    """Lower-cased extension of a filename, or the argument itself if it has none."""
    return filename.rsplit(".", 1)[-1].lower()


def decode_sprite(filename: str, data: bytes) -> List[np.ndarray]:
    """
    Decode a sprite file, choosing the codec from its extension.

    Args:
        filename: File name ("ball.c16") or bare extension ("c16")
        data: Sprite file bytes

    Returns:
        List of RGBA frames
    """
    extension = sprite_extension(filename)
    if extension not in DECODERS:
        raise UnsupportedFileType(f"\"{filename}\" is not a supported sprite type")
    return DECODERS[extension](data)


def encode_sprite(
    filename: str,
    frames: Sequence[np.ndarray],
    pixel_format: int = PIXEL_FORMAT_565,
) -> bytes:
    """Encode frames to the sprite format named by ``filename``'s extension."""
    extension = sprite_extension(filename)
    if extension not in ENCODERS:
        raise UnsupportedFileType(f"\"{filename}\" is not a supported sprite type")
    return ENCODERS[extension](frames, pixel_format=pixel_format)


def get_sprite_stats(filename: str, data: bytes) -> Dict:
    """
    Summarize a sprite file from its headers, without decoding pixels.

    Args:
        filename: File name or bare extension
        data: Sprite file bytes

    Returns:
        Dict with format, pixel format, frame count and frame sizes
    """
    extension = sprite_extension(filename)
    if extension == "blk":
        pixel_format, cols, rows, offsets = read_blk_header(data)
        sizes = [(BLK_TILE_SIZE, BLK_TILE_SIZE)] * len(offsets)
        extra = {"cols": cols, "rows": rows}
    elif extension == "s16":
        pixel_format, headers = _read_s16_headers(data)
        sizes = [(width, height) for _offset, width, height in headers]
        extra = {}
    elif extension == "c16":
        pixel_format, headers = _read_c16_headers(data)
        sizes = [(width, height) for width, height, _offsets in headers]
        extra = {}
    else:
        raise UnsupportedFileType(f"\"{filename}\" is not a supported sprite type")

    stats = {
        "format": extension,
        "pixel_format": "555" if is_555(pixel_format) else "565",
        "frame_count": len(sizes),
        "frame_sizes": sizes,
    }
    stats.update(extra)
    return stats
