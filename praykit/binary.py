"""
Little-endian byte reading and writing shared by the PRAY and sprite codecs.

Strings on the wire are fixed-length byte runs. Reading keeps every byte
except 0x00 (NULs are dropped wherever they appear, not treated as
terminators) and maps each remaining byte to one character (latin-1), so a
read-then-write cycle is byte-preserving for anything without NULs.
"""

import struct
from typing import Union

from praykit.errors import TruncatedInput, ValueOutOfRange

STRING_ENCODING = "latin-1"


class ByteReader:
    """Cursor over an in-memory buffer. Every read checks the remaining length."""

    def __init__(self, data: Union[bytes, bytearray, memoryview], offset: int = 0):
        self.data = bytes(data)
        self.offset = offset

    @property
    def remaining(self) -> int:
        return max(len(self.data) - self.offset, 0)

    def at_end(self) -> bool:
        return self.offset >= len(self.data)

    def seek(self, offset: int) -> None:
        self.offset = offset

    def read_bytes(self, count: int, what: str = "data") -> bytes:
        if count < 0 or self.remaining < count:
            raise TruncatedInput(
                f"Input ends in the middle of {what} at offset {self.offset} "
                f"(need {count} bytes, {self.remaining} left)"
            )
        chunk = self.data[self.offset:self.offset + count]
        self.offset += count
        return chunk

    def read_u16(self, what: str = "a 16-bit integer") -> int:
        return struct.unpack("<H", self.read_bytes(2, what))[0]

    def read_u32(self, what: str = "a 32-bit integer") -> int:
        return struct.unpack("<I", self.read_bytes(4, what))[0]

    def read_string(self, length: int, what: str = "a string") -> str:
        return decode_string(self.read_bytes(length, what))


def decode_string(raw: bytes) -> str:
    """Decode a wire string, dropping every NUL byte."""
    return raw.replace(b"\x00", b"").decode(STRING_ENCODING)


def encode_string(value: str) -> bytes:
    return value.encode(STRING_ENCODING, errors="replace")


def pad_string(value: str, size: int) -> bytes:
    """Encode ``value`` into exactly ``size`` bytes, NUL-padded or cut short."""
    raw = encode_string(value)[:size]
    return raw + b"\x00" * (size - len(raw))


def pack_u16(value: int, what: str = "a 16-bit integer") -> bytes:
    if not 0 <= value <= 0xFFFF:
        raise ValueOutOfRange(f"{what} must be between 0 and 65535, got {value}")
    return struct.pack("<H", value)


def pack_u32(value: int, what: str = "a 32-bit integer") -> bytes:
    if not 0 <= value <= 0xFFFFFFFF:
        raise ValueOutOfRange(f"{what} must be between 0 and 4294967295, got {value}")
    return struct.pack("<I", value)
