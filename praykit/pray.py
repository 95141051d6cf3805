"""
PRAY container codec.

File format:
- Magic: "PRAY" (4 bytes)
- Blocks until end of input, each:
  - Block id (4 bytes, e.g. "AGNT", "DSAG", "EGGS", "DSGB", "FILE")
  - Block name (128 bytes, NUL-padded)
  - Compressed size (uint32)
  - Uncompressed size (uint32)
  - Compressed flag (uint32, 1 = zlib)
  - Payload (compressed size bytes)

Tag blocks are written uncompressed; FILE blocks and pass-through blocks
are always zlib-compressed. Any error aborts the whole decode or encode.
"""

import zlib
from dataclasses import dataclass
from typing import Iterator, List, Sequence

from praykit.binary import ByteReader, pack_u32, pad_string
from praykit.errors import DecompressionFailure, InvalidMagic
from praykit.records import Block, FileRecord, GenericBlock, TAG_TYPES
from praykit.tag_blocks import TAG_BLOCK_IDS, read_tag_block, write_tag_block

# Constants
MAGIC = b"PRAY"
BLOCK_ID_SIZE = 4
BLOCK_NAME_SIZE = 128
BLOCK_HEADER_SIZE = BLOCK_ID_SIZE + BLOCK_NAME_SIZE + 12
FILE_BLOCK_ID = "FILE"
COMPRESSION_LEVEL = 9


@dataclass
class BlockHeader:
    """Fixed 144-byte header in front of every block."""
    id: str
    name: str
    size_compressed: int
    size_uncompressed: int
    is_compressed: bool = False


def read_block_header(reader: ByteReader) -> BlockHeader:
    """Read a block header. NUL bytes in the name are dropped."""
    block_id = reader.read_string(BLOCK_ID_SIZE, "a block id").upper()
    name = reader.read_string(BLOCK_NAME_SIZE, "a block name")
    size_compressed = reader.read_u32("a block size")
    size_uncompressed = reader.read_u32("a block size")
    is_compressed = reader.read_u32("a block compression flag") == 1
    return BlockHeader(block_id, name, size_compressed, size_uncompressed, is_compressed)


def write_block_header(header: BlockHeader) -> bytes:
    """Serialize a block header. Names are cut to 127 bytes to keep a NUL."""
    buffer = bytearray()
    buffer += pad_string(header.id, BLOCK_ID_SIZE)
    buffer += pad_string(header.name, BLOCK_NAME_SIZE - 1) + b"\x00"
    buffer += pack_u32(header.size_compressed)
    buffer += pack_u32(header.size_uncompressed)
    buffer += pack_u32(1 if header.is_compressed else 0)
    return bytes(buffer)


def compress_block_contents(contents: bytes) -> bytes:
    return zlib.compress(contents, COMPRESSION_LEVEL)


def decompress_block_contents(contents: bytes, header: BlockHeader) -> bytes:
    try:
        return zlib.decompress(contents)
    except zlib.error as e:
        raise DecompressionFailure(
            f"Block \"{header.name}\" ({header.id}) is not valid zlib data: {e}"
        ) from e


def read_block_contents(reader: ByteReader, header: BlockHeader) -> bytes:
    """Read a block's payload, inflating it when the header says it is compressed."""
    contents = reader.read_bytes(
        header.size_compressed, f"the contents of block \"{header.name}\""
    )
    if header.is_compressed:
        contents = decompress_block_contents(contents, header)
    return contents


def read_magic(reader: ByteReader) -> None:
    magic = reader.data[:len(MAGIC)]
    if magic != MAGIC:
        raise InvalidMagic(f"Invalid magic: {magic!r}, expected {MAGIC!r}")
    reader.seek(len(MAGIC))


def read_block(reader: ByteReader) -> List[Block]:
    """
    Read one block and decode it by id.

    Tag blocks with inline scripts return several records (the scripts
    first, then the tag); every other block returns exactly one.
    """
    header = read_block_header(reader)
    contents = read_block_contents(reader, header)

    if header.id == FILE_BLOCK_ID:
        return [FileRecord.from_filename(header.name, contents)]
    if header.id in TAG_BLOCK_IDS:
        return read_tag_block(header.id, header.name, contents)
    return [GenericBlock(header.id, header.name, contents)]


def decode(data: bytes) -> List[Block]:
    """
    Decode a PRAY archive.

    Args:
        data: Complete archive bytes

    Returns:
        Blocks in file order

    Raises:
        InvalidMagic: If the data does not start with "PRAY"
        TruncatedInput: If a header or payload is cut short
        DecompressionFailure: If a compressed payload is not valid zlib
    """
    reader = ByteReader(data)
    read_magic(reader)

    blocks: List[Block] = []
    while not reader.at_end():
        blocks.extend(read_block(reader))
    return blocks


def iter_block_headers(data: bytes) -> Iterator[BlockHeader]:
    """Walk the block headers of an archive without decoding payloads."""
    reader = ByteReader(data)
    read_magic(reader)
    while not reader.at_end():
        header = read_block_header(reader)
        reader.read_bytes(header.size_compressed, f"the contents of block \"{header.name}\"")
        yield header


def write_block(block_id: str, name: str, contents: bytes, compress: bool) -> bytes:
    payload = compress_block_contents(contents) if compress else contents
    header = BlockHeader(
        id=block_id,
        name=name,
        size_compressed=len(payload),
        size_uncompressed=len(contents),
        is_compressed=compress,
    )
    return write_block_header(header) + payload


def write_file_block(record: FileRecord) -> bytes:
    return write_block(FILE_BLOCK_ID, record.filename, record.data, compress=True)


def write_generic_block(block: GenericBlock) -> bytes:
    return write_block(block.id, block.name, block.data, compress=True)


def encode(tags: Sequence[Block], files: Sequence[FileRecord]) -> bytes:
    """
    Encode tags and their file pool as a PRAY archive.

    Args:
        tags: Blocks in output order (normally tags; FileRecords and
              GenericBlocks here are written as their own blocks)
        files: File pool the tags' dependency names are resolved against

    Returns:
        Archive bytes. Scripts (.cos) are inlined in their tags and never
        written as FILE blocks.
    """
    buffer = bytearray(MAGIC)

    for tag in tags:
        if isinstance(tag, TAG_TYPES):
            block_id, contents = write_tag_block(tag, files)
            buffer += write_block(block_id, tag.name, contents, compress=False)
        elif isinstance(tag, FileRecord):
            buffer += write_file_block(tag)
        elif isinstance(tag, GenericBlock):
            buffer += write_generic_block(tag)
        else:
            raise TypeError(f"Cannot encode block: {tag!r}")

    for record in files:
        if not record.is_script:
            buffer += write_file_block(record)

    return bytes(buffer)
