"""
praykit - Read and write Creatures agent files and sprites.

.agent / .agents files are PRAY archives with:
- Tag blocks: AGNT / DSAG (agents), EGGS (eggs), DSGB (garden boxes)
- FILE blocks for sprites, sounds, genetics, body data and catalogues
- Scripts (.cos) inlined into their tag blocks

Sprites come in three 16-bit raster formats: BLK, S16 and C16.
"""

__version__ = "0.1.0"

from praykit.errors import (
    PrayError,
    InvalidMagic,
    TruncatedInput,
    DecompressionFailure,
    InvalidImageDimensions,
    InvalidPixelData,
    UnsupportedFileType,
    ValueOutOfRange,
)
from praykit.records import (
    AgentTag,
    EggTag,
    GardenBoxTag,
    FileRecord,
    GenericBlock,
    GameSupport,
    Language,
    Description,
    GardenBoxCategory,
)
from praykit.pray import decode, encode
from praykit.archive import Archive
from praykit.sprites import decode_sprite, encode_sprite
from praykit.package import read_agent_file, write_agent_file, get_agent_info, validate_agent_file

__all__ = [
    "PrayError",
    "InvalidMagic",
    "TruncatedInput",
    "DecompressionFailure",
    "InvalidImageDimensions",
    "InvalidPixelData",
    "UnsupportedFileType",
    "ValueOutOfRange",
    "AgentTag",
    "EggTag",
    "GardenBoxTag",
    "FileRecord",
    "GenericBlock",
    "GameSupport",
    "Language",
    "Description",
    "GardenBoxCategory",
    "decode",
    "encode",
    "Archive",
    "decode_sprite",
    "encode_sprite",
    "read_agent_file",
    "write_agent_file",
    "get_agent_info",
    "validate_agent_file",
]
