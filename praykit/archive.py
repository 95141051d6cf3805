"""
In-memory editing model for an agent archive.

An Archive keeps the tag blocks (in order) separate from the file pool.
Tags point at pool files by filename; the pool is kept sorted by file kind
then name, which is also the order dependencies are written in.
"""

import copy
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from praykit.errors import UnsupportedFileType
from praykit.pray import decode, encode
from praykit.records import (
    AgentTag,
    Block,
    Description,
    EggTag,
    FileRecord,
    GardenBoxTag,
    GenericBlock,
    Language,
    TAG_TYPES,
    base_filename,
    split_filename,
)

SUPPORTED_EXTENSIONS = (
    "cos", "wav", "mng", "c16", "s16", "blk", "gen", "gno", "att", "catalogue",
)

FILE_SORT_ORDER = {
    "cos": 0,
    "gen": 1,
    "gno": 2,
    "catalogue": 3,
    "blk": 4,
    "c16": 5,
    "s16": 6,
    "mng": 7,
    "wav": 8,
    "att": 9,
}


def file_sort_key(record: FileRecord) -> Tuple[int, str]:
    return FILE_SORT_ORDER.get(record.extension, len(FILE_SORT_ORDER)), record.name


def new_agent_tag() -> AgentTag:
    return AgentTag(
        name="Agent",
        descriptions=[Description(Language.ENGLISH, "")],
    )


def new_egg_tag() -> EggTag:
    return EggTag(name="Egg")


def new_garden_box_tag() -> GardenBoxTag:
    return GardenBoxTag(name="Garden Box")


@dataclass
class Archive:
    """Tags in order plus the pool of files they depend on."""
    tags: List[Block] = field(default_factory=list)
    files: List[FileRecord] = field(default_factory=list)

    @classmethod
    def from_blocks(cls, blocks: Sequence[Block]) -> "Archive":
        """
        Build an archive from decoded blocks.

        FILE records go to the pool (the first record wins when a filename
        repeats); everything else stays in the tag list in order.
        """
        archive = cls()
        seen = set()
        for block in blocks:
            if isinstance(block, FileRecord):
                if block.filename not in seen:
                    seen.add(block.filename)
                    archive.files.append(block)
            else:
                archive.tags.append(block)
        archive.sort_files()
        return archive

    @classmethod
    def from_bytes(cls, data: bytes) -> "Archive":
        return cls.from_blocks(decode(data))

    def to_bytes(self) -> bytes:
        return encode(self.tags, self.files)

    @property
    def filenames(self) -> List[str]:
        return [record.filename for record in self.files]

    def get_file(self, filename: str) -> Optional[FileRecord]:
        for record in self.files:
            if record.filename == filename:
                return record
        return None

    def sort_files(self) -> None:
        self.files.sort(key=file_sort_key)

    def add_file(
        self,
        filename: str,
        data: bytes,
        tag_index: Optional[int] = None,
    ) -> Optional[FileRecord]:
        """
        Add a file to the pool.

        Args:
            filename: File name; the extension is lower-cased
            data: File contents
            tag_index: If given, the file is also added to that tag's dependencies

        Returns:
            The new FileRecord, or None if a file with that name already exists

        Raises:
            UnsupportedFileType: If the extension is not one agents can carry
        """
        name, extension = split_filename(base_filename(filename))
        extension = extension.lower()
        if extension not in SUPPORTED_EXTENSIONS:
            raise UnsupportedFileType(f"\"{name}.{extension}\" is not a supported file type")

        record = FileRecord(name, extension, data)
        if self.get_file(record.filename) is not None:
            return None

        self.files.append(record)
        self.sort_files()

        if tag_index is not None:
            tag = self.tags[tag_index]
            if isinstance(tag, TAG_TYPES) and record.filename not in tag.dependencies:
                tag.dependencies.append(record.filename)
        return record

    def remove_files(self, filenames: Sequence[str]) -> None:
        """
        Remove files from the pool.

        Tag fields that point at a removed file (animation file, egg genetics
        and glyph files) are cleared, and the filenames are dropped from
        every tag's dependency list.
        """
        removed = set(filenames)
        self.files = [record for record in self.files if record.filename not in removed]
        present = set(self.filenames)

        for tag in self.tags:
            if isinstance(tag, (AgentTag, GardenBoxTag)):
                if tag.animation_file and tag.animation_file not in present:
                    tag.animation_file = ""
            elif isinstance(tag, EggTag):
                for attr in (
                    "genetics_file",
                    "genetics_file_mother",
                    "genetics_file_father",
                    "sprite_file_male",
                    "sprite_file_female",
                ):
                    if getattr(tag, attr) and getattr(tag, attr) not in present:
                        setattr(tag, attr, "")
            if isinstance(tag, TAG_TYPES):
                tag.dependencies = [d for d in tag.dependencies if d not in removed]

    def checked_files(self, tag: Block) -> List[int]:
        """Pool indices of the files a tag depends on."""
        if not isinstance(tag, TAG_TYPES):
            return []
        wanted = set(tag.dependencies)
        return [i for i, record in enumerate(self.files) if record.filename in wanted]

    def set_tag_dependencies(self, tag_index: int, filenames: Sequence[str]) -> None:
        tag = self.tags[tag_index]
        if not isinstance(tag, TAG_TYPES):
            raise TypeError(f"Block {tag_index} is not a tag")
        tag.dependencies = list(filenames)

    def add_tag(self, tag: Block) -> int:
        self.tags.append(tag)
        return len(self.tags) - 1

    def duplicate_tag(self, index: int) -> int:
        """Insert a copy of a tag right after it, named "<name> Copy"."""
        tag_copy = copy.deepcopy(self.tags[index])
        if isinstance(tag_copy, (AgentTag, EggTag, GardenBoxTag, GenericBlock)):
            tag_copy.name = f"{tag_copy.name} Copy"
        self.tags.insert(index + 1, tag_copy)
        return index + 1

    def remove_tag(self, index: int) -> None:
        del self.tags[index]

    def missing_dependencies(self) -> List[Tuple[str, str]]:
        """(tag name, filename) for every dependency that is not in the pool."""
        present = set(self.filenames)
        missing = []
        for tag in self.tags:
            if not isinstance(tag, TAG_TYPES):
                continue
            for filename in tag.dependencies:
                if filename not in present:
                    missing.append((tag.name, filename))
        return missing

    def to_dict(self) -> Dict:
        return {
            "tags": [tag.to_dict() for tag in self.tags],
            "files": [record.to_dict() for record in self.files],
        }
