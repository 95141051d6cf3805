"""
Record types for the contents of a PRAY archive.

An archive decodes to an ordered list of blocks, each one of:
- AgentTag (AGNT for Creatures 3, DSAG for Docking Station)
- EggTag (EGGS)
- GardenBoxTag (DSGB)
- FileRecord (FILE)
- GenericBlock (any other block id, kept verbatim)

Tags refer to files by filename only; the files themselves live in the
archive's file pool.
"""

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from pathlib import PurePosixPath
from typing import Any, Dict, List, Optional, Tuple, Union
import json

# Dependency Category values written next to each "Dependency i" entry
DEPENDENCY_CATEGORIES = {
    "wav": 1,  # Sounds
    "mng": 1,
    "c16": 2,  # Images
    "s16": 2,
    "gen": 3,  # Genetics
    "gno": 3,
    "att": 4,  # Body Data
    "blk": 6,  # Backgrounds
    "catalogue": 7,  # Catalogue
}
DEFAULT_DEPENDENCY_CATEGORY = 0  # main game directory

SCRIPT_EXTENSION = "cos"


def split_filename(filename: str) -> Tuple[str, str]:
    """
    Split "name.ext" at the last dot.

    Returns (filename, "") when there is no extension, so "readme", ".hidden"
    and "foo." all compose back to themselves.
    """
    stem, dot, extension = filename.rpartition(".")
    if not dot or not stem or not extension:
        return filename, ""
    return stem, extension


def base_filename(filename: str) -> str:
    """Last path component, with either slash style treated as a separator."""
    return PurePosixPath(filename.replace("\\", "/")).name


def file_stem(filename: str) -> str:
    return split_filename(filename)[0] if filename else ""


def dependency_category(filename: str) -> int:
    """Category number the game uses to decide where a dependency is installed."""
    extension = split_filename(filename)[1].lower()
    return DEPENDENCY_CATEGORIES.get(extension, DEFAULT_DEPENDENCY_CATEGORY)


class FileRecord:
    """
    A file stored in the archive (sprite, sound, script, genetics, ...).

    Two records are the same file when their composed filenames match.
    """

    def __init__(self, name: str, extension: str, data: bytes = b""):
        self.name = name
        self.extension = extension
        self.data = bytes(data)

    @classmethod
    def from_filename(cls, filename: str, data: bytes = b"") -> "FileRecord":
        """Build a record from a filename. Directory parts ("../", "C:\\") are dropped."""
        name, extension = split_filename(base_filename(filename))
        return cls(name, extension, data)

    @property
    def filename(self) -> str:
        if not self.extension:
            return self.name
        return f"{self.name}.{self.extension}"

    @property
    def is_script(self) -> bool:
        return self.extension == SCRIPT_EXTENSION

    @property
    def category(self) -> int:
        return dependency_category(self.filename)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FileRecord):
            return NotImplemented
        return self.filename == other.filename

    def __hash__(self) -> int:
        return hash(self.filename)

    def __repr__(self) -> str:
        return f"FileRecord({self.filename!r}, {len(self.data)} bytes)"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "filename": self.filename,
            "size": len(self.data),
            "category": self.category,
        }


@dataclass
class GenericBlock:
    """A block of unknown type, carried through with its decompressed payload."""
    id: str
    name: str
    data: bytes = b""

    def to_dict(self) -> Dict[str, Any]:
        return {"type": "generic", "id": self.id, "name": self.name, "size": len(self.data)}


class GameSupport(Enum):
    """Which game an agent tag targets; selects the AGNT or DSAG block id."""
    CREATURES_3 = "Creatures3"
    DOCKING_STATION = "DockingStation"

    @property
    def block_id(self) -> str:
        return "AGNT" if self is GameSupport.CREATURES_3 else "DSAG"


class Language(Enum):
    """Description languages, valued by their "Agent Description" key suffix."""
    ENGLISH = ""
    GERMAN = "-de"
    SPANISH = "-es"
    FRENCH = "-fr"
    ITALIAN = "-it"
    DUTCH = "-nl"

    @property
    def description_key(self) -> str:
        return f"Agent Description{self.value}"


class GardenBoxCategory(IntEnum):
    PATCH_PLANT = 1
    TRADITIONAL_PLANT = 2
    ANIMAL = 3
    AQUATIC_PLANT = 4
    AQUATIC_ANIMAL = 5
    DECORATION = 6
    TOOLS = 7
    MISC = 8


@dataclass
class Description:
    language: Language = Language.ENGLISH
    text: str = ""


@dataclass
class AgentTag:
    """
    Agent injector entry (AGNT / DSAG block).

    Bioenergy only exists for Creatures 3; web label/url, sprite first image
    and descriptions only for Docking Station. An empty animation gallery
    means the stem of the animation file.
    """
    name: str = "Agent"
    game_support: GameSupport = GameSupport.DOCKING_STATION
    descriptions: List[Description] = field(default_factory=list)
    bioenergy: int = 0
    web_label: str = ""
    web_url: str = ""
    animation_file: str = ""
    animation_gallery: str = ""
    animation_string: str = ""
    sprite_first_image: int = 0
    remove_script: str = ""
    dependencies: List[str] = field(default_factory=list)

    def description(self, language: Language = Language.ENGLISH) -> Optional[str]:
        for description in self.descriptions:
            if description.language is language:
                return description.text
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "type": "agent",
            "name": self.name,
            "game_support": self.game_support.value,
            "descriptions": [
                {"language": d.language.name.lower(), "text": d.text}
                for d in self.descriptions
            ],
            "bioenergy": self.bioenergy,
            "web_label": self.web_label,
            "web_url": self.web_url,
            "animation_file": self.animation_file,
            "animation_gallery": self.animation_gallery,
            "animation_string": self.animation_string,
            "sprite_first_image": self.sprite_first_image,
            "remove_script": self.remove_script,
            "dependencies": list(self.dependencies),
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "AgentTag":
        """Create AgentTag from dictionary."""
        descriptions = [
            Description(Language[item.get("language", "english").upper()], item.get("text", ""))
            for item in d.get("descriptions", [])
        ]
        return cls(
            name=d.get("name", "Agent"),
            game_support=GameSupport(d.get("game_support", GameSupport.DOCKING_STATION.value)),
            descriptions=descriptions,
            bioenergy=d.get("bioenergy", 0),
            web_label=d.get("web_label", ""),
            web_url=d.get("web_url", ""),
            animation_file=d.get("animation_file", ""),
            animation_gallery=d.get("animation_gallery", ""),
            animation_string=d.get("animation_string", ""),
            sprite_first_image=d.get("sprite_first_image", 0),
            remove_script=d.get("remove_script", ""),
            dependencies=list(d.get("dependencies", [])),
        )


@dataclass
class EggTag:
    """Egg entry (EGGS block). Genetics filenames carry their ".gen" extension."""
    name: str = "Egg"
    genetics_file: str = ""
    genetics_file_mother: str = ""
    genetics_file_father: str = ""
    sprite_file_male: str = ""
    sprite_file_female: str = ""
    animation_string: str = ""
    dependencies: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "type": "egg",
            "name": self.name,
            "genetics_file": self.genetics_file,
            "genetics_file_mother": self.genetics_file_mother,
            "genetics_file_father": self.genetics_file_father,
            "sprite_file_male": self.sprite_file_male,
            "sprite_file_female": self.sprite_file_female,
            "animation_string": self.animation_string,
            "dependencies": list(self.dependencies),
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "EggTag":
        """Create EggTag from dictionary."""
        return cls(
            name=d.get("name", "Egg"),
            genetics_file=d.get("genetics_file", ""),
            genetics_file_mother=d.get("genetics_file_mother", ""),
            genetics_file_father=d.get("genetics_file_father", ""),
            sprite_file_male=d.get("sprite_file_male", ""),
            sprite_file_female=d.get("sprite_file_female", ""),
            animation_string=d.get("animation_string", ""),
            dependencies=list(d.get("dependencies", [])),
        )


@dataclass
class GardenBoxTag:
    """Garden box entry (DSGB block)."""
    name: str = "Garden Box"
    description: str = ""
    author: str = ""
    category: int = GardenBoxCategory.PATCH_PLANT
    animation_file: str = ""
    sprite_first_image: int = 0
    remove_script: str = ""
    dependencies: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "type": "garden_box",
            "name": self.name,
            "description": self.description,
            "author": self.author,
            "category": int(self.category),
            "animation_file": self.animation_file,
            "sprite_first_image": self.sprite_first_image,
            "remove_script": self.remove_script,
            "dependencies": list(self.dependencies),
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "GardenBoxTag":
        """Create GardenBoxTag from dictionary."""
        return cls(
            name=d.get("name", "Garden Box"),
            description=d.get("description", ""),
            author=d.get("author", ""),
            category=d.get("category", GardenBoxCategory.PATCH_PLANT),
            animation_file=d.get("animation_file", ""),
            sprite_first_image=d.get("sprite_first_image", 0),
            remove_script=d.get("remove_script", ""),
            dependencies=list(d.get("dependencies", [])),
        )


Tag = Union[AgentTag, EggTag, GardenBoxTag]
Block = Union[AgentTag, EggTag, GardenBoxTag, FileRecord, GenericBlock]

TAG_TYPES = (AgentTag, EggTag, GardenBoxTag)

_TAG_LOADERS = {
    "agent": AgentTag.from_dict,
    "egg": EggTag.from_dict,
    "garden_box": GardenBoxTag.from_dict,
}


def tag_from_dict(d: Dict[str, Any]) -> Tag:
    """Create the right tag record from a dictionary with a "type" key."""
    tag_type = d.get("type")
    if tag_type not in _TAG_LOADERS:
        raise ValueError(f"Unknown tag type: {tag_type}")
    return _TAG_LOADERS[tag_type](d)


def tags_to_json(tags: List[Tag], indent: int = 2) -> str:
    """Serialize tags to a JSON string."""
    return json.dumps([tag.to_dict() for tag in tags], indent=indent)


def tags_from_json(json_str: str) -> List[Tag]:
    """Create tags from a JSON string."""
    return [tag_from_dict(d) for d in json.loads(json_str)]
