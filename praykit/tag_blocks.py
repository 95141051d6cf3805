"""
Semantic codecs for the tag blocks of a PRAY archive.

Each tag block's payload is a tag table (see ``praykit.tag_table``). Decoding
reads named keys into an AgentTag, EggTag or GardenBoxTag; encoding builds
the int/string lists in a fixed order so the output is reproducible.

Scripts are stored inline in agent and garden box tables ("Script 1" ..
"Script <Script Count>"). On decode they come back as ".cos" FileRecords
placed before their tag, and their filenames are added to the tag's
dependency list. On encode, the tag's ".cos" dependencies are inlined again
and every other dependency is listed with a category computed from its
extension.
"""

from typing import List, Optional, Sequence, Tuple

from praykit.binary import decode_string, encode_string
from praykit.records import (
    AgentTag,
    Block,
    Description,
    EggTag,
    FileRecord,
    GameSupport,
    GardenBoxTag,
    Language,
    SCRIPT_EXTENSION,
    Tag,
    dependency_category,
    file_stem,
)
from praykit.tag_table import TagTable, read_tag_table, write_tag_table

AGENT_BLOCK_IDS = {
    "AGNT": GameSupport.CREATURES_3,
    "DSAG": GameSupport.DOCKING_STATION,
}
EGG_BLOCK_ID = "EGGS"
GARDEN_BOX_BLOCK_ID = "DSGB"
TAG_BLOCK_IDS = tuple(AGENT_BLOCK_IDS) + (EGG_BLOCK_ID, GARDEN_BOX_BLOCK_ID)

GENETICS_EXTENSION = "gen"

IntList = List[Tuple[str, int]]
StrList = List[Tuple[str, str]]


def read_scripts(table: TagTable, block_name: str) -> List[FileRecord]:
    """Inline scripts as .cos files named after the block ("Name", "Name 2", ...)."""
    scripts = []
    for i in range(1, table.get_int("Script Count") + 1):
        text = table.str_values.get(f"Script {i}")
        if text is None:
            continue
        name = block_name if i == 1 else f"{block_name} {i}"
        scripts.append(FileRecord(name, SCRIPT_EXTENSION, encode_string(text)))
    return scripts


def read_descriptions(table: TagTable) -> List[Description]:
    return [
        Description(language, table.str_values[language.description_key])
        for language in Language
        if language.description_key in table.str_values
    ]


def genetics_file_name(value: Optional[str]) -> str:
    """Table genetics value ("name*") to a filename ("name.gen"). Empty stays empty."""
    stem = (value or "").rstrip("*")
    if not stem:
        return ""
    return f"{stem}.{GENETICS_EXTENSION}"


def read_animation_gallery(table: TagTable, animation_file: str) -> str:
    """Gallery name, or "" when it is just the animation file's stem."""
    gallery = table.get_str("Agent Animation Gallery")
    return "" if gallery == file_stem(animation_file) else gallery


def read_agent_block(payload: bytes, name: str, game_support: GameSupport) -> List[Block]:
    """
    Decode an AGNT or DSAG payload.

    Returns:
        The block's scripts as FileRecords, followed by the AgentTag
    """
    table = read_tag_table(payload)
    scripts = read_scripts(table, name)
    animation_file = table.get_str("Agent Animation File")

    dependencies = table.get_dependencies()
    dependencies.extend(script.filename for script in scripts)

    agent = AgentTag(
        name=name,
        game_support=game_support,
        descriptions=read_descriptions(table),
        bioenergy=table.get_int("Agent Bioenergy Value"),
        web_label=table.get_str("Web Label"),
        web_url=table.get_str("Web URL"),
        animation_file=animation_file,
        animation_gallery=read_animation_gallery(table, animation_file),
        animation_string=table.get_str("Agent Animation String"),
        sprite_first_image=table.get_int("Agent Sprite First Image"),
        remove_script=table.get_str("Remove script"),
        dependencies=dependencies,
    )
    return [*scripts, agent]


def read_egg_block(payload: bytes, name: str) -> List[Block]:
    """Decode an EGGS payload."""
    table = read_tag_table(payload)
    egg = EggTag(
        name=name,
        genetics_file=genetics_file_name(table.str_values.get("Genetics File")),
        genetics_file_mother=genetics_file_name(table.str_values.get("Mother Genetic File")),
        genetics_file_father=genetics_file_name(table.str_values.get("Father Genetic File")),
        sprite_file_male=table.get_str("Egg Glyph File"),
        sprite_file_female=table.get_str("Egg Glyph File 2"),
        animation_string=table.get_str("Egg Animation String"),
        dependencies=table.get_dependencies(),
    )
    return [egg]


def read_garden_box_block(payload: bytes, name: str) -> List[Block]:
    """
    Decode a DSGB payload.

    Returns:
        The block's scripts as FileRecords, followed by the GardenBoxTag
    """
    table = read_tag_table(payload)
    scripts = read_scripts(table, name)

    dependencies = table.get_dependencies()
    dependencies.extend(script.filename for script in scripts)

    garden_box = GardenBoxTag(
        name=name,
        description=table.get_str("Agent Description"),
        author=table.get_str("Agent Author"),
        category=table.get_int("GB_Category"),
        animation_file=table.get_str("Agent Animation File"),
        sprite_first_image=table.get_int("Agent Sprite First Image"),
        remove_script=table.get_str("Remove script"),
        dependencies=dependencies,
    )
    return [*scripts, garden_box]


def read_tag_block(block_id: str, name: str, payload: bytes) -> List[Block]:
    """Decode any tag block by id. The id must be one of TAG_BLOCK_IDS."""
    if block_id in AGENT_BLOCK_IDS:
        return read_agent_block(payload, name, AGENT_BLOCK_IDS[block_id])
    if block_id == EGG_BLOCK_ID:
        return read_egg_block(payload, name)
    if block_id == GARDEN_BOX_BLOCK_ID:
        return read_garden_box_block(payload, name)
    raise ValueError(f"Not a tag block id: {block_id}")


def select_tag_files(
    dependencies: Sequence[str],
    files: Sequence[FileRecord],
) -> Tuple[List[FileRecord], List[FileRecord]]:
    """
    Pick the pool files a tag refers to, in pool order.

    Returns:
        Tuple of (scripts, other dependencies)
    """
    wanted = set(dependencies)
    scripts = []
    others = []
    for record in files:
        if record.filename not in wanted:
            continue
        if record.is_script:
            scripts.append(record)
        else:
            others.append(record)
    return scripts, others


def write_dependencies(int_values: IntList, str_values: StrList, dependencies: Sequence[FileRecord]) -> None:
    int_values.append(("Dependency Count", len(dependencies)))
    for i, dependency in enumerate(dependencies, 1):
        str_values.append((f"Dependency {i}", dependency.filename))
        int_values.append((f"Dependency Category {i}", dependency_category(dependency.filename)))


def write_scripts(int_values: IntList, str_values: StrList, scripts: Sequence[FileRecord]) -> None:
    int_values.append(("Script Count", len(scripts)))
    for i, script in enumerate(scripts, 1):
        str_values.append((f"Script {i}", decode_string(script.data)))


def agent_table_values(agent: AgentTag, files: Sequence[FileRecord]) -> Tuple[IntList, StrList]:
    scripts, dependencies = select_tag_files(agent.dependencies, files)
    int_values: IntList = [("Agent Type", 0)]
    str_values: StrList = []

    str_values.append(("Agent Animation Gallery", agent.animation_gallery or file_stem(agent.animation_file)))
    str_values.append(("Agent Animation File", agent.animation_file))
    str_values.append(("Agent Animation String", agent.animation_string))

    if agent.game_support is GameSupport.CREATURES_3:
        int_values.append(("Agent Bioenergy Value", agent.bioenergy))
    else:
        int_values.append(("Agent Sprite First Image", agent.sprite_first_image))
        str_values.append(("Web Label", agent.web_label))
        str_values.append(("Web URL", agent.web_url))
        for description in agent.descriptions:
            str_values.append((description.language.description_key, description.text))

    write_dependencies(int_values, str_values, dependencies)
    str_values.append(("Remove script", agent.remove_script))
    write_scripts(int_values, str_values, scripts)
    return int_values, str_values


def egg_table_values(egg: EggTag, files: Sequence[FileRecord]) -> Tuple[IntList, StrList]:
    _scripts, dependencies = select_tag_files(egg.dependencies, files)
    int_values: IntList = [("Agent Type", 0)]
    str_values: StrList = []

    str_values.append(("Egg Gallery male", file_stem(egg.sprite_file_male)))
    str_values.append(("Egg Glyph File", egg.sprite_file_male))
    str_values.append(("Egg Gallery female", file_stem(egg.sprite_file_female)))
    str_values.append(("Egg Glyph File 2", egg.sprite_file_female))
    str_values.append(("Egg Animation String", egg.animation_string))

    # The game expects genetics as "<moniker>*"
    str_values.append(("Genetics File", _genetics_title(egg.genetics_file)))
    str_values.append(("Mother Genetic File", _genetics_title(egg.genetics_file_mother)))
    str_values.append(("Father Genetic File", _genetics_title(egg.genetics_file_father)))

    write_dependencies(int_values, str_values, dependencies)
    return int_values, str_values


def _genetics_title(filename: str) -> str:
    stem = file_stem(filename)
    return f"{stem}*" if stem else ""


def garden_box_table_values(garden_box: GardenBoxTag, files: Sequence[FileRecord]) -> Tuple[IntList, StrList]:
    scripts, dependencies = select_tag_files(garden_box.dependencies, files)
    int_values: IntList = [("Agent Type", 0)]
    str_values: StrList = []

    str_values.append(("Agent Description", garden_box.description))
    str_values.append(("Agent Author", garden_box.author))
    int_values.append(("GB_Category", int(garden_box.category)))

    if file_stem(garden_box.animation_file):
        str_values.append(("Agent Animation Gallery", file_stem(garden_box.animation_file)))
        str_values.append(("Agent Animation File", garden_box.animation_file))
        int_values.append(("Agent Sprite First Image", garden_box.sprite_first_image))

    write_dependencies(int_values, str_values, dependencies)
    str_values.append(("Remove script", garden_box.remove_script))
    write_scripts(int_values, str_values, scripts)
    return int_values, str_values


def tag_block_id(tag: Tag) -> str:
    if isinstance(tag, AgentTag):
        return tag.game_support.block_id
    if isinstance(tag, EggTag):
        return EGG_BLOCK_ID
    if isinstance(tag, GardenBoxTag):
        return GARDEN_BOX_BLOCK_ID
    raise TypeError(f"Not a tag: {tag!r}")


def tag_table_values(tag: Tag, files: Sequence[FileRecord]) -> Tuple[IntList, StrList]:
    """Ordered int and string values for a tag, resolved against the file pool."""
    if isinstance(tag, AgentTag):
        return agent_table_values(tag, files)
    if isinstance(tag, EggTag):
        return egg_table_values(tag, files)
    if isinstance(tag, GardenBoxTag):
        return garden_box_table_values(tag, files)
    raise TypeError(f"Not a tag: {tag!r}")


def write_tag_block(tag: Tag, files: Sequence[FileRecord]) -> Tuple[str, bytes]:
    """
    Encode a tag's table payload.

    Returns:
        Tuple of (block id, tag table bytes)
    """
    int_values, str_values = tag_table_values(tag, files)
    return tag_block_id(tag), write_tag_table(int_values, str_values)
