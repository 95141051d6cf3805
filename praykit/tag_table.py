"""
Length-prefixed int/string key/value table embedded in PRAY tag blocks.

Layout (little-endian):
- int_count (uint32), then per entry: name_len (uint32), name, value (uint32)
- str_count (uint32), then per entry: name_len (uint32), name,
  value_len (uint32), value

Strings have no padding and no terminator. On read, NUL bytes inside a
string are dropped rather than ending it. Duplicate names on read keep the
last value. On write, entries go out in exactly the order given.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Sequence, Tuple, Union

from praykit.binary import ByteReader, encode_string, pack_u32

IntValues = Sequence[Tuple[str, int]]
StrValues = Sequence[Tuple[str, str]]


@dataclass
class TagTable:
    """Decoded key/value table. Lookup only; key order is not kept."""
    int_values: Dict[str, int] = field(default_factory=dict)
    str_values: Dict[str, str] = field(default_factory=dict)

    def get_int(self, name: str, default: int = 0) -> int:
        return self.int_values.get(name, default)

    def get_str(self, name: str, default: str = "") -> str:
        return self.str_values.get(name, default)

    def get_dependencies(self) -> List[str]:
        """Filenames listed as "Dependency 1" .. "Dependency <Dependency Count>"."""
        dependencies = []
        for i in range(1, self.get_int("Dependency Count") + 1):
            dependency = self.str_values.get(f"Dependency {i}")
            if dependency is not None:
                dependencies.append(dependency)
        return dependencies


def read_tag_table(source: Union[bytes, ByteReader]) -> TagTable:
    """
    Read a tag table.

    Args:
        source: Table bytes, or a reader positioned at the table

    Returns:
        TagTable with int and string values

    Raises:
        TruncatedInput: If the buffer ends mid-entry
    """
    reader = source if isinstance(source, ByteReader) else ByteReader(source)
    table = TagTable()

    int_count = reader.read_u32("the integer value count")
    for _ in range(int_count):
        name_len = reader.read_u32("an integer value name length")
        name = reader.read_string(name_len, "an integer value name")
        table.int_values[name] = reader.read_u32(f"the value of \"{name}\"")

    str_count = reader.read_u32("the string value count")
    for _ in range(str_count):
        name_len = reader.read_u32("a string value name length")
        name = reader.read_string(name_len, "a string value name")
        value_len = reader.read_u32(f"the length of \"{name}\"")
        table.str_values[name] = reader.read_string(value_len, f"the value of \"{name}\"")

    return table


def write_tag_table(int_values: IntValues, str_values: StrValues) -> bytes:
    """Serialize ordered (name, value) pairs as a tag table."""
    buffer = bytearray()

    buffer += pack_u32(len(int_values))
    for name, value in int_values:
        raw_name = encode_string(name)
        buffer += pack_u32(len(raw_name))
        buffer += raw_name
        buffer += pack_u32(value, f"the value of \"{name}\"")

    buffer += pack_u32(len(str_values))
    for name, value in str_values:
        raw_name = encode_string(name)
        raw_value = encode_string(value)
        buffer += pack_u32(len(raw_name))
        buffer += raw_name
        buffer += pack_u32(len(raw_value))
        buffer += raw_value

    return bytes(buffer)
