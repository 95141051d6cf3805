"""Catalogue file generation for agent help text."""

from dataclasses import dataclass
from typing import Sequence

from praykit.binary import encode_string


@dataclass
class CatalogueEntry:
    """One "Agent Help" entry; classifier is the "family genus species" string."""
    classifier: str
    name: str
    description: str = ""


def build_catalogue(entries: Sequence[CatalogueEntry]) -> bytes:
    """
    Render catalogue entries as a .catalogue file.

    Example:
        >>> build_catalogue([CatalogueEntry("2 21 1000", "Ball", "A ball")])
        b'TAG "Agent Help 2 21 1000"\\n"Ball"\\n"A ball"\\n\\n'
    """
    contents = ""
    for entry in entries:
        contents += (
            f"TAG \"Agent Help {entry.classifier}\"\n"
            f"\"{entry.name}\"\n"
            f"\"{entry.description}\"\n\n"
        )
    return encode_string(contents)
