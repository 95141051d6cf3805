"""Tests for archive.py - in-memory archive editing."""

import pytest

from praykit.archive import Archive, new_agent_tag, new_egg_tag, new_garden_box_tag
from praykit.errors import UnsupportedFileType
from praykit.records import (
    AgentTag, EggTag, GardenBoxTag, FileRecord, GenericBlock, Language,
)


def _ball_archive():
    agent = AgentTag(name="Ball", animation_file="ball.c16", dependencies=["ball.c16", "ball.wav", "Ball.cos"])
    return Archive.from_blocks([
        FileRecord("ball", "wav", b"RIFF"),
        agent,
        FileRecord("ball", "c16", b"c16"),
        FileRecord("Ball", "cos", b"inst"),
    ])


class TestFromBlocks:
    """Test splitting decoded blocks into tags and a file pool."""

    def test_split_and_sort(self):
        archive = _ball_archive()

        assert [tag.name for tag in archive.tags] == ["Ball"]
        assert archive.filenames == ["Ball.cos", "ball.c16", "ball.wav"]

    def test_sort_order(self):
        names = ["a.att", "a.wav", "a.mng", "a.s16", "a.c16", "a.blk",
                 "a.catalogue", "a.gno", "a.gen", "a.cos", "a.txt"]
        archive = Archive.from_blocks([FileRecord.from_filename(n) for n in names])
        assert archive.filenames == list(reversed(names[:-1])) + ["a.txt"]

    def test_sort_by_name_within_kind(self):
        archive = Archive.from_blocks([FileRecord("b", "c16"), FileRecord("a", "c16")])
        assert archive.filenames == ["a.c16", "b.c16"]

    def test_duplicate_first_wins(self):
        archive = Archive.from_blocks([
            FileRecord("ball", "c16", b"first"),
            FileRecord("ball", "c16", b"second"),
        ])
        assert len(archive.files) == 1
        assert archive.get_file("ball.c16").data == b"first"

    def test_generic_blocks_are_tags(self):
        block = GenericBlock("LIVE", "creature", b"")
        archive = Archive.from_blocks([block])
        assert archive.tags == [block]

    def test_bytes_roundtrip(self):
        archive = _ball_archive()
        again = Archive.from_bytes(archive.to_bytes())

        assert again.to_dict() == archive.to_dict()
        assert again.get_file("ball.wav").data == b"RIFF"


class TestFilePool:
    """Test adding and removing pool files."""

    def test_add_file(self):
        archive = Archive()
        record = archive.add_file("Ball.C16", b"data")

        assert record.filename == "Ball.c16"
        assert archive.filenames == ["Ball.c16"]

    def test_add_unsupported(self):
        with pytest.raises(UnsupportedFileType, match="ball.png"):
            Archive().add_file("ball.png", b"")

    def test_add_duplicate(self):
        archive = _ball_archive()
        assert archive.add_file("ball.c16", b"other") is None
        assert archive.get_file("ball.c16").data == b"c16"

    def test_add_to_tag(self):
        archive = _ball_archive()
        archive.add_file("bounce.wav", b"RIFF", tag_index=0)

        assert "bounce.wav" in archive.tags[0].dependencies
        assert archive.filenames[-1] == "bounce.wav"

    def test_remove_clears_fields(self):
        archive = _ball_archive()
        archive.remove_files(["ball.c16"])

        agent = archive.tags[0]
        assert "ball.c16" not in archive.filenames
        assert agent.animation_file == ""
        assert agent.dependencies == ["ball.wav", "Ball.cos"]

    def test_remove_clears_egg_fields(self):
        egg = EggTag(genetics_file="norn.gen", sprite_file_male="egg.c16", dependencies=["norn.gen"])
        archive = Archive(tags=[egg], files=[FileRecord("norn", "gen"), FileRecord("egg", "c16")])
        archive.remove_files(["norn.gen"])

        assert egg.genetics_file == ""
        assert egg.sprite_file_male == "egg.c16"
        assert egg.dependencies == []

    def test_checked_files(self):
        archive = _ball_archive()
        assert archive.checked_files(archive.tags[0]) == [0, 1, 2]
        assert archive.checked_files(GenericBlock("LIVE", "x")) == []

    def test_missing_dependencies(self):
        archive = _ball_archive()
        archive.tags[0].dependencies.append("gone.s16")
        assert archive.missing_dependencies() == [("Ball", "gone.s16")]


class TestTagEditing:
    """Test tag list operations."""

    def test_new_tags(self):
        agent = new_agent_tag()
        assert agent.name == "Agent"
        assert agent.description(Language.ENGLISH) == ""
        assert new_egg_tag().name == "Egg"
        assert new_garden_box_tag().name == "Garden Box"

    def test_add_tag(self):
        archive = Archive()
        assert archive.add_tag(new_egg_tag()) == 0
        assert archive.add_tag(new_garden_box_tag()) == 1

    def test_duplicate_tag(self):
        archive = _ball_archive()
        archive.add_tag(new_egg_tag())
        index = archive.duplicate_tag(0)

        assert index == 1
        assert [tag.name for tag in archive.tags] == ["Ball", "Ball Copy", "Egg"]
        archive.tags[1].dependencies.append("extra.wav")
        assert "extra.wav" not in archive.tags[0].dependencies

    def test_remove_tag(self):
        archive = _ball_archive()
        archive.remove_tag(0)
        assert archive.tags == []
        assert len(archive.files) == 3

    def test_set_tag_dependencies(self):
        archive = _ball_archive()
        archive.set_tag_dependencies(0, ["ball.wav"])
        assert archive.tags[0].dependencies == ["ball.wav"]

    def test_set_dependencies_on_generic(self):
        archive = Archive(tags=[GenericBlock("LIVE", "x")])
        with pytest.raises(TypeError):
            archive.set_tag_dependencies(0, [])

    def test_garden_box_dependencies_encode(self):
        archive = Archive()
        archive.add_tag(GardenBoxTag(name="Plant"))
        archive.add_file("plant.c16", b"x", tag_index=0)

        again = Archive.from_bytes(archive.to_bytes())
        assert again.tags[0].dependencies == ["plant.c16"]
