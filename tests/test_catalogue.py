"""Tests for catalogue.py - agent help catalogue files."""

from praykit.archive import Archive
from praykit.catalogue import CatalogueEntry, build_catalogue


class TestBuildCatalogue:
    """Test catalogue rendering."""

    def test_single_entry(self):
        data = build_catalogue([CatalogueEntry("2 21 1000", "Ball", "A bouncy ball")])
        assert data == b'TAG "Agent Help 2 21 1000"\n"Ball"\n"A bouncy ball"\n\n'

    def test_multiple_entries(self):
        data = build_catalogue([
            CatalogueEntry("2 21 1000", "Ball"),
            CatalogueEntry("2 21 1001", "Bat", "Hits balls"),
        ])
        lines = data.decode("latin-1").split("\n")

        assert lines[0] == 'TAG "Agent Help 2 21 1000"'
        assert lines[2] == '""'
        assert lines[4] == 'TAG "Agent Help 2 21 1001"'

    def test_empty(self):
        assert build_catalogue([]) == b""

    def test_added_to_archive(self):
        archive = Archive()
        record = archive.add_file("ball.catalogue", build_catalogue([CatalogueEntry("2 21 1000", "Ball")]))
        assert record.category == 7
