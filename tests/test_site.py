"""Tests for the site loader."""

import logging
from pathlib import Path

import pytest

from doxygen_navindex.models import NavigationNode, NavigationTree
from doxygen_navindex.parser import DataFileError
from doxygen_navindex.site import DoxygenSite


def test_site_requires_directory(tmp_path: Path) -> None:
    """Test that a missing directory raises ValueError."""
    with pytest.raises(ValueError, match="Documentation path does not exist"):
        DoxygenSite(tmp_path / "nonexistent")


def test_site_requires_navigation_file(tmp_path: Path) -> None:
    """Test that a directory without navtreedata.js raises ValueError."""
    with pytest.raises(ValueError, match="No navtreedata.js"):
        DoxygenSite(tmp_path)


def test_load_navigation(sample_site: Path) -> None:
    """Test loading the navigation tables."""
    data = DoxygenSite(sample_site).load_navigation()

    assert [node.label for node in data.tree] == ["demo"]
    assert list(data.index) == ["group__parser.html"]
    assert data.sync_off_message == "click to enable panel synchronisation"


def test_expand_inlines_subindex(sample_site: Path, caplog: pytest.LogCaptureFixture) -> None:
    """Test that sub-index references are replaced with their children."""
    site = DoxygenSite(sample_site)

    with caplog.at_level(logging.WARNING):
        tree = site.expand(site.load_navigation().tree)

    topics = tree.node_at((0, 1))
    assert topics == NavigationNode(
        "Topics", "topics.html", children=(NavigationNode("Parser", "group__parser.html"),)
    )
    missing = tree.node_at((0, 2))
    assert missing is not None
    assert missing.subindex == "nowhere"
    assert "nowhere.js not found" in caplog.text


def test_expand_nested_subindexes(sample_site: Path) -> None:
    """Test that sub-indexes inside sub-indexes are inlined too."""
    (sample_site / "topics.js").write_text(
        'var topics =\n[\n  [ "Parser", "group__parser.html", "group__parser" ]\n];\n'
    )
    (sample_site / "group__parser.js").write_text(
        'var group__parser =\n[\n  [ "Flags", "group__parser.html#flags", null ]\n];\n'
    )
    site = DoxygenSite(sample_site)
    tree = site.expand(site.load_navigation().tree)

    flags = tree.node_at((0, 1, 0, 0))
    assert flags is not None
    assert flags.label == "Flags"


def test_expand_detects_cycles(sample_site: Path) -> None:
    """Test that sub-indexes referencing each other raise DataFileError."""
    (sample_site / "topics.js").write_text('var topics = [ [ "Again", "topics.html", "topics" ] ];')
    site = DoxygenSite(sample_site)

    with pytest.raises(DataFileError, match="Sub-index cycle: topics -> topics"):
        site.expand(NavigationTree((NavigationNode("Topics", "topics.html", subindex="topics"),)))


def test_load_index_chunks(sample_site: Path) -> None:
    """Test loading navtreeindex chunks in number order."""
    (sample_site / "navtreeindex1.js").write_text('var NAVTREEINDEX1 =\n{\n"z.html":[0,0]\n};\n')
    chunks = DoxygenSite(sample_site).load_index_chunks()

    assert [chunk.number for chunk in chunks] == [0, 1]
    assert chunks[0].path_for("guide.html#install") == (0, 0, 0)


def test_locate(sample_site: Path) -> None:
    """Test finding a page's node through the lazy-loading index."""
    site = DoxygenSite(sample_site)

    parser_node = site.locate("group__parser.html")
    assert parser_node is not None
    assert parser_node.label == "Parser"

    install = site.locate("guide.html#install")
    assert install is not None
    assert install.label == "Install"

    assert site.locate("unknown.html") is None


def test_search_files(sample_site: Path) -> None:
    """Test that the sections file and the UI script are not search data."""
    names = [path.name for path in DoxygenSite(sample_site).search_files()]
    assert names == ["all_0.js", "groups_0.js"]


def test_search_files_without_search_dir(tmp_path: Path) -> None:
    """Test a site generated without a search box."""
    (tmp_path / "navtreedata.js").write_text("var NAVTREE = [];")
    site = DoxygenSite(tmp_path)

    assert site.search_files() == []
    assert site.load_search_sections() is None


def test_load_search_indexes_skips_broken_files(sample_site: Path, caplog: pytest.LogCaptureFixture) -> None:
    """Test that unreadable search files are logged and skipped."""
    (sample_site / "search" / "all_1.js").write_text("var searchData=[ ['a_0',")
    (sample_site / "search" / "all_2.js").write_bytes(b"var searchData=[ ['a_0',['A\xff',['../a.html',1,'']]] ];")

    with caplog.at_level(logging.WARNING):
        indexes = DoxygenSite(sample_site).load_search_indexes()

    assert [index.source for index in indexes] == ["all_0", "groups_0"]
    assert "Failed to parse" in caplog.text
    assert "all_2.js" in caplog.text


def test_load_search_sections(sample_site: Path) -> None:
    """Test reading searchdata.js."""
    sections = DoxygenSite(sample_site).load_search_sections()

    assert sections is not None
    assert sections.names == {0: "all", 1: "groups"}
    assert sections.labels == {0: "All", 1: "Topics"}
    assert sections.contents == {0: "gip", 1: "p"}
