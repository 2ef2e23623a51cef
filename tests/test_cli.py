"""Tests for cli.py."""

from pathlib import Path

import pytest
from click.testing import CliRunner

from doxygen_navindex.cli import cli
from doxygen_navindex.parser import DataFileParser


@pytest.fixture(autouse=True)
def workdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run every command from an empty working directory.

    Args:
        tmp_path: Pytest temporary directory fixture.
        monkeypatch: Pytest monkeypatch fixture.

    Returns:
        The working directory.
    """
    work = tmp_path / "work"
    work.mkdir()
    monkeypatch.chdir(work)
    return work


class TestCLI:
    def test_help(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "navindex" in result.output

    def test_tree_reference(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["tree", "--reference"])
        assert result.exit_code == 0
        lines = result.output.splitlines()
        assert lines[0] == "cap  (index.html)"
        assert "  Topics  (topics.html)  [topics]" in lines
        assert "    I Don't Want to Play With You Any More!  (dd/de4/md_static__docs_2quick__start.html#autotoc_md20)" in lines

    def test_tree_expand(self, sample_site):
        runner = CliRunner()
        result = runner.invoke(cli, ["tree", str(sample_site), "--expand"])
        assert result.exit_code == 0
        assert "    Parser  (group__parser.html)" in result.output.splitlines()
        assert "  Missing  (missing.html)  [nowhere]" in result.output.splitlines()

    def test_tree_without_site(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["tree"])
        assert result.exit_code == 2
        assert "HTML_DIR" in result.output

    def test_tree_uses_config_html_dir(self, sample_site, workdir):
        (workdir / "navindex.toml").write_text(f'[navindex]\nhtml_dir = "{sample_site.as_posix()}"\n')
        runner = CliRunner()
        result = runner.invoke(cli, ["tree"])
        assert result.exit_code == 0
        assert result.output.startswith("demo  (index.html)")

    def test_invalid_config(self, tmp_path):
        config = tmp_path / "bad.toml"
        config.write_text("[navindex]\nunknown = 1\n")
        runner = CliRunner()
        result = runner.invoke(cli, ["--config", str(config), "tree", "--reference"])
        assert result.exit_code == 1
        assert "Unknown keys" in result.output

    def test_index_and_lookup(self, sample_site, tmp_path):
        db_path = tmp_path / "site.db"
        runner = CliRunner()
        result = runner.invoke(cli, ["index", str(sample_site), "--database", str(db_path)])
        assert result.exit_code == 0
        assert "Navigation nodes: 6" in result.output
        assert "Search entries:   4" in result.output

        result = runner.invoke(cli, ["lookup", "install", "--database", str(db_path)])
        assert result.exit_code == 0
        assert result.output.splitlines() == ["Guide\t../guide.html#install", "External\t../install.html"]

        result = runner.invoke(cli, ["lookup", "pa", "--prefix", "--database", str(db_path)])
        assert result.exit_code == 0
        assert result.output.splitlines() == ["Parser\t../group__parser.html", "Parser\t../group__parser.html"]

    def test_index_rebuild(self, sample_site, tmp_path):
        db_path = tmp_path / "site.db"
        runner = CliRunner()
        runner.invoke(cli, ["index", str(sample_site), "--database", str(db_path)])
        (sample_site / "search" / "groups_0.js").unlink()
        result = runner.invoke(cli, ["index", str(sample_site), "--database", str(db_path), "--rebuild"])
        assert result.exit_code == 0
        assert "Search entries:   3" in result.output

    def test_index_reference_and_lookup_html_label(self, tmp_path):
        db_path = tmp_path / "cap.db"
        runner = CliRunner()
        result = runner.invoke(cli, ["index", "--reference", "--database", str(db_path)])
        assert result.exit_code == 0

        result = runner.invoke(cli, ["lookup", "parser", "--database", str(db_path)])
        assert result.exit_code == 0
        assert result.output.splitlines() == [
            "Importing cap.h and Creating a Parser\t../dd/de4/md_static__docs_2quick__start.html#autotoc_md13"
        ]

    def test_index_missing_site(self, tmp_path):
        runner = CliRunner()
        result = runner.invoke(cli, ["index", str(tmp_path / "missing"), "--database", str(tmp_path / "x.db")])
        assert result.exit_code == 1
        assert "Documentation path does not exist" in result.output

    def test_lookup_without_catalog(self, tmp_path):
        runner = CliRunner()
        result = runner.invoke(cli, ["lookup", "parser", "--database", str(tmp_path / "missing.db")])
        assert result.exit_code == 2
        assert "Run 'navindex index' first" in result.output

    def test_lookup_no_entries(self, tmp_path):
        db_path = tmp_path / "cap.db"
        runner = CliRunner()
        runner.invoke(cli, ["index", "--reference", "--database", str(db_path)])
        result = runner.invoke(cli, ["lookup", "zzz", "--database", str(db_path)])
        assert result.exit_code == 0
        assert "No entries for 'zzz'" in result.output

    def test_check_reference(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["check", "--reference"])
        assert result.exit_code == 0
        assert "No problems found" in result.output

    def test_check_reports_problems(self, sample_site):
        (sample_site / "search" / "all_1.js").write_text("var searchData=[ ['noordinal',['X',['',1,'']]] ];")
        (sample_site / "search" / "all_2.js").write_text("var searchData=[ ['a_0',")
        runner = CliRunner()
        result = runner.invoke(cli, ["check", str(sample_site)])
        assert result.exit_code == 1
        assert "all_1: searchData[0]: key 'noordinal' has no ordinal suffix" in result.output
        assert "all_1: searchData[0]: match 0 has an empty destination" in result.output
        assert "all_2.js: cannot be parsed" in result.output

    def test_export(self, sample_site, tmp_path):
        out_dir = tmp_path / "out"
        runner = CliRunner()
        result = runner.invoke(cli, ["export", str(sample_site), str(out_dir)])
        assert result.exit_code == 0
        assert "Wrote 5 files" in result.output

        parser = DataFileParser()
        original = parser.parse_navigation((sample_site / "navtreedata.js").read_text())
        exported = parser.parse_navigation((out_dir / "navtreedata.js").read_text())
        assert exported == original
        assert (out_dir / "topics.js").exists()
        assert (out_dir / "navtreeindex0.js").exists()
        assert (out_dir / "search" / "all_0.js").read_text() == (sample_site / "search" / "all_0.js").read_text()
        assert not (out_dir / "nowhere.js").exists()
