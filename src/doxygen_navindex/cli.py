"""Click CLI for doxygen-navindex."""

import logging
from pathlib import Path

import click

from doxygen_navindex.config import Settings, load_config
from doxygen_navindex.database import SiteDatabase
from doxygen_navindex.encoding import label_text
from doxygen_navindex.indexer import SiteIndexer
from doxygen_navindex.models import NavigationTree
from doxygen_navindex.parser import DataFileError
from doxygen_navindex.reference import reference_site
from doxygen_navindex.serializer import dump_index_chunk, dump_navigation, dump_search_index, dump_subindex
from doxygen_navindex.site import DoxygenSite
from doxygen_navindex.validation import check_navigation, check_search_index


@click.group()
@click.option("--config", "config_path", type=click.Path(dir_okay=False, path_type=Path), default=None,
              help="Path to navindex.toml.")
@click.option("-v", "--verbose", is_flag=True, help="Verbose output.")
@click.pass_context
def cli(ctx, config_path, verbose):
    """navindex: read, check and catalog Doxygen navigation and search data."""
    try:
        settings = load_config(config_path)
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc
    logging.basicConfig(level=logging.DEBUG if verbose else settings.log_level)
    ctx.obj = settings


def _open_site(settings: Settings, html_dir: Path | None, reference: bool) -> DoxygenSite:
    if reference:
        return reference_site()
    html_dir = html_dir or settings.html_dir
    if html_dir is None:
        raise click.UsageError("Pass HTML_DIR, --reference, or set html_dir in navindex.toml.")
    try:
        return DoxygenSite(html_dir)
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc


@cli.command()
@click.argument("html_dir", required=False, type=click.Path(file_okay=False, path_type=Path))
@click.option("--database", "db_path", type=click.Path(dir_okay=False, path_type=Path), default=None,
              help="Catalog database file.")
@click.option("--rebuild", is_flag=True, help="Clear the catalog before indexing.")
@click.option("--reference", is_flag=True, help="Index the bundled cap documentation data.")
@click.pass_obj
def index(settings, html_dir, db_path, rebuild, reference):
    """Store a site's navigation tree and search data in the catalog."""
    database = SiteDatabase(db_path or settings.database)
    indexer = SiteIndexer(database)
    try:
        if reference:
            if rebuild:
                database.clear()
            summary = indexer.index_reference()
        else:
            site = _open_site(settings, html_dir, reference=False)
            if rebuild:
                summary = indexer.rebuild_index(site.html_dir)
            else:
                summary = indexer.index_from_path(site.html_dir)
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc

    click.echo(f"Indexed into {database.db_path}")
    click.echo(f"  Navigation nodes: {summary.nodes}")
    click.echo(f"  Search files:     {summary.search_files}")
    click.echo(f"  Search entries:   {summary.search_entries}")
    click.echo(f"  Failed files:     {len(summary.failed_files)}")


@cli.command()
@click.argument("html_dir", required=False, type=click.Path(file_okay=False, path_type=Path))
@click.option("--expand", is_flag=True, help="Inline sub-index files.")
@click.option("--reference", is_flag=True, help="Show the bundled cap documentation tree.")
@click.pass_obj
def tree(settings, html_dir, expand, reference):
    """Print the navigation tree."""
    site = _open_site(settings, html_dir, reference)
    try:
        navigation = site.load_navigation()
        nav_tree = site.expand(navigation.tree) if expand else navigation.tree
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc

    for path, node in nav_tree.walk():
        line = f"{'  ' * (len(path) - 1)}{label_text(node.label)}"
        if node.target:
            line += f"  ({node.target})"
        if node.is_deferred:
            line += f"  [{node.subindex}]"
        click.echo(line)


@cli.command()
@click.argument("term")
@click.option("--prefix", is_flag=True, help="Match every term starting with TERM.")
@click.option("--database", "db_path", type=click.Path(dir_okay=False, path_type=Path), default=None,
              help="Catalog database file.")
@click.pass_obj
def lookup(settings, term, prefix, db_path):
    """Print the search results stored for a term."""
    db_path = db_path or settings.database
    if not db_path.exists():
        raise click.UsageError(f"Catalog not found: {db_path}. Run 'navindex index' first.")
    database = SiteDatabase(db_path)
    entries = database.entries_with_prefix(term) if prefix else database.entries_for_term(term)
    if not entries:
        click.echo(f"No entries for {term!r}")
        return
    for entry in entries:
        for result in entry.results:
            click.echo(f"{label_text(result.label)}\t{result.destination}")


@cli.command()
@click.argument("html_dir", required=False, type=click.Path(file_okay=False, path_type=Path))
@click.option("--reference", is_flag=True, help="Check the bundled cap documentation data.")
@click.pass_obj
def check(settings, html_dir, reference):
    """Check the structure of a site's navigation and search data."""
    site = _open_site(settings, html_dir, reference)
    try:
        problems = check_navigation(site.load_navigation())
    except DataFileError as exc:
        problems = [str(exc)]
    for path in site.search_files():
        index = site.parser.parse_search_file(path)
        if index is None:
            problems.append(f"{path.name}: cannot be parsed")
            continue
        problems.extend(check_search_index(index))

    for problem in problems:
        click.echo(problem)
    if problems:
        raise click.exceptions.Exit(1)
    click.echo("No problems found")


@cli.command()
@click.argument("html_dir", type=click.Path(file_okay=False, path_type=Path))
@click.argument("out_dir", type=click.Path(file_okay=False, path_type=Path))
@click.pass_obj
def export(settings, html_dir, out_dir):
    """Rewrite a site's data files in canonical layout into OUT_DIR."""
    site = _open_site(settings, html_dir, reference=False)
    written = 0
    try:
        navigation = site.load_navigation()
        out_dir.mkdir(parents=True, exist_ok=True)
        (out_dir / DoxygenSite.NAVIGATION_FILE).write_text(dump_navigation(navigation), encoding="utf-8")
        written += 1

        pending = [node.subindex for _, node in navigation.tree.walk() if node.subindex]
        exported: set[str] = set()
        while pending:
            name = pending.pop(0)
            if name in exported or not site.has_subindex(name):
                continue
            exported.add(name)
            nodes = site.load_subindex(name)
            (out_dir / f"{name}.js").write_text(dump_subindex(name, nodes), encoding="utf-8")
            written += 1
            pending.extend(node.subindex for _, node in NavigationTree(nodes).walk() if node.subindex)

        for chunk in site.load_index_chunks():
            (out_dir / f"navtreeindex{chunk.number}.js").write_text(dump_index_chunk(chunk), encoding="utf-8")
            written += 1

        search_out = out_dir / DoxygenSite.SEARCH_DIR
        for index in site.load_search_indexes():
            search_out.mkdir(exist_ok=True)
            (search_out / f"{index.source}.js").write_text(dump_search_index(index), encoding="utf-8")
            written += 1
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc

    click.echo(f"Wrote {written} files to {out_dir}")
