"""Indexer for the data tables of Doxygen documentation sites."""

import logging
from dataclasses import dataclass, field
from pathlib import Path

from doxygen_navindex.database import SiteDatabase
from doxygen_navindex.reference import reference_site
from doxygen_navindex.site import DoxygenSite

logger = logging.getLogger(__name__)


@dataclass
class IndexSummary:
    """Counts reported by an indexing run."""

    nodes: int = 0
    search_entries: int = 0
    search_files: int = 0
    failed_files: list[str] = field(default_factory=list)


class SiteIndexer:
    """Stores the navigation tree and search data of a site in the catalog."""

    def __init__(self, database: SiteDatabase) -> None:
        """Initialise indexer with database instance.

        Args:
            database: SiteDatabase instance for storing tables.
        """
        self.database = database

    def index_from_path(self, html_dir: Path) -> IndexSummary:
        """Index the data tables of a local HTML directory.

        Args:
            html_dir: Directory holding the generated HTML output.

        Returns:
            IndexSummary of the run.

        Raises:
            ValueError: If the directory or its navigation file is missing.
        """
        return self._index_site(DoxygenSite(html_dir))

    def index_reference(self) -> IndexSummary:
        """Index the bundled cap documentation tables.

        Returns:
            IndexSummary of the run.
        """
        return self._index_site(reference_site())

    def rebuild_index(self, html_dir: Path) -> IndexSummary:
        """Clear existing catalog and rebuild from scratch.

        Args:
            html_dir: Directory holding the generated HTML output.

        Returns:
            IndexSummary of the run.
        """
        logger.info("Clearing existing index...")
        self.database.clear()
        return self.index_from_path(html_dir)

    def _index_site(self, site: DoxygenSite) -> IndexSummary:
        summary = IndexSummary()

        logger.info("Loading navigation tree from %s", site.html_dir)
        navigation = site.load_navigation()
        tree = site.expand(navigation.tree)
        summary.nodes = self.database.replace_navigation(tree)

        search_files = site.search_files()
        logger.info("Found %d search files to index", len(search_files))

        for file_path in search_files:
            index = site.parser.parse_search_file(file_path)
            if index is None:
                logger.warning("Failed to parse: %s", file_path)
                summary.failed_files.append(file_path.name)
                continue
            try:
                summary.search_entries += self.database.replace_search_index(index)
            except ValueError as exc:
                logger.warning("Failed to index %s: %s", file_path, exc)
                summary.failed_files.append(file_path.name)
                continue
            summary.search_files += 1
            logger.debug("Indexed: %s", file_path.name)

        logger.info(
            "Successfully indexed %d navigation nodes and %d search entries",
            summary.nodes,
            summary.search_entries,
        )
        return summary
