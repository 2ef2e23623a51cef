"""Loader for the data tables of a generated Doxygen HTML site."""

import logging
import re
from dataclasses import replace
from pathlib import Path

from doxygen_navindex.models import (
    NavigationData,
    NavigationIndexChunk,
    NavigationNode,
    NavigationTree,
    SearchIndex,
    SearchSections,
)
from doxygen_navindex.parser import DataFileError, DataFileParser

logger = logging.getLogger(__name__)

_CHUNK_FILE = re.compile(r"navtreeindex(\d+)\.js$")


class DoxygenSite:
    """Reads the navigation and search tables of a Doxygen HTML directory."""

    NAVIGATION_FILE = "navtreedata.js"
    SEARCH_DIR = "search"
    SEARCH_SECTIONS_FILE = "searchdata.js"

    def __init__(self, html_dir: Path) -> None:
        """Initialise site loader.

        Args:
            html_dir: Directory holding the generated HTML output.

        Raises:
            ValueError: If the directory or its navigation file is missing.
        """
        if not html_dir.is_dir():
            msg = f"Documentation path does not exist: {html_dir}"
            raise ValueError(msg)
        if not (html_dir / self.NAVIGATION_FILE).is_file():
            msg = f"No {self.NAVIGATION_FILE} in documentation path: {html_dir}"
            raise ValueError(msg)
        self.html_dir = html_dir
        self.parser = DataFileParser()

    def load_navigation(self) -> NavigationData:
        """Load ``navtreedata.js``.

        Returns:
            NavigationData instance.
        """
        path = self.html_dir / self.NAVIGATION_FILE
        return self.parser.parse_navigation(path.read_bytes(), path.name)

    def has_subindex(self, name: str) -> bool:
        return (self.html_dir / f"{name}.js").is_file()

    def load_subindex(self, name: str) -> tuple[NavigationNode, ...]:
        """Load the children stored in a named sub-index file.

        Args:
            name: Sub-index name, the file is ``<name>.js``.

        Returns:
            Child nodes in display order.
        """
        path = self.html_dir / f"{name}.js"
        logger.debug("Loading sub-index %s", path.name)
        return self.parser.parse_subindex(path.read_bytes(), path.name, name)

    def expand(self, tree: NavigationTree) -> NavigationTree:
        """Replace sub-index references with the children they name.

        Sub-indexes without a file stay deferred.

        Args:
            tree: Tree that may contain deferred nodes.

        Returns:
            Tree with every available sub-index inlined.

        Raises:
            DataFileError: If sub-indexes reference each other in a cycle.
        """
        return NavigationTree(self._expand_nodes(tree.nodes, ()))

    def _expand_nodes(
        self, nodes: tuple[NavigationNode, ...], loading: tuple[str, ...]
    ) -> tuple[NavigationNode, ...]:
        expanded = []
        for node in nodes:
            if node.subindex is not None:
                name = node.subindex
                if name in loading:
                    chain = " -> ".join((*loading, name))
                    msg = f"Sub-index cycle: {chain}"
                    raise DataFileError(msg)
                if not self.has_subindex(name):
                    logger.warning("Sub-index %s.js not found, leaving %r deferred", name, node.label)
                    expanded.append(node)
                    continue
                children = self._expand_nodes(self.load_subindex(name), (*loading, name))
                expanded.append(replace(node, children=children, subindex=None))
            elif node.children:
                expanded.append(replace(node, children=self._expand_nodes(node.children, loading)))
            else:
                expanded.append(node)
        return tuple(expanded)

    def load_index_chunks(self) -> list[NavigationIndexChunk]:
        """Load every ``navtreeindexN.js`` chunk.

        Returns:
            Chunks sorted by number.
        """
        chunks = []
        for path in self.html_dir.glob("navtreeindex*.js"):
            if _CHUNK_FILE.match(path.name) is None:
                continue
            chunks.append(self.parser.parse_index_chunk(path.read_bytes(), path.name))
        return sorted(chunks, key=lambda chunk: chunk.number)

    def locate(self, url: str, tree: NavigationTree | None = None) -> NavigationNode | None:
        """Find the tree node of a page through the lazy-loading index.

        Args:
            url: Page URL, optionally with an anchor.
            tree: Expanded tree to search, loaded when omitted.

        Returns:
            The node, or None if no chunk lists the page.
        """
        navigation = self.load_navigation()
        if tree is None:
            tree = self.expand(navigation.tree)
        number = navigation.index.chunk_for(url)
        path = self.html_dir / f"navtreeindex{number}.js"
        if not path.is_file():
            logger.debug("Index chunk %s not found", path.name)
            return None
        chunk = self.parser.parse_index_chunk(path.read_bytes(), path.name)
        steps = chunk.path_for(url)
        if steps is None:
            return None
        return tree.node_at(steps)

    def search_files(self) -> list[Path]:
        """List the search data files.

        Returns:
            Sorted paths of ``search/*.js`` excluding the sections file.
        """
        search_dir = self.html_dir / self.SEARCH_DIR
        if not search_dir.is_dir():
            return []
        return sorted(
            path
            for path in search_dir.glob("*.js")
            if path.name not in (self.SEARCH_SECTIONS_FILE, "search.js")
        )

    def load_search_indexes(self) -> list[SearchIndex]:
        """Load every readable search data file.

        Returns:
            SearchIndex per file, in file name order.
        """
        indexes = []
        for path in self.search_files():
            index = self.parser.parse_search_file(path)
            if index is None:
                logger.warning("Failed to parse: %s", path)
                continue
            logger.debug("Loaded %d search entries from %s", len(index), path.name)
            indexes.append(index)
        return indexes

    def load_search_sections(self) -> SearchSections | None:
        path = self.html_dir / self.SEARCH_DIR / self.SEARCH_SECTIONS_FILE
        if not path.is_file():
            return None
        return self.parser.parse_search_sections(path.read_bytes(), path.name)
