"""Data models for Doxygen navigation and search tables."""

from collections.abc import Iterator
from dataclasses import dataclass, field

from doxygen_navindex.encoding import decode_term, split_key, split_target


@dataclass(frozen=True)
class NavigationNode:
    """One entry of a navigation tree.

    A node is in exactly one of three states: it carries inline
    ``children``, it names a ``subindex`` holding its children, or it is a
    leaf and both are ``None``.
    """

    label: str
    target: str | None
    children: tuple["NavigationNode", ...] | None = None
    subindex: str | None = None

    def __post_init__(self) -> None:
        if self.children is not None and self.subindex is not None:
            msg = f"Node {self.label!r} cannot have both children and a sub-index"
            raise ValueError(msg)

    @property
    def is_leaf(self) -> bool:
        return self.children is None and self.subindex is None

    @property
    def is_deferred(self) -> bool:
        return self.subindex is not None

    @property
    def page(self) -> str | None:
        if self.target is None:
            return None
        return split_target(self.target)[0]

    @property
    def anchor(self) -> str | None:
        if self.target is None:
            return None
        return split_target(self.target)[1]


@dataclass(frozen=True)
class NavigationTree:
    """Ordered root sequence of a site's table of contents."""

    nodes: tuple[NavigationNode, ...] = ()

    def __iter__(self) -> Iterator[NavigationNode]:
        return iter(self.nodes)

    def __len__(self) -> int:
        return len(self.nodes)

    def walk(self) -> Iterator[tuple[tuple[int, ...], NavigationNode]]:
        """Iterate over every node depth-first in display order.

        Yields:
            Pairs of (path, node) where path holds the child positions
            leading from the root sequence to the node.
        """
        stack: list[tuple[tuple[int, ...], NavigationNode]] = [
            ((position,), node) for position, node in reversed(list(enumerate(self.nodes)))
        ]
        while stack:
            path, node = stack.pop()
            yield path, node
            if node.children:
                for position in range(len(node.children) - 1, -1, -1):
                    stack.append(((*path, position), node.children[position]))

    def node_at(self, path: tuple[int, ...]) -> NavigationNode | None:
        """Return the node reached by following child positions.

        Args:
            path: Child positions, starting in the root sequence.

        Returns:
            The node, or None if the path leaves the tree.
        """
        if not path:
            return None
        siblings: tuple[NavigationNode, ...] | None = self.nodes
        node = None
        for position in path:
            if not siblings or not 0 <= position < len(siblings):
                return None
            node = siblings[position]
            siblings = node.children
        return node

    def find(self, label: str) -> list[NavigationNode]:
        """Return every node with the given label, in display order."""
        return [node for _, node in self.walk() if node.label == label]


@dataclass(frozen=True)
class NavigationIndex:
    """Flat list of page URLs, one per lazily loaded index chunk."""

    pages: tuple[str, ...] = ()

    def __iter__(self) -> Iterator[str]:
        return iter(self.pages)

    def __len__(self) -> int:
        return len(self.pages)

    def __getitem__(self, position: int) -> str:
        return self.pages[position]

    def chunk_for(self, url: str) -> int:
        """Return the number of the index chunk that covers a page.

        The chunk is the last position whose first page sorts at or before
        ``url``. Pages sorting before every chunk fall back to chunk 0.

        Args:
            url: Page URL, optionally with an anchor.

        Returns:
            Chunk number.
        """
        chunk = -1
        while chunk + 1 < len(self.pages) and self.pages[chunk + 1] <= url:
            chunk += 1
        return max(chunk, 0)


@dataclass(frozen=True)
class NavigationIndexChunk:
    """One ``navtreeindexN.js`` table mapping pages to tree paths."""

    number: int
    paths: dict[str, tuple[int, ...]] = field(default_factory=dict)

    def path_for(self, url: str) -> tuple[int, ...] | None:
        return self.paths.get(url)


@dataclass(frozen=True)
class NavigationData:
    """Contents of ``navtreedata.js``."""

    tree: NavigationTree
    index: NavigationIndex = field(default_factory=NavigationIndex)
    sync_on_message: str | None = None
    sync_off_message: str | None = None


@dataclass(frozen=True)
class SearchMatch:
    """One destination of a search entry."""

    destination: str
    internal: bool = True
    scope: str = ""

    @property
    def page(self) -> str:
        return split_target(self.destination)[0]

    @property
    def anchor(self) -> str | None:
        return split_target(self.destination)[1]


@dataclass(frozen=True)
class SearchResult:
    """A label and destination pair as the search box displays it."""

    key: str
    label: str
    destination: str
    scope: str
    internal: bool


@dataclass(frozen=True)
class SearchEntry:
    """One ``searchData`` row: an encoded key and its matches.

    Keys are grouping tokens, not identifiers: the same key may appear in
    several entries of one index.
    """

    key: str
    name: str
    matches: tuple[SearchMatch, ...] = ()

    @property
    def term(self) -> str:
        return decode_term(split_key(self.key)[0])

    @property
    def ordinal(self) -> int:
        return split_key(self.key)[1]

    @property
    def results(self) -> tuple[SearchResult, ...]:
        """Return the displayed label and destination of every match.

        A single match is shown under the entry name. When there are
        several, each is shown under its own scope.

        Returns:
            Results in match order.
        """
        if len(self.matches) == 1:
            match = self.matches[0]
            return (SearchResult(self.key, self.name, match.destination, match.scope, match.internal),)
        return tuple(
            SearchResult(self.key, match.scope or self.name, match.destination, match.scope, match.internal)
            for match in self.matches
        )


@dataclass(frozen=True)
class SearchIndex:
    """Ordered ``searchData`` fragment loaded from one search file."""

    entries: tuple[SearchEntry, ...] = ()
    source: str = ""

    def __iter__(self) -> Iterator[SearchEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def by_key(self, key: str) -> list[SearchEntry]:
        return [entry for entry in self.entries if entry.key == key]

    def by_term(self, term: str) -> list[SearchEntry]:
        return [entry for entry in self.entries if entry.term == term]

    def terms(self) -> list[str]:
        """Return the distinct decoded terms in first-seen order."""
        seen: dict[str, None] = {}
        for entry in self.entries:
            seen.setdefault(entry.term, None)
        return list(seen)


@dataclass(frozen=True)
class SearchSections:
    """Search categories declared in ``searchdata.js``."""

    names: dict[int, str] = field(default_factory=dict)
    labels: dict[int, str] = field(default_factory=dict)
    contents: dict[int, str] = field(default_factory=dict)


@dataclass
class NodeRecord:
    """Represents a navigation node stored in the catalog."""

    path: tuple[int, ...]
    depth: int
    label: str
    target: str | None
    subindex: str | None
