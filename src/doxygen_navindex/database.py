"""SQLite catalog of Doxygen navigation and search tables."""

import logging
import sqlite3
from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path

from doxygen_navindex.models import NavigationTree, NodeRecord, SearchEntry, SearchIndex, SearchMatch

logger = logging.getLogger(__name__)


def _format_path(path: tuple[int, ...]) -> str:
    return "/".join(str(step) for step in path)


def _parse_path(text: str) -> tuple[int, ...]:
    return tuple(int(step) for step in text.split("/")) if text else ()


class SiteDatabase:
    """Manages the SQLite catalog of a documentation site."""

    def __init__(self, db_path: Path) -> None:
        """Initialise database with the given path.

        Args:
            db_path: Path to the SQLite database file.
        """
        self.db_path = db_path
        self._initialise_schema()

    @staticmethod
    def _escape_like(text: str) -> str:
        """Escape LIKE wildcards so a prefix matches literally.

        Args:
            text: Raw prefix.

        Returns:
            Prefix safe for ``LIKE ? ESCAPE '\\'``.
        """
        return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")

    @contextmanager
    def _get_connection(self) -> Generator[sqlite3.Connection, None, None]:
        """Context manager for database connections.

        Yields:
            SQLite connection with Row factory enabled.
        """
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
        finally:
            conn.close()

    def _initialise_schema(self) -> None:
        """Create database schema if it doesn't exist."""
        with self._get_connection() as conn:
            conn.executescript("""
                CREATE TABLE IF NOT EXISTS nav_nodes (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    path TEXT UNIQUE NOT NULL,
                    parent_path TEXT NOT NULL,
                    position INTEGER NOT NULL,
                    depth INTEGER NOT NULL,
                    label TEXT NOT NULL,
                    target TEXT,
                    subindex TEXT
                );

                CREATE TABLE IF NOT EXISTS search_entries (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    source TEXT NOT NULL,
                    position INTEGER NOT NULL,
                    key TEXT NOT NULL,
                    term TEXT NOT NULL,
                    name TEXT NOT NULL,
                    UNIQUE (source, position)
                );

                CREATE TABLE IF NOT EXISTS search_matches (
                    entry_id INTEGER NOT NULL REFERENCES search_entries(id),
                    position INTEGER NOT NULL,
                    destination TEXT NOT NULL,
                    page TEXT NOT NULL,
                    internal INTEGER NOT NULL,
                    scope TEXT NOT NULL,
                    PRIMARY KEY (entry_id, position)
                );

                CREATE INDEX IF NOT EXISTS idx_nav_nodes_parent ON nav_nodes(parent_path);
                CREATE INDEX IF NOT EXISTS idx_search_entries_key ON search_entries(key);
                CREATE INDEX IF NOT EXISTS idx_search_entries_term ON search_entries(term);
                CREATE INDEX IF NOT EXISTS idx_search_matches_page ON search_matches(page);
            """)
            conn.commit()

    def replace_navigation(self, tree: NavigationTree) -> int:
        """Replace the stored navigation tree.

        Args:
            tree: Tree to store.

        Returns:
            Number of stored nodes.
        """
        rows = [
            (
                _format_path(path),
                _format_path(path[:-1]),
                path[-1],
                len(path) - 1,
                node.label,
                node.target,
                node.subindex,
            )
            for path, node in tree.walk()
        ]
        with self._get_connection() as conn:
            conn.execute("DELETE FROM nav_nodes")
            conn.executemany(
                """
                INSERT INTO nav_nodes (path, parent_path, position, depth, label, target, subindex)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                rows,
            )
            conn.commit()
        logger.debug("Stored %d navigation nodes", len(rows))
        return len(rows)

    def get_node(self, path: tuple[int, ...]) -> NodeRecord | None:
        """Retrieve a navigation node by its path.

        Args:
            path: Child positions from the root sequence.

        Returns:
            NodeRecord instance or None if not found.
        """
        with self._get_connection() as conn:
            cursor = conn.execute("SELECT * FROM nav_nodes WHERE path = ?", (_format_path(path),))
            row = cursor.fetchone()
            if row:
                return self._node_from_row(row)
            return None

    def children_of(self, path: tuple[int, ...] = ()) -> list[NodeRecord]:
        """Return the stored children of a node in display order.

        Args:
            path: Parent path, the empty path lists the root sequence.

        Returns:
            List of NodeRecord instances.
        """
        with self._get_connection() as conn:
            cursor = conn.execute(
                "SELECT * FROM nav_nodes WHERE parent_path = ? ORDER BY position",
                (_format_path(path),),
            )
            return [self._node_from_row(row) for row in cursor.fetchall()]

    def replace_search_index(self, index: SearchIndex) -> int:
        """Replace the stored entries that came from the same source file.

        Args:
            index: Search entries to store.

        Returns:
            Number of stored entries.
        """
        with self._get_connection() as conn:
            self._delete_source(conn, index.source)
            for position, entry in enumerate(index):
                cursor = conn.execute(
                    """
                    INSERT INTO search_entries (source, position, key, term, name)
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    (index.source, position, entry.key, entry.term, entry.name),
                )
                conn.executemany(
                    """
                    INSERT INTO search_matches (entry_id, position, destination, page, internal, scope)
                    VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    [
                        (cursor.lastrowid, i, match.destination, match.page, int(match.internal), match.scope)
                        for i, match in enumerate(entry.matches)
                    ],
                )
            conn.commit()
        logger.debug("Stored %d search entries from %s", len(index), index.source or "<unnamed>")
        return len(index)

    def entries_for_key(self, key: str) -> list[SearchEntry]:
        """Return every entry stored under a key, keys are not unique.

        Args:
            key: Encoded search key.

        Returns:
            List of SearchEntry instances in insertion order.
        """
        return self._select_entries("WHERE e.key = ?", (key,))

    def entries_for_term(self, term: str) -> list[SearchEntry]:
        """Return every entry whose decoded term equals ``term``.

        Args:
            term: Decoded term, compared case-insensitively.

        Returns:
            List of SearchEntry instances in insertion order.
        """
        return self._select_entries("WHERE e.term = ?", (term.lower(),))

    def entries_with_prefix(self, prefix: str) -> list[SearchEntry]:
        """Return every entry whose decoded term starts with ``prefix``.

        Args:
            prefix: Decoded term prefix, compared case-insensitively.

        Returns:
            List of SearchEntry instances in insertion order.
        """
        pattern = self._escape_like(prefix.lower()) + "%"
        return self._select_entries("WHERE e.term LIKE ? ESCAPE '\\'", (pattern,))

    def entries_for_page(self, page: str) -> list[SearchEntry]:
        """Return every entry with a match on the given page.

        Args:
            page: Page URL without anchor.

        Returns:
            List of SearchEntry instances in insertion order.
        """
        return self._select_entries(
            "WHERE e.id IN (SELECT entry_id FROM search_matches WHERE page = ?)",
            (page,),
        )

    def clear(self) -> None:
        """Clear all navigation nodes and search entries from the database."""
        with self._get_connection() as conn:
            conn.execute("DELETE FROM search_matches")
            conn.execute("DELETE FROM search_entries")
            conn.execute("DELETE FROM nav_nodes")
            conn.commit()

    def get_node_count(self) -> int:
        """Return the total number of stored navigation nodes.

        Returns:
            Count of navigation nodes in the database.
        """
        return self._count("nav_nodes")

    def get_entry_count(self) -> int:
        """Return the total number of stored search entries.

        Returns:
            Count of search entries in the database.
        """
        return self._count("search_entries")

    def _count(self, table: str) -> int:
        with self._get_connection() as conn:
            cursor = conn.execute(f"SELECT COUNT(*) FROM {table}")  # noqa: S608
            result = cursor.fetchone()
            return int(result[0]) if result else 0

    @staticmethod
    def _delete_source(conn: sqlite3.Connection, source: str) -> None:
        conn.execute(
            "DELETE FROM search_matches WHERE entry_id IN (SELECT id FROM search_entries WHERE source = ?)",
            (source,),
        )
        conn.execute("DELETE FROM search_entries WHERE source = ?", (source,))

    def _select_entries(self, where: str, params: tuple[str, ...]) -> list[SearchEntry]:
        """Load entries and their matches for a WHERE clause on ``search_entries e``.

        Args:
            where: WHERE clause referencing the entries table as ``e``.
            params: Query parameters.

        Returns:
            List of SearchEntry instances ordered by source and position.
        """
        with self._get_connection() as conn:
            cursor = conn.execute(
                f"""
                SELECT e.id, e.key, e.name, m.destination, m.internal, m.scope
                FROM search_entries e
                LEFT JOIN search_matches m ON m.entry_id = e.id
                {where}
                ORDER BY e.source, e.position, m.position
                """,  # noqa: S608
                params,
            )
            entries: dict[int, tuple[str, str, list[SearchMatch]]] = {}
            for row in cursor.fetchall():
                _, _, matches = entries.setdefault(row["id"], (row["key"], row["name"], []))
                if row["destination"] is not None:
                    matches.append(
                        SearchMatch(
                            destination=row["destination"],
                            internal=bool(row["internal"]),
                            scope=row["scope"],
                        )
                    )
            return [SearchEntry(key=key, name=name, matches=tuple(matches)) for key, name, matches in entries.values()]

    @staticmethod
    def _node_from_row(row: sqlite3.Row) -> NodeRecord:
        return NodeRecord(
            path=_parse_path(row["path"]),
            depth=row["depth"],
            label=row["label"],
            target=row["target"],
            subindex=row["subindex"],
        )
