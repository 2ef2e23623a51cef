"""Structural checks for navigation and search tables."""

from doxygen_navindex.encoding import split_key
from doxygen_navindex.models import NavigationData, NavigationNode, SearchIndex


def check_navigation(data: NavigationData) -> list[str]:
    """Check the tree and lazy-loading index of ``navtreedata.js``.

    Args:
        data: Navigation tables.

    Returns:
        Problem descriptions, empty when the tables are valid.
    """
    problems: list[str] = []
    for path, node in data.tree.walk():
        where = "NAVTREE" + "".join(f"[{step}]" for step in path)
        problems.extend(_check_node(node, where))
    for position, page in enumerate(data.index):
        if not isinstance(page, str) or not page:
            problems.append(f"NAVTREEINDEX[{position}]: empty page URL")
    return problems


def _check_node(node: NavigationNode, where: str) -> list[str]:
    problems = []
    if not node.label:
        problems.append(f"{where}: empty label")
    if not node.target:
        problems.append(f"{where}: missing target")
    if node.children is not None and not all(isinstance(child, NavigationNode) for child in node.children):
        problems.append(f"{where}: children must be navigation nodes")
    if node.subindex is not None and not node.subindex:
        problems.append(f"{where}: empty sub-index name")
    return problems


def check_search_index(index: SearchIndex) -> list[str]:
    """Check the entries of a ``searchData`` fragment.

    Args:
        index: Search entries.

    Returns:
        Problem descriptions, empty when the entries are valid.
    """
    problems = []
    prefix = f"{index.source}: " if index.source else ""
    for position, entry in enumerate(index):
        where = f"{prefix}searchData[{position}]"
        if not entry.key:
            problems.append(f"{where}: empty key")
        elif entry.key != entry.key.lower():
            problems.append(f"{where}: key {entry.key!r} is not lower-case")
        else:
            try:
                split_key(entry.key)
            except ValueError:
                problems.append(f"{where}: key {entry.key!r} has no ordinal suffix")
        if not entry.matches:
            problems.append(f"{where}: no matches")
        for i, match in enumerate(entry.matches):
            if not match.destination:
                problems.append(f"{where}: match {i} has an empty destination")
    return problems
