"""Writers for Doxygen navigation and search data files."""

from doxygen_navindex.models import (
    NavigationData,
    NavigationIndexChunk,
    NavigationNode,
    SearchEntry,
    SearchIndex,
    SearchMatch,
)

_ESCAPES = {"\\": "\\\\", "\n": "\\n", "\r": "\\r", "\t": "\\t", "\u2028": "\\u2028", "\u2029": "\\u2029"}
_SINGLE = "'"


def quote(value: str | None, quote_char: str = '"') -> str:
    """Render a JavaScript string literal.

    Args:
        value: String to quote, None renders as ``null``.
        quote_char: Either ``"`` or ``'``.

    Returns:
        JavaScript literal.
    """
    if value is None:
        return "null"
    escaped = []
    for char in value:
        if char == quote_char:
            escaped.append("\\" + char)
        elif char in _ESCAPES:
            escaped.append(_ESCAPES[char])
        elif ord(char) < 0x20:
            escaped.append(f"\\x{ord(char):02x}")
        else:
            escaped.append(char)
    return f"{quote_char}{''.join(escaped)}{quote_char}"


def dump_navigation(data: NavigationData, header: str | None = None) -> str:
    """Render ``navtreedata.js``.

    Args:
        data: Navigation tables.
        header: Optional comment text placed above the tables.

    Returns:
        JavaScript source.

    Raises:
        ValueError: If the header would close its comment early.
    """
    parts = []
    if header:
        if "*/" in header:
            msg = "Navigation header must not contain '*/'"
            raise ValueError(msg)
        parts.append(f"/*\n{header.rstrip()}\n*/\n")
    parts.append(_dump_tree("NAVTREE", data.tree.nodes))
    parts.append("\n")
    pages = ",\n".join(quote(page) for page in data.index)
    parts.append(f"var NAVTREEINDEX =\n[\n{pages}\n];\n" if pages else "var NAVTREEINDEX =\n[\n];\n")
    if data.sync_on_message is not None:
        parts.append(f"\nvar SYNCONMSG = {quote(data.sync_on_message, _SINGLE)};")
    if data.sync_off_message is not None:
        parts.append(f"\nvar SYNCOFFMSG = {quote(data.sync_off_message, _SINGLE)};")
    if data.sync_on_message is not None or data.sync_off_message is not None:
        parts.append("\n")
    return "".join(parts)


def dump_subindex(variable: str, nodes: tuple[NavigationNode, ...]) -> str:
    return _dump_tree(variable, nodes)


def dump_index_chunk(chunk: NavigationIndexChunk) -> str:
    """Render a ``navtreeindexN.js`` chunk."""
    rows = ",\n".join(
        f"{quote(url)}:[{','.join(str(step) for step in path)}]" for url, path in chunk.paths.items()
    )
    return f"var NAVTREEINDEX{chunk.number} =\n{{\n{rows}\n}};\n"


def dump_search_index(index: SearchIndex) -> str:
    """Render a ``searchData`` fragment.

    Args:
        index: Search entries.

    Returns:
        JavaScript source with one entry per line.
    """
    rows = ",\n".join(f"  {_dump_entry(entry)}" for entry in index)
    if not rows:
        return "var searchData=\n[\n];\n"
    return f"var searchData=\n[\n{rows}\n];\n"


def _dump_tree(variable: str, nodes: tuple[NavigationNode, ...]) -> str:
    if not nodes:
        return f"var {variable} =\n[\n];\n"
    body = ",\n".join(_dump_node(node, 1) for node in nodes)
    return f"var {variable} =\n[\n{body}\n];\n"


def _dump_node(node: NavigationNode, depth: int) -> str:
    indent = "  " * depth
    head = f"{indent}[ {quote(node.label)}, {quote(node.target)}, "
    if node.subindex is not None:
        return f"{head}{quote(node.subindex)} ]"
    if node.children is None:
        return f"{head}null ]"
    if not node.children:
        return f"{head}[ ] ]"
    children = ",\n".join(_dump_node(child, depth + 1) for child in node.children)
    return f"{head}[\n{children}\n{indent}] ]"


def _dump_entry(entry: SearchEntry) -> str:
    matches = "".join(f",{_dump_match(match)}" for match in entry.matches)
    return f"[{quote(entry.key, _SINGLE)},[{quote(entry.name, _SINGLE)}{matches}]]"


def _dump_match(match: SearchMatch) -> str:
    flag = 1 if match.internal else 0
    return f"[{quote(match.destination, _SINGLE)},{flag},{quote(match.scope, _SINGLE)}]"
