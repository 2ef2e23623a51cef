"""Parser for Doxygen navigation and search data files."""

import re
from pathlib import Path
from typing import Any

import tree_sitter_javascript as tsjs
from tree_sitter import Language, Node, Parser

from doxygen_navindex.models import (
    NavigationData,
    NavigationIndex,
    NavigationIndexChunk,
    NavigationNode,
    NavigationTree,
    SearchEntry,
    SearchIndex,
    SearchMatch,
    SearchSections,
)

JS_LANGUAGE = Language(tsjs.language())

_CHUNK_VARIABLE = re.compile(r"NAVTREEINDEX(\d+)$")
_NUMERIC_ESCAPE = re.compile(r"\\(?:x([0-9a-fA-F]{2})|u([0-9a-fA-F]{4})|u\{([0-9a-fA-F]+)\}|([0-7]{1,3}))")
_SIMPLE_ESCAPES = {"b": "\b", "f": "\f", "n": "\n", "r": "\r", "t": "\t", "v": "\v"}
_LINE_TERMINATORS = ("\n", "\r\n", "\r", "\u2028", "\u2029")
_LEGACY_OCTAL = re.compile(r"0[0-7]+")
_LEADING_ZERO_DECIMAL = re.compile(r"0[0-9]+")
_DECLARATIONS = ("variable_declaration", "lexical_declaration")


class DataFileError(ValueError):
    """Raised when a data file is not valid JavaScript or has the wrong shape."""


class DataFileParser:
    """Parses the JavaScript tables of a Doxygen HTML site."""

    def __init__(self) -> None:
        """Initialise parser with the JavaScript grammar."""
        self._parser = Parser(JS_LANGUAGE)

    def read_variables(self, source: str | bytes, name: str = "<string>") -> dict[str, Any]:
        """Read the literal values of top-level variable declarations.

        Args:
            source: JavaScript source text.
            name: File name used in error messages.

        Returns:
            Mapping of variable name to its value converted to Python.

        Raises:
            DataFileError: If the source is not UTF-8, has syntax errors or
                a declared value is not a literal.
        """
        if isinstance(source, bytes):
            try:
                source = source.decode("utf-8")
            except UnicodeDecodeError as exc:
                msg = f"{name}: not valid UTF-8"
                raise DataFileError(msg) from exc
        tree = self._parser.parse(source.encode("utf-8"))
        root = tree.root_node
        if root.has_error:
            line = self._first_error_line(root)
            msg = f"{name}: JavaScript syntax error near line {line}"
            raise DataFileError(msg)

        variables: dict[str, Any] = {}
        for statement in root.named_children:
            if statement.type not in _DECLARATIONS:
                continue
            for declarator in statement.named_children:
                if declarator.type != "variable_declarator":
                    continue
                name_node = declarator.child_by_field_name("name")
                value_node = declarator.child_by_field_name("value")
                if name_node is None or value_node is None:
                    continue
                variable = _text(name_node)
                variables[variable] = self._to_value(value_node, f"{name}: {variable}")
        return variables

    def parse_navigation(self, source: str | bytes, name: str = "navtreedata.js") -> NavigationData:
        """Parse the contents of ``navtreedata.js``.

        Args:
            source: JavaScript source text.
            name: File name used in error messages.

        Returns:
            NavigationData instance.

        Raises:
            DataFileError: If ``NAVTREE`` is missing or malformed.
        """
        variables = self.read_variables(source, name)
        if "NAVTREE" not in variables:
            msg = f"{name}: NAVTREE is not declared"
            raise DataFileError(msg)

        nodes = _nodes_from_value(variables["NAVTREE"], f"{name}: NAVTREE")
        pages = variables.get("NAVTREEINDEX", [])
        if not isinstance(pages, list) or not all(isinstance(page, str) for page in pages):
            msg = f"{name}: NAVTREEINDEX must be a list of strings"
            raise DataFileError(msg)

        return NavigationData(
            tree=NavigationTree(nodes),
            index=NavigationIndex(tuple(pages)),
            sync_on_message=_optional_string(variables, "SYNCONMSG", name),
            sync_off_message=_optional_string(variables, "SYNCOFFMSG", name),
        )

    def parse_subindex(
        self, source: str | bytes, name: str, variable: str | None = None
    ) -> tuple[NavigationNode, ...]:
        """Parse a sub-index file such as ``topics.js``.

        Args:
            source: JavaScript source text.
            name: File name used in error messages.
            variable: Declared variable to read, defaults to the file stem.

        Returns:
            The child nodes held by the sub-index.

        Raises:
            DataFileError: If the variable is missing or malformed.
        """
        variable = variable or Path(name).stem
        variables = self.read_variables(source, name)
        if variable not in variables:
            msg = f"{name}: {variable} is not declared"
            raise DataFileError(msg)
        return _nodes_from_value(variables[variable], f"{name}: {variable}")

    def parse_index_chunk(self, source: str | bytes, name: str = "navtreeindex0.js") -> NavigationIndexChunk:
        """Parse a ``navtreeindexN.js`` chunk.

        Args:
            source: JavaScript source text.
            name: File name used in error messages.

        Returns:
            NavigationIndexChunk instance.

        Raises:
            DataFileError: If no ``NAVTREEINDEX<n>`` object is declared.
        """
        for variable, value in self.read_variables(source, name).items():
            match = _CHUNK_VARIABLE.match(variable)
            if match is None:
                continue
            if not isinstance(value, dict):
                msg = f"{name}: {variable} must be an object"
                raise DataFileError(msg)
            paths = {}
            for url, path in value.items():
                if not isinstance(path, list) or not all(isinstance(step, int) for step in path):
                    msg = f"{name}: {variable}[{url!r}] must be a list of integers"
                    raise DataFileError(msg)
                paths[str(url)] = tuple(path)
            return NavigationIndexChunk(number=int(match.group(1)), paths=paths)

        msg = f"{name}: no NAVTREEINDEX<n> table is declared"
        raise DataFileError(msg)

    def parse_search_index(self, source: str | bytes, name: str = "search.js") -> SearchIndex:
        """Parse a ``searchData`` fragment.

        Args:
            source: JavaScript source text.
            name: File name used in error messages.

        Returns:
            SearchIndex instance whose source is the file stem.

        Raises:
            DataFileError: If ``searchData`` is missing or malformed.
        """
        variables = self.read_variables(source, name)
        if "searchData" not in variables:
            msg = f"{name}: searchData is not declared"
            raise DataFileError(msg)
        rows = variables["searchData"]
        if not isinstance(rows, list):
            msg = f"{name}: searchData must be a list"
            raise DataFileError(msg)
        entries = tuple(_entry_from_value(row, f"{name}: searchData[{i}]") for i, row in enumerate(rows))
        return SearchIndex(entries=entries, source=Path(name).stem)

    def parse_search_sections(self, source: str | bytes, name: str = "searchdata.js") -> SearchSections:
        """Parse the category tables of ``searchdata.js``.

        Args:
            source: JavaScript source text.
            name: File name used in error messages.

        Returns:
            SearchSections instance.
        """
        variables = self.read_variables(source, name)
        return SearchSections(
            names=_section_table(variables, "indexSectionNames", name),
            labels=_section_table(variables, "indexSectionLabels", name),
            contents=_section_table(variables, "indexSectionsWithContent", name),
        )

    def parse_search_file(self, file_path: Path) -> SearchIndex | None:
        """Read and parse a search data file.

        Args:
            file_path: Path to the ``search/*.js`` file.

        Returns:
            SearchIndex instance or None if reading or parsing fails.
        """
        try:
            source = file_path.read_bytes()
            return self.parse_search_index(source, file_path.name)
        except (OSError, DataFileError):
            return None

    def _to_value(self, node: Node, where: str) -> Any:
        """Convert a literal syntax node into a Python value.

        Args:
            node: Tree-sitter node.
            where: Location used in error messages.

        Returns:
            Python value.

        Raises:
            DataFileError: If the node is not a literal.
        """
        kind = node.type
        if kind == "array":
            return [
                self._to_value(child, f"{where}[{i}]")
                for i, child in enumerate(c for c in node.named_children if c.type != "comment")
            ]
        if kind == "object":
            result: dict[Any, Any] = {}
            for pair in node.named_children:
                if pair.type != "pair":
                    continue
                key = self._object_key(pair.child_by_field_name("key"), where)
                result[key] = self._to_value(pair.child_by_field_name("value"), f"{where}[{key!r}]")
            return result
        if kind == "string":
            return _string_value(node)
        if kind == "number":
            return _number_value(_text(node))
        if kind == "null":
            return None
        if kind in ("true", "false"):
            return kind == "true"
        if kind == "parenthesized_expression" and node.named_child_count == 1:
            return self._to_value(node.named_children[0], where)
        if kind == "unary_expression":
            operator = node.child_by_field_name("operator")
            argument = node.child_by_field_name("argument")
            if operator is not None and argument is not None and argument.type == "number":
                value = _number_value(_text(argument))
                if _text(operator) == "-":
                    return -value
                if _text(operator) == "+":
                    return value
        msg = f"{where}: unsupported JavaScript value {_text(node)[:40]!r}"
        raise DataFileError(msg)

    def _object_key(self, node: Node | None, where: str) -> Any:
        if node is None:
            msg = f"{where}: object property without a key"
            raise DataFileError(msg)
        if node.type == "string":
            return _string_value(node)
        if node.type == "number":
            return _number_value(_text(node))
        return _text(node)

    @staticmethod
    def _first_error_line(root: Node) -> int:
        stack = [root]
        while stack:
            node = stack.pop()
            if node.type == "ERROR" or node.is_missing:
                return node.start_point[0] + 1
            stack.extend(reversed(node.children))
        return root.start_point[0] + 1


def _text(node: Node) -> str:
    return (node.text or b"").decode("utf-8")


def _string_value(node: Node) -> str:
    parts = []
    for child in node.named_children:
        if child.type == "escape_sequence":
            parts.append(_unescape(_text(child)))
        else:
            parts.append(_text(child))
    return "".join(parts)


def _unescape(sequence: str) -> str:
    numeric = _NUMERIC_ESCAPE.fullmatch(sequence)
    if numeric:
        hex_byte, hex_unit, braced, octal = numeric.groups()
        if octal is not None:
            # \400 and above read as a two-digit escape followed by a digit
            if int(octal, 8) > 0o377:
                return chr(int(octal[:2], 8)) + octal[2]
            return chr(int(octal, 8))
        code = int(hex_byte or hex_unit or braced, 16)
        if code > 0x10FFFF:
            msg = f"invalid escape sequence {sequence!r}"
            raise DataFileError(msg)
        return chr(code)
    body = sequence[1:]
    # Line continuation
    if body in _LINE_TERMINATORS:
        return ""
    return _SIMPLE_ESCAPES.get(body, body)


def _number_value(text: str) -> int | float:
    if _LEGACY_OCTAL.fullmatch(text):
        return int(text, 8)
    if _LEADING_ZERO_DECIMAL.fullmatch(text):
        return int(text, 10)
    try:
        return int(text, 0)
    except ValueError:
        pass
    try:
        return float(text)
    except ValueError as exc:
        msg = f"unsupported number literal {text!r}"
        raise DataFileError(msg) from exc


def _optional_string(variables: dict[str, Any], variable: str, name: str) -> str | None:
    value = variables.get(variable)
    if value is not None and not isinstance(value, str):
        msg = f"{name}: {variable} must be a string"
        raise DataFileError(msg)
    return value


def _section_table(variables: dict[str, Any], variable: str, name: str) -> dict[int, str]:
    table = variables.get(variable, {})
    if not isinstance(table, dict):
        msg = f"{name}: {variable} must be an object"
        raise DataFileError(msg)
    try:
        return {int(key): str(value) for key, value in table.items()}
    except ValueError as exc:
        msg = f"{name}: {variable} keys must be numbers"
        raise DataFileError(msg) from exc


def _nodes_from_value(value: Any, where: str) -> tuple[NavigationNode, ...]:
    if not isinstance(value, list):
        msg = f"{where} must be a list of nodes"
        raise DataFileError(msg)
    return tuple(_node_from_value(item, f"{where}[{i}]") for i, item in enumerate(value))


def _node_from_value(value: Any, where: str) -> NavigationNode:
    """Build a node from its ``[label, target, children]`` triple.

    The third element is a list of children, a sub-index name, or null.
    """
    if not isinstance(value, list) or len(value) != 3:
        msg = f"{where} must be a [label, target, children] triple"
        raise DataFileError(msg)
    label, target, third = value
    if not isinstance(label, str):
        msg = f"{where}[0] must be a string label"
        raise DataFileError(msg)
    if target is not None and not isinstance(target, str):
        msg = f"{where}[1] must be a string target or null"
        raise DataFileError(msg)

    if third is None:
        return NavigationNode(label, target)
    if isinstance(third, str):
        return NavigationNode(label, target, subindex=third)
    if isinstance(third, list):
        children = tuple(_node_from_value(item, f"{where}[2][{i}]") for i, item in enumerate(third))
        return NavigationNode(label, target, children=children)
    msg = f"{where}[2] must be a list, a sub-index name or null"
    raise DataFileError(msg)


def _entry_from_value(value: Any, where: str) -> SearchEntry:
    """Build an entry from ``[key, [name, [url, flag, scope], ...]]``."""
    if not isinstance(value, list) or len(value) != 2 or not isinstance(value[0], str):
        msg = f"{where} must be a [key, [name, matches...]] pair"
        raise DataFileError(msg)
    key, body = value
    if not isinstance(body, list) or not body or not isinstance(body[0], str):
        msg = f"{where}[1] must start with a string label"
        raise DataFileError(msg)

    matches = []
    for i, item in enumerate(body[1:], start=1):
        if (
            not isinstance(item, list)
            or len(item) != 3
            or not isinstance(item[0], str)
            or not isinstance(item[2], str)
        ):
            msg = f"{where}[1][{i}] must be a [url, flag, scope] triple"
            raise DataFileError(msg)
        matches.append(SearchMatch(destination=item[0], internal=bool(item[1]), scope=item[2]))
    return SearchEntry(key=key, name=body[0], matches=tuple(matches))
