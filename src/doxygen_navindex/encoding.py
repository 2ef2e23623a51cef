"""Search key encoding used by Doxygen search data files."""

import html
import re

_ENCODED_BYTE = re.compile(r"_([0-9a-f]{2})")
_TAG = re.compile(r"<[^>]*>")


def encode_term(text: str) -> str:
    """Encode a search term the way Doxygen names search keys.

    ASCII letters and digits are kept; every other character is written
    as ``_`` followed by two lower-case hex digits per UTF-8 byte.

    Args:
        text: Term to encode.

    Returns:
        Encoded, lower-cased term.
    """
    parts = []
    for char in text.lower():
        if char.isascii() and char.isalnum():
            parts.append(char)
        else:
            parts.extend(f"_{byte:02x}" for byte in char.encode("utf-8"))
    return "".join(parts)


def make_key(text: str, ordinal: int) -> str:
    return f"{encode_term(text)}_{ordinal}"


def split_key(key: str) -> tuple[str, int]:
    """Split a search key into its encoded term and ordinal.

    The ordinal follows the last underscore, so ``more_20`` is the term
    ``more`` with ordinal 20 rather than ``more `` with no ordinal.

    Args:
        key: Search key such as ``parsed_20flags_0``.

    Returns:
        Tuple of encoded term and ordinal.

    Raises:
        ValueError: If the key has no decimal ordinal suffix.
    """
    encoded, sep, ordinal = key.rpartition("_")
    if not sep or not encoded or not ordinal.isdecimal():
        msg = f"Search key has no ordinal suffix: {key!r}"
        raise ValueError(msg)
    return encoded, int(ordinal)


def decode_term(encoded: str) -> str:
    """Decode an encoded term back to text.

    Args:
        encoded: Encoded term without ordinal.

    Returns:
        Decoded term.
    """
    raw = bytearray()
    position = 0
    for match in _ENCODED_BYTE.finditer(encoded):
        raw.extend(encoded[position : match.start()].encode("utf-8"))
        raw.append(int(match.group(1), 16))
        position = match.end()
    raw.extend(encoded[position:].encode("utf-8"))
    return raw.decode("utf-8", errors="replace")


def decode_key(key: str) -> str:
    return decode_term(split_key(key)[0])


def label_text(label: str) -> str:
    """Convert an HTML label into plain text.

    Args:
        label: Label that may hold tags and entities.

    Returns:
        Label with tags removed and entities resolved.
    """
    # Labels escape their own markup: &lt;tt&gt; becomes a tag after unescaping
    return _TAG.sub("", html.unescape(_TAG.sub("", label)))


def split_target(target: str) -> tuple[str, str | None]:
    """Split a URL into page and anchor.

    Args:
        target: URL with optional ``#anchor``.

    Returns:
        Tuple of page and anchor (None when absent).
    """
    page, sep, anchor = target.partition("#")
    return page, anchor if sep else None
