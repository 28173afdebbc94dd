"""Header block codec.

Converts the free-text ``key: value`` block a user types into an ordered
multimap (a list of pairs), and back.
"""

from collections.abc import Iterable, Mapping


def parse_headers(text: str) -> list[tuple[str, str]]:
    """Parse a header block into (key, value) pairs.

    Blank lines and lines without a colon are skipped. Only the first colon
    splits, so values may contain colons. Repeated keys are kept in order.
    """
    pairs = []
    for line in text.split("\n"):
        if not line.strip():
            continue
        key, sep, value = line.partition(":")
        if not sep:
            continue
        pairs.append((key.strip(), value.strip()))
    return pairs


def flatten_headers(pairs: Iterable[tuple[str, str]]) -> dict[str, str]:
    """Collapse repeated keys into one value joined with ``", "``.

    This is lossy: the stored form cannot tell ``a: 1`` + ``a: 2`` apart from
    ``a: 1, 2``.
    """
    grouped: dict[str, list[str]] = {}
    for key, value in pairs:
        grouped.setdefault(key, []).append(value)
    return {key: ", ".join(values) for key, values in grouped.items()}


def format_headers(headers: Mapping[str, str] | Iterable[tuple[str, str]]) -> str:
    """Render headers as a text block, one ``key: value`` line each."""
    items = headers.items() if isinstance(headers, Mapping) else headers
    return "".join(f"{key}: {value}\n" for key, value in items)
