"""HTTP header and URL utilities."""

from __future__ import annotations

from collections.abc import Iterable
from urllib.parse import urlsplit

from traceviewer.formats.trace_events import Header


def headers_to_dict(headers: Iterable[Header]) -> dict[str, str]:
    """Flatten recorded headers into a dict, later duplicates overwriting earlier ones."""
    result: dict[str, str] = {}
    for h in headers:
        result[h.name] = h.value
    return result


def remove_hash(url: str) -> str:
    """Strip the ``#fragment`` from a URL; unparseable URLs are returned as is."""
    try:
        parts = urlsplit(url)
    except ValueError:
        return url
    if not parts.scheme:
        return url
    return url.split("#", 1)[0]
