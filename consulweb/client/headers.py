"""Header names and the header line codec."""

from __future__ import annotations

from typing import Dict, Iterable

CONTENT_TYPE = "Content-Type"
CACHE_CONTROL = "Cache-Control"
TOKEN_HEADER = "X-Consul-Token"

JSON_CONTENT_TYPE = "application/json; charset=utf-8"
EVENT_STREAM = "text/event-stream"


def parse_headers(lines: Iterable[str]) -> Dict[str, str]:
    """Parse ``name: value`` lines into a mapping.

    Lines are split on the first colon. Lines without one are ignored and
    later duplicates overwrite earlier ones. Nothing is validated, the
    transport rejects what it cannot send.
    """
    headers: Dict[str, str] = {}
    for line in lines:
        name, sep, value = line.partition(":")
        if not sep:
            continue
        headers[name.strip()] = value.strip()
    return headers


def canonical_header_name(name: str) -> str:
    """Return ``name`` in canonical casing, e.g. ``content-type`` -> ``Content-Type``."""
    return "-".join(part.capitalize() for part in name.strip().split("-"))
