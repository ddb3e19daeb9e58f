"""Render templated URLs with encoded interpolated values."""

from __future__ import annotations

from typing import Any, Callable, Mapping, Sequence
from urllib.parse import quote

# characters encodeURIComponent leaves alone besides alphanumerics and "-_."
_UNRESERVED = "!~*'()"


def encode_uri_component(value: str) -> str:
    return quote(value, safe=_UNRESERVED)


def _render(value: Any, encode: Callable[[str], str]) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return encode(value)
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return "/".join(encode(str(item)) for item in value)
    if isinstance(value, Mapping):
        parts = []
        for key, item in value.items():
            if item is None:
                parts.append(encode(str(key)))
            else:
                parts.append(f"{encode(str(key))}={encode(str(item))}")
        return "&".join(parts)
    return str(value)


def create_url(encode: Callable[[str], str] = encode_uri_component):
    """Return a renderer that interleaves literal fragments with encoded values.

    ``None`` renders as an empty string, lists as ``/`` separated segments
    and mappings as a query string where ``None`` values leave a bare key.
    """

    def url(strings: Sequence[str], *values: Any) -> str:
        rendered = []
        for i, literal in enumerate(strings):
            value = values[i] if i < len(values) else None
            rendered.append(f"{literal}{_render(value, encode)}")
        return "".join(rendered).strip()

    return url


url = create_url(encode_uri_component)
