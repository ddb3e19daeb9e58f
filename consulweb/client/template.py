"""Parse templated requests into method, URL, header lines and body.

A template is an ordered sequence of literal fragments interleaved with
values, ``strings[0] values[0] strings[1] values[1] ... strings[-1]``::

    GET /v1/kv/{key}?dc={dc}
    X-Request: yes

    {body}

A blank line separates the head (method, URL and headers) from the body
values. Several body values are merged into one.
"""

from __future__ import annotations

import string
from dataclasses import dataclass, field
from typing import Any, Callable, List, Mapping, Sequence, Tuple

from .url import url as default_url

_BLANK_LINE = "\n\n"


@dataclass
class ParsedRequest:
    method: str
    url: str
    header_lines: List[str] = field(default_factory=list)
    body: Any = None


def normalize(fragment: str) -> str:
    """Trim every line so indentation never hides a blank line."""
    return "\n".join(line.strip() for line in fragment.split("\n"))


def find_body_boundary(strings: Sequence[str]) -> int:
    for i, fragment in enumerate(strings):
        if _BLANK_LINE in normalize(fragment):
            return i
    return -1


def merge_body(values: Sequence[Any]) -> Any:
    """Fold body values into one.

    Lists concatenate, mappings shallow merge with later keys winning and
    anything else replaces the body. The first value decides whether the
    accumulator is a list or a mapping; a value of the other kind replaces
    it wholesale.
    """
    body: Any = {}
    for i, item in enumerate(values):
        if isinstance(item, (list, tuple)):
            if i == 0 or isinstance(body, list):
                body = (body if i > 0 else []) + list(item)
            else:
                body = list(item)
        elif isinstance(item, Mapping):
            if isinstance(body, Mapping):
                body = {**body, **item}
            else:
                body = dict(item)
        else:
            body = item
    return body


def split_body(strings: Sequence[str], values: Sequence[Any]) -> Tuple[Any, List[Any]]:
    """Split the values into ``(body, head_values)``.

    ``body`` is ``None`` when the template has no blank line.
    """
    boundary = find_body_boundary(strings)
    if boundary == -1:
        return None, list(values)
    return merge_body(values[boundary:]), list(values[:boundary])


def parse_request(
    strings: Sequence[str],
    values: Sequence[Any],
    url: Callable[..., str] = default_url,
) -> ParsedRequest:
    normalized = [normalize(fragment) for fragment in strings]
    boundary = find_body_boundary(normalized)
    body, head_values = split_body(normalized, values)
    if boundary == -1:
        head = normalized
    else:
        # a body value may itself be None, so cut on the boundary not the body
        head = normalized[:boundary] + [normalized[boundary].split(_BLANK_LINE, 1)[0]]

    method, _, rest = url(head, *head_values).partition(" ")
    target, *header_lines = rest.split("\n")
    target = target.strip()
    if not method or not target:
        raise ValueError(f"Malformed request template: {''.join(strings)!r}")
    return ParsedRequest(method=method, url=target, header_lines=header_lines, body=body)


def fragments(fmt: str, **values: Any) -> Tuple[List[str], List[Any]]:
    """Build ``(strings, values)`` from a ``str.format`` style template.

    >>> fragments("GET /v1/kv/{key}", key="foo bar")
    (['GET /v1/kv/', ''], ['foo bar'])

    Fields must be named. A field with a conversion or format spec
    (``{n!r}``, ``{n:03d}``) is formatted to a string before it is placed.
    """
    formatter = string.Formatter()
    strings: List[str] = []
    args: List[Any] = []
    pending = ""
    for literal, name, spec, conversion in formatter.parse(fmt):
        pending += literal
        if name is None:
            continue
        if not name or name.isdigit():
            raise ValueError(f"Template fields must be named, got {{{name}}} in {fmt!r}")
        if name not in values:
            raise ValueError(f"No value for template field {name!r}")
        value = values[name]
        if conversion or spec:
            value = formatter.format_field(formatter.convert_field(value, conversion), spec)
        strings.append(pending)
        args.append(value)
        pending = ""
    strings.append(pending)
    return strings, args
