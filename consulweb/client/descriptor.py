"""Record of one in-flight request."""

from __future__ import annotations

import json
import uuid
from dataclasses import dataclass, field
from typing import Any, Mapping

from .headers import EVENT_STREAM, JSON_CONTENT_TYPE
from .transport import Connection, ReadyState


def content_type_for(method: str, body: Any) -> str:
    """Blocking queries (a GET whose query carries ``index``) are long-lived streams.

    Other methods send the body as a payload, where ``index`` is just data.
    """
    if method.upper() == "GET" and isinstance(body, Mapping) and "index" in body:
        return EVENT_STREAM
    return JSON_CONTENT_TYPE


@dataclass(frozen=True)
class RequestDescriptor:
    """A live request as tracked by the connection pool."""

    method: str
    url: str
    body: Any
    connection: Connection = field(repr=False, compare=False)
    content_type: str = JSON_CONTENT_TYPE
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    @property
    def is_streaming(self) -> bool:
        return self.content_type == EVENT_STREAM

    @property
    def is_open(self) -> bool:
        return self.connection.ready_state != ReadyState.DONE

    @property
    def key(self) -> str:
        return f"{self.method} {self.url}?{json.dumps(self.body, default=str)}"
