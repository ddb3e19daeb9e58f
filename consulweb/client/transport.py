"""Interfaces between the HTTP client and the transport that does the I/O."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, List, Optional, Protocol

from .exceptions import ErrorKind


class ReadyState(IntEnum):
    """Lifecycle of a live connection handle."""

    UNSENT = 0
    OPENED = 1
    HEADERS_RECEIVED = 2
    LOADING = 3
    DONE = 4


class Connection(Protocol):
    ready_state: ReadyState

    def abort(self) -> None: ...


@dataclass
class TransportRequest:
    """Everything the transport needs to issue one request."""

    method: str
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    content_type: Optional[str] = None
    data: Any = None


class TransportListener(Protocol):
    """Callbacks fired by the transport for one request.

    ``on_send`` fires once the connection is opened, then exactly one of
    ``on_success`` or ``on_error``, and ``on_complete`` always last.
    """

    def on_send(self, connection: Connection) -> None: ...

    def on_success(self, header_lines: List[str], body: Any) -> None: ...

    def on_error(
        self,
        kind: ErrorKind,
        status: int,
        text: str,
        cause: Optional[BaseException] = None,
    ) -> None: ...

    def on_complete(self) -> None: ...


class Transport(Protocol):
    def submit(self, request: TransportRequest, listener: TransportListener) -> Connection: ...

    async def aclose(self) -> None: ...
