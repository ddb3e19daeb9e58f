"""Default transport for the consulweb client.

This module provides a thin wrapper around httpx that reports each
exchange through the listener callbacks the HTTP client expects, and
exposes a live connection handle the pool can inspect and abort.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Set

import httpx

from .exceptions import ErrorKind
from .transport import ReadyState, TransportListener, TransportRequest

logger = logging.getLogger(__name__)


@dataclass
class TimeoutConfig:
    """Configuration for HTTP request timeouts."""

    read: float = 30.0
    connect: float = 10.0
    write: float = 30.0
    pool: float = 30.0


class HttpxConnection:
    """Handle for one exchange, tracking its ready state."""

    def __init__(self):
        self.ready_state = ReadyState.UNSENT
        self.aborted = False
        self._task: Optional[asyncio.Task] = None

    def abort(self) -> None:
        if self.ready_state == ReadyState.DONE:
            return
        self.aborted = True
        if self._task is not None:
            self._task.cancel()


def _parse_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


class HttpxTransport:
    """Async transport backed by a lazily created ``httpx.AsyncClient``."""

    def __init__(
        self,
        base_url: str = "",
        timeout_config: Optional[TimeoutConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url
        self.timeout_config = timeout_config or TimeoutConfig()
        self._client = client
        # the loop only keeps weak references to tasks
        self._tasks: Set["asyncio.Task[httpx.Response]"] = set()

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            timeout = httpx.Timeout(
                read=self.timeout_config.read,
                connect=self.timeout_config.connect,
                write=self.timeout_config.write,
                pool=self.timeout_config.pool,
            )
            self._client = httpx.AsyncClient(base_url=self.base_url, timeout=timeout)
        return self._client

    def submit(self, request: TransportRequest, listener: TransportListener) -> HttpxConnection:
        """Open a connection, announce it to ``listener`` and start the exchange."""
        connection = HttpxConnection()
        connection.ready_state = ReadyState.OPENED
        listener.on_send(connection)

        task = asyncio.ensure_future(self._exchange(request, connection))
        connection._task = task
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        task.add_done_callback(lambda done: self._finish(done, connection, listener))
        if connection.aborted:
            task.cancel()
        return connection

    def _build(self, request: TransportRequest) -> httpx.Request:
        kwargs: dict = {}
        data = request.data
        if data is not None:
            if request.method == "GET" and isinstance(data, Mapping):
                kwargs["params"] = {k: ("" if v is None else v) for k, v in data.items()}
            elif isinstance(data, (str, bytes)):
                kwargs["content"] = data
            elif isinstance(data, Mapping):
                kwargs["data"] = data
            else:
                kwargs["content"] = str(data)
        headers = dict(request.headers)
        if request.content_type:
            headers["Content-Type"] = request.content_type
        return self._get_client().build_request(request.method, request.url, headers=headers, **kwargs)

    async def _exchange(self, request: TransportRequest, connection: HttpxConnection) -> httpx.Response:
        client = self._get_client()
        response = await client.send(self._build(request), stream=True)
        try:
            connection.ready_state = ReadyState.HEADERS_RECEIVED
            connection.ready_state = ReadyState.LOADING
            await response.aread()
        finally:
            await response.aclose()
        return response

    def _finish(self, task: asyncio.Future, connection: HttpxConnection, listener: TransportListener) -> None:
        connection.ready_state = ReadyState.DONE
        try:
            if task.cancelled():
                listener.on_error(ErrorKind.ABORT, 0, "abort")
                return

            exc = task.exception()
            if exc is None:
                response = task.result()
                if response.is_success:
                    lines: List[str] = [f"{name}: {value}" for name, value in response.headers.items()]
                    listener.on_success(lines, _parse_body(response))
                else:
                    listener.on_error(ErrorKind.ERROR, response.status_code, response.text)
            elif isinstance(exc, httpx.TimeoutException):
                logger.debug("Request timed out: %s", exc)
                listener.on_error(ErrorKind.TIMEOUT, 408, str(exc) or "timeout")
            elif isinstance(exc, httpx.HTTPError):
                logger.debug("Request failed: %s", exc)
                listener.on_error(ErrorKind.ERROR, 0, str(exc))
            else:
                logger.error("Unexpected transport failure", exc_info=exc)
                listener.on_error(ErrorKind.ERROR, 0, str(exc), cause=exc)
        finally:
            listener.on_complete()

    async def aclose(self) -> None:
        """Close the underlying HTTP client and release resources."""
        if self._client:
            await self._client.aclose()
            self._client = None
