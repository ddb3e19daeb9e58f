"""Connection-bounded async HTTP client for the Consul API."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Set, Tuple, TypeVar

from ._http import HttpxTransport, TimeoutConfig
from .config import ClientConfig, get_config
from .descriptor import RequestDescriptor, content_type_for
from .environment import HostEnvironment, Listeners, Visibility, VisibilityChange
from .exceptions import ErrorKind, HTTPError, error_for
from .headers import (
    CACHE_CONTROL,
    CONTENT_TYPE,
    JSON_CONTENT_TYPE,
    TOKEN_HEADER,
    canonical_header_name,
    parse_headers,
)
from .pool import ConnectionPool, StreamingDisposer
from .settings import TokenStore
from .template import parse_request, split_body
from .transport import Connection, Transport, TransportRequest
from .url import url as render_url

logger = logging.getLogger(__name__)

T = TypeVar("T")
Respond = Callable[[Callable[[Dict[str, str], Any], T]], T]
Send = Callable[..., Awaitable[Respond]]


class _RequestListener:
    """Bridges transport callbacks for one request onto a future."""

    def __init__(
        self,
        client: "HTTPClient",
        method: str,
        url: str,
        body: Any,
        cache_control: Optional[str],
        future: "asyncio.Future[Respond]",
    ):
        self.client = client
        self.method = method
        self.url = url
        self.body = body
        self.cache_control = cache_control
        self.future = future
        self.id: Optional[str] = None

    def on_send(self, connection: Connection) -> None:
        descriptor = RequestDescriptor(
            self.method,
            self.url,
            self.body if self.body is not None else {},
            connection,
            content_type=content_type_for(self.method, self.body),
        )
        self.id = self.client.acquire(descriptor)
        logger.debug("Sent %s", descriptor.key)

    def on_success(self, header_lines: List[str], body: Any) -> None:
        headers = parse_headers(header_lines)
        if self.cache_control is not None:
            # the request asked for it, hand it back on the response
            headers[CACHE_CONTROL] = self.cache_control

        def respond(cb):
            return cb(headers, body)

        if not self.future.done():
            self.future.set_result(respond)

    def on_error(
        self,
        kind: ErrorKind,
        status: int,
        text: str,
        cause: Optional[BaseException] = None,
    ) -> None:
        error = cause if cause is not None else error_for(kind, status, text)
        if not self.future.done():
            self.future.set_exception(error)

    def on_complete(self) -> None:
        if self.id is not None:
            self.client.complete(self.id)
            logger.debug("Completed %s %s", self.method, self.url)


class HTTPClient:
    """Async client issuing templated requests through a bounded connection pool.

    Requests are written as templates, a method and URL on the first line,
    optional header lines, then a blank line and the body::

        respond = await client.request(
            lambda send: send(["PUT /v1/kv/", "\\n\\n", ""], key, value)
        )
        headers, body = respond(lambda headers, body: (headers, body))

    When ``max_connections`` is configured the client sheds every tracked
    connection as soon as the host environment is hidden, and aborted
    requests can wait for it to become visible again with
    :meth:`when_available`.

    Parameters
    ----------
    config : ClientConfig, optional
        Client configuration. Defaults to the environment-derived config
    transport : Transport, optional
        Collaborator doing the network I/O. Defaults to httpx
    settings : object, optional
        Anything with an async ``find_token()``. Defaults to :class:`TokenStore`
    environment : HostEnvironment, optional
        Source of the visibility signal
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        *,
        transport: Optional[Transport] = None,
        settings: Any = None,
        environment: Optional[HostEnvironment] = None,
    ):
        self.config = config or get_config()
        self.transport = transport or HttpxTransport(
            self.config.base_url,
            TimeoutConfig(read=self.config.timeout, write=self.config.timeout, pool=self.config.timeout),
        )
        self.settings = settings or TokenStore(self.config.token_path)
        self.environment = environment or Visibility()
        self.max_connections = self.config.max_connections
        self.connections = ConnectionPool(StreamingDisposer(), self.max_connections)

        self._listeners = Listeners()
        self._waiting: Set["asyncio.Future[Any]"] = set()
        if self.max_connections is not None:
            # when the surface is hidden, drop every connection
            self._listeners.add(self.environment, self._on_visibility_change)

    def _on_visibility_change(self, event: VisibilityChange) -> None:
        if event.hidden:
            logger.debug("Environment hidden, purging %d connection(s)", len(self.connections))
            self.connections.purge()

    # ---------------- Templates -----------------

    def url(self, strings: Sequence[str], *values: Any) -> str:
        return render_url(strings, *values)

    def body(self, strings: Sequence[str], *values: Any) -> Tuple[Any, List[Any]]:
        return split_body(strings, values)

    # ---------------- Requests -----------------

    def request(self, builder: Callable[[Send], T]) -> T:
        """Call ``builder`` with the send function and return what it returns.

        ``send(strings, *values)`` is a coroutine resolving to ``respond``;
        ``respond(cb)`` calls ``cb(headers, body)``.

        Raises
        ------
        HTTPError
            When the request fails, ``status_code`` is ``0`` for aborted
            requests and ``408`` for timeouts
        ValueError
            If the template has no method or URL
        """
        return builder(self._send)

    async def _send(self, strings: Sequence[str], *values: Any) -> Respond:
        parsed = parse_request(strings, values, url=self.url)
        token = await self.settings.find_token()

        request_headers = {canonical_header_name(k): v for k, v in parse_headers(parsed.header_lines).items()}
        headers: Dict[str, str] = {
            # default to json
            CONTENT_TYPE: JSON_CONTENT_TYPE,
            # application level headers
            TOKEN_HEADER: token.secret or "",
            # anything on the request itself wins
            **request_headers,
        }
        # cache-control is never sent, it is only echoed onto the response
        headers.pop(CACHE_CONTROL, None)
        cache_control = request_headers.get(CACHE_CONTROL)

        content_type = headers[CONTENT_TYPE]
        data = parsed.body
        if data is not None and parsed.method != "GET" and "json" in content_type:
            data = json.dumps(data)

        future: "asyncio.Future[Respond]" = asyncio.get_running_loop().create_future()
        listener = _RequestListener(self, parsed.method, parsed.url, parsed.body, cache_control, future)
        self.transport.submit(
            TransportRequest(
                method=parsed.method,
                url=parsed.url,
                headers=headers,
                content_type=content_type,
                data=data,
            ),
            listener,
        )
        return await future

    def abort(self, id: Optional[str] = None) -> None:
        """Abort in-flight requests.

        Notes
        -----
        ``id`` is accepted but every tracked connection is purged, not only
        the one matching ``id``.
        """
        logger.debug("Aborting all connections (requested id=%s)", id)
        self.connections.purge()

    async def when_available(self, error: T) -> T:
        """Wait until aborted requests are worth re-issuing, then return ``error``.

        Only waits when a connection cap is configured and the environment
        is hidden; resolves on the next change to visible.
        """
        if self.max_connections is None or not self.environment.hidden:
            return error

        future: "asyncio.Future[T]" = asyncio.get_running_loop().create_future()
        subscription = None

        def resumed(event: VisibilityChange) -> None:
            if event.hidden:
                return
            # None when the environment notifies from inside subscribe
            if subscription is not None:
                subscription.remove()
            if not future.done():
                future.set_result(error)

        subscription = self._listeners.add(self.environment, resumed)
        self._waiting.add(future)
        logger.debug("Waiting for the environment to become visible")
        try:
            return await future
        finally:
            self._waiting.discard(future)
            subscription.remove()

    # ---------------- Pool -----------------

    def acquire(self, descriptor: RequestDescriptor) -> str:
        return self.connections.acquire(descriptor)

    def complete(self, id: str) -> None:
        self.connections.release(id)

    # ---------------- Lifecycle -----------------

    async def aclose(self) -> None:
        """Unsubscribe from the environment, drop all connections and close the transport.

        Should be called when done with the client. Can also be used as an
        async context manager to handle this automatically.
        """
        self._listeners.remove()
        for future in list(self._waiting):
            future.cancel()
        self.connections.purge()
        await self.transport.aclose()

    async def __aenter__(self) -> "HTTPClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()


def restart_when_available(client: HTTPClient) -> Callable[[BaseException], Awaitable[BaseException]]:
    """Return an error handler that waits out aborted requests.

    Errors with status ``0`` wait for :meth:`HTTPClient.when_available` so
    the caller can re-issue the request; anything else is re-raised.
    """

    async def handle(error: BaseException) -> BaseException:
        if isinstance(error, HTTPError) and error.status_code == 0:
            return await client.when_available(error)
        raise error

    return handle
