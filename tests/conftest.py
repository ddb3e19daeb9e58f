"""Pytest configuration and fixtures."""

import asyncio

import pytest
from unittest.mock import AsyncMock, MagicMock

from consulweb.client.client import HTTPClient
from consulweb.client.config import ClientConfig
from consulweb.client.environment import Visibility
from consulweb.client.settings import Token
from consulweb.client.transport import ReadyState


class FakeConnection:
    """Connection handle that records aborts."""

    def __init__(self, ready_state=ReadyState.OPENED):
        self.ready_state = ready_state
        self.abort_calls = 0

    def abort(self):
        self.abort_calls += 1


class FakeTransport:
    """Transport that opens connections on submit and lets tests finish them."""

    def __init__(self):
        self.submitted = []
        self.closed = False

    def submit(self, request, listener):
        connection = FakeConnection()
        self.submitted.append((request, listener, connection))
        listener.on_send(connection)
        return connection

    def succeed(self, index=-1, header_lines=(), body=None):
        _, listener, connection = self.submitted[index]
        connection.ready_state = ReadyState.DONE
        listener.on_success(list(header_lines), body)
        listener.on_complete()

    def fail(self, kind, status=0, text="", index=-1, cause=None):
        _, listener, connection = self.submitted[index]
        connection.ready_state = ReadyState.DONE
        listener.on_error(kind, status, text, cause)
        listener.on_complete()

    @property
    def last_request(self):
        return self.submitted[-1][0]

    async def aclose(self):
        self.closed = True


async def settle(rounds=5):
    """Let scheduled tasks run up to their next real suspension point."""
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.fixture
def mock_token():
    """ACL token secret for testing."""
    return "b1gs33cr3t-0000-0000-0000-000000000000"


@pytest.fixture
def settings(mock_token):
    """Settings collaborator resolving the mock token."""
    mock = MagicMock()
    mock.find_token = AsyncMock(return_value=Token(secret=mock_token))
    return mock


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def visibility():
    return Visibility()


@pytest.fixture
def client(transport, settings, visibility):
    """Client without a connection cap."""
    return HTTPClient(
        ClientConfig(base_url="http://consul.test:8500"),
        transport=transport,
        settings=settings,
        environment=visibility,
    )


@pytest.fixture
def capped_client(transport, settings, visibility):
    """Client limited to two simultaneous connections."""
    return HTTPClient(
        ClientConfig(base_url="http://consul.test:8500", max_connections=2),
        transport=transport,
        settings=settings,
        environment=visibility,
    )
