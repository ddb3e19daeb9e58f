"""Exception classes for the consulweb client.

Every request failure surfaces as an :class:`HTTPError` subclass carrying a
``status_code`` and a ``message``. Aborted and timed out requests keep the
status values callers already branch on (``0`` and ``408``).
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Classification of a failed transport exchange."""

    ERROR = "error"
    ABORT = "abort"
    TIMEOUT = "timeout"


class ConsulWebError(Exception):
    """Base exception for all consulweb client errors.

    All custom exceptions in the client inherit from this base class,
    allowing applications to catch every client-specific error with a
    single except clause if desired.
    """

    pass


class HTTPError(ConsulWebError):
    """Raised when a request fails.

    Attributes
    ----------
    status_code : int
        The HTTP status code (e.g., 400, 404, 500), ``0`` for aborted
        requests or ``408`` for timeouts
    message : str
        The response text, typically containing error details
    """

    def __init__(self, status_code: int, message: str = ""):
        self.status_code = status_code
        self.message = message
        super().__init__(f"HTTP {status_code}: {message}")

    @property
    def body(self) -> str:
        return self.message


class TransportError(HTTPError):
    """Raised for non-2xx responses and network failures.

    Keeps the original status code and response text.
    """


class AbortError(HTTPError):
    """Raised when a request was cancelled by eviction, purge or abort."""

    def __init__(self, message: str = ""):
        super().__init__(0, message)


class TimeoutError(HTTPError):
    """Raised when the transport gave up waiting for a response."""

    def __init__(self, message: str = ""):
        super().__init__(408, message)


def error_for(kind: ErrorKind, status: int, text: str = "") -> HTTPError:
    """Build the typed error for a failed exchange."""
    kind = ErrorKind(kind)
    if kind is ErrorKind.ABORT:
        return AbortError(text)
    if kind is ErrorKind.TIMEOUT:
        return TimeoutError(text)
    return TransportError(status, text)
