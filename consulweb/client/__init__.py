"""Connection-bounded HTTP client for the Consul web UI."""

from .client import HTTPClient, restart_when_available
from .config import ClientConfig, get_config, load_dotenv_for_client
from .descriptor import RequestDescriptor
from .environment import HostEnvironment, Subscription, Visibility, VisibilityChange
from .exceptions import AbortError, ConsulWebError, ErrorKind, HTTPError, TimeoutError, TransportError
from .pool import ConnectionPool, Disposer, StreamingDisposer
from .settings import Token, TokenStore
from .template import fragments
from .transport import ReadyState

__all__ = [
    "AbortError",
    "ClientConfig",
    "ConnectionPool",
    "ConsulWebError",
    "Disposer",
    "ErrorKind",
    "HTTPClient",
    "HTTPError",
    "HostEnvironment",
    "ReadyState",
    "RequestDescriptor",
    "StreamingDisposer",
    "Subscription",
    "TimeoutError",
    "Token",
    "TokenStore",
    "TransportError",
    "Visibility",
    "VisibilityChange",
    "fragments",
    "get_config",
    "load_dotenv_for_client",
    "restart_when_available",
]
