"""Configuration management for the consulweb client."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field


class ClientConfig(BaseModel):
    """Unified configuration for the consulweb client."""

    model_config = ConfigDict(frozen=True)

    # API endpoint
    base_url: str = Field(default="http://127.0.0.1:8500")

    # Connection limits; unset means unbounded
    max_connections: Optional[int] = Field(default=None, gt=0)
    timeout: float = Field(default=30.0, gt=0)

    # Token storage override, defaults to ~/.consulweb/token.json
    token_path: Optional[Path] = Field(default=None)

    environment: str = Field(default="production")

    @classmethod
    def from_environment(cls) -> "ClientConfig":
        """Create configuration from environment variables."""
        config_data = {
            "base_url": _normalize_address(os.getenv("CONSUL_HTTP_ADDR", "http://127.0.0.1:8500")),
            "max_connections": _get_int("CONSUL_HTTP_MAX_CONNECTIONS"),
            "environment": (os.getenv("MODE") or os.getenv("CONSUL_WEB_ENV", "production")).lower(),
        }

        timeout = _get_float("CONSUL_HTTP_TIMEOUT")
        if timeout is not None:
            config_data["timeout"] = timeout

        if token_path := os.getenv("CONSUL_TOKEN_FILE"):
            config_data["token_path"] = Path(token_path).expanduser()

        return cls(**config_data)


def _normalize_address(address: str) -> str:
    """Accept bare ``host:port`` addresses the way the consul CLI does."""
    address = address.strip().rstrip("/")
    if "://" not in address:
        address = f"http://{address}"
    return address


def _get_int(key: str) -> Optional[int]:
    """Get integer environment variable, ``None`` when unset or invalid."""
    value = os.getenv(key)
    if value is None or not value.strip():
        return None
    try:
        return int(value)
    except ValueError:
        return None


def _get_float(key: str) -> Optional[float]:
    value = os.getenv(key)
    if value is None or not value.strip():
        return None
    try:
        return float(value)
    except ValueError:
        return None


# Global configuration instance
_config: Optional[ClientConfig] = None


def get_config(*, reload: bool = False) -> ClientConfig:
    """Get the global configuration instance."""
    global _config

    if _config is None or reload:
        _config = ClientConfig.from_environment()

    return _config


def load_dotenv_for_client(path: Optional[Path] = None, *, override: bool = False) -> None:
    """Load ``.env.<mode>`` from the working directory, or ``.env`` when it is missing.

    The mode is resolved the way ``ClientConfig.from_environment`` resolves
    ``environment``. An explicit ``path`` skips the lookup.
    """
    if path is None:
        mode = (os.getenv("MODE") or os.getenv("CONSUL_WEB_ENV", "production")).lower()
        candidates = [Path.cwd() / f".env.{mode}", Path.cwd() / ".env"]
        path = next((candidate for candidate in candidates if candidate.exists()), candidates[0])

    if path.exists():
        load_dotenv(path, override=override)
