"""Token storage for the consulweb client.

The ACL token is kept in a JSON file in the user's home directory so that
every client in the same account picks it up.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError


class Token(BaseModel):
    """An ACL token as stored and as returned by the ACL API."""

    model_config = ConfigDict(populate_by_name=True)

    accessor_id: Optional[str] = Field(default=None, alias="AccessorID")
    secret: Optional[str] = Field(default=None, alias="SecretID")


def _default_token_path() -> Path:
    """Get the platform-specific path for storing the token.

    Notes
    -----
    Token locations by platform:
    - Linux/Mac: ~/.consulweb/token.json
    - Windows: %USERPROFILE%\\.consulweb\\token.json
    """
    return Path.home() / ".consulweb" / "token.json"


class TokenStore:
    """File-backed settings store the HTTP client resolves its token from.

    Parameters
    ----------
    path : Path, optional
        Location of the token file. Defaults to ``~/.consulweb/token.json``
    """

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path is not None else _default_token_path()

    def save_token(self, secret: str, accessor_id: Optional[str] = None) -> None:
        """Save a token, creating the directory if needed.

        The file is written with permissions 600 on Unix-like systems.
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)
        token = Token(accessor_id=accessor_id, secret=secret)

        with open(self.path, "w") as f:
            json.dump(token.model_dump(by_alias=True), f)

        # Set file permissions to 600 (owner read/write only) on Unix
        if os.name != "nt":
            os.chmod(self.path, 0o600)

    def load_token(self) -> Optional[Token]:
        """Load the saved token.

        Returns ``None`` if the file doesn't exist or is invalid.
        """
        if not self.path.exists():
            return None

        try:
            with open(self.path, "r") as f:
                return Token.model_validate(json.load(f))
        except (json.JSONDecodeError, ValidationError):
            return None

    def clear_token(self) -> None:
        """Remove the saved token. Safe to call when none is saved."""
        if self.path.exists():
            self.path.unlink()

    async def find_token(self) -> Token:
        """Resolve the token to send; an empty token when none is saved."""
        return self.load_token() or Token()
