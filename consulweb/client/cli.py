"""Command-line utility for the consulweb client.

Manages the cached ACL token and issues simple GET requests through the
HTTP client, mostly for checking a setup end to end.
"""

import argparse
import asyncio
import json
import logging
import sys

from .client import HTTPClient
from .config import get_config, load_dotenv_for_client
from .exceptions import HTTPError
from .settings import TokenStore

logger = logging.getLogger(__name__)


def save_token_cli(store: TokenStore, secret: str) -> int:
    """Save a token to the cache."""
    if not secret:
        logger.error("No token provided")
        return 1

    store.save_token(secret)
    print(f"✓ Token saved to {store.path}")
    return 0


def clear_token_cli(store: TokenStore) -> int:
    """Clear the cached token."""
    if store.load_token():
        store.clear_token()
        print("✓ Token cleared successfully")
    else:
        print("ℹ No cached token to clear")
    return 0


def token_status_cli(store: TokenStore) -> int:
    token = store.load_token()
    if not token or not token.secret:
        print("✗ No cached token found")
        return 1

    print(f"✓ Found cached token: {token.secret[:8]}...")
    return 0


async def get_cli(path: str) -> int:
    """Issue ``GET path`` and print the response body."""
    segments = [segment for segment in path.strip("/").split("/") if segment]
    async with HTTPClient() as client:
        try:
            respond = await client.request(lambda send: send(["GET /", ""], segments))
        except HTTPError as exc:
            logger.error("Request failed: %s", exc)
            return 1
    print(respond(lambda headers, body: json.dumps(body, indent=2)))
    return 0


def main(argv=None) -> int:
    """Entry point for the consulweb-token command.

    Exit Codes
    ----------
    0 : Success
    1 : Missing token or request failure
    """
    parser = argparse.ArgumentParser(prog="consulweb-token", description="consulweb token management")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    save_parser = subparsers.add_parser("save", help="save a token to the cache")
    save_parser.add_argument("token", help="ACL token secret")
    subparsers.add_parser("clear", help="clear the cached token")
    subparsers.add_parser("status", help="check for a cached token")
    get_parser = subparsers.add_parser("get", help="GET a path from the API")
    get_parser.add_argument("path", help="API path, e.g. /v1/agent/self")

    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    load_dotenv_for_client()
    store = TokenStore(get_config(reload=True).token_path)

    if args.command == "save":
        return save_token_cli(store, args.token)
    if args.command == "clear":
        return clear_token_cli(store)
    if args.command == "status":
        return token_status_cli(store)
    return asyncio.run(get_cli(args.path))


def cli_main():
    """Entry point for the consulweb-token command."""
    sys.exit(main())


if __name__ == "__main__":
    cli_main()
