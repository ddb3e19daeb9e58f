#!/usr/bin/env python3
"""Watch a KV key with blocking queries through a connection-capped client.

Blocking queries (a request carrying ``index``) are long-lived, so the
client treats them as streaming connections. When the connection cap is
hit or the surface is hidden they get aborted; ``restart_when_available``
waits for the surface to come back and the loop re-issues the request.

Usage:
    CONSUL_HTTP_MAX_CONNECTIONS=4 python examples/blocking_query.py service/web/config
"""

import asyncio
import logging
import sys

from consulweb.client import ClientConfig, HTTPClient, HTTPError, load_dotenv_for_client, restart_when_available


async def watch(key: str) -> None:
    load_dotenv_for_client()
    config = ClientConfig.from_environment()

    async with HTTPClient(config) as client:
        retry = restart_when_available(client)
        index = 0
        while True:
            try:
                respond = await client.request(
                    lambda send: send(
                        ["GET /v1/kv/", "\n\n", ""],
                        key,
                        {"index": index, "wait": "30s"},
                    )
                )
            except HTTPError as exc:
                if exc.status_code == 404:
                    print(f"{key} does not exist yet")
                    await asyncio.sleep(5)
                    continue
                # status 0 waits for the surface to come back, anything else raises
                await retry(exc)
                continue

            headers, body = respond(lambda headers, body: (headers, body))
            index = int(headers.get("x-consul-index", index))
            print(f"[{index}] {body}")


def main() -> None:
    if len(sys.argv) != 2:
        print(__doc__)
        sys.exit(1)
    logging.basicConfig(level=logging.INFO)
    asyncio.run(watch(sys.argv[1]))


if __name__ == "__main__":
    main()
