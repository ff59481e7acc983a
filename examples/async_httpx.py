#!/usr/bin/env uv run
# /// script
# requires-python = ">=3.9"
# dependencies = [
#     "pahest[httpx]",
# ]
#
# [tool.uv.sources]
# pahest = { path = "../", editable = true }
# ///

import asyncio
import logging
from typing import cast

import anysqlite

from pahest import AsyncSqliteCacheStore, ResponseMetadata, WorkerConfig
from pahest.httpx import AsyncCacheClient

# Point this at a running dev server that serves the app shell and fonts.
ORIGIN = "http://localhost:5173"


async def fetch_and_print(client, url: str, **kwargs):
    print(f"\n➡ Sending request to {url}...")
    response = await client.get(url, **kwargs)
    meta = cast(ResponseMetadata, response.extensions)

    print(f"📦 Status: {response.status_code}")
    print(f"🧭 Strategy: {meta.get('pahest_strategy')}")
    print(f"🔄 From Cache: {meta.get('pahest_from_cache')}")
    print(f"🚀 Was Stored: {meta.get('pahest_stored')}")


async def main():
    logging.basicConfig(level=logging.INFO)
    store = AsyncSqliteCacheStore(connection=await anysqlite.connect(":memory:"))

    async with AsyncCacheClient(store=store, config=WorkerConfig(origin=ORIGIN)) as client:
        await fetch_and_print(client, f"{ORIGIN}/chat/cat", extensions={"pahest_mode": "navigate"})
        await fetch_and_print(client, f"{ORIGIN}/public/fonts/inter-latin-400.woff2")
        await fetch_and_print(client, f"{ORIGIN}/api/health")


if __name__ == "__main__":
    asyncio.run(main())
