from pathlib import Path
from unittest.mock import patch

import anysqlite
import msgpack
import pytest
from inline_snapshot import snapshot

from pahest import AsyncSqliteCacheStore, CacheStoreError, Request, Response
from pahest._core._storages._async_base import make_cache_key
from pahest._utils import make_async_iterator


@pytest.mark.anyio
async def test_custom_connection_does_not_create_directory() -> None:
    """Test that providing a custom connection doesn't call ensure_cache_dict."""
    with patch("pahest._core._storages._async_sqlite.ensure_cache_dict") as mock_ensure:
        store = AsyncSqliteCacheStore(connection=await anysqlite.connect(":memory:"))
        await store.open("fonts-v2")
        mock_ensure.assert_not_called()
        await store.close()


@pytest.mark.anyio
async def test_default_database_location(use_temp_dir: None) -> None:
    store = AsyncSqliteCacheStore()
    await store.open("app-shell-v2")
    await store.close()

    assert Path(".cache/pahest/pahest_cache.db").is_file()
    assert Path(".cache/pahest/.gitignore").read_text(encoding="utf-8") == "# Automatically created by Pahest\n*"


@pytest.mark.anyio
async def test_entries_survive_reconnecting(tmp_path: Path) -> None:
    database_path = tmp_path / "cache.db"
    request = Request(method="GET", url="https://zoo.example/index.html")

    store = AsyncSqliteCacheStore(database_path=database_path)
    partition = await store.open("app-shell-v2")
    await partition.put(request, Response(status_code=200, stream=make_async_iterator([b"<html>"])))
    await store.close()

    reopened = AsyncSqliteCacheStore(database_path=database_path)
    assert await reopened.keys() == ["app-shell-v2"]
    cached = await (await reopened.open("app-shell-v2")).match(request)
    assert cached is not None
    assert await cached.aread() == b"<html>"
    await reopened.close()


@pytest.mark.anyio
async def test_database_state() -> None:
    connection = await anysqlite.connect(":memory:")
    store = AsyncSqliteCacheStore(connection=connection)
    request = Request(method="GET", url="https://zoo.example/app.css")

    await store.open("static-assets-v1")
    partition = await store.open("static-assets-v2")
    await partition.put(request, Response(status_code=200, stream=make_async_iterator([b"body { }"])))
    await store.delete("static-assets-v1")

    cursor = await connection.cursor()
    await cursor.execute("SELECT name FROM partitions")
    assert [row[0] for row in await cursor.fetchall()] == snapshot(["static-assets-v2"])

    await cursor.execute("SELECT partition, cache_key FROM entries")
    assert await cursor.fetchall() == [("static-assets-v2", make_cache_key(request))]
    await store.close()


@pytest.mark.anyio
async def test_corrupt_entry_raises_cache_store_error() -> None:
    connection = await anysqlite.connect(":memory:")
    store = AsyncSqliteCacheStore(connection=connection)
    request = Request(method="GET", url="https://zoo.example/app.css")
    partition = await store.open("static-assets-v2")

    cursor = await connection.cursor()
    await cursor.execute(
        "INSERT INTO entries (partition, cache_key, data, created_at) VALUES (?, ?, ?, ?)",
        ("static-assets-v2", make_cache_key(request), b"\xc1not-msgpack", 0.0),
    )
    await connection.commit()

    with pytest.raises(CacheStoreError):
        await partition.match(request)
    await store.close()


@pytest.mark.anyio
async def test_stored_entry_layout() -> None:
    connection = await anysqlite.connect(":memory:")
    store = AsyncSqliteCacheStore(connection=connection)
    request = Request(method="GET", url="https://zoo.example/app.css")
    partition = await store.open("static-assets-v2")
    await partition.put(request, Response(status_code=200, stream=make_async_iterator([b"body { }"])))

    cursor = await connection.cursor()
    await cursor.execute("SELECT data FROM entries")
    (data,) = await cursor.fetchone()

    assert msgpack.unpackb(data) == snapshot(
        {
            "request": {"method": "GET", "url": "https://zoo.example/app.css"},
            "response": {"status_code": 200, "headers": {}, "extra": {}},
            "body": b"body { }",
        }
    )
    await store.close()
