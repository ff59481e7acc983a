from typing import AsyncIterator

import anysqlite
import pytest

from pahest import AsyncBaseCacheStore, AsyncInMemoryCacheStore, AsyncSqliteCacheStore, Headers, Request, Response
from pahest._utils import make_async_iterator


@pytest.fixture(params=["memory", "sqlite"])
async def cache_store(request: pytest.FixtureRequest) -> AsyncIterator[AsyncBaseCacheStore]:
    store: AsyncBaseCacheStore
    if request.param == "memory":
        store = AsyncInMemoryCacheStore()
    else:
        store = AsyncSqliteCacheStore(connection=await anysqlite.connect(":memory:"))
    yield store
    await store.close()


def make_response(body: bytes, status_code: int = 200, **headers: str) -> Response:
    return Response(
        status_code=status_code,
        headers=Headers(headers),
        stream=make_async_iterator([body]),
    )


@pytest.mark.anyio
async def test_open_creates_partition(cache_store: AsyncBaseCacheStore) -> None:
    assert await cache_store.keys() == []

    partition = await cache_store.open("static-assets-v1")

    assert partition.name == "static-assets-v1"
    assert await cache_store.keys() == ["static-assets-v1"]
    assert await cache_store.has("static-assets-v1")
    assert not await cache_store.has("static-assets-v2")


@pytest.mark.anyio
async def test_open_is_idempotent(cache_store: AsyncBaseCacheStore) -> None:
    await cache_store.open("fonts-v2")
    await cache_store.open("app-shell-v2")
    await cache_store.open("fonts-v2")

    assert await cache_store.keys() == ["fonts-v2", "app-shell-v2"]


@pytest.mark.anyio
async def test_put_and_match(cache_store: AsyncBaseCacheStore) -> None:
    partition = await cache_store.open("static-assets-v1")
    request = Request(method="GET", url="https://zoo.example/app.css")

    assert await partition.match(request) is None

    await partition.put(request, make_response(b"body { }", **{"Content-Type": "text/css"}))
    cached = await partition.match(request)

    assert cached is not None
    assert cached.status_code == 200
    assert cached.headers["content-type"] == "text/css"
    assert await cached.aread() == b"body { }"


@pytest.mark.anyio
async def test_every_match_returns_an_unconsumed_copy(cache_store: AsyncBaseCacheStore) -> None:
    partition = await cache_store.open("static-assets-v1")
    request = Request(method="GET", url="https://zoo.example/logo.svg")
    await partition.put(request, make_response(b"<svg/>"))

    first = await partition.match(request)
    second = await partition.match(request)

    assert first is not None and second is not None
    assert await first.aread() == b"<svg/>"
    assert await second.aread() == b"<svg/>"


@pytest.mark.anyio
async def test_put_overwrites(cache_store: AsyncBaseCacheStore) -> None:
    partition = await cache_store.open("static-assets-v1")
    request = Request(method="GET", url="https://zoo.example/app.css")

    await partition.put(request, make_response(b"old", ETag='"1"'))
    await partition.put(request, make_response(b"new"))

    cached = await partition.match(request)
    assert cached is not None
    assert await cached.aread() == b"new"
    assert "etag" not in cached.headers


@pytest.mark.anyio
async def test_key_is_method_and_url(cache_store: AsyncBaseCacheStore) -> None:
    partition = await cache_store.open("static-assets-v1")
    await partition.put(Request(method="GET", url="https://zoo.example/a.js"), make_response(b"a"))

    assert await partition.match(Request(method="GET", url="https://zoo.example/a.js?v=2")) is None
    assert await partition.match(Request(method="HEAD", url="https://zoo.example/a.js")) is None
    assert await partition.match(Request(method="GET", url="https://zoo.example/a.js")) is not None


@pytest.mark.anyio
async def test_partitions_are_isolated(cache_store: AsyncBaseCacheStore) -> None:
    request = Request(method="GET", url="https://zoo.example/index.html")
    shell = await cache_store.open("app-shell-v1")
    static = await cache_store.open("static-assets-v1")

    await shell.put(request, make_response(b"<html>"))

    assert await shell.match(request) is not None
    assert await static.match(request) is None


@pytest.mark.anyio
async def test_delete(cache_store: AsyncBaseCacheStore) -> None:
    request = Request(method="GET", url="https://zoo.example/app.css")
    partition = await cache_store.open("static-assets-v1")
    await partition.put(request, make_response(b"body { }"))
    await cache_store.open("static-assets-v2")

    assert await cache_store.delete("static-assets-v1") is True
    assert await cache_store.delete("static-assets-v1") is False
    assert await cache_store.keys() == ["static-assets-v2"]

    reopened = await cache_store.open("static-assets-v1")
    assert await reopened.match(request) is None


@pytest.mark.anyio
async def test_pahest_metadata_is_not_stored(cache_store: AsyncBaseCacheStore) -> None:
    partition = await cache_store.open("static-assets-v1")
    request = Request(method="GET", url="https://zoo.example/app.css")
    response = make_response(b"body { }")
    response.metadata = {"pahest_strategy": "revalidate_asset", "origin": "edge"}

    await partition.put(request, response)
    cached = await partition.match(request)

    assert cached is not None
    assert cached.metadata == {"origin": "edge"}
