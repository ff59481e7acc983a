import os

import pytest

from pahest import AsyncInMemoryCacheStore, Request, RequestMode, WorkerConfig
from pahest._mock import MockAsyncFetcher

ORIGIN = "https://zoo.example"


@pytest.fixture()
def config() -> WorkerConfig:
    return WorkerConfig(origin=ORIGIN)


@pytest.fixture()
def store() -> AsyncInMemoryCacheStore:
    return AsyncInMemoryCacheStore()


@pytest.fixture()
def fetcher() -> MockAsyncFetcher:
    return MockAsyncFetcher()


@pytest.fixture()
def make_request():
    def _make_request(path: str, method: str = "GET", navigate: bool = False) -> Request:
        url = f"{ORIGIN}{path}" if path.startswith("/") else path
        return Request(
            method=method,
            url=url,
            mode=RequestMode.NAVIGATE if navigate else RequestMode.OTHER,
        )

    return _make_request


@pytest.fixture()
def use_temp_dir(tmpdir):
    cur_dir = os.getcwd()
    os.chdir(tmpdir)
    yield
    os.chdir(cur_dir)
