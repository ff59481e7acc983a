from __future__ import annotations

import typing as tp

from pahest._core._headers import Headers
from pahest._core.models import Request, Response
from pahest._exceptions import NetworkError
from pahest._utils import make_async_iterator

__all__ = ("MockAsyncFetcher",)


class MockAsyncFetcher:
    """
    A fetcher that answers from a fixed URL table.

    Unknown URLs, URLs registered with `add_failure`, and every URL while
    `offline` is set raise `NetworkError`. Every call is recorded in `calls`.
    """

    def __init__(self) -> None:
        self.routes: tp.Dict[str, tp.Union[tp.Tuple[int, tp.Dict[str, str], bytes], NetworkError]] = {}
        self.calls: tp.List[str] = []
        self.offline = False

    def add_response(
        self,
        url: str,
        status_code: int = 200,
        content: bytes = b"",
        headers: tp.Optional[tp.Dict[str, str]] = None,
    ) -> None:
        self.routes[url] = (status_code, headers or {}, content)

    def add_failure(self, url: str) -> None:
        self.routes[url] = NetworkError(f"Could not connect to {url}")

    def count(self, url: str) -> int:
        return self.calls.count(url)

    async def __call__(self, request: Request) -> Response:
        self.calls.append(request.url)
        if self.offline:
            raise NetworkError("Network is unreachable")

        route = self.routes.get(request.url)
        if route is None:
            raise NetworkError(f"No route to {request.url}")
        if isinstance(route, NetworkError):
            raise route

        status_code, headers, content = route
        return Response(
            status_code=status_code,
            headers=Headers(headers),
            stream=make_async_iterator([content]),
        )
