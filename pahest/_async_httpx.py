from __future__ import annotations

import ssl
import types
import typing as t
from typing import AsyncIterator, Dict, List

from pahest._async_worker import AsyncCacheWorker, WorkerState
from pahest._core._config import WorkerConfig
from pahest._core._headers import Headers
from pahest._core._storages._async_base import AsyncBaseCacheStore
from pahest._core.models import Request, RequestMetadata, RequestMode, Response
from pahest._exceptions import NetworkError
from pahest._utils import filter_mapping, make_async_iterator

try:
    import httpx
except ImportError as e:
    raise ImportError(
        "httpx is required to use pahest.httpx module. "
        "Please install pahest with the 'httpx' extra, "
        "e.g., 'pip install pahest[httpx]'."
    ) from e

if t.TYPE_CHECKING:  # pragma: no cover
    from typing_extensions import Self

# 128 KB
CHUNK_SIZE = 131072


def _headers_to_internal(headers: httpx.Headers) -> Headers:
    collected: Dict[str, List[str]] = {}
    for key, value in headers.multi_items():
        collected.setdefault(key, []).append(value)
    return Headers(filter_mapping(collected, ["Transfer-Encoding"]))


def _httpx_to_internal_request(value: httpx.Request) -> Request:
    """
    Convert httpx.Request to an internal Request.

    Only GET requests are ever intercepted, so the body is not carried over.
    """
    mode = value.extensions.get("pahest_mode") or value.headers.get("sec-fetch-mode")
    return Request(
        method=value.method,
        url=str(value.url),
        headers=_headers_to_internal(value.headers),
        mode=RequestMode.NAVIGATE if mode == RequestMode.NAVIGATE.value else RequestMode.OTHER,
        metadata=RequestMetadata(pahest_mode=mode),
    )


def _internal_to_httpx_request(value: Request) -> httpx.Request:
    return httpx.Request(
        method=value.method,
        url=value.url,
        headers=value.headers.multi_items(),
        stream=_IteratorStream(value.stream),
    )


def _internal_to_httpx_response(value: Response) -> httpx.Response:
    return httpx.Response(
        status_code=value.status_code,
        headers=value.headers.multi_items(),
        stream=_IteratorStream(value._aiter_stream()),
        extensions=dict(value.metadata),
    )


class _IteratorStream(httpx.AsyncByteStream):
    def __init__(self, iterator: AsyncIterator[bytes]) -> None:
        self.iterator = iterator

    async def __aiter__(self) -> AsyncIterator[bytes]:
        async for chunk in self.iterator:
            yield chunk


class AsyncHttpxFetcher:
    """
    Sends internal requests through an httpx transport.

    Transport-level failures (`httpx.TransportError`, which includes timeouts)
    are raised as `NetworkError`; any HTTP status is a successful fetch.
    """

    def __init__(self, transport: httpx.AsyncBaseTransport) -> None:
        self.transport = transport

    async def __call__(self, request: Request) -> Response:
        try:
            httpx_response = await self.transport.handle_async_request(_internal_to_httpx_request(request))
            try:
                headers = _headers_to_internal(httpx_response.headers)
                if httpx_response.is_stream_consumed:
                    body = httpx_response.content
                    if "content-encoding" in headers:
                        # The decoded content is all that is left, so the stored headers must describe it.
                        headers = Headers(
                            {
                                **filter_mapping(headers._headers, ["content-encoding"]),
                                "content-length": str(len(body)),
                            }
                        )
                else:
                    body = b"".join([chunk async for chunk in httpx_response.aiter_raw(chunk_size=CHUNK_SIZE)])
            finally:
                await httpx_response.aclose()
        except httpx.TransportError as exc:
            raise NetworkError(str(exc) or exc.__class__.__name__) from exc

        return Response(
            status_code=httpx_response.status_code,
            headers=headers,
            stream=make_async_iterator([body]),
            metadata={},
        )


class AsyncCacheTransport(httpx.AsyncBaseTransport):
    """
    An HTTPX transport that routes every GET through the cache worker.

    Requests the worker declines are sent to `next_transport` untouched.
    Entering the transport starts the worker (install and activate) unless
    `auto_start` is False.
    """

    def __init__(
        self,
        next_transport: httpx.AsyncBaseTransport,
        store: AsyncBaseCacheStore | None = None,
        config: WorkerConfig | None = None,
        auto_start: bool = True,
    ) -> None:
        self.next_transport = next_transport
        self.worker = AsyncCacheWorker(
            fetcher=AsyncHttpxFetcher(next_transport),
            store=store,
            config=config,
        )
        self.store = self.worker.store
        self.auto_start = auto_start

    async def handle_async_request(
        self,
        request: httpx.Request,
    ) -> httpx.Response:
        internal_response = await self.worker.handle_request(_httpx_to_internal_request(request))
        if internal_response is None:
            return await self.next_transport.handle_async_request(request)
        return _internal_to_httpx_response(internal_response)

    async def __aenter__(self) -> Self:
        await self.worker.__aenter__()
        if self.auto_start and self.worker.state is WorkerState.PARSED:
            try:
                await self.worker.start()
            except BaseException:
                await self.worker.__aexit__()
                raise
        return self

    async def __aexit__(
        self,
        exc_type: t.Optional[t.Type[BaseException]] = None,
        exc_value: t.Optional[BaseException] = None,
        traceback: t.Optional[types.TracebackType] = None,
    ) -> None:
        try:
            await self.worker.__aexit__(exc_type, exc_value, traceback)
        finally:
            await self.next_transport.aclose()

    async def aclose(self) -> None:
        await self.next_transport.aclose()
        await self.worker.aclose()


class AsyncCacheClient(httpx.AsyncClient):
    def __init__(self, *args: t.Any, **kwargs: t.Any) -> None:
        self.store: AsyncBaseCacheStore | None = kwargs.pop("store", None)
        self.config: WorkerConfig | None = kwargs.pop("config", None)
        super().__init__(*args, **kwargs)

    def _init_transport(
        self,
        verify: ssl.SSLContext | str | bool = True,
        cert: t.Union[str, t.Tuple[str, str], t.Tuple[str, str, str], None] = None,
        trust_env: bool = True,
        http1: bool = True,
        http2: bool = False,
        limits: httpx.Limits = httpx.Limits(max_connections=100, max_keepalive_connections=20),
        transport: httpx.AsyncBaseTransport | None = None,
        **kwargs: t.Any,
    ) -> httpx.AsyncBaseTransport:
        if transport is not None:
            return transport

        return AsyncCacheTransport(
            next_transport=httpx.AsyncHTTPTransport(
                verify=verify,
                cert=cert,
                trust_env=trust_env,
                http1=http1,
                http2=http2,
                limits=limits,
            ),
            store=self.store,
            config=self.config,
        )

    def _init_proxy_transport(
        self,
        proxy: httpx.Proxy,
        verify: ssl.SSLContext | str | bool = True,
        cert: t.Union[str, t.Tuple[str, str], t.Tuple[str, str, str], None] = None,
        trust_env: bool = True,
        http1: bool = True,
        http2: bool = False,
        limits: httpx.Limits = httpx.Limits(max_connections=100, max_keepalive_connections=20),
        **kwargs: t.Any,
    ) -> httpx.AsyncBaseTransport:
        return AsyncCacheTransport(
            next_transport=httpx.AsyncHTTPTransport(
                verify=verify,
                cert=cert,
                trust_env=trust_env,
                http1=http1,
                http2=http2,
                limits=limits,
                proxy=proxy,
            ),
            store=self.store,
            config=self.config,
        )
