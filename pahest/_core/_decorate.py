from __future__ import annotations

import json
from dataclasses import replace

from pahest._core._headers import CacheControl, Headers
from pahest._core.models import Response, ResponseMetadata
from pahest._utils import make_async_iterator

SERVICE_UNAVAILABLE = 503


def freshness_directive(max_age: int) -> CacheControl:
    return CacheControl(max_age=max_age, public=True, immutable=True)


def with_cache_headers(response: Response, max_age: int) -> Response:
    """
    Returns a copy of `response` whose Cache-Control is `public, max-age=<max_age>, immutable`.

    Status, body stream and metadata carry over; the input's headers object is left untouched
    because callers may still hold or forward it.
    """
    return replace(
        response,
        headers=response.headers.replace("Cache-Control", str(freshness_directive(max_age))),
        metadata=dict(response.metadata),
    )


def offline_response(strategy: str | None = None) -> Response:
    metadata = ResponseMetadata(pahest_offline=True, pahest_from_cache=False, pahest_stored=False)
    if strategy is not None:
        metadata["pahest_strategy"] = strategy
    body = b"Offline"
    return Response(
        status_code=SERVICE_UNAVAILABLE,
        headers=Headers({"Content-Type": "text/plain; charset=utf-8", "Content-Length": str(len(body))}),
        stream=make_async_iterator([body]),
        metadata=metadata,
    )


def api_offline_response(strategy: str | None = None) -> Response:
    metadata = ResponseMetadata(pahest_offline=True, pahest_from_cache=False, pahest_stored=False)
    if strategy is not None:
        metadata["pahest_strategy"] = strategy
    body = json.dumps({"error": "offline"}, separators=(",", ":")).encode("utf-8")
    return Response(
        status_code=SERVICE_UNAVAILABLE,
        headers=Headers({"Content-Type": "application/json", "Content-Length": str(len(body))}),
        stream=make_async_iterator([body]),
        metadata=metadata,
    )
