from __future__ import annotations

import enum
from dataclasses import dataclass, field, replace
from typing import (
    Any,
    AsyncIterable,
    AsyncIterator,
    Mapping,
    TypedDict,
    cast,
)

from pahest._core._headers import Headers
from pahest._utils import make_async_iterator


class RequestMode(str, enum.Enum):
    NAVIGATE = "navigate"
    OTHER = "other"


class RequestMetadata(TypedDict, total=False):
    # All the names here should be prefixed with "pahest_" to avoid collisions with user data
    pahest_mode: str | None
    """Overrides the request mode; "navigate" marks a top-level document load."""


class ResponseMetadata(TypedDict, total=False):
    # All the names here should be prefixed with "pahest_" to avoid collisions with user data
    pahest_strategy: str
    """Name of the strategy class that produced the response."""

    pahest_from_cache: bool
    """Indicates whether the response was served from a cache partition."""

    pahest_stored: bool
    """Indicates whether a copy of the response was written to a cache partition."""

    pahest_offline: bool
    """Indicates a synthetic response built because neither network nor cache could answer."""


@dataclass
class Request:
    method: str
    url: str
    headers: Headers = field(default_factory=lambda: Headers({}))
    mode: RequestMode = RequestMode.OTHER
    stream: AsyncIterator[bytes] = field(default_factory=lambda: make_async_iterator([]))
    metadata: RequestMetadata | Mapping[str, Any] = field(default_factory=dict)

    @property
    def is_navigation(self) -> bool:
        return self.mode is RequestMode.NAVIGATE


@dataclass
class Response:
    status_code: int
    headers: Headers = field(default_factory=lambda: Headers({}))
    stream: AsyncIterator[bytes] = field(default_factory=lambda: make_async_iterator([]))
    metadata: ResponseMetadata | Mapping[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    async def _aiter_stream(self) -> AsyncIterator[bytes]:
        if hasattr(self, "collected_body"):
            yield getattr(self, "collected_body")
            return
        if isinstance(self.stream, (AsyncIterator, AsyncIterable)):
            async for chunk in self.stream:
                yield chunk
        else:
            raise TypeError("Response stream is not an AsyncIterator")

    async def aread(self) -> bytes:
        """
        Asynchronously reads the entire response body without consuming the stream.
        """
        if hasattr(self, "collected_body"):
            return cast(bytes, getattr(self, "collected_body"))

        if not isinstance(self.stream, (AsyncIterator, AsyncIterable)):
            raise TypeError("Response stream is not an AsyncIterator")

        collected = b"".join([chunk async for chunk in self.stream])
        setattr(self, "collected_body", collected)
        self.stream = make_async_iterator([collected])
        return collected

    async def aclone(self) -> "Response":
        """
        Materializes the body and returns an independent copy of this response.

        Both the copy and the original can be consumed afterwards, so one of them
        can be handed to a cache partition while the other is returned to the caller.
        """
        body = await self.aread()
        self.stream = make_async_iterator([body])
        return replace(
            self,
            headers=self.headers.copy(),
            stream=make_async_iterator([body]),
            metadata=dict(self.metadata),
        )


def with_metadata(response: Response, **metadata: Any) -> Response:
    merged = {**response.metadata, **metadata}
    return replace(response, metadata=cast(ResponseMetadata, merged))
