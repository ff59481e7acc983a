from __future__ import annotations

from typing import Any, Mapping, Optional

import msgpack
from typing_extensions import cast

from pahest._core._headers import Headers
from pahest._core.models import Request, Response
from pahest._exceptions import CacheStoreError
from pahest._utils import make_async_iterator


def filter_out_pahest_metadata(data: Mapping[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in data.items() if not k.startswith("pahest_")}


def pack(request: Request, response: Response, body: bytes) -> bytes:
    """
    Serializes a fully read response, together with the request it answers, into an immutable blob.
    """
    return cast(
        bytes,
        msgpack.packb(
            {
                "request": {
                    "method": request.method,
                    "url": request.url,
                },
                "response": {
                    "status_code": response.status_code,
                    "headers": response.headers._headers,
                    "extra": filter_out_pahest_metadata(response.metadata),
                },
                "body": body,
            }
        ),
    )


def unpack(value: Optional[bytes]) -> Optional[Response]:
    if value is None:
        return None
    try:
        data = msgpack.unpackb(value)
        return Response(
            status_code=data["response"]["status_code"],
            headers=Headers(data["response"]["headers"]),
            stream=make_async_iterator([data["body"]]),
            metadata=data["response"]["extra"],
        )
    except (ValueError, KeyError, TypeError) as exc:
        raise CacheStoreError("Stored entry could not be decoded") from exc
