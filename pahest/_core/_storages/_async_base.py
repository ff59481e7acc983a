from __future__ import annotations

import abc
import hashlib
from typing import List, Optional

from pahest._core.models import Request, Response


def make_cache_key(request: Request) -> str:
    return hashlib.sha256(f"{request.method.upper()} {request.url}".encode("utf-8")).hexdigest()


class AsyncBasePartition(abc.ABC):
    """
    A handle on one named physical partition of a cache store.
    """

    def __init__(self, name: str) -> None:
        self.name = name

    @abc.abstractmethod
    async def match(self, request: Request) -> Optional[Response]:
        """
        Returns a fresh, unconsumed copy of the stored response for `request`, or None.
        """
        pass

    @abc.abstractmethod
    async def put(self, request: Request, response: Response) -> None:
        """
        Stores `response` under `request`, replacing any previous entry.

        The response body is consumed, so callers that still need it must pass a clone.
        """
        pass


class AsyncBaseCacheStore(abc.ABC):
    @abc.abstractmethod
    async def open(self, name: str) -> AsyncBasePartition:
        """
        Opens the named partition, creating it if it does not exist yet.
        """
        pass

    @abc.abstractmethod
    async def keys(self) -> List[str]:
        """
        Lists the names of all existing partitions in creation order.
        """
        pass

    @abc.abstractmethod
    async def delete(self, name: str) -> bool:
        """
        Deletes the named partition with all of its entries.

        Returns False if there was no such partition.
        """
        pass

    async def has(self, name: str) -> bool:
        return name in await self.keys()

    async def close(self) -> None:  # noqa: B027
        # Some storages may not need to close anything
        pass
