from __future__ import annotations

import logging
from typing import Dict, List, Optional

from pahest._core._storages._async_base import AsyncBaseCacheStore, AsyncBasePartition, make_cache_key
from pahest._core._storages._packing import pack, unpack
from pahest._core.models import Request, Response

logger = logging.getLogger("pahest.storages")


class AsyncInMemoryPartition(AsyncBasePartition):
    def __init__(self, name: str, entries: Dict[str, bytes]) -> None:
        super().__init__(name)
        self._entries = entries

    async def match(self, request: Request) -> Optional[Response]:
        return unpack(self._entries.get(make_cache_key(request)))

    async def put(self, request: Request, response: Response) -> None:
        body = await response.aread()
        self._entries[make_cache_key(request)] = pack(request, response, body)


class AsyncInMemoryCacheStore(AsyncBaseCacheStore):
    """
    A cache store that keeps packed responses in process memory.

    Entries are stored as packed bytes, so every `match` hands out an independent response.
    """

    def __init__(self) -> None:
        # dicts keep insertion order, which is the partition creation order
        self._partitions: Dict[str, Dict[str, bytes]] = {}

    async def open(self, name: str) -> AsyncInMemoryPartition:
        if name not in self._partitions:
            logger.debug(f"Creating partition {name}")
        return AsyncInMemoryPartition(name, self._partitions.setdefault(name, {}))

    async def keys(self) -> List[str]:
        return list(self._partitions)

    async def delete(self, name: str) -> bool:
        return self._partitions.pop(name, None) is not None
