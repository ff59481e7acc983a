from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple, TypeVar

from anyio.abc import TaskGroup
from typing_extensions import TypeAlias

from pahest._core._classify import StrategyClass
from pahest._core._config import Partition, WorkerConfig
from pahest._core._decorate import api_offline_response, offline_response, with_cache_headers
from pahest._core._storages._async_base import AsyncBaseCacheStore
from pahest._core.models import Request, Response, with_metadata
from pahest._exceptions import NetworkError
from pahest._utils import resolve_url

logger = logging.getLogger("pahest.strategies")

T = TypeVar("T")

Fetcher: TypeAlias = Callable[[Request], Awaitable[Response]]
Algorithm: TypeAlias = Callable[[Request, Optional[Partition], StrategyClass], Awaitable[Response]]


class AsyncStrategyExecutor:
    """
    Runs the caching algorithm selected for a request.

    Args:
        fetcher: Callable that sends a request over the network. It must raise
            `NetworkError` when the request never completes; HTTP error statuses
            are ordinary responses.
        store: Cache store holding the partitions.
        config: Worker configuration.
        task_group: Task group that detached background writes are spawned into.
            Without one, background writes are awaited before returning.
    """

    def __init__(
        self,
        fetcher: Fetcher,
        store: AsyncBaseCacheStore,
        config: WorkerConfig,
        task_group: TaskGroup | None = None,
    ) -> None:
        self.fetch = fetcher
        self.store = store
        self.config = config
        self.task_group = task_group

        registry = config.registry
        self._strategies: Dict[StrategyClass, Tuple[Algorithm, Optional[Partition]]] = {
            StrategyClass.NETWORK_ONLY: (self._network_only, None),
            StrategyClass.NAVIGATION_NETWORK_FIRST: (self._network_first, registry.app_shell),
            StrategyClass.FONT_CACHE_FIRST: (self._cache_first, registry.fonts),
            StrategyClass.HASHED_ASSET_CACHE_FIRST: (self._cache_first, registry.static_assets),
            StrategyClass.REVALIDATE_ASSET: (self._stale_while_revalidate, registry.static_assets),
            StrategyClass.DEFAULT_NETWORK_FIRST: (self._network_first, registry.static_assets),
        }

    def partition_for(self, strategy: StrategyClass) -> Optional[Partition]:
        return self._strategies[strategy][1]

    async def execute(self, strategy: StrategyClass, request: Request) -> Response:
        algorithm, partition = self._strategies[strategy]
        logger.debug(f"Handling {request.url} with strategy: {strategy.name}")
        return await algorithm(request, partition, strategy)

    async def _network_only(
        self, request: Request, partition: Optional[Partition], strategy: StrategyClass
    ) -> Response:
        response = await self._try_fetch(request)
        if response is None:
            return api_offline_response(strategy.value)
        return with_metadata(response, pahest_strategy=strategy.value, pahest_from_cache=False, pahest_stored=False)

    async def _network_first(
        self, request: Request, partition: Optional[Partition], strategy: StrategyClass
    ) -> Response:
        assert partition is not None
        response = await self._try_fetch(request)

        if response is not None:
            metadata: Dict[str, Any] = {"pahest_strategy": strategy.value, "pahest_from_cache": False}
            if response.ok:
                copy = await response.aclone()
                stored = await self._spawn(self._put, partition, request, copy)
                # A detached write has no outcome yet
                if stored is not None:
                    metadata["pahest_stored"] = stored
            else:
                metadata["pahest_stored"] = False
            return with_metadata(response, **metadata)

        cached = await self._match(partition, request)
        if cached is not None:
            logger.debug(f"Network failed, serving {request.url} from {partition.physical_name}")
            return self._from_cache(cached, self.config.network_fallback_max_age, strategy)

        return await self._offline(request, strategy)

    async def _cache_first(self, request: Request, partition: Optional[Partition], strategy: StrategyClass) -> Response:
        assert partition is not None
        cached = await self._match(partition, request)
        if cached is not None:
            return self._from_cache(cached, self.config.immutable_max_age, strategy)

        response = await self._try_fetch(request)
        if response is None:
            return await self._offline(request, strategy)

        stored = False
        if response.ok:
            copy = await response.aclone()
            stored = await self._put(partition, request, copy)
        return with_metadata(
            with_cache_headers(response, self.config.immutable_max_age),
            pahest_strategy=strategy.value,
            pahest_from_cache=False,
            pahest_stored=stored,
        )

    async def _stale_while_revalidate(
        self, request: Request, partition: Optional[Partition], strategy: StrategyClass
    ) -> Response:
        assert partition is not None
        cached = await self._match(partition, request)

        if cached is not None:
            await self._spawn(self._background_revalidate, request, partition)
            return self._from_cache(cached, self.config.revalidate_max_age, strategy)

        response, stored = await self._revalidate(request, partition)
        if response is None:
            return offline_response(strategy.value)
        return with_metadata(
            with_cache_headers(response, self.config.revalidate_max_age),
            pahest_strategy=strategy.value,
            pahest_from_cache=False,
            pahest_stored=stored,
        )

    async def _revalidate(self, request: Request, partition: Partition) -> Tuple[Optional[Response], bool]:
        response = await self._try_fetch(request)
        stored = False
        if response is not None and response.ok:
            copy = await response.aclone()
            stored = await self._put(partition, request, copy)
        return response, stored

    async def _background_revalidate(self, request: Request, partition: Partition) -> None:
        try:
            await self._revalidate(request, partition)
        except Exception:
            logger.warning(f"Background refresh of {request.url} failed", exc_info=True)

    async def _try_fetch(self, request: Request) -> Optional[Response]:
        try:
            return await self.fetch(request)
        except NetworkError as exc:
            logger.debug(f"Network request for {request.url} failed: {exc!r}")
            return None

    async def _match(self, partition: Partition, request: Request) -> Optional[Response]:
        try:
            handle = await self.store.open(partition.physical_name)
            return await handle.match(request)
        except Exception:
            logger.warning(f"Could not read {request.url} from {partition.physical_name}", exc_info=True)
            return None

    async def _put(self, partition: Partition, request: Request, response: Response) -> bool:
        try:
            handle = await self.store.open(partition.physical_name)
            await handle.put(request, response)
        except Exception:
            logger.warning(f"Could not store {request.url} in {partition.physical_name}", exc_info=True)
            return False
        logger.debug(f"Stored {request.url} in {partition.physical_name}")
        return True

    async def _spawn(self, func: Callable[..., Awaitable[T]], *args: Any) -> Optional[T]:
        """
        Runs `func` detached in the task group, or inline when there is none.

        Only the inline run has a result to return.
        """
        if self.task_group is None:
            return await func(*args)
        self.task_group.start_soon(func, *args)
        return None

    async def _offline(self, request: Request, strategy: StrategyClass) -> Response:
        if request.is_navigation:
            shell = await self._match(
                self.config.registry.app_shell,
                Request(method="GET", url=resolve_url(request.url, self.config.shell_document)),
            )
            if shell is not None:
                logger.debug(f"Serving app shell for offline navigation to {request.url}")
                return with_metadata(shell, pahest_strategy=strategy.value, pahest_from_cache=True, pahest_stored=False)
        return offline_response(strategy.value)

    def _from_cache(self, cached: Response, max_age: int, strategy: StrategyClass) -> Response:
        return with_metadata(
            with_cache_headers(cached, max_age),
            pahest_strategy=strategy.value,
            pahest_from_cache=True,
            pahest_stored=False,
        )
