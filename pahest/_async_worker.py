from __future__ import annotations

import enum
import logging
import types
import typing as tp
from typing import Any, List, Optional, Sequence, Tuple

import anyio
from anyio.abc import TaskGroup
from typing_extensions import assert_never

from pahest._async_strategies import AsyncStrategyExecutor, Fetcher
from pahest._core._classify import classify, should_intercept
from pahest._core._config import Partition, WorkerConfig
from pahest._core._messages import ControlMessage, PrecacheTheme, SkipWaiting, parse_message
from pahest._core._storages._async_base import AsyncBaseCacheStore
from pahest._core._storages._async_sqlite import AsyncSqliteCacheStore
from pahest._core.models import Request, Response
from pahest._exceptions import InstallError, NetworkError
from pahest._utils import resolve_url, url_origin

if tp.TYPE_CHECKING:  # pragma: no cover
    from typing_extensions import Self

logger = logging.getLogger("pahest.worker")


class WorkerState(str, enum.Enum):
    PARSED = "parsed"
    INSTALLING = "installing"
    INSTALLED = "installed"
    ACTIVATING = "activating"
    ACTIVATED = "activated"
    REDUNDANT = "redundant"


class AsyncCacheWorker:
    """
    Intercepts requests and serves them from the network, the cache partitions, or both.

    The worker has to be installed and activated before it intercepts anything;
    until then every request is declined. Intercepting also requires the worker
    to be used as an async context manager: detached background cache writes
    run in its task group, and leaving the context waits for them and closes
    the store.

    Args:
        fetcher: Callable that sends a request over the network and raises `NetworkError`
            when the request never completes.
        store: Cache store for the partitions. Defaults to AsyncSqliteCacheStore.
        config: Worker configuration. Defaults to WorkerConfig().
    """

    def __init__(
        self,
        fetcher: Fetcher,
        store: AsyncBaseCacheStore | None = None,
        config: WorkerConfig | None = None,
    ) -> None:
        self.fetch = fetcher
        self.store = store if store is not None else AsyncSqliteCacheStore()
        self.config = config if config is not None else WorkerConfig()
        self.state = WorkerState.PARSED
        self.skip_waiting_requested = False
        self.clients_claimed = False
        self._task_group: TaskGroup | None = None
        self._executor = AsyncStrategyExecutor(self.fetch, self.store, self.config)

    @property
    def executor(self) -> AsyncStrategyExecutor:
        return self._executor

    async def start(self) -> None:
        """
        Installs the worker and activates it right away.
        """
        await self.install()
        if self.state is WorkerState.INSTALLED:
            await self.activate()

    async def install(self) -> None:
        """
        Eagerly populates the app-shell and fonts partitions from their manifests.

        Either every manifest entry is fetched with a successful status or the
        install fails with `InstallError` and the worker becomes redundant.
        """
        logger.info("Install: caching app shell and fonts")
        self.state = WorkerState.INSTALLING
        registry = self.config.registry
        failures: List[Tuple[str, Optional[BaseException]]] = []

        async with anyio.create_task_group() as task_group:
            task_group.start_soon(self._precache, registry.app_shell, self.config.app_shell_assets, failures)
            task_group.start_soon(self._precache, registry.fonts, self.config.font_assets, failures)

        if failures:
            self.state = WorkerState.REDUNDANT
            failed_urls = [url for url, _ in failures]
            cause = next((exc for _, exc in failures if exc is not None), None)
            raise InstallError(f"Could not precache: {', '.join(failed_urls)}", failed_urls) from cause

        self.state = WorkerState.INSTALLED
        logger.info("Installed")
        if self.skip_waiting_requested:
            await self.activate()

    async def _precache(
        self,
        partition: Partition,
        paths: Sequence[str],
        failures: List[Tuple[str, Optional[BaseException]]],
    ) -> None:
        fetched: List[Tuple[Request, Response]] = []
        for path in paths:
            request = Request(method="GET", url=resolve_url(self.config.origin, path))
            try:
                response = await self.fetch(request)
            except NetworkError as exc:
                logger.warning(f"Could not precache {request.url}: {exc!r}")
                failures.append((request.url, exc))
                return
            if not response.ok:
                logger.warning(f"Could not precache {request.url}: status {response.status_code}")
                failures.append((request.url, None))
                return
            fetched.append((request, response))

        try:
            handle = await self.store.open(partition.physical_name)
            for request, response in fetched:
                await handle.put(request, response)
        except Exception as exc:
            logger.warning(f"Could not populate {partition.physical_name}: {exc!r}")
            failures.append((partition.physical_name, exc))

    async def activate(self) -> None:
        """
        Deletes every partition that is not expected at the current version, then claims clients.
        """
        if self.state is not WorkerState.INSTALLED:
            raise RuntimeError(f"Cannot activate a worker in state {self.state.value!r}")

        logger.info("Activate: cleaning old caches")
        self.state = WorkerState.ACTIVATING
        for name in self.config.registry.reconcile(await self.store.keys()):
            logger.info(f"Deleting old cache: {name}")
            await self.store.delete(name)

        self.state = WorkerState.ACTIVATED
        self.clients_claimed = True
        logger.info("Activated, intercepting requests")

    async def skip_waiting(self) -> None:
        self.skip_waiting_requested = True
        if self.state is WorkerState.INSTALLED:
            await self.activate()

    async def handle_request(self, request: Request) -> Optional[Response]:
        """
        Returns the response for `request`, or None when the request is not intercepted.

        Network and cache-store failures never propagate from here; the worst
        outcome is a synthetic 503 response.

        Raises `RuntimeError` when an activated worker is used outside its context.
        """
        if not should_intercept(request):
            return None
        if not self.clients_claimed:
            logger.debug(f"Not controlling clients yet, passing {request.url} through")
            return None
        if self._task_group is None:
            raise RuntimeError("Requests can only be intercepted inside `async with worker:`")
        return await self._executor.execute(classify(request, self.config), request)

    async def handle_message(self, data: Any, origin: str | None = None) -> Optional[ControlMessage]:
        """
        Reacts to a control message and returns the command it carried.

        Messages from an origin other than the worker's, and payloads that are not
        well-formed commands, are ignored and yield None.
        """
        if origin and origin.rstrip("/") != url_origin(self.config.origin):
            logger.debug(f"Ignoring message from foreign origin {origin}")
            return None

        message = parse_message(data)
        if message is None:
            return None

        if isinstance(message, SkipWaiting):
            await self.skip_waiting()
        elif isinstance(message, PrecacheTheme):
            if message.theme in self.config.valid_themes:
                # TODO: fetch theme-specific CSS/SVG assets into static-assets once they have a manifest
                logger.info(f"Pre-caching theme: {message.theme}")
            else:
                logger.debug(f"Ignoring unknown theme {message.theme!r}")
        else:
            assert_never(message)
        return message

    async def aclose(self) -> None:
        await self.store.close()

    async def __aenter__(self) -> Self:
        self._task_group = anyio.create_task_group()
        await self._task_group.__aenter__()
        self._executor.task_group = self._task_group
        return self

    async def __aexit__(
        self,
        exc_type: tp.Optional[tp.Type[BaseException]] = None,
        exc_value: tp.Optional[BaseException] = None,
        traceback: tp.Optional[types.TracebackType] = None,
    ) -> None:
        assert self._task_group is not None
        try:
            await self._task_group.__aexit__(exc_type, exc_value, traceback)
        finally:
            self._task_group = None
            self._executor.task_group = None
            await self.aclose()
