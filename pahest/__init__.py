from pahest._core import (
    AsyncBaseCacheStore as AsyncBaseCacheStore,
    AsyncBasePartition as AsyncBasePartition,
    AsyncInMemoryCacheStore as AsyncInMemoryCacheStore,
    AsyncSqliteCacheStore as AsyncSqliteCacheStore,
    CacheControl as CacheControl,
    ControlMessage as ControlMessage,
    Headers as Headers,
    Partition as Partition,
    PartitionRegistry as PartitionRegistry,
    PrecacheTheme as PrecacheTheme,
    Request as Request,
    RequestMetadata as RequestMetadata,
    RequestMode as RequestMode,
    Response as Response,
    ResponseMetadata as ResponseMetadata,
    SkipWaiting as SkipWaiting,
    StrategyClass as StrategyClass,
    WorkerConfig as WorkerConfig,
    api_offline_response as api_offline_response,
    classify as classify,
    offline_response as offline_response,
    parse_cache_control as parse_cache_control,
    parse_message as parse_message,
    should_intercept as should_intercept,
    with_cache_headers as with_cache_headers,
)
from pahest._async_strategies import AsyncStrategyExecutor as AsyncStrategyExecutor, Fetcher as Fetcher
from pahest._async_worker import AsyncCacheWorker as AsyncCacheWorker, WorkerState as WorkerState
from pahest._exceptions import (
    CacheStoreError as CacheStoreError,
    InstallError as InstallError,
    NetworkError as NetworkError,
    PahestError as PahestError,
)

__all__ = (
    ## Worker
    "AsyncCacheWorker",
    "WorkerState",
    "AsyncStrategyExecutor",
    "Fetcher",
    ## Classification
    "StrategyClass",
    "classify",
    "should_intercept",
    ## Configuration
    "Partition",
    "PartitionRegistry",
    "WorkerConfig",
    ## Decoration
    "with_cache_headers",
    "offline_response",
    "api_offline_response",
    ## Messages
    "ControlMessage",
    "SkipWaiting",
    "PrecacheTheme",
    "parse_message",
    ## Models
    "Request",
    "RequestMetadata",
    "RequestMode",
    "Response",
    "ResponseMetadata",
    ## Headers
    "Headers",
    "CacheControl",
    "parse_cache_control",
    ## Storages
    "AsyncBaseCacheStore",
    "AsyncBasePartition",
    "AsyncInMemoryCacheStore",
    "AsyncSqliteCacheStore",
    ## Errors
    "PahestError",
    "NetworkError",
    "InstallError",
    "CacheStoreError",
)
