from pahest._core._classify import (
    StrategyClass as StrategyClass,
    classify as classify,
    has_content_hash as has_content_hash,
    is_static_asset as is_static_asset,
    should_intercept as should_intercept,
)
from pahest._core._config import (
    Partition as Partition,
    PartitionRegistry as PartitionRegistry,
    WorkerConfig as WorkerConfig,
)
from pahest._core._decorate import (
    api_offline_response as api_offline_response,
    offline_response as offline_response,
    with_cache_headers as with_cache_headers,
)
from pahest._core._headers import CacheControl as CacheControl, Headers as Headers, parse_cache_control
from pahest._core._messages import (
    ControlMessage as ControlMessage,
    PrecacheTheme as PrecacheTheme,
    SkipWaiting as SkipWaiting,
    parse_message as parse_message,
)
from pahest._core._storages._async_base import AsyncBaseCacheStore, AsyncBasePartition
from pahest._core._storages._async_memory import AsyncInMemoryCacheStore
from pahest._core._storages._async_sqlite import AsyncSqliteCacheStore
from pahest._core.models import (
    Request as Request,
    RequestMetadata as RequestMetadata,
    RequestMode as RequestMode,
    Response as Response,
    ResponseMetadata as ResponseMetadata,
)

__all__ = (
    ## Classification
    "StrategyClass",
    "classify",
    "should_intercept",
    "is_static_asset",
    "has_content_hash",
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
)
