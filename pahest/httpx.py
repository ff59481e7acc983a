try:
    import httpx  # noqa: F401
except ImportError as e:
    raise ImportError(
        "httpx is required to use pahest.httpx module. "
        "Please install pahest with the 'httpx' extra, "
        "e.g., 'pip install pahest[httpx]'."
    ) from e


from ._async_httpx import (
    AsyncCacheClient as AsyncCacheClient,
    AsyncCacheTransport as AsyncCacheTransport,
    AsyncHttpxFetcher as AsyncHttpxFetcher,
)

__all__ = ("AsyncCacheClient", "AsyncCacheTransport", "AsyncHttpxFetcher")
