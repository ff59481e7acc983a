from __future__ import annotations

import typing as tp

__all__ = ("PahestError", "NetworkError", "InstallError", "CacheStoreError")


class PahestError(Exception): ...


class NetworkError(PahestError):
    """The request never completed at the transport level."""


class CacheStoreError(PahestError): ...


class InstallError(PahestError):
    def __init__(self, message: str, failed_urls: tp.Sequence[str] = ()) -> None:
        super().__init__(message)
        self.failed_urls = list(failed_urls)
