from __future__ import annotations

import enum
import re
from functools import lru_cache
from typing import Pattern

from pahest._core._config import WorkerConfig
from pahest._core.models import Request
from pahest._utils import url_path, url_scheme

INTERCEPTED_SCHEMES = ("http", "https")

# Heuristic: a "-" or "_" followed by at least 8 hex characters right before an extension.
# Filenames such as `app-a1b2c3d4.js` or `index-abc123de_bg.wasm` match.
CONTENT_HASH_RE = re.compile(r"[-_][a-f0-9]{8,}\.", re.IGNORECASE)


class StrategyClass(str, enum.Enum):
    NETWORK_ONLY = "network_only"
    NAVIGATION_NETWORK_FIRST = "navigation_network_first"
    FONT_CACHE_FIRST = "font_cache_first"
    HASHED_ASSET_CACHE_FIRST = "hashed_asset_cache_first"
    REVALIDATE_ASSET = "revalidate_asset"
    DEFAULT_NETWORK_FIRST = "default_network_first"


@lru_cache(maxsize=None)
def _static_asset_re(extensions: tuple[str, ...]) -> Pattern[str]:
    alternatives = "|".join(re.escape(extension) for extension in extensions)
    return re.compile(rf"\.({alternatives})$", re.IGNORECASE)


def should_intercept(request: Request) -> bool:
    """
    Only GET requests over http(s) are ever handled; everything else goes to the platform.
    """
    return request.method == "GET" and url_scheme(request.url) in INTERCEPTED_SCHEMES


def is_static_asset(path: str, config: WorkerConfig) -> bool:
    return _static_asset_re(config.static_extensions).search(path) is not None


def has_content_hash(path: str) -> bool:
    return CONTENT_HASH_RE.search(path) is not None


def classify(request: Request, config: WorkerConfig) -> StrategyClass:
    """
    Maps an interceptable request onto the strategy class that serves it.

    Rules are evaluated top to bottom and the first match wins; they overlap
    (a navigation to `/api/...` is still network-only), so the order is part
    of the contract.
    """
    path = url_path(request.url)

    if path.startswith(config.api_prefix):
        return StrategyClass.NETWORK_ONLY

    if request.is_navigation:
        return StrategyClass.NAVIGATION_NETWORK_FIRST

    if path.endswith(config.font_extension):
        return StrategyClass.FONT_CACHE_FIRST

    if is_static_asset(path, config):
        if has_content_hash(path):
            return StrategyClass.HASHED_ASSET_CACHE_FIRST
        return StrategyClass.REVALIDATE_ASSET

    return StrategyClass.DEFAULT_NETWORK_FIRST
