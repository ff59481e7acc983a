from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List

from pahest._utils import partition

APP_SHELL = "app-shell"
STATIC_ASSETS = "static-assets"
FONTS = "fonts"

DEFAULT_STATIC_EXTENSIONS = ("wasm", "js", "css", "svg", "png", "jpg", "jpeg", "webp", "ico", "json")

DEFAULT_APP_SHELL_ASSETS = (
    "/",
    "/index.html",
)

DEFAULT_FONT_ASSETS = (
    "/public/fonts/inter-latin-400.woff2",
    "/public/fonts/inter-latin-500.woff2",
    "/public/fonts/inter-latin-600.woff2",
    "/public/fonts/inter-latin-700.woff2",
    "/public/fonts/material-symbols.woff2",
)

DEFAULT_THEMES = frozenset({"cat", "chicken", "elephant", "octopus"})

ONE_HOUR = 3600
ONE_DAY = 86400
ONE_YEAR = 31536000


@dataclass(frozen=True)
class Partition:
    logical_name: str
    version: str

    @property
    def physical_name(self) -> str:
        return f"{self.logical_name}-{self.version}"


@dataclass(frozen=True)
class PartitionRegistry:
    """
    Maps the logical cache partitions onto versioned physical store names.

    Bumping `version` is the only way entries get invalidated: every physical
    name of the previous version drops out of `expected_partitions()` and is
    removed wholesale on the next activation.
    """

    version: str

    @property
    def app_shell(self) -> Partition:
        return Partition(APP_SHELL, self.version)

    @property
    def static_assets(self) -> Partition:
        return Partition(STATIC_ASSETS, self.version)

    @property
    def fonts(self) -> Partition:
        return Partition(FONTS, self.version)

    def expected_partitions(self) -> frozenset[str]:
        return frozenset(
            partition.physical_name for partition in (self.app_shell, self.static_assets, self.fonts)
        )

    def reconcile(self, existing_names: Iterable[str]) -> List[str]:
        """
        Returns the existing physical names that are not expected, in enumeration order.
        """
        expected = self.expected_partitions()
        _, stale = partition(existing_names, lambda name: name in expected)
        return stale


@dataclass(frozen=True)
class WorkerConfig:
    """
    Static configuration of the cache worker.

    Built once at startup and passed explicitly to the classifier, the strategy
    executor and the worker; it is never changed in response to traffic.

    Attributes:
    ----------
    version : str
        Version tag appended to every partition name. Changing it invalidates
        all partitions of the previous version on the next activation.

        Default: "v2"

    origin : str
        Origin the worker serves. Manifest paths are resolved against it and
        control messages from any other origin are ignored.

        Default: "http://localhost"

    api_prefix : str
        Requests whose path starts with this prefix always go to the network.

        Default: "/api/"

    font_extension : str
        Paths ending with this suffix are served cache-first from the fonts partition.

        Default: ".woff2"

    static_extensions : tuple[str, ...]
        File extensions (without the dot, matched case-insensitively) treated as static assets.

    app_shell_assets / font_assets : tuple[str, ...]
        Manifests eagerly cached at install time.

    shell_document : str
        Document served from the app-shell partition to offline navigations
        that have no cached page of their own.

        Default: "/index.html"

    valid_themes : frozenset[str]
        Allow-list for the "PRECACHE_THEME" control message.

    network_fallback_max_age / revalidate_max_age / immutable_max_age : int
        Freshness windows (seconds) injected into served cached responses.

    Examples:
    --------
    >>> config = WorkerConfig(version="v3", origin="https://zoo.example")
    >>> sorted(config.registry.expected_partitions())
    ['app-shell-v3', 'fonts-v3', 'static-assets-v3']
    """

    version: str = "v2"
    origin: str = "http://localhost"
    api_prefix: str = "/api/"
    font_extension: str = ".woff2"
    static_extensions: tuple[str, ...] = DEFAULT_STATIC_EXTENSIONS
    app_shell_assets: tuple[str, ...] = DEFAULT_APP_SHELL_ASSETS
    font_assets: tuple[str, ...] = DEFAULT_FONT_ASSETS
    shell_document: str = "/index.html"
    valid_themes: frozenset[str] = field(default=DEFAULT_THEMES)
    network_fallback_max_age: int = ONE_HOUR
    revalidate_max_age: int = ONE_DAY
    immutable_max_age: int = ONE_YEAR

    @property
    def registry(self) -> PartitionRegistry:
        return PartitionRegistry(self.version)
