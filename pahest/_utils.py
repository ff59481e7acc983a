from __future__ import annotations

import typing as tp
from pathlib import Path
from typing import AsyncIterator, Iterable
from urllib.parse import urljoin, urlsplit

T = tp.TypeVar("T")


async def make_async_iterator(
    iterable: Iterable[bytes],
) -> AsyncIterator[bytes]:
    for item in iterable:
        yield item


def partition(iterable: tp.Iterable[T], predicate: tp.Callable[[T], bool]) -> tp.Tuple[tp.List[T], tp.List[T]]:
    """
    Partition an iterable into two lists: one for matching items and one for non-matching items.

    Example:
        ```
        iterable = ["fonts-v1", "fonts-v2"]
        expected, stale = partition(iterable, lambda name: name.endswith("-v2"))
        ```
    """
    matching, non_matching = [], []
    for item in iterable:
        if predicate(item):
            matching.append(item)
        else:
            non_matching.append(item)
    return matching, non_matching


def filter_mapping(mapping: tp.Mapping[str, T], keys_to_exclude: tp.Iterable[str]) -> tp.Dict[str, T]:
    """
    Filter out specified keys from a string-keyed mapping using case-insensitive comparison.

    Example:
    ```python
        original = {'a': 1, 'B': 2, 'c': 3}
        filtered = filter_mapping(original, ['b'])
        # filtered will be {'a': 1, 'c': 3}
    ```
    """
    exclude_set = {k.lower() for k in keys_to_exclude}
    return {k: v for k, v in mapping.items() if k.lower() not in exclude_set}


def url_path(url: str) -> str:
    return urlsplit(url).path or "/"


def url_scheme(url: str) -> str:
    return urlsplit(url).scheme.lower()


def url_origin(url: str) -> str:
    parts = urlsplit(url)
    return f"{parts.scheme}://{parts.netloc}"


def resolve_url(base: str, path: str) -> str:
    return urljoin(base, path)


def ensure_cache_dict(base_path: Path | None = None) -> Path:
    _base_path = base_path if base_path is not None else Path(".cache/pahest")
    _gitignore_file = _base_path / ".gitignore"

    _base_path.mkdir(parents=True, exist_ok=True)

    if not _gitignore_file.is_file():
        with open(_gitignore_file, "w", encoding="utf-8") as f:
            f.write("# Automatically created by Pahest\n*")
    return _base_path
