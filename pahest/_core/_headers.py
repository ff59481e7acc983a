from __future__ import annotations

from dataclasses import dataclass, field
from typing import (
    Any,
    Iterator,
    List,
    Mapping,
    MutableMapping,
    Optional,
    Union,
)


class Headers(MutableMapping[str, str]):
    def __init__(self, headers: Mapping[str, Union[str, List[str]]]) -> None:
        self._headers = {k.lower(): ([v] if isinstance(v, str) else v[:]) for k, v in headers.items()}

    def get_list(self, key: str) -> Optional[List[str]]:
        return self._headers.get(key.lower(), None)

    def copy(self) -> "Headers":
        return Headers(self._headers)

    def replace(self, key: str, value: str) -> "Headers":
        """
        Returns a copy of the headers where every value of `key` is replaced by `value`.
        """
        headers = self.copy()
        headers._headers[key.lower()] = [value]
        return headers

    def multi_items(self) -> List[tuple[str, str]]:
        return [(key, value) for key, values in self._headers.items() for value in values]

    def __getitem__(self, key: str) -> str:
        return ", ".join(self._headers[key.lower()])

    def __setitem__(self, key: str, value: str) -> None:
        self._headers.setdefault(key.lower(), []).append(value)

    def __delitem__(self, key: str) -> None:
        del self._headers[key.lower()]

    def __iter__(self) -> Iterator[str]:
        return iter(self._headers)

    def __len__(self) -> int:
        return len(self._headers)

    def __repr__(self) -> str:
        return repr(self._headers)

    def __str__(self) -> str:
        return str(self._headers)

    def __eq__(self, other_headers: Any) -> bool:
        return isinstance(other_headers, Headers) and self._headers == other_headers._headers  # type: ignore


@dataclass
class CacheControl:
    """
    The subset of Cache-Control response directives that the worker emits and inspects.

    Unrecognized directives are kept verbatim in `extensions`.
    """

    max_age: Optional[int] = None
    public: bool = False
    immutable: bool = False
    extensions: List[str] = field(default_factory=list)

    def __str__(self) -> str:
        directives: List[str] = []
        if self.public:
            directives.append("public")
        if self.max_age is not None:
            directives.append(f"max-age={self.max_age}")
        if self.immutable:
            directives.append("immutable")
        directives.extend(self.extensions)
        return ", ".join(directives)


def parse_int_value(value: str) -> Optional[int]:
    """Parse integer value, return None if invalid."""
    try:
        val = int(value)
        # Cap at max int32 for compatibility
        return min(val, 2147483647) if val >= 0 else None
    except (ValueError, OverflowError):
        return None


def parse_cache_control(value: str | None) -> CacheControl:
    """
    Parse a Cache-Control header value.

    Quoted field-name lists are not supported; directives are split on commas.

    Examples:
        >>> cc = parse_cache_control("public, max-age=86400, immutable")
        >>> cc.public
        True
        >>> cc.max_age
        86400
        >>> cc.immutable
        True
    """
    cc = CacheControl()
    if not value:
        return cc

    for directive in value.split(","):
        directive = directive.strip()
        if not directive:
            continue
        token, _, directive_value = directive.partition("=")
        token = token.strip().lower()

        if token == "max-age":
            cc.max_age = parse_int_value(directive_value.strip().strip('"'))
        elif token == "public":
            cc.public = True
        elif token == "immutable":
            cc.immutable = True
        else:
            cc.extensions.append(directive)
    return cc
