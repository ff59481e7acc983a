from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union

from typing_extensions import TypeAlias

SKIP_WAITING = "SKIP_WAITING"
PRECACHE_THEME = "PRECACHE_THEME"


@dataclass(frozen=True)
class SkipWaiting:
    pass


@dataclass(frozen=True)
class PrecacheTheme:
    theme: Optional[str]


ControlMessage: TypeAlias = Union[SkipWaiting, PrecacheTheme]


def parse_message(data: Any) -> Optional[ControlMessage]:
    """
    Parses a control message posted to the worker.

    Returns None for anything that is not a mapping with a known string `type`.
    A theme that is not a string is kept as None so that the command is still
    recognised but validates as unknown.

    Examples:
        >>> parse_message({"type": "SKIP_WAITING"})
        SkipWaiting()
        >>> parse_message({"type": "PRECACHE_THEME", "animal": "cat"})
        PrecacheTheme(theme='cat')
        >>> parse_message("SKIP_WAITING") is None
        True
    """
    if not isinstance(data, Mapping):
        return None

    message_type = data.get("type")
    if message_type == SKIP_WAITING:
        return SkipWaiting()
    if message_type == PRECACHE_THEME:
        animal = data.get("animal")
        return PrecacheTheme(theme=animal if isinstance(animal, str) else None)
    return None
