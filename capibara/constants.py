"""Filename conventions for the fragment tree."""

from __future__ import annotations

from enum import Enum

DEFAULT_MARKER = "meta.yaml"
DEFAULT_OUTPUT = "capibara.json"
CONFIG_FILENAME = ".capibara.yml"

EXCLUDED_DIRS = frozenset(
    {
        ".git",
        ".hg",
        ".svn",
        ".venv",
        "__pycache__",
        ".pytest_cache",
        ".mypy_cache",
        ".idea",
    }
)


class EntityKind(str, Enum):
    """Entity kinds recognised by filename prefix."""

    MACRO = "macro"
    ENUM = "enum"
    STRUCT = "struct"
    TYPEDEF = "typedef"
    FUNCTION = "function"

    @property
    def prefix(self) -> str:
        return _PREFIXES[self]


_PREFIXES = {
    EntityKind.MACRO: "mo-",
    EntityKind.ENUM: "em-",
    EntityKind.STRUCT: "st-",
    EntityKind.TYPEDEF: "tf-",
    EntityKind.FUNCTION: "fn-",
}


__all__ = [
    "CONFIG_FILENAME",
    "DEFAULT_MARKER",
    "DEFAULT_OUTPUT",
    "EXCLUDED_DIRS",
    "EntityKind",
]
