"""Exception hierarchy for capibara."""

from __future__ import annotations

from pathlib import Path


class CapibaraError(RuntimeError):
    """Base class for all errors raised by capibara."""


class ConfigError(CapibaraError):
    """Raised when the configuration file cannot be parsed."""


class TraversalError(CapibaraError):
    """Raised when a directory in the fragment tree cannot be read."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Cannot read directory {path}: {reason}")
        self.path = path


class HeaderBoundaryError(CapibaraError):
    """Raised when a header boundary file is unreadable or malformed."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Invalid header boundary {path}: {reason}")
        self.path = path


class FragmentError(CapibaraError):
    """Raised when an entity fragment does not match its expected shape."""


class ReferenceFormatError(CapibaraError):
    """Raised when an associated reference is not of the form `header/definition`."""

    def __init__(self, raw: str) -> None:
        super().__init__(f"Malformed associated reference: {raw!r}")
        self.raw = raw


__all__ = [
    "CapibaraError",
    "ConfigError",
    "FragmentError",
    "HeaderBoundaryError",
    "ReferenceFormatError",
    "TraversalError",
]
