"""Operator-facing diagnostics collected during a build."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Dict, Iterator, List

from .logging import get_logger

WARNING = "warning"
ERROR = "error"


@dataclass(frozen=True)
class Diagnostic:
    """A single recoverable or pass-fatal problem found while loading fragments."""

    path: str
    kind: str
    message: str
    severity: str = WARNING

    def render(self) -> str:
        return f"{self.kind.capitalize()} {self.severity} ({self.path}): {self.message}"

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


class DiagnosticLog:
    """Collects diagnostics for one run and mirrors each to the logger."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._entries: List[Diagnostic] = []
        self._logger = logger or get_logger("diagnostics")

    def report(self, path: object, kind: str, message: str, *, severity: str = WARNING) -> Diagnostic:
        diagnostic = Diagnostic(path=str(path), kind=kind, message=message, severity=severity)
        self._entries.append(diagnostic)
        level = logging.ERROR if severity == ERROR else logging.WARNING
        self._logger.log(level, diagnostic.render())
        return diagnostic

    @property
    def entries(self) -> List[Diagnostic]:
        return list(self._entries)

    @property
    def has_errors(self) -> bool:
        return any(entry.severity == ERROR for entry in self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(list(self._entries))


__all__ = ["Diagnostic", "DiagnosticLog", "ERROR", "WARNING"]
