"""Resolution of type-alias associated references."""

from __future__ import annotations

import copy
import re
from pathlib import Path
from typing import Optional, Sequence, Tuple

from .diagnostics import DiagnosticLog
from .errors import ReferenceFormatError
from .models import (
    AssociatedReference,
    Enumeration,
    EnumerationReference,
    NoReference,
    StructureReference,
    Structure,
)

# Greedy header part: the definition name is the final path segment.
_REFERENCE_PATTERN = re.compile(r"(.+)/(.+)")


def split_reference(raw: str) -> Tuple[str, str]:
    """Split ``"<header-ref>/<definition>"`` into its two parts."""
    match = _REFERENCE_PATTERN.fullmatch(raw)
    if match is None:
        raise ReferenceFormatError(raw)
    return match.group(1), match.group(2)


class ReferenceResolver:
    """Turns textual references into embedded copies of known entities."""

    def __init__(self, diagnostics: DiagnosticLog | None = None) -> None:
        self.diagnostics = diagnostics if diagnostics is not None else DiagnosticLog()

    def resolve(
        self,
        raw: str,
        enums: Sequence[Enumeration],
        structs: Sequence[Structure],
        *,
        source: Optional[Path] = None,
    ) -> AssociatedReference:
        if raw == "":
            return NoReference()

        header_ref, definition = split_reference(raw)

        for enumeration in enums:
            if enumeration.name == definition and enumeration.header.ref == header_ref:
                return EnumerationReference(enumeration=copy.deepcopy(enumeration))

        for structure in structs:
            if structure.name == definition and structure.header.ref == header_ref:
                return StructureReference(structure=copy.deepcopy(structure))

        self.diagnostics.report(
            source if source is not None else raw,
            "typedef",
            f"associated_ref look up failed for: {header_ref}/{definition}",
        )
        return NoReference()


__all__ = ["ReferenceResolver", "split_reference"]
