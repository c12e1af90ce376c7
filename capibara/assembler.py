"""Final assembly of the aggregated document."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Sequence

from .models import Document, Enumeration, Function, Header, Macro, Structure, TypeAlias


def build_timestamp() -> str:
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")


class DocumentAssembler:
    """Wraps already-sorted collections into an immutable :class:`Document`."""

    def assemble(
        self,
        reference_url: str,
        *,
        headers: Sequence[Header],
        macros: Sequence[Macro],
        enums: Sequence[Enumeration],
        structs: Sequence[Structure],
        typedefs: Sequence[TypeAlias],
        functions: Sequence[Function],
        build_date: str | None = None,
    ) -> Document:
        return Document(
            build_date=build_date or build_timestamp(),
            reference_url=reference_url,
            headers=tuple(headers),
            macros=tuple(macros),
            enums=tuple(enums),
            structs=tuple(structs),
            typedefs=tuple(typedefs),
            functions=tuple(functions),
        )


__all__ = ["DocumentAssembler", "build_timestamp"]
