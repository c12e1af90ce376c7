"""Per-header loading of entity fragments."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict, List, Sequence, TypeVar

from .affinity import AffinityAggregator
from .constants import EntityKind
from .diagnostics import ERROR, DiagnosticLog
from .errors import FragmentError, HeaderBoundaryError, ReferenceFormatError
from .fragments import (
    parse_enumeration,
    parse_function,
    parse_header_meta,
    parse_macro,
    parse_structure,
    parse_type_alias_fields,
    read_fragment,
)
from .logging import get_logger
from .models import (
    Enumeration,
    Function,
    Header,
    HeaderSummary,
    Macro,
    Structure,
    TypeAlias,
)
from .resolver import ReferenceResolver
from .walker import header_ref

T = TypeVar("T", Macro, Enumeration, Structure, TypeAlias, Function)

# (name, header, fragment path, parsed mapping) -> entity
_Builder = Callable[[str, HeaderSummary, Path, Dict[str, object]], T]


class _PassAborted(Exception):
    """Stops the current entity pass; the accumulated result is kept."""


class FragmentLoader:
    """Loads header boundaries and their sibling entity fragments.

    Each ``discover_*`` method is one pass over the full boundary list. Entity
    passes merge OS tags into ``affinities``; :meth:`discover_headers` seals the
    aggregator and must therefore run after every entity pass.
    """

    def __init__(
        self,
        root: str | Path,
        affinities: AffinityAggregator | None = None,
        diagnostics: DiagnosticLog | None = None,
        resolver: ReferenceResolver | None = None,
    ) -> None:
        self.root = Path(root).expanduser().resolve()
        self.affinities = affinities if affinities is not None else AffinityAggregator()
        self.diagnostics = diagnostics if diagnostics is not None else DiagnosticLog()
        self.resolver = resolver if resolver is not None else ReferenceResolver(self.diagnostics)
        self.logger = get_logger("loader")

    # ------------------------------------------------------------------
    # Boundary files

    def load_header_summary(self, boundary: Path) -> tuple[HeaderSummary, str]:
        """Return the header back-reference and its declared summary."""
        try:
            data = read_fragment(boundary)
            summary = parse_header_meta(data)
        except OSError as exc:
            raise HeaderBoundaryError(boundary, exc.strerror or str(exc)) from exc
        except FragmentError as exc:
            raise HeaderBoundaryError(boundary, str(exc)) from exc
        return HeaderSummary.for_ref(header_ref(boundary, self.root)), summary

    def discover_headers(self, header_paths: Sequence[Path]) -> List[Header]:
        """Build headers from boundary files, reading affinity from the aggregator."""
        self.affinities.seal()
        headers: List[Header] = []
        for boundary in header_paths:
            try:
                summary_ref, summary = self.load_header_summary(boundary)
            except HeaderBoundaryError as exc:
                self.diagnostics.report(boundary, "header", str(exc), severity=ERROR)
                break
            headers.append(
                Header(
                    ref=summary_ref.ref,
                    name=summary_ref.name,
                    summary=summary,
                    os_affinity=self.affinities.affinity_for(summary_ref.ref),
                )
            )
        headers.sort(key=lambda header: header.ref)
        return headers

    # ------------------------------------------------------------------
    # Entity passes

    def discover_macros(self, header_paths: Sequence[Path]) -> List[Macro]:
        return self._discover(
            EntityKind.MACRO,
            header_paths,
            lambda name, header, _path, data: parse_macro(name, header, data),
        )

    def discover_enums(self, header_paths: Sequence[Path]) -> List[Enumeration]:
        return self._discover(
            EntityKind.ENUM,
            header_paths,
            lambda name, header, _path, data: parse_enumeration(name, header, data),
        )

    def discover_structs(self, header_paths: Sequence[Path]) -> List[Structure]:
        return self._discover(
            EntityKind.STRUCT,
            header_paths,
            lambda name, header, _path, data: parse_structure(name, header, data),
        )

    def discover_functions(self, header_paths: Sequence[Path]) -> List[Function]:
        return self._discover(
            EntityKind.FUNCTION,
            header_paths,
            lambda name, header, _path, data: parse_function(name, header, data),
        )

    def discover_typedefs(
        self,
        header_paths: Sequence[Path],
        enums: Sequence[Enumeration],
        structs: Sequence[Structure],
    ) -> List[TypeAlias]:
        """Load type aliases, resolving references against loaded enums and structs."""

        def _build(name: str, header: HeaderSummary, path: Path, data: Dict[str, object]) -> TypeAlias:
            fields = parse_type_alias_fields(data)
            try:
                reference = self.resolver.resolve(
                    fields["associated_ref"], enums, structs, source=path
                )
            except ReferenceFormatError as exc:
                self.diagnostics.report(path, EntityKind.TYPEDEF.value, str(exc), severity=ERROR)
                raise _PassAborted from exc
            return TypeAlias(
                name=name,
                header=header,
                summary=fields["summary"],
                type=fields["type"],
                associated_ref=reference,
                description=fields["description"],
                os_affinity=fields["os_affinity"],
            )

        return self._discover(EntityKind.TYPEDEF, header_paths, _build)

    def _discover(
        self,
        kind: EntityKind,
        header_paths: Sequence[Path],
        build: _Builder,
    ) -> List[T]:
        entities: List[T] = []
        try:
            for boundary in header_paths:
                try:
                    header, _ = self.load_header_summary(boundary)
                except HeaderBoundaryError as exc:
                    self.diagnostics.report(boundary, "header", str(exc), severity=ERROR)
                    break
                self._load_directory(kind, boundary.parent, header, build, entities)
        except _PassAborted:
            self.logger.error("%s pass aborted; keeping %d loaded entries", kind.value, len(entities))
        entities.sort(key=lambda entity: entity.name)
        return entities

    def _load_directory(
        self,
        kind: EntityKind,
        directory: Path,
        header: HeaderSummary,
        build: _Builder,
        loaded: List[T],
    ) -> None:
        for path in sorted(directory.iterdir(), key=lambda entry: entry.name):
            if not path.name.startswith(kind.prefix) or not path.is_file():
                continue
            name = path.stem.removeprefix(kind.prefix)
            try:
                data = read_fragment(path)
                entity = build(name, header, path, data)
            except FragmentError as exc:
                self.diagnostics.report(path, kind.value, str(exc))
                continue
            self.affinities.merge(header.ref, entity.os_affinity)
            self.logger.debug("Loaded %s %s from %s", kind.value, name, header.name)
            loaded.append(entity)


__all__ = ["FragmentLoader"]
