"""Pipeline orchestration for a full aggregation run."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List

from .affinity import AffinityAggregator
from .assembler import DocumentAssembler
from .constants import DEFAULT_MARKER
from .diagnostics import Diagnostic, DiagnosticLog
from .loader import FragmentLoader
from .logging import get_logger
from .models import Document
from .walker import PathWalker


@dataclass
class BuildResult:
    """Outcome of one aggregation run."""

    document: Document
    diagnostics: List[Diagnostic] = field(default_factory=list)
    header_paths: List[Path] = field(default_factory=list)


class Pipeline:
    """Coordinates the walk, the entity passes, the header pass and assembly.

    Pass order matters: typedefs resolve against the finished enum and struct
    collections, and headers read OS affinity that every entity pass has
    already merged. Each run gets a fresh aggregator and diagnostic log.
    """

    def __init__(
        self,
        walker: PathWalker | None = None,
        assembler: DocumentAssembler | None = None,
        loader_factory: Callable[..., FragmentLoader] = FragmentLoader,
    ) -> None:
        self.walker = walker or PathWalker(marker=DEFAULT_MARKER)
        self.assembler = assembler or DocumentAssembler()
        self.loader_factory = loader_factory
        self.logger = get_logger("pipeline")

    def run(self, root: str | Path, reference_url: str) -> BuildResult:
        root_path = Path(root).expanduser().resolve()
        self.logger.info("Header tree:\t%s", root_path)
        self.logger.info("Reference URL:\t%s", reference_url)

        header_paths = self.walker.find_header_paths(root_path)
        self.logger.info("Found %d header paths", len(header_paths))

        diagnostics = DiagnosticLog()
        loader = self.loader_factory(
            root_path,
            affinities=AffinityAggregator(),
            diagnostics=diagnostics,
        )

        macros = loader.discover_macros(header_paths)
        self.logger.info("Found %d macros", len(macros))
        enums = loader.discover_enums(header_paths)
        self.logger.info("Found %d enums", len(enums))
        structs = loader.discover_structs(header_paths)
        self.logger.info("Found %d structs", len(structs))
        typedefs = loader.discover_typedefs(header_paths, enums, structs)
        self.logger.info("Found %d typedefs", len(typedefs))
        functions = loader.discover_functions(header_paths)
        self.logger.info("Found %d functions", len(functions))

        headers = loader.discover_headers(header_paths)
        self.logger.info("Found %d headers", len(headers))

        document = self.assembler.assemble(
            reference_url,
            headers=headers,
            macros=macros,
            enums=enums,
            structs=structs,
            typedefs=typedefs,
            functions=functions,
        )
        if diagnostics:
            self.logger.warning("Build finished with %d diagnostics", len(diagnostics))
        return BuildResult(
            document=document,
            diagnostics=diagnostics.entries,
            header_paths=header_paths,
        )


__all__ = ["BuildResult", "Pipeline"]
