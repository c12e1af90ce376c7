"""Tests for capibara.loader."""

from __future__ import annotations

from pathlib import Path

import pytest

from capibara.affinity import AffinityAggregator
from capibara.diagnostics import ERROR, DiagnosticLog
from capibara.loader import FragmentLoader
from capibara.models import NoReference, StructureReference
from capibara.walker import find_header_paths
from tests._fixtures.tree_builder import TreeBuilder


def _loader(tree_builder: TreeBuilder) -> tuple[FragmentLoader, list[Path]]:
    loader = FragmentLoader(
        tree_builder.path(),
        affinities=AffinityAggregator(),
        diagnostics=DiagnosticLog(),
    )
    return loader, find_header_paths(tree_builder.path())


def test_entity_names_strip_prefix_and_sort(tree_builder: TreeBuilder) -> None:
    tree_builder.header("geometry")
    tree_builder.struct("geometry", "Rect")
    tree_builder.struct("geometry", "Point")
    tree_builder.header("alpha")
    tree_builder.struct("alpha", "Zone")
    tree_builder.enum("geometry", "Shape")

    loader, paths = _loader(tree_builder)
    structs = loader.discover_structs(paths)

    assert [struct.name for struct in structs] == ["Point", "Rect", "Zone"]
    assert [struct.header.ref for struct in structs] == ["geometry", "geometry", "alpha"]
    assert structs[0].header.name == "geometry.h"


def test_only_immediate_siblings_are_loaded(tree_builder: TreeBuilder) -> None:
    tree_builder.header("net")
    tree_builder.function("net", "connect")
    tree_builder.function("net/extra", "orphan")

    loader, paths = _loader(tree_builder)
    functions = loader.discover_functions(paths)

    assert [function.name for function in functions] == ["connect"]


def test_malformed_fragment_is_reported_and_skipped(tree_builder: TreeBuilder) -> None:
    tree_builder.header("io")
    tree_builder.macro("io", "BUFSIZ")
    tree_builder.write({"io/mo-BROKEN.yaml": "summary: [oops\n", "io/mo-PARTIAL.yaml": "summary: x\n"})
    tree_builder.macro("io", "EOF")

    loader, paths = _loader(tree_builder)
    macros = loader.discover_macros(paths)

    assert [macro.name for macro in macros] == ["BUFSIZ", "EOF"]
    reported = sorted(Path(entry.path).name for entry in loader.diagnostics)
    assert reported == ["mo-BROKEN.yaml", "mo-PARTIAL.yaml"]
    assert all(entry.kind == "macro" for entry in loader.diagnostics)


def test_malformed_boundary_truncates_only_that_pass(tree_builder: TreeBuilder) -> None:
    tree_builder.header("a")
    tree_builder.struct("a", "First")
    tree_builder.write({"b/meta.yaml": "summary: [broken\n"})
    tree_builder.struct("b", "Second")
    tree_builder.header("c")
    tree_builder.struct("c", "Third")
    tree_builder.enum("c", "Kind")

    loader, paths = _loader(tree_builder)
    structs = loader.discover_structs(paths)
    enums = loader.discover_enums(paths)

    assert [struct.name for struct in structs] == ["First"]
    assert enums == []
    boundary_errors = [entry for entry in loader.diagnostics if entry.kind == "header"]
    assert len(boundary_errors) == 2
    assert all(entry.severity == ERROR for entry in boundary_errors)


def test_typedef_resolves_against_loaded_structs(tree_builder: TreeBuilder) -> None:
    tree_builder.header("geometry")
    tree_builder.struct("geometry", "Point", os_affinity=["linux"])
    tree_builder.typedef("geometry", "PointAlias", "geometry/Point", type_name="struct Point")
    tree_builder.typedef("geometry", "Plain", "")

    loader, paths = _loader(tree_builder)
    enums = loader.discover_enums(paths)
    structs = loader.discover_structs(paths)
    typedefs = loader.discover_typedefs(paths, enums, structs)

    by_name = {typedef.name: typedef for typedef in typedefs}
    assert isinstance(by_name["PointAlias"].associated_ref, StructureReference)
    assert by_name["PointAlias"].associated_ref.structure == structs[0]
    assert by_name["PointAlias"].type == "struct Point"
    assert by_name["Plain"].associated_ref == NoReference()
    assert len(loader.diagnostics) == 0


def test_malformed_reference_aborts_typedef_pass(tree_builder: TreeBuilder) -> None:
    tree_builder.header("a")
    tree_builder.typedef("a", "Alpha", "")
    tree_builder.typedef("a", "Beta", "NoSlash")
    tree_builder.typedef("a", "Gamma", "")
    tree_builder.header("b")
    tree_builder.typedef("b", "Delta", "")

    loader, paths = _loader(tree_builder)
    typedefs = loader.discover_typedefs(paths, [], [])

    assert [typedef.name for typedef in typedefs] == ["Alpha"]
    assert [entry.severity for entry in loader.diagnostics] == [ERROR]
    assert "NoSlash" in loader.diagnostics.entries[0].message


def test_header_affinity_is_union_of_entities(tree_builder: TreeBuilder) -> None:
    tree_builder.header("net")
    tree_builder.function("net", "connect", os_affinity=["linux", "macos"])
    tree_builder.macro("net", "AF_INET", os_affinity=["windows", "linux"])
    tree_builder.header("empty")

    loader, paths = _loader(tree_builder)
    loader.discover_macros(paths)
    loader.discover_functions(paths)
    headers = loader.discover_headers(paths)

    by_ref = {header.ref: header for header in headers}
    assert by_ref["net"].os_affinity == ["windows", "linux", "macos"]
    assert by_ref["empty"].os_affinity == []
    assert by_ref["net"].summary == "Header summary"


def test_entity_pass_after_header_pass_is_rejected(tree_builder: TreeBuilder) -> None:
    tree_builder.header("net")
    tree_builder.function("net", "connect", os_affinity=["linux"])

    loader, paths = _loader(tree_builder)
    loader.discover_headers(paths)

    with pytest.raises(RuntimeError):
        loader.discover_functions(paths)


def test_loader_shares_injected_collaborators(tree_builder: TreeBuilder) -> None:
    tree_builder.header("geometry")
    tree_builder.typedef("geometry", "Ghost", "missing/Thing")
    affinities = AffinityAggregator()
    diagnostics = DiagnosticLog()

    loader = FragmentLoader(tree_builder.path(), affinities=affinities, diagnostics=diagnostics)
    loader.discover_typedefs(find_header_paths(tree_builder.path()), [], [])

    assert loader.diagnostics is diagnostics
    assert loader.affinities is affinities
    assert loader.resolver.diagnostics is diagnostics
    assert [entry.kind for entry in diagnostics] == ["typedef"]
