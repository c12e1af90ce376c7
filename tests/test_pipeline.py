"""End-to-end tests for capibara.pipeline."""

from __future__ import annotations

import json

from capibara.models import (
    EnumerationReference,
    FunctionMacro,
    NoReference,
    StructureReference,
)
from capibara.writer import render_document, write_document
from tests._fixtures.tree_builder import TreeBuilder


def _populate(tree_builder: TreeBuilder) -> None:
    tree_builder.header("net")
    tree_builder.header("net/socket")
    tree_builder.header("io")
    tree_builder.function("net", "resolve", os_affinity=["linux"])
    tree_builder.function("net/socket", "bind", os_affinity=["windows"])
    tree_builder.function("io", "read", os_affinity=["linux", "macos"])
    tree_builder.enum("net/socket", "Family", os_affinity=["linux"])
    tree_builder.struct("io", "Buffer")
    tree_builder.macro("io", "EOF")
    tree_builder.typedef("net/socket", "family_t", "net/socket/Family")
    tree_builder.typedef("io", "buffer_t", "io/Buffer")


def test_point_alias_scenario(tree_builder: TreeBuilder) -> None:
    tree_builder.header("geometry")
    tree_builder.struct("geometry", "Point", fields=("x", "y"), os_affinity=["linux"])
    tree_builder.typedef("geometry", "PointAlias", "geometry/Point", type_name="struct Point")

    result = tree_builder.build()
    document = result.document

    assert [header.ref for header in document.headers] == ["geometry"]
    assert document.headers[0].name == "geometry.h"
    assert document.headers[0].os_affinity == ["linux"]
    assert [struct.name for struct in document.structs] == ["Point"]
    alias = document.typedefs[0]
    assert alias.name == "PointAlias"
    assert isinstance(alias.associated_ref, StructureReference)
    assert alias.associated_ref.structure == document.structs[0]
    assert [field.name for field in alias.associated_ref.structure.fields] == ["x", "y"]
    assert result.diagnostics == []


def test_missing_reference_scenario(tree_builder: TreeBuilder) -> None:
    tree_builder.header("geometry")
    tree_builder.typedef("geometry", "Ghost", "missing/Thing")

    result = tree_builder.build()

    assert result.document.typedefs[0].associated_ref == NoReference()
    assert len(result.diagnostics) == 1
    assert "missing/Thing" in result.diagnostics[0].message


def test_nested_headers_keep_separate_affinity(tree_builder: TreeBuilder) -> None:
    tree_builder.header("parent")
    tree_builder.header("parent/child")
    tree_builder.struct("parent", "Outer", os_affinity=["linux"])
    tree_builder.struct("parent/child", "Inner", os_affinity=["windows"])

    result = tree_builder.build()

    assert len(result.header_paths) == 2
    by_ref = {header.ref: header for header in result.document.headers}
    assert by_ref["parent"].os_affinity == ["linux"]
    assert by_ref["parent/child"].os_affinity == ["windows"]


def test_collections_are_sorted(tree_builder: TreeBuilder) -> None:
    _populate(tree_builder)

    document = tree_builder.build().document

    for collection in (document.macros, document.enums, document.structs, document.typedefs, document.functions):
        names = [entity.name for entity in collection]
        assert names == sorted(names)
    refs = [header.ref for header in document.headers]
    assert refs == sorted(refs)
    assert [function.name for function in document.functions] == ["bind", "read", "resolve"]


def test_every_entity_header_exists(tree_builder: TreeBuilder) -> None:
    _populate(tree_builder)

    document = tree_builder.build().document

    refs = {header.ref for header in document.headers}
    for collection in (document.macros, document.enums, document.structs, document.typedefs, document.functions):
        assert all(entity.header.ref in refs for entity in collection)


def test_affinity_union_matches_entities(tree_builder: TreeBuilder) -> None:
    _populate(tree_builder)

    document = tree_builder.build().document

    entities = [
        *document.macros,
        *document.enums,
        *document.structs,
        *document.typedefs,
        *document.functions,
    ]
    for header in document.headers:
        expected = {tag for entity in entities if entity.header.ref == header.ref for tag in entity.os_affinity}
        assert set(header.os_affinity) == expected
        assert len(header.os_affinity) == len(expected)


def test_enum_reference_is_embedded(tree_builder: TreeBuilder) -> None:
    _populate(tree_builder)

    document = tree_builder.build().document

    family_t = next(typedef for typedef in document.typedefs if typedef.name == "family_t")
    assert isinstance(family_t.associated_ref, EnumerationReference)
    assert family_t.associated_ref.enumeration.header.ref == "net/socket"


def test_runs_are_identical_apart_from_build_date(tree_builder: TreeBuilder) -> None:
    _populate(tree_builder)

    first = json.loads(render_document(tree_builder.build().document))
    second = json.loads(render_document(tree_builder.build().document))
    first.pop("build_date")
    second.pop("build_date")

    assert first == second
    assert json.dumps(first) == json.dumps(second)


def test_written_document_shape(tree_builder: TreeBuilder, tmp_path) -> None:
    tree_builder.header("geometry")
    tree_builder.struct("geometry", "Point")
    tree_builder.typedef("geometry", "PointAlias", "geometry/Point")
    tree_builder.typedef("geometry", "Count", "")
    tree_builder.write(
        {
            "geometry/mo-CLAMP.yaml": """
                summary: "Clamp a value"
                kind:
                  function:
                    returns:
                      type: "T"
                      description: "The clamped value"
                    parameters:
                      - name: "v"
                        description: "Value"
                description: "Clamp v"
                os_affinity: [linux]
            """,
        }
    )

    result = tree_builder.build("https://docs.example.test")
    assert isinstance(result.document.macros[0].kind, FunctionMacro)

    output = write_document(result.document, tmp_path / "out" / "capibara.json", indent=2)
    payload = json.loads(output.read_text(encoding="utf-8"))

    assert payload["reference_url"] == "https://docs.example.test"
    assert payload["build_date"].endswith("Z")
    assert set(payload) == {
        "build_date",
        "reference_url",
        "headers",
        "macros",
        "enums",
        "structs",
        "typedefs",
        "functions",
    }
    assert payload["headers"][0] == {
        "ref": "geometry",
        "name": "geometry.h",
        "summary": "Header summary",
        "os_affinity": ["linux"],
    }
    typedefs = {entry["name"]: entry for entry in payload["typedefs"]}
    assert typedefs["Count"]["associated_ref"] == {"none": None}
    assert typedefs["PointAlias"]["associated_ref"]["struct"]["name"] == "Point"
    assert payload["macros"][0]["kind"]["function"]["returns"]["type"] == "T"
    assert payload["structs"][0]["fields"][0] == {"name": "x", "type": "int", "description": "x value"}
