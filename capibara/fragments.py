"""Parsing of individual YAML fragment files into typed records."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Mapping

import yaml

from .errors import FragmentError
from .models import (
    EnumVariant,
    Enumeration,
    Function,
    FunctionMacro,
    HeaderSummary,
    Macro,
    MacroKind,
    MacroParameter,
    ObjectMacro,
    Parameter,
    Return,
    StructField,
    Structure,
)


def read_fragment(path: Path) -> Dict[str, Any]:
    """Load a fragment file and return its top-level mapping.

    Read failures propagate as ``OSError``; undecodable text, YAML syntax
    errors and non-mapping documents raise :class:`FragmentError`.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise FragmentError(f"{path.name} is not valid UTF-8: {exc}") from exc
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise FragmentError(f"Failed to parse {path.name}: {exc}") from exc
    return _require_mapping(data, path.name)


def parse_header_meta(data: Mapping[str, Any]) -> str:
    """Return the header summary declared by a boundary file."""
    return _require_str(data, "summary")


def parse_macro(name: str, header: HeaderSummary, data: Mapping[str, Any]) -> Macro:
    return Macro(
        name=name,
        header=header,
        summary=_require_str(data, "summary"),
        kind=_parse_macro_kind(data.get("kind")),
        description=_require_str(data, "description"),
        os_affinity=_require_str_list(data, "os_affinity"),
    )


def parse_enumeration(name: str, header: HeaderSummary, data: Mapping[str, Any]) -> Enumeration:
    variants = [
        EnumVariant(
            name=_require_str(item, "name"),
            description=_require_str(item, "description"),
        )
        for item in _require_mapping_list(data, "variants")
    ]
    return Enumeration(
        name=name,
        header=header,
        summary=_require_str(data, "summary"),
        variants=variants,
        description=_require_str(data, "description"),
        os_affinity=_require_str_list(data, "os_affinity"),
    )


def parse_structure(name: str, header: HeaderSummary, data: Mapping[str, Any]) -> Structure:
    fields = [
        StructField(
            name=_require_str(item, "name"),
            type=_require_str(item, "type"),
            description=_require_str(item, "description"),
        )
        for item in _require_mapping_list(data, "fields")
    ]
    return Structure(
        name=name,
        header=header,
        summary=_require_str(data, "summary"),
        fields=fields,
        description=_require_str(data, "description"),
        os_affinity=_require_str_list(data, "os_affinity"),
    )


def parse_function(name: str, header: HeaderSummary, data: Mapping[str, Any]) -> Function:
    parameters = [
        Parameter(
            name=_require_str(item, "name"),
            type=_require_str(item, "type"),
            description=_require_str(item, "description"),
        )
        for item in _require_mapping_list(data, "parameters")
    ]
    return Function(
        name=name,
        header=header,
        summary=_require_str(data, "summary"),
        returns=_parse_return(data.get("returns")),
        parameters=parameters,
        description=_require_str(data, "description"),
        associated=_require_str_list(data, "associated"),
        os_affinity=_require_str_list(data, "os_affinity"),
    )


def parse_type_alias_fields(data: Mapping[str, Any]) -> Dict[str, Any]:
    """Validate a type-alias fragment and return its raw fields.

    The associated reference stays textual here; it is resolved once all
    enumerations and structures are known.
    """
    return {
        "summary": _require_str(data, "summary"),
        "type": _require_str(data, "type"),
        "associated_ref": _require_str(data, "associated_ref"),
        "description": _require_str(data, "description"),
        "os_affinity": _require_str_list(data, "os_affinity"),
    }


def _parse_macro_kind(value: Any) -> MacroKind:
    if value == "object":
        return ObjectMacro()
    if not isinstance(value, dict) or len(value) != 1:
        raise FragmentError("kind must be 'object' or a single-key mapping of object/function")
    tag, body = next(iter(value.items()))
    if tag == "object":
        if body not in (None, {}):
            raise FragmentError("object macros take no fields")
        return ObjectMacro()
    if tag == "function":
        body = _require_mapping(body, "kind.function")
        parameters = [
            MacroParameter(
                name=_require_str(item, "name"),
                description=_require_str(item, "description"),
            )
            for item in _require_mapping_list(body, "parameters")
        ]
        return FunctionMacro(returns=_parse_return(body.get("returns")), parameters=parameters)
    raise FragmentError(f"Unknown macro kind: {tag!r}")


def _parse_return(value: Any) -> Return:
    data = _require_mapping(value, "returns")
    return Return(type=_require_str(data, "type"), description=_require_str(data, "description"))


def _require_mapping(value: Any, label: str) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise FragmentError(f"{label} must be a mapping")
    return value


def _require_str(data: Mapping[str, Any], key: str) -> str:
    if key not in data:
        raise FragmentError(f"missing field '{key}'")
    value = data[key]
    if not isinstance(value, str):
        raise FragmentError(f"field '{key}' must be a string")
    return value


def _require_str_list(data: Mapping[str, Any], key: str) -> List[str]:
    if key not in data:
        raise FragmentError(f"missing field '{key}'")
    value = data[key]
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise FragmentError(f"field '{key}' must be a list of strings")
    return list(value)


def _require_mapping_list(data: Mapping[str, Any], key: str) -> List[Dict[str, Any]]:
    if key not in data:
        raise FragmentError(f"missing field '{key}'")
    value = data[key]
    if not isinstance(value, list):
        raise FragmentError(f"field '{key}' must be a list")
    return [_require_mapping(item, f"{key}[{index}]") for index, item in enumerate(value)]


__all__ = [
    "parse_enumeration",
    "parse_function",
    "parse_header_meta",
    "parse_macro",
    "parse_structure",
    "parse_type_alias_fields",
    "read_fragment",
]
