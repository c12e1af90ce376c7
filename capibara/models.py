"""Core data models shared across capibara components."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Tuple, Union


@dataclass(frozen=True)
class HeaderSummary:
    """Back-reference from an entity to the header that owns it."""

    ref: str
    name: str

    @classmethod
    def for_ref(cls, ref: str) -> "HeaderSummary":
        return cls(ref=ref, name=f"{ref}.h")

    def to_dict(self) -> Dict[str, Any]:
        return {"ref": self.ref, "name": self.name}


@dataclass
class Header:
    """One documented header, discovered through its boundary file."""

    ref: str
    name: str
    summary: str
    os_affinity: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ref": self.ref,
            "name": self.name,
            "summary": self.summary,
            "os_affinity": list(self.os_affinity),
        }


@dataclass
class Return:
    type: str
    description: str


@dataclass
class Parameter:
    name: str
    type: str
    description: str


@dataclass
class MacroParameter:
    """Function-like macro parameters carry no type."""

    name: str
    description: str


@dataclass
class ObjectMacro:
    """Object-like macro (`#define NAME value`)."""


@dataclass
class FunctionMacro:
    """Function-like macro with a documented result and parameters."""

    returns: Return
    parameters: List[MacroParameter] = field(default_factory=list)


MacroKind = Union[ObjectMacro, FunctionMacro]


def macro_kind_to_dict(kind: MacroKind) -> Dict[str, Any]:
    if isinstance(kind, ObjectMacro):
        return {"object": {}}
    if isinstance(kind, FunctionMacro):
        return {"function": asdict(kind)}
    raise TypeError(f"Unknown macro kind: {type(kind).__name__}")


@dataclass
class Macro:
    name: str
    header: HeaderSummary
    summary: str
    kind: MacroKind
    description: str
    os_affinity: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "header": self.header.to_dict(),
            "summary": self.summary,
            "kind": macro_kind_to_dict(self.kind),
            "description": self.description,
            "os_affinity": list(self.os_affinity),
        }


@dataclass
class EnumVariant:
    name: str
    description: str


@dataclass
class Enumeration:
    name: str
    header: HeaderSummary
    summary: str
    variants: List[EnumVariant]
    description: str
    os_affinity: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "header": self.header.to_dict(),
            "summary": self.summary,
            "variants": [asdict(variant) for variant in self.variants],
            "description": self.description,
            "os_affinity": list(self.os_affinity),
        }


@dataclass
class StructField:
    name: str
    type: str
    description: str


@dataclass
class Structure:
    name: str
    header: HeaderSummary
    summary: str
    fields: List[StructField]
    description: str
    os_affinity: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "header": self.header.to_dict(),
            "summary": self.summary,
            "fields": [asdict(item) for item in self.fields],
            "description": self.description,
            "os_affinity": list(self.os_affinity),
        }


@dataclass
class Function:
    name: str
    header: HeaderSummary
    summary: str
    returns: Return
    parameters: List[Parameter]
    description: str
    associated: List[str] = field(default_factory=list)
    os_affinity: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "header": self.header.to_dict(),
            "summary": self.summary,
            "returns": asdict(self.returns),
            "parameters": [asdict(parameter) for parameter in self.parameters],
            "description": self.description,
            "associated": list(self.associated),
            "os_affinity": list(self.os_affinity),
        }


@dataclass(frozen=True)
class NoReference:
    """The type alias points at nothing the document knows about."""


@dataclass(frozen=True)
class EnumerationReference:
    enumeration: Enumeration


@dataclass(frozen=True)
class StructureReference:
    structure: Structure


AssociatedReference = Union[NoReference, EnumerationReference, StructureReference]


def associated_reference_to_dict(reference: AssociatedReference) -> Dict[str, Any]:
    if isinstance(reference, NoReference):
        return {"none": None}
    if isinstance(reference, EnumerationReference):
        return {"enum": reference.enumeration.to_dict()}
    if isinstance(reference, StructureReference):
        return {"struct": reference.structure.to_dict()}
    raise TypeError(f"Unknown associated reference: {type(reference).__name__}")


@dataclass
class TypeAlias:
    name: str
    header: HeaderSummary
    summary: str
    type: str
    associated_ref: AssociatedReference
    description: str
    os_affinity: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "header": self.header.to_dict(),
            "summary": self.summary,
            "type": self.type,
            "associated_ref": associated_reference_to_dict(self.associated_ref),
            "description": self.description,
            "os_affinity": list(self.os_affinity),
        }


@dataclass(frozen=True)
class Document:
    """The aggregated, cross-referenced API document produced by one run."""

    build_date: str
    reference_url: str
    headers: Tuple[Header, ...]
    macros: Tuple[Macro, ...]
    enums: Tuple[Enumeration, ...]
    structs: Tuple[Structure, ...]
    typedefs: Tuple[TypeAlias, ...]
    functions: Tuple[Function, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "build_date": self.build_date,
            "reference_url": self.reference_url,
            "headers": [header.to_dict() for header in self.headers],
            "macros": [item.to_dict() for item in self.macros],
            "enums": [item.to_dict() for item in self.enums],
            "structs": [item.to_dict() for item in self.structs],
            "typedefs": [item.to_dict() for item in self.typedefs],
            "functions": [item.to_dict() for item in self.functions],
        }


__all__ = [
    "AssociatedReference",
    "Document",
    "EnumVariant",
    "Enumeration",
    "EnumerationReference",
    "Function",
    "FunctionMacro",
    "Header",
    "HeaderSummary",
    "Macro",
    "MacroKind",
    "MacroParameter",
    "NoReference",
    "ObjectMacro",
    "Parameter",
    "Return",
    "StructField",
    "Structure",
    "StructureReference",
    "TypeAlias",
    "associated_reference_to_dict",
    "macro_kind_to_dict",
]
