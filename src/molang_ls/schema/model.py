from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple, Union

STRUCT_TAG = "Struct"


@dataclass(frozen=True)
class Param:
    name: Optional[str] = None
    type: Optional[str] = None
    optional: bool = False
    description: Optional[str] = None

    @property
    def label(self) -> str:
        text = self.name or "?"
        if self.type:
            text += f": {self.type}"
        if self.optional:
            text += "?"
        return text


@dataclass(frozen=True)
class _MemberBase:
    description: Optional[str] = None
    source: Optional[str] = None
    returns: Optional[str] = None
    params: Tuple[Param, ...] = ()

    @property
    def is_callable(self) -> bool:
        return bool(self.params)

    def param_signature(self) -> str:
        return ", ".join(param.label for param in self.params)


@dataclass(frozen=True)
class ValueMember(_MemberBase):
    """Terminal member (Number, String, Boolean, ...). Never has members of its own."""

    type_tag: Optional[str] = None

    @property
    def display_type(self) -> str:
        return self.returns or self.type_tag or ""


@dataclass(frozen=True)
class StructMember(_MemberBase):
    """Member that leads into a struct type, an inline member map, or both."""

    struct_type: Optional[str] = None
    members: Optional[Dict[str, "MemberEntry"]] = None

    type_tag = STRUCT_TAG

    @property
    def display_type(self) -> str:
        return self.returns or STRUCT_TAG

    @property
    def is_dead_end(self) -> bool:
        return not self.struct_type and self.members is None


MemberEntry = Union[ValueMember, StructMember]
MemberMap = Dict[str, MemberEntry]


@dataclass(frozen=True)
class StructDef:
    members: MemberMap = field(default_factory=dict)
    description: Optional[str] = None


@dataclass(frozen=True)
class FunctionSetDef:
    members: MemberMap = field(default_factory=dict)
    description: Optional[str] = None


@dataclass(frozen=True)
class RuntimeDef:
    query: MemberMap = field(default_factory=dict)
    description: Optional[str] = None
    category: Optional[str] = None


@dataclass(frozen=True)
class CompositionDef:
    registries: Tuple[str, ...] = ()
    custom_functions: MemberMap = field(default_factory=dict)
    description: Optional[str] = None


@dataclass(frozen=True)
class SchemaDocument:
    structs: Dict[str, StructDef] = field(default_factory=dict)
    function_sets: Dict[str, FunctionSetDef] = field(default_factory=dict)
    runtimes: Dict[str, RuntimeDef] = field(default_factory=dict)
    compositions: Dict[str, CompositionDef] = field(default_factory=dict)
