from __future__ import annotations

from typing import Iterable, Mapping

from .loader import SchemaService
from .model import MemberEntry, MemberMap


def merge_ranked(sources: Iterable[Mapping[str, MemberEntry]]) -> MemberMap:
    """Merge member maps ranked from most to least specific.

    Each source only inserts names that no earlier source provided, so the
    first source to define a name wins.
    """
    merged: MemberMap = {}
    for source in sources:
        for name, entry in source.items():
            if name not in merged:
                merged[name] = entry
    return merged


def composed_sources(schema: SchemaService, struct_type: str) -> list[MemberMap]:
    """Member maps contributing to ``struct_type``, most specific first."""
    sources: list[MemberMap] = []
    struct = schema.struct(struct_type)
    if struct is not None:
        sources.append(struct.members)

    composition = schema.composition(struct_type)
    if composition is not None:
        for registry in composition.registries:
            function_set = schema.function_set(registry)
            if function_set is not None:
                sources.append(function_set.members)
        sources.append(composition.custom_functions)
    return sources


def all_functions_for_type(schema: SchemaService, struct_type: str | None) -> MemberMap:
    if not struct_type:
        return {}
    return merge_ranked(composed_sources(schema, struct_type))
