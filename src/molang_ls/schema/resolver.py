from __future__ import annotations

import logging
from typing import NamedTuple, Optional, Sequence

from .compose import all_functions_for_type, merge_ranked
from .loader import SchemaService
from .model import MemberEntry, MemberMap, StructMember, ValueMember

log = logging.getLogger(__name__)

MATH_NAMESPACE = "math"
GENERAL_FUNCTION_SET = "generalFunctions"


class ChainResolution(NamedTuple):
    entry: Optional[MemberEntry]
    members: MemberMap


class ChainResolver:
    """Read-only queries over a loaded schema.

    Every method is a pure function of the schema snapshot and its arguments;
    misses come back as ``None`` or an empty map.
    """

    def __init__(self, schema: SchemaService):
        self._schema = schema

    @property
    def schema(self) -> SchemaService:
        return self._schema

    def is_loaded(self) -> bool:
        return self._schema.is_loaded()

    def all_functions_for_type(self, struct_type: str | None) -> MemberMap:
        return all_functions_for_type(self._schema, struct_type)

    def query_variables(self, context_id: str | None) -> MemberMap:
        """Root namespace for a runtime, or the union of every runtime when unknown."""
        if context_id:
            return self._schema.runtime_query_variables(context_id)
        merged: MemberMap = {}
        for name in self._schema.runtime_names():
            merged.update(self._schema.runtime_query_variables(name))
        return merged

    def math_functions(self) -> MemberMap:
        struct = self._schema.struct(MATH_NAMESPACE)
        return dict(struct.members) if struct is not None else {}

    def general_functions(self) -> MemberMap:
        function_set = self._schema.function_set(GENERAL_FUNCTION_SET)
        return dict(function_set.members) if function_set is not None else {}

    def resolve_chain(self, context_id: str | None, path: Sequence[str]) -> ChainResolution | None:
        if not path:
            return None

        current: MemberEntry | None
        root = path[0]
        query = self.query_variables(context_id)
        if root in query:
            current = query[root]
            struct_type = getattr(current, "struct_type", None) or root
        elif self._schema.struct(root) is not None:
            current = None
            struct_type = root
        else:
            log.debug("Chain root %r not found (context=%s)", root, context_id)
            return None

        if isinstance(current, ValueMember):
            if len(path) > 1:
                return None
            return ChainResolution(current, {})

        staged: MemberMap | None = None

        for index, segment in enumerate(path[1:], start=1):
            if staged is not None:
                members, staged = staged, None
            else:
                members = self.all_functions_for_type(struct_type)

            member = members.get(segment)
            if member is None:
                return None

            current = member
            if isinstance(member, ValueMember):
                if index < len(path) - 1:
                    return None
                return ChainResolution(member, {})

            if member.is_dead_end:
                return None
            struct_type = member.struct_type
            if member.members is not None:
                staged = self._inline_members(member)

        if staged is not None:
            available = staged
        elif isinstance(current, StructMember) and current.members is not None:
            available = self._inline_members(current)
        else:
            available = self.all_functions_for_type(struct_type)
        return ChainResolution(current, available)

    def resolve_function(self, context_id: str | None, path: Sequence[str]) -> MemberEntry | None:
        """Resolve the member a full chain names, for documentation lookups."""
        if not path:
            return None
        if len(path) == 1:
            if path[0] == MATH_NAMESPACE:
                return None
            return self.query_variables(context_id).get(path[0])

        resolution = self.resolve_chain(context_id, path[:-1])
        if resolution is None:
            return None
        return resolution.members.get(path[-1])

    def _inline_members(self, member: StructMember) -> MemberMap:
        # inline members win over whatever the referenced struct type composes
        return merge_ranked([member.members or {}, self.all_functions_for_type(member.struct_type)])
