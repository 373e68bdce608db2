from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from .model import (
    STRUCT_TAG,
    CompositionDef,
    FunctionSetDef,
    MemberEntry,
    MemberMap,
    Param,
    RuntimeDef,
    SchemaDocument,
    StructDef,
    StructMember,
    ValueMember,
)

log = logging.getLogger(__name__)

SCHEMA_FILENAME = "molang-schema.json"
BUNDLED_SCHEMA_PATH = Path(__file__).resolve().parent.parent / "data" / SCHEMA_FILENAME


class SchemaLoadError(Exception):
    """Raised by ``parse_schema`` when the resource root is unusable."""


def parse_schema(data: Any) -> SchemaDocument:
    if not isinstance(data, dict):
        raise SchemaLoadError(f"schema root must be an object, got {type(data).__name__}")
    return SchemaDocument(
        structs={name: _parse_struct(raw) for name, raw in _objects(data.get("structs"))},
        function_sets={name: _parse_function_set(raw) for name, raw in _objects(data.get("function_sets"))},
        runtimes={name: _parse_runtime(raw) for name, raw in _objects(data.get("runtimes"))},
        compositions={name: _parse_composition(raw) for name, raw in _objects(data.get("structCompositions"))},
    )


def parse_member(raw: Dict[str, Any]) -> MemberEntry:
    description = _string(raw.get("description"))
    source = _string(raw.get("source"))
    returns = _string(raw.get("returns"))
    params = _parse_params(raw.get("params"))
    type_tag = _string(raw.get("type"))
    if type_tag == STRUCT_TAG:
        inline = raw.get("functions")
        return StructMember(
            description=description,
            source=source,
            returns=returns,
            params=params,
            struct_type=_string(raw.get("struct_type")) or None,
            members=_parse_members(inline) if isinstance(inline, dict) else None,
        )
    return ValueMember(
        description=description,
        source=source,
        returns=returns,
        params=params,
        type_tag=type_tag,
    )


def _parse_members(raw: Any) -> MemberMap:
    return {name: parse_member(entry) for name, entry in _objects(raw)}


def _parse_params(raw: Any) -> Tuple[Param, ...]:
    if not isinstance(raw, list):
        return ()
    params: list[Param] = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        params.append(
            Param(
                name=_string(item.get("name")),
                type=_string(item.get("type")),
                optional=item.get("optional") is True,
                description=_string(item.get("description")),
            )
        )
    return tuple(params)


def _parse_struct(raw: Dict[str, Any]) -> StructDef:
    return StructDef(members=_parse_members(raw.get("functions")), description=_string(raw.get("description")))


def _parse_function_set(raw: Dict[str, Any]) -> FunctionSetDef:
    return FunctionSetDef(members=_parse_members(raw.get("functions")), description=_string(raw.get("description")))


def _parse_runtime(raw: Dict[str, Any]) -> RuntimeDef:
    return RuntimeDef(
        query=_parse_members(raw.get("query")),
        description=_string(raw.get("description")),
        category=_string(raw.get("category")),
    )


def _parse_composition(raw: Dict[str, Any]) -> CompositionDef:
    registries = raw.get("registries")
    names = tuple(name for name in registries if isinstance(name, str)) if isinstance(registries, list) else ()
    return CompositionDef(
        registries=names,
        custom_functions=_parse_members(raw.get("custom_functions")),
        description=_string(raw.get("description")),
    )


def _objects(raw: Any) -> List[Tuple[str, Dict[str, Any]]]:
    """Return the object-valued entries of a mapping, dropping anything else."""
    if not isinstance(raw, dict):
        return []
    return [(str(key), value) for key, value in raw.items() if isinstance(value, dict)]


def _string(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


class SchemaService:
    """Owns the single schema snapshot for a session.

    ``load`` is the only mutating call. It parses at most once per instance; a
    failed load is final and leaves every accessor returning empty results.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._attempted = False
        self._document: SchemaDocument | None = None
        self._load_error: str | None = None

    @classmethod
    def from_document(cls, document: SchemaDocument) -> "SchemaService":
        service = cls()
        service._attempted = True
        service._document = document
        return service

    @property
    def document(self) -> SchemaDocument | None:
        return self._document

    @property
    def load_error(self) -> str | None:
        return self._load_error

    def is_loaded(self) -> bool:
        return self._document is not None

    def load(self, path: Path | str | None = None) -> bool:
        with self._lock:
            if self._attempted:
                return self._document is not None
            self._attempted = True
            schema_path = Path(path) if path is not None else BUNDLED_SCHEMA_PATH
            try:
                text = schema_path.read_text(encoding="utf-8")
            except FileNotFoundError:
                self._load_error = f"schema not found: {schema_path}"
                log.warning("MoLang schema not found at %s", schema_path)
                return False
            except (OSError, UnicodeDecodeError) as exc:
                self._load_error = f"failed to read schema {schema_path}: {exc}"
                log.error("Failed to read MoLang schema %s: %s", schema_path, exc)
                return False

            try:
                document = parse_schema(json.loads(text))
            except (ValueError, RecursionError, SchemaLoadError) as exc:
                self._load_error = f"failed to parse schema {schema_path}: {exc}"
                log.error("Failed to parse MoLang schema %s: %s", schema_path, exc)
                return False

            self._document = document
            log.info(
                "MoLang schema loaded: %d runtimes, %d structs",
                len(document.runtimes),
                len(document.structs),
            )
            return True

    # Runtime contexts

    def runtime_names(self) -> List[str]:
        """Runtime ids in declaration order."""
        if self._document is None:
            return []
        return list(self._document.runtimes)

    def runtime(self, context_id: str) -> RuntimeDef | None:
        if self._document is None:
            return None
        return self._document.runtimes.get(context_id)

    def runtime_query_variables(self, context_id: str) -> MemberMap:
        runtime = self.runtime(context_id)
        if runtime is None:
            return {}
        return dict(runtime.query)

    # Structs, function sets and compositions

    def struct_names(self) -> List[str]:
        if self._document is None:
            return []
        return list(self._document.structs)

    def struct(self, name: str) -> StructDef | None:
        if self._document is None:
            return None
        return self._document.structs.get(name)

    def function_set(self, name: str) -> FunctionSetDef | None:
        if self._document is None:
            return None
        return self._document.function_sets.get(name)

    def composition(self, struct_type: str) -> CompositionDef | None:
        if self._document is None:
            return None
        return self._document.compositions.get(struct_type)
