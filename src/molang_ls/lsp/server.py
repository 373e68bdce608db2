from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from lsprotocol import types
from pygls.lsp.server import LanguageServer

from molang_ls import __version__
from molang_ls.config import MolangLSConfig, load_config
from molang_ls.schema.inference import infer_runtime
from molang_ls.schema.loader import SchemaService
from molang_ls.schema.resolver import ChainResolver

from .completions import completion_items_for_position
from .definition import definitions_for_position
from .hover import hover_for_position

log = logging.getLogger(__name__)


class MolangLanguageServer(LanguageServer):
    """Language server owning one schema snapshot for the session."""

    def __init__(self, *args, **kwargs):
        super().__init__("molang-ls", __version__, *args, **kwargs)
        self._config = MolangLSConfig.default(Path.cwd())
        self._schema = SchemaService()
        self._resolver = ChainResolver(self._schema)

    @property
    def config(self) -> MolangLSConfig:
        return self._config

    @property
    def schema(self) -> SchemaService:
        return self._schema

    @property
    def resolver(self) -> ChainResolver:
        return self._resolver

    def load_workspace(self, root: Path) -> None:
        config, warnings = load_config(root)
        for warning in warnings:
            log.warning(warning)
        self._config = config
        if not self._schema.load(config.schema_path):
            log.warning("MoLang schema unavailable; completion and hover are disabled (%s)", self._schema.load_error)

    def runtime_for(self, source: str, path: Optional[str]) -> Optional[str]:
        runtime = infer_runtime(self._schema, source, path, self._config.context_folders)
        if runtime is None and self._config.default_runtime in self._schema.runtime_names():
            runtime = self._config.default_runtime
        return runtime


def on_initialized(server: MolangLanguageServer, params: types.InitializedParams) -> None:
    root = server.workspace.root_path
    server.load_workspace(Path(root) if root else Path.cwd())


def on_completion(server: MolangLanguageServer, params: types.CompletionParams) -> List[types.CompletionItem]:
    doc = server.workspace.get_text_document(params.text_document.uri)
    runtime = server.runtime_for(doc.source, doc.path)
    return completion_items_for_position(
        server.resolver,
        doc.source,
        params.position.line,
        params.position.character,
        runtime,
    )


def on_hover(server: MolangLanguageServer, params: types.HoverParams) -> Optional[types.Hover]:
    doc = server.workspace.get_text_document(params.text_document.uri)
    runtime = server.runtime_for(doc.source, doc.path)
    return hover_for_position(
        server.resolver,
        doc.source,
        params.position.line,
        params.position.character,
        runtime,
    )


def on_definition(server: MolangLanguageServer, params: types.DefinitionParams) -> List[types.Location]:
    doc = server.workspace.get_text_document(params.text_document.uri)
    return definitions_for_position(
        doc.source,
        doc.uri,
        params.position.line,
        params.position.character,
        server.config.workspace_root,
        server.config.workspace_search_limit,
    )


def create_server() -> MolangLanguageServer:
    server = MolangLanguageServer()
    server.feature(types.INITIALIZED)(on_initialized)
    server.feature(
        types.TEXT_DOCUMENT_COMPLETION,
        types.CompletionOptions(trigger_characters=["."]),
    )(on_completion)
    server.feature(types.TEXT_DOCUMENT_HOVER)(on_hover)
    server.feature(types.TEXT_DOCUMENT_DEFINITION)(on_definition)
    return server
