from __future__ import annotations

import json
import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .schema.inference import DEFAULT_CONTEXT_FOLDERS

log = logging.getLogger(__name__)

CONFIG_FILENAME = ".molangls.json"
DEFAULT_SEARCH_LIMIT = 50

_ENV_VAR_RE = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}|\$([A-Za-z_][A-Za-z0-9_]*)")


@dataclass
class MolangLSConfig:
    workspace_root: Path
    schema_path: Optional[Path] = None
    context_folders: Tuple[str, ...] = DEFAULT_CONTEXT_FOLDERS
    default_runtime: Optional[str] = None
    workspace_search_limit: int = DEFAULT_SEARCH_LIMIT
    warnings: List[str] = field(default_factory=list)

    @classmethod
    def default(cls, workspace_root: Path) -> "MolangLSConfig":
        return cls(workspace_root=workspace_root)


def load_config(workspace_root: Path) -> Tuple[MolangLSConfig, List[str]]:
    """Read ``.molangls.json`` from the workspace root.

    Problems are collected as warning strings and the affected keys keep their
    defaults; a missing file is not a problem.
    """
    config_path = workspace_root / CONFIG_FILENAME
    if not config_path.exists():
        return MolangLSConfig.default(workspace_root), []

    try:
        raw = json.loads(config_path.read_text())
    except (OSError, ValueError) as exc:
        warning = f"Failed to read {config_path}: {exc}"
        log.warning(warning)
        return MolangLSConfig.default(workspace_root), [warning]

    if not isinstance(raw, dict):
        warning = f"{config_path} must contain a JSON object"
        return MolangLSConfig.default(workspace_root), [warning]

    warnings: list[str] = []
    data = _substitute(raw, workspace_root, warnings)
    cfg = MolangLSConfig.default(workspace_root)

    schema_path = data.get("schemaPath")
    if isinstance(schema_path, str) and schema_path:
        path = Path(schema_path)
        cfg.schema_path = path if path.is_absolute() else workspace_root / path
    elif schema_path is not None:
        warnings.append("schemaPath must be a non-empty string")

    folders = data.get("contextFolders")
    if isinstance(folders, list):
        cfg.context_folders = tuple(_strings(folders))
    elif folders is not None:
        warnings.append("contextFolders must be a list of folder names")

    default_runtime = data.get("defaultRuntime")
    if isinstance(default_runtime, str) and default_runtime:
        cfg.default_runtime = default_runtime
    elif default_runtime is not None:
        warnings.append("defaultRuntime must be a runtime id string")

    limit = data.get("workspaceSearchLimit")
    if isinstance(limit, int) and not isinstance(limit, bool) and limit > 0:
        cfg.workspace_search_limit = limit
    elif limit is not None:
        warnings.append("workspaceSearchLimit must be a positive integer")

    cfg.warnings = warnings
    return cfg, warnings


def _strings(values: Iterable[Any]) -> List[str]:
    return [value for value in values if isinstance(value, str) and value]


def _substitute(value: Any, workspace_root: Path, warnings: List[str]) -> Any:
    if isinstance(value, str):
        return _expand(value, workspace_root, warnings)
    if isinstance(value, list):
        return [_substitute(item, workspace_root, warnings) for item in value]
    if isinstance(value, dict):
        return {key: _substitute(item, workspace_root, warnings) for key, item in value.items()}
    return value


def _expand(text: str, workspace_root: Path, warnings: List[str]) -> Optional[str]:
    missing: list[str] = []
    env: Dict[str, str] = dict(os.environ)
    env["workspaceRoot"] = str(workspace_root)

    def _replace(match: re.Match[str]) -> str:
        name = match.group(1) or match.group(2)
        if name in env:
            return env[name]
        missing.append(name)
        return ""

    expanded = _ENV_VAR_RE.sub(_replace, text)
    if missing:
        for name in missing:
            warnings.append(f"Environment variable {name} referenced in {CONFIG_FILENAME} is not set")
        return None
    return expanded
