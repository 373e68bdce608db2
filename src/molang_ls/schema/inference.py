from __future__ import annotations

import logging
import re
from typing import Iterable, Optional

from .loader import SchemaService

log = logging.getLogger(__name__)

CONTEXT_ANNOTATION_RE = re.compile(r"//\s*@context\s+(\S+)")
ANNOTATION_SCAN_LINES = 10
DEFAULT_CONTEXT_FOLDERS: tuple[str, ...] = ("callbacks", "molang")
EVENT_PREFIX = "event:"


def infer_runtime_from_content(schema: SchemaService, text: str) -> Optional[str]:
    """Return the runtime named by a ``// @context <id>`` line near the top of ``text``."""
    known = set(schema.runtime_names())
    if not known:
        return None
    for line in text.split("\n")[:ANNOTATION_SCAN_LINES]:
        match = CONTEXT_ANNOTATION_RE.search(line.strip())
        if match and match.group(1) in known:
            return match.group(1)
    return None


def infer_runtime_from_path(
    schema: SchemaService,
    path: str,
    context_folders: Iterable[str] = DEFAULT_CONTEXT_FOLDERS,
) -> Optional[str]:
    runtime_names = schema.runtime_names()
    if not runtime_names:
        return None
    known = set(runtime_names)
    normalized = normalize_path(path)

    for folder in context_folders:
        marker = f"{folder.lower().strip('/')}/"
        idx = normalized.find(marker)
        if idx < 0:
            continue
        after = normalized[idx + len(marker) :]
        segment, sep, _ = after.partition("/")
        if not segment or not sep:
            continue
        candidate = EVENT_PREFIX + segment.upper()
        if candidate in known:
            return candidate

    # Declaration order decides between several matching runtimes.
    for name in runtime_names:
        needle = fuzzy_key(name)
        if needle and needle in normalized:
            log.debug("Runtime %s matched %s by substring", name, path)
            return name
    return None


def infer_runtime(
    schema: SchemaService,
    text: str,
    path: str | None = None,
    context_folders: Iterable[str] = DEFAULT_CONTEXT_FOLDERS,
) -> Optional[str]:
    runtime = infer_runtime_from_content(schema, text)
    if runtime is None and path:
        runtime = infer_runtime_from_path(schema, path, context_folders)
    return runtime


def normalize_path(path: str) -> str:
    return path.replace("\\", "/").lower()


def fuzzy_key(runtime_name: str) -> str:
    _, _, local = runtime_name.rpartition(":")
    return local.replace("_", "").lower()
