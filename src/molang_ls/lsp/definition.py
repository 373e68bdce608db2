from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterator, List, Optional

from lsprotocol import types
from pygls.uris import to_fs_path

from .chains import line_text, position_at

log = logging.getLogger(__name__)

FN_CALL_RE = re.compile(r"(?<![A-Za-z0-9_])(?:f|function)\.([A-Za-z_][A-Za-z0-9_]*)")
IMPORT_RE = re.compile(r"import\s*\(\s*'([^']+)'\s*\)")
MOLANG_GLOB = "*.molang"
SKIPPED_DIRS = frozenset({"node_modules", ".git"})


def definitions_for_position(
    text: str,
    uri: str,
    line: int,
    character: int,
    workspace_root: Optional[Path] = None,
    search_limit: int = 50,
) -> List[types.Location]:
    current = line_text(text, line)

    fn_name = _fn_call_at(current, character)
    if fn_name:
        locations = fn_definitions(text, uri, fn_name)
        if workspace_root is not None:
            current_path = _uri_path(uri)
            for path in iter_molang_files(workspace_root, search_limit):
                if current_path is not None and path == current_path:
                    continue
                try:
                    source = path.read_text(encoding="utf-8")
                except (OSError, UnicodeDecodeError) as exc:
                    log.debug("Skipping unreadable file %s: %s", path, exc)
                    continue
                locations.extend(fn_definitions(source, path.as_uri(), fn_name))
        if locations:
            return locations

    if workspace_root is not None:
        target = _import_target(current, character, workspace_root)
        if target is not None:
            origin = types.Position(line=0, character=0)
            return [types.Location(uri=target.as_uri(), range=types.Range(start=origin, end=origin))]
    return []


def fn_definitions(text: str, uri: str, name: str) -> List[types.Location]:
    """Locations of every ``fn('name'`` declaration in ``text``."""
    pattern = re.compile(r"fn\s*\(\s*'" + re.escape(name) + "'")
    locations: list[types.Location] = []
    for match in pattern.finditer(text):
        line, character = position_at(text, match.start())
        position = types.Position(line=line, character=character)
        locations.append(types.Location(uri=uri, range=types.Range(start=position, end=position)))
    return locations


def iter_molang_files(root: Path, limit: int) -> Iterator[Path]:
    found = 0
    for path in sorted(root.rglob(MOLANG_GLOB)):
        if found >= limit:
            return
        if SKIPPED_DIRS.intersection(path.relative_to(root).parts):
            continue
        found += 1
        yield path.resolve()


def _fn_call_at(line: str, character: int) -> Optional[str]:
    for match in FN_CALL_RE.finditer(line):
        if match.start() <= character <= match.end():
            return match.group(1)
    return None


def _import_target(line: str, character: int, workspace_root: Path) -> Optional[Path]:
    match = IMPORT_RE.search(line)
    if not match or not match.start() <= character <= match.end():
        return None
    namespace, sep, path = match.group(1).partition(":")
    if not sep:
        return None
    relative = Path("data") / namespace / "molang" / f"{path}.molang"
    direct = workspace_root / relative
    if direct.is_file():
        return direct.resolve()
    for candidate in sorted(workspace_root.rglob(f"{path.rsplit('/', 1)[-1]}.molang")):
        if candidate.as_posix().endswith(relative.as_posix()):
            return candidate.resolve()
    return None


def _uri_path(uri: str) -> Optional[Path]:
    if not uri.startswith("file://"):
        return None
    fs_path = to_fs_path(uri)
    return Path(fs_path).resolve() if fs_path else None
