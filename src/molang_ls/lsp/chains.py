from __future__ import annotations

import re
from typing import List, Optional, Tuple

PREFIX_ALIASES = {
    "query": "q",
    "variable": "v",
    "temp": "t",
    "function": "f",
    "context": "c",
}
SHORT_PREFIXES: tuple[str, ...] = ("q", "v", "t", "f", "c", "math")

_PREFIX_GROUP = r"(q|query|v|variable|t|temp|f|function|c|context|math)"
PREFIX_CHAIN_RE = re.compile(r"(?:^|[^A-Za-z0-9_])" + _PREFIX_GROUP + r"((?:\.[A-Za-z_][A-Za-z0-9_]*)*)\.$")
FULL_CHAIN_RE = re.compile(r"^" + _PREFIX_GROUP + r"((?:\.[A-Za-z_][A-Za-z0-9_]*)+)$")
CONTEXT_ANNOTATION_PREFIX_RE = re.compile(r"//\s*@context\s+(\S*)$")
FN_DEFINITION_RE = re.compile(r"fn\s*\(\s*'([^']+)'")

_CHAIN_CHARS = re.compile(r"[A-Za-z0-9_.]")
_WORD_CHARS = re.compile(r"[A-Za-z0-9_]")


def normalize_prefix(raw: str) -> str:
    return PREFIX_ALIASES.get(raw, raw)


def chain_before_cursor(text_before: str) -> Optional[Tuple[str, List[str]]]:
    """Match ``prefix(.ident)*.`` ending right at the cursor.

    Returns the short prefix and the segments typed after it, excluding the
    trailing dot.
    """
    match = PREFIX_CHAIN_RE.search(text_before)
    if not match:
        return None
    dotted = match.group(2)
    segments = dotted[1:].split(".") if dotted else []
    return normalize_prefix(match.group(1)), segments


def chain_at_offset(text: str, offset: int) -> Optional[str]:
    offset = max(0, min(offset, len(text)))
    start = offset
    while start > 0 and _CHAIN_CHARS.match(text[start - 1]):
        start -= 1
    end = offset
    while end < len(text) and _WORD_CHARS.match(text[end]):
        end += 1
    if start >= end:
        return None
    chain = text[start:end]
    if "." not in chain:
        return None
    return chain


def split_chain(chain: str) -> Optional[Tuple[str, List[str]]]:
    match = FULL_CHAIN_RE.match(chain)
    if not match:
        return None
    return normalize_prefix(match.group(1)), match.group(2)[1:].split(".")


def scan_prefix_usages(text: str, prefix: str) -> List[str]:
    """Names used after ``prefix.`` (or its long form) anywhere in ``text``."""
    forms = [prefix, *(long for long, short in PREFIX_ALIASES.items() if short == prefix)]
    pattern = re.compile(r"(?<![A-Za-z0-9_])(?:" + "|".join(forms) + r")\.([A-Za-z_][A-Za-z0-9_]*)")
    return list(dict.fromkeys(match.group(1) for match in pattern.finditer(text)))


def scan_fn_definitions(text: str) -> List[str]:
    return list(dict.fromkeys(match.group(1) for match in FN_DEFINITION_RE.finditer(text)))


def offset_at(text: str, line: int, character: int) -> int:
    lines = text.split("\n")
    if line >= len(lines):
        return len(text)
    offset = sum(len(previous) + 1 for previous in lines[:line])
    return offset + max(0, min(character, len(lines[line])))


def position_at(text: str, offset: int) -> Tuple[int, int]:
    before = text[:offset]
    line = before.count("\n")
    return line, offset - (before.rfind("\n") + 1)


def line_text(text: str, line: int) -> str:
    lines = text.split("\n")
    if 0 <= line < len(lines):
        return lines[line]
    return ""


def word_at(text: str, character: int) -> str:
    character = max(0, min(character, len(text)))
    start = character
    while start > 0 and _WORD_CHARS.match(text[start - 1]):
        start -= 1
    end = character
    while end < len(text) and _WORD_CHARS.match(text[end]):
        end += 1
    return text[start:end]
