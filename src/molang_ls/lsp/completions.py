from __future__ import annotations

from typing import List, Mapping, Optional

from lsprotocol import types

from molang_ls.schema.model import STRUCT_TAG, MemberEntry, StructMember
from molang_ls.schema.resolver import ChainResolver

from .chains import (
    CONTEXT_ANNOTATION_PREFIX_RE,
    SHORT_PREFIXES,
    chain_before_cursor,
    line_text,
    scan_fn_definitions,
    scan_prefix_usages,
)
from .docs import KEYWORDS, markdown, member_detail, member_markdown

_KIND_BY_TAG = {
    "Number": types.CompletionItemKind.Field,
    "String": types.CompletionItemKind.Variable,
    STRUCT_TAG: types.CompletionItemKind.Class,
    "Unit": types.CompletionItemKind.Method,
    "Void": types.CompletionItemKind.Method,
}


def completion_items_for_position(
    resolver: ChainResolver,
    text: str,
    line: int,
    character: int,
    runtime: Optional[str] = None,
) -> List[types.CompletionItem]:
    if not resolver.is_loaded():
        return []

    text_before = line_text(text, line)[:character]

    if CONTEXT_ANNOTATION_PREFIX_RE.search(text_before):
        return [
            types.CompletionItem(
                label=name,
                kind=types.CompletionItemKind.Constant,
                detail="runtime context",
                sort_text=f"0{name}",
            )
            for name in resolver.schema.runtime_names()
        ]

    chain = chain_before_cursor(text_before)
    if chain is None:
        return _bare_completions()

    prefix, segments = chain
    if prefix == "q":
        return _query_completions(resolver, segments, runtime)
    if prefix == "math":
        if segments:
            return []
        return _member_items(resolver.math_functions(), "0")
    if prefix == "t":
        return [
            types.CompletionItem(label=name, kind=types.CompletionItemKind.Variable, detail="Temp")
            for name in scan_prefix_usages(text, "t")
        ]
    if prefix == "v":
        return [
            types.CompletionItem(label=name, kind=types.CompletionItemKind.Field, detail="Variable")
            for name in scan_prefix_usages(text, "v")
        ]
    if prefix == "f":
        return [
            types.CompletionItem(
                label=name,
                kind=types.CompletionItemKind.Function,
                detail="fn()",
                insert_text=f"{name}($0)",
                insert_text_format=types.InsertTextFormat.Snippet,
            )
            for name in scan_fn_definitions(text)
        ]
    if prefix == "c":
        if not runtime:
            return []
        return [
            types.CompletionItem(label=name, kind=types.CompletionItemKind.Property, detail="Context")
            for name in resolver.schema.runtime_query_variables(runtime)
        ]
    return []


def _query_completions(resolver: ChainResolver, segments: List[str], runtime: Optional[str]) -> List[types.CompletionItem]:
    if segments:
        resolution = resolver.resolve_chain(runtime, segments)
        if resolution is None:
            return []
        return _member_items(resolution.members, "0")

    items: list[types.CompletionItem] = []
    for name, entry in resolver.query_variables(runtime).items():
        items.append(member_item(name, entry, "0" if isinstance(entry, StructMember) else "1"))
    items.extend(_member_items(resolver.general_functions(), "2"))
    return items


def _member_items(members: Mapping[str, MemberEntry], sort_prefix: str) -> List[types.CompletionItem]:
    return [member_item(name, entry, sort_prefix) for name, entry in members.items()]


def member_item(name: str, entry: MemberEntry, sort_prefix: str) -> types.CompletionItem:
    item = types.CompletionItem(
        label=name,
        kind=_KIND_BY_TAG.get(entry.type_tag or "", types.CompletionItemKind.Function),
        detail=member_detail(entry),
        documentation=markdown(member_markdown(name, entry)),
        sort_text=f"{sort_prefix}{name}",
    )
    if entry.params:
        placeholders = ", ".join(
            f"${{{idx}:{param.name or f'arg{idx}'}}}" for idx, param in enumerate(entry.params, start=1)
        )
        item.insert_text = f"{name}({placeholders})"
        item.insert_text_format = types.InsertTextFormat.Snippet
    return item


def _bare_completions() -> List[types.CompletionItem]:
    items = [
        types.CompletionItem(label=keyword, kind=types.CompletionItemKind.Keyword, sort_text=f"0{keyword}")
        for keyword in KEYWORDS
    ]
    for prefix in SHORT_PREFIXES:
        items.append(
            types.CompletionItem(
                label=prefix,
                kind=types.CompletionItemKind.Module,
                detail="prefix",
                insert_text=f"{prefix}.",
                sort_text=f"1{prefix}",
                command=types.Command(title="", command="editor.action.triggerSuggest"),
            )
        )
    return items
