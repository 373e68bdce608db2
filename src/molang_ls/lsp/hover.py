from __future__ import annotations

from typing import Optional

from lsprotocol import types

from molang_ls.schema.resolver import ChainResolver

from .chains import chain_at_offset, line_text, offset_at, split_chain, word_at
from .docs import KEYWORD_DOCS, markdown, member_markdown


def hover_for_position(
    resolver: ChainResolver,
    text: str,
    line: int,
    character: int,
    runtime: Optional[str] = None,
) -> Optional[types.Hover]:
    if not resolver.is_loaded():
        return None

    chain = chain_at_offset(text, offset_at(text, line, character))
    if chain is None:
        word = word_at(line_text(text, line), character)
        if word in KEYWORD_DOCS:
            return types.Hover(contents=markdown(KEYWORD_DOCS[word]))
        return None

    parsed = split_chain(chain)
    if parsed is None:
        return None
    prefix, parts = parsed

    if prefix == "math":
        entry = resolver.math_functions().get(parts[0])
        if entry is None:
            return None
        return types.Hover(contents=markdown(member_markdown(f"math.{parts[0]}", entry, full=True)))

    if prefix != "q":
        return None

    entry = resolver.resolve_function(runtime, parts)
    if entry is None:
        return None
    return types.Hover(contents=markdown(member_markdown("q." + ".".join(parts), entry, full=True)))
