from __future__ import annotations

from lsprotocol import types

from molang_ls.schema.model import MemberEntry, StructMember

KEYWORD_DOCS = {
    "fn": "`fn('name', (params) -> { body })`\n\nDefines a named function that can be called with `f.name()`.",
    "if": "`if (condition) { then } else { otherwise }`\n\nConditional execution. Returns the value of the executed branch.",
    "else": "Part of an `if/else` statement.",
    "switch": "`switch(value, case1, { result1 }, case2, { result2 }, { default })`\n\nPattern matching on a value.",
    "while": "`while(condition, { body })`\n\nLoop that executes body while condition is truthy.",
    "struct": "`struct()`\n\nCreates a structured data object.",
    "import": "`import('namespace:path')`\n\nImports a MoLang script from `data/{namespace}/molang/{path}.molang`.",
    "return": "Returns a value from the current function or script.",
    "break": "Breaks out of the current loop.",
    "continue": "Skips to the next iteration of the current loop.",
    "for": "`for (init; condition; step) { body }`\n\nLoop with initialization, condition, and step.",
    "default": "Default case in a switch statement.",
}
KEYWORDS: tuple[str, ...] = (*KEYWORD_DOCS, "true", "false")


def signature(name: str, entry: MemberEntry, unknown: str = "") -> str:
    returns = entry.display_type or unknown
    if entry.params:
        return f"{name}({entry.param_signature()}) → {returns}"
    return f"{name} → {returns}"


def member_detail(entry: MemberEntry) -> str:
    detail = entry.display_type
    if isinstance(entry, StructMember) and entry.struct_type:
        detail += f" ({entry.struct_type})"
    return detail


def member_markdown(name: str, entry: MemberEntry, *, full: bool = False) -> str:
    """Markdown for a schema member.

    Completion items get the signature, description and source; hovers
    (``full=True``) also list the struct type and every parameter.
    """
    parts = [f"```molang\n{signature(name, entry, 'Unknown' if full else '')}\n```"]
    if entry.description:
        parts.append(entry.description)
    if entry.source:
        parts.append(f"*Source: {entry.source}*")
    if not full:
        return "\n\n".join(parts)

    if isinstance(entry, StructMember) and entry.struct_type:
        parts.append(f"*Struct type: `{entry.struct_type}`*")
    if entry.params:
        lines = ["**Parameters:**", ""]
        for param in entry.params:
            line = f"- `{param.name or '?'}`: {param.type or ''}"
            if param.optional:
                line += " *(optional)*"
            if param.description:
                line += f" - {param.description}"
            lines.append(line)
        parts.append("\n".join(lines))
    return "\n\n".join(parts)


def markdown(value: str) -> types.MarkupContent:
    return types.MarkupContent(kind=types.MarkupKind.Markdown, value=value)
