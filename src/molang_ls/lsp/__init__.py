"""LSP-facing features and request handlers."""

from . import chains, completions, definition, docs, hover, server

__all__ = [
    "chains",
    "completions",
    "definition",
    "docs",
    "hover",
    "server",
]
