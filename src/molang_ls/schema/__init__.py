"""Schema document, member composition and chain resolution."""

from . import compose, inference, loader, model, resolver

__all__ = [
    "compose",
    "inference",
    "loader",
    "model",
    "resolver",
]
