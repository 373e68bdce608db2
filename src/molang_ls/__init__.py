"""Schema-driven language intelligence for MoLang scripts."""

__version__ = "0.1.0"
