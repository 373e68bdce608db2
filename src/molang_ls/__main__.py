from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .config import CONFIG_FILENAME, load_config
from .lsp.server import create_server
from .schema.loader import SchemaService
from .schema.resolver import ChainResolver


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="MoLang schema-driven language server")
    parser.add_argument("--tcp", action="store_true", help="Serve over TCP instead of stdin/stdout")
    parser.add_argument("--host", default="127.0.0.1", help="Interface to bind with --tcp")
    parser.add_argument("--port", type=int, default=2087, help="Port to listen on with --tcp")
    parser.add_argument("--stdio", action="store_true", help="Serve over stdin/stdout (the default; accepted for editor clients)")
    parser.add_argument("--log-level", default="WARNING", help="Log level for server diagnostics (DEBUG, INFO, WARNING, ERROR)")
    parser.add_argument("--schema", metavar="PATH", help="Schema file to use instead of the configured or bundled one")
    parser.add_argument("--resolve", metavar="CHAIN", help="Resolve a dot chain (e.g. pokemon.species) and print it")
    parser.add_argument("--context", metavar="ID", help="Runtime context for --resolve (e.g. event:POKEMON_SENT_OUT)")
    args = parser.parse_args(argv)

    _configure_logging(args.log_level)

    if args.resolve:
        if args.tcp:
            parser.error("--resolve cannot be combined with --tcp")
        sys.exit(_run_resolve(args.resolve, args.context, args.schema))

    server = create_server()
    if args.tcp:
        server.start_tcp(args.host, args.port)
    else:
        server.start_io()


def _configure_logging(level: str) -> None:
    numeric = getattr(logging, level.upper(), logging.WARNING)
    if not isinstance(numeric, int):
        numeric = logging.WARNING
    logging.basicConfig(
        level=numeric,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _run_resolve(chain: str, context_id: str | None, schema_path: str | None) -> int:
    log = logging.getLogger(__name__)
    workspace_root = _discover_workspace_root(Path.cwd())
    config, warnings = load_config(workspace_root)
    for warning in warnings:
        log.warning(warning)

    schema = SchemaService()
    if not schema.load(Path(schema_path) if schema_path else config.schema_path):
        print(f"Schema not loaded: {schema.load_error}", file=sys.stderr)
        return 2

    resolver = ChainResolver(schema)
    segments = [segment for segment in chain.split(".") if segment]
    resolution = resolver.resolve_chain(context_id, segments)
    if resolution is None:
        print(f"{chain}: not resolved", file=sys.stderr)
        return 1

    entry = resolution.entry
    kind = entry.display_type if entry is not None else "struct"
    print(f"{chain}: {kind}")
    if entry is not None and entry.description:
        print(f"  {entry.description}")
    for name, member in resolution.members.items():
        print(f"  .{name}: {member.display_type}")
    return 0


def _discover_workspace_root(start: Path) -> Path:
    for folder in [start, *start.parents]:
        if (folder / CONFIG_FILENAME).exists():
            return folder
    return start


if __name__ == "__main__":
    main()
