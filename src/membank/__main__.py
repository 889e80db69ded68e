"""Entry point: python -m membank [serve]

- No args / "serve": MCP server over stdio (JSON-RPC 2.0, NDJSON)
"""

from __future__ import annotations

import asyncio
import logging
import sys

from membank.config import load_config


def _setup_logging(level: str) -> None:
    # stdout carries the protocol; logs go to stderr
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )


def _run_serve() -> None:
    config = load_config()
    _setup_logging(config.log_level)

    from membank.server import MembankServer

    server = MembankServer(config)
    try:
        asyncio.run(server.serve_stdio())
    except KeyboardInterrupt:
        pass


def main() -> None:
    cmd = sys.argv[1] if len(sys.argv) > 1 else "serve"

    if cmd == "serve":
        _run_serve()
    else:
        print("Usage: python -m membank [serve]", file=sys.stderr)
        print("  serve  — MCP server over stdio (default)", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
