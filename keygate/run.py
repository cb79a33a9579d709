"""Command-line entry point for keygate.

Usage:
    keygate [--config PATH] [--host HOST] [--port PORT]
    python -m keygate.run ...

``--config`` is exported as KEYGATE_CONFIG so the application's lifespan
loads the same file the launcher validated. ``--host`` and ``--port`` win over
the config file and KEYGATE_PORT.
"""

from __future__ import annotations

import argparse
import os
from typing import Optional, Sequence

import uvicorn

from keygate import __version__
from keygate.config import load_config

# uvicorn answers 503 beyond this many concurrent connections
UVICORN_LIMIT_CONCURRENCY: int = 100

UVICORN_BACKLOG: int = 50

UVICORN_TIMEOUT_KEEP_ALIVE: int = 5


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="keygate", description="API key authentication gate"
    )
    parser.add_argument("--config", help="path to config.yaml (default: search order)")
    parser.add_argument("--host", help="bind address (default: server.host)")
    parser.add_argument("--port", type=int, help="bind port (default: server.port)")
    parser.add_argument("--version", action="version", version=f"keygate {__version__}")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Validate config, then serve ``keygate.main:app`` under uvicorn.

    Raises:
        SystemExit: From argparse on bad arguments, or from load_config() on
                    an invalid config file.
    """
    args = build_parser().parse_args(argv)
    if args.config:
        os.environ["KEYGATE_CONFIG"] = args.config

    # Fail here, before uvicorn starts, if the config is invalid
    config = load_config(args.config)

    uvicorn.run(
        "keygate.main:app",
        host=args.host or config.server.host,
        port=args.port or config.server.port,
        limit_concurrency=UVICORN_LIMIT_CONCURRENCY,
        backlog=UVICORN_BACKLOG,
        timeout_keep_alive=UVICORN_TIMEOUT_KEEP_ALIVE,
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
    )


if __name__ == "__main__":
    main()
