"""Serve every request path from a single static directory."""

from __future__ import annotations

import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from config import STATIC_DIR
from handlers.static_handlers import StaticFiles
from router import Router
from server import HTTPServer, build_arg_parser, serve


def build_router(static_dir: str | Path = STATIC_DIR) -> Router:
    router = Router()
    router.mount("/", StaticFiles(static_dir))
    return router


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_arg_parser("Serve a directory of static files over HTTP")
    parser.add_argument("--static-dir", default=STATIC_DIR)
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO)
    server = HTTPServer(
        host=args.host,
        port=args.port,
        router=build_router(args.static_dir),
        log_format=args.log_format,
    )
    return serve(server)


if __name__ == "__main__":
    sys.exit(main())
