"""Todo renderer: static assets under /static/ plus a rendered /todo page."""

from __future__ import annotations

import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from config import STATIC_DIR, STATIC_PREFIX, TEMPLATES_DIR, TODO_TEMPLATE
from handlers.static_handlers import StaticFiles
from handlers.todo_handlers import TodoPage
from router import Router
from server import HTTPServer, build_arg_parser, serve
from todo_store import TodoList, default_todo_list


def build_router(
    todo_list: TodoList,
    static_dir: str | Path = STATIC_DIR,
    templates_dir: str | Path = TEMPLATES_DIR,
) -> Router:
    router = Router()
    router.mount(STATIC_PREFIX, StaticFiles(static_dir, strip_prefix=STATIC_PREFIX))
    router.add_route("GET", "/todo", TodoPage(todo_list, templates_dir, TODO_TEMPLATE))
    return router


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_arg_parser("Render the todo list and serve its static assets")
    parser.add_argument("--static-dir", default=STATIC_DIR)
    parser.add_argument("--templates-dir", default=TEMPLATES_DIR)
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO)
    todo_list = default_todo_list()
    server = HTTPServer(
        host=args.host,
        port=args.port,
        router=build_router(todo_list, args.static_dir, args.templates_dir),
        log_format=args.log_format,
    )
    return serve(server)


if __name__ == "__main__":
    sys.exit(main())
