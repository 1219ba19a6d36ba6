"""Static file handler serving a directory tree."""

from __future__ import annotations

import html
import logging
from email.utils import formatdate, parsedate_to_datetime
from os import stat_result
from pathlib import Path
from urllib.parse import quote

from request import HTTPRequest
from response import HTTPResponse, redirect_response, text_response
from utils import get_content_type, resolve_static_file

logger = logging.getLogger(__name__)

INDEX_PAGE = "index.html"


class StaticFiles:
    """Serve files below ``root`` for request paths, optionally after stripping a prefix.

    Directories answer with their ``index.html`` when present, otherwise with
    a listing of their entries. Paths escaping the root answer 403.
    """

    def __init__(self, root: str | Path, strip_prefix: str = "") -> None:
        self.root = Path(root)
        self.strip_prefix = strip_prefix

    def __call__(self, request: HTTPRequest) -> HTTPResponse:
        if not request.path.startswith(self.strip_prefix):
            return text_response(404)
        relative_path = request.path[len(self.strip_prefix) :]

        if request.path.endswith("/" + INDEX_PAGE):
            return redirect_response(request.path[: -len(INDEX_PAGE)])

        target = resolve_static_file(relative_path, self.root)
        if target is None:
            logger.warning("Rejected path outside static root: %s", request.path)
            return text_response(403)

        if target.is_dir():
            if not request.path.endswith("/"):
                return redirect_response(request.path + "/")
            index_file = target / INDEX_PAGE
            if index_file.is_file():
                return self._serve_file(request, index_file)
            return self._list_directory(target)

        if not target.is_file():
            return text_response(404)
        if request.path.endswith("/"):
            return redirect_response(request.path.rstrip("/"))
        return self._serve_file(request, target)

    def _serve_file(self, request: HTTPRequest, file_path: Path) -> HTTPResponse:
        # The head goes out before the body is opened, so check readability here.
        try:
            with file_path.open("rb"):
                file_stat = file_path.stat()
        except PermissionError:
            logger.warning("Static file is not readable: %s", file_path)
            return text_response(403)
        except FileNotFoundError:
            return text_response(404)

        validators = {
            "ETag": _etag(file_stat),
            "Last-Modified": formatdate(file_stat.st_mtime, usegmt=True),
        }
        if _not_modified(request, file_stat, validators["ETag"]):
            return HTTPResponse(status_code=304, headers=validators)

        return HTTPResponse(
            status_code=200,
            headers={"Content-Type": get_content_type(file_path), **validators},
            file_path=file_path,
        )

    def _list_directory(self, directory: Path) -> HTTPResponse:
        lines = ["<pre>"]
        for entry in sorted(directory.iterdir(), key=lambda item: item.name):
            name = entry.name + "/" if entry.is_dir() else entry.name
            lines.append(f'<a href="{quote(name)}">{html.escape(name)}</a>')
        lines.append("</pre>")
        return HTTPResponse(
            status_code=200,
            headers={"Content-Type": "text/html; charset=utf-8"},
            body="\n".join(lines) + "\n",
        )


def _etag(file_stat: stat_result) -> str:
    return f'W/"{file_stat.st_mtime_ns:x}-{file_stat.st_size:x}"'


def _not_modified(request: HTTPRequest, file_stat: stat_result, etag: str) -> bool:
    if_none_match = request.headers.get("if-none-match")
    if if_none_match is not None:
        tokens = {token.strip() for token in if_none_match.split(",")}
        return "*" in tokens or etag in tokens

    if_modified_since = request.headers.get("if-modified-since")
    if if_modified_since is None:
        return False
    try:
        since_ts = parsedate_to_datetime(if_modified_since).timestamp()
    except (TypeError, ValueError, OverflowError):
        return False
    return int(file_stat.st_mtime) <= int(since_ts)
