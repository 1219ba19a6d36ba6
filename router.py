"""Routing table for exact paths and mounted path prefixes."""

import posixpath
from collections.abc import Callable

from request import HTTPRequest
from response import HTTPResponse, redirect_response

Handler = Callable[[HTTPRequest], HTTPResponse]

SAFE_METHODS = ("GET", "HEAD")


def clean_path(path: str) -> str:
    """Collapse repeated slashes and resolve `.` and `..` segments, keeping a trailing slash."""
    cleaned = "/" + posixpath.normpath(path).lstrip("/")
    if path.endswith("/") and cleaned != "/":
        cleaned += "/"
    return cleaned


class Router:
    def __init__(self) -> None:
        self._routes: dict[str, dict[str, Handler]] = {}
        self._mounts: dict[str, Handler] = {}

    def add_route(self, method: str, path: str, handler: Handler) -> None:
        normalized_method = method.upper().strip()
        if not normalized_method:
            raise ValueError("method cannot be empty")
        if not path.startswith("/"):
            raise ValueError("path must start with '/'")
        self._routes.setdefault(path, {})[normalized_method] = handler

    def mount(self, prefix: str, handler: Handler) -> None:
        """Bind ``handler`` to every GET/HEAD path below ``prefix``."""
        if not prefix.startswith("/") or not prefix.endswith("/"):
            raise ValueError("mount prefix must start and end with '/'")
        self._mounts[prefix] = handler

    def resolve(self, method: str, path: str) -> Handler | None:
        normalized_method = method.upper().strip()
        if path in self._routes:
            return self._routes[path].get(normalized_method)

        prefix = self._match_mount(path)
        if prefix is not None and normalized_method in SAFE_METHODS:
            return self._mounts[prefix]

        if path + "/" in self._mounts and normalized_method in SAFE_METHODS:
            location = path + "/"
            return lambda _request: redirect_response(location)
        return None

    def allowed_methods(self, path: str) -> tuple[str, ...]:
        """Methods some handler accepts for ``path``; empty when nothing matches."""
        if path in self._routes:
            return tuple(sorted(self._routes[path]))
        if self._match_mount(path) is not None or path + "/" in self._mounts:
            return SAFE_METHODS
        return ()

    def _match_mount(self, path: str) -> str | None:
        matches = [prefix for prefix in self._mounts if path.startswith(prefix)]
        if not matches:
            return None
        return max(matches, key=len)
