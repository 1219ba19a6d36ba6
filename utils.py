"""Utility helpers shared across server modules."""

import mimetypes
from pathlib import Path
from urllib.parse import unquote

TEXT_TYPES_WITHOUT_TEXT_PREFIX = {"application/javascript", "application/json", "image/svg+xml"}


def get_content_type(file_path: Path) -> str:
    content_type, _encoding = mimetypes.guess_type(file_path.name)
    if content_type is None:
        return "application/octet-stream"
    if content_type.startswith("text/") or content_type in TEXT_TYPES_WITHOUT_TEXT_PREFIX:
        return f"{content_type}; charset=utf-8"
    return content_type


def resolve_static_file(relative_path: str, static_root: Path) -> Path | None:
    """Resolve a URL-relative path under ``static_root``.

    Returns None when the decoded path escapes the root.
    """
    decoded_relative_path = unquote(relative_path).lstrip("/")
    if "\x00" in decoded_relative_path:
        return None
    root = static_root.resolve()
    candidate = (root / decoded_relative_path).resolve()
    try:
        candidate.relative_to(root)
    except ValueError:
        return None
    return candidate
