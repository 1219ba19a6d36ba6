"""HTTP response model and serializer."""

import html
from dataclasses import dataclass, field
from email.utils import formatdate
from pathlib import Path

from config import SERVER_NAME

REASON_PHRASES: dict[int, str] = {
    200: "OK",
    301: "Moved Permanently",
    304: "Not Modified",
    400: "Bad Request",
    403: "Forbidden",
    404: "Not Found",
    405: "Method Not Allowed",
    408: "Request Timeout",
    413: "Payload Too Large",
    414: "URI Too Long",
    431: "Request Header Fields Too Large",
    500: "Internal Server Error",
    501: "Not Implemented",
    505: "HTTP Version Not Supported",
}

BODILESS_STATUSES = {204, 304}


@dataclass(slots=True)
class PreparedResponse:
    head: bytes
    body: bytes | None = None
    file_path: Path | None = None


@dataclass(slots=True)
class HTTPResponse:
    status_code: int
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes | str = b""
    file_path: Path | None = None
    content_length_override: int | None = None

    def __post_init__(self) -> None:
        if isinstance(self.body, str):
            self.body = self.body.encode("utf-8")
        if self.file_path is not None and self.body:
            raise ValueError("Response cannot set both body and file_path")

    @property
    def content_length(self) -> int:
        if self.content_length_override is not None:
            return self.content_length_override
        if self.file_path is not None:
            return self.file_path.stat().st_size
        return len(self.body)


def _is_bodiless(status_code: int) -> bool:
    return status_code < 200 or status_code in BODILESS_STATUSES


def prepare_response(response: HTTPResponse) -> PreparedResponse:
    reason = REASON_PHRASES.get(response.status_code, "Unknown")
    headers = dict(response.headers)
    headers.setdefault("Date", formatdate(timeval=None, localtime=False, usegmt=True))
    headers.setdefault("Server", SERVER_NAME)
    if _is_bodiless(response.status_code):
        headers.pop("Content-Length", None)
    else:
        headers.setdefault("Content-Type", "text/plain; charset=utf-8")
        headers["Content-Length"] = str(response.content_length)

    header_lines = [f"HTTP/1.1 {response.status_code} {reason}"]
    header_lines.extend(f"{name}: {value}" for name, value in headers.items())
    head = "\r\n".join(header_lines).encode("iso-8859-1") + b"\r\n\r\n"

    if _is_bodiless(response.status_code):
        return PreparedResponse(head=head, body=b"")
    if response.file_path is not None:
        return PreparedResponse(head=head, file_path=response.file_path)
    return PreparedResponse(head=head, body=response.body)


def text_response(status_code: int, text: str | None = None) -> HTTPResponse:
    """Plain-text response whose body defaults to the reason phrase."""
    if text is None:
        text = REASON_PHRASES.get(status_code, "Unknown")
    return HTTPResponse(status_code=status_code, body=text)


def redirect_response(location: str) -> HTTPResponse:
    return HTTPResponse(
        status_code=301,
        headers={
            "Location": location,
            "Content-Type": "text/html; charset=utf-8",
        },
        body=f'<a href="{html.escape(location)}">Moved Permanently</a>.\n',
    )


def head_only(response: HTTPResponse) -> HTTPResponse:
    """Drop the body of a GET response while keeping its Content-Length."""
    return HTTPResponse(
        status_code=response.status_code,
        headers=dict(response.headers),
        body=b"",
        content_length_override=response.content_length,
    )
