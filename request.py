"""HTTP request model and parser."""

from dataclasses import dataclass, field
from urllib.parse import urlsplit

from config import MAX_BODY_BYTES, MAX_TARGET_LENGTH

SUPPORTED_VERSIONS = {"HTTP/1.1", "HTTP/1.0"}
KNOWN_METHODS = {
    "GET",
    "HEAD",
    "POST",
    "PUT",
    "DELETE",
    "OPTIONS",
    "PATCH",
    "TRACE",
    "CONNECT",
}


class HTTPRequestParseError(ValueError):
    """Request parse error carrying an HTTP status code."""

    def __init__(self, message: str, *, status_code: int = 400) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass(slots=True)
class HTTPRequest:
    method: str
    path: str
    http_version: str
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    query: str = ""
    keep_alive: bool = False

    @classmethod
    def from_bytes(cls, raw: bytes) -> "HTTPRequest":
        """Parse one complete request message (head and body)."""
        head, separator, body = raw.partition(b"\r\n\r\n")
        if not separator:
            raise HTTPRequestParseError("Missing CRLF CRLF request separator")

        lines = head.decode("iso-8859-1").split("\r\n")
        request_line = lines[0]
        if not request_line:
            raise HTTPRequestParseError("Missing request line")

        parts = request_line.split(" ")
        if len(parts) != 3 or not all(parts):
            raise HTTPRequestParseError("Invalid request line")
        method, target, http_version = parts

        method = method.upper()
        if method not in KNOWN_METHODS:
            raise HTTPRequestParseError("Method not implemented", status_code=501)
        if http_version not in SUPPORTED_VERSIONS:
            raise HTTPRequestParseError("Unsupported HTTP version", status_code=505)
        if len(target) > MAX_TARGET_LENGTH:
            raise HTTPRequestParseError("Request target too long", status_code=414)
        if not target.startswith("/"):
            raise HTTPRequestParseError("Request target must be an absolute path")

        headers = _parse_header_lines(lines[1:])
        if http_version == "HTTP/1.1" and "host" not in headers:
            raise HTTPRequestParseError("Host header required for HTTP/1.1")
        if "transfer-encoding" in headers:
            raise HTTPRequestParseError("Transfer-Encoding not supported", status_code=501)

        expected_length = _content_length(headers)
        if expected_length > MAX_BODY_BYTES:
            raise HTTPRequestParseError("Body exceeded MAX_BODY_BYTES", status_code=413)
        if len(body) != expected_length:
            raise HTTPRequestParseError("Body length does not match Content-Length")

        split_target = urlsplit(target)
        return cls(
            method=method,
            path=split_target.path or "/",
            http_version=http_version,
            headers=headers,
            body=body,
            query=split_target.query,
            keep_alive=_is_keep_alive(http_version, headers.get("connection", "")),
        )


def _parse_header_lines(lines: list[str]) -> dict[str, str]:
    headers: dict[str, str] = {}
    for line in lines:
        if not line:
            continue
        name, colon, value = line.partition(":")
        if not colon:
            raise HTTPRequestParseError("Malformed header line")
        header_name = name.strip().lower()
        if not header_name:
            raise HTTPRequestParseError("Header name cannot be empty")
        headers[header_name] = value.strip()
    return headers


def _content_length(headers: dict[str, str]) -> int:
    raw_value = headers.get("content-length")
    if raw_value is None:
        return 0
    try:
        length = int(raw_value)
    except ValueError as exc:
        raise HTTPRequestParseError("Invalid Content-Length") from exc
    if length < 0:
        raise HTTPRequestParseError("Negative Content-Length is invalid")
    return length


def _is_keep_alive(http_version: str, connection_header: str) -> bool:
    token = connection_header.lower()
    if http_version == "HTTP/1.1":
        return "close" not in token
    return "keep-alive" in token
