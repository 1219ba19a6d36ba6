"""Low-level socket read/write utilities."""

from __future__ import annotations

import socket

from config import BUFFER_SIZE, MAX_BODY_BYTES, MAX_HEADER_BYTES
from response import HTTPResponse, prepare_response


class HTTPReadError(Exception):
    """Raised when a client request cannot be safely read from the socket."""

    status_code = 400


class MalformedRequestError(HTTPReadError):
    """Raised when socket bytes do not form a complete HTTP request."""


class HeaderTooLargeError(HTTPReadError):
    """Raised when HTTP headers exceed configured maximum size."""

    status_code = 431


class PayloadTooLargeError(HTTPReadError):
    """Raised when request body exceeds configured maximum size."""

    status_code = 413


class SocketTimeoutError(HTTPReadError):
    """Raised when a client stalls part way through sending a request."""

    status_code = 408


def _declared_body_length(header_bytes: bytes) -> int:
    for line in header_bytes.decode("iso-8859-1").split("\r\n")[1:]:
        name, colon, value = line.partition(":")
        if not colon or name.strip().lower() != "content-length":
            continue
        try:
            length = int(value.strip())
        except ValueError as exc:
            raise MalformedRequestError("Invalid Content-Length header") from exc
        if length < 0:
            raise MalformedRequestError("Negative Content-Length header")
        return length
    return 0


def extract_http_request_message(buffer: bytes) -> tuple[bytes, bytes] | None:
    """Split one complete request off the front of ``buffer``, if present."""
    header_end = buffer.find(b"\r\n\r\n")
    if header_end == -1:
        if len(buffer) > MAX_HEADER_BYTES:
            raise HeaderTooLargeError("Headers exceeded MAX_HEADER_BYTES")
        return None
    if header_end + 4 > MAX_HEADER_BYTES:
        raise HeaderTooLargeError("Headers exceeded MAX_HEADER_BYTES")

    body_length = _declared_body_length(buffer[:header_end])
    if body_length > MAX_BODY_BYTES:
        raise PayloadTooLargeError("Body exceeded MAX_BODY_BYTES")

    request_length = header_end + 4 + body_length
    if len(buffer) < request_length:
        return None
    return buffer[:request_length], buffer[request_length:]


def read_http_request_message(
    client_socket: socket.socket,
    initial_buffer: bytes = b"",
) -> tuple[bytes, bytes]:
    """Read one request and return (request_bytes, leftover_bytes).

    Returns empty bytes when the peer closes, or goes idle, between requests.
    """
    buffer = bytearray(initial_buffer)

    while True:
        extracted = extract_http_request_message(bytes(buffer))
        if extracted is not None:
            return extracted

        try:
            chunk = client_socket.recv(BUFFER_SIZE)
        except socket.timeout as exc:
            if not buffer:
                return b"", b""
            raise SocketTimeoutError("Timed out waiting for request bytes") from exc

        if not chunk:
            if not buffer:
                return b"", b""
            raise MalformedRequestError("Connection closed before request completed")

        buffer.extend(chunk)


def write_http_response_message(
    client_socket: socket.socket,
    response: HTTPResponse,
) -> int:
    """Write an HTTPResponse, sending file bodies straight from disk."""
    prepared = prepare_response(response)
    client_socket.sendall(prepared.head)
    bytes_sent = len(prepared.head)

    if prepared.file_path is None:
        if prepared.body:
            client_socket.sendall(prepared.body)
            bytes_sent += len(prepared.body)
        return bytes_sent

    with prepared.file_path.open("rb") as file_obj:
        bytes_sent += client_socket.sendfile(file_obj)
    return bytes_sent
