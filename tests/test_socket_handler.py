"""Unit tests for request framing over a socket."""

import socket

import pytest

from config import MAX_BODY_BYTES, MAX_HEADER_BYTES
from response import HTTPResponse
from socket_handler import (
    HeaderTooLargeError,
    MalformedRequestError,
    PayloadTooLargeError,
    SocketTimeoutError,
    extract_http_request_message,
    read_http_request_message,
    write_http_response_message,
)


def test_extract_waits_for_complete_head() -> None:
    assert extract_http_request_message(b"GET / HTTP/1.1\r\nHost: x\r\n") is None


def test_extract_splits_pipelined_requests() -> None:
    first = b"GET /a HTTP/1.1\r\nHost: x\r\n\r\n"
    second = b"GET /b HTTP/1.1\r\nHost: x\r\n\r\n"

    assert extract_http_request_message(first + second) == (first, second)


def test_extract_waits_for_declared_body() -> None:
    partial = b"POST / HTTP/1.1\r\nHost: x\r\nContent-Length: 5\r\n\r\nab"

    assert extract_http_request_message(partial) is None
    assert extract_http_request_message(partial + b"cde") == (partial + b"cde", b"")


def test_extract_rejects_oversized_head() -> None:
    with pytest.raises(HeaderTooLargeError):
        extract_http_request_message(b"GET / HTTP/1.1\r\nX: " + b"a" * MAX_HEADER_BYTES)


def test_extract_rejects_oversized_body() -> None:
    head = f"POST / HTTP/1.1\r\nHost: x\r\nContent-Length: {MAX_BODY_BYTES + 1}\r\n\r\n"

    with pytest.raises(PayloadTooLargeError):
        extract_http_request_message(head.encode("ascii"))


def test_extract_rejects_bad_content_length() -> None:
    with pytest.raises(MalformedRequestError):
        extract_http_request_message(b"POST / HTTP/1.1\r\nContent-Length: nope\r\n\r\n")


def test_read_returns_empty_when_peer_closes_idle_connection() -> None:
    server_side, client_side = socket.socketpair()
    with server_side, client_side:
        client_side.close()

        assert read_http_request_message(server_side) == (b"", b"")


def test_read_times_out_quietly_when_idle() -> None:
    server_side, client_side = socket.socketpair()
    with server_side, client_side:
        server_side.settimeout(0.05)

        assert read_http_request_message(server_side) == (b"", b"")


def test_read_timeout_mid_request_raises() -> None:
    server_side, client_side = socket.socketpair()
    with server_side, client_side:
        server_side.settimeout(0.05)
        client_side.sendall(b"GET / HTTP/1.1\r\n")

        with pytest.raises(SocketTimeoutError):
            read_http_request_message(server_side)


def test_read_truncated_request_raises_malformed() -> None:
    server_side, client_side = socket.socketpair()
    with server_side, client_side:
        client_side.sendall(b"GET / HTTP/1.1\r\n")
        client_side.shutdown(socket.SHUT_WR)

        with pytest.raises(MalformedRequestError):
            read_http_request_message(server_side)


def test_write_sends_file_body(tmp_path) -> None:
    asset = tmp_path / "app.css"
    asset.write_bytes(b"h1 { color: teal; }")
    server_side, client_side = socket.socketpair()
    with server_side, client_side:
        sent = write_http_response_message(
            server_side, HTTPResponse(status_code=200, file_path=asset)
        )
        server_side.shutdown(socket.SHUT_WR)

        received = b""
        while chunk := client_side.recv(4096):
            received += chunk

    assert sent == len(received)
    assert received.endswith(b"\r\n\r\nh1 { color: teal; }")
