"""HTTP server core: listener, per-connection threads and request dispatch."""

from __future__ import annotations

import argparse
import json
import logging
import socket
import threading
import time

from config import (
    ACCEPT_TIMEOUT_SECS,
    BUFFER_SIZE,
    HOST,
    LINGER_TIMEOUT_SECS,
    LOG_FORMAT,
    MAX_KEEPALIVE_REQUESTS,
    PORT,
    SOCKET_TIMEOUT_SECS,
)
from request import HTTPRequest, HTTPRequestParseError
from response import HTTPResponse, head_only, redirect_response, text_response
from router import Router, clean_path
from socket_handler import HTTPReadError, read_http_request_message, write_http_response_message

logger = logging.getLogger(__name__)


class HTTPServer:
    """Listen on ``host:port`` and serve each accepted connection on its own thread.

    Only GET and HEAD reach route handlers. ``start`` blocks until ``stop`` is
    called and raises ``OSError`` when the listener cannot be bound.
    """

    def __init__(
        self,
        host: str = HOST,
        port: int = PORT,
        router: Router | None = None,
        *,
        keepalive_timeout_secs: float = SOCKET_TIMEOUT_SECS,
        log_format: str = LOG_FORMAT,
    ) -> None:
        self.host = host
        self.port = port
        self.router = router or Router()
        self.keepalive_timeout_secs = keepalive_timeout_secs
        self.log_format = log_format

        self._server_socket: socket.socket | None = None
        self._stop_event = threading.Event()
        self._connection_seq = 0

    def start(self) -> None:
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as server_socket:
            server_socket.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            server_socket.bind((self.host, self.port))
            server_socket.listen(128)
            server_socket.settimeout(ACCEPT_TIMEOUT_SECS)
            self._server_socket = server_socket
            self.port = server_socket.getsockname()[1]
            logger.info("Listening on http://%s:%s", self.host, self.port)

            while not self._stop_event.is_set():
                try:
                    client_socket, address = server_socket.accept()
                except socket.timeout:
                    continue
                except OSError:
                    break

                self._connection_seq += 1
                worker = threading.Thread(
                    target=self._handle_client,
                    args=(client_socket, address),
                    name=f"http-conn-{self._connection_seq}",
                    daemon=True,
                )
                worker.start()

    def stop(self) -> None:
        self._stop_event.set()
        if self._server_socket is not None:
            self._server_socket.close()
            self._server_socket = None

    def _handle_client(self, client_socket: socket.socket, address: tuple[str, int]) -> None:
        with client_socket:
            client_socket.settimeout(self.keepalive_timeout_secs)
            carry = b""
            request_count = 0
            while request_count < MAX_KEEPALIVE_REQUESTS:
                started_at = time.perf_counter()
                try:
                    raw_request, carry = read_http_request_message(client_socket, carry)
                except HTTPReadError as exc:
                    logger.debug("Rejecting unreadable request from %s: %s", address[0], exc)
                    self._reject(client_socket, address, exc.status_code, started_at, bytes_in=0)
                    return
                except OSError:
                    return

                if not raw_request:
                    return

                try:
                    request = HTTPRequest.from_bytes(raw_request)
                except HTTPRequestParseError as exc:
                    logger.debug("Rejecting malformed request from %s: %s", address[0], exc)
                    self._reject(
                        client_socket,
                        address,
                        exc.status_code,
                        started_at,
                        bytes_in=len(raw_request),
                    )
                    return

                request_count += 1
                response = self._dispatch(request)
                should_close = not request.keep_alive or request_count >= MAX_KEEPALIVE_REQUESTS
                response.headers.setdefault("Connection", "close" if should_close else "keep-alive")

                try:
                    bytes_sent = write_http_response_message(client_socket, response)
                except OSError as exc:
                    logger.debug("Client %s went away mid-response: %s", address[0], exc)
                    return

                self._record_and_log(
                    address=address,
                    method=request.method,
                    path=request.path,
                    status_code=response.status_code,
                    bytes_in=len(raw_request),
                    bytes_out=bytes_sent,
                    started_at=started_at,
                    connection_reused=request_count > 1,
                )
                if should_close:
                    return

    def _reject(
        self,
        client_socket: socket.socket,
        address: tuple[str, int],
        status_code: int,
        started_at: float,
        *,
        bytes_in: int,
    ) -> None:
        response = text_response(status_code)
        response.headers["Connection"] = "close"
        try:
            bytes_sent = write_http_response_message(client_socket, response)
        except OSError:
            return
        _linger_close(client_socket)
        self._record_and_log(
            address=address,
            method="-",
            path="-",
            status_code=status_code,
            bytes_in=bytes_in,
            bytes_out=bytes_sent,
            started_at=started_at,
            connection_reused=False,
        )

    def _dispatch(self, request: HTTPRequest) -> HTTPResponse:
        response = self._route(request)
        if request.method == "HEAD":
            return head_only(response)
        return response

    def _route(self, request: HTTPRequest) -> HTTPResponse:
        cleaned = clean_path(request.path)
        if cleaned != request.path:
            if request.query:
                cleaned += "?" + request.query
            return redirect_response(cleaned)

        lookup_method = "GET" if request.method == "HEAD" else request.method
        handler = self.router.resolve(lookup_method, request.path)
        if handler is None:
            allowed = self.router.allowed_methods(request.path)
            if not allowed:
                return text_response(404)
            if "GET" in allowed and "HEAD" not in allowed:
                allowed = (*allowed, "HEAD")
            return HTTPResponse(
                status_code=405,
                headers={"Allow": ", ".join(allowed)},
                body="Method Not Allowed",
            )

        try:
            return handler(request)
        except Exception:
            logger.exception("Unhandled error in route handler for %s", request.path)
            return text_response(500)

    def _record_and_log(
        self,
        *,
        address: tuple[str, int],
        method: str,
        path: str,
        status_code: int,
        bytes_in: int,
        bytes_out: int,
        started_at: float,
        connection_reused: bool,
    ) -> None:
        duration_ms = (time.perf_counter() - started_at) * 1000
        event = {
            "client": address[0],
            "method": method,
            "path": path,
            "status": status_code,
            "bytes_in": bytes_in,
            "bytes_out": bytes_out,
            "latency_ms": round(duration_ms, 3),
            "connection_reused": connection_reused,
        }
        if self.log_format == "json":
            logger.info(json.dumps(event, sort_keys=True))
            return

        logger.info(
            (
                "client=%s method=%s path=%s status=%s bytes_in=%s bytes_out=%s "
                "duration_ms=%.2f connection_reused=%s"
            ),
            event["client"],
            event["method"],
            event["path"],
            event["status"],
            event["bytes_in"],
            event["bytes_out"],
            duration_ms,
            event["connection_reused"],
        )


def _linger_close(client_socket: socket.socket) -> None:
    # close() with unread input sends RST and can drop the response.
    try:
        client_socket.shutdown(socket.SHUT_WR)
        client_socket.settimeout(LINGER_TIMEOUT_SECS)
        deadline = time.monotonic() + LINGER_TIMEOUT_SECS
        while time.monotonic() < deadline and client_socket.recv(BUFFER_SIZE):
            pass
    except OSError:
        pass


def build_arg_parser(description: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument("--host", default=HOST)
    parser.add_argument("--port", type=int, default=PORT)
    parser.add_argument("--log-format", choices=["plain", "json"], default=LOG_FORMAT)
    return parser


def serve(server: HTTPServer) -> int:
    """Run ``server`` until interrupted; return the process exit status."""
    try:
        server.start()
    except OSError as exc:
        logger.critical("failed to start : %s", exc)
        return 1
    except KeyboardInterrupt:
        server.stop()
    return 0
