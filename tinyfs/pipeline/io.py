"""HTTP Input/Output operations."""

import logging
import os
import socket
import urllib.parse
from typing import Iterable

from tinyfs.bootstrap.config import (
    HEADER_DELIMITER,
    MAX_REQUEST_BODY_BYTES,
    MAX_REQUEST_HEAD_BYTES,
)
from tinyfs.domain.correlation_id import CorrelationLoggerAdapter
from tinyfs.domain.http_types import HttpRequest, HttpResponse

IO_LOGGER = CorrelationLoggerAdapter(logging.getLogger("tinyfs.pipeline.io"), {})

RECV_SIZE = 4096


class MalformedRequest(ValueError):
    """Raised when the bytes on the socket do not form an HTTP/1.1 request."""


def parse_headers(lines: Iterable[str]) -> dict[str, str]:
    """Convert raw header lines into a lowercase-keyed dictionary."""
    parsed = {}
    for line in lines:
        name, separator, value = line.partition(":")
        if separator and name.strip():
            parsed[name.strip().lower()] = value.strip()
    return parsed


def parse_request_line(request_line: str) -> tuple[str, str]:
    """Parse the method and decoded path from the request line."""
    parts = request_line.split(" ")
    if len(parts) != 3 or not all(parts):
        raise MalformedRequest(f"Invalid request line: {request_line!r}")
    method, target, version = parts
    if not version.startswith("HTTP/1."):
        raise MalformedRequest(f"Unsupported protocol version: {version!r}")

    if target.startswith("/"):
        raw_path = target.partition("?")[0].partition("#")[0]
    else:
        # Absolute form: http://host/path
        raw_path = urllib.parse.urlsplit(target).path or "/"
    if not raw_path.startswith("/"):
        raise MalformedRequest(f"Invalid request target: {target!r}")
    return method, decode_target_path(raw_path)


def decode_target_path(raw_path: str) -> str:
    """Percent-decode a target path back to a filesystem name.

    ``raw_path`` holds the wire bytes as latin-1 text. The decoded bytes are
    turned into a name with ``os.fsdecode`` so they match what ``os.scandir``
    reports for the same file, undecodable bytes included.
    """
    return os.fsdecode(urllib.parse.unquote_to_bytes(raw_path.encode("iso-8859-1")))


def determine_content_length(headers: dict[str, str]) -> int:
    """Validate and return the declared Content-Length for the request."""
    header_value = headers.get("content-length")
    if header_value is None:
        if "transfer-encoding" in headers:
            raise MalformedRequest("Chunked request bodies are not supported")
        return 0
    try:
        content_length = int(header_value)
    except ValueError as exc:
        raise MalformedRequest("Invalid Content-Length") from exc
    if content_length < 0:
        raise MalformedRequest("Negative Content-Length")
    if content_length > MAX_REQUEST_BODY_BYTES:
        raise MalformedRequest("Request body too large")
    return content_length


def receive_request(client_socket: socket.socket) -> HttpRequest:
    """Read exactly one request, including any declared body, from the socket."""
    buffer = b""
    while HEADER_DELIMITER not in buffer:
        if len(buffer) > MAX_REQUEST_HEAD_BYTES:
            raise MalformedRequest("Request head too large")
        chunk = client_socket.recv(RECV_SIZE)
        if not chunk:
            raise MalformedRequest("Connection closed before request was complete")
        buffer += chunk

    header_block, body = buffer.split(HEADER_DELIMITER, 1)
    header_lines = header_block.decode("iso-8859-1").split("\r\n")
    method, path = parse_request_line(header_lines[0])
    headers = parse_headers(header_lines[1:])

    content_length = determine_content_length(headers)
    while len(body) < content_length:
        chunk = client_socket.recv(RECV_SIZE)
        if not chunk:
            raise MalformedRequest("Connection closed before body was complete")
        body += chunk

    if IO_LOGGER.logger.isEnabledFor(logging.DEBUG):
        IO_LOGGER.debug(
            "Parsed request",
            extra={"event": "request_parsed", "method": method, "route": path},
        )
    return HttpRequest(method, path, headers, body[:content_length])


def serialize_response(response: HttpResponse) -> bytes:
    header_lines = [response.status_line]
    header_lines.extend(f"{name}: {value}" for name, value in response.header_items())
    return "\r\n".join(header_lines).encode("latin-1") + HEADER_DELIMITER + response.body


def send_response(client_socket: socket.socket, response: HttpResponse) -> None:
    """Serialize and send the HTTP response over the socket."""
    client_socket.sendall(serialize_response(response))
    if IO_LOGGER.logger.isEnabledFor(logging.DEBUG):
        IO_LOGGER.debug(
            "Sent response",
            extra={
                "event": "response_sent",
                "status_code": response.status.value,
                "bytes_out": len(response.body),
            },
        )
