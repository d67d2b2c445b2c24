"""Shared HTTP type definitions to avoid circular imports."""

from dataclasses import dataclass, field
from http import HTTPStatus

SERVER_NAME = "TinyFS"


@dataclass(frozen=True)
class HttpRequest:
    """A parsed HTTP request; ``target`` is the decoded path, query removed."""

    method: str
    target: str
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""


@dataclass(frozen=True)
class HttpResponse:
    """A complete response, built once per request and written in full."""

    status: HTTPStatus
    content_type: str
    body: bytes
    extra_headers: dict[str, str] = field(default_factory=dict)

    @property
    def status_line(self) -> str:
        return f"HTTP/1.1 {self.status.value} {self.status.phrase}"

    def header_items(self) -> list[tuple[str, str]]:
        """Return the full header list in wire order."""
        headers = [
            ("Server", SERVER_NAME),
            ("Content-Type", self.content_type),
            ("Content-Length", str(len(self.body))),
        ]
        headers.extend(self.extra_headers.items())
        headers.append(("Connection", "close"))
        return headers
