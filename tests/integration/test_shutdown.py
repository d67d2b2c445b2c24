"""Integration tests for graceful shutdown behavior."""

from __future__ import annotations

import json
import signal
import socket
import time
from typing import TYPE_CHECKING

import pytest

from tests.utils.http import connection_refused, read_http_response

pytestmark = pytest.mark.integration

if TYPE_CHECKING:
    from tests.conftest import ServerProcessInfo


def _logged_events(server_process: ServerProcessInfo) -> list[str]:
    lines = server_process["log_file"].read_text().splitlines()
    return [json.loads(line).get("event") for line in lines if line.strip()]


@pytest.mark.parametrize("signum", [signal.SIGTERM, signal.SIGINT])
def test_signal_stops_server_cleanly(
    server_process: ServerProcessInfo, signum: signal.Signals
) -> None:
    process = server_process["process"]

    process.send_signal(signum)

    assert process.wait(timeout=5) == 0
    assert connection_refused(server_process["host"], server_process["port"])
    events = _logged_events(server_process)
    assert "signal_received" in events
    assert events[-1] == "server_stopped"


def test_in_flight_request_completes_before_exit(
    server_process: ServerProcessInfo,
) -> None:
    host = server_process["host"]
    port = server_process["port"]
    process = server_process["process"]
    (server_process["directory"] / "test.txt").write_bytes(b"x" * 1000)

    with socket.create_connection((host, port), timeout=5) as sock:
        sock.sendall(b"GET /test.txt HTTP/1.1\r\n")
        time.sleep(0.2)
        process.send_signal(signal.SIGTERM)
        time.sleep(0.5)

        assert process.poll() is None
        assert connection_refused(host, port)

        sock.sendall(b"Host: localhost\r\n\r\n")
        response = read_http_response(sock)

    assert response.status_line == "HTTP/1.1 200 OK"
    assert response.body == b"x" * 1000
    assert process.wait(timeout=5) == 0
