"""Shared pytest fixtures for integration and unit tests."""

from __future__ import annotations

import subprocess
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Generator, TypedDict

import pytest

from tests.utils.http import reserve_port, wait_for_port

if TYPE_CHECKING:
    from _pytest.tmpdir import TempPathFactory

PROJECT_ROOT = Path(__file__).resolve().parent.parent
SERVER_ENTRYPOINT = PROJECT_ROOT / "main.py"


class ServerProcessInfo(TypedDict):
    """Metadata describing a running server fixture instance."""

    base_url: str
    host: str
    port: int
    directory: Path
    process: subprocess.Popen[str]
    log_file: Path


def _launch_server(
    host: str,
    port: int,
    directory: Path,
    log_file: Path,
    extra_args: list[str] | None = None,
) -> Generator[ServerProcessInfo, None, None]:
    args = [
        sys.executable,
        str(SERVER_ENTRYPOINT),
        "--storage",
        str(directory),
        "--host",
        host,
        "--port",
        str(port),
        "--poll-ms",
        "50",
        "--log-destination",
        str(log_file),
    ]
    if extra_args:
        args.extend(extra_args)

    with subprocess.Popen(
        args,
        cwd=PROJECT_ROOT,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
    ) as process:
        try:
            wait_for_port(host, port)
        except Exception:
            process.terminate()
            stdout, stderr = process.communicate(timeout=5)
            print(f"\nServer stdout:\n{stdout}")
            print(f"\nServer stderr:\n{stderr}")
            raise

        yield {
            "base_url": f"http://{host}:{port}",
            "host": host,
            "port": port,
            "directory": directory,
            "process": process,
            "log_file": log_file,
        }

        if process.poll() is None:
            process.terminate()
            try:
                process.wait(timeout=5)
            except subprocess.TimeoutExpired:
                process.kill()


@pytest.fixture(name="server_process")
def _server_process(
    tmp_path_factory: "TempPathFactory",
) -> Generator[ServerProcessInfo, None, None]:
    """Launch the server in a background process with a 1 MB file limit."""

    host = "127.0.0.1"
    port = reserve_port(host)
    directory = tmp_path_factory.mktemp("storage")
    log_file = tmp_path_factory.mktemp("logs") / "server.log"
    yield from _launch_server(
        host, port, directory, log_file, ["--max-file-mb", "1"]
    )


@pytest.fixture()
def base_url(server_process: ServerProcessInfo) -> str:
    """Expose the running server base URL to integration tests."""

    return server_process["base_url"]


@pytest.fixture()
def storage_root(tmp_path: Path) -> Path:
    """Provide an empty storage directory."""

    root = tmp_path / "storage"
    root.mkdir()
    return root
