"""Server configuration and CLI argument parsing."""

import argparse
import os
from dataclasses import dataclass
from typing import Callable, Optional

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 8888
DEFAULT_SHUTDOWN_POLL_MS = 100
DEFAULT_MAX_FILE_MB = 100
DEFAULT_STORAGE_DIR = "workspace/files"
BYTES_PER_MB = 1024 * 1024

HEADER_DELIMITER = b"\r\n\r\n"
MAX_REQUEST_HEAD_BYTES = 64 * 1024
MAX_REQUEST_BODY_BYTES = 1024 * 1024
ALLOWED_METHODS = frozenset({"GET"})


def default_accept_threads() -> int:
    return os.cpu_count() or 1


@dataclass(frozen=True)
class ServerConfig:
    """Immutable settings shared by every connection for the process lifetime."""

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    shutdown_poll_ms: int = DEFAULT_SHUTDOWN_POLL_MS
    max_file_size_bytes: int = DEFAULT_MAX_FILE_MB * BYTES_PER_MB
    accept_threads: int = 1

    @property
    def shutdown_poll_interval(self) -> float:
        """Shutdown poll interval in seconds."""
        return self.shutdown_poll_ms / 1000


def _positive_int(raw: str) -> int:
    try:
        value = int(raw)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {raw!r}") from exc
    if value <= 0:
        raise argparse.ArgumentTypeError(f"must be greater than zero: {value}")
    return value


def _port(raw: str) -> int:
    value = _positive_int(raw)
    if value > 65535:
        raise argparse.ArgumentTypeError(f"port out of range 1-65535: {value}")
    return value


def _storage_dir(raw: str) -> str:
    if not raw:
        raise argparse.ArgumentTypeError("storage directory cannot be empty")
    return os.path.abspath(raw)


def _env_value(
    parser: argparse.ArgumentParser,
    name: str,
    convert: Callable[[str], int],
    default: int,
) -> int:
    """Return a validated integer from the environment or ``default``."""
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return convert(raw)
    except argparse.ArgumentTypeError as error:
        parser.error(f"{name}: {error}")


def parse_cli_args(argv: Optional[list[str]]) -> argparse.Namespace:
    """Return parsed CLI arguments, seeding defaults from TINYFS_* variables."""
    parser = argparse.ArgumentParser(
        prog="tinyfs", description="TinyFS static file HTTP server"
    )
    parser.add_argument(
        "-s",
        "--storage",
        type=_storage_dir,
        default=DEFAULT_STORAGE_DIR,
        help=f"Storage directory to serve (default: {DEFAULT_STORAGE_DIR})",
    )
    parser.add_argument(
        "--host",
        default=os.getenv("TINYFS_ADDRESS", DEFAULT_HOST),
        help="Bind address",
    )
    parser.add_argument(
        "--port",
        type=_port,
        default=_env_value(parser, "TINYFS_PORT", _port, DEFAULT_PORT),
        help="Listening port",
    )
    parser.add_argument(
        "--poll-ms",
        type=_positive_int,
        default=_env_value(
            parser, "TINYFS_POLL_MS", _positive_int, DEFAULT_SHUTDOWN_POLL_MS
        ),
        help="Shutdown poll interval in milliseconds",
    )
    parser.add_argument(
        "--max-file-mb",
        type=_positive_int,
        default=_env_value(
            parser, "TINYFS_MAX_FILE_MB", _positive_int, DEFAULT_MAX_FILE_MB
        ),
        help="Largest file served, in megabytes",
    )
    parser.add_argument(
        "--accept-threads",
        type=_positive_int,
        default=_env_value(
            parser,
            "TINYFS_ACCEPT_THREADS",
            _positive_int,
            default_accept_threads(),
        ),
        help="Threads accepting connections (default: CPU count)",
    )
    parser.add_argument(
        "--log-level",
        default=os.getenv("TINYFS_LOG_LEVEL", "INFO").upper(),
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        type=str.upper,
    )
    parser.add_argument(
        "--log-destination",
        default=os.getenv("TINYFS_LOG_DESTINATION", "stdout"),
        help="stdout or a file path",
    )
    parser.add_argument(
        "--log-format",
        default=os.getenv("TINYFS_LOG_FORMAT", "json").lower(),
        choices=["json", "text"],
        type=str.lower,
    )
    return parser.parse_args(argv)


def build_server_config(args: argparse.Namespace) -> ServerConfig:
    """Translate parsed arguments into the immutable server configuration."""
    return ServerConfig(
        host=args.host,
        port=args.port,
        shutdown_poll_ms=args.poll_ms,
        max_file_size_bytes=args.max_file_mb * BYTES_PER_MB,
        accept_threads=args.accept_threads,
    )
