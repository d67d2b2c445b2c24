"""TinyFS: a static file HTTP server with directory listings."""

import logging
import signal
import sys
from typing import Optional

from tinyfs.bootstrap.config import build_server_config, parse_cli_args
from tinyfs.bootstrap.logging_setup import configure_logging
from tinyfs.bootstrap.storage import StorageRootError, ensure_storage_root
from tinyfs.domain.correlation_id import CorrelationLoggerAdapter
from tinyfs.lifecycle.state import ServerLifecycle
from tinyfs.transport.accept_loop import run_server

SERVER_LOGGER = CorrelationLoggerAdapter(logging.getLogger("tinyfs.server"), {})


def install_signal_handlers(lifecycle: ServerLifecycle) -> None:
    """Flip the shutdown token on SIGINT and SIGTERM."""

    def shutdown_handler(signum: int, _frame) -> None:
        SERVER_LOGGER.info(
            "Received shutdown signal",
            extra={"event": "signal_received", "signal": signal.Signals(signum).name},
        )
        lifecycle.request_shutdown()

    signal.signal(signal.SIGTERM, shutdown_handler)
    signal.signal(signal.SIGINT, shutdown_handler)


def main(argv: Optional[list[str]] = None) -> int:
    """Start the server and block until it has shut down; return the exit status."""
    args = parse_cli_args(sys.argv[1:] if argv is None else argv)
    configure_logging(args.log_level, args.log_destination, args.log_format == "json")
    config = build_server_config(args)

    try:
        storage_root = ensure_storage_root(args.storage)
    except StorageRootError as error:
        SERVER_LOGGER.critical(
            "Cannot prepare storage directory",
            extra={"event": "storage_error", "directory": args.storage, "error": str(error)},
        )
        return 1

    lifecycle = ServerLifecycle()
    install_signal_handlers(lifecycle)

    SERVER_LOGGER.info(
        "Starting TinyFS server",
        extra={
            "event": "server_starting",
            "host": config.host,
            "port": config.port,
            "directory": storage_root.as_posix(),
            "poll_ms": config.shutdown_poll_ms,
            "max_file_size_bytes": config.max_file_size_bytes,
            "accept_threads": config.accept_threads,
        },
    )
    try:
        run_server(storage_root, config, lifecycle)
    except OSError as error:
        SERVER_LOGGER.critical(
            "Cannot bind listening socket",
            extra={
                "event": "bind_error",
                "host": config.host,
                "port": config.port,
                "error": str(error),
            },
        )
        return 1
    return 0


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
