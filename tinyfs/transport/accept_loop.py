"""Connection acceptance loop and shutdown coordination."""

import logging
import socket
import threading
import time
from pathlib import Path

from tinyfs.bootstrap.config import ServerConfig
from tinyfs.bootstrap.socket_factory import create_server_socket
from tinyfs.domain.correlation_id import (
    CorrelationLoggerAdapter,
    format_client_address,
)
from tinyfs.lifecycle.state import ServerLifecycle
from tinyfs.transport.context import WorkerContext
from tinyfs.transport.worker import handle_client

ACCEPT_LOGGER = CorrelationLoggerAdapter(
    logging.getLogger("tinyfs.transport.accept"), {}
)


def _dispatch_client(
    client_socket: socket.socket,
    client_address: tuple[str, int],
    context: WorkerContext,
) -> None:
    """Start a dedicated thread running the connection handler."""
    lifecycle = context.lifecycle
    thread = threading.Thread(
        target=handle_client,
        args=(client_socket, client_address, context),
        name=f"tinyfs-conn-{format_client_address(client_address)}",
        daemon=False,
    )
    if lifecycle is not None:
        lifecycle.register_worker(thread)
    try:
        thread.start()
    except RuntimeError:
        if lifecycle is not None:
            lifecycle.cleanup_worker(thread)
        client_socket.close()
        raise


def accept_connections(server_socket: socket.socket, context: WorkerContext) -> None:
    """Accept and dispatch connections until shutdown is requested.

    The listening socket's timeout bounds how long a blocked ``accept`` waits
    before the shutdown flag is re-checked.
    """
    lifecycle = context.lifecycle
    while lifecycle is None or not lifecycle.should_stop():
        try:
            client_socket, client_address = server_socket.accept()
        except socket.timeout:
            continue
        except OSError as error:
            if lifecycle is not None and lifecycle.should_stop():
                break
            ACCEPT_LOGGER.error(
                "Socket accept failed",
                extra={
                    "event": "accept_error",
                    "error_type": type(error).__name__,
                    "error": str(error),
                },
            )
            continue

        client_addr_str = format_client_address(client_address)
        if lifecycle is not None and lifecycle.should_stop():
            ACCEPT_LOGGER.debug(
                "Connection refused during shutdown",
                extra={"event": "client_rejected", "client": client_addr_str},
            )
            client_socket.close()
            break

        if ACCEPT_LOGGER.logger.isEnabledFor(logging.DEBUG):
            ACCEPT_LOGGER.debug(
                "Client connection accepted",
                extra={"event": "client_accepted", "client": client_addr_str},
            )
        try:
            _dispatch_client(client_socket, client_address, context)
        except RuntimeError as error:
            ACCEPT_LOGGER.error(
                "Failed to start connection thread",
                extra={
                    "event": "dispatch_error",
                    "client": client_addr_str,
                    "error": str(error),
                },
            )


def serve(
    server_socket: socket.socket,
    storage_root: Path,
    config: ServerConfig,
    lifecycle: ServerLifecycle,
) -> None:
    """Run the acceptors until shutdown, then stop and join everything.

    The calling thread is the wait loop: it polls the shutdown token every
    ``config.shutdown_poll_interval`` seconds. Once the token flips, the
    acceptors finish their current wait and the listening socket is closed.
    In-flight connections then run to completion before the state becomes
    Stopped.
    """
    context = WorkerContext(storage_root=storage_root, config=config, lifecycle=lifecycle)
    acceptors = [
        threading.Thread(
            target=accept_connections,
            args=(server_socket, context),
            name=f"tinyfs-acceptor-{index}",
            daemon=True,
        )
        for index in range(max(1, config.accept_threads))
    ]
    for acceptor in acceptors:
        acceptor.start()

    try:
        while not lifecycle.should_stop():
            time.sleep(config.shutdown_poll_interval)
    finally:
        lifecycle.request_shutdown()
        lifecycle.begin_shutdown()
        for acceptor in acceptors:
            acceptor.join()
        server_socket.close()
        ACCEPT_LOGGER.info(
            "Waiting for active connections to complete",
            extra={
                "event": "shutdown_waiting",
                "active_workers": lifecycle.active_worker_count(),
            },
        )
        lifecycle.wait_for_workers()
        lifecycle.mark_stopped()


def run_server(
    storage_root: Path, config: ServerConfig, lifecycle: ServerLifecycle
) -> None:
    """Bind the listening socket and serve until shutdown.

    Raises ``OSError`` when the socket cannot be bound.
    """
    server_socket = create_server_socket(config)
    host, port = server_socket.getsockname()[:2]
    ACCEPT_LOGGER.info(
        "Server listening for connections",
        extra={
            "event": "server_listening",
            "host": host,
            "port": port,
            "directory": storage_root.as_posix(),
            "accept_threads": config.accept_threads,
        },
    )
    serve(server_socket, storage_root, config, lifecycle)
