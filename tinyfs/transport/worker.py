"""Connection handling: one request in, one response out."""

import logging
import socket
import threading
import time

from tinyfs.domain.correlation_id import (
    CorrelationLoggerAdapter,
    bind_connection,
    release_connection,
)
from tinyfs.pipeline.io import MalformedRequest, receive_request, send_response
from tinyfs.pipeline.router import route_request
from tinyfs.transport.context import WorkerContext

WORKER_LOGGER = CorrelationLoggerAdapter(
    logging.getLogger("tinyfs.transport.worker"), {}
)


def _close_connection(client_socket: socket.socket) -> None:
    try:
        client_socket.shutdown(socket.SHUT_WR)
    except OSError:
        # Peer may already have gone away.
        pass
    client_socket.close()
    if WORKER_LOGGER.logger.isEnabledFor(logging.DEBUG):
        WORKER_LOGGER.debug("Socket closed", extra={"event": "socket_closed"})


def handle_client(
    client_socket: socket.socket,
    client_address: tuple[str, int],
    context: WorkerContext,
) -> None:
    """Read one request, route it, write one response, then half-close.

    Every record logged while the connection is served, by any module,
    carries its correlation ID and client address. Nothing raised while
    serving the connection escapes this function.
    """
    bind_connection(client_address)
    started = time.monotonic()

    try:
        request = receive_request(client_socket)
        response = route_request(
            request.method, request.target, context.storage_root, context.config
        )
        send_response(client_socket, response)
        WORKER_LOGGER.info(
            "Request complete",
            extra={
                "event": "request_complete",
                "method": request.method,
                "route": request.target,
                "status_code": response.status.value,
                "bytes_out": len(response.body),
                "duration_ms": round((time.monotonic() - started) * 1000, 3),
            },
        )
    except MalformedRequest as error:
        WORKER_LOGGER.warning(
            "Malformed request received",
            extra={"event": "malformed_request", "error": str(error)},
        )
    except (ConnectionError, TimeoutError, OSError, UnicodeError) as error:
        WORKER_LOGGER.error(
            "Error handling client connection",
            extra={
                "event": "connection_error",
                "error_type": type(error).__name__,
                "error": str(error),
            },
        )
    except Exception as error:  # pylint: disable=broad-except
        WORKER_LOGGER.error(
            "Unexpected error in worker",
            extra={
                "event": "worker_error",
                "error_type": type(error).__name__,
                "error": str(error),
            },
            exc_info=True,
        )
    finally:
        _close_connection(client_socket)
        if context.lifecycle is not None:
            context.lifecycle.cleanup_worker(threading.current_thread())
        release_connection()
