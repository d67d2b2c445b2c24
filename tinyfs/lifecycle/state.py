"""Server lifecycle state management."""

import enum
import logging
import threading
import time
from typing import Optional

from tinyfs.domain.correlation_id import CorrelationLoggerAdapter

LIFECYCLE_LOGGER = CorrelationLoggerAdapter(logging.getLogger("tinyfs.lifecycle"), {})


class ServerState(enum.Enum):
    RUNNING = "running"
    SHUTTING_DOWN = "shutting_down"
    STOPPED = "stopped"


class ShutdownToken:
    """Write-once shutdown flag shared by the signal handler and the loops.

    Set from signal handlers, so it is a plain attribute and takes no locks.
    """

    def __init__(self) -> None:
        self._requested = False

    def request(self) -> None:
        self._requested = True

    def is_requested(self) -> bool:
        return self._requested


class ServerLifecycle:
    """Tracks the Running/ShuttingDown/Stopped state and connection threads."""

    def __init__(self, token: Optional[ShutdownToken] = None) -> None:
        self.token = token or ShutdownToken()
        self._lock = threading.Lock()
        self._state = ServerState.RUNNING
        self._workers: set[threading.Thread] = set()

    @property
    def state(self) -> ServerState:
        with self._lock:
            return self._state

    def should_stop(self) -> bool:
        """Check if the server should stop accepting new connections."""
        return self.token.is_requested()

    def request_shutdown(self) -> None:
        self.token.request()

    def begin_shutdown(self) -> None:
        """Move from Running to ShuttingDown."""
        with self._lock:
            if self._state is not ServerState.RUNNING:
                return
            self._state = ServerState.SHUTTING_DOWN
        LIFECYCLE_LOGGER.info(
            "Beginning graceful shutdown",
            extra={"event": "shutdown_started", "state": ServerState.SHUTTING_DOWN.value},
        )

    def mark_stopped(self) -> None:
        with self._lock:
            self._state = ServerState.STOPPED
        LIFECYCLE_LOGGER.info(
            "Server stopped",
            extra={"event": "server_stopped", "state": ServerState.STOPPED.value},
        )

    def register_worker(self, thread: threading.Thread) -> None:
        with self._lock:
            self._workers.add(thread)

    def cleanup_worker(self, thread: threading.Thread) -> None:
        with self._lock:
            self._workers.discard(thread)

    def active_worker_count(self) -> int:
        """Return the number of currently tracked connection threads."""
        with self._lock:
            return len(self._workers)

    def wait_for_workers(self, timeout: Optional[float] = None) -> bool:
        """Join tracked connection threads; ``None`` waits for all of them."""
        deadline = None if timeout is None else time.monotonic() + timeout
        while True:
            with self._lock:
                self._workers = {w for w in self._workers if w.is_alive()}
                active_workers = list(self._workers)
            if not active_workers:
                return True
            if deadline is None:
                join_timeout = 0.1
            else:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    LIFECYCLE_LOGGER.warning(
                        "Shutdown timeout exceeded",
                        extra={
                            "event": "shutdown_timeout",
                            "active_workers": len(active_workers),
                        },
                    )
                    return False
                join_timeout = min(0.1, remaining)
            for worker in active_workers:
                worker.join(timeout=join_timeout)
