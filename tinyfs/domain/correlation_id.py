"""Per-connection log context: a correlation ID and the peer address."""

import contextvars
import logging
import uuid
from typing import Any, MutableMapping, Optional

LOGGER_PREFIX = "tinyfs."
UNSET = "-"

_correlation_id_var: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "correlation_id", default=None
)
_client_var: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "client", default=None
)


def format_client_address(client_address: tuple) -> str:
    """Render ``(host, port, ...)`` as ``host:port``."""
    return f"{client_address[0]}:{client_address[1]}"


def bind_connection(client_address: tuple) -> str:
    """Start the log context of one accepted connection.

    Returns the freshly generated correlation ID.
    """
    correlation_id = str(uuid.uuid4())
    _correlation_id_var.set(correlation_id)
    _client_var.set(format_client_address(client_address))
    return correlation_id


def release_connection() -> None:
    _correlation_id_var.set(None)
    _client_var.set(None)


def get_correlation_id() -> Optional[str]:
    return _correlation_id_var.get()


def get_client() -> Optional[str]:
    return _client_var.get()


class CorrelationLoggerAdapter(logging.LoggerAdapter):
    """Stamp records with the component name and the bound connection context.

    The component is the logger name with the ``tinyfs.`` prefix removed, so
    ``tinyfs.transport.worker`` logs as ``transport.worker``. Inside a bound
    connection every record also carries ``client`` unless the call sets it.
    """

    def process(
        self, msg: str, kwargs: MutableMapping[str, Any]
    ) -> tuple[str, MutableMapping[str, Any]]:
        extra = dict(kwargs.get("extra") or {})

        extra["correlation_id"] = get_correlation_id() or UNSET
        client = get_client()
        if client is not None:
            extra.setdefault("client", client)

        logger_name = self.logger.name
        if logger_name.startswith(LOGGER_PREFIX):
            extra["component"] = logger_name[len(LOGGER_PREFIX) :]
        else:
            extra["component"] = logger_name

        kwargs["extra"] = extra
        return msg, kwargs
