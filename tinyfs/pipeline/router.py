"""Request routing logic."""

import errno
import logging
import stat
from pathlib import Path
from typing import Union

from tinyfs.bootstrap.config import ALLOWED_METHODS, ServerConfig
from tinyfs.content.listing import render_directory_listing
from tinyfs.content.mime import resolve_mime_type
from tinyfs.content.reader import read_bounded
from tinyfs.domain.correlation_id import CorrelationLoggerAdapter
from tinyfs.domain.http_types import HttpResponse
from tinyfs.domain.response_builders import (
    HTML_CONTENT_TYPE,
    forbidden_response,
    html_response,
    internal_error_response,
    method_not_allowed_response,
    not_found_response,
    ok_response,
)
from tinyfs.domain.sandbox import ForbiddenPath, resolve_storage_path

ROUTER_LOGGER = CorrelationLoggerAdapter(
    logging.getLogger("tinyfs.pipeline.router"), {}
)

INDEX_DOCUMENT = "index.html"


def _directory_response(
    resolved_path: Path, target: str, config: ServerConfig
) -> HttpResponse:
    index_path = resolved_path / INDEX_DOCUMENT
    if index_path.is_file():
        content = read_bounded(index_path, config.max_file_size_bytes)
        if content:
            if ROUTER_LOGGER.logger.isEnabledFor(logging.DEBUG):
                ROUTER_LOGGER.debug(
                    "Serving index document",
                    extra={"event": "index_served", "path": index_path.as_posix()},
                )
            return ok_response(content, HTML_CONTENT_TYPE)

    if ROUTER_LOGGER.logger.isEnabledFor(logging.DEBUG):
        ROUTER_LOGGER.debug(
            "Serving directory listing",
            extra={"event": "listing_served", "path": resolved_path.as_posix()},
        )
    return html_response(render_directory_listing(resolved_path, target))


def _file_response(resolved_path: Path, config: ServerConfig) -> HttpResponse:
    content = read_bounded(resolved_path, config.max_file_size_bytes)
    if not content:
        ROUTER_LOGGER.error(
            "Failed to read file",
            extra={"event": "file_unreadable", "path": resolved_path.as_posix()},
        )
        return internal_error_response("Failed to read file.")
    return ok_response(content, resolve_mime_type(resolved_path.name))


def _resolve_and_respond(
    target: str, storage_root: Union[str, Path], config: ServerConfig
) -> HttpResponse:
    try:
        resolved_path = resolve_storage_path(storage_root, target)
    except ForbiddenPath:
        ROUTER_LOGGER.warning(
            "Request target escapes storage root",
            extra={"event": "forbidden_path", "route": target},
        )
        return forbidden_response()

    try:
        file_stat = resolved_path.stat()
    except OSError as error:
        if error.errno == errno.ELOOP:
            ROUTER_LOGGER.info(
                "Symlink loop",
                extra={"event": "symlink_loop", "path": resolved_path.as_posix()},
            )
            return forbidden_response()
        if error.errno not in (errno.ENOENT, errno.ENOTDIR):
            raise
        ROUTER_LOGGER.info(
            "File not found",
            extra={"event": "file_not_found", "path": resolved_path.as_posix()},
        )
        return not_found_response()

    if stat.S_ISDIR(file_stat.st_mode):
        return _directory_response(resolved_path, target, config)

    if stat.S_ISREG(file_stat.st_mode):
        return _file_response(resolved_path, config)

    ROUTER_LOGGER.info(
        "Unsupported filesystem object",
        extra={"event": "unsupported_object", "path": resolved_path.as_posix()},
    )
    return forbidden_response()


def route_request(
    method: str,
    target: str,
    storage_root: Union[str, Path],
    config: ServerConfig,
) -> HttpResponse:
    """Map a GET on ``target`` to a file, index document, listing or error.

    Every branch returns exactly one response; unexpected exceptions become a
    500 and are logged with the causing message.
    """
    ROUTER_LOGGER.info(
        "Handling request",
        extra={"event": "request_received", "method": method, "route": target},
    )
    if method not in ALLOWED_METHODS:
        ROUTER_LOGGER.info(
            "Method not allowed",
            extra={"event": "method_not_allowed", "method": method, "route": target},
        )
        return method_not_allowed_response(ALLOWED_METHODS)

    try:
        return _resolve_and_respond(target, storage_root, config)
    except Exception as error:  # pylint: disable=broad-except
        ROUTER_LOGGER.error(
            "Exception handling request",
            extra={
                "event": "route_error",
                "route": target,
                "error_type": type(error).__name__,
                "error": str(error),
            },
            exc_info=True,
        )
        return internal_error_response()
