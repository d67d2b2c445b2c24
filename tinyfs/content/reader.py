"""Whole-file reads guarded by a maximum size."""

import logging
import os
from pathlib import Path
from typing import Optional, Union

from tinyfs.domain.correlation_id import CorrelationLoggerAdapter

READER_LOGGER = CorrelationLoggerAdapter(logging.getLogger("tinyfs.content.reader"), {})


def read_bounded(path: Union[str, Path], max_bytes: int) -> Optional[bytes]:
    """Read an entire file into memory, refusing files larger than ``max_bytes``.

    Returns ``None`` when the file cannot be opened, its size cannot be
    determined, it exceeds the limit, or the read comes up short. Failures are
    logged here and never raised to the caller.
    """
    file_path = os.fspath(path)
    try:
        with open(file_path, "rb") as file_handle:
            size = os.fstat(file_handle.fileno()).st_size
            if size > max_bytes:
                READER_LOGGER.warning(
                    "File exceeds maximum size",
                    extra={
                        "event": "file_too_large",
                        "path": file_path,
                        "size": size,
                        "limit": max_bytes,
                    },
                )
                return None
            content = file_handle.read(size)
    except OSError as error:
        READER_LOGGER.error(
            "Failed to read file",
            extra={
                "event": "file_read_failed",
                "path": file_path,
                "error_type": type(error).__name__,
                "error": str(error),
            },
        )
        return None

    if len(content) != size:
        READER_LOGGER.error(
            "File changed size during read",
            extra={
                "event": "file_read_short",
                "path": file_path,
                "size": size,
                "bytes_read": len(content),
            },
        )
        return None

    if READER_LOGGER.logger.isEnabledFor(logging.DEBUG):
        READER_LOGGER.debug(
            "File read complete",
            extra={"event": "file_read_complete", "path": file_path, "size": size},
        )
    return content
