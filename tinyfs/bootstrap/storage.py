"""Storage root preparation."""

import logging
from pathlib import Path
from typing import Union

from tinyfs.domain.correlation_id import CorrelationLoggerAdapter

STORAGE_LOGGER = CorrelationLoggerAdapter(
    logging.getLogger("tinyfs.bootstrap.storage"), {}
)


class StorageRootError(Exception):
    """Raised when the storage root cannot be used as a directory."""


def ensure_storage_root(directory: Union[str, Path]) -> Path:
    """Create the storage root if needed and return it as an absolute path."""
    root = Path(directory).absolute()
    if root.exists():
        if not root.is_dir():
            raise StorageRootError(f"{root} exists but is not a directory")
        return root
    try:
        root.mkdir(parents=True, exist_ok=True)
    except OSError as error:
        raise StorageRootError(f"Failed to create directory {root}: {error}") from error
    STORAGE_LOGGER.info(
        "Created storage directory",
        extra={"event": "storage_created", "directory": root.as_posix()},
    )
    return root
