"""Filesystem sandbox utilities for safe path resolution."""

import os
from pathlib import Path
from typing import Union


class ForbiddenPath(Exception):
    """Raised when a requested path escapes the storage root."""


def resolve_storage_path(storage_root: Union[str, os.PathLike], target: str) -> Path:
    """Join a decoded request target onto the storage root.

    The join is normalised lexically, without following symlinks, and any
    result outside ``storage_root`` is rejected.
    """
    if "\x00" in target:
        raise ForbiddenPath(target)

    root = os.path.abspath(storage_root)
    candidate = os.path.normpath(os.path.join(root, target.lstrip("/")))
    if candidate != root and os.path.commonpath([root, candidate]) != root:
        raise ForbiddenPath(target)
    return Path(candidate)
