"""Content-type resolution from file extensions."""

from typing import Final

DEFAULT_MIME_TYPE: Final = "application/octet-stream"

MIME_TYPES: Final = {
    ".html": "text/html",
    ".htm": "text/html",
    ".css": "text/css",
    ".js": "application/javascript",
    ".json": "application/json",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".txt": "text/plain",
}


def resolve_mime_type(path: str) -> str:
    """Return the content type for the last extension of the final path segment."""
    filename = path.rsplit("/", 1)[-1]
    dot_pos = filename.rfind(".")
    if dot_pos == -1:
        return DEFAULT_MIME_TYPE
    return MIME_TYPES.get(filename[dot_pos:], DEFAULT_MIME_TYPE)
