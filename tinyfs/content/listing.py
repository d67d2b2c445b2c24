"""HTML directory listings for directories without an index document."""

import html
import logging
import os
import urllib.parse
from dataclasses import dataclass
from typing import Union

from tinyfs.domain.correlation_id import CorrelationLoggerAdapter

LISTING_LOGGER = CorrelationLoggerAdapter(
    logging.getLogger("tinyfs.content.listing"), {}
)

PAGE_HEAD = """<!DOCTYPE html>
<html>
<head>
    <title>Directory Listing</title>
    <style>
        body { font-family: Arial, sans-serif; margin: 20px; }
        .header { border-bottom: 1px solid #ccc; padding-bottom: 10px; }
        .file-list { margin-top: 20px; }
        .file-item { padding: 5px 0; }
        .file-item a { text-decoration: none; color: #0066cc; }
        .file-item a:hover { text-decoration: underline; }
        .directory { font-weight: bold; }
        .file { margin-left: 20px; }
    </style>
</head>
<body>
    <div class="header">
        <h1>Directory Listing for {title}</h1>
    </div>
    <div class="file-list">
"""
PAGE_TAIL = "</div></body></html>"
DIRECTORY_MARKER = "\U0001f4c1"
FILE_MARKER = "\U0001f4c4"


@dataclass(frozen=True)
class DirectoryEntry:
    """A single child of a listed directory."""

    name: str
    is_directory: bool
    link: str

    def sort_key(self) -> tuple[bool, str]:
        return (not self.is_directory, self.name)


def parent_url(url_path: str) -> str:
    """Return the URL of the parent directory of ``url_path``."""
    parent = url_path[:-1] if url_path.endswith("/") else url_path
    pos = parent.rfind("/")
    if pos == -1:
        return "/"
    return parent[: pos + 1]


def _entry_link(url_path: str, name: str, is_directory: bool) -> str:
    link = url_path if url_path.endswith("/") else url_path + "/"
    link += name
    if is_directory:
        link += "/"
    return link


def list_entries(directory_path: Union[str, os.PathLike], url_path: str) -> list[DirectoryEntry]:
    """Return the immediate children of a directory, directories first then by name."""
    entries = []
    with os.scandir(directory_path) as iterator:
        for item in iterator:
            is_directory = item.is_dir()
            entries.append(
                DirectoryEntry(
                    name=item.name,
                    is_directory=is_directory,
                    link=_entry_link(url_path, item.name, is_directory),
                )
            )
    entries.sort(key=DirectoryEntry.sort_key)
    return entries


def _href(link: str) -> str:
    # Undecodable names carry surrogate escapes; quote their original bytes.
    return html.escape(urllib.parse.quote(os.fsencode(link)), quote=True)


def _render_entry(entry: DirectoryEntry) -> str:
    href = _href(entry.link)
    label = html.escape(entry.name)
    if entry.is_directory:
        return (
            f'<div class="file-item directory"><a href="{href}">'
            f"{DIRECTORY_MARKER} {label}/</a></div>"
        )
    return f'<div class="file-item file"><a href="{href}">{FILE_MARKER} {label}</a></div>'


def render_directory_listing(directory_path: Union[str, os.PathLike], url_path: str) -> str:
    """Render an HTML page enumerating the children of ``directory_path``.

    Enumeration failures are logged and replaced by an inline error line so
    the page itself is always produced.
    """
    parts = [PAGE_HEAD.replace("{title}", html.escape(url_path))]

    if url_path != "/":
        href = _href(parent_url(url_path))
        parts.append(
            f'<div class="file-item directory"><a href="{href}">'
            ".. (Parent Directory)</a></div>"
        )

    try:
        entries = list_entries(directory_path, url_path)
    except Exception as error:  # pylint: disable=broad-except
        LISTING_LOGGER.error(
            "Error listing directory",
            extra={
                "event": "directory_listing_failed",
                "path": os.fspath(directory_path),
                "error_type": type(error).__name__,
                "error": str(error),
            },
        )
        parts.append('<div class="file-item">Error reading directory</div>')
    else:
        parts.extend(_render_entry(entry) for entry in entries)
        if LISTING_LOGGER.logger.isEnabledFor(logging.DEBUG):
            LISTING_LOGGER.debug(
                "Directory listing rendered",
                extra={
                    "event": "directory_listed",
                    "path": os.fspath(directory_path),
                    "entries": len(entries),
                },
            )

    parts.append(PAGE_TAIL)
    return "".join(parts)
