"""Unit tests for extension based content-type resolution."""

import pytest

from tinyfs.content.mime import DEFAULT_MIME_TYPE, resolve_mime_type


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("index.html", "text/html"),
        ("page.htm", "text/html"),
        ("style.css", "text/css"),
        ("script.js", "application/javascript"),
        ("data.json", "application/json"),
        ("image.png", "image/png"),
        ("photo.jpg", "image/jpeg"),
        ("picture.jpeg", "image/jpeg"),
        ("animation.gif", "image/gif"),
        ("readme.txt", "text/plain"),
    ],
)
def test_known_extensions(name: str, expected: str) -> None:
    """Every documented extension maps to its content type."""
    assert resolve_mime_type(name) == expected


@pytest.mark.parametrize(
    "name",
    ["", "noext", "README", "trailing.", "a.tar.gz", "file.unknown", ".gitignore"],
)
def test_unmatched_names_use_default(name: str) -> None:
    """Missing, empty and unknown extensions fall back to octet-stream."""
    assert resolve_mime_type(name) == DEFAULT_MIME_TYPE


def test_only_last_extension_matters() -> None:
    """Multi-dot names resolve on their final extension."""
    assert resolve_mime_type("file.min.js") == "application/javascript"
    assert resolve_mime_type(".hidden.html") == "text/html"
    assert resolve_mime_type("config.dev.json") == "application/json"


def test_lookup_is_case_sensitive() -> None:
    """Upper-case extensions are not in the table."""
    assert resolve_mime_type("INDEX.HTML") == DEFAULT_MIME_TYPE


def test_directories_in_path_are_ignored() -> None:
    """Dots in parent directories do not leak into the extension."""
    assert resolve_mime_type("/path/to/file.html") == "text/html"
    assert resolve_mime_type("../relative/path/style.css") == "text/css"
    assert resolve_mime_type("release.d/notes") == DEFAULT_MIME_TYPE
