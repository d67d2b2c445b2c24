"""Unit tests for directory listing rendering."""

import logging
import os
from pathlib import Path
from unittest.mock import patch

import pytest

from tinyfs.content.listing import list_entries, parent_url, render_directory_listing
from tinyfs.domain.response_builders import html_response


@pytest.fixture(name="populated_dir")
def fixture_populated_dir(tmp_path: Path) -> Path:
    (tmp_path / "b.txt").write_text("b")
    (tmp_path / "a").mkdir()
    (tmp_path / "c.txt").write_text("c")
    return tmp_path


def test_entries_sorted_directories_first(populated_dir: Path) -> None:
    """Directories come first, then files, each group by name."""
    entries = list_entries(populated_dir, "/")

    assert [(e.name, e.is_directory) for e in entries] == [
        ("a", True),
        ("b.txt", False),
        ("c.txt", False),
    ]


def test_directory_sorts_before_lexically_smaller_file(tmp_path: Path) -> None:
    """Grouping takes precedence over name order."""
    (tmp_path / "a.txt").write_text("a")
    (tmp_path / "b").mkdir()

    html = render_directory_listing(tmp_path, "/sub/")

    assert html.index('href="/sub/b/"') < html.index('href="/sub/a.txt"')


def test_rendered_order_and_links(populated_dir: Path) -> None:
    """Links join the URL path and name; directories get a trailing slash."""
    html = render_directory_listing(populated_dir, "/docs")

    a_pos = html.index('href="/docs/a/"')
    b_pos = html.index('href="/docs/b.txt"')
    c_pos = html.index('href="/docs/c.txt"')
    assert a_pos < b_pos < c_pos
    assert "a/</a>" in html
    assert 'class="file-item directory"' in html
    assert 'class="file-item file"' in html


def test_heading_shows_url_path(populated_dir: Path) -> None:
    html = render_directory_listing(populated_dir, "/docs/")

    assert "<h1>Directory Listing for /docs/</h1>" in html
    assert html.rstrip().endswith("</html>")


def test_root_has_no_parent_link(populated_dir: Path) -> None:
    html = render_directory_listing(populated_dir, "/")

    assert "Parent Directory" not in html


def test_nested_path_links_to_parent(populated_dir: Path) -> None:
    html = render_directory_listing(populated_dir, "/a/b/")

    assert '<a href="/a/">.. (Parent Directory)</a>' in html


@pytest.mark.parametrize(
    ("url_path", "expected"),
    [
        ("/sub/", "/"),
        ("/sub", "/"),
        ("/a/b/", "/a/"),
        ("/a/b", "/a/"),
        ("nested", "/"),
    ],
)
def test_parent_url(url_path: str, expected: str) -> None:
    assert parent_url(url_path) == expected


def test_names_are_escaped(tmp_path: Path) -> None:
    """Markup in names is escaped in text and quoted in links."""
    (tmp_path / "<b>&.txt").write_text("x")

    html = render_directory_listing(tmp_path, "/")

    assert "<b>&.txt" not in html
    assert "&lt;b&gt;&amp;.txt" in html
    assert 'href="/%3Cb%3E%26.txt"' in html


def test_listing_is_not_recursive(tmp_path: Path) -> None:
    (tmp_path / "outer").mkdir()
    (tmp_path / "outer" / "inner.txt").write_text("x")

    html = render_directory_listing(tmp_path, "/")

    assert "outer" in html
    assert "inner.txt" not in html


def test_enumeration_failure_renders_inline_error(tmp_path: Path, caplog) -> None:
    """I/O errors become an inline marker instead of an exception."""
    caplog.set_level(logging.ERROR)
    missing = tmp_path / "gone"

    html = render_directory_listing(missing, "/gone/")

    assert "Error reading directory" in html
    assert "Parent Directory" in html
    assert html.rstrip().endswith("</html>")
    assert any(
        getattr(r, "event", None) == "directory_listing_failed" for r in caplog.records
    )


def test_unexpected_exception_is_contained(populated_dir: Path) -> None:
    with patch("tinyfs.content.listing.os.scandir", side_effect=RuntimeError("boom")):
        html = render_directory_listing(populated_dir, "/")

    assert "Error reading directory" in html


def test_undecodable_name_is_listed_with_its_raw_bytes(tmp_path: Path) -> None:
    """A name that is not valid UTF-8 keeps its bytes in the text and the link."""
    (tmp_path / "ok.txt").write_text("ok")
    with open(os.path.join(os.fsencode(tmp_path), b"bad\xff.txt"), "wb") as handle:
        handle.write(b"x")

    page = render_directory_listing(tmp_path, "/")

    assert "Error reading directory" not in page
    assert 'href="/bad%FF.txt"' in page
    assert 'href="/ok.txt"' in page
    body = html_response(page).body
    assert b"bad\xff.txt</a>" in body
