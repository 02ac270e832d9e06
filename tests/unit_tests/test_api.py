"""Unit tests for the file-level public API."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from kepub_tools.api import kepubify_file
from kepub_tools.errors import InvalidPathKindError, PathNotFoundError


def test_kepubify_file_returns_output_path(
    tmp_path: Path, make_epub: Callable[..., Path]
) -> None:
    """Convert one book and return where it was written."""
    book = make_epub(tmp_path / "Book.epub")

    output = kepubify_file(book, tmp_path / "out")

    assert output == (tmp_path / "out" / "Book.kepub.epub").absolute()
    assert output.is_file()


def test_kepubify_file_rejects_directories(tmp_path: Path) -> None:
    """A directory, even one without books, is not a single file."""
    (tmp_path / "empty").mkdir()

    with pytest.raises(InvalidPathKindError):
        kepubify_file(tmp_path / "empty", tmp_path / "out")


def test_kepubify_file_missing_input(tmp_path: Path) -> None:
    """A missing input is reported before anything is planned."""
    with pytest.raises(PathNotFoundError):
        kepubify_file(tmp_path / "missing.epub", tmp_path / "out")
