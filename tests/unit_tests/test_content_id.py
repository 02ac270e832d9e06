"""Unit tests for device content and image identifiers."""

from __future__ import annotations

from kepub_tools.content_id import content_id, image_id, image_id_for_path


def test_content_id_prefix_and_slashes() -> None:
    """Prefix the on-device mount and normalise separators."""
    assert content_id("Author/Title.kobo.epub") == "file:///mnt/onboard/Author/Title.kobo.epub"
    assert content_id("Author\\Sub\\Title.epub") == "file:///mnt/onboard/Author/Sub/Title.epub"


def test_image_id_replaces_separators() -> None:
    """Replace space, slash, colon and dot with underscores."""
    assert (
        image_id("file:///mnt/onboard/Author/Title.kobo.epub")
        == "file____mnt_onboard_Author_Title_kobo_epub"
    )
    assert image_id("a b:c/d.e") == "a_b_c_d_e"


def test_image_id_for_path_is_repeatable() -> None:
    """Deriving twice from the same path gives the same identifier."""
    path = "My Books/Some Author/A Title.kepub.epub"
    first = image_id_for_path(path)
    assert first == image_id_for_path(path)
    assert first == image_id(content_id(path))
    assert first == "file____mnt_onboard_My_Books_Some_Author_A_Title_kepub_epub"
