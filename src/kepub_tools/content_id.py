"""Device-side identifiers derived from on-device book paths."""

from __future__ import annotations

CONTENT_ID_PREFIX = "file:///mnt/onboard/"

_IMAGE_ID_TABLE = str.maketrans({" ": "_", "/": "_", ":": "_", ".": "_"})


def content_id(relative_path: str) -> str:
    """Return the content ID for a path relative to the device root."""
    return CONTENT_ID_PREFIX + relative_path.replace("\\", "/")


def image_id(content_id_value: str) -> str:
    """Return the catalog lookup key (``ImageID``) for a content ID."""
    return content_id_value.translate(_IMAGE_ID_TABLE)


def image_id_for_path(relative_path: str) -> str:
    """Shortcut for ``image_id(content_id(relative_path))``."""
    return image_id(content_id(relative_path))
