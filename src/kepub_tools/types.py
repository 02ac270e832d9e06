"""Shared type aliases and file-naming constants."""

from __future__ import annotations

import os
from enum import Enum

type PathArg = str | os.PathLike[str]
type Replacement = tuple[str, str]

PACKAGE_EXTENSION = ".epub"
CONVERTED_EXTENSION = ".kepub.epub"
DIRECTORY_SUFFIX = "_converted"


class PathKind(str, Enum):
    """Classification of a user-supplied path argument."""

    FILE = "file"
    DIRECTORY = "directory"
