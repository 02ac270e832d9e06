"""Resolve path arguments into an input -> output conversion plan."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from kepub_tools.errors import (
    AlreadyConvertedError,
    InvalidPathKindError,
    NotPackageError,
    PathNotFoundError,
)
from kepub_tools.types import (
    CONVERTED_EXTENSION,
    DIRECTORY_SUFFIX,
    PACKAGE_EXTENSION,
    PathArg,
    PathKind,
)

logger = logging.getLogger(__name__)


def classify_path(path: PathArg) -> PathKind:
    """Classify a path argument as a file or a directory.

    Parameters
    ----------
    path : str | os.PathLike
        User-supplied path argument.

    Returns
    -------
    PathKind
        ``PathKind.FILE`` or ``PathKind.DIRECTORY``.

    Raises
    ------
    PathNotFoundError
        If nothing exists at ``path``.
    InvalidPathKindError
        If ``path`` exists but is neither a regular file nor a directory.
    """
    candidate = Path(path)
    if not candidate.exists():
        raise PathNotFoundError(f"Path '{path}' does not exist")
    if candidate.is_dir():
        return PathKind.DIRECTORY
    if candidate.is_file():
        return PathKind.FILE
    raise InvalidPathKindError(f"Path '{path}' is not a file or a dir")


def is_package_name(name: str) -> bool:
    """Return whether ``name`` is an unconverted EPUB file name."""
    return name.endswith(PACKAGE_EXTENSION) and not name.endswith(CONVERTED_EXTENSION)


def converted_name(name: str) -> str:
    """Swap the ``.epub`` extension of ``name`` for ``.kepub.epub``."""
    return name[: -len(PACKAGE_EXTENSION)] + CONVERTED_EXTENSION


def find_packages(directory: PathArg) -> list[Path]:
    """Recursively list unconverted EPUB files below ``directory``.

    The result is sorted so the listing is stable for a fixed tree.
    """
    root = Path(directory)
    found = [
        path
        for path in root.rglob(f"*{PACKAGE_EXTENSION}")
        if path.is_file() and is_package_name(path.name)
    ]
    return sorted(found)


def unique_args(args: Iterable[PathArg]) -> list[str]:
    """Drop repeated arguments (exact string match), keeping first-seen order."""
    return list(dict.fromkeys(str(arg) for arg in args))


def directory_namespace(directory: Path) -> str:
    """Name of the output subfolder for files found below ``directory``."""
    return (directory.name or "root") + DIRECTORY_SUFFIX


def _plan_file(arg: str, output_root: Path) -> tuple[Path, Path]:
    source = Path(arg).absolute()
    if not source.name.endswith(PACKAGE_EXTENSION):
        raise NotPackageError(f"File '{source}' is not an epub")
    if source.name.endswith(CONVERTED_EXTENSION):
        raise AlreadyConvertedError(f"File '{source}' is already a kepub")
    return source, output_root / converted_name(source.name)


def _plan_directory(arg: str, output_root: Path) -> list[tuple[Path, Path]]:
    directory = Path(arg).absolute()
    target_root = output_root / directory_namespace(directory.resolve())
    planned = []
    for source in find_packages(directory):
        relative = source.relative_to(directory)
        planned.append(
            (source, target_root / relative.with_name(converted_name(relative.name)))
        )
    return planned


def plan_conversions(args: Iterable[PathArg], output_root: PathArg) -> dict[Path, Path]:
    """Map every discovered input EPUB to its output path.

    Parameters
    ----------
    args : Iterable[str | os.PathLike]
        File and directory arguments, possibly repeated.
    output_root : str | os.PathLike
        Directory converted files are written under.

    Returns
    -------
    dict[Path, Path]
        Absolute input path -> absolute output path, in discovery order.

    Notes
    -----
    Files found below a directory argument ``Lib`` are written below
    ``output_root / "Lib_converted"``, mirroring their relative location.
    When two inputs compute the same output path, the later input replaces
    the earlier one in the plan.
    """
    out_root = Path(output_root).absolute()
    plan: dict[Path, Path] = {}
    outputs: dict[Path, Path] = {}

    def add(source: Path, target: Path) -> None:
        previous = outputs.get(target)
        if previous is not None and previous != source:
            logger.debug("output collision: %s replaces %s -> %s", source, previous, target)
            del plan[previous]
        stale = plan.get(source)
        if stale is not None:
            outputs.pop(stale, None)
        plan[source] = target
        outputs[target] = source

    for arg in unique_args(args):
        kind = classify_path(arg)
        if kind is PathKind.FILE:
            logger.debug("file: %s", arg)
            source, target = _plan_file(arg, out_root)
            add(source, target)
            logger.debug("  file-result: %s -> %s", source, target)
        else:
            logger.debug("dir: %s", arg)
            for source, target in _plan_directory(arg, out_root):
                add(source, target)
                logger.debug("  dir-result: %s -> %s", source, target)
    return plan
