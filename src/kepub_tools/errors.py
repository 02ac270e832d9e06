"""Exception taxonomy shared by the conversion and metadata pipelines."""

from __future__ import annotations


class KepubToolsError(Exception):
    """Base error for kepub-tools.

    Attributes
    ----------
    exit_code : int
        Process exit code the CLI uses when this error ends a run.
    """

    exit_code: int = 1


class ConfigurationError(KepubToolsError):
    """Invalid or contradictory options, rejected before any job runs."""

    exit_code = 2


class PlanningError(KepubToolsError):
    """Input path arguments could not be turned into conversion jobs."""


class PathNotFoundError(PlanningError):
    """Input path does not exist."""


class InvalidPathKindError(PlanningError):
    """Input path is neither a regular file nor a directory."""


class NotPackageError(PlanningError):
    """Input file does not carry the ``.epub`` extension."""


class AlreadyConvertedError(PlanningError):
    """Input file is already a ``.kepub.epub``."""


class DirectoryCreateError(KepubToolsError):
    """Output directory for a job could not be created."""


class ConversionFailure(KepubToolsError):
    """Conversion collaborator reported a failure."""


class PackageError(KepubToolsError):
    """EPUB package could not be read."""


class ArchiveError(PackageError):
    """Package is not a readable zip archive or misses a required entry."""


class MalformedContainerError(PackageError):
    """``META-INF/container.xml`` is invalid or names no content document."""


class MalformedPackageError(PackageError):
    """Content (OPF) document is not well-formed XML."""


class DatabaseError(KepubToolsError):
    """Device catalog could not be opened or updated."""


class BackupError(KepubToolsError):
    """Device catalog backup could not be created."""

    exit_code = 3


class DeviceNotFoundError(KepubToolsError):
    """No usable e-reader root could be resolved."""
