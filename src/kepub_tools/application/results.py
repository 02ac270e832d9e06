"""Application-layer result objects."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


@dataclass(frozen=True)
class ConversionJob:
    """One planned conversion."""

    input_path: Path
    output_path: Path


class JobStatus(str, Enum):
    """Terminal state of a conversion job."""

    CONVERTED = "converted"
    SKIPPED = "skipped"
    ERRORED = "errored"


@dataclass(frozen=True)
class JobOutcome:
    """Outcome of a single conversion job."""

    job: ConversionJob
    status: JobStatus
    reason: str | None = None


@dataclass(frozen=True)
class BatchReport:
    """Ordered job outcomes of one batch run."""

    outcomes: tuple[JobOutcome, ...] = ()

    def with_outcome(self, outcome: JobOutcome) -> BatchReport:
        """Return a new report with ``outcome`` appended."""
        return BatchReport(outcomes=(*self.outcomes, outcome))

    def count(self, status: JobStatus) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status is status)

    @property
    def total(self) -> int:
        return len(self.outcomes)

    @property
    def converted(self) -> int:
        return self.count(JobStatus.CONVERTED)

    @property
    def skipped(self) -> int:
        return self.count(JobStatus.SKIPPED)

    @property
    def errored(self) -> int:
        return self.count(JobStatus.ERRORED)

    @property
    def failures(self) -> list[tuple[Path, Path, str]]:
        """``(input, output, reason)`` for every errored job."""
        return [
            (outcome.job.input_path, outcome.job.output_path, outcome.reason or "")
            for outcome in self.outcomes
            if outcome.status is JobStatus.ERRORED
        ]

    @property
    def failed(self) -> bool:
        """Whether the run should signal failure.

        Only a run with exactly one job fails as a whole; larger batches
        report partial failures without failing.
        """
        return self.total == 1 and self.errored == 1


@dataclass(frozen=True)
class PackageMetadata:
    """Series metadata read from an EPUB package.

    ``None`` means the element is absent, an empty string means it is present
    with no value.
    """

    series_name: str | None = None
    series_index: float | None = None

    def is_empty(self) -> bool:
        """Return ``True`` when there is nothing worth writing."""
        return not self.series_name and not self.series_index


class SyncStatus(str, Enum):
    """Terminal state of a book during a metadata sync."""

    UPDATED = "updated"
    NO_METADATA = "no_metadata"
    NOT_FOUND = "not_found"
    AMBIGUOUS = "ambiguous"
    ERRORED = "errored"


@dataclass(frozen=True)
class BookSyncResult:
    """Outcome of syncing one book."""

    path: Path
    status: SyncStatus
    relative_path: str | None = None
    metadata: PackageMetadata | None = None
    message: str | None = None


@dataclass
class SyncReport:
    """Per-book results of one sync run, in processing order."""

    device_root: Path
    backup_path: Path | None = None
    results: list[BookSyncResult] = field(default_factory=list)

    def statuses(self) -> Counter[SyncStatus]:
        return Counter(result.status for result in self.results)

    @property
    def updated(self) -> int:
        """Books whose catalog rows were written (ambiguous matches included)."""
        counts = self.statuses()
        return counts[SyncStatus.UPDATED] + counts[SyncStatus.AMBIGUOUS]

    @property
    def no_metadata(self) -> int:
        return self.statuses()[SyncStatus.NO_METADATA]

    @property
    def errored(self) -> int:
        """Books that failed, including ones missing from the catalog."""
        counts = self.statuses()
        return counts[SyncStatus.ERRORED] + counts[SyncStatus.NOT_FOUND]
