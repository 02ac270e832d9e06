"""Application use-cases orchestrating conversion and metadata sync."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from pathlib import Path

from pydantic import ValidationError

from kepub_tools.adapters.catalog import SqliteCatalog
from kepub_tools.adapters.converters import KepubConverter
from kepub_tools.adapters.package_reader import EpubMetadataReader
from kepub_tools.application.options import BatchOptions, ConversionOptions
from kepub_tools.application.ports import (
    BookConverter,
    CatalogStore,
    MetadataReader,
    ProgressSink,
)
from kepub_tools.application.results import (
    BatchReport,
    BookSyncResult,
    ConversionJob,
    JobOutcome,
    JobStatus,
    SyncReport,
    SyncStatus,
)
from kepub_tools.content_id import image_id_for_path
from kepub_tools.errors import ConfigurationError, KepubToolsError
from kepub_tools.infrastructure.backup import backup_catalog
from kepub_tools.infrastructure.devices import catalog_path
from kepub_tools.infrastructure.progress import LoggingProgress
from kepub_tools.planning import plan_conversions
from kepub_tools.schemas import BatchConfig, ConversionConfig
from kepub_tools.types import PACKAGE_EXTENSION, PathArg, Replacement

logger = logging.getLogger(__name__)


def build_conversion_options(
    *,
    css: str = "",
    hyphenate: bool = False,
    no_hyphenate: bool = False,
    inline_styles: bool = False,
    fullscreen_fixes: bool = False,
    replacements: Iterable[str | Replacement] = (),
) -> ConversionOptions:
    """Validate command/API params and build the typed option object.

    Raises
    ------
    ConfigurationError
        If both hyphenation toggles are set or a replacement is malformed.
    """
    try:
        config = ConversionConfig(
            css=css,
            hyphenate=hyphenate,
            no_hyphenate=no_hyphenate,
            inline_styles=inline_styles,
            fullscreen_fixes=fullscreen_fixes,
            replacements=list(replacements),
        )
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid conversion options: {exc}") from exc

    return ConversionOptions(
        extra_css=config.css,
        hyphenate=config.hyphenation,
        inline_styles=config.inline_styles,
        fullscreen_fixes=config.fullscreen_fixes,
        replacements=tuple(config.replacements),
    )


def _run_job(
    job: ConversionJob,
    options: BatchOptions,
    converter: BookConverter,
    conversion_options: ConversionOptions,
) -> JobOutcome:
    exists = job.output_path.exists()
    logger.debug("  i: %s", job.input_path)
    logger.debug("  o: %s", job.output_path)
    logger.debug("  e: %s", exists)
    if exists and options.update_only:
        return JobOutcome(job=job, status=JobStatus.SKIPPED)

    out_dir = job.output_path.parent
    if not out_dir.is_dir():
        logger.debug("  mkdir: %s", out_dir)
        try:
            out_dir.mkdir(mode=0o777, parents=True, exist_ok=True)
        except OSError as exc:
            return JobOutcome(
                job=job,
                status=JobStatus.ERRORED,
                reason=f"error creating output dir: {exc}",
            )

    try:
        converter.convert(job.input_path, job.output_path, conversion_options)
    except Exception as exc:
        logger.debug("  err: %r", exc)
        return JobOutcome(
            job=job, status=JobStatus.ERRORED, reason=str(exc) or type(exc).__name__
        )
    return JobOutcome(job=job, status=JobStatus.CONVERTED)


def execute_batch(
    plan: Mapping[Path, Path],
    *,
    options: BatchOptions = BatchOptions(),
    converter: BookConverter | None = None,
    conversion_options: ConversionOptions = ConversionOptions(),
    progress: ProgressSink | None = None,
) -> BatchReport:
    """Use-case: run every planned conversion and fold the outcomes.

    Jobs are independent: a failing job is recorded and the batch moves on.

    Parameters
    ----------
    plan : Mapping[Path, Path]
        Input path -> output path, processed in iteration order.
    options : BatchOptions
        ``update_only`` skips jobs whose output already exists.
    converter : BookConverter | None, default=None
        Conversion collaborator; the built-in converter when omitted.
    conversion_options : ConversionOptions
        Options forwarded to the converter for every job.
    progress : ProgressSink | None, default=None
        Where progress lines go; the module logger when omitted.

    Returns
    -------
    BatchReport
        One outcome per job, in processing order.
    """
    converter = converter or KepubConverter()
    progress = progress or LoggingProgress()

    total = len(plan)
    report = BatchReport()
    for n, (input_path, output_path) in enumerate(plan.items(), start=1):
        job = ConversionJob(input_path=input_path, output_path=output_path)
        verb = "Skipping" if options.update_only and output_path.exists() else "Converting"
        progress.info(f"[{n}/{total}] {verb} '{input_path}'")

        outcome = _run_job(job, options, converter, conversion_options)
        if outcome.status is JobStatus.ERRORED:
            progress.error(f"  Error: {outcome.reason}")
        report = report.with_outcome(outcome)

    progress.info(
        f"\n{report.total} total, {report.converted} converted, "
        f"{report.skipped} skipped, {report.errored} errored"
    )
    if report.failures:
        progress.error("\nErrors:")
        for input_path, _output_path, reason in report.failures:
            progress.error(f"  '{input_path}': {reason}")
    return report


def convert_paths(
    *,
    paths: Iterable[PathArg],
    output_dir: PathArg = ".",
    update_only: bool = False,
    conversion_options: ConversionOptions = ConversionOptions(),
    converter: BookConverter | None = None,
    progress: ProgressSink | None = None,
) -> BatchReport:
    """Use-case: plan conversions for path arguments and execute them.

    Raises
    ------
    ConfigurationError
        If no paths are given.
    PlanningError
        If an argument is missing, of the wrong kind or not an unconverted EPUB.
    """
    try:
        config = BatchConfig(
            paths=[str(path) for path in paths],
            output_dir=Path(output_dir),
            update_only=update_only,
        )
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid batch parameters: {exc}") from exc

    progress = progress or LoggingProgress()
    output_root = config.output_dir.absolute()
    logger.debug("output: %s", config.output_dir)
    logger.debug("output-abs: %s", output_root)
    logger.debug("update: %s", config.update_only)

    plan = plan_conversions(config.paths, output_root)
    progress.info(f"Converting {len(plan)} books")
    return execute_batch(
        plan,
        options=BatchOptions(update_only=config.update_only),
        converter=converter,
        conversion_options=conversion_options,
        progress=progress,
    )


def format_series_index(value: float | None) -> str | None:
    """Catalog form of a series index; ``None`` unless the index is positive."""
    if value is None or not value > 0:
        return None
    if value.is_integer():
        return str(int(value))
    return repr(value)


def find_device_books(device_root: Path) -> list[Path]:
    """List every EPUB (converted or not) stored on the device."""
    return sorted(
        path for path in device_root.rglob(f"*{PACKAGE_EXTENSION}") if path.is_file()
    )


def sync_book(
    book: Path,
    device_root: Path,
    *,
    reader: MetadataReader,
    catalog: CatalogStore,
) -> BookSyncResult:
    """Sync the series metadata of one book into the catalog."""
    try:
        relative = book.relative_to(device_root).as_posix()
    except ValueError as exc:
        return BookSyncResult(
            path=book,
            status=SyncStatus.ERRORED,
            message=f"could not resolve path: {exc}",
        )

    try:
        metadata = reader.read(book)
    except KepubToolsError as exc:
        return BookSyncResult(
            path=book,
            relative_path=relative,
            status=SyncStatus.ERRORED,
            message=f"could not read metadata: {exc}",
        )

    if metadata.is_empty():
        return BookSyncResult(
            path=book,
            relative_path=relative,
            status=SyncStatus.NO_METADATA,
            metadata=metadata,
        )

    try:
        affected = catalog.update_series(
            image_id_for_path(relative),
            metadata.series_name or None,
            format_series_index(metadata.series_index),
        )
    except KepubToolsError as exc:
        return BookSyncResult(
            path=book,
            relative_path=relative,
            status=SyncStatus.ERRORED,
            metadata=metadata,
            message=str(exc),
        )

    if affected < 1:
        return BookSyncResult(
            path=book,
            relative_path=relative,
            status=SyncStatus.NOT_FOUND,
            metadata=metadata,
            message=(
                "no entry in database for book "
                "(the kobo may still need to import the book)"
            ),
        )
    if affected > 1:
        return BookSyncResult(
            path=book,
            relative_path=relative,
            status=SyncStatus.AMBIGUOUS,
            metadata=metadata,
            message="more than one match in database for ImageID",
        )
    return BookSyncResult(
        path=book, relative_path=relative, status=SyncStatus.UPDATED, metadata=metadata
    )


def _display_path(book: Path, device_root: Path) -> str:
    try:
        return book.relative_to(device_root).as_posix()
    except ValueError:
        return str(book)


def _report_book(result: BookSyncResult, indent: str, progress: ProgressSink) -> None:
    metadata = result.metadata
    if metadata is not None and not metadata.is_empty():
        index = format_series_index(metadata.series_index) or "0"
        progress.info(f"{indent}({metadata.series_name or ''}, {index})")
    if result.status is SyncStatus.AMBIGUOUS:
        progress.warning(f"{indent}Warn: {result.message}")
    elif result.status is SyncStatus.NOT_FOUND:
        progress.error(f"{indent}Error: could not update database: {result.message}")
    elif result.status is SyncStatus.ERRORED:
        progress.error(f"{indent}Error: {result.message}")


def _sync_books(
    report: SyncReport,
    *,
    reader: MetadataReader,
    catalog: CatalogStore,
    progress: ProgressSink,
) -> SyncReport:
    progress.info("Searching for sideloaded epubs and kepubs")
    books = find_device_books(report.device_root)
    progress.info(f"\nUpdating metadata for {len(books)} books")

    digits = len(str(len(books)))
    indent = " " * (digits * 2 + 4)
    for i, book in enumerate(books, start=1):
        label = _display_path(book, report.device_root)
        progress.info(f"[{i:{digits}d}/{len(books)}] {label}")
        result = sync_book(book, report.device_root, reader=reader, catalog=catalog)
        _report_book(result, indent, progress)
        report.results.append(result)

    progress.info(
        f"\nFinished updating metadata. {report.updated} updated, "
        f"{report.no_metadata} without metadata, {report.errored} errored."
    )
    return report


def sync_series_metadata(
    device_root: Path,
    *,
    reader: MetadataReader | None = None,
    catalog: CatalogStore | None = None,
    progress: ProgressSink | None = None,
    db_path: Path | None = None,
) -> SyncReport:
    """Use-case: copy series metadata from on-device EPUBs into the catalog.

    The catalog file is backed up before anything else happens; when the
    backup fails the run stops without touching the catalog.

    Parameters
    ----------
    device_root : Path
        Validated device root.
    reader : MetadataReader | None, default=None
        Metadata extractor; the EPUB reader when omitted.
    catalog : CatalogStore | None, default=None
        Catalog to update; the device's SQLite catalog when omitted.
    progress : ProgressSink | None, default=None
        Where progress lines go.
    db_path : Path | None, default=None
        Catalog file override; ``<root>/.kobo/KoboReader.sqlite`` by default.

    Raises
    ------
    BackupError
        If the catalog backup cannot be written.
    DatabaseError
        If the default catalog cannot be opened.
    """
    root = device_root.absolute()
    db = db_path or catalog_path(root)
    reader = reader or EpubMetadataReader()
    progress = progress or LoggingProgress()

    progress.info(f"Making backup of {db.name}")
    report = SyncReport(device_root=root, backup_path=backup_catalog(db))
    logger.debug("backup written to %s", report.backup_path)

    if catalog is not None:
        return _sync_books(report, reader=reader, catalog=catalog, progress=progress)

    progress.info(f"Opening {db.name}")
    with SqliteCatalog(db) as store:
        return _sync_books(report, reader=reader, catalog=store, progress=progress)
