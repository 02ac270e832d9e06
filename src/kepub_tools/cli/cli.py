#!/usr/bin/env python3
"""
kepub_tools.cli.cli

Typer-based CLI for converting EPUBs to kepubs and syncing series metadata
into a Kobo e-reader's catalog.

Examples
--------
Convert a library into ./out, skipping books converted earlier:

    kepub-tools convert ~/Books --output ./out --update

Write series metadata of sideloaded books into an auto-detected device:

    kepub-tools seriesmeta
"""

from __future__ import annotations

import logging
import traceback
from pathlib import Path

import typer

from kepub_tools import __version__
from kepub_tools.errors import ConfigurationError, KepubToolsError

app = typer.Typer(
    name="kepub-tools",
    help="Convert EPUBs to Kobo kepubs and sync series metadata to a Kobo.",
    no_args_is_help=True,
)

REPLACE_HELP = "Find and replace text in content documents, as FIND|REPLACE (repeatable)."


class EchoProgress:
    """``ProgressSink`` printing to stdout, with failures on stderr."""

    def info(self, message: str) -> None:
        typer.echo(message)

    def warning(self, message: str) -> None:
        typer.echo(message, err=True)

    def error(self, message: str) -> None:
        typer.echo(message, err=True)


def _configure_logging(verbose: bool) -> None:
    """Select the log level once per run."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(name)s: %(message)s",
        force=True,
    )


def _print_error(exc: Exception, debug: bool, prefix: str = "Error") -> int:
    """Print a user-friendly error.

    Parameters
    ----------
    exc : Exception
        Exception that ended the command.
    debug : bool
        Whether to include traceback details.
    prefix : str, default="Error"
        Label printed before the message.

    Returns
    -------
    int
        Process exit code.
    """
    typer.echo(f"{prefix}: {exc}", err=True)
    if debug:
        typer.echo("\nTraceback:", err=True)
        typer.echo("".join(traceback.format_exception(type(exc), exc, exc.__traceback__)), err=True)
    code = getattr(exc, "exit_code", None)
    if isinstance(code, int) and code > 0:
        return code
    return 1


# -----------------------------
# Global options
# -----------------------------
@app.callback()
def _main(
    ctx: typer.Context,
    debug: bool = typer.Option(False, "--debug", help="Show full tracebacks on error."),
) -> None:
    """Initialize shared CLI state.

    Parameters
    ----------
    ctx : typer.Context
        Typer context object used to store shared state.
    debug : bool, default=False
        Whether to enable debug error output.
    """
    ctx.obj = {"debug": debug}


# -----------------------------
# Commands
# -----------------------------
@app.command("convert")
def convert_cmd(
    ctx: typer.Context,
    paths: list[str] = typer.Argument(
        ..., help="EPUB files or directories to convert (directories are searched recursively)."
    ),
    output: Path = typer.Option(
        Path("."), "--output", "-o", help="The directory to place the converted files."
    ),
    update: bool = typer.Option(
        False, "--update", "-u", help="Don't reconvert files which have already been converted."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Show extra information in output."
    ),
    css: str = typer.Option("", "--css", "-c", help="Custom CSS to add to ebook."),
    hyphenate: bool = typer.Option(
        False, "--hyphenate", help="Force enable hyphenation."
    ),
    no_hyphenate: bool = typer.Option(
        False, "--no-hyphenate", help="Force disable hyphenation."
    ),
    inline_styles: bool = typer.Option(
        False, "--inline-styles", help="Inline all linked stylesheets."
    ),
    fullscreen_fixes: bool = typer.Option(
        False,
        "--fullscreen-reading-fixes",
        help="Enable fullscreen reading bugfixes.",
    ),
    replace: list[str] | None = typer.Option(None, "--replace", "-r", help=REPLACE_HELP),
) -> None:
    """Convert EPUB files into .kepub.epub files.

    A file argument produces ``<output>/<name>.kepub.epub``. A directory
    argument ``Lib`` produces ``<output>/Lib_converted/...`` mirroring its
    layout; files already named ``.kepub.epub`` are ignored.

    The command fails only when a single book was requested and could not
    be converted; failures in larger batches are listed at the end.
    """
    debug: bool = bool(ctx.obj.get("debug", False))
    _configure_logging(verbose)
    logger = logging.getLogger(__name__)
    logger.debug("version: %s", __version__)

    from kepub_tools.application.use_cases import build_conversion_options, convert_paths

    try:
        options = build_conversion_options(
            css=css,
            hyphenate=hyphenate,
            no_hyphenate=no_hyphenate,
            inline_styles=inline_styles,
            fullscreen_fixes=fullscreen_fixes,
            replacements=replace or [],
        )
    except ConfigurationError as exc:
        raise typer.Exit(code=_print_error(exc, debug))

    typer.echo(f"kepub-tools {__version__}")
    try:
        report = convert_paths(
            paths=paths,
            output_dir=output,
            update_only=update,
            conversion_options=options,
            progress=EchoProgress(),
        )
    except KepubToolsError as exc:
        raise typer.Exit(code=_print_error(exc, debug))
    except Exception as exc:
        # Unexpected crash: still show a clean message; debug prints traceback.
        raise typer.Exit(code=_print_error(exc, debug))

    if report.failed:
        raise typer.Exit(code=1)


@app.command("seriesmeta")
def seriesmeta_cmd(
    ctx: typer.Context,
    kobo_path: str | None = typer.Argument(
        None,
        help="Path to the Kobo eReader. Auto-detected when omitted.",
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Show extra information in output."
    ),
) -> None:
    """Write series metadata from sideloaded EPUBs into the Kobo catalog.

    ``KoboReader.sqlite`` is backed up to ``KoboReader.sqlite.bak`` before
    any change; the run stops when the backup cannot be written.
    """
    debug: bool = bool(ctx.obj.get("debug", False))
    _configure_logging(verbose)

    from kepub_tools.application.use_cases import sync_series_metadata
    from kepub_tools.infrastructure.devices import resolve_device_root

    if kobo_path is None:
        typer.echo("No kobo specified, attempting to detect one")
    try:
        root = resolve_device_root(kobo_path)
        typer.echo(f"Checking kobo at '{root}'")
        sync_series_metadata(root, progress=EchoProgress())
    except KepubToolsError as exc:
        raise typer.Exit(code=_print_error(exc, debug, prefix="Fatal"))
    except Exception as exc:
        raise typer.Exit(code=_print_error(exc, debug, prefix="Fatal"))


@app.command("devices")
def devices_cmd() -> None:
    """List detected Kobo e-readers."""
    from kepub_tools.infrastructure.devices import find_devices

    devices = find_devices()
    if not devices:
        typer.echo("No kobo detected.")
        raise typer.Exit(code=1)
    for device in devices:
        typer.echo(str(device))


if __name__ == "__main__":
    app()
