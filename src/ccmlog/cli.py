"""ccmlog CLI — entry point.

Commands:
    ccmlog read       <target>...   Parse and display CMTrace log entries
    ccmlog parse-line <line>        Parse a single line (grammar debugging)
    ccmlog plugins                  List output formats and reformat rules
"""
from __future__ import annotations

import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Iterator

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.text import Text

from .config import settings
from .errors import CMTraceError, LogReadError
from .parsers.cmtrace import CMTraceParser
from .plugins.registry import default_registry
from .reader import LogReader, LogRecord, LogSource
from .search.count_limit import CountLimit
from .search.regex_search import MessageSearch
from .search.time_filter import TimeWindow, parse_datetime
from .sources import load_source, resolve_target

console = Console()
err_console = Console(stderr=True)

logger = logging.getLogger(__name__)

# ── Helpers ─────────────────────────────────────────────────────────────────


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _parse_bound(ctx: click.Context, param: click.Parameter, value: str) -> datetime | None:
    if not value:
        return None
    parsed = parse_datetime(value)
    if parsed is None:
        raise click.BadParameter(f"Cannot parse date: {value!r}. Use ISO-8601 format.")
    return parsed


def _record_line(record: LogRecord) -> Text:
    """Return a styled single-record line; message text is never treated as markup."""
    return Text.assemble(
        (record.timestamp.strftime("%Y-%m-%d %H:%M:%S"), "dim"),
        " ",
        (record.source, "cyan"),
        " ",
        record.message,
    )


def _iter_sources(
    paths: list[Path],
    tail: int,
    source: str | None,
    computer_name: str,
    strict: bool,
) -> Iterator[LogSource]:
    # Lazy so files after the count limit is hit are never opened
    for path in paths:
        logger.debug("Reading last %d lines of %s", tail, path)
        try:
            loaded = load_source(path, tail, source=source, computer_name=computer_name)
        except OSError as exc:
            if strict:
                raise
            err_console.print(f"[yellow]Cannot read {path}: {exc}[/yellow]")
            continue
        yield loaded


# ── CLI root ─────────────────────────────────────────────────────────────────


@click.group()
@click.version_option(version="1.0.0", prog_name="ccmlog")
@click.option("--verbose", "-v", is_flag=True, help="Debug logging on stderr.")
def main(verbose: bool) -> None:
    """ccmlog — read and filter Configuration Manager client (CMTrace) logs."""
    _configure_logging(verbose)
    default_registry.discover()


# ── read ─────────────────────────────────────────────────────────────────────


@main.command()
@click.argument("targets", nargs=-1, required=True)
@click.option("--source", "-s", default="", help="Component name for reformat rules (default: from file name).")
@click.option(
    "--tail", "-t", default=settings.tail_lines, type=int,
    help="Lines read from the end of each file (0 = whole file).",
    show_default=True,
)
@click.option("--after", default="", callback=_parse_bound, help="Only entries after this time (ISO-8601).")
@click.option("--before", default="", callback=_parse_bound, help="Only entries before this time (ISO-8601).")
@click.option(
    "--inclusive/--exclusive", default=settings.inclusive_window,
    help="Keep or drop entries stamped exactly on --after/--before.",
    show_default=True,
)
@click.option("--count", "-n", default=0, type=click.IntRange(min=0), help="Max entries across all targets (0 = all).")
@click.option("--match", "-m", "match", default="", help="Only entries whose message matches this regex.")
@click.option("--computer", default=settings.computer_name, help="Computer name stamped on records.", show_default=True)
@click.option(
    "--output", "-o", "output_fmt", default=settings.default_output,
    help="Output format: stream, or any registered output plugin (json, csv).",
    show_default=True,
)
@click.option(
    "--strict/--lenient", default=settings.on_error == "raise",
    help="Abort on the first malformed log instead of warning and moving on.",
)
def read(
    targets: tuple[str, ...],
    source: str,
    tail: int,
    after: datetime | None,
    before: datetime | None,
    inclusive: bool,
    count: int,
    match: str,
    computer: str,
    output_fmt: str,
    strict: bool,
) -> None:
    """Read CMTrace log entries from one or more files.

    A target is a path to a log file or a bare component name, which is
    looked up as <log_dir>/<name>.log (log_dir from CCMLOG_LOG_DIR).

    \b
    Examples:
      ccmlog read AppEnforce AppDiscovery --count 20
      ccmlog read ./logs/AppIntentEval.log --output json
      ccmlog read CAS --after 2024-03-14T09:00:00 --match "0x87d00"
    """
    plugin = None
    if output_fmt != "stream":
        plugin = default_registry.get_output(output_fmt)
        if plugin is None:
            choices = ", ".join(["stream", *default_registry.list_outputs()])
            raise click.BadParameter(f"Unknown output {output_fmt!r}. Choose from: {choices}", param_hint="--output")

    paths: list[Path] = []
    for target in targets:
        try:
            paths.append(resolve_target(target, settings.log_dir))
        except FileNotFoundError as exc:
            if strict:
                err_console.print(f"[red]{exc}[/red]")
                sys.exit(1)
            err_console.print(f"[yellow]{exc}[/yellow]")
    if not paths:
        err_console.print("[yellow]No log files to read.[/yellow]")
        return

    window = TimeWindow(after=after, before=before, inclusive=inclusive)
    limit = CountLimit(count) if count else None
    search = MessageSearch(match) if match else None

    reader = LogReader(CMTraceParser(default_registry.reformatters))
    records = reader.read_many(
        _iter_sources(paths, tail, source or None, computer, strict),
        window=window,
        limit=limit,
        search=search,
        on_error="raise" if strict else "warn",
    )

    emitted = 0
    collected: list[LogRecord] = []
    try:
        for record in records:
            emitted += 1
            if plugin is None:
                console.print(_record_line(record))
            else:
                collected.append(record)
    except (LogReadError, OSError) as exc:
        err_console.print(f"[red]{exc}[/red]")
        sys.exit(1)

    if plugin is not None:
        click.echo(plugin.render(collected), nl=False)

    err_console.print(f"[dim]{emitted} entries from {len(paths)} file(s)[/dim]")


# ── parse-line ───────────────────────────────────────────────────────────────


@main.command("parse-line")
@click.argument("line")
@click.option("--source", "-s", default="", help="Component name for reformat rules.")
def parse_line(line: str, source: str) -> None:
    """Parse a single CMTrace line and print it as JSON.

    \b
    Example:
      ccmlog parse-line '<![LOG[Hi]LOG]!><time="09:15:30.500+060" date="03-14-2024">'
    """
    parser = CMTraceParser(default_registry.reformatters)
    try:
        entry = parser.parse_line(line, source)
    except CMTraceError as exc:
        err_console.print(f"[red]{exc}[/red]")
        sys.exit(1)

    if entry is None:
        err_console.print("[yellow]Line skipped (no message).[/yellow]")
        return
    click.echo(json.dumps({"timestamp": entry.timestamp.isoformat(), "message": entry.message}))


# ── plugins ──────────────────────────────────────────────────────────────────


@main.command()
def plugins() -> None:
    """List registered output formats and source reformat rules."""
    console.print("[bold]Outputs:[/bold] " + ", ".join(["stream", *default_registry.list_outputs()]))
    console.print("[bold]Reformat rules:[/bold] " + (", ".join(default_registry.list_reformatters()) or "none"))


if __name__ == "__main__":
    main()
