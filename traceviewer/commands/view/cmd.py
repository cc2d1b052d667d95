"""CLI commands for viewing traces: inspect in the terminal, replay in a browser."""

from __future__ import annotations

import asyncio
import os
from pathlib import Path

import click
from rich.markup import escape

from traceviewer.commands.view.loader import TraceParseError
from traceviewer.commands.view.types import BROWSER_NAMES, SessionIndex, TraceFile
from traceviewer.helpers.console import console

DEFAULT_STORAGE_DIRNAME = "trace-resources"


def resolve_storage_dir(storage_dir: str | None, trace_files: tuple[str, ...]) -> Path:
    """Pick the blob store directory: option, then $TRACE_STORAGE_DIR, then next to the first trace."""
    value = storage_dir or os.environ.get("TRACE_STORAGE_DIR")
    if value:
        return Path(value)
    return Path(trace_files[0]).parent / DEFAULT_STORAGE_DIRNAME


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in ("1", "true", "yes", "on")


@click.command()
@click.argument("trace_files", nargs=-1, required=True, type=click.Path(exists=True))
@click.option(
    "--browser",
    "browser_name",
    type=click.Choice(BROWSER_NAMES),
    default=None,
    help="Only list this browser's contexts",
)
def inspect(trace_files: tuple[str, ...], browser_name: str | None) -> None:
    """Print the context/page/action tree of one or more trace files."""
    from traceviewer.commands.view.inspect import inspect_summary, inspect_tree
    from traceviewer.commands.view.loader import load_trace_file

    traces: list[TraceFile] = []
    index = SessionIndex()
    for trace_file in trace_files:
        try:
            events = load_trace_file(trace_file)
        except TraceParseError as e:
            console.print(f"[red]{escape(str(e))}[/red]")
            raise SystemExit(1)
        index.add_events(events)
        traces.append(TraceFile(trace_file=trace_file, events=events))

    inspect_summary(traces, index)
    names = [browser_name] if browser_name else index.browser_names
    for name in names:
        console.print()
        inspect_tree(traces, index, name)


@click.command()
@click.argument("trace_files", nargs=-1, required=True, type=click.Path(exists=True))
@click.option(
    "-s",
    "--storage-dir",
    default=None,
    help="Directory of recorded resources and snapshots (default: $TRACE_STORAGE_DIR "
    f"or ./{DEFAULT_STORAGE_DIRNAME} next to the first trace)",
)
@click.option(
    "--browser",
    "browser_name",
    type=click.Choice(BROWSER_NAMES),
    default=None,
    help="Only open this browser",
)
@click.option(
    "--headless/--headed",
    default=None,
    help="Launch browsers headless (default: $TRACE_VIEWER_HEADLESS or headed)",
)
def show(
    trace_files: tuple[str, ...],
    storage_dir: str | None,
    browser_name: str | None,
    headless: bool | None,
) -> None:
    """Open a viewer per recorded browser and replay snapshots on demand.

    Runs until every viewer page is closed.
    """
    if headless is None:
        headless = _env_flag("TRACE_VIEWER_HEADLESS")
    storage = resolve_storage_dir(storage_dir, trace_files)
    console.print(f"[bold]Loading {len(trace_files)} trace file(s)[/bold]")
    console.print(f"  Resources: {storage}")

    try:
        asyncio.run(_run_show(list(trace_files), storage, browser_name, headless))
    except TraceParseError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise SystemExit(1)


async def _run_show(
    trace_files: list[str],
    storage_dir: Path,
    browser_name: str | None,
    headless: bool,
) -> None:
    from playwright.async_api import async_playwright

    from traceviewer.commands.view.viewer import TraceViewer

    async with async_playwright() as p:
        viewer = TraceViewer(p, storage_dir, headless=headless)
        for trace_file in trace_files:
            viewer.load(trace_file)

        names = [browser_name] if browser_name else viewer.browser_names
        if not names:
            console.print("[yellow]No browser contexts recorded in these traces[/yellow]")
            return
        pages = []
        for name in names:
            console.print(f"  Opening viewer for [cyan]{name}[/cyan]")
            pages.append(await viewer.show(name))
        click.echo("\n  Close the viewer window(s) to exit.\n")
        await asyncio.gather(*(page.wait_for_event("close", timeout=0) for page in pages))
