"""Terminal rendering of loaded traces."""

from __future__ import annotations

from rich.markup import escape
from rich.table import Table
from rich.tree import Tree

from traceviewer.commands.view.tree import build_page_tree
from traceviewer.commands.view.types import SessionIndex, TraceFile
from traceviewer.formats.trace_events import ActionEvent
from traceviewer.helpers.console import console


def _truncate(s: str, max_len: int) -> str:
    if len(s) <= max_len:
        return s
    return s[: max_len - 3] + "..."


def inspect_summary(traces: list[TraceFile], index: SessionIndex) -> None:
    """Print per-browser counts for the loaded traces."""
    table = Table(title="Traces")
    table.add_column("Browser", style="cyan")
    table.add_column("Contexts", justify="right")
    table.add_column("Actions", justify="right")
    table.add_column("Snapshots", justify="right")

    for browser_name in index.browser_names:
        nodes = build_page_tree(traces, index, browser_name)
        actions = [a for n in nodes for p in n.pages.values() for a in p.actions]
        table.add_row(
            browser_name,
            str(len(nodes)),
            str(len(actions)),
            str(sum(1 for a in actions if a.snapshot is not None)),
        )
    console.print(table)

    resource_count = sum(len(r) for r in index.resources_by_url.values())
    console.print(
        f"  {len(traces)} trace file(s), {resource_count} resources, "
        f"{len(index.resources_by_url)} distinct URLs"
    )


def inspect_tree(traces: list[TraceFile], index: SessionIndex, browser_name: str) -> None:
    """Print the context → page → action tree for one browser."""
    root = Tree(f"[bold]{escape(browser_name)}[/bold]")
    for node in build_page_tree(traces, index, browser_name):
        context_branch = root.add(f"[cyan]{escape(node.label)}[/cyan]")
        for page in node.pages.values():
            branch = context_branch
            if page.page_id is not None:
                branch = context_branch.add(escape(page.page_id))
            for action in page.actions:
                branch.add(_describe_action(action))
    console.print(root)


def _describe_action(action: ActionEvent) -> str:
    parts = [f"[bold]{escape(action.action)}[/bold]"]
    if action.label:
        parts.append(escape(_truncate(action.label, 60)))
    if action.target:
        parts.append(f"target={escape(_truncate(action.target, 60))}")
    if action.value:
        parts.append(f"value={escape(_truncate(action.value, 40))}")
    if action.duration_ms is not None:
        parts.append(f"{action.duration_ms:g}ms")
    if action.logs:
        parts.append(f"[dim]{len(action.logs)} log line(s)[/dim]")
    if action.snapshot is not None:
        parts.append("[green]snapshot[/green]")
    if action.error:
        parts.append(f"[red]{escape(_truncate(action.error, 80))}[/red]")
    return "  ".join(parts)
