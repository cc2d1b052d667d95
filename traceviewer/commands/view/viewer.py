"""Trace viewer session: loads traces, shows the action tree, replays snapshots."""

from __future__ import annotations

import html
from pathlib import Path
from typing import Any

from playwright.async_api import Browser, BrowserContext, Page, Playwright
from rich.markup import escape

from traceviewer.commands.view.loader import load_trace_file
from traceviewer.commands.view.replayer import ReplayError, SnapshotReplayer
from traceviewer.commands.view.tree import ContextNode, build_page_tree
from traceviewer.commands.view.types import BROWSER_NAMES, SessionIndex, TraceFile
from traceviewer.formats.snapshot import PageSnapshot
from traceviewer.formats.trace_events import ActionEvent
from traceviewer.helpers.blob_store import BlobStore
from traceviewer.helpers.console import console


class TraceViewer:
    """One viewing session over any number of trace files.

    Usage::

        async with async_playwright() as p:
            viewer = TraceViewer(p, "traces/trace-resources")
            viewer.load("traces/worker-0.trace")
            for name in viewer.browser_names:
                await viewer.show(name)
    """

    def __init__(
        self,
        playwright: Playwright,
        storage_dir: str | Path,
        headless: bool = False,
    ):
        self.playwright = playwright
        self.blob_store = BlobStore(storage_dir)
        self.headless = headless
        self.traces: list[TraceFile] = []
        self.index = SessionIndex()
        self._context_by_id: dict[str, BrowserContext] = {}

    def load(self, trace_file: str | Path) -> TraceFile:
        """Parse *trace_file* and merge it into the session index.

        Raises ``TraceParseError`` before touching the index if any line is
        malformed, so earlier loads stay intact.
        """
        events = load_trace_file(trace_file)
        orphaned = self.index.add_events(events)
        for event in orphaned:
            console.print(
                f"[yellow]Skipping {event.type} event for unknown context "
                f"{escape(event.context_id)} in {escape(str(trace_file))}[/yellow]"
            )
        trace = TraceFile(trace_file=str(trace_file), events=events)
        self.traces.append(trace)
        return trace

    @property
    def browser_names(self) -> list[str]:
        return self.index.browser_names

    async def show(self, browser_name: str) -> Page:
        """Launch *browser_name* and open the UI page listing its actions."""
        if browser_name not in BROWSER_NAMES:
            raise ValueError(f"Unsupported browser: {browser_name}")
        browser_type = getattr(self.playwright, browser_name)
        browser = await browser_type.launch(headless=self.headless)
        ui_page = await browser.new_page()

        async def render_snapshot(source: Any, action: dict[str, Any]) -> None:
            await self.render_snapshot(browser, ActionEvent.model_validate(action))

        await ui_page.expose_binding("renderSnapshot", render_snapshot)
        nodes = build_page_tree(self.traces, self.index, browser_name)
        await ui_page.set_content(render_ui_html(nodes))
        return ui_page

    async def render_snapshot(self, browser: Browser, action: ActionEvent) -> SnapshotReplayer:
        """Replay the snapshot taken after *action* in a fresh page."""
        if action.snapshot is None:
            raise ReplayError(f"Action {action.action!r} has no snapshot")
        snapshot = PageSnapshot.model_validate_json(
            await self.blob_store.read_async(action.snapshot.sha1)
        )
        context = await self._ensure_context(browser, action.context_id)
        page = await context.new_page()
        replayer = SnapshotReplayer(
            self.index, self.blob_store, page, snapshot, action.context_id
        )
        await replayer.replay()
        return replayer

    async def _ensure_context(self, browser: Browser, context_id: str) -> BrowserContext:
        context = self._context_by_id.get(context_id)
        if context is None:
            event = self.index.get_context(context_id)
            if event is None:
                raise ReplayError(f"Unknown context {context_id!r}")
            options: dict[str, Any] = {"is_mobile": event.is_mobile}
            if event.viewport_size is not None:
                options["viewport"] = {
                    "width": event.viewport_size.width,
                    "height": event.viewport_size.height,
                }
            else:
                options["no_viewport"] = True
            if event.device_scale_factor is not None:
                options["device_scale_factor"] = event.device_scale_factor
            context = await browser.new_context(**options)
            self._context_by_id[context_id] = context
        return context


async def show_trace_viewer(
    playwright: Playwright,
    storage_dir: str | Path,
    trace_files: list[str | Path],
    headless: bool = False,
) -> list[Page]:
    """Load *trace_files* and open one viewer page per recorded browser."""
    viewer = TraceViewer(playwright, storage_dir, headless=headless)
    for trace_file in trace_files:
        viewer.load(trace_file)
    pages: list[Page] = []
    for browser_name in viewer.browser_names:
        pages.append(await viewer.show(browser_name))
    return pages


# ---------------------------------------------------------------------------
# UI page
# ---------------------------------------------------------------------------

_UI_STYLE = """
details { padding-left: 10px; }
.field { white-space: pre; }
button { display: block; }
"""


def render_ui_html(nodes: list[ContextNode]) -> str:
    """Render the context/page/action tree as a static HTML document."""
    parts = [f"<!DOCTYPE html><html><head><style>{_UI_STYLE}</style></head><body>"]
    for node in nodes:
        parts.append(_open_section(node.label))
        for page in node.pages.values():
            if page.page_id is not None:
                parts.append(_open_section(page.page_id))
            for action in page.actions:
                parts.append(_render_action(action))
            if page.page_id is not None:
                parts.append("</details>")
        parts.append("</details>")
    parts.append("</body></html>")
    return "".join(parts)


def _open_section(title: str, open_: bool = True) -> str:
    attr = " open" if open_ else ""
    return f"<details{attr}><summary>{html.escape(title)}</summary>"


def _field(text: str) -> str:
    return f'<div class="field">{html.escape(text)}</div>'


def _render_action(action: ActionEvent) -> str:
    parts = [_open_section(action.action, open_=False)]
    if action.label:
        parts.append(_field(f"label: {action.label}"))
    if action.target:
        parts.append(_field(f"target: {action.target}"))
    if action.value:
        parts.append(_field(f"value: {action.value}"))
    if action.duration_ms is not None:
        parts.append(_field(f"duration: {action.duration_ms:g}ms"))
    for title, text in (("error", action.error), ("stack", action.stack)):
        if text:
            parts.append(_open_section(title, open_=False) + _field(text) + "</details>")
    if action.logs:
        parts.append(
            _open_section("logs", open_=False) + _field("\n".join(action.logs)) + "</details>"
        )
    if action.snapshot is not None:
        payload = html.escape(action.model_dump_json(by_alias=True), quote=True)
        parts.append(
            f'<button data-action="{payload}" '
            'onclick="window.renderSnapshot(JSON.parse(this.dataset.action))">'
            f"snapshot after ({action.snapshot.duration:g}ms)</button>"
        )
    parts.append("</details>")
    return "".join(parts)

