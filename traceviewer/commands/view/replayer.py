"""Reproduce a captured DOM snapshot in a live Playwright page.

Every request the page makes is intercepted and answered from the trace:
frame documents from the snapshot HTML, everything else from recorded
resources in the blob store. Requests with no recorded answer are aborted.
"""

from __future__ import annotations

import asyncio
from enum import Enum

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Frame, Page, Route
from rich.markup import escape

from traceviewer.commands.view.matcher import match_resource
from traceviewer.commands.view.types import SessionIndex
from traceviewer.formats.snapshot import FrameSnapshot, PageSnapshot
from traceviewer.helpers.blob_store import BlobStore, ResourceNotFoundError
from traceviewer.helpers.console import console
from traceviewer.helpers.http import headers_to_dict


class ReplayError(Exception):
    """Raised when a snapshot cannot be replayed at all."""


class ReplayState(Enum):
    IDLE = "idle"
    ROUTE_INSTALLED = "route_installed"
    ROOT_SERVED = "root_served"
    FRAMES_ATTACHED = "frames_attached"
    SETTLED = "settled"


class SnapshotReplayer:
    """Drives one page through the replay of one snapshot.

    Route handlers run as tasks on the event loop that owns the replayer, so
    ``unknown_urls`` and the pending list are only touched from that loop.
    """

    def __init__(
        self,
        index: SessionIndex,
        blob_store: BlobStore,
        page: Page,
        snapshot: PageSnapshot,
        context_id: str,
    ):
        self.index = index
        self.blob_store = blob_store
        self.page = page
        self.snapshot = snapshot
        self.context_id = context_id
        self.state = ReplayState.IDLE
        self.unknown_urls: set[str] = set()
        self._pending: list[asyncio.Future[None]] = []
        self._frame_by_url: dict[str, FrameSnapshot] = {}
        for frame_snapshot in snapshot.frames:
            self._frame_by_url.setdefault(frame_snapshot.url, frame_snapshot)

    async def replay(self) -> None:
        main_frame = self.snapshot.main_frame
        if main_frame is None:
            raise ReplayError("Snapshot has no frames")

        await self.page.route("**/*", self._on_route)
        self.state = ReplayState.ROUTE_INSTALLED

        await self.page.goto(main_frame.url)
        self.state = ReplayState.ROOT_SERVED

        await self._attach_child_frames(self.page.main_frame)
        self.state = ReplayState.FRAMES_ATTACHED

        await self._settle()
        self.state = ReplayState.SETTLED

    async def _on_route(self, route: Route) -> None:
        task = asyncio.ensure_future(self._resolve(route))
        self._pending.append(task)
        await task

    async def _settle(self) -> None:
        # Handlers may still be registering while we wait on earlier ones.
        while self._pending:
            pending, self._pending = self._pending, []
            await asyncio.gather(*pending)

    async def _resolve(self, route: Route) -> None:
        request = route.request
        url = request.url

        document = self._frame_by_url.get(url)
        if document is not None:
            await route.fulfill(content_type="text/html", body=document.html.encode("utf-8"))
            return

        frame_url = self._frame_url(route)
        frame_snapshot = self._frame_by_url.get(frame_url) if frame_url is not None else None
        if frame_snapshot is None:
            await self._unknown(route)
            return

        resource = match_resource(self.index, url, self.context_id, frame_snapshot.frame_id)
        override = frame_snapshot.find_override(url)
        if override is not None:
            sha1 = override.sha1
        elif resource is not None:
            sha1 = resource.sha1
        else:
            await self._unknown(route)
            return

        try:
            body = await self.blob_store.read_async(sha1)
        except ResourceNotFoundError:
            await self._unknown(route)
            return

        headers: dict[str, str] = {}
        content_type: str | None = None
        if resource is not None:
            headers = headers_to_dict(resource.response_headers)
            content_type = resource.content_type or None
        headers["Access-Control-Allow-Origin"] = "*"
        await route.fulfill(content_type=content_type, body=body, headers=headers)

    def _frame_url(self, route: Route) -> str | None:
        try:
            return route.request.frame.url
        except PlaywrightError:
            # Service worker requests have no frame.
            return None

    async def _unknown(self, route: Route) -> None:
        url = route.request.url
        if url not in self.unknown_urls:
            self.unknown_urls.add(url)
            console.print(f"[yellow]Request to unknown url: {escape(url)}[/yellow]")
        await route.abort()

    async def _attach_child_frames(self, frame: Frame) -> None:
        for child_frame in frame.child_frames:
            await child_frame.wait_for_load_state()
            url = child_frame.url
            for frame_snapshot in self.snapshot.frames:
                if url.endswith(frame_snapshot.url):
                    await self._attach_child_frames(child_frame)
                    break
