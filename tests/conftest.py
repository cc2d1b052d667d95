"""Shared test fixtures for traceviewer tests."""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from traceviewer.helpers.blob_store import BlobStore


def context_created(
    context_id: str = "c1",
    browser_name: str = "chromium",
    **extra: Any,
) -> dict[str, Any]:
    return {
        "type": "context-created",
        "contextId": context_id,
        "browserName": browser_name,
        "isMobile": False,
        "viewportSize": {"width": 1280, "height": 720},
        "deviceScaleFactor": 1,
        **extra,
    }


def page_created(context_id: str = "c1", page_id: str = "p1") -> dict[str, Any]:
    return {"type": "page-created", "contextId": context_id, "pageId": page_id}


def resource(
    url: str,
    context_id: str = "c1",
    frame_id: str = "f1",
    sha1: str = "0" * 40,
    content_type: str = "application/javascript",
    headers: list[tuple[str, str]] | None = None,
) -> dict[str, Any]:
    return {
        "type": "resource",
        "contextId": context_id,
        "frameId": frame_id,
        "url": url,
        "contentType": content_type,
        "responseHeaders": [{"name": n, "value": v} for n, v in headers or []],
        "sha1": sha1,
    }


def action(
    name: str = "click",
    context_id: str = "c1",
    page_id: str | None = "p1",
    snapshot_sha1: str | None = None,
    **extra: Any,
) -> dict[str, Any]:
    data: dict[str, Any] = {
        "type": "action",
        "contextId": context_id,
        "action": name,
        "startTime": 1000,
        "endTime": 1250,
        "logs": [],
        **extra,
    }
    if page_id is not None:
        data["pageId"] = page_id
    if snapshot_sha1 is not None:
        data["snapshot"] = {"sha1": snapshot_sha1, "duration": 12}
    return data


def to_ndjson(events: list[dict[str, Any]]) -> str:
    return "\n".join(json.dumps(e) for e in events) + "\n"


def write_trace(path: Path, events: list[dict[str, Any]]) -> Path:
    path.write_text(to_ndjson(events))
    return path


def store_blob(root: Path, data: bytes | str) -> str:
    """Write *data* into a blob store directory, returning its sha1."""
    if isinstance(data, str):
        data = data.encode("utf-8")
    sha1 = hashlib.sha1(data).hexdigest()
    root.mkdir(parents=True, exist_ok=True)
    (root / sha1).write_bytes(data)
    return sha1


def frame_snapshot(
    url: str,
    html: str = "<html></html>",
    frame_id: str = "f1",
    overrides: list[tuple[str, str]] | None = None,
) -> dict[str, Any]:
    return {
        "frameId": frame_id,
        "url": url,
        "html": html,
        "resourceOverrides": [{"url": u, "sha1": s} for u, s in overrides or []],
    }


def make_route(url: str, frame_url: str | None) -> MagicMock:
    """Build a mock Playwright Route for a request made by *frame_url*."""
    route = MagicMock()
    route.request.url = url
    route.request.frame.url = frame_url
    route.fulfill = AsyncMock()
    route.abort = AsyncMock()
    return route


def make_frame(url: str, children: list[MagicMock] | None = None) -> MagicMock:
    frame = MagicMock()
    frame.url = url
    frame.child_frames = children or []
    frame.wait_for_load_state = AsyncMock()
    return frame


class FakePage:
    """Stand-in for a Playwright Page that drives the installed route handler.

    ``goto`` requests the document, then every ``(url, frame_url)`` in
    *subresources* as the page would while loading.
    """

    def __init__(
        self,
        main_frame: MagicMock | None = None,
        subresources: list[tuple[str, str]] | None = None,
    ):
        self.main_frame = main_frame or make_frame("about:blank")
        self.subresources = subresources or []
        self.handler: Any = None
        self.pattern: str | None = None
        self.goto_url: str | None = None
        self.routes: list[MagicMock] = []

    async def route(self, pattern: str, handler: Any) -> None:
        self.pattern = pattern
        self.handler = handler

    async def fire(self, url: str, frame_url: str | None) -> MagicMock:
        route = make_route(url, frame_url)
        self.routes.append(route)
        await self.handler(route)
        return route

    async def goto(self, url: str) -> None:
        self.goto_url = url
        await self.fire(url, url)
        for sub_url, frame_url in self.subresources:
            await self.fire(sub_url, frame_url)

    def route_for(self, url: str) -> MagicMock:
        for route in self.routes:
            if route.request.url == url:
                return route
        raise AssertionError(f"no request for {url}")


@pytest.fixture
def store_dir(tmp_path: Path) -> Path:
    d = tmp_path / "trace-resources"
    d.mkdir()
    return d


@pytest.fixture
def blob_store(store_dir: Path) -> BlobStore:
    return BlobStore(store_dir)
