"""Pydantic models for the trace event log (newline-delimited JSON).

Each line of a trace file is one event object discriminated by its ``type``
field. Field aliases follow the recorder's camelCase wire names.
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter


class Header(BaseModel):
    name: str
    value: str

    model_config = {"frozen": True}


class ViewportSize(BaseModel):
    width: int
    height: int

    model_config = {"frozen": True}


class SnapshotRef(BaseModel):
    sha1: str
    duration: float = 0  # ms spent capturing the snapshot

    model_config = {"frozen": True}


class _Event(BaseModel):
    context_id: str = Field(alias="contextId")

    model_config = {"populate_by_name": True, "frozen": True}


class ContextCreatedEvent(_Event):
    type: Literal["context-created"] = "context-created"
    browser_name: str = Field(alias="browserName")
    is_mobile: bool = Field(default=False, alias="isMobile")
    viewport_size: ViewportSize | None = Field(default=None, alias="viewportSize")
    device_scale_factor: float | None = Field(default=None, alias="deviceScaleFactor")


class ContextDestroyedEvent(_Event):
    type: Literal["context-destroyed"] = "context-destroyed"


class PageCreatedEvent(_Event):
    type: Literal["page-created"] = "page-created"
    page_id: str = Field(alias="pageId")


class PageDestroyedEvent(_Event):
    type: Literal["page-destroyed"] = "page-destroyed"
    page_id: str = Field(alias="pageId")


class ActionEvent(_Event):
    type: Literal["action"] = "action"
    page_id: str | None = Field(default=None, alias="pageId")
    action: str
    target: str | None = None
    value: str | None = None
    label: str | None = None
    start_time: float = Field(default=0, alias="startTime")
    end_time: float = Field(default=0, alias="endTime")
    error: str | None = None
    stack: str | None = None
    logs: tuple[str, ...] = ()
    snapshot: SnapshotRef | None = None

    @property
    def duration_ms(self) -> float | None:
        if self.start_time and self.end_time:
            return self.end_time - self.start_time
        return None


class ResourceEvent(_Event):
    type: Literal["resource"] = "resource"
    frame_id: str = Field(alias="frameId")
    url: str
    content_type: str = Field(default="", alias="contentType")
    response_headers: tuple[Header, ...] = Field(default=(), alias="responseHeaders")
    sha1: str


TraceEvent = Annotated[
    Union[
        ContextCreatedEvent,
        ContextDestroyedEvent,
        PageCreatedEvent,
        PageDestroyedEvent,
        ActionEvent,
        ResourceEvent,
    ],
    Field(discriminator="type"),
]

EVENT_TYPES = frozenset(
    {
        "context-created",
        "context-destroyed",
        "page-created",
        "page-destroyed",
        "action",
        "resource",
    }
)

trace_event_adapter: TypeAdapter[TraceEvent] = TypeAdapter(TraceEvent)
