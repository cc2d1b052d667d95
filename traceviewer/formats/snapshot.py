"""Pydantic models for captured DOM snapshots stored in the blob store."""

from __future__ import annotations

from pydantic import BaseModel, Field


class ResourceOverride(BaseModel):
    """Resource whose in-page content diverged from the network response.

    For example a stylesheet modified through CSSOM after it was loaded.
    """

    url: str
    sha1: str


class FrameSnapshot(BaseModel):
    frame_id: str = Field(alias="frameId")
    url: str
    html: str
    resource_overrides: list[ResourceOverride] = Field(
        default_factory=list, alias="resourceOverrides"
    )

    model_config = {"populate_by_name": True}

    def find_override(self, url: str) -> ResourceOverride | None:
        for override in self.resource_overrides:
            if override.url == url:
                return override
        return None


class PageSnapshot(BaseModel):
    frames: list[FrameSnapshot] = Field(default_factory=list)

    @property
    def main_frame(self) -> FrameSnapshot | None:
        return self.frames[0] if self.frames else None
