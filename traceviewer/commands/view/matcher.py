"""Pick the recorded resource that answers a request made during replay."""

from __future__ import annotations

from traceviewer.commands.view.types import SessionIndex
from traceviewer.formats.trace_events import ResourceEvent


def match_resource(
    index: SessionIndex,
    url: str,
    context_id: str,
    preferred_frame_id: str | None = None,
) -> ResourceEvent | None:
    """Find a resource for *url* recorded in *context_id*.

    Resources are stored without the URL fragment while pages may reference
    them with one, so the lookup ignores it. Among same-context candidates the
    earliest recorded wins, unless one was fetched by *preferred_frame_id*.
    Returns None when nothing in the context was recorded for the URL.
    """
    resource: ResourceEvent | None = None
    for candidate in index.resources_for(url):
        if candidate.context_id != context_id:
            continue
        if resource is not None and candidate.frame_id != preferred_frame_id:
            continue
        resource = candidate
        if candidate.frame_id == preferred_frame_id:
            break
    return resource
