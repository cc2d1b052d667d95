"""In-memory data classes for loaded traces.

``SessionIndex`` holds the lookup tables derived from every trace loaded into
one viewer. It is owned by a single ``TraceViewer`` so independent viewing
sessions never share state.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from traceviewer.formats.trace_events import (
    ActionEvent,
    ContextCreatedEvent,
    ContextDestroyedEvent,
    PageCreatedEvent,
    PageDestroyedEvent,
    ResourceEvent,
    TraceEvent,
)
from traceviewer.helpers.http import remove_hash

BROWSER_NAMES = ("chromium", "firefox", "webkit")


@dataclass
class TraceFile:
    """One loaded trace source and its events in file order."""

    trace_file: str
    events: list[TraceEvent] = field(default_factory=list)

    @property
    def actions(self) -> list[ActionEvent]:
        return [e for e in self.events if isinstance(e, ActionEvent)]


@dataclass
class ContextData:
    """Display entry for one recorded browser context."""

    label: str
    actions: list[ActionEvent] = field(default_factory=list)


@dataclass
class SessionIndex:
    """Lookup tables over the union of all loaded traces."""

    resources_by_url: dict[str, list[ResourceEvent]] = field(default_factory=dict)
    contexts_by_id: dict[str, ContextCreatedEvent] = field(default_factory=dict)
    # dict keys keep browser names in first-seen order
    _browser_names: dict[str, None] = field(default_factory=dict)

    @property
    def browser_names(self) -> list[str]:
        return list(self._browser_names)

    def add_events(self, events: list[TraceEvent]) -> list[TraceEvent]:
        """Index *events* in order and return the ones whose context is unknown."""
        orphaned: list[TraceEvent] = []
        for event in events:
            match event:
                case ContextCreatedEvent():
                    self._browser_names.setdefault(event.browser_name, None)
                    self.contexts_by_id[event.context_id] = event
                case ResourceEvent() if event.context_id not in self.contexts_by_id:
                    orphaned.append(event)
                case ResourceEvent():
                    key = remove_hash(event.url)
                    self.resources_by_url.setdefault(key, []).append(event)
                case (
                    ContextDestroyedEvent()
                    | PageCreatedEvent()
                    | PageDestroyedEvent()
                    | ActionEvent()
                ):
                    if event.context_id not in self.contexts_by_id:
                        orphaned.append(event)
        return orphaned

    def resources_for(self, url: str) -> list[ResourceEvent]:
        """Recorded resources for *url* (fragment ignored), in load order."""
        return self.resources_by_url.get(remove_hash(url), [])

    def get_context(self, context_id: str) -> ContextCreatedEvent | None:
        return self.contexts_by_id.get(context_id)
