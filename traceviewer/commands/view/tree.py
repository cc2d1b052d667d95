"""Build the trace → context → page → action structure shown by the viewer."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field

from traceviewer.commands.view.types import ContextData, SessionIndex, TraceFile
from traceviewer.formats.trace_events import (
    ActionEvent,
    ContextCreatedEvent,
    PageCreatedEvent,
    TraceEvent,
)


def _known_events(traces: list[TraceFile]) -> Iterator[tuple[TraceFile, TraceEvent]]:
    # Same rule as SessionIndex.add_events: a context exists from its
    # context-created event onwards, across traces in load order.
    seen: set[str] = set()
    for trace in traces:
        for event in trace.events:
            if isinstance(event, ContextCreatedEvent):
                seen.add(event.context_id)
            if event.context_id in seen:
                yield trace, event


def build_context_tree(
    traces: list[TraceFile], index: SessionIndex, browser_name: str
) -> dict[str, ContextData]:
    """Group actions by recorded context for one browser.

    Labels are ``"<trace file> :: context<N>"`` where N counts, per trace
    file, the contexts of *browser_name* in the order their first action is
    met. Actions of other browsers, or logged before their context was
    created, are left out.
    """
    context_data: dict[str, ContextData] = {}
    counters: dict[int, int] = {}
    for trace, event in _known_events(traces):
        if not isinstance(event, ActionEvent):
            continue
        context_event = index.get_context(event.context_id)
        if context_event is None or context_event.browser_name != browser_name:
            continue
        data = context_data.get(context_event.context_id)
        if data is None:
            counter = counters.get(id(trace), 0) + 1
            counters[id(trace)] = counter
            data = ContextData(label=f"{trace.trace_file} :: context{counter}")
            context_data[context_event.context_id] = data
        data.actions.append(event)
    return context_data


@dataclass
class PageNode:
    page_id: str | None
    actions: list[ActionEvent] = field(default_factory=list)


@dataclass
class ContextNode:
    context_id: str
    label: str
    # Key None holds context-level actions (no page)
    pages: dict[str | None, PageNode] = field(default_factory=dict)

    @property
    def action_count(self) -> int:
        return sum(len(p.actions) for p in self.pages.values())


def build_page_tree(
    traces: list[TraceFile], index: SessionIndex, browser_name: str
) -> list[ContextNode]:
    """Like ``build_context_tree`` but splits each context's actions by page.

    Pages appear in ``page-created`` order; pages without actions are kept so
    the display mirrors the recording.
    """
    contexts = build_context_tree(traces, index, browser_name)
    page_order: dict[str, list[str]] = {}
    for _, event in _known_events(traces):
        if isinstance(event, PageCreatedEvent):
            page_order.setdefault(event.context_id, []).append(event.page_id)

    nodes: list[ContextNode] = []
    for context_id, data in contexts.items():
        node = ContextNode(context_id=context_id, label=data.label)
        for page_id in page_order.get(context_id, []):
            node.pages.setdefault(page_id, PageNode(page_id=page_id))
        for action in data.actions:
            node.pages.setdefault(action.page_id, PageNode(page_id=action.page_id))
            node.pages[action.page_id].actions.append(action)
        nodes.append(node)
    return nodes

