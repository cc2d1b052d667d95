"""Parse newline-delimited trace event logs."""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import ValidationError

from traceviewer.formats.trace_events import EVENT_TYPES, TraceEvent, trace_event_adapter


class TraceParseError(Exception):
    """Raised when a line of a trace file cannot be parsed into an event."""

    def __init__(self, source: str, line_number: int, reason: str):
        super().__init__(f"{source}:{line_number}: {reason}")
        self.source = source
        self.line_number = line_number
        self.reason = reason


def load_trace_events(text: str, source: str = "<trace>") -> list[TraceEvent]:
    """Parse every non-empty line of *text* into an event, in file order.

    Lines with an unrecognised ``type`` are skipped. Anything else that does
    not parse aborts the whole call with ``TraceParseError``.
    """
    events: list[TraceEvent] = []
    for line_number, raw in enumerate(text.split("\n"), start=1):
        line = raw.strip()
        if not line:
            continue
        try:
            data = json.loads(line)
        except json.JSONDecodeError as e:
            raise TraceParseError(source, line_number, f"invalid JSON ({e.msg})") from e
        if not isinstance(data, dict):
            raise TraceParseError(source, line_number, "event is not a JSON object")
        event_type = data.get("type")
        if event_type is not None and not isinstance(event_type, str):
            raise TraceParseError(source, line_number, "event type is not a string")
        if event_type not in EVENT_TYPES:
            continue
        try:
            events.append(trace_event_adapter.validate_python(data))
        except ValidationError as e:
            raise TraceParseError(
                source, line_number, f"invalid {data['type']} event ({e.error_count()} errors)"
            ) from e
    return events


def load_trace_file(path: str | Path) -> list[TraceEvent]:
    """Read and parse a trace file from disk."""
    path = Path(path)
    return load_trace_events(path.read_text(encoding="utf-8"), source=str(path))
