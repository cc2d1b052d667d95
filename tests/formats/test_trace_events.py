"""Tests for Pydantic models in traceviewer/formats/."""

import pytest
from pydantic import ValidationError

from tests.conftest import action, context_created, frame_snapshot, resource
from traceviewer.formats.snapshot import PageSnapshot
from traceviewer.formats.trace_events import (
    ActionEvent,
    ContextCreatedEvent,
    ResourceEvent,
    trace_event_adapter,
)


class TestTraceEvents:
    def test_dispatch_on_type(self):
        event = trace_event_adapter.validate_python(context_created("c1", "webkit"))
        assert isinstance(event, ContextCreatedEvent)
        assert event.browser_name == "webkit"
        assert event.viewport_size is not None
        assert event.viewport_size.width == 1280

    def test_resource_headers_keep_order(self):
        event = trace_event_adapter.validate_python(
            resource("https://a/x.css", headers=[("B", "2"), ("A", "1"), ("B", "3")])
        )
        assert isinstance(event, ResourceEvent)
        assert [(h.name, h.value) for h in event.response_headers] == [
            ("B", "2"),
            ("A", "1"),
            ("B", "3"),
        ]

    def test_action_optional_fields(self):
        event = trace_event_adapter.validate_python(action(page_id=None))
        assert isinstance(event, ActionEvent)
        assert event.page_id is None
        assert event.snapshot is None
        assert event.logs == ()
        assert event.duration_ms == 250

    def test_action_snapshot_ref(self):
        event = trace_event_adapter.validate_python(action(snapshot_sha1="abc"))
        assert isinstance(event, ActionEvent)
        assert event.snapshot is not None
        assert event.snapshot.sha1 == "abc"
        assert event.snapshot.duration == 12

    def test_events_are_immutable(self):
        event = trace_event_adapter.validate_python(resource("https://a/x.js"))
        with pytest.raises(ValidationError):
            event.url = "https://b/y.js"  # pyright: ignore[reportAttributeAccessIssue]

    def test_missing_required_field(self):
        data = context_created()
        del data["browserName"]
        with pytest.raises(ValidationError):
            trace_event_adapter.validate_python(data)

    def test_wire_roundtrip_uses_aliases(self):
        event = ActionEvent.model_validate(action(snapshot_sha1="abc", label="Submit"))
        dumped = event.model_dump(by_alias=True)
        assert dumped["contextId"] == "c1"
        assert dumped["pageId"] == "p1"
        assert ActionEvent.model_validate(dumped) == event


class TestSnapshot:
    def test_main_frame_is_first(self):
        snap = PageSnapshot.model_validate(
            {
                "frames": [
                    frame_snapshot("https://a/", frame_id="main"),
                    frame_snapshot("https://b/frame.html", frame_id="child"),
                ]
            }
        )
        assert snap.main_frame is not None
        assert snap.main_frame.frame_id == "main"

    def test_empty_snapshot_has_no_main_frame(self):
        assert PageSnapshot().main_frame is None

    def test_find_override_exact_url(self):
        snap = PageSnapshot.model_validate(
            {"frames": [frame_snapshot("https://a/", overrides=[("https://a/s.css", "h1")])]}
        )
        frame = snap.frames[0]
        override = frame.find_override("https://a/s.css")
        assert override is not None and override.sha1 == "h1"
        assert frame.find_override("https://a/s.css#x") is None
