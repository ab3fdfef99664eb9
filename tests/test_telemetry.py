import queue
from datetime import datetime, timezone
from unittest import mock

import pytest

from unipager import telemetry
from unipager.events import Event, EventHandler, EventType
from unipager.msgqueue import NUM_PRIORITIES
from unipager.telemetry import Messages, Node, Telemetry, TelemetryConfig
from unipager.timeslots import TimeSlots


@pytest.fixture
def published():
    events = []
    telemetry.set_event_handler(EventHandler(events.append))
    yield events
    telemetry.set_event_handler(None)


def test_defaults_to_dict():
    data = Telemetry().to_dict()
    assert data["config"]["software"] == {"name": "UniPager", "version": "2.0.0-alpha"}
    assert data["timeslots"] == [False] * 16
    assert data["node"]["connected_since"] is None
    assert data["messages"]["queued"] == [0] * NUM_PRIORITIES
    assert data["onair"] is False


def test_datetime_serialized_as_utc():
    since = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    data = Telemetry(node=Node(name="host", port=5672, connected_since=since)).to_dict()
    assert data["node"]["connected_since"] == "2024-01-02T03:04:05Z"
    assert data["node"]["port"] == 5672


def test_set_value_publishes_only_changes(published):
    telemetry.set_value("onair", True)
    telemetry.set_value("onair", True)
    assert published == [Event(EventType.TELEMETRY_PARTIAL_UPDATE, {"onair": True})]
    assert telemetry.get_telemetry().onair is True
    telemetry.set_value("onair", False)
    assert telemetry.get_telemetry().onair is False


def test_set_value_timeslots(published):
    slots = TimeSlots.parse("0")
    telemetry.set_value("timeslots", slots)
    assert published[-1].payload == {"timeslots": list(slots.slots)}
    assert telemetry.get_telemetry().timeslots == slots
    telemetry.set_value("timeslots", TimeSlots())


def test_update_in_place(published):
    telemetry.update("messages", lambda m: m.queued.__setitem__(0, 3))
    assert telemetry.get_telemetry().messages.queued[0] == 3
    payload = published[-1].payload["messages"]
    assert payload["queued"][0] == 3
    assert payload["sent"] == [0] * NUM_PRIORITIES
    telemetry.update("messages", lambda m: Messages())
    assert telemetry.get_telemetry().messages == Messages()


def test_update_without_change_publishes_nothing(published):
    telemetry.update("hardware", lambda hardware: None)
    assert published == []


def test_update_with_replacement(published):
    telemetry.update("node", lambda node: Node(name="host", port=5672))
    assert telemetry.get_telemetry().node == Node(name="host", port=5672)
    assert published[-1].payload["node"]["name"] == "host"
    telemetry.update("node", lambda node: Node())


def test_unknown_key_rejected():
    with pytest.raises(KeyError):
        telemetry.update("missing", lambda value: None)
    with pytest.raises(KeyError):
        telemetry.set_value("missing", 1)


def test_get_returns_copy():
    copy = telemetry.get_telemetry()
    copy.config.timeslots[0] = True
    assert telemetry.get_telemetry().config == TelemetryConfig()


def test_start_publishes_full_telemetry():
    inbox = queue.Queue(maxsize=1)
    try:
        with mock.patch("time.sleep"):
            telemetry.start(EventHandler(inbox.put))
            event = inbox.get(timeout=5)
    finally:
        telemetry.set_event_handler(None)
    assert event.kind is EventType.TELEMETRY_UPDATE
    assert event.payload == telemetry.get_telemetry()