"""Shared transmitter status, reported to the network and the frontends."""

from __future__ import annotations

import copy
import threading
import time
from dataclasses import dataclass, field, fields, is_dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from unipager.events import Event, EventHandler, EventType
from unipager.msgqueue import NUM_PRIORITIES
from unipager.timeslots import SLOT_COUNT, TimeSlot, TimeSlots

VERSION = "2.0.0-alpha"
_INTERVAL = 30


@dataclass
class Node:
    name: str = ""
    port: int = 0
    connected: bool = False
    connected_since: Optional[datetime] = None


@dataclass
class Ntp:
    synced: bool = False
    offset: int = 0
    servers: list[str] = field(default_factory=list)


@dataclass
class Messages:
    queued: list[int] = field(default_factory=lambda: [0] * NUM_PRIORITIES)
    sent: list[int] = field(default_factory=lambda: [0] * NUM_PRIORITIES)


@dataclass
class TransmitterSoftware:
    name: str = "UniPager"
    version: str = VERSION


@dataclass
class TelemetryConfig:
    timeslots: list[bool] = field(default_factory=lambda: [False] * SLOT_COUNT)
    software: TransmitterSoftware = field(default_factory=TransmitterSoftware)


@dataclass
class Hardware:
    platform: str = ""


def _to_json(value: Any) -> Any:
    if is_dataclass(value) and not isinstance(value, (TimeSlot, TimeSlots)):
        return {f.name: _to_json(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, TimeSlots):
        return list(value.slots)
    if isinstance(value, TimeSlot):
        return value.index
    if isinstance(value, datetime):
        moment = value if value.tzinfo else value.replace(tzinfo=timezone.utc)
        return moment.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")
    if isinstance(value, (list, tuple)):
        return [_to_json(item) for item in value]
    return value


@dataclass
class Telemetry:
    onair: bool = False
    timeslots: TimeSlots = field(default_factory=TimeSlots)
    node: Node = field(default_factory=Node)
    ntp: Ntp = field(default_factory=Ntp)
    messages: Messages = field(default_factory=Messages)
    config: TelemetryConfig = field(default_factory=TelemetryConfig)
    hardware: Hardware = field(default_factory=Hardware)

    def to_dict(self) -> dict[str, Any]:
        """The JSON representation sent to the network and frontends."""
        return _to_json(self)


_KEYS = frozenset(f.name for f in fields(Telemetry))
_lock = threading.RLock()
_telemetry = Telemetry()
_event_handler: EventHandler | None = None


def get_telemetry() -> Telemetry:
    """A copy of the current telemetry."""
    with _lock:
        return copy.deepcopy(_telemetry)


def set_event_handler(handler: EventHandler | None) -> None:
    """Set where partial updates are published; None stops publishing."""
    global _event_handler
    with _lock:
        _event_handler = handler


def _check_key(key: str) -> None:
    if key not in _KEYS:
        raise KeyError(key)


def _publish_partial(key: str, value: Any) -> None:
    if _event_handler is not None:
        _event_handler.publish(
            Event(EventType.TELEMETRY_PARTIAL_UPDATE, {key: _to_json(value)})
        )


def update(key: str, updater: Callable[[Any], Any]) -> None:
    """Let ``updater`` modify one section; publish it if it changed.

    The updater may modify the section in place or return a replacement.
    """
    with _lock:
        _check_key(key)
        current = getattr(_telemetry, key)
        old = copy.deepcopy(current)
        replacement = updater(current)
        if replacement is not None:
            setattr(_telemetry, key, replacement)
            current = replacement
        if current != old:
            _publish_partial(key, current)


def set_value(key: str, value: Any) -> None:
    """Replace one section; publish it if the value differs."""
    with _lock:
        _check_key(key)
        if getattr(_telemetry, key) != value:
            setattr(_telemetry, key, value)
            _publish_partial(key, value)


def start(event_handler: EventHandler) -> threading.Thread:
    """Publish the full telemetry every thirty seconds."""
    set_event_handler(event_handler)

    def run() -> None:
        while True:
            time.sleep(_INTERVAL)
            event_handler.publish(Event(EventType.TELEMETRY_UPDATE, get_telemetry()))

    thread = threading.Thread(target=run, name="telemetry", daemon=True)
    thread.start()
    return thread