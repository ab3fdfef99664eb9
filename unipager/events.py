"""Event bus connecting the parts of the pager."""

from __future__ import annotations

import queue
import threading
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Callable, Optional

Sender = Callable[["Event"], None]


class EventType(Enum):
    TELEMETRY_UPDATE = auto()
    TELEMETRY_PARTIAL_UPDATE = auto()
    TIMESLOT = auto()
    TIMESLOTS_UPDATE = auto()
    CONFIG_UPDATE = auto()
    MESSAGE_RECEIVED = auto()
    REGISTER_CONNECTION = auto()
    REGISTER_WEBSOCKET = auto()
    REGISTER_SCHEDULER = auto()
    REGISTER_MAIN = auto()
    LOG = auto()
    TEST = auto()
    SHUTDOWN = auto()
    RESTART = auto()


@dataclass(frozen=True)
class Event:
    """An event and its payload; registration events carry a sender callable."""

    kind: EventType
    payload: Any = None


@dataclass(frozen=True)
class EventHandler:
    """Handle used to publish events onto the bus."""

    send: Sender

    def publish(self, event: Event) -> None:
        self.send(event)


_REGISTRATIONS = {
    EventType.REGISTER_CONNECTION: "connection",
    EventType.REGISTER_WEBSOCKET: "websocket",
    EventType.REGISTER_SCHEDULER: "scheduler",
    EventType.REGISTER_MAIN: "main",
}

_ROUTES = {
    EventType.CONFIG_UPDATE: ("connection", "scheduler"),
    EventType.TELEMETRY_UPDATE: ("websocket", "connection"),
    EventType.TELEMETRY_PARTIAL_UPDATE: ("websocket", "connection"),
    EventType.LOG: ("websocket",),
    EventType.TIMESLOT: ("websocket",),
    EventType.MESSAGE_RECEIVED: ("scheduler", "websocket"),
    EventType.TIMESLOTS_UPDATE: ("scheduler",),
    EventType.TEST: ("scheduler",),
    EventType.SHUTDOWN: ("connection", "scheduler", "main"),
    EventType.RESTART: ("connection", "scheduler", "main"),
}


@dataclass
class EventDispatcher:
    """Forwards each event to the registered parts that care about it."""

    connection: Optional[Sender] = None
    scheduler: Optional[Sender] = None
    websocket: Optional[Sender] = None
    main: Optional[Sender] = None

    def dispatch(self, event: Event) -> None:
        target = _REGISTRATIONS.get(event.kind)
        if target is not None:
            setattr(self, target, event.payload)
            return
        for name in _ROUTES.get(event.kind, ()):
            sender = getattr(self, name)
            if sender is not None:
                sender(event)


def channel() -> tuple[Sender, queue.Queue]:
    """An unbounded channel: a sending callable and the queue it feeds."""
    inbox: queue.Queue = queue.Queue()
    return inbox.put, inbox


def start() -> EventHandler:
    """Run the dispatcher on a background thread and return its handler."""
    send, receive = channel()
    dispatcher = EventDispatcher()

    def run() -> None:
        while True:
            dispatcher.dispatch(receive.get())

    threading.Thread(target=run, name="events", daemon=True).start()
    return EventHandler(send)