"""Console logging that also forwards records onto the event bus."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from unipager.events import Event, EventHandler, EventType

_PREFIX = "unipager"
_RESET = "\x1b[39m"


def _describe(levelno: int) -> tuple[int, str, str]:
    """Level number on the bus, display name and colour."""
    if levelno >= logging.ERROR:
        return 1, "ERROR", "\x1b[31m"
    if levelno >= logging.WARNING:
        return 2, "WARN", "\x1b[33m"
    if levelno >= logging.INFO:
        return 3, "INFO", "\x1b[32m"
    if levelno >= logging.DEBUG:
        return 4, "DEBUG", ""
    return 5, "TRACE", ""


class EventLogHandler(logging.Handler):
    """Prints records from this package at info level or above and publishes them."""

    def __init__(self, event_handler: EventHandler) -> None:
        super().__init__(logging.INFO)
        self.event_handler = event_handler

    def emit(self, record: logging.LogRecord) -> None:
        if record.levelno < logging.INFO or not record.name.startswith(_PREFIX):
            return
        number, name, color = _describe(record.levelno)
        message = record.getMessage()
        stamp = datetime.now(timezone.utc).strftime("%H:%M:%S.%f")
        print(f"{stamp} {color}{name}{_RESET} - {message}")
        self.event_handler.publish(Event(EventType.LOG, (number, message)))


def init(event_handler: EventHandler) -> EventLogHandler:
    """Install the handler on the package logger."""
    logger = logging.getLogger(_PREFIX)
    if any(isinstance(handler, EventLogHandler) for handler in logger.handlers):
        raise RuntimeError("Unable to setup logger")
    handler = EventLogHandler(event_handler)
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    return handler