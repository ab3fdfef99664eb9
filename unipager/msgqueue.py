"""Priority queue of messages waiting for transmission."""

from __future__ import annotations

import logging
from collections import deque
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from unipager.message import Message
    from unipager.telemetry import Messages

log = logging.getLogger(__name__)

NUM_PRIORITIES = 5
"""Number of priorities; matches the network the pager connects to."""


class MessageQueue:
    """One FIFO per priority; the highest priority is served first."""

    def __init__(self) -> None:
        self._queues: list[deque[Message]] = [deque() for _ in range(NUM_PRIORITIES)]
        self._sent = [0] * NUM_PRIORITIES

    def enqueue(self, message: Message) -> None:
        """Add a message; those with a priority outside 1..5 are dropped."""
        if not 1 <= message.priority <= NUM_PRIORITIES:
            log.error("Tried to enqueue message for out of range priority.")
            return
        self._queues[message.priority - 1].append(message)

    def dequeue(self) -> Message | None:
        for priority in reversed(range(NUM_PRIORITIES)):
            pending = self._queues[priority]
            if pending:
                self._sent[priority] += 1
                return pending.popleft()
        return None

    def __len__(self) -> int:
        return sum(len(pending) for pending in self._queues)

    def is_empty(self) -> bool:
        return not any(self._queues)

    def telemetry_update(self, messages: Messages) -> None:
        """Copy queue lengths and sent counts into telemetry."""
        messages.queued = [len(pending) for pending in self._queues]
        messages.sent = list(self._sent)