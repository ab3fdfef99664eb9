"""Time slot arithmetic for the shared paging channel.

Time is divided into blocks of 102.4 seconds, each holding sixteen slots of
6.4 seconds. A transmitter may only send in the slots it has been given.
"""

from __future__ import annotations

import logging
import string
import threading
import time
from dataclasses import dataclass

from unipager.events import Event, EventHandler, EventType

log = logging.getLogger(__name__)

SLOT_COUNT = 16
_NS_PER_DECISECOND = 100_000_000
_NS_PER_SECOND = 1_000_000_000
_BLOCK_DECISECONDS = 1 << 10
_BAUDRATE = 1200
_MAX_CONSECUTIVE = 5


def deciseconds(seconds: float) -> int:
    """Whole deciseconds contained in a time given in seconds."""
    return _ns_to_decis(round(seconds * _NS_PER_SECOND))


def _ns_to_decis(nanoseconds: int) -> int:
    return nanoseconds // _NS_PER_DECISECOND


def _slot_of(decis: int) -> int:
    return (decis >> 6) & 0b1111


@dataclass(frozen=True, repr=False)
class TimeSlot:
    """One of the sixteen slots of a block."""

    index: int

    def __post_init__(self) -> None:
        if not 0 <= self.index < SLOT_COUNT:
            raise ValueError(f"time slot index {self.index} is out of range")

    def __repr__(self) -> str:
        return f"TimeSlot({self.index:X})"

    @classmethod
    def current(cls) -> TimeSlot:
        return cls(_slot_of(_ns_to_decis(time.time_ns())))

    @classmethod
    def at(cls, time: float) -> TimeSlot:
        """The slot at a time given in seconds since the epoch."""
        return cls(_slot_of(deciseconds(time)))

    def active(self) -> bool:
        return self == TimeSlot.current()

    def next(self) -> TimeSlot:
        return TimeSlot((self.index + 1) % SLOT_COUNT)

    def duration_until(self) -> float:
        """Seconds until this slot starts; zero if it is the current one."""
        now_ns = time.time_ns()
        now_decis = _ns_to_decis(now_ns)
        current = _slot_of(now_decis)

        if self.index == current:
            return 0.0

        block_start = now_decis & ~(_BLOCK_DECISECONDS - 1)
        # A slot that is already over lies in the next block.
        if self.index < current:
            block_start += _BLOCK_DECISECONDS

        start_ns = (block_start + (self.index << 6)) * _NS_PER_DECISECOND
        remaining = start_ns - now_ns
        if remaining < 0:
            log.error("TimeSlot calculation broken")
            log.error("Current Slot: %X This Slot: %X", current, self.index)
            log.error("Now: %d ns", now_ns)
            log.error("Start: %d ns", start_ns)
            return 0.0 if self.active() else 1.0
        return remaining / _NS_PER_SECOND


@dataclass(frozen=True, repr=False)
class TimeSlots:
    """The set of slots a transmitter is allowed to use."""

    slots: tuple[bool, ...] = (False,) * SLOT_COUNT

    def __post_init__(self) -> None:
        if len(self.slots) != SLOT_COUNT:
            raise ValueError(f"expected {SLOT_COUNT} time slots, got {len(self.slots)}")
        object.__setattr__(self, "slots", tuple(bool(slot) for slot in self.slots))

    def __repr__(self) -> str:
        allowed = "".join(f"{i:X}" for i, slot in enumerate(self.slots) if slot)
        return f"TimeSlots {{ {allowed} }}"

    @classmethod
    def from_list(cls, slots: list[bool]) -> TimeSlots:
        """Build from a list holding at least sixteen flags; extra ones are ignored."""
        flags = list(slots)
        if len(flags) < SLOT_COUNT:
            raise ValueError(f"expected {SLOT_COUNT} time slots, got {len(flags)}")
        return cls(tuple(flags[:SLOT_COUNT]))

    @classmethod
    def parse(cls, text: str) -> TimeSlots:
        """Parse a string of hex digits naming the allowed slots; other characters are ignored."""
        flags = [False] * SLOT_COUNT
        for char in text:
            if char in string.hexdigits:
                flags[int(char, 16)] = True
        return cls(tuple(flags))

    def is_allowed(self, slot: TimeSlot) -> bool:
        return self.slots[slot.index]

    def is_current_allowed(self) -> bool:
        return self.is_allowed(TimeSlot.current())

    def next_allowed(self) -> TimeSlot | None:
        """The first allowed slot starting from the current one, if any."""
        current = TimeSlot.current().index
        for offset in range(SLOT_COUNT):
            index = (current + offset) % SLOT_COUNT
            if self.slots[index]:
                return TimeSlot(index)
        return None

    def calculate_budget(self) -> int:
        """Codewords that fit before the run of allowed slots ends."""
        end = TimeSlot.current()
        if not self.is_allowed(end):
            return 0

        slots = 1
        while slots < _MAX_CONSECUTIVE and self.is_allowed(end):
            slots += 1
            end = end.next()

        millis = int(end.duration_until() * 1000)
        return millis * _BAUDRATE // (1000 * 32)


def start(event_handler: EventHandler) -> threading.Thread:
    """Publish an event at the start of every time slot."""

    def run() -> None:
        timeslot = TimeSlot.current()
        while True:
            timeslot = timeslot.next()
            time.sleep(timeslot.duration_until())
            event_handler.publish(Event(EventType.TIMESLOT, timeslot))

    thread = threading.Thread(target=run, name="timeslots", daemon=True)
    thread.start()
    return thread