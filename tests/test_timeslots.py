import queue
from unittest import mock

import pytest

from unipager.events import EventHandler, EventType
from unipager.timeslots import TimeSlot, TimeSlots, deciseconds, start

NS = 1_000_000_000


def at_seconds(seconds):
    return mock.patch("time.time_ns", return_value=int(seconds * NS))


def test_timeslots():
    slots = TimeSlots.parse("AC39")
    allowed = {i for i, flag in enumerate(slots.slots) if flag}
    assert allowed == {0x3, 0x9, 0xA, 0xC}
    nxt = slots.next_allowed()
    assert nxt.index in allowed
    until = nxt.duration_until()
    assert 0.0 <= until < 102.4


def test_deciseconds_is_exact_for_fractions():
    assert deciseconds(2.3) == 23
    assert deciseconds(0) == 0


@pytest.mark.parametrize(
    "seconds, index",
    [(0, 0), (6.3, 0), (6.4, 1), (102.3, 15), (102.4, 0)],
)
def test_slot_at(seconds, index):
    assert TimeSlot.at(seconds) == TimeSlot(index)


def test_next_wraps_around():
    assert TimeSlot(15).next() == TimeSlot(0)
    assert TimeSlot(3).next() == TimeSlot(4)


def test_invalid_index_rejected():
    with pytest.raises(ValueError):
        TimeSlot(16)


def test_reprs():
    assert repr(TimeSlot(10)) == "TimeSlot(A)"
    assert repr(TimeSlots.parse("AC39")) == "TimeSlots { 39AC }"


def test_parse_ignores_other_characters_and_accepts_lowercase():
    slots = TimeSlots.parse("1g-f")
    assert [i for i, flag in enumerate(slots.slots) if flag] == [1, 15]


def test_from_list():
    with pytest.raises(ValueError):
        TimeSlots.from_list([True] * 15)
    slots = TimeSlots.from_list([True] + [False] * 15 + [True, True])
    assert slots == TimeSlots.parse("0")


def test_current_and_active():
    with at_seconds(32.0):
        assert TimeSlot.current() == TimeSlot(5)
        assert TimeSlot(5).active()
        assert not TimeSlot(6).active()


def test_duration_until_current_is_zero():
    with at_seconds(0):
        assert TimeSlot(0).duration_until() == 0.0


def test_duration_until_later_slot():
    with at_seconds(0):
        assert TimeSlot(1).duration_until() == pytest.approx(6.4)


def test_duration_until_past_slot_uses_next_block():
    with at_seconds(32.0):
        assert TimeSlot(2).duration_until() == pytest.approx(83.2)


def test_next_allowed():
    with at_seconds(32.0):
        assert TimeSlots.parse("27").next_allowed() == TimeSlot(7)
        assert TimeSlots.parse("2").next_allowed() == TimeSlot(2)
        assert TimeSlots.parse("5").next_allowed() == TimeSlot(5)
        assert TimeSlots().next_allowed() is None


def test_is_current_allowed():
    with at_seconds(0):
        assert TimeSlots.parse("0").is_current_allowed()
        assert not TimeSlots.parse("1").is_current_allowed()


def test_calculate_budget():
    with at_seconds(0):
        assert TimeSlots.parse("01").calculate_budget() == 480
        assert TimeSlots.parse("1").calculate_budget() == 0


def test_budget_is_limited_to_consecutive_slots():
    with at_seconds(0):
        assert TimeSlots.parse("0123").calculate_budget() == TimeSlots.parse(
            "0123456789"
        ).calculate_budget()


def test_start_publishes_following_slots():
    inbox = queue.Queue(maxsize=2)
    with at_seconds(0), mock.patch("time.sleep"):
        start(EventHandler(inbox.put))
        first = inbox.get(timeout=5)
        second = inbox.get(timeout=5)
    assert first.kind is EventType.TIMESLOT
    assert first.payload == TimeSlot(1)
    assert second.payload == TimeSlot(2)