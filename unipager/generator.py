"""POCSAG codeword generation."""

from __future__ import annotations

import logging
from enum import Enum, auto
from typing import TYPE_CHECKING

from unipager import encoding
from unipager.pocsag import MessageType, PocsagMessage

if TYPE_CHECKING:
    from unipager.message import MessageProvider

log = logging.getLogger(__name__)

PREAMBLE_LENGTH = 18
"""Preamble length in 32-bit codewords."""

PREAMBLE_WORD = 0xAAAAAAAA
SYNC_WORD = 0x7CD215D8
IDLE_WORD = 0x7A89C197

_MASK = 0xFFFFFFFF


def crc(codeword: int) -> int:
    """Add the BCH check bits to a codeword."""
    remainder = codeword & _MASK
    for i in range(22):
        if remainder & (0x80000000 >> i):
            remainder ^= 0xED200000 >> i
    return (codeword | remainder) & _MASK


def parity(codeword: int) -> int:
    """Set the even parity bit of a codeword."""
    bits = codeword ^ (codeword >> 1)
    bits ^= bits >> 2
    bits ^= bits >> 4
    bits ^= bits >> 8
    bits ^= bits >> 16
    return (codeword | (bits & 1)) & _MASK


class _State(Enum):
    PREAMBLE = auto()
    ADDRESS = auto()
    MESSAGE = auto()
    COMPLETED = auto()


class Generator:
    """Iterator of 32-bit POCSAG codewords for a stream of messages."""

    def __init__(self, provider: MessageProvider, first_message: PocsagMessage) -> None:
        self._provider = provider
        self._state = _State.PREAMBLE
        self._codewords = PREAMBLE_LENGTH
        self._count = 0
        self._pos = 0
        self._encoding = encoding.ALPHANUM
        self._set_message(first_message)

    def _set_message(self, message: PocsagMessage | None) -> None:
        self._message = message
        self._data = message.data.encode("utf-8") if message is not None else b""

    def _next_message(self) -> _State:
        upcoming = self._provider.next_message(self._count - 1)
        self._set_message(upcoming.message if upcoming is not None else None)
        return _State.ADDRESS if self._message is not None else _State.COMPLETED

    def __iter__(self) -> Generator:
        return self

    def __next__(self) -> int:
        log.debug("Next generated codeword: (%d, %s)", self._codewords, self._state)
        self._count += 1

        if self._codewords == 0:
            if self._state is _State.COMPLETED:
                raise StopIteration
            if self._state is _State.PREAMBLE:
                self._state = _State.ADDRESS
            self._codewords = 16
            return SYNC_WORD

        if self._state is _State.PREAMBLE:
            self._codewords -= 1
            return PREAMBLE_WORD
        if self._state is _State.ADDRESS:
            return self._address_word()
        if self._state is _State.MESSAGE:
            return self._message_word()

        self._codewords -= 1
        return IDLE_WORD

    def _address_word(self) -> int:
        message = self._message
        position = 16 - self._codewords
        self._codewords -= 1

        # Idle until the batch position matches the frame required by the RIC.
        if ((message.ric & 0b111) << 1) != position:
            return IDLE_WORD

        if not self._data:
            self._state = self._next_message()
        else:
            self._pos = 0
            self._encoding = (
                encoding.NUMERIC if message.mtype is MessageType.NUMERIC else encoding.ALPHANUM
            )
            self._state = _State.MESSAGE

        address = (message.ric & 0x001FFFF8) << 10
        func = (message.func & 0b11) << 11
        return parity(crc(address | func))

    def _symbol(self, index: int) -> int:
        if index < len(self._data):
            return self._encoding.encode(self._data[index])
        return self._encoding.trailing

    def _message_word(self) -> int:
        self._codewords -= 1
        bits = self._encoding.bits
        pos = self._pos
        index = pos // bits
        symbol = self._symbol(index) >> (pos % bits)
        codeword = 0

        for _ in range(20):
            codeword = (codeword << 1) | (symbol & 1)
            pos += 1
            if pos % bits == 0:
                index += 1
                symbol = self._symbol(index)
            else:
                symbol >>= 1

        self._pos = pos
        if pos > len(self._data) * bits:
            self._state = self._next_message()

        return parity(crc(0x80000000 | (codeword << 11)))


class TestGenerator:
    """Iterator yielding ``length`` preamble words, used for test transmissions."""

    __test__ = False

    def __init__(self, length: int) -> None:
        self._length = length

    def __iter__(self) -> TestGenerator:
        return self

    def __next__(self) -> int:
        if self._length <= 0:
            raise StopIteration
        self._length -= 1
        return PREAMBLE_WORD