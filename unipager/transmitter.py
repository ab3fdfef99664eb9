"""Common interface of all transmitter back ends."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable


class Transmitter(ABC):
    """Sends a stream of 32-bit codewords over the air."""

    @abstractmethod
    def send(self, words: Iterable[int]) -> None:
        """Transmit every codeword the iterable yields."""


def word_bytes(word: int) -> bytes:
    """A 32-bit codeword as four bytes, most significant first."""
    return word.to_bytes(4, "big")