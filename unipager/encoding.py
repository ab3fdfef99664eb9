"""Character encodings for POCSAG message payloads."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable


@dataclass(frozen=True)
class Encoding:
    """How a payload byte becomes a symbol of ``bits`` bits."""

    encode: Callable[[int], int]
    bits: int
    trailing: int


def encode_alphanum(byte: int) -> int:
    """Seven-bit ASCII; anything outside it becomes '?'."""
    return byte if 0 <= byte <= 127 else 0x3F


_NUMERIC_SYMBOLS = {
    ord("0"): 0x0,
    ord("1"): 0x1,
    ord("2"): 0x2,
    ord("3"): 0x3,
    ord("4"): 0x4,
    ord("5"): 0x5,
    ord("6"): 0x6,
    ord("7"): 0x7,
    ord("8"): 0x8,
    ord("9"): 0x9,
    ord("*"): 0xA,
    ord("U"): 0xB,
    ord(" "): 0xC,
    ord("-"): 0xD,
    ord(")"): 0xE,
    ord("("): 0xF,
}


def encode_numeric(byte: int) -> int:
    """Four-bit numeric code; unknown characters become a space."""
    return _NUMERIC_SYMBOLS.get(byte, 0xC)


ALPHANUM = Encoding(encode=encode_alphanum, bits=7, trailing=0x0)
NUMERIC = Encoding(encode=encode_numeric, bits=4, trailing=0xC)