"""POCSAG message payloads."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class MessageType(Enum):
    NUMERIC = "numeric"
    ALPHANUM = "alphanum"


def _uint(name: str, value: Any, bits: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name}: expected an integer, got {value!r}")
    if not 0 <= value < (1 << bits):
        raise ValueError(f"{name}: {value} is out of range")
    return value


@dataclass
class PocsagMessage:
    mtype: MessageType = MessageType.ALPHANUM
    speed: int = 1200
    ric: int = 0
    func: int = 3
    data: str = ""

    def size(self) -> int:
        """Length of the payload in bytes."""
        return len(self.data.encode("utf-8"))

    @classmethod
    def from_dict(cls, data: Any) -> PocsagMessage:
        """Build a message; missing keys take their defaults."""
        if not isinstance(data, dict):
            raise ValueError("POCSAG message must be a JSON object")
        message = cls()
        if "type" in data:
            try:
                message.mtype = MessageType(data["type"])
            except ValueError:
                raise ValueError(f"unknown message type {data['type']!r}") from None
        if "speed" in data:
            message.speed = _uint("speed", data["speed"], 32)
        if "ric" in data:
            message.ric = _uint("ric", data["ric"], 32)
        if "func" in data:
            message.func = _uint("func", data["func"], 8)
        if "data" in data:
            if not isinstance(data["data"], str):
                raise ValueError("data: expected a string")
            message.data = data["data"]
        return message

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.mtype.value,
            "speed": self.speed,
            "ric": self.ric,
            "func": self.func,
            "data": self.data,
        }