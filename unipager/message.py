"""Messages received from the network or the frontends."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from unipager.generator import Generator
from unipager.pocsag import PocsagMessage


class MessageProvider(ABC):
    """Source of further messages while a transmission is running."""

    @abstractmethod
    def next_message(self, count: int) -> Message | None:
        """Return the next message, given ``count`` codewords sent so far."""


def _parse_time(value: Any) -> datetime | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError("expires_on: expected a timestamp string")
    text = value[:-1] + "+00:00" if value.endswith(("Z", "z")) else value
    try:
        moment = datetime.fromisoformat(text)
    except ValueError:
        raise ValueError(f"expires_on: invalid timestamp {value!r}") from None
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def _format_time(moment: datetime | None) -> str | None:
    if moment is None:
        return None
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


@dataclass
class Message:
    id: str
    priority: int
    origin: str
    message: PocsagMessage
    expires_on: datetime | None = None

    def is_expired(self) -> bool:
        if self.expires_on is None:
            return False
        expires = self.expires_on
        if expires.tzinfo is None:
            expires = expires.replace(tzinfo=timezone.utc)
        return datetime.now(timezone.utc) >= expires

    def generator(self, provider: MessageProvider) -> Generator:
        """Codewords for this message followed by those the provider supplies."""
        return Generator(provider, self.message)

    @classmethod
    def from_dict(cls, data: Any) -> Message:
        if not isinstance(data, dict):
            raise ValueError("message must be a JSON object")
        for key in ("id", "origin"):
            if not isinstance(data.get(key), str):
                raise ValueError(f"{key}: expected a string")
        priority = data.get("priority")
        if isinstance(priority, bool) or not isinstance(priority, int) or priority < 0:
            raise ValueError("priority: expected a non-negative integer")
        protocol = data.get("protocol")
        if protocol != "pocsag":
            raise ValueError(f"unknown protocol {protocol!r}")
        if "message" not in data:
            raise ValueError("message: missing protocol content")
        return cls(
            id=data["id"],
            priority=priority,
            origin=data["origin"],
            message=PocsagMessage.from_dict(data["message"]),
            expires_on=_parse_time(data.get("expires_on")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "priority": self.priority,
            "origin": self.origin,
            "expires_on": _format_time(self.expires_on),
            "protocol": "pocsag",
            "message": self.message.to_dict(),
        }