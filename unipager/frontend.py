"""Requests from and responses to the web frontend."""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any

from unipager.config import Config
from unipager.message import Message


class RequestType(Enum):
    SET_CONFIG = "SetConfig"
    DEFAULT_CONFIG = "DefaultConfig"
    SEND_MESSAGE = "SendMessage"
    AUTHENTICATE = "Authenticate"
    GET_CONFIG = "GetConfig"
    GET_TELEMETRY = "GetTelemetry"
    GET_TIMESLOT = "GetTimeslot"
    GET_VERSION = "GetVersion"
    RESTART = "Restart"
    SHUTDOWN = "Shutdown"
    TEST = "Test"


_WITH_PAYLOAD = frozenset(
    {RequestType.SET_CONFIG, RequestType.SEND_MESSAGE, RequestType.AUTHENTICATE}
)

_RESPONSE_KINDS = frozenset(
    {
        "Config",
        "Telemetry",
        "TelemetryUpdate",
        "Timeslot",
        "Version",
        "Message",
        "Log",
        "Authenticated",
    }
)


def _parse_payload(kind: RequestType, value: Any) -> Any:
    if kind is RequestType.AUTHENTICATE:
        if not isinstance(value, str):
            raise ValueError("Authenticate needs a string")
        return value
    if not isinstance(value, dict):
        raise ValueError(f"{kind.value} needs an object")
    try:
        if kind is RequestType.SET_CONFIG:
            return Config.from_dict(value)
        return Message.from_dict(value)
    except (KeyError, TypeError, AttributeError) as exc:
        raise ValueError(f"invalid {kind.value} payload") from exc


@dataclass(frozen=True)
class Request:
    """A request sent by a frontend client."""

    kind: RequestType
    payload: Any = None

    @classmethod
    def from_json(cls, text: str) -> Request:
        """Parse a request; raises ValueError if it is malformed."""
        data = json.loads(text)
        if isinstance(data, str):
            name, value, has_value = data, None, False
        elif isinstance(data, dict) and len(data) == 1:
            (name, value), = data.items()
            has_value = True
        else:
            raise ValueError("a request is a name or an object with one key")

        kind = RequestType(name)
        if kind not in _WITH_PAYLOAD:
            if value is not None:
                raise ValueError(f"{name} takes no value")
            return cls(kind)
        if not has_value:
            raise ValueError(f"{name} needs a value")
        return cls(kind, _parse_payload(kind, value))


@dataclass(frozen=True)
class Response:
    """A response or notification sent to a frontend client."""

    kind: str
    payload: Any = None

    def __post_init__(self) -> None:
        if self.kind not in _RESPONSE_KINDS:
            raise ValueError(f"unknown response kind {self.kind!r}")

    def _payload_json(self) -> Any:
        if self.kind in ("Config", "Telemetry", "Message"):
            return self.payload.to_dict()
        if self.kind == "Timeslot":
            return self.payload.index
        if self.kind == "Log":
            level, text = self.payload
            return [level, text]
        if self.kind == "Authenticated":
            return bool(self.payload)
        return self.payload

    def to_json(self) -> str:
        return json.dumps({self.kind: self._payload_json()})