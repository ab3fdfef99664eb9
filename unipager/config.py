"""Transmitter configuration stored as JSON on disk."""

from __future__ import annotations

import copy
import json
import logging
import threading
from dataclasses import dataclass, field, fields, is_dataclass
from enum import Enum
from pathlib import Path
from typing import Any

log = logging.getLogger(__name__)

CONFIG_FILE = "config.json"

_U8 = (0, 0xFF)
_U16 = (0, 0xFFFF)
_U32 = (0, 0xFFFFFFFF)
_U64 = (0, 0xFFFFFFFFFFFFFFFF)
_I16 = (-0x8000, 0x7FFF)
_USIZE = (0, None)


def _int(default: int, bounds: tuple[int, int | None]) -> Any:
    return field(default=default, metadata={"bounds": bounds})


def _default_fallback_servers() -> list[tuple[str, int]]:
    return [
        ("dapnetdc1.db0sda.ampr.org", 5672),
        ("dapnetdc2.db0sda.ampr.org", 5672),
        ("dapnetdc3.db0sda.ampr.org", 5672),
    ]


@dataclass
class C9000Config:
    baudrate: int = _int(38400, _U32)
    dummy_enabled: bool = False
    dummy_port: str = "/dev/ttyUSB0"
    dummy_pa_output_level: int = _int(0, _U8)


@dataclass
class RaspagerConfig:
    freq: int = _int(439987500, _U32)
    freq_corr: int = _int(0, _I16)
    pa_output_level: int = _int(63, _U8)
    mod_deviation: int = _int(13, _U16)


@dataclass
class RFM69Config:
    port: str = "/dev/ttyUSB0"


@dataclass
class AudioConfig:
    device: str = "default"
    level: int = _int(127, _U8)
    inverted: bool = False
    tx_delay: int = _int(0, _USIZE)
    baudrate: int = _int(1200, _USIZE)


class PttMethod(Enum):
    GPIO = "Gpio"
    SERIAL_DTR = "SerialDtr"
    SERIAL_RTS = "SerialRts"


@dataclass
class PttConfig:
    method: PttMethod = PttMethod.GPIO
    inverted: bool = False
    gpio_pin: int = _int(0, _USIZE)
    serial_port: str = "/dev/ttyS0"


@dataclass
class MasterConfig:
    server: str = "dapnetdc2.db0sda.ampr.org"
    port: int = _int(80, _U16)
    call: str = ""
    auth: str = ""
    fallback: list[tuple[str, int]] = field(default_factory=_default_fallback_servers)
    reconnect_timeout: int = _int(30, _U64)
    # In standalone mode no server connection is made and time slots are ignored.
    standalone_mode: bool = False


class TransmitterType(Enum):
    DUMMY = "Dummy"
    AUDIO = "Audio"
    C9000 = "C9000"
    RASPAGER = "Raspager"
    RASPAGER2 = "Raspager2"
    RFM69 = "RFM69"

    def __str__(self) -> str:
        return _TRANSMITTER_NAMES[self]


_TRANSMITTER_NAMES = {
    TransmitterType.DUMMY: "Dummy",
    TransmitterType.AUDIO: "Audio",
    TransmitterType.C9000: "C9000",
    TransmitterType.RASPAGER: "Raspager1",
    TransmitterType.RASPAGER2: "Raspager2",
    TransmitterType.RFM69: "RFM69",
}


def _check_int(name: str, value: Any, bounds: tuple[int, int | None]) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name}: expected an integer, got {value!r}")
    low, high = bounds
    if value < low or (high is not None and value > high):
        raise ValueError(f"{name}: {value} is out of range")
    return value


def _coerce(name: str, value: Any, default: Any, bounds: Any) -> Any:
    if is_dataclass(default):
        if not isinstance(value, dict):
            raise ValueError(f"{name}: expected an object")
        return _from_dict(type(default), value)
    if isinstance(default, Enum):
        try:
            return type(default)(value)
        except ValueError:
            raise ValueError(f"{name}: unknown variant {value!r}") from None
    if isinstance(default, bool):
        if not isinstance(value, bool):
            raise ValueError(f"{name}: expected a boolean")
        return value
    if isinstance(default, int):
        return _check_int(name, value, bounds or _USIZE)
    if isinstance(default, str):
        if not isinstance(value, str):
            raise ValueError(f"{name}: expected a string")
        return value
    if isinstance(default, list):
        if not isinstance(value, list):
            raise ValueError(f"{name}: expected a list")
        servers = []
        for entry in value:
            if not isinstance(entry, (list, tuple)) or len(entry) != 2:
                raise ValueError(f"{name}: expected [host, port] pairs")
            host, port = entry
            if not isinstance(host, str):
                raise ValueError(f"{name}: host must be a string")
            servers.append((host, _check_int(name, port, _U16)))
        return servers
    raise ValueError(f"{name}: unsupported value {value!r}")


def _from_dict(cls: type, data: dict[str, Any]) -> Any:
    result = cls()
    for f in fields(cls):
        if f.name in data:
            current = getattr(result, f.name)
            value = _coerce(f.name, data[f.name], current, f.metadata.get("bounds"))
            setattr(result, f.name, value)
    return result


def _to_json(value: Any) -> Any:
    if is_dataclass(value):
        return {f.name: _to_json(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (list, tuple)):
        return [_to_json(item) for item in value]
    return value


@dataclass
class Config:
    master: MasterConfig = field(default_factory=MasterConfig)
    transmitter: TransmitterType = TransmitterType.DUMMY
    ptt: PttConfig = field(default_factory=PttConfig)
    raspager: RaspagerConfig = field(default_factory=RaspagerConfig)
    c9000: C9000Config = field(default_factory=C9000Config)
    audio: AudioConfig = field(default_factory=AudioConfig)
    rfm69: RFM69Config = field(default_factory=RFM69Config)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON representation of the configuration."""
        return _to_json(self)

    @classmethod
    def from_dict(cls, data: Any) -> Config:
        """Build a configuration; missing keys take their defaults."""
        if not isinstance(data, dict):
            raise ValueError("configuration must be a JSON object")
        return _from_dict(cls, data)

    @classmethod
    def load(cls, path: str | Path = CONFIG_FILE) -> Config:
        """Load the file, creating it from defaults if it does not exist."""
        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            log.info("Creating config file from default config.")
            config = cls()
            config.save(path)
            return config
        try:
            return cls.from_dict(json.loads(text))
        except ValueError:
            log.error("Failed to parse config file. Using default.")
            return cls()

    def save(self, path: str | Path = CONFIG_FILE) -> None:
        Path(path).write_text(json.dumps(self.to_dict(), indent=2), encoding="utf-8")


_lock = threading.Lock()
_current: Config | None = None


def get_config() -> Config:
    """Return a copy of the active configuration, loading it on first use."""
    global _current
    with _lock:
        if _current is None:
            _current = Config.load()
        return copy.deepcopy(_current)


def set_config(config: Config) -> None:
    """Replace the active configuration and write it to disk."""
    global _current
    with _lock:
        _current = copy.deepcopy(config)
        _current.save()