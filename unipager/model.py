"""Detection of the single-board computer the pager runs on."""

from __future__ import annotations

import string
from dataclasses import dataclass
from enum import Enum, auto
from pathlib import Path
from typing import Optional

_CPUINFO = Path("/proc/cpuinfo")


class ModelKind(Enum):
    V1A = auto()
    V1B = auto()
    V1A_PLUS = auto()
    V1B_PLUS = auto()
    V2B = auto()
    V3B = auto()
    V3A_PLUS = auto()
    V3B_PLUS = auto()
    V4B = auto()
    PI400 = auto()
    ZERO = auto()
    ZERO_W = auto()
    ORANGE_PI = auto()
    UNKNOWN = auto()


_NAMES = {
    ModelKind.V1A: "Raspberry Pi 1 Model A",
    ModelKind.V1A_PLUS: "Raspberry Pi 1 Model A+",
    ModelKind.V1B_PLUS: "Raspberry Pi 1 Model B+",
    ModelKind.V2B: "Raspberry Pi 2 Model B",
    ModelKind.V3B: "Raspberry Pi 3 Model B",
    ModelKind.V3A_PLUS: "Raspberry Pi 3 Model A+",
    ModelKind.V3B_PLUS: "Raspberry Pi 3 Model B+",
    ModelKind.V4B: "Raspberry Pi 4 Model B",
    ModelKind.PI400: "Raspberry Pi 400",
    ModelKind.ZERO: "Raspberry Pi Zero",
    ModelKind.ZERO_W: "Raspberry Pi Zero W",
    ModelKind.ORANGE_PI: "Orange Pi",
    ModelKind.UNKNOWN: "Unknown Device",
}

_BCM2835_BASE = 0x20200000
_BCM2836_BASE = 0x3F200000
_BCM2711_BASE = 0xFE200000

_GPIO_BASES = {
    ModelKind.V1A: _BCM2835_BASE,
    ModelKind.V1B: _BCM2835_BASE,
    ModelKind.V1A_PLUS: _BCM2835_BASE,
    ModelKind.V1B_PLUS: _BCM2835_BASE,
    ModelKind.V2B: _BCM2836_BASE,
    ModelKind.V3B: _BCM2836_BASE,
    ModelKind.V3A_PLUS: _BCM2836_BASE,
    ModelKind.V3B_PLUS: _BCM2836_BASE,
    ModelKind.V4B: _BCM2711_BASE,
    ModelKind.PI400: _BCM2711_BASE,
    ModelKind.ZERO: _BCM2835_BASE,
    ModelKind.ZERO_W: _BCM2835_BASE,
}

_PINS_REV1 = (17, 18, 21, 22, 23, 24, 25, 4, 0, 1, 8, 7, 10, 9, 11, 14, 15)
_PINS_26 = (17, 18, 27, 22, 23, 24, 25, 4, 2, 3, 8, 7, 10, 9, 11, 14, 15)
_PINS_40 = _PINS_26 + (0, 0, 0, 0, 5, 6, 13, 19, 26, 12, 16, 20, 21, 0, 1)

_MAPPINGS = {
    ModelKind.V1A: _PINS_26,
    ModelKind.V1B: _PINS_26,
    ModelKind.V2B: _PINS_26,
    ModelKind.V1A_PLUS: _PINS_26,
    ModelKind.V1B_PLUS: _PINS_26,
    ModelKind.ZERO: _PINS_26,
    ModelKind.ZERO_W: _PINS_26,
    ModelKind.V3B: _PINS_40,
    ModelKind.V3A_PLUS: _PINS_40,
    ModelKind.V3B_PLUS: _PINS_40,
    ModelKind.V4B: _PINS_40,
    ModelKind.PI400: _PINS_40,
}


def _field(lines: list[str], name: str) -> Optional[str]:
    line = next((line for line in lines if line.startswith(name)), None)
    if line is None or ":" not in line:
        return None
    return line.split(":")[1].strip()


def _parse_revision(text: Optional[str]) -> int:
    if not text or any(char not in string.hexdigits for char in text):
        return 0
    value = int(text, 16)
    if value > 0xFFFFFFFF:
        return 0
    return value & 0x00FFFFFF


def _classify(revision: int, hardware: Optional[str]) -> Model:
    if 0x2 <= revision <= 0x3:
        return Model(ModelKind.V1B, rev=1)
    if 0x4 <= revision <= 0x6 or 0xD <= revision <= 0xF:
        return Model(ModelKind.V1B, rev=2)
    if 0x7 <= revision <= 0x9:
        return Model(ModelKind.V1A)
    if revision in (0x12, 0x15, 0x900021):
        return Model(ModelKind.V1A_PLUS)
    if revision in (0x10, 0x13, 0x900032):
        return Model(ModelKind.V1B_PLUS)
    if revision in (0xA01040, 0xA01041, 0xA21041, 0xA22042, 0xA02042):
        return Model(ModelKind.V2B)
    if revision in (0x900092, 0x900093, 0x920093):
        return Model(ModelKind.ZERO)
    if revision == 0x9000C1:
        return Model(ModelKind.ZERO_W)
    if revision in (0xA02082, 0xA22082, 0xA32082):
        return Model(ModelKind.V3B)
    if revision == 0x9020E0:
        return Model(ModelKind.V3A_PLUS)
    if revision == 0xA020D3:
        return Model(ModelKind.V3B_PLUS)
    if (
        revision == 0xA03111
        or 0xB03111 <= revision <= 0xB03115
        or 0xC03111 <= revision <= 0xC03115
        or 0xD03114 <= revision <= 0xD03115
    ):
        return Model(ModelKind.V4B)
    if revision == 0xC03130:
        return Model(ModelKind.PI400)
    if hardware in ("Allwinner sun8i Family", "sun8i"):
        return Model(ModelKind.ORANGE_PI)
    return Model(ModelKind.UNKNOWN)


@dataclass(frozen=True)
class Model:
    """A board model; ``rev`` is set only for the original Model B."""

    kind: ModelKind
    rev: Optional[int] = None

    @classmethod
    def get(cls) -> Model:
        """Detect the model of the running machine."""
        try:
            cpuinfo = _CPUINFO.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            return cls(ModelKind.UNKNOWN)
        return cls.from_cpuinfo(cpuinfo)

    @classmethod
    def from_cpuinfo(cls, cpuinfo: str) -> Model:
        """Detect the model from the text of /proc/cpuinfo."""
        lines = cpuinfo.split("\n")
        revision = _parse_revision(_field(lines, "Revision"))
        return _classify(revision, _field(lines, "Hardware"))

    def gpio_base(self) -> Optional[int]:
        """Physical address of the GPIO registers, if memory access is supported."""
        return _GPIO_BASES.get(self.kind)

    def pin_mapping(self) -> Optional[list[int]]:
        """BCM numbers of the header pins in wiring order, if known."""
        if self.kind is ModelKind.V1B and self.rev == 1:
            return list(_PINS_REV1)
        mapping = _MAPPINGS.get(self.kind)
        return list(mapping) if mapping is not None else None

    def serial_port(self) -> str:
        return "/dev/ttyAMA0"

    def __str__(self) -> str:
        if self.kind is ModelKind.V1B:
            return f"Raspberry Pi 1 Model B Rev. {self.rev}"
        return _NAMES[self.kind]