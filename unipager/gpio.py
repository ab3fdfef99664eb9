"""GPIO access through memory-mapped registers or the sysfs interface."""

from __future__ import annotations

import mmap
import os
import struct
from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path
from typing import Any, Optional, Sequence

from unipager.model import Model

SYSFS_ROOT = Path("/sys/class/gpio")
_MAP_SIZE = 0x1000
_REG_SET = 7
_REG_CLEAR = 10
_REG_LEVEL = 13
_WORD = struct.Struct("<I")
_MASK = 0xFFFFFFFF


class Direction(Enum):
    INPUT = "in"
    OUTPUT = "out"


class Pin(ABC):
    """A single GPIO line."""

    direction: Direction

    @abstractmethod
    def set_direction(self, direction: Direction) -> None:
        """Configure the pin as input or output."""

    @abstractmethod
    def set(self, value: bool) -> None:
        """Drive an output pin high or low."""

    @abstractmethod
    def read(self) -> bool:
        """Read the level of an input pin."""

    def set_high(self) -> None:
        self.set(True)

    def set_low(self) -> None:
        self.set(False)

    def close(self) -> None:
        """Release the pin; nothing to do by default."""

    def __enter__(self) -> Pin:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _require(self, direction: Direction) -> None:
        if self.direction is not direction:
            raise RuntimeError(
                f"pin is configured as {self.direction.name.lower()}, "
                f"not {direction.name.lower()}"
            )


class SysFsGpioPin(Pin):
    """A pin driven through the kernel's sysfs GPIO files."""

    def __init__(
        self, number: int, direction: Direction, root: str | Path = SYSFS_ROOT
    ) -> None:
        self.number = number
        self.direction = direction
        self._root = Path(root)
        self._dir = self._root / f"gpio{number}"
        self._export()
        self.set_direction(direction)

    def _export(self) -> None:
        if self._dir.exists():
            return
        try:
            (self._root / "export").write_text(str(self.number))
        except OSError as exc:
            raise OSError(f"Failed to export GPIO pin {self.number}.") from exc

    def set_direction(self, direction: Direction) -> None:
        self.direction = direction
        try:
            (self._dir / "direction").write_text(direction.value)
        except OSError as exc:
            raise OSError("Failed to set GPIO direction.") from exc

    def set(self, value: bool) -> None:
        self._require(Direction.OUTPUT)
        try:
            (self._dir / "value").write_text("1" if value else "0")
        except OSError:
            pass

    def read(self) -> bool:
        self._require(Direction.INPUT)
        try:
            return int((self._dir / "value").read_text().strip()) != 0
        except (OSError, ValueError):
            return False


class MemGpioPin(Pin):
    """A pin driven through the memory-mapped GPIO register block."""

    def __init__(self, base: Any, number: int, direction: Direction) -> None:
        self._base = base
        self.number = number
        self.direction = direction
        self.set_direction(direction)

    def _read_register(self, index: int) -> int:
        return _WORD.unpack_from(self._base, index * 4)[0]

    def _write_register(self, index: int, value: int) -> None:
        _WORD.pack_into(self._base, index * 4, value & _MASK)

    def set_direction(self, direction: Direction) -> None:
        self.direction = direction
        index = self.number // 10
        shift = (self.number % 10) * 3
        value = self._read_register(index) & ~(0b111 << shift)
        if direction is Direction.OUTPUT:
            value |= 0b1 << shift
        self._write_register(index, value)

    def set(self, value: bool) -> None:
        self._require(Direction.OUTPUT)
        register = _REG_SET if value else _REG_CLEAR
        self._write_register(register, 1 << self.number)

    def read(self) -> bool:
        self._require(Direction.INPUT)
        return bool(self._read_register(_REG_LEVEL) & (1 << self.number))

    def close(self) -> None:
        """Drive an output low and return it to input mode."""
        if self.direction is Direction.OUTPUT:
            self.set_low()
            self.set_direction(Direction.INPUT)


class Gpio:
    """Factory for pins, translating header numbers through the board's mapping."""

    def __init__(
        self,
        pin_mapping: Optional[Sequence[int]] = None,
        base: Any = None,
        sysfs_root: str | Path = SYSFS_ROOT,
    ) -> None:
        self.pin_mapping = list(pin_mapping) if pin_mapping is not None else None
        self.base = base
        self.sysfs_root = Path(sysfs_root)

    @classmethod
    def open(cls) -> Gpio:
        """Map the register block of this board, or fall back to sysfs.

        Raises OSError if the registers cannot be mapped.
        """
        model = Model.get()
        address = model.gpio_base()
        if address is None:
            return cls(pin_mapping=model.pin_mapping())

        fd = os.open("/dev/mem", os.O_RDWR | os.O_SYNC)
        try:
            base = mmap.mmap(
                fd,
                _MAP_SIZE,
                flags=mmap.MAP_SHARED,
                prot=mmap.PROT_READ | mmap.PROT_WRITE,
                offset=address,
            )
        finally:
            os.close(fd)
        return cls(pin_mapping=model.pin_mapping(), base=base)

    def _map(self, number: int) -> int:
        if self.pin_mapping is not None and 0 <= number < len(self.pin_mapping):
            return self.pin_mapping[number]
        return number

    def pin(self, number: int, direction: Direction) -> Pin:
        mapped = self._map(number)
        if self.base is not None:
            return MemGpioPin(self.base, mapped, direction)
        return SysFsGpioPin(mapped, direction, self.sysfs_root)