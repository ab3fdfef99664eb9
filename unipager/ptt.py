"""Push-to-talk control of the radio."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

import serial

from unipager.config import PttConfig, PttMethod
from unipager.gpio import Direction, Gpio, Pin
from unipager.model import Model

log = logging.getLogger(__name__)


class Ptt(ABC):
    """Keys the transmitter on and off."""

    @abstractmethod
    def set(self, status: bool) -> None:
        """Key (True) or release (False) the transmitter."""


@dataclass
class GpioPtt(Ptt):
    pin: Pin
    inverted: bool = False

    def set(self, status: bool) -> None:
        self.pin.set(status != self.inverted)


@dataclass
class SerialDtrPtt(Ptt):
    port: Any
    inverted: bool = False

    def set(self, status: bool) -> None:
        self.port.dtr = status != self.inverted


@dataclass
class SerialRtsPtt(Ptt):
    port: Any
    inverted: bool = False

    def set(self, status: bool) -> None:
        self.port.rts = status != self.inverted


def ptt_from_config(config: PttConfig) -> Ptt:
    """Open the PTT line described by the configuration."""
    if config.method is PttMethod.GPIO:
        log.info(
            "Detected hardware model: %s (GPIOs are only supported on correctly "
            "matched hardware)",
            Model.get(),
        )
        try:
            gpio = Gpio.open()
        except OSError as exc:
            raise OSError(
                "Failed to map GPIO. Do you have sufficient permissions "
                "to access GPIO pins?"
            ) from exc
        return GpioPtt(gpio.pin(config.gpio_pin, Direction.OUTPUT), config.inverted)

    port = serial.Serial(config.serial_port)
    if config.method is PttMethod.SERIAL_DTR:
        return SerialDtrPtt(port, config.inverted)
    return SerialRtsPtt(port, config.inverted)