"""Transmitter for the C9000 paging transmitter with a Raspberry Pi controller."""

from __future__ import annotations

import logging
import time
from typing import Any, Iterable, Optional

import serial

from unipager.config import Config
from unipager.gpio import Direction, Gpio
from unipager.model import Model
from unipager.transmitter import Transmitter, word_bytes

log = logging.getLogger(__name__)

_BAUDRATE = 38400
_WORDS_PER_CHUNK = 10


def _open_serial(path: str) -> Any:
    return serial.Serial(
        path,
        baudrate=_BAUDRATE,
        bytesize=serial.EIGHTBITS,
        parity=serial.PARITY_NONE,
        stopbits=serial.STOPBITS_ONE,
        xonxoff=False,
        rtscts=False,
    )


def _set_dummy_output_level(config: Config) -> None:
    log.info("Setting C9000 PA dummy output power")
    port_name = config.c9000.dummy_port
    try:
        port = _open_serial(port_name)
    except (OSError, ValueError):
        log.error("Unable to open serial port %s", port_name)
        return
    with port:
        try:
            port.write(bytes([config.c9000.dummy_pa_output_level]))
        except OSError:
            log.error("Unable to write data to the serial port %s", port_name)


class C9000Transmitter(Transmitter):
    """Streams codewords over the serial link, pacing by the board's send line."""

    def __init__(
        self,
        config: Config,
        serial_port: Optional[Any] = None,
        gpio: Optional[Any] = None,
    ) -> None:
        log.info("Initializing C9000 transmitter...")

        if config.c9000.dummy_enabled:
            _set_dummy_output_level(config)

        model = Model.get()
        log.info("Detected %s", model)

        if serial_port is None:
            serial_port = _open_serial(model.serial_port())
        if gpio is None:
            try:
                gpio = Gpio.open()
            except OSError as exc:
                raise OSError("Failed to map GPIO") from exc

        self.serial = serial_port
        self.reset_pin = gpio.pin(0, Direction.OUTPUT)
        self.ptt_pin = gpio.pin(2, Direction.OUTPUT)
        self.send_pin = gpio.pin(3, Direction.INPUT)
        self.status_led_pin = gpio.pin(10, Direction.OUTPUT)
        self.connected_led_pin = gpio.pin(11, Direction.OUTPUT)

        self.reset_pin.set_high()
        self.status_led_pin.set_high()
        self.connected_led_pin.set_high()

    def _flush(self) -> None:
        try:
            self.serial.flush()
        except OSError:
            log.error("Unable to flush serial port")

    def send(self, words: Iterable[int]) -> None:
        self.ptt_pin.set_high()
        try:
            for index, word in enumerate(words):
                if index % _WORDS_PER_CHUNK == 0:
                    self._flush()
                    time.sleep(0.01)
                    while not self.send_pin.read():
                        time.sleep(0.001)
                try:
                    self.serial.write(word_bytes(word))
                except OSError:
                    log.error("Unable to write data to the serial port")
                    return
            self._flush()
        finally:
            self.ptt_pin.set_low()