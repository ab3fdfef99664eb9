"""Transmitter using an RFM69 module behind a serial link."""

from __future__ import annotations

import logging
from typing import Any, Iterable, Optional

import serial

from unipager.config import Config
from unipager.transmitter import Transmitter, word_bytes

log = logging.getLogger(__name__)

END_OF_TRANSMISSION = b"\x17"


class RFM69Transmitter(Transmitter):
    """Streams codewords to the module and ends each transmission with EOT."""

    def __init__(self, config: Config, port: Optional[Any] = None) -> None:
        log.info("Initializing RFM69 transmitter...")
        if port is None:
            port = serial.Serial(
                config.rfm69.port,
                baudrate=38400,
                bytesize=serial.EIGHTBITS,
                parity=serial.PARITY_NONE,
                stopbits=serial.STOPBITS_ONE,
                xonxoff=False,
                rtscts=False,
            )
        self.port = port

    def send(self, words: Iterable[int]) -> None:
        for word in words:
            try:
                self.port.write(word_bytes(word))
            except OSError:
                log.error("Unable to write data to the serial port")
                return

        try:
            self.port.write(END_OF_TRANSMISSION)
        except OSError:
            log.error("Unable to send end of transmission byte")
            return

        try:
            self.port.flush()
        except OSError:
            log.error("Unable to flush serial port")