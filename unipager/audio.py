"""Transmitter producing baseband audio played through `aplay`."""

from __future__ import annotations

import logging
import subprocess
import time
from typing import Iterable, Optional

from unipager.config import Config
from unipager.ptt import Ptt, ptt_from_config
from unipager.transmitter import Transmitter

log = logging.getLogger(__name__)

SAMPLE_RATE = 48000
_MAX_LEVEL = 127


def create_bit_sample(sample_size: int, value: int) -> bytes:
    """``sample_size`` unsigned 8-bit samples of a constant value."""
    return bytes([value]) * sample_size


class AudioTransmitter(Transmitter):
    """Keys the PTT and plays the codewords as a two-level audio signal."""

    def __init__(self, config: Config, ptt: Optional[Ptt] = None) -> None:
        log.info(
            "Initializing audio transmitter with baudrate '%s'...", config.audio.baudrate
        )
        self.device = config.audio.device or "default"
        self.ptt = ptt if ptt is not None else ptt_from_config(config.ptt)
        self.inverted = config.audio.inverted
        self.level = min(config.audio.level, _MAX_LEVEL)
        self.tx_delay = config.audio.tx_delay
        self.samples_per_bit = SAMPLE_RATE // config.audio.baudrate
        self.ptt.set(False)

    def samples(self, words: Iterable[int]) -> bytes:
        """The raw U8 audio for the codewords, most significant bit first."""
        low = create_bit_sample(self.samples_per_bit, _MAX_LEVEL - self.level)
        high = create_bit_sample(self.samples_per_bit, _MAX_LEVEL + 1 + self.level)
        buffer = bytearray()
        for word in words:
            for shift in range(31, -1, -1):
                bit = bool(word & (1 << shift))
                buffer += low if bit != self.inverted else high
        return bytes(buffer)

    def _command(self) -> list[str]:
        return [
            "aplay", "-t", "raw", "-N", "-f", "U8", "-c", "1",
            "-r", str(SAMPLE_RATE), "-D", self.device,
        ]

    def send(self, words: Iterable[int]) -> None:
        log.debug("Activating PTT to start transmission.")
        self.ptt.set(True)
        try:
            log.debug("Waiting for %dms before audio transmission starts.", self.tx_delay)
            time.sleep(self.tx_delay / 1000)
            buffer = self.samples(words)
            self._play(buffer)
        finally:
            log.debug("Deactivating PTT to end transmission.")
            self.ptt.set(False)

    def _play(self, buffer: bytes) -> None:
        log.debug("Spawning `aplay` child process to start audio transmission.")
        try:
            process = subprocess.Popen(self._command(), stdin=subprocess.PIPE)
        except OSError:
            log.error("Failed to start aplay")
            return

        try:
            process.stdin.write(buffer)
            process.stdin.close()
        except OSError:
            log.error("Failed to write to aplay stdin")
        process.wait()