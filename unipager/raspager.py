"""Transmitter for the RasPager boards built around an ADF7012."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Iterable, Optional

from unipager.adf7012 import Adf7012Config, MuxOut
from unipager.config import Config
from unipager.gpio import Direction, Gpio
from unipager.model import Model
from unipager.transmitter import Transmitter

log = logging.getLogger(__name__)

_PLL_ATTEMPTS = 5
_MAX_VCO_BIAS = 13
_MAX_VCO_ADJUST = 3


def _delay_us(micros: float) -> None:
    time.sleep(micros / 1_000_000)


def _delay_ms(millis: float) -> None:
    time.sleep(millis / 1000)


@dataclass(frozen=True)
class RaspagerPins:
    le: int
    ce: int
    clk: int
    sdata: int
    muxout: int
    atclk: int
    atdata: int
    handshake: int
    ptt: int


RASPAGER1_PINS = RaspagerPins(
    le=0, ce=7, clk=3, sdata=2, muxout=13, atclk=11, atdata=10, handshake=5, ptt=4
)
RASPAGER2_PINS = RaspagerPins(
    le=9, ce=7, clk=3, sdata=2, muxout=13, atclk=11, atdata=10, handshake=5, ptt=4
)


class RaspagerTransmitter(Transmitter):
    """Programs the ADF7012 and clocks codewords into the board's microcontroller."""

    def __init__(
        self, config: Config, pins: RaspagerPins, gpio: Optional[Any] = None
    ) -> None:
        log.info("Initializing RasPager transmitter...")
        if gpio is None:
            log.info("Detected %s", Model.get())
            try:
                gpio = Gpio.open()
            except OSError as exc:
                raise OSError("Failed to map GPIO") from exc

        self.pins = pins
        self.le = gpio.pin(pins.le, Direction.OUTPUT)
        self.ce = gpio.pin(pins.ce, Direction.OUTPUT)
        self.clk = gpio.pin(pins.clk, Direction.OUTPUT)
        self.sdata = gpio.pin(pins.sdata, Direction.OUTPUT)
        self.muxout = gpio.pin(pins.muxout, Direction.INPUT)
        self.atclk = gpio.pin(pins.atclk, Direction.OUTPUT)
        self.atdata = gpio.pin(pins.atdata, Direction.OUTPUT)
        self.handshake = gpio.pin(pins.handshake, Direction.INPUT)
        self.ptt = gpio.pin(pins.ptt, Direction.INPUT)
        self.adf = Adf7012Config()
        self.output_level = config.raspager.pa_output_level

        self._reset()
        self.adf.freq_err_correction = config.raspager.freq_corr
        self.adf.set_freq(config.raspager.freq)
        self.adf.mod_deviation = config.raspager.mod_deviation
        self._write_config()

    def _ptt_on(self) -> bool:
        self.ce.set_high()
        self.adf.pa_enable = False
        self.adf.pa_output_level = 0
        self.adf.muxout = MuxOut.REG_READY
        self._write_config()
        _delay_ms(100)

        if not self.muxout.read():
            log.debug("ADF7012 not ready")
            return False

        if not self._lock_pll():
            log.error("PLL locking failed")
            self._ptt_off()
            return False

        self.adf.pa_enable = True
        self.adf.pa_output_level = self.output_level
        self._write_config()
        _delay_ms(50)
        return True

    def _ptt_off(self) -> None:
        while self.ptt.read():
            log.debug("PTT still high")
            _delay_ms(100)

        self.adf.pa_enable = False
        self.adf.pa_output_level = 0
        self._write_config()

        _delay_ms(100)
        self.ce.set_low()

    def _lock_pll(self) -> bool:
        adjust = self.adf.vco_adjust
        bias = self.adf.vco_bias

        self.adf.pll_enable = True
        self.adf.muxout = MuxOut.DIGITAL_LOCK
        self._write_config()
        _delay_ms(500)

        while not self.muxout.read():
            log.debug("Trying to lock %d %d", adjust, bias)
            self.adf.vco_adjust = adjust
            self.adf.vco_bias = bias
            self._write_config()
            _delay_ms(500)

            bias += 1
            if bias > _MAX_VCO_BIAS:
                bias = 1
                adjust += 1
                if adjust > _MAX_VCO_ADJUST:
                    self.adf.vco_adjust = 0
                    self.adf.vco_bias = 0
                    return False

        log.debug("PLL locked")
        return True

    def _write_config(self) -> None:
        log.debug("write config: %r", self.adf)
        for register in self.adf.registers():
            self._write_register(register)

    def _write_register(self, register: int) -> None:
        self.clk.set_low()
        _delay_us(2)
        self.le.set_low()
        _delay_us(10)

        for shift in range(31, -1, -1):
            self.sdata.set(bool(register & (1 << shift)))
            _delay_us(10)
            self.clk.set_high()
            _delay_us(30)
            self.clk.set_low()
            _delay_us(30)

        _delay_us(10)
        self.le.set_high()

    def _reset(self) -> None:
        self.ce.set_low()
        self.le.set_high()
        self.clk.set_high()
        self.sdata.set_high()
        _delay_ms(5)
        self.ce.set_high()
        _delay_ms(100)

    def send(self, words: Iterable[int]) -> None:
        pll_locked = any(self._ptt_on() for _ in range(_PLL_ATTEMPTS))
        if not pll_locked:
            log.error("Could not transmit message: PLL locking failed")
            self._ptt_off()
            _delay_ms(200)
            return

        for word in words:
            for shift in range(31, -1, -1):
                while not self.handshake.read():
                    log.debug("ATmega Buffer full")
                    _delay_us(100)

                self.atdata.set(bool(word & (1 << shift)))
                _delay_us(20)
                self.atclk.set_high()
                _delay_us(100)
                self.atclk.set_low()
                _delay_us(50)

        self.atdata.set_low()
        self._ptt_off()
        _delay_ms(200)