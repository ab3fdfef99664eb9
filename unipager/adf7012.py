"""Register model of the ADF7012 transmitter chip."""

from __future__ import annotations

from enum import IntEnum

XTAL_FREQ = 4915200
_MAX_PA_OUTPUT_LEVEL = 63


class OutputDivider(IntEnum):
    DISABLED = 0
    DIVIDE_BY_2 = 1
    DIVIDE_BY_4 = 2
    DIVIDE_BY_8 = 3


class Prescaler(IntEnum):
    SCALE_4_5 = 0
    SCALE_8_9 = 1


class Modulation(IntEnum):
    FSK = 0
    GFSK = 1
    ASK = 2
    OOK = 3


class MuxOut(IntEnum):
    REG_READY = 3
    DIGITAL_LOCK = 4


class Adf7012Config:
    """The settings held in the four ADF7012 registers."""

    def __init__(self) -> None:
        self.output_divider = OutputDivider.DISABLED
        self.vco_adjust = 2
        self.clock_out_divider = 1
        self.xtal_disable = False
        self.xtal_doubler = False
        self.r_divider = 1
        self.freq_err_correction = 0

        self.prescaler = Prescaler.SCALE_4_5
        self.integer_n = 179
        self.fractional_n = 128

        self.index_counter = 0
        self.gfsk_mod_control = 0
        self.mod_deviation = 13
        self.pa_output_level = _MAX_PA_OUTPUT_LEVEL
        self.gaussian_ook = False
        self.mod_control = Modulation.FSK

        self.pa_bias = 4
        self.vco_bias = 1
        self.ld_precision = 1
        self.muxout = MuxOut.REG_READY
        self.vco_disable = False
        self.bleed_up = False
        self.bleed_down = False
        self.charge_pump = 3
        self.data_invert = True
        self.clkout_enable = False
        self.pa_enable = False
        self.pll_enable = False

    @property
    def pa_output_level(self) -> int:
        return self._pa_output_level

    @pa_output_level.setter
    def pa_output_level(self, value: int) -> None:
        self._pa_output_level = min(value, _MAX_PA_OUTPUT_LEVEL)

    def __repr__(self) -> str:
        settings = ", ".join(
            f"{name.lstrip('_')}={value!r}" for name, value in vars(self).items()
        )
        return f"Adf7012Config({settings})"

    def set_freq(self, freq: int) -> None:
        """Set the PLL dividers for a carrier frequency in Hz."""
        f_pfd = XTAL_FREQ // (1 << int(self.output_divider))
        n = freq // f_pfd
        rest = freq / f_pfd - n
        self.integer_n = n & 0xFF
        self.fractional_n = int(rest * 4096.0) & 0xFFFF

    def encoded_freq_err_correction(self) -> int:
        """The frequency correction as an 11-bit two's complement number."""
        value = self.freq_err_correction
        if value < 0:
            return (~(-value) & 0b11111111111) + 1
        return value & 0b1111111111

    def r0(self) -> int:
        return (
            ((int(self.output_divider) & 0b11) << 25)
            | ((self.vco_adjust & 0b11) << 23)
            | ((self.clock_out_divider & 0b1111) << 19)
            | (int(self.xtal_disable) << 18)
            | (int(self.xtal_doubler) << 17)
            | ((self.r_divider & 0b1111) << 13)
            | ((self.encoded_freq_err_correction() & 0b11111111111) << 2)
        )

    def r1(self) -> int:
        return (
            1
            | ((int(self.prescaler) & 0b1) << 22)
            | ((self.integer_n & 0b11111111) << 14)
            | ((self.fractional_n & 0b111111111111) << 2)
        )

    def r2(self) -> int:
        return (
            2
            | ((self.index_counter & 0b11) << 23)
            | ((self.gfsk_mod_control & 0b111) << 20)
            | ((self.mod_deviation & 0b111111111) << 11)
            | ((self.pa_output_level & 0b111111) << 5)
            | ((int(self.gaussian_ook) & 0b1) << 4)
            | ((int(self.mod_control) & 0b11) << 2)
        )

    def r3(self) -> int:
        return (
            3
            | ((self.pa_bias & 0b111) << 20)
            | ((self.vco_bias & 0b1111) << 16)
            | ((self.ld_precision & 0b1) << 15)
            | ((int(self.muxout) & 0b1111) << 11)
            | ((int(self.vco_disable) & 0b1) << 10)
            | ((int(self.bleed_down) & 0b1) << 8)
            | ((int(self.bleed_up) & 0b1) << 7)
            | ((self.charge_pump & 0b11) << 6)
            | ((int(self.data_invert) & 0b1) << 5)
            | ((int(self.clkout_enable) & 0b1) << 4)
            | ((int(self.pa_enable) & 0b1) << 3)
            | ((int(self.pll_enable) & 0b1) << 2)
        )

    def registers(self) -> tuple[int, int, int, int]:
        """The four register words in the order they are written."""
        return (self.r0(), self.r1(), self.r2(), self.r3())