"""Minimal driver for the AD5593R configurable ADC/DAC/GPIO chip."""

from __future__ import annotations

from typing import Protocol

__all__ = ["RawI2C", "AD5593R"]


class RawI2C(Protocol):
    """A raw byte-level I2C connection to a single device."""

    def write_raw(self, *data: int) -> None: ...

    def read_raw(self, n: int = 1) -> list[int]: ...


class AD5593R:
    """The DAC features of an AD5593R needed for board testing."""

    REG_DAC_PIN = 0x05
    REG_ADC_PIN = 0x04
    REG_OPENDRAIN = 0x0C
    REG_GPO_ENABLE = 0x08
    REG_GPI_ENABLE = 0x0A
    REG_ADC_SEQ = 0x02
    REG_GENERAL = 0x03
    REG_POWERDOWN = 0x0B
    REG_PULLDOWN = 0x06
    REG_GPO_WRITE = 0x09
    REG_GPI_READ = 0x60
    REG_RESET = 0x0F

    def __init__(self, i2c: RawI2C) -> None:
        self.i2c = i2c
        # turn on the reference
        self.i2c.write_raw(self.REG_POWERDOWN, 0x2, 0x0)
        # turn on the ADC buffer and set up the range
        self.i2c.write_raw(self.REG_GENERAL, 0x1, 0x0)

    def setup_dac(self, pin: int, zero: bool = True) -> None:
        """Configure ``pin`` (0-7) as a DAC output, optionally starting at zero."""
        if not 0 <= pin <= 7:
            return
        self._clear_bit(self.REG_GPO_ENABLE, pin)
        self._clear_bit(self.REG_GPI_ENABLE, pin)
        self._set_bit(self.REG_ADC_PIN, pin)
        self._set_bit(self.REG_PULLDOWN, pin)
        if zero:
            self.dac_write(pin, 0)
        self._set_bit(self.REG_DAC_PIN, pin)

    def dac_write(self, pin: int, value: int) -> None:
        """Write a 12-bit value to the DAC on ``pin`` (0-7)."""
        if not 0 <= pin <= 7:
            return
        self.i2c.write_raw(
            0x10 | pin,
            ((0x08 | pin) << 4) | ((value & 0xF00) >> 8),
            value & 0xFF,
        )

    def clear_pin(self, pin: int) -> None:
        """Return ``pin`` to an unconfigured state."""
        for reg in (
            self.REG_GPO_ENABLE,
            self.REG_GPI_ENABLE,
            self.REG_ADC_PIN,
            self.REG_DAC_PIN,
        ):
            self._clear_bit(reg, pin)

    def _read_reg(self, reg: int) -> int:
        self.i2c.write_raw(0x70 | (reg & 0xF))
        hi, lo = self.i2c.read_raw(2)[:2]
        return (hi << 8) | lo

    def _write_reg(self, reg: int, value: int) -> None:
        self.i2c.write_raw(reg & 0xF, (value >> 8) & 0xFF, value & 0xFF)

    def _set_bit(self, reg: int, bit: int) -> None:
        self._write_reg(reg, self._read_reg(reg) | (1 << bit))

    def _clear_bit(self, reg: int, bit: int) -> None:
        self._write_reg(reg, self._read_reg(reg) & ~(1 << bit) & 0xFFFF)