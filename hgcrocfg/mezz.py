"""Helpers for testing the lpGBT mezzanine board."""

from __future__ import annotations

from typing import Protocol

__all__ = [
    "lcl_to_gbt",
    "gbt_to_lcl",
    "expected_adc_voltage",
    "adc_error_tolerance",
    "MezzTester",
]

# local GPIO bit i is wired to lpGBT GPIO bit _LCL_TO_GBT_BITS[i]
_LCL_TO_GBT_BITS = (9, 3, 6, 7, 1, 0, 2, 4, 10, 11, 8, 5)
_GBT_TO_LCL_BITS = tuple(
    _LCL_TO_GBT_BITS.index(gbt_bit) for gbt_bit in range(len(_LCL_TO_GBT_BITS))
)

# resistors (ohms) in the test-board chain: end, between channels, end
_END_RESISTOR = 200
_STEP_RESISTOR = 100
_CHAIN_RESISTANCE = _END_RESISTOR * 2 + _STEP_RESISTOR * 3


def _permute(val: int, mapping: tuple[int, ...]) -> int:
    return sum(1 << dst for src, dst in enumerate(mapping) if val & (1 << src))


def lcl_to_gbt(val: int) -> int:
    """Map a 12-bit pattern read on the local expander to lpGBT GPIO bits."""
    return _permute(val, _LCL_TO_GBT_BITS)


def gbt_to_lcl(val: int) -> int:
    """Map a 12-bit lpGBT GPIO pattern to the local expander's bit order."""
    return _permute(val, _GBT_TO_LCL_BITS)


def expected_adc_voltage(half: int, channel: int, va: float, vb: float) -> float:
    """Voltage expected at ADC ``channel`` with ``va`` and ``vb`` across the chain.

    Each half of the board has four ADC channels (4*half .. 4*half+3) along a
    resistor chain driven at both ends.
    """
    if half not in (0, 1):
        raise ValueError(f"half must be 0 or 1, not {half}")
    offset = channel - 4 * half
    if not 0 <= offset < 4:
        raise ValueError(f"channel {channel} is not in half {half}")
    current = (vb - va) / _CHAIN_RESISTANCE
    if half and channel == 4:
        # resistor swap on the test board
        return va + current * _STEP_RESISTOR + current * _STEP_RESISTOR * offset
    return va + current * _END_RESISTOR + current * _STEP_RESISTOR * offset


def adc_error_tolerance(pta: int, ptb: int) -> float:
    """Allowed error in volts; it grows with the voltage step across the chain."""
    return 5e-3 + 15e-3 * abs(pta - ptb)


class UIORegisters(Protocol):
    """A memory-mapped register block."""

    def read(self, addr: int) -> int: ...


class MezzTester:
    """The firmware block that measures the mezzanine clock outputs."""

    _BASE = 0x20
    N_CLOCKS = 8

    def __init__(self, uio: UIORegisters) -> None:
        self.uio = uio
        self.ident = (uio.read(self._BASE), uio.read(self._BASE + 1))

    def clock_rates(self) -> list[float]:
        """Measured frequency of each of the eight clocks, in MHz."""
        return [
            self.uio.read(self._BASE + 8 + iclk) / 1e4
            for iclk in range(self.N_CLOCKS)
        ]