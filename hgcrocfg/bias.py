"""Control of the MAX5825 DACs that set LED and SiPM bias voltages."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Protocol, Sequence

__all__ = ["I2CBus", "MAX5825", "Bias"]


class I2CBus(Protocol):
    """The I2C interface the bias DACs are reached through."""

    def get_active_bus(self) -> int: ...

    def set_active_bus(self, bus: int) -> None: ...

    def get_bus_speed(self) -> int: ...

    def set_bus_speed(self, speed: int) -> None: ...

    def backplane_hack(self, enable: bool) -> None: ...

    def general_write_read(
        self, addr: int, data: Sequence[int], n_read: int = 0
    ) -> list[int]: ...


class MAX5825:
    """One MAX5825 eight-channel 12-bit DAC on an I2C bus."""

    # board commands
    WDOG = 1 << 4

    # DAC commands; add the DAC index to get the full command byte
    RETURNn = 7 << 4
    CODEn = 8 << 4
    LOADn = 9 << 4
    CODEn_LOADALL = 10 << 4
    CODEn_LOADn = 11 << 4
    REFn = 2 << 4
    POWERn = 4 << 4

    def __init__(self, i2c: I2CBus, addr: int, bus: int) -> None:
        self.i2c = i2c
        self.addr = addr
        self.bus = bus

    @contextmanager
    def _on_bus(self) -> Iterator[I2CBus]:
        """Switch to this chip's bus at 100 kHz and restore afterwards."""
        saved_bus = self.i2c.get_active_bus()
        saved_speed = self.i2c.get_bus_speed()
        self.i2c.set_active_bus(self.bus)
        self.i2c.set_bus_speed(100)
        self.i2c.backplane_hack(True)
        try:
            yield self.i2c
        finally:
            self.i2c.set_active_bus(saved_bus)
            self.i2c.set_bus_speed(saved_speed)
            self.i2c.backplane_hack(False)

    def get(self, cmd: int, n_return_bytes: int) -> list[int]:
        """Send a command byte and read back ``n_return_bytes`` bytes."""
        with self._on_bus() as i2c:
            return list(i2c.general_write_read(self.addr, [cmd & 0xFF], n_return_bytes))

    def set(self, cmd: int, data_bytes: int) -> None:
        """Send a command byte followed by two data bytes (MSB first)."""
        data_bytes &= 0xFFFF
        instructions = [cmd & 0xFF, data_bytes >> 8, data_bytes & 0xFF]
        with self._on_bus() as i2c:
            i2c.general_write_read(self.addr, instructions)

    def set_ref_voltage(self, level: int) -> None:
        """Select the internal reference voltage level (0-3)."""
        self.set(self.REFn | 0x4 | (level & 0x3), 0)

    def get_by_dac(self, i_dac: int, cmd: int) -> list[int]:
        """Read 12-bit values for one DAC, or all eight if ``i_dac`` > 7."""
        num_dacs = 1
        if i_dac > 7:
            i_dac = 8
            num_dacs = 8
        raw = self.get(cmd + i_dac, 2 * num_dacs)
        if len(raw) < 2 * num_dacs:
            raise ValueError(
                f"expected {2 * num_dacs} bytes from DAC, received {len(raw)}"
            )
        return [(hi << 4) + (lo >> 4) for hi, lo in zip(raw[0::2], raw[1::2])]

    def set_by_dac(self, i_dac: int, cmd: int, data_bytes: int) -> None:
        """Write a 12-bit value to one DAC, or to all if ``i_dac`` > 7."""
        if i_dac > 7:
            i_dac = 8
        # the four least significant bits of the data are ignored by the chip
        self.set(cmd + i_dac, (data_bytes << 4) & 0xFFFF)


class Bias:
    """The two LED and two SiPM bias DAC chips on a board."""

    ADDR_LED_0 = 0x18
    ADDR_LED_1 = 0x1A
    ADDR_SIPM_0 = 0x10
    ADDR_SIPM_1 = 0x12

    def __init__(self, i2c: I2CBus, bus: int) -> None:
        self.led = [
            MAX5825(i2c, self.ADDR_LED_0, bus),
            MAX5825(i2c, self.ADDR_LED_1, bus),
        ]
        self.sipm = [
            MAX5825(i2c, self.ADDR_SIPM_0, bus),
            MAX5825(i2c, self.ADDR_SIPM_1, bus),
        ]

    def initialize(self) -> None:
        """Set reference voltages on all chips and power the first LED chip."""
        for chip in (*self.led, *self.sipm):
            chip.set_ref_voltage(3)
        self.led[0].set(MAX5825.POWERn, 0xFF00)

    def cmd_led(self, i_led: int, cmd: int, twelve_bit_setting: int) -> None:
        """Send a DAC command to the chip and channel driving LED ``i_led``."""
        i_chip = int(i_led > 7)
        self.led[i_chip].set_by_dac(i_led - i_chip * 8, cmd, twelve_bit_setting)

    def cmd_sipm(self, i_sipm: int, cmd: int, twelve_bit_setting: int) -> None:
        """Send a DAC command to the chip and channel biasing SiPM ``i_sipm``."""
        i_chip = int(i_sipm > 7)
        self.sipm[i_chip].set_by_dac(i_sipm - i_chip * 8, cmd, twelve_bit_setting)

    def set_led(self, i_led: int, code: int) -> None:
        """Set and load the DAC code of one LED."""
        self.cmd_led(i_led, MAX5825.CODEn_LOADn, code)

    def set_sipm(self, i_sipm: int, code: int) -> None:
        """Set and load the DAC code of one SiPM bias."""
        self.cmd_sipm(i_sipm, MAX5825.CODEn_LOADn, code)