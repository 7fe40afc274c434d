from hgcrocfg.ad5593r import AD5593R


class FakeChip:
    """Simulates the AD5593R register interface."""

    def __init__(self, registers=None):
        self.registers = dict(registers or {})
        self.pointer = None
        self.writes = []
        self.dac = {}

    def write_raw(self, *data):
        self.writes.append(tuple(data))
        if len(data) == 1 and data[0] & 0xF0 == 0x70:
            self.pointer = data[0] & 0xF
        elif len(data) == 3 and data[0] & 0xF0 == 0x10:
            pin = data[0] & 0x7
            self.dac[pin] = ((data[1] & 0xF) << 8) | data[2]
        elif len(data) == 3:
            self.registers[data[0]] = (data[1] << 8) | data[2]

    def read_raw(self, n=1):
        value = self.registers.get(self.pointer, 0)
        return [value >> 8, value & 0xFF][:n]


def test_constructor_enables_reference_and_adc_buffer():
    chip = FakeChip()
    AD5593R(chip)
    assert chip.writes == [(0x0B, 0x2, 0x0), (0x03, 0x1, 0x0)]


def test_setup_dac_sets_and_clears_bits():
    chip = FakeChip({
        AD5593R.REG_GPO_ENABLE: 0xFF,
        AD5593R.REG_GPI_ENABLE: 0xFF,
        AD5593R.REG_ADC_PIN: 0x01,
    })
    dev = AD5593R(chip)
    dev.setup_dac(3)
    regs = chip.registers
    assert regs[AD5593R.REG_GPO_ENABLE] == 0xFF & ~(1 << 3)
    assert regs[AD5593R.REG_GPI_ENABLE] == 0xFF & ~(1 << 3)
    assert regs[AD5593R.REG_ADC_PIN] == 0x01 | (1 << 3)
    assert regs[AD5593R.REG_PULLDOWN] == 1 << 3
    assert regs[AD5593R.REG_DAC_PIN] == 1 << 3
    assert chip.dac == {3: 0}


def test_setup_dac_without_zero_leaves_dac_untouched():
    chip = FakeChip()
    AD5593R(chip).setup_dac(1, zero=False)
    assert chip.dac == {}
    assert chip.registers[AD5593R.REG_DAC_PIN] == 1 << 1


def test_invalid_pin_writes_nothing():
    chip = FakeChip()
    dev = AD5593R(chip)
    before = list(chip.writes)
    dev.setup_dac(8)
    dev.setup_dac(-1)
    dev.dac_write(9, 100)
    assert chip.writes == before


def test_dac_write_encoding_round_trip():
    chip = FakeChip()
    dev = AD5593R(chip)
    for pin in range(8):
        dev.dac_write(pin, 0xFFF - pin)
        cmd, b1, b2 = chip.writes[-1]
        assert cmd == 0x10 | pin
        assert b1 >> 4 == 0x08 | pin
    assert chip.dac == {pin: 0xFFF - pin for pin in range(8)}


def test_dac_write_masks_to_twelve_bits():
    chip = FakeChip()
    AD5593R(chip).dac_write(0, 0x1ABC)
    assert chip.dac[0] == 0xABC


def test_clear_pin_clears_all_config_registers():
    chip = FakeChip()
    dev = AD5593R(chip)
    dev.setup_dac(5)
    chip.registers[AD5593R.REG_GPO_ENABLE] = 0x30
    dev.clear_pin(5)
    assert chip.registers[AD5593R.REG_GPO_ENABLE] == 0x10
    assert chip.registers[AD5593R.REG_ADC_PIN] == 0
    assert chip.registers[AD5593R.REG_DAC_PIN] == 0
    assert chip.registers[AD5593R.REG_PULLDOWN] == 1 << 5