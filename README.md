# hgcrocfg

Helpers for configuring and testing HGCROC read-out chips and the boards
around them.

The package holds:

- **Bias DACs** (`hgcrocfg.bias`): `MAX5825` drives one eight-channel
  12-bit DAC over I2C, and `Bias` groups the two LED and two SiPM bias chips
  of a board (`initialize`, `set_led`, `set_sipm`, `cmd_led`, `cmd_sipm`).
- **Stimulus chip** (`hgcrocfg.ad5593r`): `AD5593R` sets up pins as DAC
  outputs (`setup_dac`), writes 12-bit values (`dac_write`) and clears pins
  (`clear_pin`).
- **Mezzanine tests** (`hgcrocfg.mezz`): the GPIO bit mapping between the
  lpGBT and the local expander (`lcl_to_gbt`, `gbt_to_lcl`), the voltages
  expected along the test board's resistor chain (`expected_adc_voltage`,
  `adc_error_tolerance`) and `MezzTester`, which reads the measured clock
  rates in MHz.
- **Settings files** (`hgcrocfg.outputs`): register values as CSV
  (`write_register_csv`), parameter settings as YAML
  (`emit_parameters_yaml`), output file names (`default_output_path`) and
  the include/exclude rules for listing pages (`page_included`).
- **Scans** (`hgcrocfg.scans`): parsing parameter-point files
  (`parse_parameter_header`, `check_parameter_row`), the time of a scan
  point (`scan_time`) and the parameters for a charge-injection pulse
  (`calib_test_parameters`).
- **Time-in** (`hgcrocfg.timein`): finding trigger-link capture delays
  (`find_trigger_delays`), run file names (`run_name`) and the standard link
  settings (`standard_link_setup`).
- **Tool state** (`hgcrocfg.firmware`): checking the active firmware
  (`is_fw_active`, `fw_version`), reading command scripts
  (`read_command_script`) and the `ToolState` shared by an interactive
  session.

It needs Python 3.10 or later and PyYAML.

## Hardware access

The chip classes do not open devices themselves. `MAX5825` and `Bias` take
an object with the methods of the `hgcrocfg.bias.I2CBus` protocol,
`AD5593R` one following `hgcrocfg.ad5593r.RawI2C`, and `MezzTester` one
with a `read(addr)` method for a memory-mapped register block.

```python
from hgcrocfg.bias import Bias

bias = Bias(i2c, bus=4)      # i2c: your I2CBus implementation
bias.initialize()
bias.set_sipm(3, 0x800)      # SiPM 3, mid-scale code
```

## Writing settings

```python
import sys
from hgcrocfg.outputs import default_output_path, emit_parameters_yaml, write_register_csv

out = default_output_path("my_settings.yaml", ".csv")   # "my_settings.csv"
write_register_csv(sys.stdout, {0: {1: 0x0F}}, "0.1.0")
# page,register,0xVV rows beneath a comment header

print(emit_parameters_yaml({"TOP": {"PHASE": 0}}, ["generated settings"]))
```

`page_included(page, rules, default_include)` applies `(prefix, include)`
rules, matched case-insensitively against the start of the page name; the
last matching rule wins.

## Scans

```python
from hgcrocfg.scans import parse_parameter_header, scan_time

names = parse_parameter_header(["DIGITALHALF_0.ADC_TH", "CH_3.LOWRANGE"])
# [("DIGITALHALF_0", "ADC_TH"), ("CH_3", "LOWRANGE")]

t = scan_time(charge_to_l1a=20, phase_strobe=8)  # 37.5 ns
```

A header cell without a `.`, or a row whose cell count differs from the
header's, raises `ParameterPointsError`.

## Trigger time-in

```python
from hgcrocfg.timein import find_trigger_delays

delays = find_trigger_delays(pedestal_sums, charge_sums)
# one delay per trigger link, -1 where no matching word was found
```

## Tool state

`ToolState` takes a callable that returns the default parameters
(page -> parameter -> value) for a chip type_version, and keeps the page and
parameter names used for completion. `param_names` raises `BadPageError`
for an unknown page.

## What it does not do

The package holds no HGCROC register maps, so it cannot itself turn YAML
parameter settings into register values or back; the writers in
`hgcrocfg.outputs` take values already computed. It installs no
command-line programs and no interactive menu, and it has no I2C, lpGBT or
DAQ transport of its own: those are supplied by the caller.

## Mezzanine GPIO mapping

```python
from hgcrocfg.mezz import lcl_to_gbt, gbt_to_lcl

assert gbt_to_lcl(lcl_to_gbt(0x123)) == 0x123
```

## Running the tests

Install the `test` extra and run `pytest` from the project directory.