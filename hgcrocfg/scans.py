"""Building blocks for parameter scans run against the chip.

A scan reads a file of parameter points. Its header names the parameters
as ``PAGE.PARAMETER`` and each row holds one point. Charge-injection scans
also set calibration parameters and step the pulse in time.
"""

from __future__ import annotations

from typing import Sequence

__all__ = [
    "ParameterPointsError",
    "parse_parameter_header",
    "check_parameter_row",
    "scan_time",
    "calib_test_parameters",
]

# one bunch crossing in ns, and the number of strobe phases within it
_BX_NS = 25.0
_N_PHASES = 16
# the charge_to_l1a setting that puts the pulse at time zero, less one
_CHARGE_TO_L1A_ORIGIN = 20
_CHANNELS_PER_LINK = 36


class ParameterPointsError(ValueError):
    """A file of parameter points is malformed."""


def parse_parameter_header(header: Sequence[str]) -> list[tuple[str, str]]:
    """Split each ``PAGE.PARAMETER`` header cell at its first '.'.

    Raises :class:`ParameterPointsError` for a cell without a '.'.
    """
    names: list[tuple[str, str]] = []
    for cell in header:
        page, dot, param = cell.partition(".")
        if not dot:
            raise ParameterPointsError(
                f"Header cell {cell} does not contain a '.' "
                "separating the page and parameter names."
            )
        names.append((page, param))
    return names


def check_parameter_row(
    row: Sequence[int],
    param_names: Sequence[tuple[str, str]],
    source: str,
) -> list[int]:
    """Return the row's values if it has one cell per parameter.

    ``source`` names the file the row came from, for the error message.
    """
    if len(row) != len(param_names):
        raise ParameterPointsError(
            f"A row in {source} contains {len(row)} cells which is not "
            f"{len(param_names)} the number of parameters defined in the header."
        )
    return list(row)


def scan_time(charge_to_l1a: int, phase_strobe: int) -> float:
    """Time in ns of a scan point given its crossing offset and strobe phase."""
    return (
        (charge_to_l1a - _CHARGE_TO_L1A_ORIGIN + 1) * _BX_NS
        + phase_strobe * _BX_NS / _N_PHASES
    )


def calib_test_parameters(
    channel: int,
    calib: int,
    pre_cc: bool = False,
    highrange: bool = False,
) -> dict[str, dict[str, int]]:
    """Parameters that inject a calibration pulse of size ``calib`` into ``channel``.

    With ``pre_cc`` the pulse goes in before the conveyor; otherwise
    ``highrange`` picks the high- or low-range injection capacitor.
    """
    link = channel // _CHANNELS_PER_LINK
    refvol_page = f"REFERENCEVOLTAGE_{link}"
    channel_page = f"CH_{channel}"
    return {
        refvol_page: {
            "CALIB": 0 if pre_cc else calib,
            "CALIB_2V5": calib if pre_cc else 0,
            "INTCTEST": 1,
            "CHOICE_CINJ": 1 if (highrange and not pre_cc) else 0,
        },
        channel_page: {
            "HIGHRANGE": 1 if (highrange or pre_cc) else 0,
            "LOWRANGE": 0 if highrange else 1,
        },
    }