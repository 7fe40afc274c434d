"""Timing-in of the DAQ and trigger links.

The trigger time-in takes one pedestal capture and one charge-injection
capture per trigger link. In both, the chip is set so that pedestals
give all-zero trigger sums. Charge goes into channels chosen so that
each link should show one known non-zero trigger sum. The words that
change between the two captures, and hold only the expected bits, give
the capture delay for each link.
"""

from __future__ import annotations

from typing import Iterator, Sequence

__all__ = [
    "TRIGGER_ZERO_WORD",
    "EXPECTED_CHARGE_MASKS",
    "TRIGGER_LINKS",
    "find_trigger_delays",
    "run_name",
    "standard_link_setup",
]

# a trigger word with the 4-bit sync header and four zero trigger sums
TRIGGER_ZERO_WORD = 0xA0000000

# Bits allowed to be set on trigger links 2..5 when charge goes into
# CH_0 (TC0_0), CH_42 (TC2_1), CH_29 (TC1_2) and CH_70 (TC3_3).
EXPECTED_CHARGE_MASKS = (0xAFE00000, 0xA0003F80, 0xA01FC000, 0xA000007F)

# link indices of the trigger links on a single-board readout
TRIGGER_LINKS = range(2, 6)

_N_DAQ_LINKS = 2
_DAQ_LINK_SETUP = (12, 40)
_TRIGGER_LINK_SETUP = (0, 4)

_RUN_NAMES = {"PEDESTAL": "pedestal", "CHARGE": "charge", "LED": "led"}


def _candidates(
    pedestals: Sequence[int], charges: Sequence[int], expected_mask: int
) -> Iterator[tuple[int, bool]]:
    """Yield ``(delay, matches_expected)`` for each word that changed."""
    for delay, (pedestal, charge) in enumerate(zip(pedestals, charges)):
        if pedestal == TRIGGER_ZERO_WORD and pedestal != charge:
            matches = (charge & ~expected_mask) == 0 and (
                charge & TRIGGER_ZERO_WORD
            ) == TRIGGER_ZERO_WORD
            yield delay, matches


def find_trigger_delays(
    pedestal_sums: Sequence[Sequence[int]],
    charge_sums: Sequence[Sequence[int]],
    expected_masks: Sequence[int] = EXPECTED_CHARGE_MASKS,
) -> list[int]:
    """Capture delay of each trigger link, or -1 where none was found.

    The three sequences hold one entry per link, in the same order.
    Where several words match, the last one gives the delay.
    """
    if not len(pedestal_sums) == len(charge_sums) == len(expected_masks):
        raise ValueError(
            "pedestal captures, charge captures and expected masks must "
            "cover the same number of links"
        )
    delays: list[int] = []
    for link, (pedestals, charges, mask) in enumerate(
        zip(pedestal_sums, charge_sums, expected_masks)
    ):
        if len(pedestals) != len(charges):
            raise ValueError(
                f"link {link}: pedestal capture has {len(pedestals)} words "
                f"but charge capture has {len(charges)}"
            )
        found = -1
        for delay, matches in _candidates(pedestals, charges, mask):
            if matches:
                found = delay
        delays.append(found)
    return delays


def run_name(cmd: str) -> str:
    """Base file name for a run started by a DAQ command."""
    try:
        return _RUN_NAMES[cmd]
    except KeyError:
        raise ValueError(f"{cmd!r} is not a run command") from None


def standard_link_setup(nlinks: int) -> list[tuple[int, int, int]]:
    """Standard ``(link, delay, capture)`` settings for single-board readout.

    The first two links carry DAQ data; the rest are trigger links.
    """
    return [
        (link, *(_DAQ_LINK_SETUP if link < _N_DAQ_LINKS else _TRIGGER_LINK_SETUP))
        for link in range(nlinks)
    ]