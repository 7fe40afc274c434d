"""Firmware checks and shared state for the interactive chip tool."""

from __future__ import annotations

import os
import subprocess
from pathlib import Path
from typing import Callable, Mapping

__all__ = [
    "FW_SHORTNAME",
    "ACTIVE_FW_PATH",
    "DEFAULT_TYPE_VERSION",
    "DAQ_FORMAT_SIMPLEROC",
    "DAQ_FORMAT_ECON",
    "FirmwareQueryError",
    "BadPageError",
    "is_fw_active",
    "fw_version",
    "read_command_script",
    "ToolState",
]

# firmware name as it appears as a directory on disk
FW_SHORTNAME = "hcal-zcu102"
ACTIVE_FW_PATH = "/opt/ldmx-firmware/active"
DEFAULT_TYPE_VERSION = "sipm_rocv3b"

# output format modes for the DAQ
DAQ_FORMAT_SIMPLEROC = 1
DAQ_FORMAT_ECON = 2

DefaultsProvider = Callable[[str], Mapping[str, Mapping[str, int]]]


class FirmwareQueryError(RuntimeError):
    """The firmware version query could not be run."""


class BadPageError(LookupError):
    """A page name is not known for the current chip type."""


def is_fw_active(active_path: str | os.PathLike[str] = ACTIVE_FW_PATH) -> bool:
    """True if the active-firmware symlink points at the HGCROC firmware.

    Raises :class:`OSError` if ``active_path`` is not a symbolic link.
    """
    target = Path(os.readlink(active_path))
    return target.stem == FW_SHORTNAME


def fw_version() -> str:
    """Full version of the installed firmware package, from the rpm database."""
    try:
        result = subprocess.run(
            ["rpm", "-qa", f"*{FW_SHORTNAME}*"],
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError as err:
        raise FirmwareQueryError(
            f"failed to run the firmware version query: {err}"
        ) from err
    return result.stdout.replace("\n", "")


def read_command_script(path: str | os.PathLike[str]) -> list[str]:
    """Commands from a script file, in order.

    Leading whitespace is removed from each line and lines starting with
    '#' are skipped. Empty lines are kept: they stand for a bare Enter.
    """
    commands: list[str] = []
    with open(path, encoding="utf-8") as script:
        for raw in script:
            line = raw.rstrip("\n").lstrip()
            if line.startswith("#"):
                continue
            commands.append(line)
    return commands


class ToolState:
    """Settings shared by all commands of the interactive tool.

    ``defaults_for`` maps a chip type_version to its default parameters,
    page -> parameter -> value; it supplies the names used for completion.
    """

    def __init__(
        self,
        defaults_for: DefaultsProvider,
        type_version: str = DEFAULT_TYPE_VERSION,
    ) -> None:
        self._defaults_for = defaults_for
        self._type_version = ""
        self._page_names: list[str] = []
        self._param_names: dict[str, list[str]] = {}
        self.iroc = 0
        self.ilink = 0
        self.daq_format_mode = DAQ_FORMAT_SIMPLEROC
        self.daq_contrib_id = 20
        self.daq_rate = 100
        self.last_run_file = ".last_run_file"
        self.update_type_version(type_version)

    def update_type_version(self, type_version: str) -> None:
        """Switch chip type, rebuilding the name lists if it changed."""
        if type_version != self._type_version:
            defaults = self._defaults_for(type_version)
            self._page_names = list(defaults)
            self._param_names = {
                page: list(params) for page, params in defaults.items()
            }
        self._type_version = type_version

    @property
    def type_version(self) -> str:
        """type_version of the chip currently worked with."""
        return self._type_version

    @property
    def page_names(self) -> list[str]:
        """Known page names, for completion."""
        return list(self._page_names)

    def param_names(self, page: str) -> list[str]:
        """Parameter names on ``page`` (case-insensitive)."""
        try:
            return list(self._param_names[page.upper()])
        except KeyError:
            raise BadPageError(f"Page name {page} not a known page.") from None