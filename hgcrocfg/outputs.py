"""Writers for the files produced by the settings compiler tools.

These cover the register CSV written after compiling YAML settings,
the YAML written after decompiling register values or listing
defaults, and the include/exclude rules used to pick which pages are
listed.
"""

from __future__ import annotations

from typing import Iterable, Mapping, TextIO

import yaml

__all__ = [
    "default_output_path",
    "write_register_csv",
    "page_included",
    "emit_parameters_yaml",
]

_CSV_HEADER = (
    "# This register settings file was generated by pfcompile\n"
    "#    {version}\n"
    "#    The columns are: page, register, value (in hex)\n"
)


def default_output_path(path: str, extension: str) -> str:
    """Replace the text after the last '.' in ``path`` with ``extension``.

    If ``path`` holds no '.', the extension is appended to the whole path.
    The extension may be given with or without its leading dot.
    """
    if not extension.startswith("."):
        extension = "." + extension
    stem, dot, _ = path.rpartition(".")
    return (stem if dot else path) + extension


def write_register_csv(
    stream: TextIO,
    settings: Mapping[int, Mapping[int, int]],
    version: str,
) -> None:
    """Write register values as ``page,register,0xVV`` rows.

    Pages and registers are written in ascending order beneath a short
    comment header naming the software version.
    """
    stream.write(_CSV_HEADER.format(version=version))
    for page in sorted(settings):
        registers = settings[page]
        for reg in sorted(registers):
            stream.write(f"{page},{reg},0x{registers[reg] & 0xFF:02x}\n")
    stream.flush()


def page_included(
    page: str,
    rules: Iterable[tuple[str, bool]],
    default_include: bool = True,
) -> bool:
    """Decide whether ``page`` is listed.

    Each rule is a ``(prefix, include)`` pair. A rule matches when the
    page name starts with its prefix, ignoring case. The last matching
    rule decides; with no match, ``default_include`` does.
    """
    decision = default_include
    lowered = page.lower()
    for prefix, include in rules:
        if lowered.startswith(prefix.lower()):
            decision = include
    return decision


def emit_parameters_yaml(
    parameters: Mapping[str, Mapping[str, int]],
    comments: Iterable[str] = (),
) -> str:
    """Render page -> parameter -> value as block YAML preceded by comments.

    Pages and parameters appear in sorted order. Each comment line is
    prefixed with ``# ``.
    """
    header = "".join(
        f"# {line}\n" for comment in comments for line in comment.splitlines() or [""]
    )
    ordered = {
        page: {name: int(value) for name, value in sorted(params.items())}
        for page, params in sorted(parameters.items())
    }
    body = yaml.safe_dump(ordered, default_flow_style=False, sort_keys=False)
    return header + body