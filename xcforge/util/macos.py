# SPDX-License-Identifier: MIT
"""macOS-specific helpers for locating debug symbols.

Archives produced by ``xcodebuild archive`` keep their debug symbols in a
``dSYMs`` directory next to ``Products``, and older (bitcode) archives
also carry ``BCSymbolMaps`` named after the UUIDs of each slice.
"""

from __future__ import annotations

import re
from pathlib import Path

_UUID_LINE = re.compile(r"^UUID:\s+([0-9A-Fa-f-]{36})\s+\(([^)]+)\)")


def parse_dwarfdump_uuids(output: str) -> dict[str, str]:
    """Parse ``dwarfdump --uuid`` output into a mapping of arch to UUID.

    Example:
        >>> parse_dwarfdump_uuids(
        ...     "UUID: 1A2B3C4D-0000-1111-2222-333344445555 (arm64) /x/Core\\n"
        ... )
        {'arm64': '1A2B3C4D-0000-1111-2222-333344445555'}
    """
    uuids: dict[str, str] = {}
    for line in output.splitlines():
        match = _UUID_LINE.match(line.strip())
        if match:
            uuids[match.group(2)] = match.group(1).upper()
    return uuids


def dsym_path(archive_path: Path, module_name: str) -> Path:
    """Path of a framework's dSYM bundle inside an archive."""
    return archive_path / "dSYMs" / f"{module_name}.framework.dSYM"


def dwarf_path(dsym: Path, module_name: str) -> Path:
    """Path of the DWARF binary inside a dSYM bundle."""
    return dsym / "Contents" / "Resources" / "DWARF" / module_name


def symbol_map_path(archive_path: Path, uuid: str) -> Path:
    """Path of the BCSymbolMap for one binary slice of an archive."""
    return archive_path / "BCSymbolMaps" / f"{uuid}.bcsymbolmap"
