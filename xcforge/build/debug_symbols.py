# SPDX-License-Identifier: MIT
"""Locating debug symbols in xcodebuild archives."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from xcforge.build.executor import Executor, ProcessExecutor
from xcforge.core.errors import DebugSymbolNotFoundError
from xcforge.util.macos import dsym_path, dwarf_path, parse_dwarfdump_uuids, symbol_map_path

if TYPE_CHECKING:
    from xcforge.core.graph import ResolvedTarget
    from xcforge.core.options import SDK

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DebugSymbols:
    """Debug symbols of one archived framework.

    Attributes:
        sdk: The SDK the archive was built for.
        dsym_path: The framework's dSYM bundle.
        symbol_map_paths: BCSymbolMaps of the framework's slices, if any.
    """

    sdk: SDK
    dsym_path: Path
    symbol_map_paths: tuple[Path, ...] = ()

    @property
    def paths(self) -> list[Path]:
        """Everything to pass to ``-debug-symbols``, dSYM first."""
        return [self.dsym_path, *self.symbol_map_paths]


class DebugSymbolExtractor:
    """Finds the dSYM of an archived framework.

    The slice UUIDs are read with ``dwarfdump --uuid`` to pick up any
    BCSymbolMaps the archive carries for them.

    Args:
        executor: Runs dwarfdump. Defaults to a ProcessExecutor.
    """

    def __init__(self, executor: Executor | None = None) -> None:
        self.executor = executor or ProcessExecutor()

    def dump(self, dwarf: Path) -> dict[str, str]:
        """Return the UUID of every architecture slice of a DWARF binary."""
        result = self.executor.execute(["dwarfdump", "--uuid", str(dwarf)])
        return parse_dwarfdump_uuids(result.stdout)

    def extract(self, archive_path: Path, target: ResolvedTarget, sdk: SDK) -> DebugSymbols:
        """Locate the debug symbols of target in an archive.

        Raises:
            DebugSymbolNotFoundError: If the archive has no dSYM for target.
            ProcessFailedError: If dwarfdump fails.
        """
        dsym = dsym_path(archive_path, target.c99name)
        if not dsym.is_dir():
            raise DebugSymbolNotFoundError(str(dsym))

        symbol_maps: list[Path] = []
        for uuid in self.dump(dwarf_path(dsym, target.c99name)).values():
            path = symbol_map_path(archive_path, uuid)
            if path.exists():
                symbol_maps.append(path)

        logger.debug("Found %s with %d symbol maps", dsym, len(symbol_maps))
        return DebugSymbols(sdk=sdk, dsym_path=dsym, symbol_map_paths=tuple(symbol_maps))
