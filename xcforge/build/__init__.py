# SPDX-License-Identifier: MIT
"""Archiving and XCFramework assembly."""

from xcforge.build.orchestrator import AssemblyResult, BuildOrchestrator, Stage
from xcforge.build.planner import ArchiveOperation, ArchivePlanner

__all__ = [
    "ArchiveOperation",
    "ArchivePlanner",
    "AssemblyResult",
    "BuildOrchestrator",
    "Stage",
]
