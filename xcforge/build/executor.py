# SPDX-License-Identifier: MIT
"""Running external tools.

All subprocesses xcforge starts go through an Executor, which lets tests
substitute a fake that records commands instead of running xcodebuild.
"""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, runtime_checkable

from xcforge.core.errors import ProcessFailedError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExecutorResult:
    """Outcome of a finished process."""

    args: tuple[str, ...]
    returncode: int
    stdout: str = ""
    stderr: str = ""


@runtime_checkable
class Executor(Protocol):
    """Runs a command to completion."""

    def execute(self, args: Sequence[str]) -> ExecutorResult:
        """Run args and wait for it to exit.

        Raises:
            ProcessFailedError: If the process cannot be started or exits
                with a non-zero status.
        """
        ...


class ProcessExecutor:
    """Executor backed by subprocess.run.

    Args:
        cwd: Working directory for every command.
    """

    def __init__(self, *, cwd: Path | None = None) -> None:
        self.cwd = cwd

    def execute(self, args: Sequence[str]) -> ExecutorResult:
        cmd = [str(arg) for arg in args]
        logger.debug("Running: %s", " ".join(cmd))

        try:
            completed = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                cwd=self.cwd,
            )
        except OSError as e:
            raise ProcessFailedError(cmd, None, str(e)) from e

        if completed.returncode != 0:
            raise ProcessFailedError(cmd, completed.returncode, completed.stderr)

        return ExecutorResult(
            args=tuple(cmd),
            returncode=completed.returncode,
            stdout=completed.stdout,
            stderr=completed.stderr,
        )
