# SPDX-License-Identifier: MIT
"""Progress reporting for generation and assembly.

Core operations report through a Reporter instead of printing, so they
can run under a CLI, inside another tool, or in tests that record what
happened.
"""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable


@runtime_checkable
class Reporter(Protocol):
    """Receives progress events from xcforge operations."""

    def info(self, message: str) -> None:
        """Report a progress message."""
        ...

    def warning(self, message: str) -> None:
        """Report something the user should look at."""
        ...

    def stage_changed(self, stage: str, target: str, sdk: str | None = None) -> None:
        """Report that an assembly entered a new pipeline stage."""
        ...


class LoggingReporter:
    """Reporter that forwards everything to the ``xcforge`` logger."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.logger = logger or logging.getLogger("xcforge")

    def info(self, message: str) -> None:
        self.logger.info("%s", message)

    def warning(self, message: str) -> None:
        self.logger.warning("%s", message)

    def stage_changed(self, stage: str, target: str, sdk: str | None = None) -> None:
        if sdk:
            self.logger.debug("%s: %s (%s)", target, stage, sdk)
        else:
            self.logger.debug("%s: %s", target, stage)
