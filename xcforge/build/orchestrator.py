# SPDX-License-Identifier: MIT
"""Building a product for several SDKs and merging the result.

Assembly of one build product is a strictly sequential state machine:

    PLANNING -> ARCHIVING -> [EXTRACTING] -> PREPARING_OUTPUT -> MERGING -> DONE

EXTRACTING only runs when debug symbols are embedded. Any stage may end
the run in FAILED instead. Each stage returns a StageResult; the first
failing one stops the run, so a failed archive never leads to a merge and
an existing XCFramework is only deleted once every SDK archived.
"""

from __future__ import annotations

import shutil
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

from xcforge.build.debug_symbols import DebugSymbolExtractor, DebugSymbols
from xcforge.build.executor import Executor, ProcessExecutor
from xcforge.build.planner import ArchiveOperation, ArchivePlanner
from xcforge.build.xcodebuild import XcodeBuildClient
from xcforge.core.errors import (
    ArchiveFailedError,
    AssemblyError,
    DebugSymbolExtractionError,
    DebugSymbolNotFoundError,
    MergeFailedError,
    OutputPreparationError,
    ProcessFailedError,
)
from xcforge.core.reporter import LoggingReporter, Reporter

if TYPE_CHECKING:
    from xcforge.core.options import SDK, BuildProduct
    from xcforge.core.package import Package


class Stage(str, Enum):
    PLANNING = "planning"
    ARCHIVING = "archiving"
    EXTRACTING = "extracting"
    PREPARING_OUTPUT = "preparing_output"
    MERGING = "merging"
    DONE = "done"
    FAILED = "failed"


TERMINAL_STAGES = frozenset({Stage.DONE, Stage.FAILED})


@dataclass(frozen=True)
class StageResult:
    """Outcome of one stage: success, or the error that ended the run."""

    stage: Stage
    error: AssemblyError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class AssemblyResult:
    """Everything one assembly run did.

    Attributes:
        product: The product assembled.
        sdks: SDKs requested, in order.
        output_dir: Directory receiving the XCFramework.
        overwrite: Whether an existing XCFramework may be deleted.
        embed_debug_symbols: Whether debug symbols are extracted and merged.
        state: Current stage; DONE or FAILED once the run is over.
        operations: Planned archive operations.
        archived: Operations that completed.
        debug_symbols: Debug symbols by SDK name, when embedded.
        output_path: Path of the XCFramework, set once PREPARING_OUTPUT ran.
        failed_stage: Stage that failed, if any.
        error: The error that ended the run, if any.
    """

    product: BuildProduct
    sdks: list[SDK]
    output_dir: Path
    overwrite: bool = False
    embed_debug_symbols: bool = False
    state: Stage = Stage.PLANNING
    operations: list[ArchiveOperation] = field(default_factory=list)
    archived: list[ArchiveOperation] = field(default_factory=list)
    debug_symbols: dict[str, DebugSymbols] | None = None
    output_path: Path | None = None
    failed_stage: Stage | None = None
    error: AssemblyError | None = None

    @property
    def succeeded(self) -> bool:
        return self.state is Stage.DONE

    @property
    def xcframework_path(self) -> Path:
        """Where the XCFramework is written, whether or not the run got there."""
        return self.output_dir / self.product.xcframework_name

    @property
    def failed_sdk(self) -> str | None:
        return self.error.sdk if self.error is not None else None


class BuildOrchestrator:
    """Archives a product for every SDK and merges it into an XCFramework.

    Example:
        orchestrator = BuildOrchestrator(package)
        path = orchestrator.assemble(
            BuildProduct(target),
            [SDK.from_name("iOS"), SDK.from_name("iOSSimulator")],
            Path("XCFrameworks"),
            overwrite=True,
        )

    Args:
        package: Package whose generated project is built.
        executor: Runs external tools. Defaults to a ProcessExecutor.
        client: xcodebuild client, built on executor by default.
        extractor: Debug symbol extractor, built on executor by default.
        reporter: Receives progress messages.
    """

    def __init__(
        self,
        package: Package,
        *,
        executor: Executor | None = None,
        client: XcodeBuildClient | None = None,
        extractor: DebugSymbolExtractor | None = None,
        reporter: Reporter | None = None,
    ) -> None:
        executor = executor or ProcessExecutor()
        self.package = package
        self.planner = ArchivePlanner(package)
        self.client = client or XcodeBuildClient(executor)
        self.extractor = extractor or DebugSymbolExtractor(executor)
        self.reporter = reporter or LoggingReporter()
        self._stages: dict[Stage, Callable[[AssemblyResult], StageResult]] = {
            Stage.PLANNING: self._plan,
            Stage.ARCHIVING: self._archive,
            Stage.EXTRACTING: self._extract,
            Stage.PREPARING_OUTPUT: self._prepare_output,
            Stage.MERGING: self._merge,
        }

    def assemble(
        self,
        product: BuildProduct,
        sdks: Sequence[SDK] | None,
        output_dir: Path,
        *,
        overwrite: bool = False,
        embed_debug_symbols: bool = False,
    ) -> Path:
        """Build product for every SDK and merge the results.

        Args:
            product: The product to assemble.
            sdks: SDKs to archive for, in order. None uses product.sdks.
            output_dir: Directory receiving ``<Target>.xcframework``.
            overwrite: Delete an existing XCFramework before merging.
            embed_debug_symbols: Embed each SDK's dSYM in the XCFramework.

        Returns:
            Path of the XCFramework.

        Raises:
            AssemblyError: The error of the stage that failed.
        """
        result = self.run(
            product,
            sdks,
            output_dir,
            overwrite=overwrite,
            embed_debug_symbols=embed_debug_symbols,
        )
        if result.error is not None:
            raise result.error
        return result.xcframework_path

    def run(
        self,
        product: BuildProduct,
        sdks: Sequence[SDK] | None,
        output_dir: Path,
        *,
        overwrite: bool = False,
        embed_debug_symbols: bool = False,
    ) -> AssemblyResult:
        """Like assemble, but report failure in the result instead of raising."""
        result = AssemblyResult(
            product=product,
            sdks=list(product.sdks if sdks is None else sdks),
            output_dir=output_dir,
            overwrite=overwrite,
            embed_debug_symbols=embed_debug_symbols,
        )

        while result.state not in TERMINAL_STAGES:
            self.reporter.stage_changed(result.state.value, product.target.name)
            outcome = self._stages[result.state](result)
            if outcome.ok:
                result.state = self._next_stage(result.state, embed_debug_symbols)
            else:
                result.failed_stage = outcome.stage
                result.error = outcome.error
                result.state = Stage.FAILED

        self.reporter.stage_changed(result.state.value, product.target.name, result.failed_sdk)
        return result

    @staticmethod
    def _next_stage(stage: Stage, embed_debug_symbols: bool) -> Stage:
        if stage is Stage.PLANNING:
            return Stage.ARCHIVING
        if stage is Stage.ARCHIVING:
            return Stage.EXTRACTING if embed_debug_symbols else Stage.PREPARING_OUTPUT
        if stage is Stage.EXTRACTING:
            return Stage.PREPARING_OUTPUT
        if stage is Stage.PREPARING_OUTPUT:
            return Stage.MERGING
        return Stage.DONE

    def _plan(self, result: AssemblyResult) -> StageResult:
        try:
            result.operations = self.planner.plan(result.product, result.sdks)
        except AssemblyError as e:
            return StageResult(Stage.PLANNING, e)
        return StageResult(Stage.PLANNING)

    def _archive(self, result: AssemblyResult) -> StageResult:
        target = result.product.target
        sdk_names = ", ".join(op.sdk.display_name for op in result.operations)
        self.reporter.info(f"Building {target.name} for {sdk_names}")

        for operation in result.operations:
            self.reporter.stage_changed(Stage.ARCHIVING.value, target.name, operation.sdk.name)
            try:
                self.client.archive(
                    self.package,
                    target,
                    result.product.build_configuration,
                    operation.sdk,
                )
            except ProcessFailedError as e:
                return StageResult(
                    Stage.ARCHIVING,
                    ArchiveFailedError(e.message, target=target.name, sdk=operation.sdk.name),
                )
            result.archived.append(operation)
        return StageResult(Stage.ARCHIVING)

    def _extract(self, result: AssemblyResult) -> StageResult:
        target = result.product.target
        debug_symbols: dict[str, DebugSymbols] = {}
        for operation in result.archived:
            self.reporter.stage_changed(Stage.EXTRACTING.value, target.name, operation.sdk.name)
            try:
                debug_symbols[operation.sdk.name] = self.extractor.extract(
                    operation.archive_path, target, operation.sdk
                )
            except (DebugSymbolNotFoundError, ProcessFailedError) as e:
                return StageResult(
                    Stage.EXTRACTING,
                    DebugSymbolExtractionError(
                        e.message, target=target.name, sdk=operation.sdk.name
                    ),
                )
        result.debug_symbols = debug_symbols
        return StageResult(Stage.EXTRACTING)

    def _prepare_output(self, result: AssemblyResult) -> StageResult:
        target = result.product.target
        output_path = result.xcframework_path
        result.output_path = output_path

        try:
            result.output_dir.mkdir(parents=True, exist_ok=True)
            # Without overwrite, an existing XCFramework is left for
            # xcodebuild to reject.
            if result.overwrite and (output_path.exists() or output_path.is_symlink()):
                self.reporter.info(f"Delete {output_path.name}")
                if output_path.is_dir() and not output_path.is_symlink():
                    shutil.rmtree(output_path)
                else:
                    output_path.unlink()
        except OSError as e:
            return StageResult(
                Stage.PREPARING_OUTPUT,
                OutputPreparationError(str(e), target=target.name),
            )
        return StageResult(Stage.PREPARING_OUTPUT)

    def _merge(self, result: AssemblyResult) -> StageResult:
        target = result.product.target
        self.reporter.info("Combining into XCFramework...")
        try:
            result.output_path = self.client.create_xcframework(
                self.package,
                target,
                [operation.sdk for operation in result.archived],
                result.output_dir,
                result.debug_symbols,
            )
        except ProcessFailedError as e:
            return StageResult(Stage.MERGING, MergeFailedError(e.message, target=target.name))
        return StageResult(Stage.MERGING)
