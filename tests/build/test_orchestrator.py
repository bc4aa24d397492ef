# SPDX-License-Identifier: MIT
"""Tests for BuildOrchestrator."""

from __future__ import annotations

from pathlib import Path

import pytest

from xcforge.build.orchestrator import BuildOrchestrator, Stage
from xcforge.core.errors import (
    ArchiveFailedError,
    DebugSymbolExtractionError,
    MergeFailedError,
    NoVariantsRequestedError,
)
from xcforge.core.options import SDK, BuildProduct
from xcforge.core.reporter import Reporter

IOS = SDK.from_name("iOS")
SIMULATOR = SDK.from_name("iOSSimulator")
MACOS = SDK.from_name("macOS")


class RecordingReporter:
    """Reporter that keeps every event."""

    def __init__(self) -> None:
        self.messages: list[str] = []
        self.stages: list[tuple[str, str, str | None]] = []

    def info(self, message: str) -> None:
        self.messages.append(message)

    def warning(self, message: str) -> None:
        self.messages.append(message)

    def stage_changed(self, stage: str, target: str, sdk: str | None = None) -> None:
        self.stages.append((stage, target, sdk))


@pytest.fixture
def reporter() -> RecordingReporter:
    return RecordingReporter()


@pytest.fixture
def core(make_target):
    return make_target("Core")


@pytest.fixture
def orchestrator(core, make_package, executor, reporter) -> BuildOrchestrator:
    return BuildOrchestrator(make_package([core]), executor=executor, reporter=reporter)


def archived_sdks(executor) -> list[str]:
    """SDK names of the archive commands, in the order they ran."""
    return [
        Path(cmd[cmd.index("-archivePath") + 1]).parent.name
        for cmd in executor.commands_for("archive")
    ]


def make_dsym(package, target, sdk: SDK) -> None:
    archive = package.archives_path / target.c99name / sdk.name / f"{target.c99name}.xcarchive"
    (archive / "dSYMs" / f"{target.c99name}.framework.dSYM").mkdir(parents=True)


class TestAssemble:
    """End-to-end assembly with a recording executor."""

    def test_two_sdks(self, orchestrator, core, executor, reporter, tmp_path: Path) -> None:
        output = orchestrator.assemble(BuildProduct(core), [IOS, SIMULATOR], tmp_path / "out")

        assert output == tmp_path / "out" / "Core.xcframework"
        assert archived_sdks(executor) == ["iOS", "iOSSimulator"]
        assert executor.commands_for("dwarfdump") == []

        (merge,) = executor.commands_for("-create-xcframework")
        assert merge.count("-framework") == 2
        assert "-debug-symbols" not in merge
        assert merge[-2:] == ["-output", str(output)]
        assert (tmp_path / "out").is_dir()

        assert "Building Core for iOS, iPhone Simulator" in reporter.messages
        assert "Combining into XCFramework..." in reporter.messages

    def test_run_result_paths(self, orchestrator, core, tmp_path: Path) -> None:
        result = orchestrator.run(BuildProduct(core), [IOS], tmp_path)

        assert result.succeeded
        assert result.error is None
        assert result.output_path == result.xcframework_path
        assert result.xcframework_path == tmp_path / "Core.xcframework"

    def test_archives_run_in_requested_order(self, orchestrator, core, executor, tmp_path) -> None:
        orchestrator.assemble(BuildProduct(core), [MACOS, IOS, SIMULATOR], tmp_path)
        assert archived_sdks(executor) == ["macOS", "iOS", "iOSSimulator"]

    def test_merge_is_last_command(self, orchestrator, core, executor, tmp_path) -> None:
        orchestrator.assemble(BuildProduct(core), [IOS, SIMULATOR], tmp_path)
        assert "-create-xcframework" in executor.commands[-1]

    def test_default_sdks_from_product(self, orchestrator, core, executor, tmp_path) -> None:
        product = BuildProduct(core, sdks=(SIMULATOR,))
        orchestrator.assemble(product, None, tmp_path)
        assert archived_sdks(executor) == ["iOSSimulator"]

    def test_debug_configuration(self, orchestrator, core, executor, tmp_path) -> None:
        orchestrator.assemble(BuildProduct(core, build_configuration="debug"), [IOS], tmp_path)
        (archive,) = executor.commands_for("archive")
        assert archive[archive.index("-configuration") + 1] == "Debug"

    def test_no_sdks(self, orchestrator, core, executor, tmp_path) -> None:
        with pytest.raises(NoVariantsRequestedError):
            orchestrator.assemble(BuildProduct(core), [], tmp_path)
        assert executor.commands == []


class TestArchiveFailure:
    """A failed archive stops the run."""

    def test_failure_stops_remaining_archives_and_merge(
        self, orchestrator, core, executor, tmp_path
    ) -> None:
        executor.fail_on.add("generic/platform=iOS Simulator")

        with pytest.raises(ArchiveFailedError) as exc_info:
            orchestrator.assemble(BuildProduct(core), [IOS, SIMULATOR, MACOS], tmp_path)

        assert exc_info.value.sdk == "iOSSimulator"
        assert exc_info.value.target == "Core"
        assert archived_sdks(executor) == ["iOS", "iOSSimulator"]
        assert executor.commands_for("-create-xcframework") == []

    def test_failure_keeps_existing_output(self, orchestrator, core, executor, tmp_path) -> None:
        existing = tmp_path / "Core.xcframework"
        existing.mkdir()
        executor.fail_on.add("generic/platform=iOS")

        with pytest.raises(ArchiveFailedError):
            orchestrator.assemble(BuildProduct(core), [IOS], tmp_path, overwrite=True)

        assert existing.is_dir()

    def test_run_reports_failure_in_result(
        self, orchestrator, core, executor, reporter, tmp_path
    ) -> None:
        executor.fail_on.add("generic/platform=iOS")

        result = orchestrator.run(BuildProduct(core), [IOS, SIMULATOR], tmp_path)

        assert not result.succeeded
        assert result.state is Stage.FAILED
        assert result.failed_stage is Stage.ARCHIVING
        assert result.failed_sdk == "iOS"
        assert result.archived == []
        assert result.output_path is None
        assert result.xcframework_path == tmp_path / "Core.xcframework"
        assert reporter.stages[-1] == ("failed", "Core", "iOS")


class TestOverwrite:
    """Handling of an existing XCFramework."""

    def test_overwrite_deletes_existing(
        self, orchestrator, core, executor, reporter, tmp_path
    ) -> None:
        existing = tmp_path / "Core.xcframework"
        (existing / "Info.plist").parent.mkdir(parents=True)
        (existing / "Info.plist").write_text("")

        output = orchestrator.assemble(BuildProduct(core), [IOS], tmp_path, overwrite=True)

        assert output == existing
        assert executor.merge_saw_existing == [False]
        assert "Delete Core.xcframework" in reporter.messages

    def test_without_overwrite_existing_is_kept(
        self, orchestrator, core, executor, tmp_path
    ) -> None:
        existing = tmp_path / "Core.xcframework"
        existing.mkdir()

        with pytest.raises(MergeFailedError) as exc_info:
            orchestrator.assemble(BuildProduct(core), [IOS], tmp_path, overwrite=False)

        assert executor.merge_saw_existing == [True]
        assert existing.is_dir()
        assert exc_info.value.stage == "merging"

    def test_overwrite_with_nothing_to_delete(
        self, orchestrator, core, executor, reporter, tmp_path
    ) -> None:
        orchestrator.assemble(BuildProduct(core), [IOS], tmp_path, overwrite=True)

        assert executor.merge_saw_existing == [False]
        assert not any(m.startswith("Delete") for m in reporter.messages)


class TestDebugSymbols:
    """Embedding debug symbols."""

    def test_debug_symbols_merged(self, orchestrator, core, executor, tmp_path) -> None:
        for sdk in (IOS, SIMULATOR):
            make_dsym(orchestrator.package, core, sdk)

        result = orchestrator.run(
            BuildProduct(core), [IOS, SIMULATOR], tmp_path / "out", embed_debug_symbols=True
        )

        assert result.succeeded
        assert len(executor.commands_for("--uuid")) == 2
        (merge,) = executor.commands_for("-create-xcframework")
        assert merge.count("-debug-symbols") == 2
        assert set(result.debug_symbols) == {"iOS", "iOSSimulator"}

    def test_missing_dsym_fails_before_merge(self, orchestrator, core, executor, tmp_path) -> None:
        make_dsym(orchestrator.package, core, IOS)

        with pytest.raises(DebugSymbolExtractionError) as exc_info:
            orchestrator.assemble(
                BuildProduct(core), [IOS, SIMULATOR], tmp_path, embed_debug_symbols=True
            )

        assert exc_info.value.sdk == "iOSSimulator"
        assert executor.commands_for("-create-xcframework") == []


class TestStages:
    """The stage sequence of a run."""

    def test_stage_sequence(self, orchestrator, core, reporter, tmp_path) -> None:
        orchestrator.assemble(BuildProduct(core), [IOS], tmp_path)

        assert [stage for stage, _, sdk in reporter.stages if sdk is None] == [
            "planning",
            "archiving",
            "preparing_output",
            "merging",
            "done",
        ]
        assert ("archiving", "Core", "iOS") in reporter.stages

    def test_extracting_stage_when_embedding(self, orchestrator, core, reporter, tmp_path) -> None:
        make_dsym(orchestrator.package, core, IOS)
        orchestrator.assemble(BuildProduct(core), [IOS], tmp_path, embed_debug_symbols=True)

        stages = [stage for stage, _, sdk in reporter.stages if sdk is None]
        assert stages.index("extracting") == stages.index("archiving") + 1

    def test_recording_reporter_is_a_reporter(self, reporter) -> None:
        assert isinstance(reporter, Reporter)
