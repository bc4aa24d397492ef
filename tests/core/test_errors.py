# SPDX-License-Identifier: MIT
"""Tests for xcforge.core.errors."""

from __future__ import annotations

from xcforge.core.errors import (
    ArchiveFailedError,
    AssemblyError,
    DebugSymbolExtractionError,
    GenerateError,
    InvalidPackageError,
    MergeFailedError,
    ModuleMapGenerationError,
    NoVariantsRequestedError,
    ProcessFailedError,
    ToolNotFoundError,
    UnsupportedTargetKindError,
    XcforgeError,
)


class TestErrorHierarchy:
    """All errors derive from XcforgeError."""

    def test_generation_errors(self) -> None:
        for error in (
            InvalidPackageError(),
            UnsupportedTargetKindError("binary", "Blob"),
            ModuleMapGenerationError("Net", "disk full"),
        ):
            assert isinstance(error, GenerateError)
            assert isinstance(error, XcforgeError)

    def test_assembly_errors(self) -> None:
        assert issubclass(ArchiveFailedError, AssemblyError)
        assert issubclass(MergeFailedError, AssemblyError)
        assert issubclass(AssemblyError, XcforgeError)


class TestErrorMessages:
    """Errors say what failed and where."""

    def test_unsupported_target_kind(self) -> None:
        error = UnsupportedTargetKindError("binary", "Blob")
        assert error.kind == "binary"
        assert error.target == "Blob"
        assert "binary" in str(error)
        assert "Blob" in str(error)

    def test_process_failed(self) -> None:
        error = ProcessFailedError(["xcodebuild", "archive", "-project"], 65, "boom\n")
        assert error.command == ["xcodebuild", "archive", "-project"]
        assert error.returncode == 65
        assert str(error) == "xcodebuild archive: exited with status 65\nboom"

    def test_process_not_started(self) -> None:
        error = ProcessFailedError(["dwarfdump"], None)
        assert "could not be started" in str(error)

    def test_assembly_error_carries_stage_target_and_sdk(self) -> None:
        error = ArchiveFailedError("exit 65", target="Core", sdk="iOS")
        assert error.stage == "archiving"
        assert error.target == "Core"
        assert error.sdk == "iOS"
        assert str(error) == "Core (iOS): archiving failed: exit 65"

    def test_assembly_error_without_sdk(self) -> None:
        error = MergeFailedError("exit 70", target="Core")
        assert error.sdk is None
        assert str(error) == "Core: merging failed: exit 70"

    def test_stage_names(self) -> None:
        assert NoVariantsRequestedError("Core").stage == "planning"
        assert DebugSymbolExtractionError("x", target="Core").stage == "extracting"

    def test_tool_not_found(self) -> None:
        error = ToolNotFoundError("xcodebuild")
        assert error.tool == "xcodebuild"
        assert str(error) == "tool not found: xcodebuild"
