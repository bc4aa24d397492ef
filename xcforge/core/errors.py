# SPDX-License-Identifier: MIT
"""Custom exceptions for xcforge.

All xcforge exceptions inherit from XcforgeError. Errors raised while
assembling an XCFramework also carry the pipeline stage, the target and
the SDK that failed, so callers can report exactly where a run stopped.
"""

from __future__ import annotations

from collections.abc import Sequence


class XcforgeError(Exception):
    """Base class for all xcforge exceptions.

    Attributes:
        message: The error message.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ManifestError(XcforgeError):
    """Package manifest could not be loaded or is malformed."""


class UnknownSDKError(XcforgeError):
    """An SDK name does not match any supported platform.

    Attributes:
        name: The unrecognized SDK name.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"unknown SDK: {name}")


class ToolNotFoundError(XcforgeError):
    """Required tool was not found.

    Attributes:
        tool: The name of the tool that was not found.
    """

    def __init__(self, tool: str) -> None:
        self.tool = tool
        super().__init__(f"tool not found: {tool}")


class ProcessFailedError(XcforgeError):
    """An external process exited with a non-zero status or failed to start.

    Attributes:
        command: The command line that was run.
        returncode: Exit status, or None if the process never started.
        stderr: Captured standard error output.
    """

    def __init__(
        self,
        args: Sequence[str],
        returncode: int | None,
        stderr: str = "",
    ) -> None:
        self.command = list(args)
        self.returncode = returncode
        self.stderr = stderr
        program = " ".join(self.command[:2])
        if returncode is None:
            detail = f"{program}: could not be started"
        else:
            detail = f"{program}: exited with status {returncode}"
        if stderr.strip():
            detail = f"{detail}\n{stderr.strip()}"
        super().__init__(detail)


class DebugSymbolNotFoundError(XcforgeError):
    """No debug-symbol bundle exists where one was expected.

    Attributes:
        path: The path that was searched.
    """

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"debug symbols not found: {path}")


class GenerateError(XcforgeError):
    """Error while generating the Xcode project model."""


class InvalidPackageError(GenerateError):
    """The package graph has no resolvable root package."""

    def __init__(self, message: str = "package graph has no root package") -> None:
        super().__init__(message)


class UnsupportedTargetKindError(GenerateError):
    """A target kind that cannot be turned into a framework was reached.

    Attributes:
        kind: The unsupported target kind.
        target: Name of the offending target.
    """

    def __init__(self, kind: str, target: str) -> None:
        self.kind = kind
        self.target = target
        super().__init__(f"unsupported target kind '{kind}' for target {target}")


class ModuleMapGenerationError(GenerateError):
    """A module map could not be written.

    Attributes:
        target: Name of the target whose module map failed.
    """

    def __init__(self, target: str, reason: str) -> None:
        self.target = target
        super().__init__(f"failed to generate module map for {target}: {reason}")


class AssemblyError(XcforgeError):
    """Error while building and combining an XCFramework.

    Attributes:
        stage: Name of the pipeline stage that failed.
        target: Name of the target being assembled.
        sdk: Name of the SDK being processed, if the stage is per-SDK.
    """

    stage = "assembling"

    def __init__(
        self,
        message: str,
        *,
        target: str,
        sdk: str | None = None,
    ) -> None:
        self.target = target
        self.sdk = sdk
        where = f"{target} ({sdk})" if sdk else target
        super().__init__(f"{where}: {self.stage} failed: {message}")


class NoVariantsRequestedError(AssemblyError):
    """No SDK was requested for a build product."""

    stage = "planning"

    def __init__(self, target: str) -> None:
        super().__init__("no SDKs requested", target=target)


class ArchiveFailedError(AssemblyError):
    """xcodebuild archive failed for one SDK."""

    stage = "archiving"


class DebugSymbolExtractionError(AssemblyError):
    """Debug symbols for one SDK could not be located or inspected."""

    stage = "extracting"


class OutputPreparationError(AssemblyError):
    """An existing XCFramework could not be removed."""

    stage = "preparing_output"


class MergeFailedError(AssemblyError):
    """xcodebuild -create-xcframework failed."""

    stage = "merging"
