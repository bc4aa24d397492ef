# SPDX-License-Identifier: MIT
"""Thin client for the xcodebuild command line tool.

Only the two invocations xcforge needs are wrapped: archiving one scheme
for one SDK, and combining archived frameworks into an XCFramework.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import TYPE_CHECKING

from xcforge.build.executor import Executor, ProcessExecutor
from xcforge.core.options import BuildConfiguration, configuration_name

if TYPE_CHECKING:
    from xcforge.build.debug_symbols import DebugSymbols
    from xcforge.core.graph import ResolvedTarget
    from xcforge.core.options import SDK
    from xcforge.core.package import Package


def archive_path(package: Package, target: ResolvedTarget, sdk: SDK) -> Path:
    """Where the archive of target for sdk is written."""
    return package.archives_path / target.c99name / sdk.name / f"{target.c99name}.xcarchive"


def framework_path(archive: Path, target: ResolvedTarget) -> Path:
    """Where a framework lives inside its archive."""
    return archive / "Products" / "Library" / "Frameworks" / f"{target.c99name}.framework"


class XcodeBuildClient:
    """Builds xcodebuild command lines and runs them.

    Args:
        executor: Runs the commands. Defaults to a ProcessExecutor.
        xcodebuild: Name or path of the xcodebuild executable.
    """

    def __init__(
        self,
        executor: Executor | None = None,
        *,
        xcodebuild: str = "xcodebuild",
    ) -> None:
        self.executor = executor or ProcessExecutor()
        self.xcodebuild = xcodebuild

    def archive_command(
        self,
        package: Package,
        target: ResolvedTarget,
        build_configuration: BuildConfiguration,
        sdk: SDK,
    ) -> list[str]:
        return [
            self.xcodebuild,
            "archive",
            "-project",
            str(package.project_path),
            "-scheme",
            target.c99name,
            "-configuration",
            configuration_name(build_configuration),
            "-destination",
            sdk.destination,
            "-archivePath",
            str(archive_path(package, target, sdk)),
            "BUILD_LIBRARY_FOR_DISTRIBUTION=YES",
            "SKIP_INSTALL=NO",
        ]

    def archive(
        self,
        package: Package,
        target: ResolvedTarget,
        build_configuration: BuildConfiguration,
        sdk: SDK,
    ) -> Path:
        """Archive target for one SDK.

        An archive left over from an earlier run is replaced.

        Returns:
            Path of the produced .xcarchive.

        Raises:
            ProcessFailedError: If xcodebuild fails.
        """
        self.executor.execute(
            self.archive_command(package, target, build_configuration, sdk)
        )
        return archive_path(package, target, sdk)

    def create_xcframework_command(
        self,
        package: Package,
        target: ResolvedTarget,
        sdks: Sequence[SDK],
        output_path: Path,
        debug_symbols: Mapping[str, DebugSymbols] | None = None,
    ) -> list[str]:
        cmd = [self.xcodebuild, "-create-xcframework"]
        for sdk in sdks:
            archive = archive_path(package, target, sdk)
            cmd.extend(["-framework", str(framework_path(archive, target))])
            if debug_symbols is not None:
                for path in debug_symbols[sdk.name].paths:
                    cmd.extend(["-debug-symbols", str(path)])
        cmd.extend(["-output", str(output_path)])
        return cmd

    def create_xcframework(
        self,
        package: Package,
        target: ResolvedTarget,
        sdks: Sequence[SDK],
        output_dir: Path,
        debug_symbols: Mapping[str, DebugSymbols] | None = None,
    ) -> Path:
        """Combine the archived frameworks of every SDK into one XCFramework.

        Args:
            package: Package whose archives are combined.
            target: The framework target.
            sdks: SDKs whose archives to include, in order.
            output_dir: Directory receiving ``<Target>.xcframework``.
            debug_symbols: Debug symbols keyed by SDK name, or None to
                embed none.

        Returns:
            Path of the XCFramework.

        Raises:
            ProcessFailedError: If xcodebuild fails, including when the
                output already exists.
        """
        output_path = output_dir / f"{target.c99name}.xcframework"
        self.executor.execute(
            self.create_xcframework_command(
                package, target, sdks, output_path, debug_symbols
            )
        )
        return output_path
