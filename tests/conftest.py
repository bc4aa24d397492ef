# SPDX-License-Identifier: MIT
"""Shared fixtures for xcforge tests."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

import pytest

from xcforge.build.executor import ExecutorResult
from xcforge.core.errors import ProcessFailedError
from xcforge.core.graph import (
    Dependency,
    ModuleMapType,
    PackageGraph,
    ResolvedPackage,
    ResolvedTarget,
    Sources,
)
from xcforge.core.package import Package


class RecordingExecutor:
    """Executor that records commands instead of running them.

    Attributes:
        commands: Every command executed, in order.
        fail_on: Commands containing any of these arguments fail.
        dwarfdump_output: stdout returned for dwarfdump.
        merge_saw_existing: For each -create-xcframework call, whether the
            output path existed when the merge started.
        reject_existing_output: Fail merges whose output already exists,
            like xcodebuild does.
    """

    def __init__(self) -> None:
        self.commands: list[list[str]] = []
        self.fail_on: set[str] = set()
        self.dwarfdump_output = ""
        self.merge_saw_existing: list[bool] = []
        self.reject_existing_output = True

    def execute(self, args: Sequence[str]) -> ExecutorResult:
        cmd = [str(arg) for arg in args]
        self.commands.append(cmd)

        if self.fail_on.intersection(cmd):
            raise ProcessFailedError(cmd, 65, "** ARCHIVE FAILED **")

        if "-create-xcframework" in cmd:
            output = Path(cmd[cmd.index("-output") + 1])
            existed = output.exists()
            self.merge_saw_existing.append(existed)
            if existed and self.reject_existing_output:
                raise ProcessFailedError(cmd, 70, f"error: the path {output} already exists")

        stdout = self.dwarfdump_output if cmd[0] == "dwarfdump" else ""
        return ExecutorResult(args=tuple(cmd), returncode=0, stdout=stdout)

    def commands_for(self, action: str) -> list[list[str]]:
        return [cmd for cmd in self.commands if action in cmd]


@pytest.fixture
def executor() -> RecordingExecutor:
    return RecordingExecutor()


@pytest.fixture
def make_target(tmp_path: Path):
    """Factory creating a target whose files exist below tmp_path/Sources."""

    def factory(
        name: str,
        *,
        kind: str = "library",
        files: Sequence[str] = ("File.swift",),
        headers: Sequence[str] = (),
        dependencies: Sequence[Dependency] = (),
        module_map_type: ModuleMapType | None = None,
    ) -> ResolvedTarget:
        target_dir = tmp_path / "Sources" / name
        paths: list[Path] = []
        for file_name in files:
            path = target_dir / file_name
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text("")
            paths.append(path)

        is_clang = any(not f.endswith(".swift") for f in files)
        include_dir = None
        if is_clang:
            include_dir = target_dir / "include"
            include_dir.mkdir(parents=True, exist_ok=True)
            for header in headers:
                path = include_dir / header
                path.parent.mkdir(parents=True, exist_ok=True)
                path.write_text("")

        return ResolvedTarget(
            name=name,
            kind=kind,
            sources=Sources(root=target_dir, paths=tuple(paths)),
            dependencies=tuple(dependencies),
            language="clang" if is_clang else "swift",
            include_dir=include_dir,
            module_map_type=module_map_type or ModuleMapType(),
        )

    return factory


@pytest.fixture
def make_package(tmp_path: Path):
    """Factory wrapping targets into a single root package at tmp_path."""

    def factory(targets: Sequence[ResolvedTarget], name: str = "MyPackage") -> Package:
        root = ResolvedPackage(
            identity=tmp_path.name.lower(),
            display_name=name,
            path=tmp_path,
            targets=list(targets),
        )
        return Package(
            package_dir=tmp_path,
            graph=PackageGraph(root_packages=[root], packages=[root]),
        )

    return factory
