# SPDX-License-Identifier: MIT
"""Package workspace layout.

A Package couples the resolved graph with the on-disk directories xcforge
writes to. Everything generated lives below ``<package>/.build/xcforge``:

    <workspace>/<Name>.xcodeproj/                      generated project
    <workspace>/<Name>.xcodeproj/<module>_Info.plist   per-target Info.plist
    <workspace>/<Name>.xcodeproj/GeneratedModuleMap/   synthesized module maps
    <workspace>/archives/<target>/<sdk>/               per-SDK archives
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from xcforge.core.errors import InvalidPackageError
from xcforge.core.graph import PackageGraph, ResolvedPackage


@dataclass
class Package:
    """A root package ready to be generated and built.

    Attributes:
        package_dir: Root directory of the package.
        graph: The resolved package graph.
    """

    package_dir: Path
    graph: PackageGraph

    @property
    def root(self) -> ResolvedPackage:
        """The first root package of the graph.

        Raises:
            InvalidPackageError: If the graph has no root package.
        """
        if not self.graph.root_packages:
            raise InvalidPackageError()
        return self.graph.root_packages[0]

    @property
    def display_name(self) -> str:
        return self.root.display_name

    @property
    def workspace_dir(self) -> Path:
        return self.package_dir / ".build" / "xcforge"

    @property
    def project_path(self) -> Path:
        return self.workspace_dir / f"{self.display_name}.xcodeproj"

    @property
    def archives_path(self) -> Path:
        return self.workspace_dir / "archives"
