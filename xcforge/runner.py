# SPDX-License-Identifier: MIT
"""Generate a package's project and build its XCFrameworks."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from xcforge.build.executor import Executor
from xcforge.build.orchestrator import BuildOrchestrator
from xcforge.core.options import BuildOptions, BuildProduct
from xcforge.core.package import Package
from xcforge.core.reporter import LoggingReporter, Reporter
from xcforge.generators.xcode import XcodeProjectWriter
from xcforge.project.builder import ProjectModelBuilder
from xcforge.project.model import ProjectModel


class Runner:
    """Drives a full run over one package.

    Args:
        package: The package to build.
        options: Build options.
        executor: Runs external tools (xcodebuild, dwarfdump).
        reporter: Receives progress messages.
    """

    def __init__(
        self,
        package: Package,
        options: BuildOptions,
        *,
        executor: Executor | None = None,
        reporter: Reporter | None = None,
    ) -> None:
        self.package = package
        self.options = options
        self.reporter = reporter or LoggingReporter()
        self.orchestrator = BuildOrchestrator(
            package, executor=executor, reporter=self.reporter
        )

    def generate_project(self) -> ProjectModel:
        """Build the project model and write the .xcodeproj."""
        project = ProjectModelBuilder(
            self.package, self.options, reporter=self.reporter
        ).generate()
        XcodeProjectWriter().write(project, self.package.project_path)
        self.reporter.info(f"Generated {self.package.project_path}")
        return project

    def build_products(self) -> list[BuildProduct]:
        """Library targets vended by the root package's library products.

        A package without library products builds all its library targets.
        """
        root = self.package.root
        targets = [
            target
            for product in root.products
            if product.kind == "library"
            for target in product.targets
        ]
        if not root.products:
            targets = list(root.targets)

        products: list[BuildProduct] = []
        seen: set[str] = set()
        for target in targets:
            if target.kind != "library" or target.name in seen:
                continue
            seen.add(target.name)
            products.append(
                BuildProduct(
                    target=target,
                    build_configuration=self.options.build_configuration,
                    sdks=tuple(self.options.sdks),
                )
            )
        return products

    def run(
        self,
        output_dir: Path,
        *,
        overwrite: bool = False,
        products: Sequence[BuildProduct] | None = None,
    ) -> list[Path]:
        """Generate the project and assemble each product in turn.

        Returns:
            Paths of the XCFrameworks, in product order.

        Raises:
            XcforgeError: The first generation or assembly failure.
        """
        self.generate_project()
        if products is None:
            products = self.build_products()

        outputs: list[Path] = []
        for product in products:
            outputs.append(
                self.orchestrator.assemble(
                    product,
                    None,
                    output_dir,
                    overwrite=overwrite,
                    embed_debug_symbols=self.options.is_debug_symbols_embedded,
                )
            )
        return outputs
