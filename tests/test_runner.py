# SPDX-License-Identifier: MIT
"""Tests for xcforge.runner."""

from __future__ import annotations

from pathlib import Path

from xcforge.core.graph import ResolvedProduct
from xcforge.core.options import SDK, BuildOptions
from xcforge.runner import Runner


class TestBuildProducts:
    """Tests for Runner.build_products."""

    def test_library_products(self, make_target, make_package, executor) -> None:
        core = make_target("Core")
        extras = make_target("Extras")
        internal = make_target("Internal")
        package = make_package([core, extras, internal])
        package.root.products = [
            ResolvedProduct("Core", (core, extras)),
            ResolvedProduct("All", (core,)),
            ResolvedProduct("tool", (internal,), kind="executable"),
        ]
        options = BuildOptions(build_configuration="debug", sdks=[SDK.from_name("iOS")])

        products = Runner(package, options, executor=executor).build_products()

        assert [p.target.name for p in products] == ["Core", "Extras"]
        assert all(p.build_configuration == "debug" for p in products)
        assert all(p.sdks == (SDK.from_name("iOS"),) for p in products)

    def test_without_products_all_libraries(self, make_target, make_package, executor) -> None:
        package = make_package(
            [make_target("A"), make_target("Tool", kind="executable"), make_target("B")]
        )
        products = Runner(package, BuildOptions(), executor=executor).build_products()
        assert [p.target.name for p in products] == ["A", "B"]


class TestRun:
    """Tests for Runner.run."""

    def test_generates_project_and_assembles(
        self, make_target, make_package, executor, tmp_path: Path
    ) -> None:
        package = make_package([make_target("Core")], name="Core")
        options = BuildOptions(sdks=[SDK.from_name("iOS"), SDK.from_name("iOSSimulator")])

        outputs = Runner(package, options, executor=executor).run(tmp_path / "out")

        assert outputs == [tmp_path / "out" / "Core.xcframework"]
        assert (package.project_path / "project.pbxproj").is_file()
        assert len(executor.commands_for("archive")) == 2
        assert len(executor.commands_for("-create-xcframework")) == 1

    def test_generate_project(self, make_target, make_package, executor) -> None:
        package = make_package([make_target("Core")], name="Core")

        project = Runner(package, BuildOptions(), executor=executor).generate_project()

        assert [t.name for t in project.targets] == ["Core"]
        assert (package.project_path / "project.pbxproj").is_file()
        assert executor.commands == []
