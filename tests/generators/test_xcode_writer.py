# SPDX-License-Identifier: MIT
"""Tests for XcodeProjectWriter."""

from __future__ import annotations

from pathlib import Path

from xcforge.core.graph import ModuleMapType, TargetDependency
from xcforge.core.options import BuildOptions
from xcforge.generators import XcodeProjectWriter
from xcforge.project.builder import ProjectModelBuilder


def build_project(package, **options):
    return ProjectModelBuilder(package, BuildOptions(**options)).generate()


class TestXcodeProjectWriterBasic:
    """Basic tests for XcodeProjectWriter."""

    def test_writes_project_pbxproj(self, make_target, make_package) -> None:
        """Test that project.pbxproj is written inside the bundle."""
        package = make_package([make_target("Core")], name="Core")
        project = build_project(package)

        pbxproj = XcodeProjectWriter().write(project, package.project_path)

        assert pbxproj == package.project_path / "project.pbxproj"
        content = pbxproj.read_text()
        assert "// !$*UTF8*$!" in content
        assert "PBXProject" in content
        assert "PBXNativeTarget" in content
        assert "com.apple.product-type.framework" in content
        assert "Core.framework" in content

    def test_creates_xcodeproj_bundle(self, make_target, make_package, tmp_path: Path) -> None:
        """Test that write() creates the bundle directory."""
        project = build_project(make_package([make_target("Core")], name="Core"))

        XcodeProjectWriter().write(project, tmp_path / "out" / "Core.xcodeproj")

        assert (tmp_path / "out" / "Core.xcodeproj").is_dir()
        assert (tmp_path / "out" / "Core.xcodeproj" / "project.pbxproj").is_file()


class TestXcodeProjectWriterTree:
    """Tests for the pbxproj object tree."""

    def test_root_object(self, make_target, make_package) -> None:
        project = build_project(make_package([make_target("Core")]))
        tree = XcodeProjectWriter().create_project_tree(project)

        root = tree["objects"][tree["rootObject"]]
        assert root["isa"] == "PBXProject"
        assert root["projectDirPath"] == "../.."
        assert len(root["targets"]) == 1
        assert tree["objects"][root["mainGroup"]]["isa"] == "PBXGroup"
        assert tree["objects"][root["productRefGroup"]]["name"] == "Products"

    def test_target_dependency_objects(self, make_target, make_package) -> None:
        b = make_target("B")
        a = make_target("A", dependencies=[TargetDependency(b)])
        project = build_project(make_package([a, b]))

        objects = XcodeProjectWriter().create_project_tree(project)["objects"]
        targets = {o["name"]: o for o in objects.values() if o["isa"] == "PBXNativeTarget"}
        b_id = next(
            key for key, o in objects.items()
            if o["isa"] == "PBXNativeTarget" and o["name"] == "B"
        )

        (dep_id,) = targets["A"]["dependencies"]
        dependency = objects[dep_id]
        assert dependency["isa"] == "PBXTargetDependency"
        assert dependency["target"] == b_id
        proxy = objects[dependency["targetProxy"]]
        assert proxy["isa"] == "PBXContainerItemProxy"
        assert proxy["remoteGlobalIDString"] == b_id
        assert targets["B"]["dependencies"] == []

    def test_link_phase_references_product(self, make_target, make_package) -> None:
        b = make_target("B")
        a = make_target("A", dependencies=[TargetDependency(b)])
        project = build_project(make_package([a, b]))

        objects = XcodeProjectWriter().create_project_tree(project)["objects"]
        targets = {o["name"]: o for o in objects.values() if o["isa"] == "PBXNativeTarget"}
        phases = [objects[p] for p in targets["A"]["buildPhases"]]
        (link,) = [p for p in phases if p["isa"] == "PBXFrameworksBuildPhase"]
        (build_file_id,) = link["files"]

        assert objects[build_file_id]["fileRef"] == targets["B"]["productReference"]
        assert objects[targets["B"]["productReference"]]["explicitFileType"] == "wrapper.framework"

    def test_public_headers(self, make_target, make_package) -> None:
        net = make_target("Net", files=["net.c"], headers=["Net.h"])
        project = build_project(make_package([net]))

        objects = XcodeProjectWriter().create_project_tree(project)["objects"]
        (headers,) = [o for o in objects.values() if o["isa"] == "PBXHeadersBuildPhase"]
        (build_file_id,) = headers["files"]
        build_file = objects[build_file_id]

        assert build_file["settings"] == {"ATTRIBUTES": ["Public"]}
        assert objects[build_file["fileRef"]]["lastKnownFileType"] == "sourcecode.c.h"

    def test_module_map_setting_written(self, make_target, make_package) -> None:
        net = make_target(
            "Net",
            files=["net.c"],
            headers=["socket.h"],
            module_map_type=ModuleMapType("umbrella-directory", None),
        )
        package = make_package([net])
        pbxproj = XcodeProjectWriter().write(build_project(package), package.project_path)

        content = pbxproj.read_text()
        assert "MODULEMAP_FILE" in content
        assert "GeneratedModuleMap" in content


class TestXcodeProjectWriterDeterminism:
    """Regenerating an unchanged package produces the same file."""

    def test_same_model_same_ids(self, make_target, make_package) -> None:
        b = make_target("B", files=["Sub/B.swift"])
        a = make_target("A", dependencies=[TargetDependency(b)])
        package = make_package([a, b])

        first = XcodeProjectWriter().create_project_tree(build_project(package))
        second = XcodeProjectWriter().create_project_tree(build_project(package))

        assert first == second

    def test_ids_are_unique(self, make_target, make_package) -> None:
        package = make_package([make_target("A", files=["A.swift", "x/A.swift"])])
        tree = XcodeProjectWriter().create_project_tree(build_project(package))

        root = tree["objects"][tree["rootObject"]]
        assert tree["rootObject"] not in (root["mainGroup"], root["productRefGroup"])
        ids = list(tree["objects"])
        assert len(ids) == len(set(ids))
        assert all(len(object_id) == 24 for object_id in ids)

    def test_rewrite_is_identical(self, make_target, make_package) -> None:
        package = make_package([make_target("Core")])
        writer = XcodeProjectWriter()

        pbxproj = writer.write(build_project(package), package.project_path)
        first = pbxproj.read_text()
        writer.write(build_project(package), package.project_path)

        assert pbxproj.read_text() == first


class TestProductsGroup:
    """The Products group is the productRefGroup only."""

    def test_not_a_child_of_main_group(self, make_target, make_package) -> None:
        project = build_project(make_package([make_target("Core")]))
        tree = XcodeProjectWriter().create_project_tree(project)

        objects = tree["objects"]
        root = objects[tree["rootObject"]]
        assert root["productRefGroup"] not in objects[root["mainGroup"]]["children"]

    def test_target_named_products(self, make_target, make_package) -> None:
        project = build_project(make_package([make_target("Products")]))
        tree = XcodeProjectWriter().create_project_tree(project)

        objects = tree["objects"]
        root = objects[tree["rootObject"]]
        main_children = [objects[c] for c in objects[root["mainGroup"]]["children"]]
        assert [c.get("name") for c in main_children] == ["Products"]
        assert objects[root["productRefGroup"]]["sourceTree"] == "BUILT_PRODUCTS_DIR"
        assert root["productRefGroup"] not in objects[root["mainGroup"]]["children"]
