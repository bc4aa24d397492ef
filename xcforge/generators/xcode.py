# SPDX-License-Identifier: MIT
"""Xcode project writer.

Serializes a ProjectModel into an .xcodeproj bundle. The pbxproj object
tree is built as plain dictionaries and handed to pbxproj for encoding.
Object identifiers are derived from stable keys, so regenerating an
unchanged model produces an identical project file.
"""

from __future__ import annotations

import uuid
from pathlib import Path
from typing import Any

from pbxproj import XcodeProject

from xcforge.project.model import (
    BuildPhase,
    ConfigurationList,
    FileReference,
    Group,
    NativeTarget,
    ProjectModel,
)

# Map file suffixes to Xcode file types
LAST_KNOWN_FILE_TYPE_MAP = {
    ".swift": "sourcecode.swift",
    ".c": "sourcecode.c.c",
    ".h": "sourcecode.c.h",
    ".m": "sourcecode.c.objc",
    ".mm": "sourcecode.cpp.objcpp",
    ".cc": "sourcecode.cpp.cpp",
    ".cpp": "sourcecode.cpp.cpp",
    ".cxx": "sourcecode.cpp.cpp",
    ".c++": "sourcecode.cpp.cpp",
    ".hpp": "sourcecode.cpp.h",
    ".s": "sourcecode.asm",
    ".S": "sourcecode.asm",
    ".modulemap": "sourcecode.module-map",
    ".plist": "text.plist.xml",
}

# Map build phase kinds to pbxproj object types
BUILD_PHASE_ISA = {
    "sources": "PBXSourcesBuildPhase",
    "frameworks": "PBXFrameworksBuildPhase",
    "headers": "PBXHeadersBuildPhase",
}


def _generate_id(key: str) -> str:
    """Generate a 24-character hex ID like Xcode uses, stable for a key."""
    return uuid.uuid5(uuid.NAMESPACE_URL, key).hex[:24].upper()


class _ObjectIds:
    """Assigns each model object one stable, unique ID."""

    def __init__(self, namespace: str) -> None:
        self._namespace = namespace
        self._by_object: dict[int, str] = {}
        self._used: set[str] = set()
        self._keep_alive: list[object] = []

    def __call__(self, obj: object, key: str) -> str:
        existing = self._by_object.get(id(obj))
        if existing is not None:
            return existing
        candidate = _generate_id(f"{self._namespace}:{key}")
        n = 0
        while candidate in self._used:
            n += 1
            candidate = _generate_id(f"{self._namespace}:{key}#{n}")
        self._used.add(candidate)
        self._by_object[id(obj)] = candidate
        self._keep_alive.append(obj)
        return candidate

    def new(self, key: str) -> str:
        """ID for an object that only exists in the serialized tree."""
        return self(object(), key)


class XcodeProjectWriter:
    """Writes ProjectModels as Xcode project bundles.

    Example:
        project = ProjectModelBuilder(package, options).generate()
        XcodeProjectWriter().write(project, package.project_path)
        # Build with: xcodebuild -project <path> -scheme <target>
    """

    def __init__(self) -> None:
        self._ids = _ObjectIds("")
        self._objects: dict[str, dict[str, Any]] = {}

    def write(self, project: ProjectModel, xcodeproj_path: Path) -> Path:
        """Write project to xcodeproj_path, replacing any existing project file.

        Returns:
            Path of the written project.pbxproj.
        """
        xcodeproj_path.mkdir(parents=True, exist_ok=True)
        pbxproj_path = xcodeproj_path / "project.pbxproj"

        tree = self.create_project_tree(project)
        XcodeProject(tree, str(pbxproj_path)).save()
        return pbxproj_path

    def create_project_tree(self, project: ProjectModel) -> dict[str, Any]:
        """Create the pbxproj dictionary tree for project."""
        self._ids = _ObjectIds(project.name)
        self._objects = {}

        proj_id = self._ids(project, "PBXProject")
        main_group_id = self._add_group(project.main_group, "")
        # Referenced only as productRefGroup, never from the main group
        products_group_id = self._add_group(project.products_group, "Products")

        target_ids = [self._add_target(target, proj_id) for target in project.targets]

        self._objects[proj_id] = {
            "isa": "PBXProject",
            "buildConfigurationList": self._add_configuration_list(
                project.configuration_list, "project"
            ),
            "compatibilityVersion": project.compatibility_version,
            "developmentRegion": "en",
            "hasScannedForEncodings": "0",
            "knownRegions": ["en", "Base"],
            "mainGroup": main_group_id,
            "productRefGroup": products_group_id,
            "projectDirPath": project.project_dir_path,
            "projectRoot": "",
            "targets": target_ids,
        }

        return {
            "archiveVersion": "1",
            "classes": {},
            "objectVersion": "52",
            "objects": self._objects,
            "rootObject": proj_id,
        }

    def _add_group(self, group: Group, key: str) -> str:
        group_id = self._ids(group, f"PBXGroup:{key}")
        if group_id in self._objects:
            return group_id

        children: list[str] = []
        for child in group.children:
            if isinstance(child, Group):
                children.append(self._add_group(child, f"{key}/{child.name}"))
            else:
                children.append(self._add_file_reference(child, key))

        obj: dict[str, Any] = {
            "isa": "PBXGroup",
            "children": children,
            "sourceTree": group.source_tree,
        }
        if group.name is not None:
            obj["name"] = group.name
        self._objects[group_id] = obj
        return group_id

    def _add_file_reference(self, ref: FileReference, key: str) -> str:
        ref_id = self._ids(ref, f"PBXFileReference:{key}:{ref.path}")
        if ref_id in self._objects:
            return ref_id

        obj: dict[str, Any] = {
            "isa": "PBXFileReference",
            "name": ref.name,
            "path": str(ref.path),
            "sourceTree": ref.source_tree,
        }
        if ref.explicit_file_type is not None:
            obj["explicitFileType"] = ref.explicit_file_type
            obj["includeInIndex"] = "0"
        else:
            obj["lastKnownFileType"] = LAST_KNOWN_FILE_TYPE_MAP.get(
                ref.path.suffix, "text"
            )
        self._objects[ref_id] = obj
        return ref_id

    def _add_configuration_list(self, config_list: ConfigurationList, key: str) -> str:
        list_id = self._ids(config_list, f"XCConfigurationList:{key}")
        config_ids: list[str] = []
        for configuration in config_list.configurations:
            config_id = self._ids(
                configuration, f"XCBuildConfiguration:{key}:{configuration.name}"
            )
            self._objects[config_id] = {
                "isa": "XCBuildConfiguration",
                "buildSettings": dict(configuration.build_settings),
                "name": configuration.name,
            }
            config_ids.append(config_id)

        self._objects[list_id] = {
            "isa": "XCConfigurationList",
            "buildConfigurations": config_ids,
            "defaultConfigurationIsVisible": (
                "1" if config_list.default_configuration_is_visible else "0"
            ),
            "defaultConfigurationName": config_list.default_configuration_name,
        }
        return list_id

    def _add_build_phase(self, phase: BuildPhase, key: str) -> str:
        phase_id = self._ids(phase, f"{BUILD_PHASE_ISA[phase.kind]}:{key}")
        file_ids: list[str] = []
        for index, build_file in enumerate(phase.files):
            file_id = self._ids(build_file, f"PBXBuildFile:{key}:{phase.kind}:{index}")
            obj: dict[str, Any] = {
                "isa": "PBXBuildFile",
                "fileRef": self._ids(build_file.file, f"PBXFileReference:{build_file.file.path}"),
            }
            if build_file.settings:
                obj["settings"] = dict(build_file.settings)
            self._objects[file_id] = obj
            file_ids.append(file_id)

        self._objects[phase_id] = {
            "isa": BUILD_PHASE_ISA[phase.kind],
            "buildActionMask": "2147483647",
            "files": file_ids,
            "runOnlyForDeploymentPostprocessing": "0",
        }
        return phase_id

    def _add_target(self, target: NativeTarget, proj_id: str) -> str:
        target_id = self._ids(target, f"PBXNativeTarget:{target.name}")

        dependency_ids: list[str] = []
        for dependency in target.dependencies:
            dep_target_id = self._ids(
                dependency.target, f"PBXNativeTarget:{dependency.target.name}"
            )
            proxy_id = self._ids.new(
                f"PBXContainerItemProxy:{target.name}:{dependency.target.name}"
            )
            dep_id = self._ids(
                dependency, f"PBXTargetDependency:{target.name}:{dependency.target.name}"
            )
            self._objects[proxy_id] = {
                "isa": "PBXContainerItemProxy",
                "containerPortal": proj_id,
                "proxyType": "1",
                "remoteGlobalIDString": dep_target_id,
                "remoteInfo": dependency.target.name,
            }
            self._objects[dep_id] = {
                "isa": "PBXTargetDependency",
                "target": dep_target_id,
                "targetProxy": proxy_id,
            }
            dependency_ids.append(dep_id)

        obj: dict[str, Any] = {
            "isa": "PBXNativeTarget",
            "buildConfigurationList": self._add_configuration_list(
                target.configuration_list, f"target:{target.name}"
            ),
            "buildPhases": [
                self._add_build_phase(phase, f"{target.name}:{index}")
                for index, phase in enumerate(target.build_phases)
            ],
            "buildRules": [],
            "dependencies": dependency_ids,
            "name": target.name,
            "productName": target.product_name,
            "productType": target.product_type,
        }
        if target.product is not None:
            obj["productReference"] = self._ids(
                target.product, f"PBXFileReference:{target.product.path}"
            )
        self._objects[target_id] = obj
        return target_id
