# SPDX-License-Identifier: MIT
"""Translate a resolved package graph into a ProjectModel.

Every reachable library target becomes a framework target with its own
group tree, sources phase, link phase and target dependencies. Clang
targets additionally get their public headers and a module map.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING

from xcforge.core.errors import InvalidPackageError, UnsupportedTargetKindError
from xcforge.core.graph import UNSUPPORTED_KINDS, TargetDependency
from xcforge.core.options import BuildOptions, configuration_name
from xcforge.core.reporter import LoggingReporter, Reporter
from xcforge.project import model
from xcforge.project.module_map import (
    CustomModuleMap,
    GeneratedModuleMap,
    UmbrellaHeaderModuleMap,
    find_headers,
    generate_module_map,
    resolve_module_map_strategy,
)
from xcforge.project.settings import TargetBuildSettings, project_configuration

if TYPE_CHECKING:
    from xcforge.core.graph import ResolvedTarget
    from xcforge.core.package import Package

# Map target kinds to Xcode product types
PRODUCT_TYPE_MAP = {
    "library": "com.apple.product-type.framework",
    "executable": "com.apple.product-type.tool",
    "snippet": "com.apple.product-type.tool",
    "test": "com.apple.product-type.bundle.unit-test",
}

# Map product types to explicit file types
EXPLICIT_FILE_TYPE_MAP = {
    "com.apple.product-type.framework": "wrapper.framework",
    "com.apple.product-type.tool": "compiled.mach-o.executable",
    "com.apple.product-type.bundle.unit-test": "wrapper.cfbundle",
}

INFO_PLIST = """\
<?xml version="1.0" encoding="UTF-8"?>
<plist version="1.0">
<dict>
<key>CFBundleDevelopmentRegion</key>
<string>en</string>
<key>CFBundleExecutable</key>
<string>$(EXECUTABLE_NAME)</string>
<key>CFBundleIdentifier</key>
<string>$(PRODUCT_BUNDLE_IDENTIFIER)</string>
<key>CFBundleInfoDictionaryVersion</key>
<string>6.0</string>
<key>CFBundleName</key>
<string>$(PRODUCT_NAME)</string>
<key>CFBundlePackageType</key>
<string>FMWK</string>
<key>CFBundleShortVersionString</key>
<string>1.0</string>
<key>CFBundleSignature</key>
<string>????</string>
<key>CFBundleVersion</key>
<string>$(CURRENT_PROJECT_VERSION)</string>
<key>NSPrincipalClass</key>
<string></string>
</dict>
</plist>
"""


def product_path(target: ResolvedTarget) -> Path:
    """File name of the product a target builds."""
    if target.kind == "library":
        return Path(f"{target.c99name}.framework")
    if target.kind == "test":
        return Path(f"{target.c99name}.xctest")
    if target.kind in ("executable", "snippet"):
        return Path(target.name)
    raise UnsupportedTargetKindError(target.kind, target.name)


def info_plist_path(project_path: Path, target: ResolvedTarget) -> Path:
    return project_path / f"{target.c99name}_Info.plist"


class ProjectModelBuilder:
    """Builds the ProjectModel of a package.

    Example:
        package = load_package("path/to/package")
        builder = ProjectModelBuilder(package, BuildOptions())
        project = builder.generate()
        XcodeProjectWriter().write(project, package.project_path)

    Args:
        package: The package to generate a project for.
        options: Build options (configuration, framework type, dSYMs).
        reporter: Receives progress messages.
    """

    def __init__(
        self,
        package: Package,
        options: BuildOptions,
        *,
        reporter: Reporter | None = None,
    ) -> None:
        self.package = package
        self.options = options
        self.reporter = reporter or LoggingReporter()
        self._settings = TargetBuildSettings(
            is_debug_symbols_embedded=options.is_debug_symbols_embedded,
            is_static_framework=options.framework_type == "static",
        )

    def generate(self) -> model.ProjectModel:
        """Build the project model.

        Writes one Info.plist per target and any generated module maps
        into the project directory.

        Raises:
            InvalidPackageError: If the graph has no root package.
            UnsupportedTargetKindError: If a library depends on a binary,
                system-module or plugin target.
            ModuleMapGenerationError: If a module map cannot be written.
        """
        roots = self.package.graph.root_packages
        if not roots:
            raise InvalidPackageError()
        source_root = roots[0].path

        project = self._prepare_project()
        project.project_dir_path = os.path.relpath(
            source_root, self.package.project_path.parent
        )

        self._generate_targets(project, source_root)
        return project

    def _prepare_project(self) -> model.ProjectModel:
        configuration_list = model.ConfigurationList(
            configurations=[
                project_configuration("debug"),
                project_configuration("release"),
            ],
            default_configuration_name=configuration_name(
                self.options.build_configuration
            ),
            default_configuration_is_visible=True,
        )
        return model.ProjectModel(
            name=self.package.display_name,
            configuration_list=configuration_list,
        )

    def _generate_targets(self, project: model.ProjectModel, source_root: Path) -> None:
        targets_to_generate = sorted(
            (t for t in self.package.graph.reachable_targets if t.kind == "library"),
            key=lambda t: t.name,
        )

        native_targets: dict[ResolvedTarget, model.NativeTarget] = {}
        for target in targets_to_generate:
            self.reporter.info(f"Generating target {target.name}")
            native_targets[target] = self._make_target(project, target, source_root)
            project.targets.append(native_targets[target])

        for target, native in native_targets.items():
            if target.is_clang:
                self._apply_clang_settings(project, target, native, source_root)

        for target, native in native_targets.items():
            dependencies = self._dependency_targets(target, native_targets)
            native.dependencies = [
                model.TargetDependency(native_targets[dep]) for dep in dependencies
            ]

            link_files: list[model.BuildFile] = []
            if target.kind == "library":
                link_files = [
                    model.BuildFile(native_targets[dep].product)
                    for dep in dependencies
                    if native_targets[dep].product is not None
                ]
            native.build_phases.append(model.BuildPhase("frameworks", link_files))

            self._link_module_maps(native, [native_targets[dep] for dep in dependencies])

    def _dependency_targets(
        self,
        target: ResolvedTarget,
        native_targets: dict[ResolvedTarget, model.NativeTarget],
    ) -> list[ResolvedTarget]:
        """Generated targets reachable through target dependency entries."""
        result: list[ResolvedTarget] = []
        for entry in target.recursive_dependencies():
            if not isinstance(entry, TargetDependency):
                continue
            dependency = entry.target
            if dependency.kind in UNSUPPORTED_KINDS:
                raise UnsupportedTargetKindError(dependency.kind, dependency.name)
            if dependency.kind != "library":
                self.reporter.warning(
                    f"{target.name}: ignoring dependency on {dependency.kind} "
                    f"target {dependency.name}"
                )
                continue
            if dependency in native_targets and dependency not in result:
                result.append(dependency)
        return result

    def _make_target(
        self,
        project: model.ProjectModel,
        target: ResolvedTarget,
        source_root: Path,
    ) -> model.NativeTarget:
        product_type = PRODUCT_TYPE_MAP.get(target.kind)
        if product_type is None:
            raise UnsupportedTargetKindError(target.kind, target.name)

        plist_path = info_plist_path(self.package.project_path, target)
        plist_path.parent.mkdir(parents=True, exist_ok=True)
        plist_path.write_text(INFO_PLIST)

        configuration_list = model.ConfigurationList(
            configurations=[
                self._settings.generate(target, "debug", plist_path),
                self._settings.generate(target, "release", plist_path),
            ],
            default_configuration_name=configuration_name(
                self.options.build_configuration
            ),
        )

        product_ref = project.products_group.add_file(
            product_path(target),
            source_tree="BUILT_PRODUCTS_DIR",
            explicit_file_type=EXPLICIT_FILE_TYPE_MAP[product_type],
        )

        target_group = project.main_group.add_group(target.name)
        build_files: list[model.BuildFile] = []
        for source in target.sources.paths:
            group = self.resolve_group(source.parent, target_group, target.sources.root)
            ref = group.add_file(_relative_path(source, source_root))
            build_files.append(model.BuildFile(ref))

        return model.NativeTarget(
            name=target.c99name,
            product_name=target.c99name,
            product_type=product_type,
            configuration_list=configuration_list,
            product=product_ref,
            build_phases=[model.BuildPhase("sources", build_files)],
        )

    def _apply_clang_settings(
        self,
        project: model.ProjectModel,
        target: ResolvedTarget,
        native: model.NativeTarget,
        source_root: Path,
    ) -> None:
        target_group = project.main_group.add_group(target.name)
        header_refs: list[model.FileReference] = []
        if target.include_dir is not None:
            include_group = self.resolve_group(
                target.include_dir, target_group, target.sources.root
            )
            for header in find_headers(target.include_dir):
                group = self.resolve_group(header.parent, include_group, target.include_dir)
                header_refs.append(group.add_file(_relative_path(header, source_root)))

        strategy = resolve_module_map_strategy(target)
        native.module_map_strategy = strategy

        if isinstance(strategy, CustomModuleMap):
            native.module_map_path = strategy.path
        elif isinstance(strategy, UmbrellaHeaderModuleMap):
            native.build_phases.append(
                model.BuildPhase(
                    "headers",
                    [model.BuildFile(ref, {"ATTRIBUTES": ["Public"]}) for ref in header_refs],
                )
            )
        elif isinstance(strategy, GeneratedModuleMap):
            native.module_map_path = generate_module_map(
                target, strategy.kind, self.package.project_path
            )
            self.reporter.info(f"Generated module map for {target.name}")

        if native.module_map_path is not None:
            native.configuration_list.set_build_setting(
                "MODULEMAP_FILE", str(native.module_map_path)
            )

    def _link_module_maps(
        self,
        native: model.NativeTarget,
        dependencies: list[model.NativeTarget],
    ) -> None:
        """Make the module maps of clang dependencies visible to native."""
        module_maps = [dep.module_map_path for dep in dependencies if dep.module_map_path]
        if not module_maps:
            return
        swift_flags = ["$(inherited)"]
        c_flags = ["$(inherited)"]
        for path in module_maps:
            swift_flags.extend(["-Xcc", f"-fmodule-map-file={path}"])
            c_flags.append(f"-fmodule-map-file={path}")
        native.configuration_list.set_build_setting("OTHER_SWIFT_FLAGS", swift_flags)
        native.configuration_list.set_build_setting("OTHER_CFLAGS", c_flags)

    @staticmethod
    def resolve_group(path: Path, parent: model.Group, source_root: Path) -> model.Group:
        """Return the group mirroring path below parent.

        path is taken relative to source_root and walked one component at
        a time, reusing an existing child group of the same name or
        creating it. When path is source_root itself, parent is returned.
        Paths outside source_root also resolve to parent.
        """
        try:
            relative = path.relative_to(source_root)
        except ValueError:
            return parent

        group = parent
        for component in relative.parts:
            group = group.add_group(component)
        return group


def _relative_path(path: Path, source_root: Path) -> Path:
    """path relative to source_root, possibly climbing with '..'."""
    return Path(os.path.relpath(path, source_root))
