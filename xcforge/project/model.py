# SPDX-License-Identifier: MIT
"""In-memory model of a generated Xcode project.

The model is what ProjectModelBuilder produces and XcodeProjectWriter
serializes. It mirrors the pbxproj object graph closely enough for a
one-to-one translation, without committing to object identifiers:

- Group nodes form a tree. Each group owns its children and keeps a
  name index so the same directory never appears twice under one parent.
- NativeTargets own their build phases and dependency edges.
- ConfigurationLists hold the Debug and Release build settings.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Literal

if TYPE_CHECKING:
    from collections.abc import Iterator

    from xcforge.project.module_map import ModuleMapStrategy

SourceTree = Literal["<group>", "SOURCE_ROOT", "BUILT_PRODUCTS_DIR"]

BuildPhaseKind = Literal["sources", "frameworks", "headers"]


@dataclass(eq=False)
class FileReference:
    """A file known to the project.

    Attributes:
        path: Path of the file, interpreted relative to source_tree.
        source_tree: What path is relative to.
        explicit_file_type: File type for products, whose type Xcode
            cannot infer from a file that does not exist yet.
    """

    path: Path
    source_tree: SourceTree = "SOURCE_ROOT"
    explicit_file_type: str | None = None

    @property
    def name(self) -> str:
        return self.path.name


@dataclass(eq=False)
class BuildFile:
    """A file reference used by a build phase, with per-file settings."""

    file: FileReference
    settings: dict[str, Any] | None = None


@dataclass(eq=False)
class BuildPhase:
    """An ordered list of build files processed in one build step."""

    kind: BuildPhaseKind
    files: list[BuildFile] = field(default_factory=list)

    @property
    def file_references(self) -> list[FileReference]:
        return [build_file.file for build_file in self.files]


class Group:
    """A node in the project navigator tree.

    Children are kept in insertion order. Child groups are also indexed
    by name and child files by path, so lookups never rescan the tree.
    """

    def __init__(self, name: str | None = None, *, source_tree: SourceTree = "<group>") -> None:
        self.name = name
        self.source_tree = source_tree
        self.children: list[Group | FileReference] = []
        self._groups: dict[str, Group] = {}
        self._files: dict[Path, FileReference] = {}

    def group(self, name: str) -> Group | None:
        """Return the child group called name, if there is one."""
        return self._groups.get(name)

    def add_group(self, name: str) -> Group:
        """Return the child group called name, creating it if needed."""
        existing = self._groups.get(name)
        if existing is not None:
            return existing
        child = Group(name)
        self._groups[name] = child
        self.children.append(child)
        return child

    def add_file(
        self,
        path: Path,
        *,
        source_tree: SourceTree = "SOURCE_ROOT",
        explicit_file_type: str | None = None,
    ) -> FileReference:
        """Return the file reference for path, creating it if needed."""
        existing = self._files.get(path)
        if existing is not None:
            return existing
        ref = FileReference(path, source_tree, explicit_file_type)
        self._files[path] = ref
        self.children.append(ref)
        return ref

    @property
    def groups(self) -> list[Group]:
        return [child for child in self.children if isinstance(child, Group)]

    @property
    def files(self) -> list[FileReference]:
        return [child for child in self.children if isinstance(child, FileReference)]

    def walk(self) -> Iterator[Group | FileReference]:
        """Yield this group and all descendants, depth first."""
        yield self
        for child in self.children:
            if isinstance(child, Group):
                yield from child.walk()
            else:
                yield child

    def __repr__(self) -> str:
        return f"Group({self.name!r}, children={len(self.children)})"


@dataclass
class Configuration:
    """A named set of build settings (Debug or Release)."""

    name: str
    build_settings: dict[str, Any] = field(default_factory=dict)


@dataclass
class ConfigurationList:
    """The build configurations of a project or target."""

    configurations: list[Configuration] = field(default_factory=list)
    default_configuration_name: str = "Release"
    default_configuration_is_visible: bool = False

    def configuration(self, name: str) -> Configuration | None:
        for configuration in self.configurations:
            if configuration.name == name:
                return configuration
        return None

    def set_build_setting(self, key: str, value: Any) -> None:
        """Set key in every configuration of the list."""
        for configuration in self.configurations:
            configuration.build_settings[key] = value


@dataclass(eq=False)
class TargetDependency:
    """Edge from a target to another target it depends on."""

    target: NativeTarget


@dataclass(eq=False)
class NativeTarget:
    """A buildable target of the project.

    Attributes:
        name: Target (and scheme) name.
        product_name: Name of the built product without extension.
        product_type: Xcode product type identifier.
        configuration_list: Per-target build settings.
        product: Reference to the built product in the Products group.
        build_phases: Ordered build phases.
        dependencies: Targets that must be built first.
        module_map_strategy: How a clang target exposes its module,
            None for Swift targets.
        module_map_path: Module map passed to the compiler, if any.
    """

    name: str
    product_name: str
    product_type: str
    configuration_list: ConfigurationList
    product: FileReference | None = None
    build_phases: list[BuildPhase] = field(default_factory=list)
    dependencies: list[TargetDependency] = field(default_factory=list)
    module_map_strategy: ModuleMapStrategy | None = None
    module_map_path: Path | None = None

    def build_phase(self, kind: BuildPhaseKind) -> BuildPhase | None:
        """Return the first build phase of the given kind."""
        for phase in self.build_phases:
            if phase.kind == kind:
                return phase
        return None

    @property
    def dependency_names(self) -> list[str]:
        return [dependency.target.name for dependency in self.dependencies]

    def __repr__(self) -> str:
        return f"NativeTarget({self.name!r})"


@dataclass(eq=False)
class ProjectModel:
    """A complete project, ready for serialization.

    Attributes:
        name: Project name.
        configuration_list: Project-level build settings.
        main_group: Root of the navigator tree.
        products_group: Group holding product references. It is not part
            of the main group tree, so a target group may share its name.
        targets: Native targets, sorted by name.
        project_dir_path: Source root, relative to the .xcodeproj's parent.
        compatibility_version: Oldest Xcode able to open the project.
    """

    name: str
    configuration_list: ConfigurationList
    main_group: Group = field(default_factory=Group)
    products_group: Group = field(
        default_factory=lambda: Group("Products", source_tree="BUILT_PRODUCTS_DIR")
    )
    targets: list[NativeTarget] = field(default_factory=list)
    project_dir_path: str = ""
    compatibility_version: str = "Xcode 11.0"

    def target(self, name: str) -> NativeTarget | None:
        for target in self.targets:
            if target.name == name:
                return target
        return None
