# SPDX-License-Identifier: MIT
"""Resolved package graph.

The graph is the read-only input of project generation: packages, the
targets they declare, the products they vend, and the dependency entries
between them. It is produced by manifest resolution
(see xcforge.core.manifest) and never mutated afterwards.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Literal, Union

# Valid target kinds
TargetKind = Literal[
    "library",
    "executable",
    "snippet",
    "test",
    "binary",
    "system-module",
    "plugin",
]

# Kinds that can never become an Xcode native target
UNSUPPORTED_KINDS = frozenset({"binary", "system-module", "plugin"})

TargetLanguage = Literal["swift", "clang"]

_NON_IDENTIFIER = re.compile(r"[^A-Za-z0-9_]")


def c99name(name: str) -> str:
    """Mangle a target name into a valid C99 extended identifier.

    Every character that may not appear in an identifier becomes an
    underscore, and a leading digit is prefixed with one.

    Example:
        >>> c99name("swift-log")
        'swift_log'
        >>> c99name("3DKit")
        '_3DKit'
    """
    mangled = _NON_IDENTIFIER.sub("_", name)
    if mangled and mangled[0].isdigit():
        mangled = f"_{mangled}"
    return mangled


class GeneratedModuleMapType(Enum):
    """Module map shapes that can be synthesized for a clang target."""

    UMBRELLA_HEADER = "umbrella-header"
    UMBRELLA_DIRECTORY = "umbrella-directory"


ModuleMapKind = Literal["none", "custom", "umbrella-header", "umbrella-directory"]


@dataclass(frozen=True)
class ModuleMapType:
    """Module map declaration of a clang target.

    Attributes:
        kind: How the module is exposed.
        path: The custom module map, umbrella header or umbrella directory.
    """

    kind: ModuleMapKind = "none"
    path: Path | None = None

    @property
    def generated_type(self) -> GeneratedModuleMapType | None:
        """The module map shape to synthesize, if this kind is generatable."""
        if self.kind == "umbrella-header":
            return GeneratedModuleMapType.UMBRELLA_HEADER
        if self.kind == "umbrella-directory":
            return GeneratedModuleMapType.UMBRELLA_DIRECTORY
        return None


@dataclass(frozen=True)
class Sources:
    """Source files of a target, rooted at the target directory."""

    root: Path
    paths: tuple[Path, ...] = ()


@dataclass(frozen=True, eq=False)
class ResolvedTarget:
    """A target with its dependencies resolved.

    Targets compare and hash by identity, so they can key dictionaries
    while the graph is walked.

    Attributes:
        name: Target name as declared in the manifest.
        kind: What the target builds.
        sources: Source files of the target.
        dependencies: Direct dependency entries, in declaration order.
        language: "clang" for C-family targets, "swift" otherwise.
        include_dir: Public headers directory (clang targets only).
        module_map_type: Declared module map (clang targets only).
    """

    name: str
    kind: TargetKind
    sources: Sources
    dependencies: tuple[Dependency, ...] = ()
    language: TargetLanguage = "swift"
    include_dir: Path | None = None
    module_map_type: ModuleMapType = field(default_factory=ModuleMapType)

    @property
    def c99name(self) -> str:
        return c99name(self.name)

    @property
    def is_clang(self) -> bool:
        return self.language == "clang"

    def recursive_dependencies(self) -> list[Dependency]:
        """All dependency entries reachable from this target.

        Target entries continue into the target's own dependencies, and
        product entries continue into the targets the product vends (as
        target entries). Each entry appears once, in depth-first preorder.
        """
        result: list[Dependency] = []
        seen: set[Dependency] = set()

        def visit(entries: Iterable[Dependency]) -> None:
            for entry in entries:
                if entry in seen:
                    continue
                seen.add(entry)
                result.append(entry)
                visit(entry.successors())

        visit(self.dependencies)
        return result

    def __repr__(self) -> str:
        return f"ResolvedTarget({self.name!r}, kind={self.kind!r})"


@dataclass(frozen=True, eq=False)
class ResolvedProduct:
    """A product vended by a package.

    Attributes:
        name: Product name.
        targets: Targets the product is built from.
        kind: Product kind ("library" or "executable").
    """

    name: str
    targets: tuple[ResolvedTarget, ...]
    kind: Literal["library", "executable"] = "library"

    def __repr__(self) -> str:
        return f"ResolvedProduct({self.name!r})"


@dataclass(frozen=True)
class TargetDependency:
    """Dependency on a target, from the same package or vended by a product."""

    target: ResolvedTarget

    def successors(self) -> list[Dependency]:
        return list(self.target.dependencies)


@dataclass(frozen=True)
class ProductDependency:
    """Dependency on a product of another package."""

    product: ResolvedProduct

    def successors(self) -> list[Dependency]:
        return [TargetDependency(target) for target in self.product.targets]


Dependency = Union[TargetDependency, ProductDependency]


@dataclass(eq=False)
class ResolvedPackage:
    """A package with its targets and products resolved.

    Attributes:
        identity: Unique package identity (lowercased directory name).
        display_name: Name declared in the manifest.
        path: Package root directory.
        targets: Targets declared by the package.
        products: Products vended by the package.
    """

    identity: str
    display_name: str
    path: Path
    targets: list[ResolvedTarget] = field(default_factory=list)
    products: list[ResolvedProduct] = field(default_factory=list)

    def target(self, name: str) -> ResolvedTarget | None:
        for target in self.targets:
            if target.name == name:
                return target
        return None

    def product(self, name: str) -> ResolvedProduct | None:
        for product in self.products:
            if product.name == name:
                return product
        return None


@dataclass
class PackageGraph:
    """The resolved graph of a root package and its dependencies.

    Attributes:
        root_packages: Packages the user asked to build.
        packages: Every package in the graph, roots included.
    """

    root_packages: list[ResolvedPackage] = field(default_factory=list)
    packages: list[ResolvedPackage] = field(default_factory=list)

    @property
    def reachable_targets(self) -> list[ResolvedTarget]:
        """Targets of the root packages plus everything they depend on."""
        result: list[ResolvedTarget] = []
        seen: set[ResolvedTarget] = set()

        def add(target: ResolvedTarget) -> None:
            if target not in seen:
                seen.add(target)
                result.append(target)

        for package in self.root_packages:
            for target in package.targets:
                add(target)
                for entry in target.recursive_dependencies():
                    if isinstance(entry, TargetDependency):
                        add(entry.target)
        return result
