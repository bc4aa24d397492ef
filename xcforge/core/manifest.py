# SPDX-License-Identifier: MIT
"""Package manifest loading.

A package is described by an ``xcforge.json`` file at its root:

    {
        "name": "Networking",
        "dependencies": ["../Logging"],
        "targets": [
            {"name": "Net", "type": "library",
             "dependencies": ["NetCore", {"product": "Logging"}]},
            {"name": "NetCore", "path": "Sources/NetCore",
             "publicHeadersPath": "include"}
        ],
        "products": [{"name": "Net", "targets": ["Net"]}]
    }

Local package dependencies are loaded recursively and the whole thing is
resolved into a PackageGraph.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from xcforge.core.errors import ManifestError
from xcforge.core.graph import (
    Dependency,
    ModuleMapType,
    PackageGraph,
    ProductDependency,
    ResolvedPackage,
    ResolvedProduct,
    ResolvedTarget,
    Sources,
    TargetDependency,
    c99name,
)
from xcforge.core.package import Package

logger = logging.getLogger(__name__)

MANIFEST_NAME = "xcforge.json"

SWIFT_SUFFIXES = frozenset({".swift"})
CLANG_SUFFIXES = frozenset({".c", ".m", ".mm", ".cc", ".cpp", ".cxx", ".c++", ".s", ".S"})

VALID_KINDS = frozenset(
    {"library", "executable", "snippet", "test", "binary", "system-module", "plugin"}
)


def load_package(package_dir: Path | str) -> Package:
    """Load and resolve the package rooted at package_dir.

    Raises:
        ManifestError: If a manifest is missing, malformed, or references
            unknown targets, products or packages.
    """
    package_dir = Path(package_dir).resolve()
    loader = _GraphLoader()
    root = loader.load(package_dir)
    graph = PackageGraph(root_packages=[root], packages=list(loader.packages.values()))
    return Package(package_dir=package_dir, graph=graph)


def read_manifest(package_dir: Path) -> dict[str, Any]:
    """Read the raw manifest dictionary of a package."""
    manifest_path = package_dir / MANIFEST_NAME
    try:
        with open(manifest_path) as f:
            data = json.load(f)
    except FileNotFoundError:
        raise ManifestError(f"no {MANIFEST_NAME} found in {package_dir}") from None
    except (json.JSONDecodeError, OSError) as e:
        raise ManifestError(f"cannot read {manifest_path}: {e}") from e

    if not isinstance(data, dict) or not isinstance(data.get("name"), str):
        raise ManifestError(f"{manifest_path}: manifest must be an object with a 'name'")
    return data


def detect_module_map_type(include_dir: Path, target_name: str) -> ModuleMapType:
    """Infer how a clang target's headers are exposed as a module.

    A ``module.modulemap`` in the include directory is used as is. Otherwise
    a header named after the module, either directly in the include
    directory or in a same-named subdirectory, is an umbrella header. Any
    other non-empty include directory becomes an umbrella directory.
    """
    if not include_dir.is_dir():
        return ModuleMapType()

    custom = include_dir / "module.modulemap"
    if custom.is_file():
        return ModuleMapType("custom", custom)

    module_name = c99name(target_name)
    for candidate in (
        include_dir / f"{module_name}.h",
        include_dir / module_name / f"{module_name}.h",
    ):
        if candidate.is_file():
            return ModuleMapType("umbrella-header", candidate)

    if any(include_dir.iterdir()):
        return ModuleMapType("umbrella-directory", include_dir)
    return ModuleMapType()


def scan_sources(root: Path) -> tuple[Path, ...]:
    """Find all compilable source files below root, sorted."""
    if not root.is_dir():
        return ()
    suffixes = SWIFT_SUFFIXES | CLANG_SUFFIXES
    return tuple(
        sorted(p for p in root.rglob("*") if p.is_file() and p.suffix in suffixes)
    )


class _GraphLoader:
    """Loads manifests recursively, resolving each package exactly once."""

    def __init__(self) -> None:
        self.packages: dict[Path, ResolvedPackage] = {}
        self._loading: list[Path] = []

    def load(self, package_dir: Path) -> ResolvedPackage:
        if package_dir in self.packages:
            return self.packages[package_dir]
        if package_dir in self._loading:
            chain = " -> ".join(str(p) for p in [*self._loading, package_dir])
            raise ManifestError(f"package dependency cycle: {chain}")

        self._loading.append(package_dir)
        try:
            manifest = read_manifest(package_dir)
            logger.debug("Loading package %s from %s", manifest["name"], package_dir)

            dependencies = [
                self.load((package_dir / dep_path).resolve())
                for dep_path in manifest.get("dependencies", [])
            ]
            package = _PackageResolver(package_dir, manifest, dependencies).resolve()
        finally:
            self._loading.pop()

        self.packages[package_dir] = package
        return package


class _PackageResolver:
    """Resolves the targets and products of one manifest."""

    def __init__(
        self,
        package_dir: Path,
        manifest: dict[str, Any],
        dependencies: list[ResolvedPackage],
    ) -> None:
        self.package_dir = package_dir
        self.manifest = manifest
        self.dependencies = dependencies
        self._declarations: dict[str, dict[str, Any]] = {}
        self._resolved: dict[str, ResolvedTarget] = {}
        self._resolving: list[str] = []

    def resolve(self) -> ResolvedPackage:
        for decl in self.manifest.get("targets", []):
            name = decl.get("name")
            if not isinstance(name, str) or not name:
                raise ManifestError(f"{self._where()}: target without a name")
            if name in self._declarations:
                raise ManifestError(f"{self._where()}: duplicate target {name}")
            self._declarations[name] = decl

        targets = [self._target(name) for name in self._declarations]
        products = [self._product(decl) for decl in self.manifest.get("products", [])]

        return ResolvedPackage(
            identity=self.package_dir.name.lower(),
            display_name=self.manifest["name"],
            path=self.package_dir,
            targets=targets,
            products=products,
        )

    def _where(self) -> str:
        return str(self.package_dir / MANIFEST_NAME)

    def _target(self, name: str) -> ResolvedTarget:
        if name in self._resolved:
            return self._resolved[name]
        if name in self._resolving:
            chain = " -> ".join([*self._resolving, name])
            raise ManifestError(f"{self._where()}: target dependency cycle: {chain}")

        decl = self._declarations[name]
        self._resolving.append(name)
        try:
            dependencies = tuple(
                self._dependency(entry, name) for entry in decl.get("dependencies", [])
            )
        finally:
            self._resolving.pop()

        kind = decl.get("type", "library")
        if kind not in VALID_KINDS:
            raise ManifestError(f"{self._where()}: target {name} has invalid type {kind!r}")

        default_dir = "Tests" if kind == "test" else "Sources"
        root = self.package_dir / decl.get("path", f"{default_dir}/{name}")
        paths = scan_sources(root)

        has_swift = any(p.suffix in SWIFT_SUFFIXES for p in paths)
        has_clang = any(p.suffix in CLANG_SUFFIXES for p in paths)
        if has_swift and has_clang:
            raise ManifestError(
                f"{self._where()}: target {name} mixes Swift and C-family sources"
            )

        include_dir: Path | None = None
        module_map_type = ModuleMapType()
        if has_clang:
            include_dir = root / decl.get("publicHeadersPath", "include")
            if "moduleMap" in decl:
                module_map_type = ModuleMapType("custom", root / decl["moduleMap"])
            else:
                module_map_type = detect_module_map_type(include_dir, name)

        target = ResolvedTarget(
            name=name,
            kind=kind,
            sources=Sources(root=root, paths=paths),
            dependencies=dependencies,
            language="clang" if has_clang else "swift",
            include_dir=include_dir,
            module_map_type=module_map_type,
        )
        self._resolved[name] = target
        return target

    def _dependency(self, entry: str | dict[str, str], owner: str) -> Dependency:
        if isinstance(entry, str):
            # By-name dependencies prefer a local target, then any product.
            if entry in self._declarations:
                return TargetDependency(self._target(entry))
            return ProductDependency(self._find_product(entry, None, owner))

        if "target" in entry:
            target_name = entry["target"]
            if target_name not in self._declarations:
                raise ManifestError(
                    f"{self._where()}: {owner} depends on unknown target {target_name}"
                )
            return TargetDependency(self._target(target_name))

        if "product" in entry:
            return ProductDependency(
                self._find_product(entry["product"], entry.get("package"), owner)
            )

        raise ManifestError(f"{self._where()}: invalid dependency {entry!r} in {owner}")

    def _find_product(
        self, name: str, package: str | None, owner: str
    ) -> ResolvedProduct:
        for dependency in self.dependencies:
            if package is not None and dependency.identity != package.lower():
                continue
            product = dependency.product(name)
            if product is not None:
                return product
        raise ManifestError(f"{self._where()}: {owner} depends on unknown product {name}")

    def _product(self, decl: dict[str, Any]) -> ResolvedProduct:
        name = decl.get("name")
        if not isinstance(name, str) or not name:
            raise ManifestError(f"{self._where()}: product without a name")
        targets: list[ResolvedTarget] = []
        for target_name in decl.get("targets", [name]):
            if target_name not in self._resolved:
                raise ManifestError(
                    f"{self._where()}: product {name} references unknown target {target_name}"
                )
            targets.append(self._resolved[target_name])
        return ResolvedProduct(
            name=name,
            targets=tuple(targets),
            kind=decl.get("type", "library"),
        )
