# SPDX-License-Identifier: MIT
"""Module map strategy selection and generation for clang targets.

Every clang target resolves to exactly one ModuleMapStrategy:

- CustomModuleMap: the manifest declares its own module map file.
- UmbrellaHeaderModuleMap: a public header is named after the module, so
  the framework's headers phase exposes the headers and Xcode synthesizes
  the module itself.
- GeneratedModuleMap: a module map is written into the project directory.
- NoModuleMap: the target exposes no module.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Union

from xcforge.core.errors import ModuleMapGenerationError
from xcforge.core.graph import GeneratedModuleMapType

if TYPE_CHECKING:
    from xcforge.core.graph import ResolvedTarget


@dataclass(frozen=True)
class CustomModuleMap:
    path: Path


@dataclass(frozen=True)
class UmbrellaHeaderModuleMap:
    pass


@dataclass(frozen=True)
class GeneratedModuleMap:
    kind: GeneratedModuleMapType


@dataclass(frozen=True)
class NoModuleMap:
    pass


ModuleMapStrategy = Union[
    CustomModuleMap, UmbrellaHeaderModuleMap, GeneratedModuleMap, NoModuleMap
]


def find_headers(include_dir: Path | None) -> list[Path]:
    """All ``.h`` files below include_dir, sorted. Empty if it doesn't exist."""
    if include_dir is None or not include_dir.is_dir():
        return []
    return sorted(p for p in include_dir.rglob("*.h") if p.is_file())


def resolve_module_map_strategy(target: ResolvedTarget) -> ModuleMapStrategy:
    """Select how a clang target exposes its module.

    A declared custom module map always wins, even when an umbrella header
    is also present. Then an umbrella header named after the module, then a
    generatable declaration, and finally no module map at all.
    """
    declared = target.module_map_type
    if declared.kind == "custom" and declared.path is not None:
        return CustomModuleMap(declared.path)

    stems = {header.stem for header in find_headers(target.include_dir)}
    if target.c99name in stems:
        return UmbrellaHeaderModuleMap()

    generated_type = declared.generated_type
    if generated_type is not None:
        return GeneratedModuleMap(generated_type)

    return NoModuleMap()


def module_map_contents(
    module_name: str,
    kind: GeneratedModuleMapType,
    umbrella_path: Path,
) -> str:
    """Render a module map with umbrella_path as its umbrella header or directory."""
    if kind is GeneratedModuleMapType.UMBRELLA_HEADER:
        umbrella = f'umbrella header "{umbrella_path}"'
    else:
        umbrella = f'umbrella "{umbrella_path}"'
    return f"module {module_name} {{\n    {umbrella}\n    export *\n}}\n"


def generate_module_map(
    target: ResolvedTarget,
    kind: GeneratedModuleMapType,
    project_path: Path,
) -> Path:
    """Write ``GeneratedModuleMap/<module>/module.modulemap`` under project_path.

    An existing file with identical contents is left untouched so the
    project does not rebuild needlessly.

    Returns:
        Path of the written module map.

    Raises:
        ModuleMapGenerationError: If the target has no include directory or
            the file cannot be written.
    """
    if target.include_dir is None:
        raise ModuleMapGenerationError(target.name, "target has no include directory")

    module_map_path = project_path / "GeneratedModuleMap" / target.c99name / "module.modulemap"
    umbrella_path = target.module_map_type.path
    if umbrella_path is None or target.module_map_type.generated_type is not kind:
        if kind is GeneratedModuleMapType.UMBRELLA_HEADER:
            umbrella_path = target.include_dir / f"{target.c99name}.h"
        else:
            umbrella_path = target.include_dir
    contents = module_map_contents(target.c99name, kind, umbrella_path)

    try:
        if module_map_path.is_file() and module_map_path.read_text() == contents:
            return module_map_path
        module_map_path.parent.mkdir(parents=True, exist_ok=True)
        module_map_path.write_text(contents)
    except OSError as e:
        raise ModuleMapGenerationError(target.name, str(e)) from e
    return module_map_path
