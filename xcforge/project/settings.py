# SPDX-License-Identifier: MIT
"""Build settings templates for generated projects.

Project-level settings are a static template that depends only on the
build configuration. Target-level settings add what is specific to one
framework target: names, Info.plist, linkage and header search paths.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

from xcforge.core.options import BuildConfiguration, configuration_name
from xcforge.project.model import Configuration

if TYPE_CHECKING:
    from xcforge.core.graph import ResolvedTarget

SUPPORTED_PLATFORMS = [
    "macosx",
    "iphoneos",
    "iphonesimulator",
    "appletvos",
    "appletvsimulator",
    "watchos",
    "watchsimulator",
    "xros",
    "xrsimulator",
]

DEPLOYMENT_TARGETS = {
    "MACOSX_DEPLOYMENT_TARGET": "10.13",
    "IPHONEOS_DEPLOYMENT_TARGET": "12.0",
    "TVOS_DEPLOYMENT_TARGET": "12.0",
    "WATCHOS_DEPLOYMENT_TARGET": "4.0",
    "XROS_DEPLOYMENT_TARGET": "1.0",
}

_COMMON_PROJECT_SETTINGS: dict[str, Any] = {
    "ALWAYS_SEARCH_USER_PATHS": "NO",
    "CLANG_ENABLE_MODULES": "YES",
    "CLANG_ENABLE_OBJC_ARC": "YES",
    "COMBINE_HIDPI_IMAGES": "YES",
    "DYLIB_INSTALL_NAME_BASE": "@rpath",
    "OTHER_SWIFT_FLAGS": ["$(inherited)", "-DXcode"],
    "PRODUCT_NAME": "$(TARGET_NAME)",
    "SDKROOT": "macosx",
    "SKIP_INSTALL": "YES",
    "SUPPORTED_PLATFORMS": SUPPORTED_PLATFORMS,
    "SUPPORTS_MACCATALYST": "YES",
    "SWIFT_VERSION": "5.0",
    "USE_HEADERMAP": "NO",
    **DEPLOYMENT_TARGETS,
}

_PROJECT_SETTINGS: dict[BuildConfiguration, dict[str, Any]] = {
    "debug": {
        "COPY_PHASE_STRIP": "NO",
        "DEBUG_INFORMATION_FORMAT": "dwarf",
        "ENABLE_NS_ASSERTIONS": "YES",
        "GCC_OPTIMIZATION_LEVEL": "0",
        "GCC_PREPROCESSOR_DEFINITIONS": ["$(inherited)", "SWIFT_PACKAGE=1", "DEBUG=1"],
        "ONLY_ACTIVE_ARCH": "YES",
        "SWIFT_ACTIVE_COMPILATION_CONDITIONS": ["$(inherited)", "SWIFT_PACKAGE", "DEBUG"],
        "SWIFT_OPTIMIZATION_LEVEL": "-Onone",
    },
    "release": {
        "COPY_PHASE_STRIP": "YES",
        "DEBUG_INFORMATION_FORMAT": "dwarf-with-dsym",
        "GCC_OPTIMIZATION_LEVEL": "s",
        "GCC_PREPROCESSOR_DEFINITIONS": ["$(inherited)", "SWIFT_PACKAGE=1"],
        "SWIFT_ACTIVE_COMPILATION_CONDITIONS": ["$(inherited)", "SWIFT_PACKAGE"],
        "SWIFT_OPTIMIZATION_LEVEL": "-Owholemodule",
    },
}


def project_configuration(configuration: BuildConfiguration) -> Configuration:
    """Project-level settings for one build configuration."""
    settings = dict(_COMMON_PROJECT_SETTINGS)
    settings.update(_PROJECT_SETTINGS[configuration])
    return Configuration(configuration_name(configuration), settings)


def bundle_identifier(target: ResolvedTarget) -> str:
    """Bundle identifiers may not contain underscores."""
    return target.c99name.replace("_", "-")


class TargetBuildSettings:
    """Generates the build settings of framework targets.

    Args:
        is_debug_symbols_embedded: Always produce dSYMs, even for Debug.
        is_static_framework: Build static instead of dynamic frameworks.
    """

    def __init__(
        self,
        *,
        is_debug_symbols_embedded: bool = False,
        is_static_framework: bool = False,
    ) -> None:
        self.is_debug_symbols_embedded = is_debug_symbols_embedded
        self.is_static_framework = is_static_framework

    def generate(
        self,
        target: ResolvedTarget,
        configuration: BuildConfiguration,
        info_plist_path: Path,
    ) -> Configuration:
        settings: dict[str, Any] = {
            "BUILD_LIBRARY_FOR_DISTRIBUTION": "YES",
            "CURRENT_PROJECT_VERSION": "1",
            "DEFINES_MODULE": "YES",
            "INFOPLIST_FILE": str(info_plist_path),
            "LD_RUNPATH_SEARCH_PATHS": ["$(inherited)", "@executable_path/Frameworks"],
            "PRODUCT_BUNDLE_IDENTIFIER": bundle_identifier(target),
            "PRODUCT_MODULE_NAME": target.c99name,
            "PRODUCT_NAME": target.c99name,
            "SKIP_INSTALL": "NO",
            "TARGET_NAME": target.c99name,
        }

        if self.is_static_framework:
            settings["MACH_O_TYPE"] = "staticlib"
        if self.is_debug_symbols_embedded:
            settings["DEBUG_INFORMATION_FORMAT"] = "dwarf-with-dsym"

        if target.is_clang and target.include_dir is not None:
            settings["HEADER_SEARCH_PATHS"] = ["$(inherited)", str(target.include_dir)]
            settings["CLANG_ENABLE_MODULES"] = "YES"

        return Configuration(configuration_name(configuration), settings)
