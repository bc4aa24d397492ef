# SPDX-License-Identifier: MIT
"""Build options, SDKs and build products."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Literal

from xcforge.core.errors import UnknownSDKError

if TYPE_CHECKING:
    from xcforge.core.graph import ResolvedTarget

BuildConfiguration = Literal["debug", "release"]

FrameworkType = Literal["dynamic", "static"]


def configuration_name(configuration: BuildConfiguration) -> str:
    """Xcode configuration name ("Debug" or "Release")."""
    return configuration.capitalize()


@dataclass(frozen=True)
class SDK:
    """A platform variant xcodebuild can archive for.

    Attributes:
        name: Identifier used on the command line and in archive paths.
        display_name: Human-readable platform name.
        destination: Value passed to ``xcodebuild -destination``.
    """

    name: str
    display_name: str
    destination: str

    @classmethod
    def from_name(cls, name: str) -> SDK:
        """Look up a known SDK by name, case-insensitively.

        Raises:
            UnknownSDKError: If no SDK has that name.
        """
        sdk = _SDKS_BY_NAME.get(name.lower())
        if sdk is None:
            raise UnknownSDKError(name)
        return sdk

    def __str__(self) -> str:
        return self.name


KNOWN_SDKS: tuple[SDK, ...] = (
    SDK("macOS", "macOS", "generic/platform=macOS"),
    SDK("macCatalyst", "Catalyst", "generic/platform=macOS,variant=Mac Catalyst"),
    SDK("iOS", "iOS", "generic/platform=iOS"),
    SDK("iOSSimulator", "iPhone Simulator", "generic/platform=iOS Simulator"),
    SDK("tvOS", "tvOS", "generic/platform=tvOS"),
    SDK("tvOSSimulator", "TV Simulator", "generic/platform=tvOS Simulator"),
    SDK("watchOS", "watchOS", "generic/platform=watchOS"),
    SDK("watchOSSimulator", "Watch Simulator", "generic/platform=watchOS Simulator"),
    SDK("visionOS", "visionOS", "generic/platform=visionOS"),
    SDK("visionOSSimulator", "Vision Simulator", "generic/platform=visionOS Simulator"),
)

_SDKS_BY_NAME = {sdk.name.lower(): sdk for sdk in KNOWN_SDKS}


def parse_sdks(value: str) -> list[SDK]:
    """Parse a comma-separated SDK list such as ``"iOS,iOSSimulator"``."""
    return [SDK.from_name(part.strip()) for part in value.split(",") if part.strip()]


@dataclass
class BuildOptions:
    """Options shared by project generation and XCFramework assembly.

    Attributes:
        build_configuration: Configuration to archive with.
        sdks: SDKs to archive for, in order.
        framework_type: Whether frameworks are linked dynamically or statically.
        is_debug_symbols_embedded: Embed dSYMs into the XCFramework.
    """

    build_configuration: BuildConfiguration = "release"
    sdks: list[SDK] = field(default_factory=list)
    framework_type: FrameworkType = "dynamic"
    is_debug_symbols_embedded: bool = False


@dataclass(frozen=True)
class BuildProduct:
    """A library target to be shipped as an XCFramework.

    Attributes:
        target: The library target.
        build_configuration: Configuration to archive with.
        sdks: Default SDKs to archive for.
    """

    target: ResolvedTarget
    build_configuration: BuildConfiguration = "release"
    sdks: tuple[SDK, ...] = ()

    @property
    def xcframework_name(self) -> str:
        return f"{self.target.c99name}.xcframework"
