# SPDX-License-Identifier: MIT
"""
xcforge: build XCFrameworks from package graphs.

xcforge turns a resolved package graph into a generated Xcode project,
archives each library for every requested SDK with xcodebuild, and merges
the archives into a single XCFramework.
"""

from __future__ import annotations

import os
from pathlib import Path

__version__ = "0.1.0"

# Re-export commonly used classes for convenient imports
from xcforge.core.manifest import load_package  # noqa: E402
from xcforge.core.options import SDK, BuildOptions, BuildProduct  # noqa: E402
from xcforge.runner import Runner  # noqa: E402


def get_configuration(default: str = "release") -> str:
    """Get the build configuration (debug or release).

    The configuration can be set with:
        xcforge create --configuration debug

    Or through the environment:
        XCFORGE_CONFIGURATION=debug xcforge create

    Precedence (highest to lowest):
        1. Command line (handled by the CLI before calling this)
        2. XCFORGE_CONFIGURATION environment variable
        3. default parameter

    Args:
        default: Default configuration if not set.

    Returns:
        The configuration name, lowercased.
    """
    return (os.environ.get("XCFORGE_CONFIGURATION") or default).lower()


def get_output_dir(default: Path | str = "XCFrameworks") -> Path:
    """Get the directory XCFrameworks are written to.

    Set XCFORGE_OUTPUT_DIR to override the default.
    """
    return Path(os.environ.get("XCFORGE_OUTPUT_DIR") or default)


# Public API exports
__all__ = [
    # Version
    "__version__",
    # Environment defaults
    "get_configuration",
    "get_output_dir",
    # Core classes
    "BuildOptions",
    "BuildProduct",
    "Runner",
    "SDK",
    "load_package",
]
