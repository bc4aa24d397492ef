# SPDX-License-Identifier: MIT
"""Project file writers for xcforge."""

from xcforge.generators.xcode import XcodeProjectWriter

__all__ = [
    "XcodeProjectWriter",
]
