# SPDX-License-Identifier: MIT
"""Project model construction from a package graph."""

from xcforge.project.builder import ProjectModelBuilder
from xcforge.project.model import ProjectModel

__all__ = [
    "ProjectModel",
    "ProjectModelBuilder",
]
