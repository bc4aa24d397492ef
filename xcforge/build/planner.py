# SPDX-License-Identifier: MIT
"""Planning the per-SDK archive operations of a build product."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from xcforge.build.xcodebuild import archive_path, framework_path
from xcforge.core.errors import NoVariantsRequestedError

if TYPE_CHECKING:
    from xcforge.core.options import SDK, BuildProduct
    from xcforge.core.package import Package


@dataclass(frozen=True)
class ArchiveOperation:
    """Archiving one build product for one SDK.

    Attributes:
        product: The product being archived.
        sdk: The SDK to archive for.
        archive_path: Where the .xcarchive is written.
    """

    product: BuildProduct
    sdk: SDK
    archive_path: Path

    @property
    def framework_path(self) -> Path:
        return framework_path(self.archive_path, self.product.target)


class ArchivePlanner:
    """Turns a build product and an SDK list into archive operations.

    Args:
        package: The package the product belongs to.
    """

    def __init__(self, package: Package) -> None:
        self.package = package

    def plan(self, product: BuildProduct, sdks: Sequence[SDK]) -> list[ArchiveOperation]:
        """One operation per distinct SDK, in the order requested.

        Raises:
            NoVariantsRequestedError: If sdks is empty.
        """
        if not sdks:
            raise NoVariantsRequestedError(product.target.name)

        operations: list[ArchiveOperation] = []
        seen: set[str] = set()
        for sdk in sdks:
            if sdk.name in seen:
                continue
            seen.add(sdk.name)
            operations.append(
                ArchiveOperation(
                    product=product,
                    sdk=sdk,
                    archive_path=archive_path(self.package, product.target, sdk),
                )
            )
        return operations
