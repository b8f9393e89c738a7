"""
AppFunctions Pilot - Declaration Registry
Process-wide cache of the declarations discovered for one target package

This module is optimized for:
- Wholesale replacement on every discovery update (no partial states)
- O(1) lookup by function identifier
- Readers keeping the snapshot they started with
"""

import logging
import time
from types import MappingProxyType
from typing import Dict, List, Optional, Sequence, Tuple

from ..core.exceptions import FunctionNotFoundError
from ..core.interfaces import BaseParser, MetadataProvider
from ..core.metadata import FunctionMetadata, PackageMetadata
from ..core.schema import FunctionDeclaration
from ..parsers.metadata_parser import MetadataParser

logger = logging.getLogger(__name__)


class DeclarationSnapshot:
    """
    Immutable view of the declarations known at one point in time

    Returned by DeclarationRegistry.snapshot and replaced, never mutated, on
    every update.
    """

    def __init__(
        self,
        entries: Sequence[Tuple[FunctionDeclaration, FunctionMetadata]] = (),
        app_description: str = "",
        load_time_ms: float = 0.0,
    ):
        self.app_description = app_description
        self.load_time_ms = load_time_ms
        self._declarations: Tuple[FunctionDeclaration, ...] = tuple(decl for decl, _ in entries)

        # Create lookup index for O(1) function access
        self._index = MappingProxyType({decl.name: decl for decl, _ in entries})
        self._metadata = MappingProxyType({decl.key: meta for decl, meta in entries})

    @property
    def declarations(self) -> Tuple[FunctionDeclaration, ...]:
        return self._declarations

    def get(self, function_id: str) -> Optional[FunctionDeclaration]:
        """Get declaration by identifier (O(1) lookup)"""
        return self._index.get(function_id)

    def find_by_short_name(self, short_name: str) -> Optional[FunctionDeclaration]:
        for decl in self._declarations:
            if decl.short_name == short_name:
                return decl
        return None

    def has(self, function_id: str) -> bool:
        return function_id in self._index

    def names(self) -> List[str]:
        return list(self._index.keys())

    def get_metadata(self, declaration: FunctionDeclaration) -> Optional[FunctionMetadata]:
        """Metadata the declaration was derived from"""
        return self._metadata.get(declaration.key)

    def __len__(self) -> int:
        return len(self._declarations)


EMPTY_SNAPSHOT = DeclarationSnapshot()


class DeclarationRegistry:
    """
    Declaration Registry

    Single writer (the discovery callback: update/refresh/watch), many
    readers. Replacing the snapshot is one attribute assignment, so readers
    never observe a half-built state and need no lock.

    Example:
        ```python
        registry = DeclarationRegistry("com.example.tool")
        await registry.refresh(provider)

        declaration = registry.require("com.example.tool#add")
        ```
    """

    def __init__(self, target_package: str, parser: Optional[BaseParser] = None):
        """
        Initialize registry

        Args:
            target_package: Package whose functions are tracked
            parser: Metadata parser (default: MetadataParser())
        """
        self.target_package = target_package
        self.parser = parser or MetadataParser()
        self._snapshot: DeclarationSnapshot = EMPTY_SNAPSHOT

    @property
    def snapshot(self) -> DeclarationSnapshot:
        return self._snapshot

    @property
    def declarations(self) -> Tuple[FunctionDeclaration, ...]:
        return self._snapshot.declarations

    @property
    def app_description(self) -> str:
        return self._snapshot.app_description

    def update(self, packages: List[PackageMetadata]) -> DeclarationSnapshot:
        """
        Replace the cached declarations with a new discovery result

        Args:
            packages: Full package list reported by discovery

        Returns:
            The installed snapshot (empty if the target package is absent)
        """
        package = next((p for p in packages if p.package_name == self.target_package), None)
        if package is None:
            logger.warning("Unable to find functions for the target package '%s'", self.target_package)
            self._snapshot = EMPTY_SNAPSHOT
            return self._snapshot

        logger.info("Received %d functions from %s", len(package.app_functions), self.target_package)
        start_time = time.perf_counter()

        entries = []
        metadata_by_id: Dict[str, FunctionMetadata] = {m.id: m for m in package.app_functions}
        for declaration in self.parser.parse_metadata(package.app_functions):
            entries.append((declaration, metadata_by_id[declaration.name]))

        self._snapshot = DeclarationSnapshot(
            entries,
            app_description=package.full_description,
            load_time_ms=(time.perf_counter() - start_time) * 1000,
        )
        return self._snapshot

    def clear(self) -> None:
        self._snapshot = EMPTY_SNAPSHOT

    async def refresh(self, provider: MetadataProvider) -> DeclarationSnapshot:
        """Pull the current metadata from `provider` and install it"""
        packages = await provider.fetch_metadata(self.target_package)
        return self.update(packages)

    async def watch(self, provider: MetadataProvider) -> None:
        """
        Follow the provider's update stream until it ends (or the task is cancelled)
        """
        async for packages in provider.observe(self.target_package):
            self.update(packages)

    def get(self, function_id: str) -> Optional[FunctionDeclaration]:
        return self._snapshot.get(function_id)

    def require(self, function_id: str) -> FunctionDeclaration:
        """
        Get declaration by identifier or short name

        Raises:
            FunctionNotFoundError: If no current declaration matches
        """
        snapshot = self._snapshot
        declaration = snapshot.get(function_id) or snapshot.find_by_short_name(function_id)
        if declaration is None:
            raise FunctionNotFoundError(function_id, snapshot.names())
        return declaration

    def get_metadata(self, declaration: FunctionDeclaration) -> Optional[FunctionMetadata]:
        return self._snapshot.get_metadata(declaration)


__all__ = ['DeclarationRegistry', 'DeclarationSnapshot', 'EMPTY_SNAPSHOT']
