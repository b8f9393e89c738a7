"""
JSON file metadata provider

Reads the serialized package metadata list (the same JSON a tool app hands
out when asked for its metadata) and reports the target package's entry.
"""
import asyncio
import logging
from pathlib import Path
from typing import List

from ..core.interfaces import MetadataProvider
from ..core.metadata import PackageMetadata, load_package_metadata_file

logger = logging.getLogger(__name__)


class JsonMetadataProvider(MetadataProvider):

    def __init__(self, path: str):
        self.path = Path(path)

    async def fetch_metadata(self, target_package: str) -> List[PackageMetadata]:
        packages = await asyncio.to_thread(load_package_metadata_file, str(self.path))
        matching = [p for p in packages if p.package_name == target_package]
        if not matching:
            logger.warning("No metadata for %s in %s", target_package, self.path)
        else:
            logger.info("Successfully fetched %d metadata items.", len(matching[0].app_functions))
        return matching


__all__ = ['JsonMetadataProvider']
