"""
Factory for creating link storage instances.
Configuration comes from the Settings object passed in.
"""

import logging
from enum import Enum

from shortlinks_app.config import Settings
from .strategies import LinkStorageStrategy, FileLinkStorage, InMemoryLinkStorage

logger = logging.getLogger(__name__)


class LinkStorageBackend(Enum):
    """Available link storage backends"""
    FILE = "file"
    MEMORY = "memory"


class LinkStorageFactory:
    """Simple factory for creating link storage instances."""

    @classmethod
    def create(cls, backend: LinkStorageBackend, settings: Settings) -> LinkStorageStrategy:
        """
        Create a link storage instance.

        Args:
            backend: Type of storage backend (from enum)
            settings: Application settings (file location)

        Returns:
            Link storage instance
        """
        if backend == LinkStorageBackend.FILE:
            storage = FileLinkStorage(path=settings.storage_file)
            logger.info("✅ File link storage initialized (%s)", settings.storage_file)

        elif backend == LinkStorageBackend.MEMORY:
            storage = InMemoryLinkStorage()
            logger.info("✅ In-memory link storage initialized")

        else:
            raise ValueError(f"Unknown storage backend: {backend}")

        return storage
