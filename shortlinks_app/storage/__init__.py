"""
Link storage module.

This module implements the Strategy Pattern for pluggable persistence of
the full link set.
"""

from .strategies import (
    LinkStorageStrategy,
    FileLinkStorage,
    InMemoryLinkStorage,
    encode_link,
    decode_link,
)
from .factory import LinkStorageFactory, LinkStorageBackend

__all__ = [
    "LinkStorageStrategy",
    "FileLinkStorage",
    "InMemoryLinkStorage",
    "encode_link",
    "decode_link",
    "LinkStorageFactory",
    "LinkStorageBackend",
]
