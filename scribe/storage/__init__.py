"""
Storage abstractions.

Integration points:
- MetadataStorage → document database (users, posts with embedded
  comments and likes)
"""

from scribe.storage.base import (
    MetadataStorage,
    StorageProvider,
    Collections,
)
from scribe.storage.local import InMemoryMetadataStorage, create_local_storage

__all__ = [
    "MetadataStorage",
    "StorageProvider",
    "Collections",
    "InMemoryMetadataStorage",
    "create_local_storage",
]
