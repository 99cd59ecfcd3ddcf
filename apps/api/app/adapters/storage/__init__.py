"""Object storage adapters."""

from .base import ObjectStorage, StorageError
from .memory_storage import InMemoryObjectStorage
from .s3_storage import S3ObjectStorage

__all__ = ["InMemoryObjectStorage", "ObjectStorage", "S3ObjectStorage", "StorageError"]
