"""Storage abstraction layer."""

from .base import StorageBackend, LocalStorageBackend, S3StorageBackend, get_storage_backend

__all__ = [
    "StorageBackend",
    "LocalStorageBackend",
    "S3StorageBackend",
    "get_storage_backend",
]
