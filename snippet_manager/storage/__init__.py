"""Storage module for blob storage operations."""

from snippet_manager.storage.blob_storage import BlobStorage, S3Storage

__all__ = ["BlobStorage", "S3Storage"]
