import os

from .blob_storage import BlobStorage, unique_blob_name
from .dropbox_storage import DropboxStorage, DropboxStorageError
from .filesystem_storage import FileSystemStorage


def get_storage_backend() -> BlobStorage:
    """
    Factory for blob storage backend based on STORAGE_BACKEND env var.
    Defaults to FileSystemStorage.

    Supported values (case-insensitive):
      - 'filesystem'
      - 'dropbox'
    """
    backend = os.getenv("STORAGE_BACKEND", "filesystem").lower()
    if backend in ("filesystem", ""):  # default
        return FileSystemStorage()
    if backend == "dropbox":
        return DropboxStorage()
    error_message = f"Unknown storage backend: {backend}"
    raise ValueError(error_message)


__all__ = [
    "BlobStorage",
    "DropboxStorage",
    "DropboxStorageError",
    "FileSystemStorage",
    "get_storage_backend",
    "unique_blob_name",
]
