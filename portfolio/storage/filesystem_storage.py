import logging
import os
from pathlib import Path

from .blob_storage import BlobStorage, unique_blob_name

logger = logging.getLogger(__name__)


class FileSystemStorage(BlobStorage):
    """
    Blob storage using the local filesystem.

    Files land in ``base_path`` and are addressed as ``{base_url}/{name}``;
    the application serves ``base_path`` at ``base_url``.
    """
    def __init__(self, base_path: str | None = None, base_url: str | None = None) -> None:
        self.base_path = Path(base_path or os.getenv("MEDIA_ROOT", "./media"))
        self.base_url = (base_url or os.getenv("MEDIA_URL", "/media")).rstrip("/")

    def put(self, data: bytes, name: str, content_type: str | None = None) -> str:
        self.base_path.mkdir(parents=True, exist_ok=True)
        stored_name = unique_blob_name(name)
        file_path = self.base_path / stored_name
        # never overwrite an existing blob
        with file_path.open("xb") as fh:
            fh.write(data)
        logger.info("Stored %d bytes at %s", len(data), file_path)
        return f"{self.base_url}/{stored_name}"
