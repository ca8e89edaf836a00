import secrets
from abc import ABC, abstractmethod
from pathlib import PurePath

_SUFFIX_BYTES = 8


def unique_blob_name(name: str) -> str:
    """
    Return the base name of ``name`` with a random suffix before its extension.

    ``holiday.jpg`` becomes something like ``holiday-3f9c1a7e0b2d4c6a.jpg``.
    """
    base = PurePath(name.replace("\\", "/")).name or "photo"
    path = PurePath(base)
    stem = path.stem or "photo"
    return f"{stem}-{secrets.token_hex(_SUFFIX_BYTES)}{path.suffix.lower()}"


class BlobStorage(ABC):
    """
    Interface for image blob backends.
    """

    @abstractmethod
    def put(self, data: bytes, name: str, content_type: str | None = None) -> str:
        """
        Store ``data`` under a collision-free variant of ``name`` and return
        its public URL.
        """
        error_message = "put not implemented"
        raise NotImplementedError(error_message)
