from .api import ApiError, PhotoApiClient
from .view_model import GalleryViewModel, ModalState

__all__ = [
    "ApiError",
    "GalleryViewModel",
    "ModalState",
    "PhotoApiClient",
]
