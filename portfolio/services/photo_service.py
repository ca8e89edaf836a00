"""Photo create/delete/list orchestration over the blob and photo stores."""

import logging
from collections.abc import Callable, Sequence

from sqlalchemy.exc import SQLAlchemyError

from portfolio.cache import revalidate_path
from portfolio.dao import PhotoDAO
from portfolio.errors import PhotoNotFoundError, StoreError, UploadError, ValidationError
from portfolio.models import Photo
from portfolio.schemas import UploadedFile, UploadForm
from portfolio.storage import BlobStorage

logger = logging.getLogger(__name__)

GALLERY_PATH = "/"

DEFAULT_TITLE = "Untitled"
DEFAULT_LOCATION = "Unknown"
DEFAULT_DESCRIPTION = ""


class PhotoService:
    def __init__(
        self,
        dao: PhotoDAO,
        storage: BlobStorage | None = None,
        revalidate: Callable[[str], None] = revalidate_path,
    ) -> None:
        self.dao = dao
        self.storage = storage
        self.revalidate = revalidate

    def create(self, form: UploadForm, file: UploadedFile | None) -> Photo:
        """
        Store the image bytes, then record the photo.

        A blob written before a failed metadata write is left in place.
        """
        if file is None:
            raise ValidationError("No file provided")
        if self.storage is None:
            raise UploadError("No blob storage configured")

        try:
            url = self.storage.put(file.data, file.filename, file.content_type)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Blob upload failed for %s", file.filename)
            raise UploadError(str(exc) or "Failed to upload photo") from exc

        try:
            photo = self.dao.create(
                image_url=url,
                title=form.title or DEFAULT_TITLE,
                location=form.location or DEFAULT_LOCATION,
                description=form.description or DEFAULT_DESCRIPTION,
                technical_details=form.technical_details(),
            )
        except SQLAlchemyError as exc:
            logger.exception("Saving photo metadata failed; blob %s is orphaned", url)
            raise UploadError(str(exc)) from exc

        self.revalidate(GALLERY_PATH)
        logger.info("Created photo %s (%s)", photo.id, url)
        return photo

    def delete(self, photo_id: str) -> None:
        """Remove the photo record. The stored image is not reclaimed."""
        if not photo_id or not photo_id.strip():
            raise ValidationError("Photo ID is required")

        try:
            deleted = self.dao.delete(photo_id)
        except SQLAlchemyError as exc:
            logger.exception("Deleting photo %s failed", photo_id)
            raise StoreError(str(exc)) from exc
        if not deleted:
            raise PhotoNotFoundError(photo_id)

        self.revalidate(GALLERY_PATH)
        logger.info("Deleted photo %s", photo_id)

    def list_photos(self) -> Sequence[Photo]:
        try:
            return self.dao.list_all()
        except SQLAlchemyError as exc:
            logger.exception("Listing photos failed")
            raise StoreError(str(exc)) from exc
