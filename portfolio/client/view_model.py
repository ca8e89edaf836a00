"""
Client-side gallery state.

The view model owns the photo list, the selected photo and which modal is
open. Every change goes through its methods: local edits are applied first
for immediate display, then the list is replaced by the server's listing.
"""

import asyncio
import logging
from collections.abc import Callable, Iterable
from enum import Enum

from portfolio.client.api import ApiError, PhotoApiClient
from portfolio.schemas import ErrorResponse, PhotoResponse, UploadedFile, UploadForm

logger = logging.getLogger(__name__)

CLEAR_SELECTION_DELAY = 0.3  # seconds; lets the viewer's exit animation finish


class ModalState(str, Enum):
    NONE = "none"
    VIEWING = "viewing"
    ADDING = "adding"


def log_notice(message: str) -> None:
    logger.warning("%s", message)


class GalleryViewModel:
    def __init__(
        self,
        api: PhotoApiClient,
        photos: Iterable[PhotoResponse] = (),
        notify: Callable[[str], None] = log_notice,
        clear_delay: float = CLEAR_SELECTION_DELAY,
    ) -> None:
        self.api = api
        self.notify = notify
        self.clear_delay = clear_delay
        self._photos: list[PhotoResponse] = list(photos)
        self.selected: PhotoResponse | None = None
        self.modal = ModalState.NONE
        self.uploading = False
        self._pending_clear: asyncio.TimerHandle | None = None

    @property
    def photos(self) -> tuple[PhotoResponse, ...]:
        return tuple(self._photos)

    def _cancel_pending_clear(self) -> None:
        if self._pending_clear is not None:
            self._pending_clear.cancel()
            self._pending_clear = None

    def _clear_selection(self) -> None:
        self._pending_clear = None
        self.selected = None

    def open_viewer(self, photo: PhotoResponse) -> None:
        self._cancel_pending_clear()
        self.selected = photo
        self.modal = ModalState.VIEWING

    def open_add(self) -> None:
        self.modal = ModalState.ADDING

    def close(self) -> None:
        """Hide any modal; the selection is cleared a moment later."""
        self.modal = ModalState.NONE
        self._cancel_pending_clear()
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self.selected = None
            return
        self._pending_clear = loop.call_later(self.clear_delay, self._clear_selection)

    async def resync(self) -> bool:
        """Replace the local list with the server's. False if that failed."""
        try:
            self._photos = await self.api.list_photos()
        except ApiError as exc:
            logger.exception("Resynchronizing photos failed")
            self.notify(f"Could not refresh photos: {exc}")
            return False
        return True

    async def add(self, photo: PhotoResponse) -> None:
        self._photos.insert(0, photo)
        await self.resync()

    async def submit_upload(self, form: UploadForm, file: UploadedFile | None) -> PhotoResponse | None:
        """
        Upload a new photo from the add form.

        On success the photo is added and the form closes; on failure a
        notice is shown and the form stays open.
        """
        if file is None:
            self.notify("Please select an image file")
            return None

        self.uploading = True
        try:
            result = await self.api.upload_photo(form, file)
        except ApiError:
            logger.exception("Upload error")
            self.notify("An error occurred while uploading the photo")
            return None
        finally:
            self.uploading = False

        if isinstance(result, ErrorResponse):
            self.notify(result.error or "Failed to upload photo")
            return None
        await self.add(result.photo)
        self.close()
        return result.photo

    async def delete(self, photo_id: str) -> bool:
        """Remove a photo now, then confirm against the server."""
        if self.selected is not None and self.selected.id == photo_id:
            self.close()
        self._photos = [p for p in self._photos if p.id != photo_id]

        try:
            result = await self.api.delete_photo(photo_id)
        except ApiError:
            logger.exception("Delete error")
            await self.resync()
            self.notify("An error occurred while deleting the photo")
            return False

        await self.resync()
        if isinstance(result, ErrorResponse):
            self.notify(result.error or "Failed to delete photo")
            return False
        return True
