"""
Exception hierarchy raised by the photo service and mapped to HTTP envelopes
by the API layer.
"""


class PortfolioError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = 500


class ValidationError(PortfolioError):
    """Required input is missing or malformed."""

    status_code = 400


class UploadError(PortfolioError):
    """Writing a new photo to the blob store or the photo store failed."""


class StoreError(PortfolioError):
    """The photo store rejected or failed an operation."""


class PhotoNotFoundError(StoreError):
    """No photo row exists for the requested id."""

    def __init__(self, photo_id: str) -> None:
        self.photo_id = photo_id
        super().__init__(f"Photo not found: {photo_id}")
