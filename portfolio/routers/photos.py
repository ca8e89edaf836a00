import logging
from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.responses import JSONResponse
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_500_INTERNAL_SERVER_ERROR,
)

from portfolio.deps import get_photo_service, get_upload_service
from portfolio.errors import PortfolioError, ValidationError
from portfolio.schemas import (
    AspectRatio,
    DeleteResponse,
    ErrorResponse,
    PhotoListResponse,
    PhotoResponse,
    UploadedFile,
    UploadForm,
    UploadResponse,
)
from portfolio.services.photo_service import PhotoService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/photos", tags=["photos"])

OptionalText = Annotated[str | None, Form()]


def error_response(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message).model_dump(),
    )


def exception_response(exc: Exception, fallback: str) -> JSONResponse:
    """Map a failure to the error envelope; only validation errors are 400."""
    if isinstance(exc, PortfolioError):
        return error_response(str(exc) or fallback, exc.status_code)
    return error_response(str(exc) or fallback, HTTP_500_INTERNAL_SERVER_ERROR)


def parse_aspect_ratio(value: str | None) -> AspectRatio | None:
    if not value:
        return None
    try:
        return AspectRatio(value)
    except ValueError as exc:
        error_message = f"Invalid aspectRatio: {value}"
        raise ValidationError(error_message) from exc


@router.get(
    "",
    response_model=PhotoListResponse,
    response_model_exclude_none=True,
)
def list_photos(
    service: Annotated[PhotoService, Depends(get_photo_service)],
) -> PhotoListResponse | JSONResponse:
    try:
        photos = service.list_photos()
    except Exception as exc:  # noqa: BLE001
        logger.exception("Error listing photos")
        return exception_response(exc, "Failed to list photos")
    return PhotoListResponse(photos=[PhotoResponse.from_photo(p) for p in photos])


@router.post(
    "/upload",
    response_model=UploadResponse,
    response_model_exclude_none=True,
)
def upload_photo(
    service: Annotated[PhotoService, Depends(get_upload_service)],
    file: Annotated[UploadFile | None, File()] = None,
    title: OptionalText = None,
    location: OptionalText = None,
    description: OptionalText = None,
    camera: OptionalText = None,
    lens: OptionalText = None,
    aperture: OptionalText = None,
    shutter_speed: Annotated[str | None, Form(alias="shutterSpeed")] = None,
    iso: OptionalText = None,
    aspect_ratio: Annotated[str | None, Form(alias="aspectRatio")] = None,
) -> UploadResponse | JSONResponse:
    """
    Store an uploaded image with its metadata and return the new photo.
    """
    if file is None or not file.filename:
        return error_response("No file provided", HTTP_400_BAD_REQUEST)

    try:
        form = UploadForm(
            title=title,
            location=location,
            description=description,
            camera=camera,
            lens=lens,
            aperture=aperture,
            shutter_speed=shutter_speed,
            iso=iso,
            aspect_ratio=parse_aspect_ratio(aspect_ratio),
        )
        upload = UploadedFile(
            filename=file.filename,
            content_type=file.content_type,
            data=file.file.read(),
        )
        photo = service.create(form, upload)
    except Exception as exc:  # noqa: BLE001
        logger.exception("Error uploading photo")
        return exception_response(exc, "Failed to upload photo")
    return UploadResponse(photo=PhotoResponse.from_photo(photo))


@router.delete("/", response_model=DeleteResponse, include_in_schema=False)
def delete_photo_without_id() -> JSONResponse:
    return error_response("Photo ID is required", HTTP_400_BAD_REQUEST)


@router.delete("/{photo_id}", response_model=DeleteResponse)
def delete_photo(
    photo_id: str,
    service: Annotated[PhotoService, Depends(get_photo_service)],
) -> DeleteResponse | JSONResponse:
    """
    Delete a photo record. The stored image itself is kept.
    """
    if not photo_id.strip():
        return error_response("Photo ID is required", HTTP_400_BAD_REQUEST)

    try:
        service.delete(photo_id)
    except Exception as exc:  # noqa: BLE001
        logger.exception("Error deleting photo %s", photo_id)
        return exception_response(exc, "Failed to delete photo")
    return DeleteResponse(message="Photo deleted successfully")
