from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from portfolio.models import Photo


class AspectRatio(str, Enum):
    LANDSCAPE = "landscape"
    PORTRAIT = "portrait"
    SQUARE = "square"


class TechnicalDetails(BaseModel):
    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)

    camera: str | None = None
    lens: str | None = None
    aperture: str | None = None
    shutter_speed: str | None = Field(default=None, alias="shutterSpeed")
    iso: str | None = None
    aspect_ratio: AspectRatio | None = Field(default=None, alias="aspectRatio")


class UploadForm(BaseModel):
    """
    Text fields accepted alongside an uploaded image.

    Every field is optional; blanks are treated as absent.
    """

    model_config = ConfigDict(populate_by_name=True)

    title: str | None = None
    location: str | None = None
    description: str | None = None
    camera: str | None = None
    lens: str | None = None
    aperture: str | None = None
    shutter_speed: str | None = Field(default=None, alias="shutterSpeed")
    iso: str | None = None
    aspect_ratio: AspectRatio | None = Field(default=None, alias="aspectRatio")

    def technical_details(self) -> dict[str, str]:
        """Wire-keyed technical details holding only the non-empty fields."""
        supplied = {
            "camera": self.camera,
            "lens": self.lens,
            "aperture": self.aperture,
            "shutterSpeed": self.shutter_speed,
            "iso": self.iso,
            "aspectRatio": self.aspect_ratio.value if self.aspect_ratio else None,
        }
        return {key: value for key, value in supplied.items() if value}


class UploadedFile(BaseModel):
    filename: str
    content_type: str | None = None
    data: bytes


class PhotoResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    url: str
    title: str
    location: str
    description: str
    technical_details: TechnicalDetails | None = Field(
        default=None, alias="technicalDetails"
    )

    @classmethod
    def from_photo(cls, photo: Photo) -> "PhotoResponse":
        return cls(
            id=photo.id,
            url=photo.image_url,
            title=photo.title,
            location=photo.location,
            description=photo.description,
            technical_details=(
                TechnicalDetails.model_validate(photo.technical_details)
                if photo.technical_details is not None
                else None
            ),
        )


class UploadResponse(BaseModel):
    success: Literal[True] = True
    photo: PhotoResponse


class DeleteResponse(BaseModel):
    success: Literal[True] = True
    message: str


class PhotoListResponse(BaseModel):
    success: Literal[True] = True
    photos: list[PhotoResponse]


class ErrorResponse(BaseModel):
    success: Literal[False] = False
    error: str
