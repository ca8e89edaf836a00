"""
Async HTTP client for the photo API, used by the gallery view model.
"""

import logging
from typing import Any
from urllib.parse import quote

import httpx
from pydantic import ValidationError as PydanticValidationError

from portfolio.schemas import (
    DeleteResponse,
    ErrorResponse,
    PhotoListResponse,
    PhotoResponse,
    UploadedFile,
    UploadForm,
    UploadResponse,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


class ApiError(Exception):
    """The API could not be reached or answered with something unreadable."""


class PhotoApiClient:
    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)

    async def __aenter__(self) -> "PhotoApiClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    async def _request(self, method: str, url: str, **kwargs: Any) -> dict[str, Any]:
        try:
            response = await self.client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            error_message = f"{method} {url} failed: {exc}"
            raise ApiError(error_message) from exc
        try:
            body = response.json()
        except ValueError as exc:
            error_message = f"{method} {url} returned a non-JSON response ({response.status_code})"
            raise ApiError(error_message) from exc
        if not isinstance(body, dict):
            error_message = f"{method} {url} returned an unexpected body"
            raise ApiError(error_message)
        return body

    @staticmethod
    def _parse(body: dict[str, Any], model: type[Any]) -> Any:
        try:
            if body.get("success"):
                return model.model_validate(body)
            return ErrorResponse.model_validate(body)
        except PydanticValidationError as exc:
            error_message = f"Malformed API response: {exc}"
            raise ApiError(error_message) from exc

    async def list_photos(self) -> list[PhotoResponse]:
        """The authoritative listing, newest first."""
        result = self._parse(await self._request("GET", "/api/photos"), PhotoListResponse)
        if isinstance(result, ErrorResponse):
            raise ApiError(result.error)
        return result.photos

    async def upload_photo(
        self, form: UploadForm, file: UploadedFile
    ) -> UploadResponse | ErrorResponse:
        data = form.model_dump(mode="json", by_alias=True, exclude_none=True)
        files = {
            "file": (
                file.filename,
                file.data,
                file.content_type or "application/octet-stream",
            )
        }
        body = await self._request("POST", "/api/photos/upload", data=data, files=files)
        return self._parse(body, UploadResponse)

    async def delete_photo(self, photo_id: str) -> DeleteResponse | ErrorResponse:
        body = await self._request("DELETE", f"/api/photos/{quote(photo_id, safe='')}")
        return self._parse(body, DeleteResponse)
