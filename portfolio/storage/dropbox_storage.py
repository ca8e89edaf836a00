import json
import logging
import os
from typing import Any
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import requests

from .blob_storage import BlobStorage, unique_blob_name

logger = logging.getLogger(__name__)


class DropboxStorageError(Exception):
    """Custom exception for DropboxStorage errors."""


def direct_link(shared_url: str) -> str:
    """
    Turn a Dropbox shared-link page URL into one that serves the raw file.
    """
    parts = urlsplit(shared_url)
    query = [(k, v) for k, v in parse_qsl(parts.query) if k not in ("dl", "raw")]
    query.append(("raw", "1"))
    return urlunsplit(parts._replace(query=urlencode(query)))


class DropboxStorage(BlobStorage):
    """
    Blob storage using Dropbox HTTP API.

    Uploads go to ``DROPBOX_ROOT_PATH`` and are published through a public
    shared link.
    """
    _OAUTH_TOKEN_URL = "https://api.dropbox.com/oauth2/token"  # noqa: S105
    _DROPBOX_UPLOAD_URL = "https://content.dropboxapi.com/2/files/upload"
    _DROPBOX_SHARED_LINK_URL = (
        "https://api.dropboxapi.com/2/sharing/create_shared_link_with_settings"
    )
    _SUCCESS_CODE = 200
    _CONFLICT_CODE = 409
    _TIMEOUT = 30  # seconds

    def __init__(self, base_path: str = "") -> None:
        self.token: str | None = None
        self.app_key = os.getenv("DROPBOX_APP_KEY")
        self.app_secret = os.getenv("DROPBOX_APP_SECRET")
        self.refresh_token = os.getenv("DROPBOX_REFRESH_TOKEN")
        root_env = os.getenv("DROPBOX_ROOT_PATH", "/photos")
        if not base_path:
            base_path = root_env
        if base_path and not base_path.startswith("/"):
            base_path = "/" + base_path
        self.base_path = base_path.rstrip("/")

    def _refresh_token(self) -> None:
        try:
            resp = requests.post(
                self._OAUTH_TOKEN_URL,
                headers=None,
                data={
                    "grant_type": "refresh_token",
                    "refresh_token": self.refresh_token,
                    "client_id": self.app_key,
                    "client_secret": self.app_secret,
                },
                timeout=self._TIMEOUT,
            )
        except requests.RequestException as exc:
            error_message = f"Failed to obtain Dropbox access token: {exc}"
            raise DropboxStorageError(error_message) from exc
        if resp.status_code != self._SUCCESS_CODE:
            error_message = (
                f"Failed to obtain Dropbox access token: {resp.status_code} "
                f"{resp.text}"
            )
            raise DropboxStorageError(error_message)
        token_json = resp.json()
        self.token = token_json.get("access_token")
        if not self.token:
            error_message = "Failed to obtain Dropbox access token"
            raise DropboxStorageError(error_message)

    def _ensure_token(self) -> None:
        # acquire access token via refresh token
        if self.token:
            return
        if not all([self.app_key, self.app_secret, self.refresh_token]):
            error_message = "Dropbox OAuth credentials are not set"
            raise DropboxStorageError(error_message)
        self._refresh_token()

    def _post(self, url: str, **kwargs: Any) -> requests.Response:
        try:
            return requests.post(url, timeout=self._TIMEOUT, **kwargs)
        except requests.RequestException as exc:
            error_message = f"Dropbox API request failed: {exc}"
            raise DropboxStorageError(error_message) from exc

    def put(self, data: bytes, name: str, content_type: str | None = None) -> str:
        self._ensure_token()
        target = f"{self.base_path}/{unique_blob_name(name)}"
        resp = self._post(
            self._DROPBOX_UPLOAD_URL,
            headers={
                "Authorization": f"Bearer {self.token}",
                "Content-Type": "application/octet-stream",
                "Dropbox-API-Arg": json.dumps(
                    {"path": target, "mode": "add", "autorename": True, "mute": True}
                ),
            },
            data=data,
        )
        if resp.status_code != self._SUCCESS_CODE:
            error_message = f"Dropbox API error: {resp.status_code} {resp.text}"
            raise DropboxStorageError(error_message)
        stored_path = resp.json().get("path_lower") or target
        logger.info("Uploaded %d bytes to Dropbox at %s", len(data), stored_path)
        return direct_link(self._shared_link(stored_path))

    def _shared_link(self, path: str) -> str:
        resp = self._post(
            self._DROPBOX_SHARED_LINK_URL,
            headers={
                "Authorization": f"Bearer {self.token}",
                "Content-Type": "application/json",
            },
            json={"path": path, "settings": {"requested_visibility": "public"}},
        )
        url: str | None = None
        try:
            if resp.status_code == self._SUCCESS_CODE:
                url = resp.json().get("url")
            elif resp.status_code == self._CONFLICT_CODE:
                # Dropbox reports an existing link as a conflict carrying its metadata
                error = resp.json().get("error", {})
                existing = error.get("shared_link_already_exists", {})
                url = existing.get("metadata", {}).get("url")
        except ValueError as exc:
            error_message = f"Dropbox API returned invalid JSON: {resp.text}"
            raise DropboxStorageError(error_message) from exc
        if not url:
            error_message = f"Dropbox API error: {resp.status_code} {resp.text}"
            raise DropboxStorageError(error_message)
        return url
