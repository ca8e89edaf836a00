import json
import pathlib
from typing import Any

import pytest
import requests

from portfolio.storage import DropboxStorage, DropboxStorageError
from portfolio.storage.dropbox_storage import direct_link

OAUTH_TOKEN_URL = "https://api.dropbox.com/oauth2/token"  # noqa: S105
UPLOAD_URL = "https://content.dropboxapi.com/2/files/upload"
SHARED_LINK_URL = "https://api.dropboxapi.com/2/sharing/create_shared_link_with_settings"
DUMMY_ACCESS_TOKEN = "test-access-token-123"  # noqa: S105
SHARED_URL = "https://www.dropbox.com/scl/fi/abc123/sunset.jpg?rlkey=xyz&dl=0"


@pytest.fixture
def dropbox_oauth_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DROPBOX_APP_KEY", "dummy-app-key")
    monkeypatch.setenv("DROPBOX_APP_SECRET", "dummy-app-secret")
    monkeypatch.setenv("DROPBOX_REFRESH_TOKEN", "dummy-refresh-token")
    monkeypatch.setenv("DROPBOX_ROOT_PATH", "portfolio")


def _mock_resp(
    status_code: int,
    json_body: Any = None,
    text: str = "",
) -> object:
    class MockResp:
        def __init__(self) -> None:
            self.status_code = status_code
            self.text = text or json.dumps(json_body)

        def json(self) -> Any:
            if json_body is None:
                msg = "no JSON"
                raise ValueError(msg)
            return json_body

    return MockResp()


class DropboxRecorder:
    """Stands in for requests.post, answering per URL and recording calls."""

    def __init__(self, responses: dict[str, object]) -> None:
        self.responses = responses
        self.calls: list[tuple[str, dict[str, Any]]] = []

    def __call__(self, url: str, **kwargs: Any) -> object:
        self.calls.append((url, kwargs))
        if url not in self.responses:
            msg = f"Unexpected Dropbox call to {url}"
            raise AssertionError(msg)
        return self.responses[url]


def test_direct_link_switches_to_raw() -> None:
    assert direct_link(SHARED_URL) == (
        "https://www.dropbox.com/scl/fi/abc123/sunset.jpg?rlkey=xyz&raw=1"
    )


@pytest.mark.usefixtures("dropbox_oauth_env")
def test_dropbox_put_uploads_and_shares(monkeypatch: pytest.MonkeyPatch) -> None:
    recorder = DropboxRecorder(
        {
            OAUTH_TOKEN_URL: _mock_resp(200, {"access_token": DUMMY_ACCESS_TOKEN}),
            UPLOAD_URL: _mock_resp(200, {"path_lower": "/portfolio/sunset-1.jpg"}),
            SHARED_LINK_URL: _mock_resp(200, {"url": SHARED_URL}),
        }
    )
    monkeypatch.setattr(requests, "post", recorder)

    url = DropboxStorage().put(b"jpeg-bytes", "sunset.jpg", "image/jpeg")

    assert url.endswith("raw=1")
    assert [call[0] for call in recorder.calls] == [
        OAUTH_TOKEN_URL,
        UPLOAD_URL,
        SHARED_LINK_URL,
    ]
    upload_kwargs = recorder.calls[1][1]
    assert upload_kwargs["data"] == b"jpeg-bytes"
    assert upload_kwargs["headers"]["Authorization"] == f"Bearer {DUMMY_ACCESS_TOKEN}"
    api_arg = json.loads(upload_kwargs["headers"]["Dropbox-API-Arg"])
    assert api_arg["path"].startswith("/portfolio/sunset-")
    assert api_arg["mode"] == "add"
    assert recorder.calls[2][1]["json"]["path"] == "/portfolio/sunset-1.jpg"


@pytest.mark.usefixtures("dropbox_oauth_env")
def test_dropbox_put_reuses_existing_shared_link(monkeypatch: pytest.MonkeyPatch) -> None:
    conflict = {
        "error_summary": "shared_link_already_exists/metadata/..",
        "error": {
            ".tag": "shared_link_already_exists",
            "shared_link_already_exists": {
                ".tag": "metadata",
                "metadata": {"url": SHARED_URL},
            },
        },
    }
    monkeypatch.setattr(
        requests,
        "post",
        DropboxRecorder(
            {
                OAUTH_TOKEN_URL: _mock_resp(200, {"access_token": DUMMY_ACCESS_TOKEN}),
                UPLOAD_URL: _mock_resp(200, {"path_lower": "/portfolio/a.jpg"}),
                SHARED_LINK_URL: _mock_resp(409, conflict),
            }
        ),
    )
    assert DropboxStorage().put(b"x", "a.jpg").startswith(
        "https://www.dropbox.com/scl/fi/abc123/sunset.jpg"
    )


@pytest.mark.usefixtures("dropbox_oauth_env")
def test_dropbox_upload_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        requests,
        "post",
        DropboxRecorder(
            {
                OAUTH_TOKEN_URL: _mock_resp(200, {"access_token": DUMMY_ACCESS_TOKEN}),
                UPLOAD_URL: _mock_resp(507, text="insufficient_space"),
            }
        ),
    )
    with pytest.raises(DropboxStorageError, match="Dropbox API error: 507"):
        DropboxStorage().put(b"x", "a.jpg")


@pytest.mark.usefixtures("dropbox_oauth_env")
def test_dropbox_request_exception(monkeypatch: pytest.MonkeyPatch) -> None:
    def mock_post(url: str, **_kwargs: object) -> object:
        if url == OAUTH_TOKEN_URL:
            return _mock_resp(200, {"access_token": DUMMY_ACCESS_TOKEN})
        msg = "connection reset"
        raise requests.ConnectionError(msg)

    monkeypatch.setattr(requests, "post", mock_post)
    with pytest.raises(DropboxStorageError, match="Dropbox API request failed"):
        DropboxStorage().put(b"x", "a.jpg")


@pytest.mark.usefixtures("dropbox_oauth_env")
def test_dropbox_oauth_token_refresh_failure(monkeypatch: pytest.MonkeyPatch) -> None:
    """
    Test DropboxStorage raises error if OAuth token refresh fails.
    """
    monkeypatch.setattr(
        requests,
        "post",
        DropboxRecorder({OAUTH_TOKEN_URL: _mock_resp(400, {"error": "invalid_grant"})}),
    )
    with pytest.raises(
        DropboxStorageError, match="Failed to obtain Dropbox access token"
    ):
        DropboxStorage().put(b"x", "a.jpg")


def test_dropbox_oauth_missing_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """
    Test DropboxStorage raises error if required OAuth env vars are missing.
    """
    monkeypatch.delenv("DROPBOX_APP_KEY", raising=False)
    monkeypatch.delenv("DROPBOX_APP_SECRET", raising=False)
    monkeypatch.delenv("DROPBOX_REFRESH_TOKEN", raising=False)
    with pytest.raises(
        DropboxStorageError, match="Dropbox OAuth credentials are not set"
    ):
        DropboxStorage().put(b"x", "a.jpg")


@pytest.mark.usefixtures("dropbox_oauth_env")
def test_dropbox_token_is_reused(monkeypatch: pytest.MonkeyPatch) -> None:
    recorder = DropboxRecorder(
        {
            OAUTH_TOKEN_URL: _mock_resp(200, {"access_token": DUMMY_ACCESS_TOKEN}),
            UPLOAD_URL: _mock_resp(200, {"path_lower": "/portfolio/a.jpg"}),
            SHARED_LINK_URL: _mock_resp(200, {"url": SHARED_URL}),
        }
    )
    monkeypatch.setattr(requests, "post", recorder)
    storage = DropboxStorage()
    storage.put(b"x", "a.jpg")
    storage.put(b"y", "b.jpg")
    token_calls = [url for url, _ in recorder.calls if url == OAUTH_TOKEN_URL]
    assert len(token_calls) == 1


def test_dropbox_root_path_normalized(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DROPBOX_ROOT_PATH", "gallery/")
    assert DropboxStorage().base_path == "/gallery"
    assert DropboxStorage(base_path="/other").base_path == "/other"


@pytest.mark.usefixtures("dropbox_oauth_env")
def test_dropbox_access_token_never_written_to_disk(
    tmp_path: pathlib.Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """
    Ensure access token is never written to disk (simulate by checking for token in
    temp dir after API call).
    """
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(
        requests,
        "post",
        DropboxRecorder(
            {
                OAUTH_TOKEN_URL: _mock_resp(200, {"access_token": DUMMY_ACCESS_TOKEN}),
                UPLOAD_URL: _mock_resp(200, {"path_lower": "/portfolio/a.jpg"}),
                SHARED_LINK_URL: _mock_resp(200, {"url": SHARED_URL}),
            }
        ),
    )
    DropboxStorage().put(b"x", "a.jpg")
    for file in tmp_path.iterdir():
        assert DUMMY_ACCESS_TOKEN.encode() not in file.read_bytes()
