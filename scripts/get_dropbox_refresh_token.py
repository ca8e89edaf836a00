#!/usr/bin/env python3
"""
Script to generate a Dropbox OAuth2 refresh token for the portfolio's
Dropbox blob backend (STORAGE_BACKEND=dropbox).

- Loads Dropbox app credentials from .env (or environment variables).
- Guides the user through the OAuth2 authorization flow in the browser.
- Prints the resulting refresh token to stdout for use in .env.

Required in .env or environment:
    DROPBOX_APP_KEY
    DROPBOX_APP_SECRET
    DROPBOX_REDIRECT_URI (e.g., http://localhost:8080/)

Scopes required (enable in Dropbox App Console):
    files.content.write
    sharing.write
    sharing.read

Usage:
    python scripts/get_dropbox_refresh_token.py
"""

import os
import sys
import webbrowser
from urllib.parse import urlencode

import requests
from dotenv import load_dotenv

HTTP_OK = 200
REQUEST_TIMEOUT = 10
SCOPES = [
    "files.content.write",
    "sharing.write",
    "sharing.read",
]


def authorization_url(app_key: str, redirect_uri: str) -> str:
    return "https://www.dropbox.com/oauth2/authorize?" + urlencode(
        {
            "client_id": app_key,
            "redirect_uri": redirect_uri,
            "response_type": "code",
            "token_access_type": "offline",
            "scope": " ".join(SCOPES),
        }
    )


def exchange_code(code: str, app_key: str, app_secret: str, redirect_uri: str) -> str:
    """Trade an authorization code for a long-lived refresh token."""
    resp = requests.post(
        "https://api.dropboxapi.com/oauth2/token",
        data={
            "code": code,
            "grant_type": "authorization_code",
            "client_id": app_key,
            "client_secret": app_secret,
            "redirect_uri": redirect_uri,
        },
        timeout=REQUEST_TIMEOUT,
    )
    if resp.status_code != HTTP_OK:
        error_message = f"Failed to obtain refresh token: {resp.text}"
        raise RuntimeError(error_message)
    refresh_token = resp.json().get("refresh_token")
    if not refresh_token:
        error_message = f"No refresh token found in response: {resp.json()}"
        raise RuntimeError(error_message)
    return refresh_token


def main() -> int:
    load_dotenv()
    app_key = os.environ.get("DROPBOX_APP_KEY")
    app_secret = os.environ.get("DROPBOX_APP_SECRET")
    redirect_uri = os.environ.get("DROPBOX_REDIRECT_URI")
    if not (app_key and app_secret and redirect_uri):
        print(  # noqa: T201
            "Missing required environment variables: "
            "DROPBOX_APP_KEY, DROPBOX_APP_SECRET, DROPBOX_REDIRECT_URI"
        )
        return 1

    auth_url = authorization_url(app_key, redirect_uri)
    print("\n1. Open the following URL in your browser and authorize the app:")  # noqa: T201
    print(auth_url)  # noqa: T201
    webbrowser.open(auth_url)

    print("\n2. After authorizing, you will be redirected to your redirect URI.")  # noqa: T201
    print("   Copy the 'code' parameter from the URL and paste it below.\n")  # noqa: T201
    code = input("Paste the code here: ").strip()

    try:
        refresh_token = exchange_code(code, app_key, app_secret, redirect_uri)
    except RuntimeError as exc:
        print(exc)  # noqa: T201
        return 1

    print("\nYour Dropbox refresh token (add to your .env as DROPBOX_REFRESH_TOKEN):\n")  # noqa: T201
    print(refresh_token)  # noqa: T201
    return 0


if __name__ == "__main__":
    sys.exit(main())
