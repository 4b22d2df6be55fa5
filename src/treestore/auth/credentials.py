"""Google credential loading and Drive service construction."""

from __future__ import annotations

import logging
from typing import Sequence

import google_auth_httplib2
import httplib2
from google.auth.exceptions import GoogleAuthError
from google.oauth2 import service_account
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import Error as GoogleApiClientError

from treestore.errors import AuthError, ValidationError

from .auth_info import AuthInfo

logger = logging.getLogger(__name__)

DEFAULT_SCOPES: tuple[str, ...] = ("https://www.googleapis.com/auth/drive",)


def load_credentials(
    auth_info: AuthInfo,
    scopes: Sequence[str] = DEFAULT_SCOPES,
    *,
    ensure_valid: bool = False,
    timeout_sec: float = 10.0,
):
    """
    Return Google credentials for the given scopes.

    Args:
        auth_info: Which credentials file to read and how to interpret it.
        scopes: OAuth scopes.
        ensure_valid: If True, refresh now so a bad token fails here rather
            than on the first Drive request.
        timeout_sec: Socket timeout for the refresh request.

    Raises:
        AuthError: on load/refresh failures.
        ValidationError: if scopes is invalid.
    """
    if not scopes or not all(isinstance(s, str) and s.strip() for s in scopes):
        raise ValidationError("scopes must be a non-empty sequence of strings")

    path = auth_info.credentials_file
    try:
        if auth_info.kind == "service_account":
            creds = service_account.Credentials.from_service_account_file(
                path,
                scopes=list(scopes),
            )
        else:
            creds = Credentials.from_authorized_user_file(path, scopes=list(scopes))
    except (OSError, ValueError) as exc:
        raise AuthError(
            "Failed to load credentials file",
            details={"credentials_file": path, "kind": auth_info.kind},
            cause=exc,
        ) from exc

    if ensure_valid and not creds.valid:
        request = google_auth_httplib2.Request(httplib2.Http(timeout=timeout_sec))
        try:
            creds.refresh(request)
        except GoogleAuthError as exc:
            raise AuthError(
                "Failed to refresh Google credentials",
                details={"credentials_file": path},
                cause=exc,
            ) from exc

    logger.debug("Loaded %s credentials from %s", auth_info.kind, path)
    return creds


def build_drive_service(
    auth_info: AuthInfo,
    scopes: Sequence[str] = DEFAULT_SCOPES,
    *,
    timeout_sec: float = 10.0,
):
    """
    Build a Drive v3 service whose requests time out after timeout_sec.

    Returns:
        googleapiclient.discovery.Resource
    """
    creds = load_credentials(auth_info, scopes, timeout_sec=timeout_sec)
    http = google_auth_httplib2.AuthorizedHttp(creds, http=httplib2.Http(timeout=timeout_sec))
    try:
        return build("drive", "v3", http=http, cache_discovery=False)
    except (GoogleApiClientError, httplib2.HttpLib2Error, OSError) as exc:
        raise AuthError("Failed to build Drive service", cause=exc) from exc
