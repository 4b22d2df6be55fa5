"""Public auth exports for treestore."""

from __future__ import annotations

from .auth_info import CREDENTIAL_KINDS, AuthInfo
from .credentials import DEFAULT_SCOPES, build_drive_service, load_credentials

__all__ = [
    "AuthInfo",
    "CREDENTIAL_KINDS",
    "DEFAULT_SCOPES",
    "build_drive_service",
    "load_credentials",
]
