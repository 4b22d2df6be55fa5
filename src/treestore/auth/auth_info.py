"""Credential file information for the Google Drive backend."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

CREDENTIAL_KINDS: tuple[str, ...] = ("service_account", "authorized_user")


@dataclass(slots=True, frozen=True)
class AuthInfo:
    """
    Authentication information.

    kind:
        - "service_account": a service-account key JSON file.
        - "authorized_user": a previously authorized OAuth token JSON file
          (no interactive consent flow; the store runs unattended).
    data must include:
        - credentials_file
    """

    kind: str
    data: dict[str, Any]

    def __post_init__(self) -> None:
        if self.kind not in CREDENTIAL_KINDS:
            raise ValueError(f"AuthInfo.kind must be one of {CREDENTIAL_KINDS}")

        if not isinstance(self.data, dict):
            raise TypeError("AuthInfo.data must be a dict")

        value = self.data.get("credentials_file")
        if not isinstance(value, str) or not value.strip():
            raise ValueError("AuthInfo.data['credentials_file'] must be a non-empty string")

    @property
    def credentials_file(self) -> str:
        """Path to the credentials JSON."""
        return str(self.data["credentials_file"])
