"""Environment-driven configuration for treestore."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import AliasChoices, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

BackendKind = Literal["auto", "local", "kv", "drive", "memory"]


class StoreSettings(BaseSettings):
    """
    Settings read from TREESTORE_* environment variables (and .env).

    The KV credentials are also picked up from KV_REST_API_URL and
    KV_REST_API_TOKEN, the names the hosted KV service injects.
    """

    model_config = SettingsConfigDict(
        env_prefix="TREESTORE_",
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )

    backend: BackendKind = "auto"

    # --- Local snapshot ---
    data_file: Path = Path("data/store.json")

    # --- Remote key-value store ---
    kv_url: Optional[str] = Field(
        None, validation_alias=AliasChoices("TREESTORE_KV_URL", "KV_REST_API_URL")
    )
    kv_token: Optional[str] = Field(
        None, validation_alias=AliasChoices("TREESTORE_KV_TOKEN", "KV_REST_API_TOKEN")
    )
    kv_key: str = "store_data"

    # --- Google Drive ---
    drive_folder_id: Optional[str] = None
    drive_file_name: str = "store_data.json"
    drive_credentials_file: Optional[str] = None
    drive_credentials_kind: Literal["service_account", "authorized_user"] = "service_account"

    # --- Behaviour ---
    timeout_sec: float = Field(10.0, gt=0)
    max_retries: int = Field(3, ge=0)
    conflict_retries: int = Field(5, ge=0)
    log_level: str = "INFO"

    @model_validator(mode="after")
    def check_backend_requirements(self) -> "StoreSettings":
        kind = self.resolved_backend
        if kind == "kv" and not (self.kv_url and self.kv_token):
            raise ValueError("kv backend requires kv_url and kv_token")
        if kind == "drive" and not (self.drive_folder_id and self.drive_credentials_file):
            raise ValueError("drive backend requires drive_folder_id and drive_credentials_file")
        return self

    @property
    def resolved_backend(self) -> str:
        """'auto' picks the KV store when a KV URL is configured, else the local file."""
        if self.backend != "auto":
            return self.backend
        return "kv" if self.kv_url else "local"


@lru_cache()
def get_settings() -> StoreSettings:
    """Return the process-wide settings, read once from the environment."""
    return StoreSettings()
