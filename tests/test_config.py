import os
import unittest
from pathlib import Path
from unittest.mock import patch

import pydantic

from treestore.config import StoreSettings, get_settings


def _settings(**kwargs) -> StoreSettings:
    return StoreSettings(_env_file=None, **kwargs)


class TestStoreSettings(unittest.TestCase):
    def test_defaults_pick_local_file(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            settings = _settings()
        self.assertEqual(settings.resolved_backend, "local")
        self.assertEqual(settings.data_file, Path("data/store.json"))
        self.assertEqual(settings.kv_key, "store_data")
        self.assertEqual(settings.max_retries, 3)

    def test_auto_picks_kv_when_url_configured(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            settings = _settings(kv_url="https://kv.example", kv_token="t")
        self.assertEqual(settings.resolved_backend, "kv")

    def test_reads_prefixed_environment(self) -> None:
        env = {
            "TREESTORE_BACKEND": "local",
            "TREESTORE_DATA_FILE": "/var/lib/treestore/store.json",
            "TREESTORE_CONFLICT_RETRIES": "9",
        }
        with patch.dict(os.environ, env, clear=True):
            settings = _settings()
        self.assertEqual(settings.data_file, Path("/var/lib/treestore/store.json"))
        self.assertEqual(settings.conflict_retries, 9)

    def test_reads_hosted_kv_variable_names(self) -> None:
        env = {"KV_REST_API_URL": "https://kv.example", "KV_REST_API_TOKEN": "secret"}
        with patch.dict(os.environ, env, clear=True):
            settings = _settings()
        self.assertEqual(settings.kv_url, "https://kv.example")
        self.assertEqual(settings.kv_token, "secret")
        self.assertEqual(settings.resolved_backend, "kv")

    def test_kv_requires_token(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            with self.assertRaises(pydantic.ValidationError):
                _settings(backend="kv", kv_url="https://kv.example")

    def test_drive_requires_folder_and_credentials(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            with self.assertRaises(pydantic.ValidationError):
                _settings(backend="drive", drive_folder_id="P1")
            settings = _settings(
                backend="drive",
                drive_folder_id="P1",
                drive_credentials_file="/tmp/sa.json",
            )
        self.assertEqual(settings.resolved_backend, "drive")

    def test_rejects_unknown_backend_and_bad_timeout(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            with self.assertRaises(pydantic.ValidationError):
                _settings(backend="s3")
            with self.assertRaises(pydantic.ValidationError):
                _settings(timeout_sec=0)

    def test_get_settings_is_cached(self) -> None:
        get_settings.cache_clear()
        try:
            with patch.dict(os.environ, {"TREESTORE_BACKEND": "memory"}, clear=True):
                first = get_settings()
            self.assertIs(first, get_settings())
            self.assertEqual(first.resolved_backend, "memory")
        finally:
            get_settings.cache_clear()


if __name__ == "__main__":
    unittest.main()
