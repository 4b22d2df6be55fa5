import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import Mock, patch

from treestore.backends import DriveBackend, KeyValueBackend, LocalSnapshotBackend, MemoryBackend
from treestore.config import StoreSettings
from treestore.factory import create_backend, open_store


def _settings(**kwargs) -> StoreSettings:
    with patch.dict(os.environ, {}, clear=True):
        return StoreSettings(_env_file=None, **kwargs)


class TestCreateBackend(unittest.TestCase):
    def test_local(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "store.json"
            backend = create_backend(_settings(backend="local", data_file=path))
            self.assertIsInstance(backend, LocalSnapshotBackend)
            self.assertEqual(backend.path, path)

    def test_kv(self) -> None:
        backend = create_backend(_settings(kv_url="https://kv.example", kv_token="t", kv_key="k"))
        self.assertIsInstance(backend, KeyValueBackend)
        self.assertEqual(backend.key, "k")
        backend.close()

    def test_memory(self) -> None:
        self.assertIsInstance(create_backend(_settings(backend="memory")), MemoryBackend)

    def test_drive_builds_service_from_credentials(self) -> None:
        settings = _settings(
            backend="drive",
            drive_folder_id="P1",
            drive_credentials_file="/tmp/sa.json",
            timeout_sec=3,
        )
        with patch("treestore.backends.drive.build_drive_service", return_value=Mock()) as build:
            backend = create_backend(settings)

        self.assertIsInstance(backend, DriveBackend)
        auth_info = build.call_args.args[0]
        self.assertEqual(auth_info.kind, "service_account")
        self.assertEqual(auth_info.credentials_file, "/tmp/sa.json")
        self.assertEqual(build.call_args.kwargs["timeout_sec"], 3)


class TestOpenStore(unittest.TestCase):
    def test_open_store_uses_settings(self) -> None:
        store = open_store(_settings(backend="memory", conflict_retries=7))
        self.assertIsInstance(store.backend, MemoryBackend)
        folder = store.create_folder("A")
        self.assertEqual(store.list_folders(), [folder])


if __name__ == "__main__":
    unittest.main()
