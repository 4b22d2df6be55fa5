import hashlib
import json
import unittest
from typing import Optional
from unittest.mock import patch

import httpx

from treestore.backends import KeyValueBackend, RetryPolicy
from treestore.errors import (
    AuthError,
    BackendError,
    BackendUnavailableError,
    ConcurrencyConflictError,
)
from treestore.models import FolderInfo, StoreSnapshot


def _sha1(value: str) -> str:
    return hashlib.sha1(value.encode("utf-8")).hexdigest()


class FakeKV:
    """Enough of the REST command endpoint to run GET/SET/EVAL."""

    def __init__(self, token: str = "secret") -> None:
        self.token = token
        self.data: dict[str, str] = {}
        self.commands: list[list] = []
        self.fail_next: list[httpx.Response] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        if request.headers.get("Authorization") != f"Bearer {self.token}":
            return httpx.Response(401, json={"error": "Unauthorized"})
        if self.fail_next:
            return self.fail_next.pop(0)

        command = json.loads(request.content)
        self.commands.append(command)
        name = command[0]

        if name == "GET":
            return httpx.Response(200, json={"result": self.data.get(command[1])})
        if name == "SET":
            self.data[command[1]] = command[2]
            return httpx.Response(200, json={"result": "OK"})
        if name == "EVAL":
            _, _script, _numkeys, key, expected, document = command
            current: Optional[str] = self.data.get(key)
            version = _sha1(current) if current is not None else ""
            if version == _sha1(document):
                return httpx.Response(200, json={"result": 1})
            if version != expected:
                return httpx.Response(200, json={"result": 0})
            self.data[key] = document
            return httpx.Response(200, json={"result": 1})
        return httpx.Response(400, json={"error": f"ERR unknown command '{name}'"})


def _backend(fake: FakeKV, token: str = "secret", **kwargs) -> KeyValueBackend:
    client = httpx.Client(
        base_url="https://kv.example",
        headers={"Authorization": f"Bearer {token}"},
        transport=httpx.MockTransport(fake.handler),
    )
    return KeyValueBackend("https://kv.example", token, client=client, **kwargs)


def _snapshot() -> StoreSnapshot:
    return StoreSnapshot(folders=[FolderInfo(id="A", name="A", parent_id=None, order=0)])


class TestKeyValueBackend(unittest.TestCase):
    def test_missing_key_loads_empty(self) -> None:
        fake = FakeKV()
        loaded = _backend(fake).load()
        self.assertEqual(loaded.snapshot, StoreSnapshot.empty())
        self.assertEqual(loaded.version, "")
        self.assertEqual(fake.commands, [["GET", "store_data"]])

    def test_save_and_load_round_trip(self) -> None:
        fake = FakeKV()
        backend = _backend(fake, key="custom")
        version = backend.save(_snapshot())

        self.assertIn("custom", fake.data)
        loaded = backend.load()
        self.assertEqual(loaded.snapshot, _snapshot())
        self.assertEqual(loaded.version, version)

    def test_conditional_save_uses_eval(self) -> None:
        fake = FakeKV()
        backend = _backend(fake)
        loaded = backend.load()
        backend.save(_snapshot(), expected_version=loaded.version)

        self.assertEqual(fake.commands[-1][0], "EVAL")
        self.assertEqual(backend.load().snapshot, _snapshot())

    def test_conditional_save_conflict(self) -> None:
        fake = FakeKV()
        backend = _backend(fake)
        stale = backend.load()
        backend.save(_snapshot())

        with self.assertRaises(ConcurrencyConflictError):
            backend.save(StoreSnapshot.empty(), expected_version=stale.version)
        self.assertEqual(backend.load().snapshot, _snapshot())

    def test_reads_documents_written_by_other_clients(self) -> None:
        fake = FakeKV()
        fake.data["store_data"] = json.dumps(
            {"folders": [{"id": "A", "name": "A", "parentId": None, "order": 0}], "files": []}
        )
        loaded = _backend(fake).load()
        self.assertEqual(loaded.snapshot, _snapshot())
        self.assertEqual(loaded.version, _sha1(fake.data["store_data"]))

    def test_bad_token_maps_to_auth_error(self) -> None:
        fake = FakeKV()
        with self.assertRaises(AuthError):
            _backend(fake, token="wrong").load()

    def test_server_error_is_retried(self) -> None:
        fake = FakeKV()
        fake.fail_next = [httpx.Response(503, json={"error": "busy"})]
        with patch("time.sleep", return_value=None):
            loaded = _backend(fake).load()
        self.assertEqual(loaded.snapshot, StoreSnapshot.empty())

    def test_persistent_server_error_surfaces_unavailable(self) -> None:
        fake = FakeKV()
        fake.fail_next = [httpx.Response(500, text="down") for _ in range(3)]
        with patch("time.sleep", return_value=None):
            with self.assertRaises(BackendUnavailableError):
                _backend(fake, retry_policy=RetryPolicy(max_retries=2)).load()

    def test_timeout_maps_to_unavailable(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("slow", request=request)

        client = httpx.Client(base_url="https://kv.example", transport=httpx.MockTransport(handler))
        backend = KeyValueBackend(
            "https://kv.example",
            "t",
            client=client,
            retry_policy=RetryPolicy(max_retries=0),
        )
        with self.assertRaises(BackendUnavailableError):
            backend.load()

    def test_error_payload_raises_backend_error(self) -> None:
        fake = FakeKV()
        fake.fail_next = [httpx.Response(200, json={"error": "WRONGTYPE"})]
        with self.assertRaises(BackendError):
            _backend(fake).load()

    def test_requires_url_and_token(self) -> None:
        with self.assertRaises(ValueError):
            KeyValueBackend("", "t")
        with self.assertRaises(ValueError):
            KeyValueBackend("https://kv.example", "")


if __name__ == "__main__":
    unittest.main()
