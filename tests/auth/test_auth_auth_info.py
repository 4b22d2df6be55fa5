import unittest

from treestore.auth import AuthInfo


class TestAuthInfo(unittest.TestCase):
    def test_auth_info_valid_service_account(self) -> None:
        info = AuthInfo(kind="service_account", data={"credentials_file": "/tmp/sa.json"})
        self.assertEqual(info.kind, "service_account")
        self.assertEqual(info.credentials_file, "/tmp/sa.json")

    def test_auth_info_valid_authorized_user(self) -> None:
        info = AuthInfo(kind="authorized_user", data={"credentials_file": "/tmp/token.json"})
        self.assertEqual(info.credentials_file, "/tmp/token.json")

    def test_auth_info_invalid_kind(self) -> None:
        with self.assertRaises(ValueError):
            AuthInfo(kind="oauth", data={"credentials_file": "x"})

    def test_auth_info_missing_keys(self) -> None:
        with self.assertRaises(ValueError):
            AuthInfo(kind="service_account", data={})
        with self.assertRaises(ValueError):
            AuthInfo(kind="service_account", data={"credentials_file": "  "})

    def test_auth_info_data_must_be_dict(self) -> None:
        with self.assertRaises(TypeError):
            AuthInfo(kind="service_account", data=["credentials_file"])  # type: ignore[arg-type]


if __name__ == "__main__":
    unittest.main()
