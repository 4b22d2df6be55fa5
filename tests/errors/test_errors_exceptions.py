import unittest

from treestore.errors.exceptions import (
    AuthError,
    BackendError,
    BackendUnavailableError,
    ConcurrencyConflictError,
    HttpErrorInfo,
    SnapshotFormatError,
    TreeStoreError,
    map_http_error,
)


class TestExceptions(unittest.TestCase):
    def test_base_error_keeps_details_and_cause(self) -> None:
        cause = RuntimeError("root")
        err = TreeStoreError("msg", details={"k": "v"}, cause=cause)
        self.assertEqual(str(err), "msg")
        self.assertEqual(err.details["k"], "v")
        self.assertIs(err.cause, cause)

    def test_details_default_to_empty_dict(self) -> None:
        err = TreeStoreError("msg")
        self.assertEqual(err.details, {})
        self.assertIsNone(err.cause)

    def test_backend_error_hierarchy(self) -> None:
        self.assertTrue(issubclass(BackendUnavailableError, BackendError))
        self.assertTrue(issubclass(AuthError, BackendError))
        self.assertTrue(issubclass(SnapshotFormatError, BackendError))
        self.assertFalse(issubclass(ConcurrencyConflictError, BackendError))

    def test_map_http_error_basic(self) -> None:
        err = map_http_error(HttpErrorInfo(status_code=401, message="auth"))
        self.assertIsInstance(err, AuthError)

        err = map_http_error(HttpErrorInfo(status_code=403, message="forbidden"))
        self.assertIsInstance(err, AuthError)

        err = map_http_error(HttpErrorInfo(status_code=409, message="conflict"))
        self.assertIsInstance(err, ConcurrencyConflictError)

        err = map_http_error(HttpErrorInfo(status_code=412, message="precondition"))
        self.assertIsInstance(err, ConcurrencyConflictError)

        err = map_http_error(HttpErrorInfo(status_code=429, message="rate"))
        self.assertIsInstance(err, BackendUnavailableError)

    def test_map_http_error_5xx_is_retryable(self) -> None:
        err = map_http_error(HttpErrorInfo(status_code=503, message="unavail"))
        self.assertIsInstance(err, BackendUnavailableError)
        self.assertEqual(err.details["status_code"], 503)

    def test_map_http_error_other_is_backend_error(self) -> None:
        err = map_http_error(HttpErrorInfo(status_code=404))
        self.assertIs(type(err), BackendError)
        self.assertEqual(str(err), "HTTP error 404")

        err = map_http_error(HttpErrorInfo(status_code=418, message="teapot"))
        self.assertIs(type(err), BackendError)

    def test_map_http_error_merges_details(self) -> None:
        err = map_http_error(
            HttpErrorInfo(status_code=500, reason="boom", details={"command": "GET"})
        )
        self.assertEqual(err.details["reason"], "boom")
        self.assertEqual(err.details["command"], "GET")


if __name__ == "__main__":
    unittest.main()
