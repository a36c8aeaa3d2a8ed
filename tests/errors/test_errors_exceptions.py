import unittest
from pathlib import Path

from gdrivesync.errors.exceptions import (
    ApiError,
    AuthError,
    ConflictError,
    DigestMismatchError,
    FileTreeBuildError,
    GDriveSyncError,
    HttpErrorInfo,
    IdPoolError,
    InvalidArgumentError,
    InvalidChunkSizeError,
    NestedBuildError,
    NotFoundError,
    OutOfIdentifiersError,
    PermissionError,
    PoolRefillError,
    QuotaExceededError,
    RateLimitError,
    SymlinkUnsupportedError,
    TransferError,
    WriteChunkError,
    format_error_chain,
    map_http_error,
)


class TestExceptions(unittest.TestCase):
    def test_base_error_keeps_details_and_cause(self) -> None:
        cause = RuntimeError("root")
        err = GDriveSyncError("msg", details={"k": "v"}, cause=cause)
        self.assertEqual(str(err), "msg")
        self.assertEqual(err.details["k"], "v")
        self.assertIs(err.cause, cause)

    def test_map_http_error_basic(self) -> None:
        err = map_http_error(HttpErrorInfo(status_code=404, message="not found"))
        self.assertIsInstance(err, NotFoundError)

        err = map_http_error(HttpErrorInfo(status_code=400, message="bad req"))
        self.assertIsInstance(err, InvalidArgumentError)

        err = map_http_error(HttpErrorInfo(status_code=429, message="rate"))
        self.assertIsInstance(err, RateLimitError)

        err = map_http_error(HttpErrorInfo(status_code=409, message="conflict"))
        self.assertIsInstance(err, ConflictError)

        err = map_http_error(HttpErrorInfo(status_code=401, message="auth"))
        self.assertIsInstance(err, AuthError)

    def test_map_http_error_403_quota_vs_permission(self) -> None:
        err = map_http_error(
            HttpErrorInfo(status_code=403, reason="quotaExceeded", message="quota")
        )
        self.assertIsInstance(err, QuotaExceededError)

        err = map_http_error(
            HttpErrorInfo(status_code=403, reason="insufficientPermissions", message="x")
        )
        self.assertIsInstance(err, PermissionError)

    def test_map_http_error_5xx_is_api_error(self) -> None:
        err = map_http_error(HttpErrorInfo(status_code=503, message="unavail"))
        self.assertIsInstance(err, ApiError)

    def test_map_http_error_other_is_api_error(self) -> None:
        err = map_http_error(HttpErrorInfo(status_code=418, message="teapot"))
        self.assertIsInstance(err, ApiError)


class TestErrorChain(unittest.TestCase):
    def test_format_error_chain_follows_cause(self) -> None:
        inner = SymlinkUnsupportedError(Path("/data/link"))
        nested = NestedBuildError("'/data'", cause=inner)
        top = FileTreeBuildError("unable to create folder tree from '/data'", cause=nested)

        text = format_error_chain(top)

        self.assertEqual(
            text,
            "unable to create folder tree from '/data': "
            "cannot evaluate child directory '/data': "
            "file '/data/link' is a symlink, symlinks are not supported",
        )

    def test_format_error_chain_uses_dunder_cause(self) -> None:
        try:
            try:
                raise OSError("disk full")
            except OSError as exc:
                raise WriteChunkError("unable to write chunk") from exc
        except WriteChunkError as err:
            text = format_error_chain(err)

        self.assertEqual(text, "unable to write chunk: disk full")

    def test_format_error_chain_skips_repeated_messages(self) -> None:
        cause = ApiError("boom")
        err = ApiError("boom", cause=cause)
        self.assertEqual(format_error_chain(err), "boom")

    def test_digest_mismatch_reports_hex(self) -> None:
        err = DigestMismatchError(expected=b"\x00" * 16, actual=b"\xff" * 16)
        self.assertIn("0" * 32, str(err))
        self.assertIn("f" * 32, str(err))
        self.assertEqual(err.expected, b"\x00" * 16)
        self.assertIsInstance(err, TransferError)

    def test_invalid_chunk_size_is_invalid_argument(self) -> None:
        err = InvalidChunkSizeError(3)
        self.assertIsInstance(err, InvalidArgumentError)
        self.assertEqual(err.details["value"], 3)

    def test_pool_errors(self) -> None:
        cause = RateLimitError("rate")
        err = PoolRefillError(cause=cause)
        self.assertIsInstance(err, IdPoolError)
        self.assertIs(err.cause, cause)
        self.assertIsInstance(OutOfIdentifiersError(), IdPoolError)


if __name__ == "__main__":
    unittest.main()
