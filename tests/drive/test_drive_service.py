import io
import json
import unittest
from unittest.mock import Mock, patch

from googleapiclient.errors import HttpError

from gdrivesync.drive.delegate import (
    BackoffConfig,
    ChunkSize,
    TransferDelegate,
    TransferDelegateConfig,
)
from gdrivesync.drive.service import (
    GoogleDriveService,
    _file_dict_to_drive_file,
)
from gdrivesync.errors import (
    ApiError,
    InvalidArgumentError,
    NetworkError,
    NotFoundError,
    RateLimitError,
)
from gdrivesync.models import UploadMetadata
from gdrivesync.util.mime import FOLDER_MIME


def _http_error(status: int, reason: str = "") -> HttpError:
    resp = Mock()
    resp.status = status
    resp.reason = reason
    body = {"error": {"message": f"status {status}", "errors": [{"reason": reason}]}}
    return HttpError(resp=resp, content=json.dumps(body).encode("utf-8"))


class _FakeDownloader:
    """Stands in for MediaIoBaseDownload; writes preset chunks into the buffer."""

    chunks: list = []

    def __init__(self, fd, request, chunksize) -> None:
        self._fd = fd
        self._remaining = list(self.chunks)

    def next_chunk(self):
        item = self._remaining.pop(0)
        if isinstance(item, BaseException):
            raise item
        self._fd.write(item)
        return None, not any(not isinstance(c, BaseException) for c in self._remaining)


class _FakeResumableRequest:
    def __init__(self, total: int, chunk: int, failures: dict) -> None:
        self.resumable_progress = 0
        self.resumable_uri = None
        self._total = total
        self._chunk = chunk
        self._failures = dict(failures)
        self.calls = 0

    def next_chunk(self):
        self.calls += 1
        self.resumable_uri = "https://upload.example/session"
        pending = self._failures.get(self.resumable_progress, 0)
        if pending:
            self._failures[self.resumable_progress] = pending - 1
            raise _http_error(503)
        self.resumable_progress = min(self.resumable_progress + self._chunk, self._total)
        if self.resumable_progress >= self._total:
            return None, {"id": "F1", "name": "big.bin"}
        return Mock(), None


class TestDriveServiceHelpers(unittest.TestCase):
    def test_file_dict_to_drive_file(self) -> None:
        data = {
            "id": "F1",
            "name": "n",
            "mimeType": "text/plain",
            "parents": ["P1"],
            "size": "123",
            "md5Checksum": "abc",
            "shortcutDetails": {"targetId": "T1"},
        }
        f = _file_dict_to_drive_file(data)
        self.assertEqual(f.id, "F1")
        self.assertEqual(f.parents, ["P1"])
        self.assertEqual(f.size, "123")
        self.assertEqual(f.md5_checksum, "abc")
        self.assertEqual(f.shortcut_target_id, "T1")

    def test_file_dict_missing_fields_are_none(self) -> None:
        f = _file_dict_to_drive_file({"mimeType": FOLDER_MIME})
        self.assertIsNone(f.id)
        self.assertIsNone(f.name)
        self.assertIsNone(f.size)
        self.assertEqual(f.parents, [])


class TestDriveServiceMocked(unittest.TestCase):
    def _service_with_list_pages(self, pages):
        service = Mock()
        files_resource = Mock()
        service.files.return_value = files_resource
        request = Mock()
        request.execute.side_effect = pages
        files_resource.list.return_value = request
        return service, files_resource

    def test_list_children_includes_supports_all_drives_kwargs(self) -> None:
        service, files_resource = self._service_with_list_pages([{"files": []}])
        drive = GoogleDriveService.from_service(service, supports_all_drives=True)

        drive.list_children("P1")

        kwargs = files_resource.list.call_args.kwargs
        self.assertTrue(kwargs.get("supportsAllDrives"))
        self.assertTrue(kwargs.get("includeItemsFromAllDrives"))
        self.assertEqual(kwargs["q"], "'P1' in parents and trashed = false")

    def test_list_files_follows_page_tokens(self) -> None:
        pages = [
            {"files": [{"id": "A"}, {"id": "B"}], "nextPageToken": "t1"},
            {"files": [{"id": "C"}]},
        ]
        service, files_resource = self._service_with_list_pages(pages)
        drive = GoogleDriveService.from_service(service)

        result = drive.list_files("q")

        self.assertEqual([f.id for f in result], ["A", "B", "C"])
        self.assertEqual(files_resource.list.call_count, 2)
        self.assertEqual(files_resource.list.call_args.kwargs["pageToken"], "t1")

    def test_list_files_never_exceeds_max_files(self) -> None:
        pages = [
            {"files": [{"id": "A"}, {"id": "B"}], "nextPageToken": "t1"},
            {"files": [{"id": "C"}, {"id": "D"}], "nextPageToken": "t2"},
        ]
        service, files_resource = self._service_with_list_pages(pages)
        drive = GoogleDriveService.from_service(service)

        result = drive.list_files("q", max_files=3, page_size=2)

        self.assertEqual([f.id for f in result], ["A", "B", "C"])
        self.assertEqual(files_resource.list.call_args_list[1].kwargs["pageSize"], 1)

    def test_get_maps_http_404_to_not_found(self) -> None:
        service = Mock()
        req = Mock()
        service.files.return_value.get.return_value = req
        req.execute.side_effect = _http_error(404, "notFound")

        drive = GoogleDriveService.from_service(service)

        with self.assertRaises(NotFoundError):
            drive.get_file("X")
        self.assertEqual(req.execute.call_count, 1)

    def test_retry_on_429(self) -> None:
        service = Mock()
        req = Mock()
        service.files.return_value.get.return_value = req

        err = _http_error(429, "rateLimitExceeded")
        req.execute.side_effect = [
            err,
            err,
            {"id": "F1", "name": "n", "mimeType": "text/plain", "parents": []},
        ]

        drive = GoogleDriveService.from_service(service)

        with patch("time.sleep", return_value=None) as sleep:
            f = drive.get_file("F1")

        self.assertEqual(f.id, "F1")
        self.assertEqual(req.execute.call_count, 3)
        self.assertEqual([c.args[0] for c in sleep.call_args_list], [1.0, 2.0])

    def test_rate_limit_error_after_retries_exhausted(self) -> None:
        service = Mock()
        req = Mock()
        service.files.return_value.get.return_value = req
        req.execute.side_effect = _http_error(429, "rateLimitExceeded")

        drive = GoogleDriveService.from_service(service)

        with patch("time.sleep", return_value=None):
            with self.assertRaises(RateLimitError):
                drive.get_file("F1")
        # One attempt plus three retries.
        self.assertEqual(req.execute.call_count, 4)

    def test_transport_error_maps_to_network_error(self) -> None:
        service = Mock()
        req = Mock()
        service.files.return_value.get.return_value = req
        req.execute.side_effect = ConnectionResetError("reset")

        drive = GoogleDriveService.from_service(
            service,
            metadata_delegate_config=TransferDelegateConfig(
                backoff_config=BackoffConfig(max_retries=0)
            ),
        )

        with self.assertRaises(NetworkError):
            drive.get_file("F1")

    def test_generate_ids(self) -> None:
        service = Mock()
        files_resource = service.files.return_value
        files_resource.generateIds.return_value.execute.return_value = {"ids": ["a", "b"]}

        drive = GoogleDriveService.from_service(service)
        ids = drive.generate_ids(2)

        self.assertEqual(ids, ["a", "b"])
        kwargs = files_resource.generateIds.call_args.kwargs
        self.assertEqual(kwargs["count"], 2)
        self.assertEqual(kwargs["space"], "drive")

    def test_generate_ids_rejects_bad_count(self) -> None:
        drive = GoogleDriveService.from_service(Mock())
        with self.assertRaises(InvalidArgumentError):
            drive.generate_ids(0)
        with self.assertRaises(InvalidArgumentError):
            drive.generate_ids(1001)

    def test_create_folder_with_preallocated_id(self) -> None:
        service = Mock()
        files_resource = service.files.return_value
        files_resource.create.return_value.execute.return_value = {
            "id": "D1",
            "name": "docs",
            "mimeType": FOLDER_MIME,
        }

        drive = GoogleDriveService.from_service(service)
        folder = drive.create_folder("docs", ["P1"], folder_id="D1")

        self.assertEqual(folder.id, "D1")
        body = files_resource.create.call_args.kwargs["body"]
        self.assertEqual(body, {"name": "docs", "mimeType": FOLDER_MIME, "parents": ["P1"], "id": "D1"})

    def test_upload_small_file_is_single_request(self) -> None:
        service = Mock()
        files_resource = service.files.return_value
        files_resource.create.return_value.execute.return_value = {"id": "F1", "name": "a.txt"}

        drive = GoogleDriveService.from_service(service)
        meta = UploadMetadata(name="a.txt", mime_type="text/plain", size=3, parents=["P1"], file_id="F1")

        with patch("gdrivesync.drive.service.MediaIoBaseUpload") as media_cls:
            f = drive.upload_file(io.BytesIO(b"abc"), meta, TransferDelegate())

        self.assertEqual(f.id, "F1")
        self.assertFalse(media_cls.call_args.kwargs["resumable"])
        body = files_resource.create.call_args.kwargs["body"]
        self.assertEqual(body["id"], "F1")
        self.assertEqual(body["parents"], ["P1"])

    def test_resumable_upload_retries_failed_chunk(self) -> None:
        chunk = ChunkSize.APPROX_1.in_bytes()
        total = chunk * 2 + 10
        fake_req = _FakeResumableRequest(total, chunk, failures={chunk: 2})

        service = Mock()
        service.files.return_value.create.return_value = fake_req

        delegate = TransferDelegate(
            TransferDelegateConfig(
                chunk_size=ChunkSize.APPROX_1,
                backoff_config=BackoffConfig(max_retries=5),
            )
        )
        drive = GoogleDriveService.from_service(service)
        meta = UploadMetadata(name="big.bin", mime_type="application/octet-stream", size=total)

        with patch("gdrivesync.drive.service.MediaIoBaseUpload") as media_cls, patch(
            "time.sleep", return_value=None
        ) as sleep:
            f = drive.upload_file(io.BytesIO(b""), meta, delegate)

        self.assertEqual(f.id, "F1")
        self.assertTrue(media_cls.call_args.kwargs["resumable"])
        # Three chunks plus two failed attempts.
        self.assertEqual(fake_req.calls, 5)
        self.assertEqual(sleep.call_count, 2)
        self.assertEqual(delegate.upload_url(), "https://upload.example/session")

    def test_resumable_upload_gives_up(self) -> None:
        chunk = ChunkSize.APPROX_1.in_bytes()
        fake_req = _FakeResumableRequest(chunk * 2, chunk, failures={0: 10})

        service = Mock()
        service.files.return_value.create.return_value = fake_req
        delegate = TransferDelegate(
            TransferDelegateConfig(
                chunk_size=ChunkSize.APPROX_1,
                backoff_config=BackoffConfig(max_retries=2),
            )
        )
        drive = GoogleDriveService.from_service(service)
        meta = UploadMetadata(name="big.bin", mime_type="application/octet-stream", size=chunk * 2)

        with patch("gdrivesync.drive.service.MediaIoBaseUpload"), patch("time.sleep", return_value=None):
            with self.assertRaises(ApiError):
                drive.upload_file(io.BytesIO(b""), meta, delegate)
        self.assertEqual(fake_req.calls, 3)

    def test_iter_content_yields_chunks_and_retries(self) -> None:
        service = Mock()
        drive = GoogleDriveService.from_service(service)

        class Downloader(_FakeDownloader):
            chunks = [b"abc", _http_error(500), b"def"]

        with patch("gdrivesync.drive.service.MediaIoBaseDownload", Downloader), patch(
            "time.sleep", return_value=None
        ) as sleep:
            chunks = list(drive.iter_content("F1", TransferDelegate()))

        self.assertEqual(chunks, [b"abc", b"def"])
        self.assertEqual(sleep.call_count, 1)
        kwargs = service.files.return_value.get_media.call_args.kwargs
        self.assertEqual(kwargs["fileId"], "F1")

    def test_iter_content_logs_chunk_info(self) -> None:
        service = Mock()
        drive = GoogleDriveService.from_service(service)

        class Downloader(_FakeDownloader):
            chunks = [b"abc", _http_error(503), b"def"]

            def next_chunk(self):
                status, done = super().next_chunk()
                self._progress = getattr(self, "_progress", 0) + 3
                self._total_size = 6
                return status, done

        delegate = TransferDelegate(
            TransferDelegateConfig(chunk_size=ChunkSize.APPROX_1, print_chunk_info=True)
        )
        with patch("gdrivesync.drive.service.MediaIoBaseDownload", Downloader), patch(
            "time.sleep", return_value=None
        ):
            with self.assertLogs("gdrivesync.drive.delegate", level="INFO") as logs:
                chunks = list(drive.iter_content("F1", delegate))

        self.assertEqual(chunks, [b"abc", b"def"])
        self.assertEqual(len(logs.output), 3)
        self.assertIn("Downloading", logs.output[0])
        self.assertIn("(0-", logs.output[0])
        self.assertIn("Downloading", logs.output[1])
        self.assertIn("(3-5 of 6)", logs.output[1])
        self.assertIn("Retrying", logs.output[2])
        self.assertIn("(3-5 of 6)", logs.output[2])


if __name__ == "__main__":
    unittest.main()
