"""Google Drive API wrapper used by the transfer engine."""

from __future__ import annotations

import io
import json
import logging
import time
from typing import Any, BinaryIO, Callable, Iterator, Optional, Sequence, TypeVar

import httplib2
from googleapiclient.errors import HttpError
from googleapiclient.http import MediaIoBaseDownload, MediaIoBaseUpload

from gdrivesync.auth import AuthInfo, OAuthClient
from gdrivesync.errors import (
    HttpErrorInfo,
    InvalidArgumentError,
    NetworkError,
    map_http_error,
)
from gdrivesync.models import DriveFile, UploadMetadata
from gdrivesync.util.mime import FOLDER_MIME

from .delegate import BackoffConfig, ContentRange, TransferDelegate, TransferDelegateConfig
from .fields import FILE_FIELDS, GENERATE_IDS_FIELDS, LIST_FIELDS

logger = logging.getLogger(__name__)

T = TypeVar("T")

MAX_PAGE_SIZE: int = 1000
DEFAULT_ORDER_BY: str = "folder,name"

_TRANSPORT_ERRORS: tuple[type[BaseException], ...] = (OSError, httplib2.HttpLib2Error)


class GoogleDriveService:
    """
    Drive API service wrapper.

    Notes:
        - The Drive `service` object is NOT exposed.
        - `supports_all_drives` is applied to all requests consistently.
        - Every request runs through a TransferDelegate; metadata calls get a
          fresh delegate built from `metadata_delegate_config`.
    """

    DEFAULT_SCOPES: tuple[str, ...] = ("https://www.googleapis.com/auth/drive",)

    def __init__(
        self,
        auth_info: AuthInfo,
        *,
        scopes: Optional[Sequence[str]] = None,
        supports_all_drives: bool = True,
        metadata_delegate_config: Optional[TransferDelegateConfig] = None,
    ) -> None:
        self._supports_all_drives = supports_all_drives
        self._metadata_delegate_config = metadata_delegate_config or _default_metadata_config()

        use_scopes = list(scopes) if scopes is not None else list(self.DEFAULT_SCOPES)
        client = OAuthClient(auth_info)
        self._service = client.build_drive_service(use_scopes, ensure_valid=True)

    @classmethod
    def from_service(
        cls,
        service: Any,
        *,
        supports_all_drives: bool = True,
        metadata_delegate_config: Optional[TransferDelegateConfig] = None,
    ) -> "GoogleDriveService":
        """Create from a pre-built Drive service resource (useful for tests)."""
        obj = cls.__new__(cls)
        obj._supports_all_drives = supports_all_drives
        obj._metadata_delegate_config = metadata_delegate_config or _default_metadata_config()
        obj._service = service
        return obj

    # ----------------------------
    # Metadata
    # ----------------------------
    def get_file(self, file_id: str) -> DriveFile:
        req = self._service.files().get(
            fileId=file_id,
            fields=FILE_FIELDS,
            **self._common_get_kwargs(),
        )
        data = self._execute(req.execute)
        return _file_dict_to_drive_file(data)

    def generate_ids(
        self,
        count: int,
        delegate: Optional[TransferDelegate] = None,
    ) -> list[str]:
        """Reserve `count` file ids (at most 1000 per request)."""
        if count <= 0 or count > MAX_PAGE_SIZE:
            raise InvalidArgumentError(
                "count must be between 1 and 1000",
                details={"count": count},
            )

        req = self._service.files().generateIds(
            count=count,
            space="drive",
            fields=GENERATE_IDS_FIELDS,
        )
        data = self._execute(req.execute, delegate)
        ids = data.get("ids", []) or []
        return [i for i in ids if isinstance(i, str)]

    def list_children(
        self,
        folder_id: str,
        *,
        max_files: Optional[int] = None,
    ) -> list[DriveFile]:
        return self.list_files(
            _build_parent_query(folder_id),
            max_files=max_files,
        )

    def list_files(
        self,
        query: str,
        *,
        max_files: Optional[int] = None,
        page_size: int = MAX_PAGE_SIZE,
        order_by: str = DEFAULT_ORDER_BY,
    ) -> list[DriveFile]:
        """
        List files matching `query`, following nextPageToken.

        Stops when the listing is exhausted or `max_files` items were
        collected; the result never exceeds `max_files`.
        """
        page_size = max(1, min(page_size, MAX_PAGE_SIZE))
        collected: list[DriveFile] = []
        page_token: Optional[str] = None

        while True:
            remaining = None if max_files is None else max_files - len(collected)
            if remaining is not None and remaining <= 0:
                break

            req = self._service.files().list(
                q=query,
                fields=LIST_FIELDS,
                pageSize=page_size if remaining is None else min(page_size, remaining),
                orderBy=order_by,
                pageToken=page_token,
                **self._common_list_kwargs(),
            )
            data = self._execute(req.execute)
            for f in data.get("files", []) or []:
                collected.append(_file_dict_to_drive_file(f))

            page_token = data.get("nextPageToken")
            if not page_token:
                break

        if max_files is not None:
            del collected[max_files:]
        return collected

    def create_folder(
        self,
        name: str,
        parents: Optional[Sequence[str]] = None,
        *,
        folder_id: Optional[str] = None,
        delegate: Optional[TransferDelegate] = None,
    ) -> DriveFile:
        body: dict[str, Any] = {"name": name, "mimeType": FOLDER_MIME}
        if parents:
            body["parents"] = list(parents)
        if folder_id is not None:
            body["id"] = folder_id

        req = self._service.files().create(
            body=body,
            fields=FILE_FIELDS,
            **self._common_write_kwargs(),
        )
        data = self._execute(req.execute, delegate)
        return _file_dict_to_drive_file(data)

    # ----------------------------
    # Content
    # ----------------------------
    def upload_file(
        self,
        stream: BinaryIO,
        metadata: UploadMetadata,
        delegate: TransferDelegate,
    ) -> DriveFile:
        """
        Create a file with content read from `stream`.

        Files larger than one chunk use a resumable upload sent chunk by
        chunk; smaller files use a single request.
        """
        chunk_size = delegate.chunk_size()
        resumable = metadata.size > chunk_size

        body: dict[str, Any] = {"name": metadata.name, "mimeType": metadata.mime_type}
        if metadata.parents:
            body["parents"] = list(metadata.parents)
        if metadata.file_id is not None:
            body["id"] = metadata.file_id

        media = MediaIoBaseUpload(
            stream,
            mimetype=metadata.mime_type,
            chunksize=chunk_size,
            resumable=resumable,
        )
        req = self._service.files().create(
            body=body,
            media_body=media,
            fields=FILE_FIELDS,
            **self._common_write_kwargs(),
        )

        if not resumable:
            data = self._execute(req.execute, delegate)
            return _file_dict_to_drive_file(data)

        return _file_dict_to_drive_file(
            self._upload_resumable(req, metadata.size, delegate)
        )

    def iter_content(
        self,
        file_id: str,
        delegate: Optional[TransferDelegate] = None,
    ) -> Iterator[bytes]:
        """Yield the file content chunk by chunk (`delegate.chunk_size()` bytes)."""
        use_delegate = delegate or self._metadata_delegate()
        req = self._service.files().get_media(
            fileId=file_id,
            **self._common_get_kwargs(),
        )

        chunk_size = use_delegate.chunk_size()
        buffer = io.BytesIO()
        downloader = MediaIoBaseDownload(buffer, req, chunksize=chunk_size)

        def attempt() -> Any:
            use_delegate.begin_chunk(_download_range(downloader, chunk_size), "Downloading")
            return downloader.next_chunk()

        done = False
        while not done:
            _, done = self._execute(attempt, use_delegate)
            data = buffer.getvalue()
            buffer.seek(0)
            buffer.truncate()
            if data:
                yield data

    # ----------------------------
    # Internals
    # ----------------------------
    def _common_get_kwargs(self) -> dict[str, Any]:
        if not self._supports_all_drives:
            return {}
        return {"supportsAllDrives": True}

    def _common_list_kwargs(self) -> dict[str, Any]:
        if not self._supports_all_drives:
            return {}
        return {"supportsAllDrives": True, "includeItemsFromAllDrives": True}

    def _common_write_kwargs(self) -> dict[str, Any]:
        if not self._supports_all_drives:
            return {}
        return {"supportsAllDrives": True}

    def _metadata_delegate(self) -> TransferDelegate:
        return TransferDelegate(self._metadata_delegate_config)

    def _upload_resumable(
        self,
        req: Any,
        total_size: int,
        delegate: TransferDelegate,
    ) -> dict[str, Any]:
        chunk_size = delegate.chunk_size()
        url = delegate.upload_url()
        if url:
            req.resumable_uri = url

        response = None
        while response is None:
            first = req.resumable_progress
            last = min(first + chunk_size, total_size) - 1
            delegate.begin_chunk(ContentRange(first, last, total_size))
            try:
                _, response = self._execute(req.next_chunk, delegate)
            finally:
                delegate.store_upload_url(req.resumable_uri)

        return response

    def _execute(
        self,
        func: Callable[[], T],
        delegate: Optional[TransferDelegate] = None,
    ) -> T:
        """
        Run one request attempt at a time, asking the delegate after each failure.

        A delay from the delegate means sleep and retry; None means give up and
        raise the mapped error.
        """
        use_delegate = delegate or self._metadata_delegate()

        while True:
            try:
                return func()
            except HttpError as exc:
                info = _http_error_to_info(exc)
                delay = use_delegate.http_failure(info.status_code, exc)
                if delay is None:
                    raise map_http_error(info, cause=exc) from exc
            except _TRANSPORT_ERRORS as exc:
                delay = use_delegate.http_error(exc)
                if delay is None:
                    raise NetworkError("Network error", cause=exc) from exc

            logger.debug("Retrying request in %.1fs", delay)
            time.sleep(delay)


def _download_range(downloader: Any, chunk_size: int) -> ContentRange:
    # MediaIoBaseDownload keeps its progress privately; the total is unknown
    # until the first response.
    first = getattr(downloader, "_progress", 0) or 0
    total = getattr(downloader, "_total_size", None)
    last = first + chunk_size - 1
    if total is not None:
        last = min(last, total - 1)
    return ContentRange(first, last, total)


def _default_metadata_config() -> TransferDelegateConfig:
    return TransferDelegateConfig(backoff_config=BackoffConfig(max_retries=3))


def _build_parent_query(folder_id: str) -> str:
    return f"'{folder_id}' in parents and trashed = false"


def _file_dict_to_drive_file(data: dict[str, Any]) -> DriveFile:
    def _str(key: str) -> Optional[str]:
        value = data.get(key)
        return value if isinstance(value, str) else None

    parents = data.get("parents") or []
    size = data.get("size")
    shortcut = data.get("shortcutDetails")
    target_id = shortcut.get("targetId") if isinstance(shortcut, dict) else None

    return DriveFile(
        id=_str("id"),
        name=_str("name"),
        mime_type=_str("mimeType"),
        parents=[p for p in parents if isinstance(p, str)] if isinstance(parents, list) else [],
        size=size if isinstance(size, (str, int)) and not isinstance(size, bool) else None,
        md5_checksum=_str("md5Checksum"),
        shortcut_target_id=target_id if isinstance(target_id, str) else None,
    )


def _http_error_to_info(exc: Any) -> HttpErrorInfo:
    status_code = getattr(getattr(exc, "resp", None), "status", None)
    reason = getattr(getattr(exc, "resp", None), "reason", None)

    message = None
    details: dict[str, Any] = {}

    content = getattr(exc, "content", None)
    if isinstance(content, (bytes, bytearray)):
        try:
            payload = json.loads(content.decode("utf-8"))
        except ValueError:
            payload = None

        err = payload.get("error") if isinstance(payload, dict) else None
        if isinstance(err, dict):
            message = err.get("message") or None
            errors = err.get("errors") or []
            if errors and isinstance(errors, list) and isinstance(errors[0], dict):
                details["domain"] = errors[0].get("domain")
                details["reason_detail"] = errors[0].get("reason")
                if isinstance(errors[0].get("reason"), str):
                    reason = errors[0]["reason"]

    if isinstance(status_code, str) and status_code.isdigit():
        status_code = int(status_code)
    if not isinstance(status_code, int):
        status_code = 0

    return HttpErrorInfo(
        status_code=status_code,
        reason=reason if isinstance(reason, str) else None,
        message=message,
        details=details or None,
    )
