"""Exception hierarchy and HTTP error mapping for gdrivesync."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional


class GDriveSyncError(Exception):
    """
    Base exception for gdrivesync.

    Attributes:
        details: Optional structured information (e.g., path, HTTP status).
        cause: Optional original exception that triggered this error.
    """

    def __init__(
        self,
        message: str,
        *,
        details: Optional[dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.details = details or {}
        self.cause = cause


# ----------------------------
# Remote service (HTTP / transport)
# ----------------------------
class AuthError(GDriveSyncError):
    """Raised when OAuth authentication/refresh fails."""


class PermissionError(GDriveSyncError):
    """Raised when access is denied (HTTP 403 non-quota)."""


class InvalidArgumentError(GDriveSyncError):
    """Raised when arguments are invalid (HTTP 400, bad CLI input, etc.)."""


class NotFoundError(GDriveSyncError):
    """Raised when a Drive resource is not found (HTTP 404)."""


class ConflictError(GDriveSyncError):
    """Raised when a conflict occurs (HTTP 409/412)."""


class RateLimitError(GDriveSyncError):
    """Raised when rate-limited (HTTP 429) and retries are exhausted."""


class QuotaExceededError(GDriveSyncError):
    """Raised when quota is exceeded (HTTP 403 with quota-related reason)."""


class NetworkError(GDriveSyncError):
    """Raised when network/timeout issues prevent the request."""


class ApiError(GDriveSyncError):
    """Raised for unclassified API errors (5xx, unknown 4xx, etc.)."""


# ----------------------------
# Identifier pool
# ----------------------------
class IdPoolError(GDriveSyncError):
    """Base class for identifier pool failures."""


class OutOfIdentifiersError(IdPoolError):
    """Raised when a refill returned no identifiers."""

    def __init__(self) -> None:
        super().__init__("no more identifiers available")


class PoolRefillError(IdPoolError):
    """Raised when requesting a new batch of identifiers failed."""

    def __init__(self, *, cause: Optional[BaseException] = None) -> None:
        super().__init__("failed to generate drive identifiers", cause=cause)


# ----------------------------
# Tree building
# ----------------------------
class TreeBuildError(GDriveSyncError):
    """Base class for structural errors raised while building a tree."""


class FileTreeBuildError(TreeBuildError):
    """Top-level failure of a tree build."""


class CanonicalizeError(TreeBuildError):
    def __init__(self, path: Path, *, cause: Optional[BaseException] = None) -> None:
        super().__init__(
            f"unable to canonicalize path '{path}'",
            details={"path": str(path)},
            cause=cause,
        )
        self.path = path


class InvalidPathError(TreeBuildError):
    def __init__(self, path: Path) -> None:
        super().__init__(f"path '{path}' has no valid name", details={"path": str(path)})
        self.path = path


class ReadDirectoryError(TreeBuildError):
    def __init__(self, path: Path, *, cause: Optional[BaseException] = None) -> None:
        super().__init__(
            f"unable to read directory content of '{path}'",
            details={"path": str(path)},
            cause=cause,
        )
        self.path = path


class IdGenerationError(TreeBuildError):
    def __init__(self, path: Path, *, cause: Optional[BaseException] = None) -> None:
        super().__init__(
            f"unable to generate google drive id for '{path}'",
            details={"path": str(path)},
            cause=cause,
        )
        self.path = path


class SymlinkUnsupportedError(TreeBuildError):
    """Raised when a local tree contains a symbolic link."""

    def __init__(self, path: Path) -> None:
        super().__init__(
            f"file '{path}' is a symlink, symlinks are not supported",
            details={"path": str(path)},
        )
        self.path = path


class UnknownEntryTypeError(TreeBuildError):
    def __init__(self, path: Path) -> None:
        super().__init__(
            f"file '{path}' is not regular, a directory or a symlink",
            details={"path": str(path)},
        )
        self.path = path


class NestedBuildError(TreeBuildError):
    """Wraps the failure of a child folder with the child's path or identifier."""

    def __init__(self, identifier: str, *, cause: Optional[BaseException] = None) -> None:
        super().__init__(
            f"cannot evaluate child directory {identifier}",
            details={"identifier": identifier},
            cause=cause,
        )
        self.identifier = identifier


class FileEvaluationError(TreeBuildError):
    def __init__(self, identifier: str, *, cause: Optional[BaseException] = None) -> None:
        super().__init__(
            f"unable to evaluate file {identifier}",
            details={"identifier": identifier},
            cause=cause,
        )
        self.identifier = identifier


class NotAFolderError(TreeBuildError):
    def __init__(self, identifier: str) -> None:
        super().__init__(f"file {identifier} is not a directory", details={"identifier": identifier})
        self.identifier = identifier


class ListFilesError(TreeBuildError):
    def __init__(self, identifier: str, *, cause: Optional[BaseException] = None) -> None:
        super().__init__(
            f"unable to list files of directory {identifier}",
            details={"identifier": identifier},
            cause=cause,
        )
        self.identifier = identifier


class MissingFileNameError(TreeBuildError):
    def __init__(self) -> None:
        super().__init__("file name is missing")


class MissingFileIdError(TreeBuildError):
    def __init__(self) -> None:
        super().__init__("file id is missing")


class MissingFileSizeError(TreeBuildError):
    def __init__(self) -> None:
        super().__init__("file size is missing")


class InvalidFileSizeError(TreeBuildError):
    def __init__(self, value: Any) -> None:
        super().__init__(f"file size is invalid: {value!r}", details={"size": value})


class UnsafeFileNameError(TreeBuildError):
    """Raised when a Drive name cannot be used as a single local path component."""

    def __init__(self, name: str) -> None:
        super().__init__(f"file name {name!r} is not a valid local file name", details={"name": name})
        self.name = name


# ----------------------------
# Transfer / integrity
# ----------------------------
class InvalidChunkSizeError(InvalidArgumentError):
    def __init__(self, value: Any) -> None:
        super().__init__(
            "not a valid chunk size, must be a power of 2 between 1 and 8192",
            details={"value": value},
        )


class TransferError(GDriveSyncError):
    """Base class for local I/O failures during a transfer."""


class CreateFileError(TransferError):
    """Raised when the temporary download file cannot be created."""


class ReadChunkError(TransferError):
    """Raised when reading the next chunk of a download stream failed."""


class WriteChunkError(TransferError):
    """Raised when writing a downloaded chunk to disk failed."""


class RenameFileError(TransferError):
    """Raised when publishing the temporary file over the destination failed."""


class DigestMismatchError(TransferError):
    """Raised when the downloaded content does not match the expected MD5."""

    def __init__(self, expected: bytes, actual: bytes) -> None:
        super().__init__(
            f"md5 mismatch, expected {expected.hex()}, got {actual.hex()}",
            details={"expected": expected.hex(), "actual": actual.hex()},
        )
        self.expected = expected
        self.actual = actual


class OpenFileError(TransferError):
    """Raised when a local file to upload cannot be opened."""


class CreateDirectoryError(TransferError):
    """Raised when a local directory for a download cannot be created."""


class UploadError(GDriveSyncError):
    """Wraps a failed upload with the local path involved."""


class DownloadError(GDriveSyncError):
    """Wraps a failed download with the destination path involved."""


class DestinationExistsError(GDriveSyncError):
    """Raised when the download target exists and overwriting is not allowed."""


@dataclass(frozen=True)
class HttpErrorInfo:
    """Lightweight HTTP error information for mapping to gdrivesync exceptions."""

    status_code: int
    reason: str | None = None
    message: str | None = None
    details: dict[str, Any] | None = None


_QUOTA_REASON_KEYWORDS: tuple[str, ...] = (
    "quota",
    "rateLimitExceeded",
    "userRateLimitExceeded",
    "dailyLimitExceeded",
    "usageLimits",
    "storageQuotaExceeded",
)


def _is_quota_reason(reason: str | None) -> bool:
    if not reason:
        return False
    return any(key.lower() in reason.lower() for key in _QUOTA_REASON_KEYWORDS)


def map_http_error(
    info: HttpErrorInfo,
    *,
    cause: Optional[BaseException] = None,
) -> GDriveSyncError:
    """
    Map an HTTP error to a gdrivesync exception.

    Policy:
        - 401 -> AuthError
        - 403 -> PermissionError (default), but QuotaExceededError if quota-related
        - 404 -> NotFoundError
        - 409/412 -> ConflictError
        - 429 -> RateLimitError
        - 400 -> InvalidArgumentError
        - 5xx and everything else -> ApiError
    """
    details: dict[str, Any] = {
        "status_code": info.status_code,
        "reason": info.reason,
    }
    if info.details:
        details.update(info.details)

    message = info.message or f"HTTP error {info.status_code}"

    if info.status_code == 400:
        return InvalidArgumentError(message, details=details, cause=cause)
    if info.status_code == 401:
        return AuthError(message, details=details, cause=cause)
    if info.status_code == 403:
        if _is_quota_reason(info.reason):
            return QuotaExceededError(message, details=details, cause=cause)
        return PermissionError(message, details=details, cause=cause)
    if info.status_code == 404:
        return NotFoundError(message, details=details, cause=cause)
    if info.status_code in (409, 412):
        return ConflictError(message, details=details, cause=cause)
    if info.status_code == 429:
        return RateLimitError(message, details=details, cause=cause)

    return ApiError(message, details=details, cause=cause)


def format_error_chain(exc: BaseException) -> str:
    """
    Render an exception and its causes as a single human-readable line.

    Follows `cause` (gdrivesync errors) and `__cause__` (chained exceptions),
    skipping links that repeat the previous message.
    """
    parts: list[str] = []
    seen: set[int] = set()
    cur: Optional[BaseException] = exc

    while cur is not None and id(cur) not in seen:
        seen.add(id(cur))
        text = str(cur) or cur.__class__.__name__
        if not parts or parts[-1] != text:
            parts.append(text)
        nxt = getattr(cur, "cause", None)
        cur = nxt if isinstance(nxt, BaseException) else cur.__cause__

    return ": ".join(parts)
