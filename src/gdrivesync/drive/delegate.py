"""Per-transfer delegate: chunk size, resumable URL and retry decisions."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from gdrivesync.errors import InvalidChunkSizeError
from gdrivesync.util.size import format_size

logger = logging.getLogger(__name__)

MIB: int = 1 << 20


class ChunkSize(Enum):
    """Allowed chunk sizes, in MiB (powers of two)."""

    APPROX_1 = 1
    APPROX_2 = 2
    APPROX_4 = 4
    APPROX_8 = 8
    APPROX_16 = 16
    APPROX_32 = 32
    APPROX_64 = 64
    APPROX_128 = 128
    APPROX_256 = 256
    APPROX_512 = 512
    APPROX_1024 = 1024
    APPROX_2048 = 2048
    APPROX_4096 = 4096
    APPROX_8192 = 8192

    @classmethod
    def default(cls) -> "ChunkSize":
        return cls.APPROX_32

    @classmethod
    def parse(cls, value: str | int) -> "ChunkSize":
        """Parse a MiB count such as "64". Raises InvalidChunkSizeError."""
        try:
            return cls(int(value))
        except (TypeError, ValueError) as exc:
            raise InvalidChunkSizeError(value) from exc

    def in_bytes(self) -> int:
        return self.value * MIB

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class BackoffConfig:
    max_retries: int = 100
    min_delay: float = 1.0
    max_delay: float = 60.0


class Backoff:
    """
    Exponential backoff with attempt counting.

    `retry()` returns the delay (seconds) before the next attempt, or None
    once more than `max_retries` retries have been requested. The n-th retry
    waits `min_delay * 2 ** (n - 1)`, clamped to [min_delay, max_delay].
    """

    def __init__(self, config: BackoffConfig) -> None:
        if config.max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        if config.min_delay < 0 or config.max_delay < config.min_delay:
            raise ValueError("delays must satisfy 0 <= min_delay <= max_delay")
        self._config = config
        self.attempts = 0

    def retry(self) -> Optional[float]:
        self.attempts += 1
        if self.attempts > self._config.max_retries:
            return None

        # Cap the exponent; 2 ** 64 seconds is already past any max_delay.
        exponent = min(self.attempts - 1, 64)
        delay = self._config.min_delay * (2 ** exponent)
        return max(self._config.min_delay, min(delay, self._config.max_delay))

    def reset(self) -> None:
        self.attempts = 0


@dataclass(frozen=True)
class ContentRange:
    """Byte range of one chunk attempt (inclusive bounds)."""

    first: int
    last: int
    total_length: Optional[int] = None

    @property
    def length(self) -> int:
        return max(self.last + 1 - self.first, 0)


@dataclass(frozen=True)
class TransferDelegateConfig:
    chunk_size: ChunkSize = field(default_factory=ChunkSize.default)
    backoff_config: BackoffConfig = field(default_factory=BackoffConfig)
    print_chunk_errors: bool = False
    print_chunk_info: bool = False


class TransferDelegate:
    """
    Mediates a single upload or download.

    The Drive service calls into the delegate for every chunk attempt: to ask
    for the chunk size, to report the byte range about to be sent, to keep the
    resumable session URL, and to decide whether a failed attempt is retried.
    One delegate must not be shared between transfers.
    """

    def __init__(self, config: Optional[TransferDelegateConfig] = None) -> None:
        self.config = config or TransferDelegateConfig()
        self.backoff = Backoff(self.config.backoff_config)
        self._resumable_upload_url: Optional[str] = None
        self._previous_chunk: Optional[ContentRange] = None

    def chunk_size(self) -> int:
        return self.config.chunk_size.in_bytes()

    def begin_chunk(self, chunk: ContentRange, verb: str = "Uploading") -> None:
        if self.config.print_chunk_info:
            action = "Retrying" if chunk == self._previous_chunk else verb
            total = chunk.total_length if chunk.total_length is not None else "*"
            logger.info(
                "%s %s chunk (%d-%d of %s)",
                action,
                format_size(chunk.length),
                chunk.first,
                chunk.last,
                total,
            )
        self._previous_chunk = chunk

    def store_upload_url(self, url: Optional[str]) -> None:
        self._resumable_upload_url = url

    def upload_url(self) -> Optional[str]:
        return self._resumable_upload_url

    def http_error(self, exc: BaseException) -> Optional[float]:
        """Transport-level failure (connection reset, timeout, ...)."""
        if self.config.print_chunk_errors:
            logger.warning("Failed attempt to transfer chunk: %s", exc)
        return self.backoff.retry()

    def http_failure(self, status: int, exc: Optional[BaseException] = None) -> Optional[float]:
        """HTTP error response. Only 5xx and 429 are retried."""
        if not should_retry(status):
            return None

        if self.config.print_chunk_errors:
            logger.warning(
                "Failed attempt to transfer chunk. Status code: %d, error: %s",
                status,
                exc,
            )
        return self.backoff.retry()


def should_retry(status: int) -> bool:
    return 500 <= status <= 599 or status == 429
