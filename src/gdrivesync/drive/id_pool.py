"""Pre-reserved Drive identifiers handed out one at a time."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from gdrivesync.errors import GDriveSyncError, OutOfIdentifiersError, PoolRefillError

from .delegate import TransferDelegate, TransferDelegateConfig

if TYPE_CHECKING:
    from .service import GoogleDriveService

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE: int = 1000


class IdPool:
    """
    Buffer of unused Drive file ids.

    Reserving ids up front lets a whole tree be assigned its final ids in one
    local pass, so folders can later be created parent first with the correct
    `parents` already attached. The pool belongs to a single build and is not
    thread-safe.
    """

    def __init__(
        self,
        service: "GoogleDriveService",
        delegate_config: Optional[TransferDelegateConfig] = None,
        *,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ) -> None:
        if batch_size <= 0:
            raise ValueError("batch_size must be > 0")
        self._service = service
        self._delegate_config = delegate_config or TransferDelegateConfig()
        self._batch_size = batch_size
        self._ids: list[str] = []
        self.refill_count = 0

    def next(self) -> str:
        """
        Return an unused id, refilling the buffer from Drive when empty.

        Raises:
            PoolRefillError: the refill request failed.
            OutOfIdentifiersError: the refill returned no ids.
        """
        if not self._ids:
            self._refill()
        return self._ids.pop()

    def _refill(self) -> None:
        self.refill_count += 1
        logger.debug("Requesting %d drive ids", self._batch_size)
        try:
            ids = self._service.generate_ids(
                self._batch_size,
                TransferDelegate(self._delegate_config),
            )
        except GDriveSyncError as exc:
            raise PoolRefillError(cause=exc) from exc

        if not ids:
            raise OutOfIdentifiersError()

        # Pop from the end; reverse to hand ids out in the order Drive returned them.
        self._ids = list(reversed(ids))
