"""
Live feed of verification records as an explicit event stream.

Only the newest snapshot pushed by the store is kept for a consumer that
pulls it, so a feed nobody reads holds one snapshot at most. The underlying
subscription follows the session identity.
"""

from __future__ import annotations

import logging
import queue
import threading
from typing import Callable, Optional

from backend.auth import Identity
from backend.session import SessionBootstrapper
from backend.verifications import Subscription, VerificationStoreClient
from shared.types import VerificationRecord

logger = logging.getLogger(__name__)


class SnapshotFeed:
    def __init__(self, client: VerificationStoreClient, session: SessionBootstrapper):
        self.client = client
        self.session = session
        self.latest: list[VerificationRecord] = []
        self.loading = True
        self.error: Optional[Exception] = None
        self._queue: queue.Queue[list[VerificationRecord]] = queue.Queue(maxsize=1)
        self._subscription: Optional[Subscription] = None
        self._remove_identity_listener: Optional[Callable[[], None]] = None
        self._lock = threading.Lock()
        self._closed = False

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    @property
    def subscribed(self) -> bool:
        return self._subscription is not None and not self._subscription.cancelled

    def open(self) -> "SnapshotFeed":
        self._remove_identity_listener = self.session.on_identity_changed(
            self._on_identity_changed
        )
        self._resubscribe()
        return self

    def close(self) -> None:
        with self._lock:
            self._closed = True
            remove, self._remove_identity_listener = self._remove_identity_listener, None
            subscription, self._subscription = self._subscription, None
        if remove:
            remove()
        if subscription:
            subscription.cancel()

    def get(self, timeout: float | None = None) -> Optional[list[VerificationRecord]]:
        """Next snapshot, or None when none arrives within the timeout."""
        try:
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            return None

    def __enter__(self) -> "SnapshotFeed":
        return self.open()

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _on_snapshot(self, records: list[VerificationRecord]) -> None:
        with self._lock:
            self.latest = records
            self.loading = False
            # Replace any snapshot the consumer has not picked up yet.
            try:
                self._queue.get_nowait()
            except queue.Empty:
                pass
            self._queue.put_nowait(records)

    def _on_error(self, error: Exception) -> None:
        self.error = error

    def _on_identity_changed(self, identity: Optional[Identity]) -> None:
        logger.info("Session identity changed, re-subscribing verification feed")
        self._resubscribe()

    def _resubscribe(self) -> None:
        with self._lock:
            if self._closed:
                return
            previous, self._subscription = self._subscription, None
        if previous:
            previous.cancel()
        if self.session.identity is None:
            return
        subscription = self.client.subscribe(self._on_snapshot, self._on_error)
        with self._lock:
            if self._closed:
                stale = subscription
            else:
                self._subscription, stale = subscription, None
        if stale:
            stale.cancel()
