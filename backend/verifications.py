"""
Verification store client: the only component that reads or writes records.

Every operation requires the session identity and is inert without it.
Store failures are logged and reported as "nothing happened" to callers.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Iterable, Optional

from backend.db import Document, VerificationStore
from backend.session import SessionBootstrapper
from shared.constants import MIN_UPDATED_ADDRESS_LENGTH
from shared.types import VerificationRecord, VerificationStatus, VerificationSummary

logger = logging.getLogger(__name__)

RecordsCallback = Callable[[list[VerificationRecord]], None]


def _now_ms() -> int:
    return int(time.time() * 1000)


def sort_records(records: Iterable[VerificationRecord]) -> list[VerificationRecord]:
    """Newest first."""
    return sorted(records, key=lambda record: record.created_at, reverse=True)


def filter_records(
    records: Iterable[VerificationRecord], term: str | None
) -> list[VerificationRecord]:
    """Case-insensitive substring match on customer name or order id."""
    needle = (term or "").lower()
    if not needle:
        return list(records)
    return [
        record
        for record in records
        if needle in record.customer_name.lower() or needle in record.order_id.lower()
    ]


def summarize(records: Iterable[VerificationRecord]) -> VerificationSummary:
    records = list(records)
    return VerificationSummary(
        total=len(records),
        confirmed=sum(1 for r in records if r.status == VerificationStatus.CONFIRMED),
        needs_change=sum(
            1 for r in records if r.status == VerificationStatus.NEEDS_CHANGE
        ),
        pending_sync=sum(1 for r in records if not r.synced_with_carrier),
    )


def to_records(documents: Iterable[Document]) -> list[VerificationRecord]:
    return sort_records(
        VerificationRecord.from_document(record_id, data)
        for record_id, data in documents
    )


class Subscription:
    """Cancellation handle for a live feed. Cancelling twice is harmless."""

    def __init__(self, unsubscribe: Optional[Callable[[], None]] = None):
        self._unsubscribe = unsubscribe
        self._cancelled = unsubscribe is None
        self._lock = threading.Lock()

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        with self._lock:
            if self._cancelled:
                return
            self._cancelled = True
            unsubscribe, self._unsubscribe = self._unsubscribe, None
        try:
            unsubscribe()
        except Exception:
            logger.exception("Failed to cancel verification subscription")


class VerificationStoreClient:
    def __init__(self, store: VerificationStore, session: SessionBootstrapper):
        self.store = store
        self.session = session

    def _has_identity(self, operation: str) -> bool:
        if self.session.identity is None:
            logger.warning("Skipping %s: no session identity", operation)
            return False
        return True

    def submit(
        self,
        order_id: str,
        name: str,
        original_address: str,
        status: VerificationStatus | str,
        updated_address: str | None = None,
    ) -> Optional[str]:
        """
        Appends a new verification record and returns its id.

        Returns None, without writing, when there is no identity, when a
        requested change carries an address shorter than the edit screen
        accepts, or when the store write fails.
        """
        if not self._has_identity("submit"):
            return None
        try:
            status = VerificationStatus(status)
        except ValueError:
            logger.warning("Rejected submit for %s: unknown status %r", order_id, status)
            return None

        if status == VerificationStatus.NEEDS_CHANGE:
            if len(updated_address or "") < MIN_UPDATED_ADDRESS_LENGTH:
                logger.warning(
                    "Rejected submit for %s: updated address shorter than %d",
                    order_id,
                    MIN_UPDATED_ADDRESS_LENGTH,
                )
                return None
        else:
            updated_address = ""

        record = VerificationRecord(
            id="",
            order_id=order_id,
            customer_name=name,
            original_address=original_address,
            status=status,
            updated_address=updated_address or "",
            synced_with_carrier=False,
            created_at=_now_ms(),
        )
        try:
            record_id = self.store.add(record.to_document())
        except Exception:
            logger.exception("Failed to submit verification for %s", order_id)
            return None
        logger.info("Stored verification %s for order %s (%s)", record_id, order_id, status)
        return record_id

    def subscribe(
        self,
        on_change: RecordsCallback,
        on_error: Optional[Callable[[Exception], None]] = None,
    ) -> Subscription:
        """
        Delivers the full, newest-first record list on every change.

        The returned handle must be cancelled when the consumer goes away.
        """
        if not self._has_identity("subscribe"):
            return Subscription()

        def _handle_error(error: Exception) -> None:
            logger.error("Verification feed failed: %s", error)
            if on_error:
                on_error(error)

        def _handle_snapshot(documents: list[Document]) -> None:
            try:
                records = to_records(documents)
            except Exception as e:
                _handle_error(e)
                return
            try:
                on_change(records)
            except Exception:
                logger.exception("Verification subscriber failed on snapshot")

        try:
            unsubscribe = self.store.watch(_handle_snapshot, _handle_error)
        except Exception as e:
            logger.exception("Failed to subscribe to verifications")
            if on_error:
                on_error(e)
            return Subscription()
        return Subscription(unsubscribe)

    def mark_synced(self, record_id: str) -> bool:
        """Flags a record as synced with the carrier. Last write wins."""
        if not self._has_identity("mark_synced"):
            return False
        try:
            self.store.update(record_id, {"syncedWithCarrier": True})
        except Exception:
            logger.exception("Failed to mark verification %s as synced", record_id)
            return False
        logger.info("Marked verification %s as synced", record_id)
        return True

    def list_records(self) -> list[VerificationRecord]:
        if not self._has_identity("list_records"):
            return []
        try:
            return to_records(self.store.list_all())
        except Exception:
            logger.exception("Failed to list verifications")
            return []
