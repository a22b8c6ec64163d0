"""
Document store abstraction for verification records.

Provides an in-memory implementation for development and tests and a
SQLAlchemy-backed one (Postgres in production, SQLite in tests). The
Firestore implementation lives in `backend.firestore_db`.
"""

from __future__ import annotations

import logging
import threading
import uuid
from typing import Callable, Dict, Optional, Protocol

from sqlalchemy import JSON, Column, String, create_engine, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from backend.errors import RecordNotFoundError, StoreError
from shared.constants import DEFAULT_APP_ID

logger = logging.getLogger(__name__)

Document = tuple[str, dict]
SnapshotCallback = Callable[[list[Document]], None]
ErrorCallback = Callable[[Exception], None]


class VerificationStore(Protocol):
    """Interface for the verifications collection of one app."""

    def add(self, data: dict) -> str:
        ...

    def update(self, record_id: str, data: dict) -> None:
        ...

    def list_all(self) -> list[Document]:
        ...

    def watch(
        self, on_snapshot: SnapshotCallback, on_error: Optional[ErrorCallback] = None
    ) -> Callable[[], None]:
        ...


class _Watchers:
    """Delivers full snapshots to in-process watchers after each write."""

    def __init__(self, load: Callable[[], list[Document]]):
        self._load = load
        self._watchers: Dict[str, tuple[SnapshotCallback, Optional[ErrorCallback]]] = {}
        self._lock = threading.Lock()

    def add(
        self, on_snapshot: SnapshotCallback, on_error: Optional[ErrorCallback]
    ) -> Callable[[], None]:
        key = uuid.uuid4().hex
        with self._lock:
            self._watchers[key] = (on_snapshot, on_error)

        def unsubscribe() -> None:
            with self._lock:
                self._watchers.pop(key, None)

        self._deliver({key: (on_snapshot, on_error)})
        return unsubscribe

    def notify(self) -> None:
        with self._lock:
            watchers = dict(self._watchers)
        self._deliver(watchers)

    def __len__(self) -> int:
        return len(self._watchers)

    def _deliver(self, watchers: dict) -> None:
        if not watchers:
            return
        try:
            snapshot = self._load()
        except Exception as e:
            logger.error("Failed to load verification snapshot: %s", e)
            for _, on_error in watchers.values():
                if not on_error:
                    continue
                try:
                    on_error(e)
                except Exception:
                    logger.exception("Verification watcher failed on error")
            return
        # A failing watcher must not fail the write that triggered it.
        for on_snapshot, _ in watchers.values():
            try:
                on_snapshot(list(snapshot))
            except Exception:
                logger.exception("Verification watcher failed on snapshot")


class InMemoryVerificationStore:
    """Simple in-memory document store for development and tests."""

    def __init__(self):
        self.documents: Dict[str, dict] = {}
        self._lock = threading.Lock()
        self._watchers = _Watchers(self.list_all)

    @property
    def watcher_count(self) -> int:
        return len(self._watchers)

    def add(self, data: dict) -> str:
        record_id = uuid.uuid4().hex
        with self._lock:
            self.documents[record_id] = dict(data)
        self._watchers.notify()
        return record_id

    def update(self, record_id: str, data: dict) -> None:
        with self._lock:
            existing = self.documents.get(record_id)
            if existing is None:
                raise RecordNotFoundError(record_id)
            existing.update(data)
        self._watchers.notify()

    def list_all(self) -> list[Document]:
        with self._lock:
            return [(key, dict(value)) for key, value in self.documents.items()]

    def watch(
        self, on_snapshot: SnapshotCallback, on_error: Optional[ErrorCallback] = None
    ) -> Callable[[], None]:
        return self._watchers.add(on_snapshot, on_error)

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        with self._lock:
            self.documents.clear()
        self._watchers.notify()


class SqlVerificationStore:
    """
    SQLAlchemy-backed implementation. Accepts any SQLAlchemy URL (e.g., Postgres or SQLite for tests).

    Watchers are notified of writes made through this instance only.
    """

    def __init__(self, database_url: str, app_id: str = DEFAULT_APP_ID):
        if not database_url:
            raise ValueError("DATABASE_URL is required for SqlVerificationStore")
        self.app_id = app_id
        self.engine = create_engine(
            database_url,
            future=True,
            pool_pre_ping=True,
            pool_recycle=1800,
        )
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False, future=True
        )
        Base.metadata.create_all(self.engine)
        self._watchers = _Watchers(self.list_all)

    @property
    def watcher_count(self) -> int:
        return len(self._watchers)

    def add(self, data: dict) -> str:
        record_id = uuid.uuid4().hex
        try:
            with self.Session() as session:
                session.add(
                    VerificationRow(id=record_id, app_id=self.app_id, data=dict(data))
                )
                session.commit()
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to add verification: {e}") from e
        self._watchers.notify()
        return record_id

    def update(self, record_id: str, data: dict) -> None:
        try:
            with self.Session() as session:
                row = session.get(VerificationRow, record_id)
                if not row or row.app_id != self.app_id:
                    raise RecordNotFoundError(record_id)
                # Reassign so the JSON column is flagged dirty.
                row.data = {**row.data, **data}
                session.commit()
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to update verification {record_id}: {e}") from e
        self._watchers.notify()

    def list_all(self) -> list[Document]:
        try:
            with self.Session() as session:
                stmt = select(VerificationRow).where(
                    VerificationRow.app_id == self.app_id
                )
                rows = session.execute(stmt).scalars().all()
                return [(row.id, dict(row.data)) for row in rows]
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to list verifications: {e}") from e

    def watch(
        self, on_snapshot: SnapshotCallback, on_error: Optional[ErrorCallback] = None
    ) -> Callable[[], None]:
        return self._watchers.add(on_snapshot, on_error)


Base = declarative_base()


class VerificationRow(Base):
    __tablename__ = "verifications"

    id = Column(String, primary_key=True)
    app_id = Column(String, nullable=False, index=True)
    data = Column(JSON, nullable=False)
