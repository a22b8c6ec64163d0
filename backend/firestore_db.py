"""
Cloud Firestore implementation of the verification document store.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

import firebase_admin
from firebase_admin import credentials, firestore
from google.api_core import exceptions

from backend.db import Document, ErrorCallback, SnapshotCallback
from backend.errors import RecordNotFoundError, StoreError
from shared.firebase_constants import verifications_path

logger = logging.getLogger(__name__)


def initialize_firebase_app(
    options: dict, credentials_path: str | None = None
) -> firebase_admin.App:
    """
    Initializes (or reuses) the firebase_admin app for the given web config.

    Application default credentials are used unless a service account file
    is given.
    """
    project_id = options.get("projectId")
    name = f"address-fix-{project_id or 'default'}"
    try:
        return firebase_admin.get_app(name)
    except ValueError:
        pass
    credential = (
        credentials.Certificate(credentials_path) if credentials_path else None
    )
    app_options = {"projectId": project_id} if project_id else None
    return firebase_admin.initialize_app(credential, app_options, name=name)


class FirestoreVerificationStore:
    """Stores verifications under artifacts/{app_id}/public/data/verifications."""

    def __init__(self, client, app_id: str):
        self.client = client
        self.app_id = app_id
        self.collection = client.collection(*verifications_path(app_id))

    @classmethod
    def from_app(cls, app: firebase_admin.App, app_id: str) -> "FirestoreVerificationStore":
        return cls(firestore.client(app), app_id)

    def add(self, data: dict) -> str:
        try:
            _, doc_ref = self.collection.add(dict(data))
        except exceptions.GoogleAPICallError as e:
            raise StoreError(f"Failed to add verification: {e}") from e
        return doc_ref.id

    def update(self, record_id: str, data: dict) -> None:
        try:
            self.collection.document(record_id).update(dict(data))
        except exceptions.NotFound as e:
            raise RecordNotFoundError(record_id) from e
        except exceptions.GoogleAPICallError as e:
            raise StoreError(f"Failed to update verification {record_id}: {e}") from e

    def list_all(self) -> list[Document]:
        try:
            return [(doc.id, doc.to_dict()) for doc in self.collection.stream()]
        except exceptions.GoogleAPICallError as e:
            raise StoreError(f"Failed to list verifications: {e}") from e

    def watch(
        self, on_snapshot: SnapshotCallback, on_error: Optional[ErrorCallback] = None
    ) -> Callable[[], None]:
        def _on_snapshot(col_snapshot, changes, read_time):
            try:
                documents = [(doc.id, doc.to_dict()) for doc in col_snapshot]
            except Exception as e:
                logger.exception("Failed to read Firestore snapshot")
                if on_error:
                    on_error(e)
                return
            on_snapshot(documents)

        try:
            watch = self.collection.on_snapshot(_on_snapshot)
        except exceptions.GoogleAPICallError as e:
            raise StoreError(f"Failed to watch verifications: {e}") from e
        return watch.unsubscribe
