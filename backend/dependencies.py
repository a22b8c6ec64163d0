"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

from fastapi import Request

from backend.auth import FirebaseIdentityProvider, IdentityProvider, InMemoryIdentityProvider
from backend.config import get_settings
from backend.db import InMemoryVerificationStore, SqlVerificationStore, VerificationStore
from backend.feed import SnapshotFeed
from backend.firestore_db import FirestoreVerificationStore, initialize_firebase_app
from backend.session import SessionBootstrapper
from backend.verifications import VerificationStoreClient

_identity_provider: IdentityProvider | None = None
_verification_store: VerificationStore | None = None
_session: SessionBootstrapper | None = None
_store_client: VerificationStoreClient | None = None


def get_identity_provider() -> IdentityProvider:
    global _identity_provider
    if _identity_provider:
        return _identity_provider

    settings = get_settings()
    api_key = settings.firebase_options().get("apiKey")
    if settings.use_in_memory_backends or not api_key:
        _identity_provider = InMemoryIdentityProvider()
    else:
        _identity_provider = FirebaseIdentityProvider(api_key)
    return _identity_provider


def get_verification_store() -> VerificationStore:
    """
    Return a singleton store so records and watchers persist across requests.
    """
    global _verification_store
    if _verification_store:
        return _verification_store

    settings = get_settings()
    if settings.use_in_memory_backends:
        _verification_store = InMemoryVerificationStore()
    elif settings.database_url:
        _verification_store = SqlVerificationStore(
            settings.database_url, app_id=settings.app_id
        )
    elif settings.firebase_options():
        app = initialize_firebase_app(
            settings.firebase_options(), settings.firebase_credentials_path
        )
        _verification_store = FirestoreVerificationStore.from_app(app, settings.app_id)
    else:
        _verification_store = InMemoryVerificationStore()
    return _verification_store


def get_session() -> SessionBootstrapper:
    global _session
    if _session:
        return _session

    settings = get_settings()
    _session = SessionBootstrapper(
        get_identity_provider(), initial_token=settings.initial_auth_token
    )
    return _session


def get_store_client() -> VerificationStoreClient:
    global _store_client
    if _store_client:
        return _store_client
    _store_client = VerificationStoreClient(get_verification_store(), get_session())
    return _store_client


def get_admin_feed(request: Request) -> SnapshotFeed:
    """The dashboard feed opened for the lifetime of the app."""
    return request.app.state.admin_feed
