"""
Identity provider abstraction for Firebase Auth and an in-memory test implementation.
"""

from __future__ import annotations

import hashlib
import logging
import uuid
from dataclasses import dataclass
from typing import Optional, Protocol

import requests

from backend.errors import AuthError

logger = logging.getLogger(__name__)

IDENTITY_TOOLKIT_URL = "https://identitytoolkit.googleapis.com/v1"


@dataclass(frozen=True)
class Identity:
    uid: str
    is_anonymous: bool
    id_token: Optional[str] = None


class IdentityProvider(Protocol):
    """Interface for signing in to the backend."""

    def sign_in_anonymously(self) -> Identity:
        ...

    def sign_in_with_custom_token(self, token: str) -> Identity:
        ...


class InMemoryIdentityProvider:
    """Issues local identities without any network access."""

    def __init__(self):
        self.issued: list[Identity] = []

    def sign_in_anonymously(self) -> Identity:
        identity = Identity(uid=uuid.uuid4().hex, is_anonymous=True)
        self.issued.append(identity)
        return identity

    def sign_in_with_custom_token(self, token: str) -> Identity:
        if not token:
            raise AuthError("Custom token must not be empty")
        uid = hashlib.sha256(token.encode("utf-8")).hexdigest()[:28]
        identity = Identity(uid=uid, is_anonymous=False, id_token=token)
        self.issued.append(identity)
        return identity


class FirebaseIdentityProvider:
    """
    Signs in through the Identity Toolkit REST API.

    This is the same endpoint pair the web SDK uses for `signInAnonymously`
    and `signInWithCustomToken`, keyed by the web API key from the Firebase
    config.
    """

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = IDENTITY_TOOLKIT_URL,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        if not api_key:
            raise ValueError("apiKey is required for FirebaseIdentityProvider")
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _post(self, method: str, payload: dict) -> dict:
        url = f"{self.base_url}/accounts:{method}"
        try:
            response = self.session.post(
                url,
                params={"key": self.api_key},
                json=payload,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise AuthError(f"Identity provider unreachable: {e}") from e

        if not response.ok:
            try:
                message = response.json()["error"]["message"]
            except (ValueError, KeyError, TypeError):
                message = response.text
            raise AuthError(f"{method} failed ({response.status_code}): {message}")
        return response.json()

    def sign_in_anonymously(self) -> Identity:
        data = self._post("signUp", {"returnSecureToken": True})
        logger.info("Signed in anonymously as %s", data["localId"])
        return Identity(
            uid=data["localId"], is_anonymous=True, id_token=data.get("idToken")
        )

    def sign_in_with_custom_token(self, token: str) -> Identity:
        if not token:
            raise AuthError("Custom token must not be empty")
        data = self._post(
            "signInWithCustomToken", {"token": token, "returnSecureToken": True}
        )
        id_token = data["idToken"]
        # The custom token response has no localId, look it up from the ID token.
        users = self._post("lookup", {"idToken": id_token}).get("users") or []
        if not users:
            raise AuthError("lookup returned no user for the custom token")
        uid = users[0]["localId"]
        logger.info("Signed in with custom token as %s", uid)
        return Identity(uid=uid, is_anonymous=False, id_token=id_token)
