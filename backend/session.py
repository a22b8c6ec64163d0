"""
Session bootstrap: establishes the identity every data operation requires.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

from backend.auth import Identity, IdentityProvider

logger = logging.getLogger(__name__)

IdentityListener = Callable[[Optional[Identity]], None]


class SessionBootstrapper:
    """
    Signs in once per process and publishes the resulting identity.

    A configured initial token takes precedence over anonymous sign-in.
    Failures are logged and leave the identity unset; there is no retry.
    """

    def __init__(self, provider: IdentityProvider, initial_token: str | None = None):
        self.provider = provider
        self.initial_token = initial_token
        self._identity: Optional[Identity] = None
        self._listeners: list[IdentityListener] = []
        self._lock = threading.Lock()

    @property
    def identity(self) -> Optional[Identity]:
        return self._identity

    def bootstrap(self) -> Optional[Identity]:
        try:
            if self.initial_token:
                identity = self.provider.sign_in_with_custom_token(self.initial_token)
            else:
                identity = self.provider.sign_in_anonymously()
        except Exception:
            logger.exception("Session bootstrap failed")
            return None
        self._set_identity(identity)
        return identity

    def sign_out(self) -> None:
        self._set_identity(None)

    def on_identity_changed(self, callback: IdentityListener) -> Callable[[], None]:
        """Registers a listener; returns a callable that removes it."""
        with self._lock:
            self._listeners.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._listeners:
                    self._listeners.remove(callback)

        return unsubscribe

    def _set_identity(self, identity: Optional[Identity]) -> None:
        with self._lock:
            if identity == self._identity:
                return
            self._identity = identity
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(identity)
            except Exception:
                logger.exception("Identity listener failed")
