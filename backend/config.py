"""
Configuration and settings for the address verification service.
"""

from __future__ import annotations

import json
import logging
from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from shared.constants import DEFAULT_APP_ID

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    api_prefix: str = Field(default="/api")
    log_level: str = Field(default="INFO")

    # Serialized backend-connection descriptor (Firebase web config JSON)
    firebase_config: Optional[str] = Field(default=None)
    initial_auth_token: Optional[str] = Field(default=None)
    app_id: str = Field(default=DEFAULT_APP_ID)
    # Service account file for the Firestore store; application default
    # credentials when unset.
    firebase_credentials_path: Optional[str] = Field(default=None)

    # SQL store (Postgres expected, any SQLAlchemy URL works)
    database_url: Optional[str] = Field(default=None)

    # Development toggles
    use_in_memory_backends: bool = Field(
        default=False,
        validation_alias="ADDRESS_FIX_USE_IN_MEMORY_BACKENDS",
    )

    # Used to build customer links; falls back to the request URL.
    public_base_url: Optional[str] = Field(default=None)

    def firebase_options(self) -> dict:
        """Parses the backend-connection descriptor, empty when unset or malformed."""
        if not self.firebase_config:
            return {}
        try:
            options = json.loads(self.firebase_config)
        except ValueError as e:
            logger.error("Ignoring malformed FIREBASE_CONFIG: %s", e)
            return {}
        if not isinstance(options, dict):
            logger.error("Ignoring FIREBASE_CONFIG: expected a JSON object")
            return {}
        return options


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
