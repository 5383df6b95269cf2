"""Access-token resolution and the per-token provider client cache."""

from __future__ import annotations

import hashlib
import os
import threading
from typing import Optional

from loguru import logger

from errors import MissingCredentialError
from interfaces import SettingsStore, TranscriptionClient
from providers import ClientFactory


def token_fingerprint(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


class CredentialCache:
    """Builds one provider client per distinct token and reuses it.

    The environment variable wins over the token stored in settings. The
    token is re-read on every ``get_client`` call, so a rotated token in
    either place is picked up without an explicit reset; ``set_token`` and
    ``clear_token`` also drop the cached client right away.
    """

    def __init__(
        self,
        settings_store: SettingsStore,
        client_factory: ClientFactory,
        env_var: str = "REPLICATE_API_TOKEN",
    ) -> None:
        self._settings_store = settings_store
        self._client_factory = client_factory
        self._env_var = env_var
        self._lock = threading.Lock()
        self._client: Optional[TranscriptionClient] = None
        self._fingerprint: Optional[str] = None

    def resolve_token(self) -> Optional[str]:
        token = os.getenv(self._env_var, "").strip()
        if token:
            return token
        return self._settings_store.get_token().strip() or None

    def has_token(self) -> bool:
        return self.resolve_token() is not None

    def get_client(self) -> TranscriptionClient:
        token = self.resolve_token()
        if token is None:
            raise MissingCredentialError(
                f"No API token configured. Set {self._env_var} or save a token in the settings."
            )
        fingerprint = token_fingerprint(token)
        with self._lock:
            if self._client is None or self._fingerprint != fingerprint:
                logger.info(f"Creating transcription client (token {fingerprint[:8]})")
                self._client = self._client_factory(token)
                self._fingerprint = fingerprint
            return self._client

    def set_token(self, value: str) -> bool:
        value = value.strip()
        if not value:
            raise ValueError("API token must not be empty")
        with self._lock:
            self._invalidate()
            return self._settings_store.set_token(value)

    def clear_token(self) -> bool:
        with self._lock:
            self._invalidate()
            return self._settings_store.clear_token()

    def _invalidate(self) -> None:
        self._client = None
        self._fingerprint = None
