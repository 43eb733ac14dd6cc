"""Client-credentials token management for the Spotify Web API."""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from threading import Lock
from typing import Callable, Optional

import requests

from . import config, env
from .errors import CredentialConfigurationError, UpstreamAuthError

logger = logging.getLogger(__name__)


@dataclass
class _Credential:
    token: str
    expires_at: float


class TokenProvider:
    """Obtain and cache a bearer token, refreshing it before it expires.

    The cached token is returned without any network call while the current
    time is more than ``refresh_threshold`` seconds before expiry. Concurrent
    callers that find the token stale wait on a single exchange rather than
    each issuing their own.
    """

    def __init__(
        self,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        *,
        session: Optional[requests.Session] = None,
        token_url: str = config.TOKEN_URL,
        refresh_threshold: float = config.TOKEN_REFRESH_THRESHOLD_SECONDS,
        timeout: float = config.REQUEST_TIMEOUT_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.client_id = client_id
        self.client_secret = client_secret
        self.session = session or requests.Session()
        self.token_url = token_url
        self.refresh_threshold = refresh_threshold
        self.timeout = timeout
        self._clock = clock
        self._lock = Lock()
        self._credential: Optional[_Credential] = None

    def get_token(self) -> str:
        credential = self._credential
        if self._is_usable(credential):
            return credential.token

        with self._lock:
            credential = self._credential
            if self._is_usable(credential):
                return credential.token
            credential = self._exchange()
            self._credential = credential
            return credential.token

    def invalidate(self, rejected_token: Optional[str] = None) -> None:
        """Forget the cached token so the next call performs an exchange.

        With ``rejected_token`` the credential is only dropped while it still
        holds that token; a token another caller already refreshed is kept.
        """

        with self._lock:
            credential = self._credential
            if credential is None:
                return
            if rejected_token is None or credential.token == rejected_token:
                self._credential = None

    def _is_usable(self, credential: Optional[_Credential]) -> bool:
        if credential is None:
            return False
        return self._clock() < credential.expires_at - self.refresh_threshold

    def _resolve_secrets(self):
        if self.client_id and self.client_secret:
            return self.client_id, self.client_secret
        try:
            secrets = env.require([config.CLIENT_ID_KEY, config.CLIENT_SECRET_KEY])
        except CredentialConfigurationError:
            logger.error(
                "%s or %s not configured", config.CLIENT_ID_KEY, config.CLIENT_SECRET_KEY
            )
            raise
        return secrets[config.CLIENT_ID_KEY], secrets[config.CLIENT_SECRET_KEY]

    def _exchange(self) -> _Credential:
        client_id, client_secret = self._resolve_secrets()
        now = self._clock()
        try:
            response = self.session.post(
                self.token_url,
                data={"grant_type": "client_credentials"},
                auth=(client_id, client_secret),
                timeout=self.timeout,
            )
            response.raise_for_status()
            payload = response.json()
        except (requests.RequestException, ValueError) as error:
            logger.error("Error obtaining Spotify access token: %s", error)
            raise UpstreamAuthError("Failed to obtain Spotify access token.") from error

        token = payload.get("access_token") if isinstance(payload, dict) else None
        if not token:
            raise UpstreamAuthError("Token response did not contain an access_token.")
        try:
            expires_in = int(payload.get("expires_in", config.DEFAULT_TOKEN_LIFETIME_SECONDS))
        except (TypeError, ValueError):
            expires_in = config.DEFAULT_TOKEN_LIFETIME_SECONDS
        logger.info("Spotify access token obtained (expires in %ss)", expires_in)
        return _Credential(token=token, expires_at=now + expires_in)
