"""Spotify catalog client and service wiring."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests

from . import config, env
from .cache import RankingCache
from .errors import UpstreamRequestError
from .lookup import LookupService
from .tokens import TokenProvider

logger = logging.getLogger(__name__)


class SpotifyCatalogClient:
    """Spotify Web API search client used by the fan-out and lookup paths."""

    api_base = config.API_BASE_URL

    def __init__(
        self,
        token_provider: TokenProvider,
        *,
        session: Optional[requests.Session] = None,
        timeout: float = config.REQUEST_TIMEOUT_SECONDS,
    ) -> None:
        self.token_provider = token_provider
        self.session = session or requests.Session()
        self.timeout = timeout

    def get_token(self) -> str:
        return self.token_provider.get_token()

    def search_artists(
        self,
        query: str,
        limit: int = config.SEARCH_PAGE_SIZE,
        offset: int = 0,
        *,
        token: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        params: Dict[str, Any] = {"q": query, "type": "artist", "limit": limit}
        if offset:
            params["offset"] = offset
        data = self._request("GET", "/search", params=params, token=token)
        artists = data.get("artists") if isinstance(data, dict) else None
        items = artists.get("items") if isinstance(artists, dict) else None
        if not isinstance(items, list):
            raise UpstreamRequestError(f"Malformed search payload for query {query!r}")
        return items

    # Internal helpers -------------------------------------------------------
    def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        token: Optional[str] = None,
        retry: int = 0,
    ) -> Any:
        bearer = token or self.token_provider.get_token()
        url = f"{self.api_base}{path}"
        headers = {"Authorization": f"Bearer {bearer}"}
        try:
            response = self.session.request(
                method, url, headers=headers, params=params, timeout=self.timeout
            )
        except requests.RequestException as error:
            raise UpstreamRequestError(f"{method} {path} failed: {error}") from error

        if response.status_code == 401 and retry < 1:
            # token likely expired; refresh and retry once
            self.token_provider.invalidate(bearer)
            return self._request(method, path, params=params, retry=retry + 1)
        if response.status_code >= 400:
            raise UpstreamRequestError(
                f"{method} {path} returned {response.status_code}",
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as error:
            raise UpstreamRequestError(f"{method} {path} returned invalid JSON") from error


def build_live_services(
    *,
    session: Optional[requests.Session] = None,
    cache_lifetime: float = config.CACHE_LIFETIME_SECONDS,
) -> Dict[str, Any]:
    """Factory helper that wires the token provider, catalog client and cache.

    Credentials are read from the environment on first use, so a missing
    secret surfaces as a request error instead of failing at startup.
    """

    env.load_env()
    shared_session = session or requests.Session()
    token_provider = TokenProvider(session=shared_session)
    catalog_client = SpotifyCatalogClient(token_provider, session=shared_session)
    ranking_cache = RankingCache(catalog_client, lifetime=cache_lifetime)
    lookup_service = LookupService(catalog_client, ranking_cache)
    return {
        "token_provider": token_provider,
        "catalog_client": catalog_client,
        "ranking_cache": ranking_cache,
        "lookup_service": lookup_service,
    }
