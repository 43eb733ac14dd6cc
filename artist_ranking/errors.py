"""Error taxonomy shared by the ranking backend."""
from __future__ import annotations

from typing import Optional


class RankingError(Exception):
    """Base class for errors raised by the ranking backend."""


class CredentialConfigurationError(RankingError):
    """Spotify client id or secret is not configured."""


class UpstreamAuthError(RankingError):
    """The client-credentials exchange was rejected or failed."""


class UpstreamRequestError(RankingError):
    """A single catalog request failed (transport, status or payload)."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class NotFoundError(RankingError):
    """No artist matched a lookup."""


class AggregationFailure(RankingError):
    """A ranking recomputation produced no usable upstream data."""


class InvalidArtistName(RankingError, ValueError):
    """Lookup was called with an empty or whitespace-only name."""
