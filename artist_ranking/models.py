"""Domain models for the artist ranking backend."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence, Tuple


@dataclass(frozen=True)
class ArtistRecord:
    """A normalized artist as served by the ranking and lookup endpoints."""

    id: str
    name: str
    popularity: int
    followers: int
    image_url: str

    def to_payload(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "popularity": self.popularity,
            "followers": self.followers,
            "imageUrl": self.image_url,
        }


@dataclass(frozen=True)
class Ranking:
    """Ordered top artists plus the time the ordering was computed.

    A ranking is never patched in place; the cache swaps in a new instance
    after each successful recomputation.
    """

    artists: Tuple[ArtistRecord, ...] = ()
    computed_at: float = 0.0

    def __len__(self) -> int:
        return len(self.artists)

    def __iter__(self):
        return iter(self.artists)

    def rank_of(self, artist_id: str) -> int:
        """Return the 1-based position of ``artist_id`` or -1 when absent."""

        for index, artist in enumerate(self.artists, start=1):
            if artist.id == artist_id:
                return index
        return -1

    def to_payload(self) -> List[Dict[str, Any]]:
        return [artist.to_payload() for artist in self.artists]


@dataclass(frozen=True)
class LookupResult:
    record: ArtistRecord
    rank_in_top100: int = -1

    def to_payload(self) -> Dict[str, Any]:
        payload = self.record.to_payload()
        payload["rankInTop100"] = self.rank_in_top100
        return payload


@dataclass
class FanOutResult:
    """Raw artist lists in (term, offset) order and the number of failed slots."""

    groups: List[List[Dict[str, Any]]] = field(default_factory=list)
    failed: int = 0

    @property
    def total(self) -> int:
        return len(self.groups)

    @property
    def all_failed(self) -> bool:
        return self.total > 0 and self.failed == self.total


def build_ranking(artists: Sequence[ArtistRecord], computed_at: float) -> Ranking:
    return Ranking(artists=tuple(artists), computed_at=computed_at)

