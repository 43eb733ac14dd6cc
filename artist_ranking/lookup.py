"""Single-artist lookup cross-referenced against the cached ranking."""
from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from . import config, utils
from .aggregate import select_image
from .cache import RankingCache
from .errors import AggregationFailure, InvalidArtistName, NotFoundError
from .fanout import CatalogClientProtocol
from .models import ArtistRecord, LookupResult

logger = logging.getLogger(__name__)


def record_from_search_hit(raw: Mapping[str, Any]) -> Optional[ArtistRecord]:
    """Build a record for a lookup hit, filling display defaults.

    Unlike ranking aggregation, a lookup hit without images or counts is
    still shown: missing images fall back to a placeholder and missing
    counts to zero. Hits without an id or name are unusable.
    """

    if not isinstance(raw, Mapping):
        return None
    artist_id = raw.get("id")
    name = raw.get("name")
    if not artist_id or not name:
        return None

    popularity = raw.get("popularity")
    followers = raw.get("followers")
    total = followers.get("total") if isinstance(followers, Mapping) else None
    images = raw.get("images")
    image = select_image(images) if isinstance(images, list) else None
    image_url = image.get("url") if isinstance(image, Mapping) else None

    return ArtistRecord(
        id=str(artist_id),
        name=str(name),
        popularity=int(utils.clamp(popularity, 0, 100)) if utils.is_number(popularity) else 0,
        followers=max(0, int(total)) if utils.is_number(total) else 0,
        image_url=image_url or config.PLACEHOLDER_IMAGE_URL,
    )


class LookupService:
    """Look up one artist by name and report its position in the top ranking."""

    def __init__(self, client: CatalogClientProtocol, ranking_cache: RankingCache) -> None:
        self.client = client
        self.ranking_cache = ranking_cache

    def lookup_artist(self, name: Optional[str]) -> LookupResult:
        query = utils.clean_query(name)
        if not query:
            raise InvalidArtistName('Artist name query parameter "name" is required.')

        items = self.client.search_artists(query, limit=1)
        record = record_from_search_hit(items[0]) if items else None
        if record is None:
            logger.info("Artist %r not found", query)
            raise NotFoundError(f'Artist "{query}" not found.')

        return LookupResult(record=record, rank_in_top100=self._rank_of(record.id))

    def _rank_of(self, artist_id: str) -> int:
        try:
            ranking = self.ranking_cache.get_ranking()
        except AggregationFailure as error:
            logger.warning("Ranking refresh failed during lookup, using last known ranking: %s", error)
            ranking = self.ranking_cache.peek()
        if ranking is None:
            return -1
        return ranking.rank_of(artist_id)
