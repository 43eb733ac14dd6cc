"""Time-bounded in-memory cache for the computed artist ranking."""
from __future__ import annotations

import logging
import time
from threading import Lock
from typing import Callable, Optional, Sequence

from . import config, models
from .aggregate import aggregate
from .errors import AggregationFailure
from .fanout import CatalogClientProtocol, fan_out_search

logger = logging.getLogger(__name__)


class RankingCache:
    """Serve the top-artist ranking, recomputing it once it is older than ``lifetime``.

    Recomputation runs in the calling thread. Callers that arrive while a
    recomputation is running wait for it and then reuse its result. When a
    recomputation fails the previous ranking is kept and the error is raised
    to the caller that triggered it.
    """

    def __init__(
        self,
        client: CatalogClientProtocol,
        *,
        lifetime: float = config.CACHE_LIFETIME_SECONDS,
        query_terms: Sequence[str] = config.SEARCH_QUERIES,
        offsets: Sequence[int] = config.SEARCH_OFFSETS,
        page_size: int = config.SEARCH_PAGE_SIZE,
        ranking_size: int = config.RANKING_SIZE,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.client = client
        self.lifetime = lifetime
        self.query_terms = list(query_terms)
        self.offsets = list(offsets)
        self.page_size = page_size
        self.ranking_size = ranking_size
        self._clock = clock
        self._lock = Lock()
        self._ranking: Optional[models.Ranking] = None
        self._expired = False
        self.recompute_count = 0

    def is_fresh(self, ranking: Optional[models.Ranking] = None) -> bool:
        ranking = ranking if ranking is not None else self._ranking
        if ranking is None or self._expired:
            return False
        return self._clock() < ranking.computed_at + self.lifetime

    def get_ranking(self) -> models.Ranking:
        ranking = self._ranking
        if self.is_fresh(ranking):
            logger.debug("Serving artists ranking from cache.")
            return ranking

        with self._lock:
            ranking = self._ranking
            if self.is_fresh(ranking):
                return ranking
            ranking = self._recompute()
            self._ranking = ranking
            self._expired = False
            return ranking

    def peek(self) -> Optional[models.Ranking]:
        """Return the last computed ranking, fresh or stale, without refreshing."""

        return self._ranking

    def invalidate(self) -> None:
        """Mark the current ranking stale while keeping it available to ``peek``."""

        with self._lock:
            self._expired = True

    def _recompute(self) -> models.Ranking:
        logger.info("Fetching fresh artists ranking...")
        self.recompute_count += 1
        started = self._clock()
        result = fan_out_search(
            self.client, self.query_terms, self.offsets, self.page_size
        )
        if result.all_failed:
            raise AggregationFailure(
                f"All {result.total} catalog searches failed; keeping previous ranking."
            )
        artists = aggregate(result.groups, limit=self.ranking_size)
        logger.info(
            "Ranking recomputed: %d artists from %d/%d searches",
            len(artists),
            result.total - result.failed,
            result.total,
        )
        return models.build_ranking(artists, computed_at=started)
