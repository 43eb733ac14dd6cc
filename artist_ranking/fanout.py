"""Concurrent search fan-out over a fixed query/offset space."""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from itertools import product
from typing import Any, Dict, List, Optional, Protocol, Sequence, Tuple

from . import config, models
from .errors import UpstreamRequestError

logger = logging.getLogger(__name__)


class CatalogClientProtocol(Protocol):
    """Protocol for the catalog access used by the fan-out and lookup paths."""

    def get_token(self) -> str:
        ...

    def search_artists(
        self,
        query: str,
        limit: int = config.SEARCH_PAGE_SIZE,
        offset: int = 0,
        *,
        token: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        ...


def build_slots(query_terms: Sequence[str], offsets: Sequence[int]) -> List[Tuple[str, int]]:
    """Return the (term, offset) cross-product in term-major order."""

    return list(product(query_terms, offsets))


def fan_out_search(
    client: CatalogClientProtocol,
    query_terms: Sequence[str] = config.SEARCH_QUERIES,
    offsets: Sequence[int] = config.SEARCH_OFFSETS,
    page_size: int = config.SEARCH_PAGE_SIZE,
    *,
    token: Optional[str] = None,
    max_workers: int = config.MAX_FANOUT_WORKERS,
) -> models.FanOutResult:
    """Issue every (term, offset) search concurrently and wait for all of them.

    A failing slot is logged and contributes an empty list, so the result
    always has one group per slot in cross-product order. Errors while
    obtaining the token are not caught here: a bad credential would make
    every slot fail and must reach the caller as such.
    """

    slots = build_slots(query_terms, offsets)
    if not slots:
        return models.FanOutResult()

    bearer = token or client.get_token()
    groups: List[List[Dict[str, Any]]] = [[] for _ in slots]
    failed = 0

    workers = max(1, min(max_workers, len(slots)))
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="fanout") as executor:
        future_map = {
            executor.submit(client.search_artists, term, page_size, offset, token=bearer): index
            for index, (term, offset) in enumerate(slots)
        }
        for future in as_completed(future_map):
            index = future_map[future]
            term, offset = slots[index]
            try:
                items = future.result()
            except UpstreamRequestError as error:
                logger.warning(
                    "Error fetching artists for query %r (offset %s): %s", term, offset, error
                )
                failed += 1
                continue
            if not isinstance(items, list):
                logger.warning("Discarding non-list result for query %r (offset %s)", term, offset)
                failed += 1
                continue
            groups[index] = items

    logger.info("Fan-out finished: %d/%d requests succeeded", len(slots) - failed, len(slots))
    return models.FanOutResult(groups=groups, failed=failed)
