import threading
import time

import pytest

from artist_ranking import config
from artist_ranking.cache import RankingCache
from artist_ranking.errors import AggregationFailure, CredentialConfigurationError, UpstreamRequestError

TERMS = ["a", "b"]
OFFSETS = [0, 50]


class FakeCatalogClient:
    def __init__(self, pages=None):
        self.pages = pages or {}
        self.failing = set()
        self.token_error = None
        self.search_calls = 0
        self._lock = threading.Lock()

    def get_token(self):
        if self.token_error:
            raise self.token_error
        return "tok"

    def search_artists(self, query, limit=config.SEARCH_PAGE_SIZE, offset=0, *, token=None):
        with self._lock:
            self.search_calls += 1
        if (query, offset) in self.failing:
            raise UpstreamRequestError("down")
        return list(self.pages.get((query, offset), []))


@pytest.fixture
def pages(make_artist):
    return {
        ("a", 0): [make_artist("A", 90)],
        ("b", 0): [make_artist("B", 95)],
    }


def _cache(client, clock, lifetime=config.CACHE_LIFETIME_SECONDS):
    return RankingCache(client, lifetime=lifetime, query_terms=TERMS, offsets=OFFSETS, clock=clock)


def test_first_read_computes_ranking(pages, clock):
    cache = _cache(FakeCatalogClient(pages), clock)

    ranking = cache.get_ranking()

    assert [artist.id for artist in ranking] == ["B", "A"]
    assert ranking.computed_at == clock.now
    assert cache.recompute_count == 1


def test_fresh_reads_do_not_recompute(pages, clock):
    client = FakeCatalogClient(pages)
    cache = _cache(client, clock)

    first = cache.get_ranking()
    clock.advance(config.CACHE_LIFETIME_SECONDS - 1)
    second = cache.get_ranking()

    assert second.computed_at == first.computed_at
    assert cache.recompute_count == 1
    assert client.search_calls == len(TERMS) * len(OFFSETS)


def test_expired_cache_recomputes_exactly_once(pages, clock):
    cache = _cache(FakeCatalogClient(pages), clock)

    first = cache.get_ranking()
    clock.advance(config.CACHE_LIFETIME_SECONDS)
    second = cache.get_ranking()
    third = cache.get_ranking()

    assert cache.recompute_count == 2
    assert second.computed_at == third.computed_at > first.computed_at


def test_failed_refresh_keeps_previous_ranking(pages, clock):
    client = FakeCatalogClient(pages)
    cache = _cache(client, clock)
    previous = cache.get_ranking()

    clock.advance(config.CACHE_LIFETIME_SECONDS + 1)
    client.failing = {(term, offset) for term in TERMS for offset in OFFSETS}
    with pytest.raises(AggregationFailure):
        cache.get_ranking()

    assert cache.peek() is previous
    assert not cache.is_fresh()

    client.failing = set()
    assert cache.get_ranking() is not previous


def test_token_error_propagates_and_keeps_previous(pages, clock):
    client = FakeCatalogClient(pages)
    cache = _cache(client, clock)
    previous = cache.get_ranking()

    clock.advance(config.CACHE_LIFETIME_SECONDS + 1)
    client.token_error = CredentialConfigurationError("missing")
    with pytest.raises(CredentialConfigurationError):
        cache.get_ranking()

    assert cache.peek() is previous


def test_partial_failure_still_produces_ranking(pages, clock):
    client = FakeCatalogClient(pages)
    client.failing = {("a", 0)}
    cache = _cache(client, clock)

    assert [artist.id for artist in cache.get_ranking()] == ["B"]


def test_no_accepted_records_yields_empty_ranking(clock):
    cache = _cache(FakeCatalogClient({}), clock)

    ranking = cache.get_ranking()

    assert len(ranking) == 0
    assert ranking.to_payload() == []


def test_invalidate_forces_recompute(pages, clock):
    cache = _cache(FakeCatalogClient(pages), clock)
    first = cache.get_ranking()

    cache.invalidate()

    assert cache.peek() is first
    cache.get_ranking()
    assert cache.recompute_count == 2


def test_concurrent_stale_readers_share_one_recompute(make_artist):
    class SlowClient(FakeCatalogClient):
        def search_artists(self, *args, **kwargs):
            time.sleep(0.05)
            return super().search_artists(*args, **kwargs)

    cache = RankingCache(
        SlowClient({("a", 0): [make_artist("A", 90)]}),
        query_terms=["a"],
        offsets=[0],
    )
    results = []

    def reader():
        results.append(cache.get_ranking())

    threads = [threading.Thread(target=reader) for _ in range(5)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert cache.recompute_count == 1
    assert len({id(ranking) for ranking in results}) == 1
