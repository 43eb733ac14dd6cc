"""Test configuration ensuring repository modules are discoverable."""
from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


def pytest_configure(config):
    config.addinivalue_line("markers", "slow: marks tests as slow and optional")


class FakeClock:
    """Manually advanced clock usable wherever a ``time.time`` callable is expected."""

    def __init__(self, start: float = 1_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_artist():
    def _make(artist_id, popularity, *, name=None, followers=1000, images=None):
        if images is None:
            images = [
                {"width": 640, "url": f"https://img.test/{artist_id}/640"},
                {"width": 64, "url": f"https://img.test/{artist_id}/64"},
            ]
        return {
            "id": artist_id,
            "name": name or f"Artist {artist_id}",
            "popularity": popularity,
            "followers": {"total": followers},
            "images": images,
        }

    return _make
