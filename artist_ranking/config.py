"""Backend configuration constants for the artist ranking service."""
from __future__ import annotations

# Upstream endpoints
TOKEN_URL: str = "https://accounts.spotify.com/api/token"
API_BASE_URL: str = "https://api.spotify.com/v1"

# Broad search terms used to sample the catalog; the API has no global chart
SEARCH_QUERIES = [
    "a", "e", "i", "o", "u",
    "the", "pop", "rock", "hip hop", "r&b", "dance", "country", "jazz",
    "band", "singer", "group",
    "star", "legend",
    "love", "world",
]
SEARCH_OFFSETS = [0, 50, 100, 150, 200]
SEARCH_PAGE_SIZE: int = 50

# Ranking
RANKING_SIZE: int = 100
PREFERRED_IMAGE_WIDTH: int = 64
PLACEHOLDER_IMAGE_URL: str = "https://via.placeholder.com/150?text=No+Image"

# Lifetimes (seconds)
CACHE_LIFETIME_SECONDS: int = 60 * 60  # one hour
TOKEN_REFRESH_THRESHOLD_SECONDS: int = 60 * 5
DEFAULT_TOKEN_LIFETIME_SECONDS: int = 60 * 60

# Transport
MAX_FANOUT_WORKERS: int = 16
REQUEST_TIMEOUT_SECONDS: float = 10.0

# Environment keys
CLIENT_ID_KEY = "SPOTIFY_CLIENT_ID"
CLIENT_SECRET_KEY = "SPOTIFY_CLIENT_SECRET"
DEFAULT_PORT: int = 3000
