"""Merge raw search results into a deduplicated popularity ranking."""
from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from . import config, utils
from .models import ArtistRecord


def select_image(images: Sequence[Mapping[str, Any]]) -> Optional[Mapping[str, Any]]:
    """Pick the canonical image: width 64, else the last listed, else the first."""

    if not images:
        return None
    for image in images:
        if isinstance(image, Mapping) and image.get("width") == config.PREFERRED_IMAGE_WIDTH:
            return image
    last = images[-1]
    return last if last is not None else images[0]


def _image_url(images: Any) -> Optional[str]:
    if not isinstance(images, list):
        return None
    image = select_image(images)
    if not isinstance(image, Mapping):
        return None
    url = image.get("url")
    return url if isinstance(url, str) and url else None


def _followers_total(followers: Any) -> Optional[int]:
    if not isinstance(followers, Mapping):
        return None
    total = followers.get("total")
    if not utils.is_number(total):
        return None
    return int(total)


def to_record(raw: Mapping[str, Any]) -> Optional[ArtistRecord]:
    """Build an ArtistRecord, or return ``None`` when the payload is incomplete.

    An artist is accepted only with an id, a name, a followers total, a
    numeric popularity and at least one image carrying a URL.
    """

    if not isinstance(raw, Mapping):
        return None
    artist_id = raw.get("id")
    name = raw.get("name")
    if not artist_id or not isinstance(artist_id, str) or not name or not isinstance(name, str):
        return None
    popularity = raw.get("popularity")
    if not utils.is_number(popularity):
        return None
    followers = _followers_total(raw.get("followers"))
    if followers is None:
        return None
    image_url = _image_url(raw.get("images"))
    if image_url is None:
        return None
    return ArtistRecord(
        id=artist_id,
        name=name,
        popularity=int(utils.clamp(popularity, 0, 100)),
        followers=max(0, followers),
        image_url=image_url,
    )


def aggregate(
    result_groups: Iterable[Iterable[Mapping[str, Any]]],
    limit: int = config.RANKING_SIZE,
) -> List[ArtistRecord]:
    """Deduplicate by id, sort by popularity descending and keep the top ``limit``.

    Groups are consumed in order and items in order within each group; when
    an id repeats, the later record replaces the earlier one but keeps the
    position of the first insertion, so equal-popularity ties stay stable for
    identical inputs.
    """

    unique: Dict[str, ArtistRecord] = {}
    for group in result_groups:
        for raw in group or ():
            record = to_record(raw)
            if record is not None:
                unique[record.id] = record

    ranked = sorted(unique.values(), key=lambda record: record.popularity, reverse=True)
    return ranked[:limit]
