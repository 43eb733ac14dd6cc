#!/usr/bin/env python3
"""Compute the artist popularity ranking once against the live Spotify API."""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Iterable

from artist_ranking import env, services
from artist_ranking.errors import (
    CredentialConfigurationError,
    InvalidArtistName,
    NotFoundError,
    RankingError,
)


def parse_args(argv: Iterable[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Build the top-artist ranking from sampled Spotify searches.",
    )
    parser.add_argument(
        "--top",
        type=int,
        default=20,
        help="Number of ranked artists to print (default: 20).",
    )
    parser.add_argument(
        "--lookup",
        metavar="NAME",
        help="Also look up one artist and report its rank in the top 100.",
    )
    parser.add_argument(
        "--json",
        type=Path,
        help="Optional path to write the full ranking payload as JSON.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log per-request details.",
    )
    return parser.parse_args(list(argv))


def main(argv: Iterable[str]) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    print("[1/3] Loading environment configuration...", flush=True)
    env.load_env()
    wired = services.build_live_services()
    ranking_cache = wired["ranking_cache"]

    print("[2/3] Fetching ranking (this issues many searches)...", flush=True)
    try:
        ranking = ranking_cache.get_ranking()
    except CredentialConfigurationError as exc:
        print(f"Environment not configured correctly: {exc}", file=sys.stderr)
        return 1
    except RankingError as exc:
        print(f"Ranking failed: {exc}", file=sys.stderr)
        return 1

    print(f"[2/3] Ranked {len(ranking)} artists.\n")
    for position, artist in enumerate(ranking.artists[: args.top], start=1):
        print(
            f" #{position:<3d} {artist.name:30s} popularity={artist.popularity:3d} "
            f"followers={artist.followers:,}"
        )

    if args.lookup:
        print(f"\n[3/3] Looking up {args.lookup!r}...", flush=True)
        try:
            result = wired["lookup_service"].lookup_artist(args.lookup)
        except (InvalidArtistName, NotFoundError) as exc:
            print(str(exc), file=sys.stderr)
            return 1
        except RankingError as exc:
            print(f"Lookup failed: {exc}", file=sys.stderr)
            return 1
        rank = result.rank_in_top100
        print(
            f" {result.record.name}: popularity={result.record.popularity} "
            + (f"rank=#{rank}" if rank > 0 else "not in top 100")
        )

    if args.json:
        args.json.write_text(
            json.dumps(
                {"computedAt": ranking.computed_at, "artists": ranking.to_payload()},
                indent=2,
            )
        )
        print(f"\nWrote ranking to {args.json}")

    print("\n[✔] Completed run.")
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
