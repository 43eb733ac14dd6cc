"""Flask API exposing the artist ranking and lookup endpoints to the frontend."""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional

from flask import Flask, jsonify, request
from flask_cors import CORS

from . import config
from .errors import InvalidArtistName, NotFoundError, RankingError
from .services import build_live_services

logger = logging.getLogger(__name__)


def create_app(services: Optional[Dict[str, Any]] = None) -> Flask:
    """Build the Flask app around an injected (or freshly wired) service set."""

    app = Flask(__name__)
    CORS(app)  # Frontend may be served from another origin during development

    services = services or build_live_services()
    ranking_cache = services["ranking_cache"]
    lookup_service = services["lookup_service"]
    app.extensions["artist_ranking"] = services

    @app.route("/api/artists-ranking", methods=["GET"])
    def get_artists_ranking():
        try:
            ranking = ranking_cache.get_ranking()
        except RankingError as exc:
            logger.error("Error in /api/artists-ranking: %s", exc)
            return jsonify({"error": "Failed to retrieve artist ranking."}), 500
        except Exception:
            logger.exception("Unexpected error in /api/artists-ranking")
            return jsonify({"error": "Failed to retrieve artist ranking."}), 500
        return jsonify(ranking.to_payload())

    @app.route("/api/search-artist", methods=["GET"])
    def search_artist():
        name = request.args.get("name")
        try:
            result = lookup_service.lookup_artist(name)
        except InvalidArtistName as exc:
            return jsonify({"error": str(exc)}), 400
        except NotFoundError as exc:
            return jsonify({"message": str(exc)}), 404
        except RankingError as exc:
            logger.error("Error searching for artist %r: %s", name, exc)
            return jsonify({"error": "Failed to search for artist."}), 500
        except Exception:
            logger.exception("Unexpected error searching for artist %r", name)
            return jsonify({"error": "Failed to search for artist."}), 500
        return jsonify(result.to_payload())

    @app.route("/api/health", methods=["GET"])
    def health_check():
        ranking = ranking_cache.peek()
        return jsonify({
            "status": "healthy",
            "cached": ranking is not None and ranking_cache.is_fresh(),
            "computedAt": ranking.computed_at if ranking is not None else None,
            "artists": len(ranking) if ranking is not None else 0,
        })

    return app


def main() -> None:  # pragma: no cover - manual execution helper
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    app = create_app()
    port = int(os.environ.get("PORT", config.DEFAULT_PORT))
    logger.info("Server running on http://localhost:%s", port)
    app.run(host="0.0.0.0", port=port)


if __name__ == "__main__":  # pragma: no cover
    main()
