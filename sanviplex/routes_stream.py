from __future__ import annotations

from flask import Blueprint, Response, current_app, jsonify, request

from .embeds import stream_sources
from .http import json_error
from .utils import eprint


stream_bp = Blueprint("stream", __name__)

_METHODS = ["GET", "OPTIONS"]


def _parse_number(value: str | None, name: str) -> tuple[int | None, str | None]:
    if value is None:
        return None, None
    try:
        number = int(value)
    except ValueError:
        return None, f"Invalid {name}: {value}"
    if number < 0:
        return None, f"Invalid {name}: {value}"
    return number, None


@stream_bp.route("/api/stream", methods=_METHODS)
@stream_bp.route("/api/stream/", methods=_METHODS)
def missing_stream_id() -> Response:
    if request.method == "OPTIONS":
        return Response(status=200)
    return json_error("Missing TMDB ID", 400)


@stream_bp.route("/api/stream/<tmdb_id>", methods=_METHODS)
@stream_bp.route("/api/stream/<tmdb_id>/<season>", methods=_METHODS)
@stream_bp.route("/api/stream/<tmdb_id>/<season>/<episode>", methods=_METHODS)
def stream(tmdb_id: str, season: str | None = None, episode: str | None = None) -> Response:
    if request.method == "OPTIONS":
        return Response(status=200)

    season_num, err = _parse_number(season, "season")
    if err:
        return json_error(err, 400)
    episode_num, err = _parse_number(episode, "episode")
    if err:
        return json_error(err, 400)

    if current_app.config.get("VERBOSE"):
        eprint(f"Streaming API called: tmdb_id={tmdb_id} season={season_num} episode={episode_num}")

    sources = stream_sources(tmdb_id, season=season_num, episode=episode_num)
    return jsonify([source.to_dict() for source in sources])
