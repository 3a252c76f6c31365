"""
Player URLs for the third-party embed providers.

All builders are pure: they only format URLs, they never contact the provider.
Unset optional parameters are left out of the query string.
"""
from __future__ import annotations

import urllib.parse
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple, Union

MediaId = Union[int, str]

VIDSRC_XYZ_BASE = "https://vidsrc.xyz/embed"
VIDLINK_BASE = "https://vidlink.pro"
VIDSRC_ICU_BASE = "https://vidsrc.icu/embed"
AUTOEMBED_BASE = "https://player.autoembed.cc/embed"
VIDSRC_TO_BASE = "https://vidsrc.to/embed"
FMOVIES_PLAY_PAGE = "https://fmoviesunblocked.net/spa/videoPlayPage/"


def _query_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _with_query(base: str, params: List[Tuple[str, Any]]) -> str:
    pairs = [(key, _query_value(value)) for key, value in params if value is not None and value != ""]
    if not pairs:
        return base
    return f"{base}?{urllib.parse.urlencode(pairs)}"


# vidsrc.xyz


def vidsrc_movie_embed_url(
    imdb: Optional[str] = None,
    tmdb: Optional[MediaId] = None,
    sub_url: Optional[str] = None,
    ds_lang: Optional[str] = None,
    autoplay: Optional[int] = None,
) -> str:
    return _with_query(
        f"{VIDSRC_XYZ_BASE}/movie",
        [("imdb", imdb), ("tmdb", tmdb), ("sub_url", sub_url), ("ds_lang", ds_lang), ("autoplay", autoplay)],
    )


def vidsrc_tv_embed_url(
    imdb: Optional[str] = None,
    tmdb: Optional[MediaId] = None,
    season: Optional[int] = None,
    episode: Optional[int] = None,
    sub_url: Optional[str] = None,
    ds_lang: Optional[str] = None,
    autoplay: Optional[int] = None,
    autonext: Optional[int] = None,
) -> str:
    return _with_query(
        f"{VIDSRC_XYZ_BASE}/tv",
        [
            ("imdb", imdb),
            ("tmdb", tmdb),
            ("season", season),
            ("episode", episode),
            ("sub_url", sub_url),
            ("ds_lang", ds_lang),
            ("autoplay", autoplay),
            ("autonext", autonext),
        ],
    )


# vidlink.pro


def _vidlink_player_params(
    primary_color: Optional[str],
    secondary_color: Optional[str],
    icons: Optional[str],
    icon_color: Optional[str],
    title: Optional[bool],
    poster: Optional[bool],
    autoplay: Optional[bool],
    player: Optional[str],
    start_at: Optional[int],
    sub_file: Optional[str],
    sub_label: Optional[str],
    nextbutton: Optional[bool] = None,
) -> List[Tuple[str, Any]]:
    return [
        ("primaryColor", primary_color),
        ("secondaryColor", secondary_color),
        ("icons", icons),
        ("iconColor", icon_color),
        ("title", title),
        ("poster", poster),
        ("autoplay", autoplay),
        ("nextbutton", nextbutton),
        ("player", player),
        ("startAt", start_at),
        ("sub_file", sub_file),
        ("sub_label", sub_label),
    ]


def vidlink_movie_embed_url(
    tmdb_id: MediaId,
    primary_color: Optional[str] = None,
    secondary_color: Optional[str] = None,
    icons: Optional[str] = None,
    icon_color: Optional[str] = None,
    title: Optional[bool] = None,
    poster: Optional[bool] = None,
    autoplay: Optional[bool] = None,
    player: Optional[str] = None,
    start_at: Optional[int] = None,
    sub_file: Optional[str] = None,
    sub_label: Optional[str] = None,
) -> str:
    return _with_query(
        f"{VIDLINK_BASE}/movie/{tmdb_id}",
        _vidlink_player_params(
            primary_color, secondary_color, icons, icon_color, title, poster, autoplay, player, start_at, sub_file, sub_label
        ),
    )


def vidlink_tv_embed_url(
    tmdb_id: MediaId,
    season: int,
    episode: int,
    primary_color: Optional[str] = None,
    secondary_color: Optional[str] = None,
    icons: Optional[str] = None,
    icon_color: Optional[str] = None,
    title: Optional[bool] = None,
    poster: Optional[bool] = None,
    autoplay: Optional[bool] = None,
    nextbutton: Optional[bool] = None,
    player: Optional[str] = None,
    start_at: Optional[int] = None,
    sub_file: Optional[str] = None,
    sub_label: Optional[str] = None,
) -> str:
    return _with_query(
        f"{VIDLINK_BASE}/tv/{tmdb_id}/{season}/{episode}",
        _vidlink_player_params(
            primary_color,
            secondary_color,
            icons,
            icon_color,
            title,
            poster,
            autoplay,
            player,
            start_at,
            sub_file,
            sub_label,
            nextbutton=nextbutton,
        ),
    )


def vidlink_anime_embed_url(
    mal_id: MediaId,
    number: int,
    sub_or_dub: str,
    fallback: Optional[bool] = None,
    primary_color: Optional[str] = None,
    secondary_color: Optional[str] = None,
    icons: Optional[str] = None,
    icon_color: Optional[str] = None,
    title: Optional[bool] = None,
    poster: Optional[bool] = None,
    autoplay: Optional[bool] = None,
    player: Optional[str] = None,
    start_at: Optional[int] = None,
    sub_file: Optional[str] = None,
    sub_label: Optional[str] = None,
) -> str:
    if sub_or_dub not in ("sub", "dub"):
        raise ValueError(f"sub_or_dub must be 'sub' or 'dub', got {sub_or_dub!r}")
    params = [("fallback", fallback)]
    params += _vidlink_player_params(
        primary_color, secondary_color, icons, icon_color, title, poster, autoplay, player, start_at, sub_file, sub_label
    )
    return _with_query(f"{VIDLINK_BASE}/anime/{mal_id}/{number}/{sub_or_dub}", params)


# vidsrc.icu


def vidsrc_icu_movie_embed_url(media_id: MediaId) -> str:
    return f"{VIDSRC_ICU_BASE}/movie/{media_id}"


def vidsrc_icu_tv_embed_url(media_id: MediaId, season: Optional[int] = None, episode: Optional[int] = None) -> str:
    url = f"{VIDSRC_ICU_BASE}/tv/{media_id}"
    if season is not None:
        url += f"/{season}"
    if episode is not None:
        url += f"/{episode}"
    return url


def vidsrc_icu_anime_embed_url(media_id: MediaId, episode: int, dub: Optional[int] = None) -> str:
    url = f"{VIDSRC_ICU_BASE}/anime/{media_id}/{episode}"
    if dub is not None:
        url += f"/{dub}"
    return url


def vidsrc_icu_manga_embed_url(media_id: MediaId, chapter: int) -> str:
    return f"{VIDSRC_ICU_BASE}/manga/{media_id}/{chapter}"


# autoembed.cc


def autoembed_movie_embed_url(media_id: MediaId, server: Optional[int] = None) -> str:
    return _with_query(f"{AUTOEMBED_BASE}/movie/{media_id}", [("server", server)])


def autoembed_tv_embed_url(media_id: MediaId, season: int, episode: int, server: Optional[int] = None) -> str:
    return _with_query(f"{AUTOEMBED_BASE}/tv/{media_id}/{season}/{episode}", [("server", server)])


# vidsrc.to


def _subtitle_params(sub_file: Optional[str], sub_label: Optional[str], sub_json: Optional[str]) -> List[Tuple[str, Any]]:
    return [("sub_file", sub_file), ("sub_label", sub_label), ("sub.info", sub_json)]


def vidsrc_to_movie_embed_url(
    media_id: MediaId,
    sub_file: Optional[str] = None,
    sub_label: Optional[str] = None,
    sub_json: Optional[str] = None,
) -> str:
    return _with_query(f"{VIDSRC_TO_BASE}/movie/{media_id}", _subtitle_params(sub_file, sub_label, sub_json))


def vidsrc_to_tv_show_embed_url(media_id: MediaId) -> str:
    return f"{VIDSRC_TO_BASE}/tv/{media_id}"


def vidsrc_to_tv_season_embed_url(media_id: MediaId, season: int) -> str:
    return f"{VIDSRC_TO_BASE}/tv/{media_id}/{season}"


def vidsrc_to_tv_episode_embed_url(
    media_id: MediaId,
    season: int,
    episode: int,
    sub_file: Optional[str] = None,
    sub_label: Optional[str] = None,
    sub_json: Optional[str] = None,
) -> str:
    return _with_query(
        f"{VIDSRC_TO_BASE}/tv/{media_id}/{season}/{episode}", _subtitle_params(sub_file, sub_label, sub_json)
    )


# fmovies play page


def fmovies_stream_url(
    movie_id: Optional[MediaId] = None,
    is_tv: bool = False,
    season: Optional[int] = None,
    episode: Optional[int] = None,
) -> str:
    media = "" if movie_id is None else str(movie_id)
    if is_tv and season and episode:
        return f"{FMOVIES_PLAY_PAGE}tv?id={media}&season={season}&episode={episode}"
    return f"{FMOVIES_PLAY_PAGE}movies?id={media}"


@dataclass
class StreamSource:
    name: str
    stream: str
    media_id: str
    image: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {"name": self.name, "image": self.image, "mediaId": self.media_id, "stream": self.stream}


def movie_embed_url(provider: str, tmdb_id: MediaId) -> str:
    builders = {
        "vidsrc": lambda: vidsrc_movie_embed_url(tmdb=tmdb_id),
        "vidlink": lambda: vidlink_movie_embed_url(tmdb_id),
        "autoembed": lambda: autoembed_movie_embed_url(tmdb_id),
        "vidsrc-to": lambda: vidsrc_to_movie_embed_url(tmdb_id),
        "vidsrc-icu": lambda: vidsrc_icu_movie_embed_url(tmdb_id),
        "fmovies": lambda: fmovies_stream_url(tmdb_id),
    }
    if provider not in builders:
        raise ValueError(f"Unknown embed provider: {provider}")
    return builders[provider]()


def tv_embed_url(provider: str, tmdb_id: MediaId, season: int, episode: int) -> str:
    builders = {
        "vidsrc": lambda: vidsrc_tv_embed_url(tmdb=tmdb_id, season=season, episode=episode),
        "vidlink": lambda: vidlink_tv_embed_url(tmdb_id, season, episode),
        "autoembed": lambda: autoembed_tv_embed_url(tmdb_id, season, episode),
        "vidsrc-to": lambda: vidsrc_to_tv_episode_embed_url(tmdb_id, season, episode),
        "vidsrc-icu": lambda: vidsrc_icu_tv_embed_url(tmdb_id, season, episode),
        "fmovies": lambda: fmovies_stream_url(tmdb_id, is_tv=True, season=season, episode=episode),
    }
    if provider not in builders:
        raise ValueError(f"Unknown embed provider: {provider}")
    return builders[provider]()


PROVIDERS: Dict[str, str] = {
    "vidsrc": "VidSrc",
    "vidlink": "VidLink",
    "autoembed": "AutoEmbed",
    "vidsrc-to": "VidSrc.to",
    "vidsrc-icu": "VidSrc.icu",
    "fmovies": "FMovies",
}


def stream_sources(tmdb_id: MediaId, season: Optional[int] = None, episode: Optional[int] = None) -> List[StreamSource]:
    media_id = str(tmdb_id)
    if season is not None and episode is None:
        return [
            StreamSource(name="VidSrc.to", stream=vidsrc_to_tv_season_embed_url(tmdb_id, season), media_id=media_id),
            StreamSource(name="VidSrc.icu", stream=vidsrc_icu_tv_embed_url(tmdb_id, season), media_id=media_id),
        ]
    sources = []
    for key, name in PROVIDERS.items():
        if season is not None and episode is not None:
            url = tv_embed_url(key, tmdb_id, season, episode)
        else:
            url = movie_embed_url(key, tmdb_id)
        sources.append(StreamSource(name=name, stream=url, media_id=media_id))
    return sources
