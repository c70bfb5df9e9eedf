import asyncio
import sys
from pathlib import Path
from urllib.parse import urlparse

import aiohttp
import pytest
from multidict import CIMultiDict, CIMultiDictProxy
from yarl import URL

sys.path.append(str(Path(__file__).resolve().parents[1]))

import config
from resolvers.anilist_resolver import AniListResolver
from services import anilist_graphql
from services.title_info_errors import (
    InvalidIdentifierError,
    MediaNotFoundError,
    SourceFetchError,
)
from services.title_info_service import resolve_title_info


def _install_graphql(monkeypatch, response):
    calls = []

    async def fake_fetch_graphql(_session, query, variables):
        calls.append((query, variables))
        if isinstance(response, Exception):
            raise response
        return response

    monkeypatch.setattr(anilist_graphql, "fetch_graphql", fake_fetch_graphql)
    return calls


def _resolve(url):
    return asyncio.run(resolve_title_info(url, session=object(), registry=(AniListResolver(),)))


def test_resolves_anime_episode_count(monkeypatch):
    calls = _install_graphql(
        monkeypatch,
        {
            "Media": {
                "id": 1535,
                "title": {"romaji": "Death Note", "english": None},
                "coverImage": {"extraLarge": "https://img.anili.st/1535-xl.jpg", "large": "https://img.anili.st/1535.jpg"},
                "episodes": 37,
                "chapters": None,
                "type": "ANIME",
                "countryOfOrigin": "JP",
            }
        },
    )

    info = _resolve("https://anilist.co/anime/1535")

    assert info.title == "Death Note"
    assert info.total == 37
    assert info.type == "Anime"
    assert info.image_url == "https://img.anili.st/1535-xl.jpg"
    assert calls[0][1] == {"id": 1535}


def test_korean_manga_is_manhwa_with_english_title(monkeypatch):
    _install_graphql(
        monkeypatch,
        {
            "Media": {
                "title": {"romaji": "Na Honjaman Level Up", "english": "Solo Leveling"},
                "coverImage": {"large": "https://img.anili.st/105398.jpg"},
                "episodes": None,
                "chapters": 201,
                "type": "MANGA",
                "countryOfOrigin": "KR",
            }
        },
    )

    info = _resolve("https://anilist.co/manga/105398/Na-Honjaman-Level-Up/")

    assert info.title == "Solo Leveling"
    assert info.total == 201
    assert info.type == "Manhwa"


def test_korean_anime_stays_anime(monkeypatch):
    _install_graphql(
        monkeypatch,
        {
            "Media": {
                "title": {"english": "Solo Leveling"},
                "coverImage": {"large": "https://img.anili.st/151807.jpg"},
                "episodes": 12,
                "type": "ANIME",
                "countryOfOrigin": "KR",
            }
        },
    )

    assert _resolve("https://anilist.co/anime/151807").type == "Anime"


def test_missing_chapter_count_is_zero(monkeypatch):
    _install_graphql(
        monkeypatch,
        {
            "Media": {
                "title": {"romaji": "One Piece"},
                "coverImage": {"large": "https://img.anili.st/30013.jpg"},
                "chapters": None,
                "type": "MANGA",
                "countryOfOrigin": "JP",
            }
        },
    )

    info = _resolve("https://anilist.co/manga/30013")

    assert info.total == 0
    assert info.type == "Manga"


def test_missing_cover_uses_placeholder(monkeypatch):
    _install_graphql(
        monkeypatch,
        {"Media": {"title": {"romaji": "Obscure"}, "coverImage": None, "episodes": 1, "type": "ANIME"}},
    )

    assert _resolve("https://anilist.co/anime/9").image_url == config.PLACEHOLDER_IMAGE_URL


def test_null_media_raises_media_not_found(monkeypatch):
    _install_graphql(monkeypatch, {"Media": None})

    with pytest.raises(MediaNotFoundError):
        _resolve("https://anilist.co/anime/999999999")


def test_http_404_raises_media_not_found(monkeypatch):
    url = config.ANILIST_GRAPHQL_URL
    request_info = aiohttp.RequestInfo(URL(url), "POST", CIMultiDictProxy(CIMultiDict()), URL(url))
    _install_graphql(monkeypatch, aiohttp.ClientResponseError(request_info, (), status=404, message="Not Found"))

    with pytest.raises(MediaNotFoundError):
        _resolve("https://anilist.co/anime/1")


def test_graphql_errors_raise_source_fetch_error(monkeypatch):
    _install_graphql(monkeypatch, anilist_graphql.AniListGraphQLError("[{'message': 'bad'}]"))

    with pytest.raises(SourceFetchError) as exc_info:
        _resolve("https://anilist.co/anime/1")

    assert exc_info.value.source == "anilist"


def test_connection_failure_raises_source_fetch_error(monkeypatch):
    _install_graphql(monkeypatch, aiohttp.ClientConnectionError("refused"))

    with pytest.raises(SourceFetchError):
        _resolve("https://anilist.co/anime/1")


def test_path_without_media_id_raises_invalid_identifier(monkeypatch):
    calls = _install_graphql(monkeypatch, {"Media": None})

    with pytest.raises(InvalidIdentifierError):
        _resolve("https://anilist.co/user/someone")

    assert calls == []


def test_parse_media_payload_prefers_english_and_extra_large_cover():
    result = anilist_graphql.parse_media_payload(
        {
            "title": {"romaji": "Shingeki no Kyojin", "english": "Attack on Titan"},
            "coverImage": {"extraLarge": "xl.jpg", "large": "l.jpg"},
            "episodes": 25,
            "type": "ANIME",
        },
        page_url="https://anilist.co/anime/16498",
    )

    assert result.title == "Attack on Titan"
    assert result.image_url == "xl.jpg"
    assert result.total == 25
    assert result.media_type == "Anime"


def test_matches_reads_media_id_from_either_path_kind():
    resolver = AniListResolver()

    assert resolver.matches(urlparse("https://anilist.co/anime/5114/Fullmetal")).identifier == "5114"
    assert resolver.matches(urlparse("https://anilist.co/MANGA/30013")).identifier == "30013"
    assert resolver.matches(urlparse("https://anilist.co/user/someone")).identifier is None
    assert resolver.matches(urlparse("https://example.com/anime/1")) is None
