"""Read-only catalog queries against AniList: trending titles and search.

Both are best effort. A failing upstream yields an empty list, never an
error, because they only decorate the dashboard and the add-title form.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional

import aiohttp

import config
from services import anilist_graphql
from services.title_info_models import MEDIA_TYPE_ANIME, TitleInfo
from services.title_normalizer import classify_media_type, coerce_total, normalize_title_info
from utils.http import client_timeout

LOGGER = logging.getLogger(__name__)

TOP_KIND_ANIME = "ANIME"
TOP_KIND_MANGA = "MANGA"
TOP_KIND_MANHWA = "MANHWA"
TOP_KINDS = (TOP_KIND_ANIME, TOP_KIND_MANGA, TOP_KIND_MANHWA)

# kind -> (AniList MediaType, countryOfOrigin filter)
_TOP_KIND_FILTERS = {
    TOP_KIND_ANIME: ("ANIME", None),
    TOP_KIND_MANGA: ("MANGA", "JP"),
    TOP_KIND_MANHWA: ("MANGA", "KR"),
}

_ANILIST_PAGE_URL = "https://anilist.co/"


def _estimate_top_total(media: Dict[str, Any]) -> int:
    if classify_media_type(media.get("type"), media.get("countryOfOrigin")) == MEDIA_TYPE_ANIME:
        total = media.get("episodes")
        next_airing = media.get("nextAiringEpisode") or {}
        # Releasing shows lag behind their episode count; count what has aired.
        if media.get("status") == "RELEASING" and next_airing.get("episode"):
            total = coerce_total(next_airing.get("episode")) - 1
        return coerce_total(total)

    total = media.get("chapters")
    if not total and media.get("volumes"):
        total = media.get("volumes")
    return coerce_total(total)


def _map_media(media: Dict[str, Any], *, estimate_airing: bool) -> Optional[TitleInfo]:
    result = anilist_graphql.parse_media_payload(media, page_url=_ANILIST_PAGE_URL)
    if estimate_airing:
        result.total = _estimate_top_total(media)
    try:
        return normalize_title_info(result)
    except Exception as exc:
        LOGGER.warning("Skipping AniList media without usable fields: %s", exc)
        return None


async def _fetch_top_titles(session: aiohttp.ClientSession, kind: str) -> List[TitleInfo]:
    media_type, country = _TOP_KIND_FILTERS[kind]
    variables: Dict[str, Any] = {
        "type": media_type,
        "sort": ["TRENDING_DESC", "POPULARITY_DESC"],
        "perPage": config.CATALOG_TOP_PAGE_SIZE,
    }
    if country:
        variables["country"] = country

    data = await anilist_graphql.fetch_graphql(session, anilist_graphql.TOP_TITLES_QUERY, variables)
    titles = []
    for media in anilist_graphql.extract_page_media(data):
        # The query filters on type only; set it so classification never guesses.
        media.setdefault("type", media_type)
        info = _map_media(media, estimate_airing=True)
        if info is not None:
            titles.append(info)
    return titles


async def fetch_top_titles(kind: str, *, session: Optional[aiohttp.ClientSession] = None) -> List[TitleInfo]:
    normalized_kind = (kind or "").strip().upper()
    if normalized_kind not in _TOP_KIND_FILTERS:
        return []

    try:
        if session is not None:
            return await _fetch_top_titles(session, normalized_kind)
        async with aiohttp.ClientSession(timeout=client_timeout()) as own_session:
            return await _fetch_top_titles(own_session, normalized_kind)
    except Exception as exc:
        LOGGER.error("Error fetching top %s: %s", normalized_kind, exc)
        return []


async def fetch_top_titles_all() -> Dict[str, List[TitleInfo]]:
    """All three dashboard rows, fetched concurrently over one session."""
    async with aiohttp.ClientSession(timeout=client_timeout()) as session:
        results = await asyncio.gather(
            *(fetch_top_titles(kind, session=session) for kind in TOP_KINDS)
        )
    return dict(zip(TOP_KINDS, results))


async def _search_media_type(session: aiohttp.ClientSession, query: str, media_type: str) -> List[Dict[str, Any]]:
    data = await anilist_graphql.fetch_graphql(
        session,
        anilist_graphql.SEARCH_QUERY,
        {"search": query, "type": media_type, "perPage": config.CATALOG_SEARCH_PAGE_SIZE},
    )
    return anilist_graphql.extract_page_media(data)


async def search_titles(query: str, *, session: Optional[aiohttp.ClientSession] = None) -> List[TitleInfo]:
    """Search anime and manga at once; anime results are listed first."""
    normalized_query = (query or "").strip()
    if not normalized_query:
        return []

    async def _run(active_session):
        anime, manga = await asyncio.gather(
            _search_media_type(active_session, normalized_query, "ANIME"),
            _search_media_type(active_session, normalized_query, "MANGA"),
        )
        titles = []
        for media in [*anime, *manga]:
            info = _map_media(media, estimate_airing=False)
            if info is not None:
                titles.append(info)
        return titles[: config.CATALOG_SEARCH_LIMIT]

    try:
        if session is not None:
            return await _run(session)
        async with aiohttp.ClientSession(timeout=client_timeout()) as own_session:
            return await _run(own_session)
    except Exception as exc:
        LOGGER.error("Error searching for %r: %s", normalized_query, exc)
        return []
