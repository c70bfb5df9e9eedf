"""AniList GraphQL queries and payload helpers."""

from typing import Any, Dict, List, Optional

import aiohttp

import config
from services.title_info_models import MEDIA_TYPE_ANIME, AdapterResult
from services.title_normalizer import classify_media_type
from utils.http import transient_retry

SOURCE_NAME = "anilist"

MEDIA_QUERY = """
query media($id: Int) {
  Media(id: $id) {
    id
    title {
      romaji
      english
    }
    coverImage {
      extraLarge
      large
    }
    episodes
    chapters
    type
    countryOfOrigin
  }
}
"""

TOP_TITLES_QUERY = """
query topTitles($type: MediaType, $sort: [MediaSort], $country: CountryCode, $perPage: Int) {
  Page(page: 1, perPage: $perPage) {
    media(type: $type, sort: $sort, countryOfOrigin: $country, status_not_in: [NOT_YET_RELEASED]) {
      title {
        romaji
        english
      }
      coverImage {
        large
      }
      episodes
      chapters
      volumes
      nextAiringEpisode {
        episode
      }
      countryOfOrigin
      status
      type
    }
  }
}
"""

SEARCH_QUERY = """
query searchTitles($search: String, $type: MediaType, $perPage: Int) {
  Page(page: 1, perPage: $perPage) {
    media(search: $search, type: $type, sort: [SEARCH_MATCH]) {
      title {
        romaji
        english
      }
      coverImage {
        large
      }
      episodes
      chapters
      countryOfOrigin
      type
    }
  }
}
"""


class AniListGraphQLError(ValueError):
    """The endpoint answered with a GraphQL ``errors`` array."""


def select_title(title_field: Any) -> Optional[str]:
    if not isinstance(title_field, dict):
        return None
    for key in ("english", "romaji"):
        value = title_field.get(key)
        if isinstance(value, str) and value.strip():
            return value
    return None


def select_cover(cover_field: Any) -> Optional[str]:
    if isinstance(cover_field, str):
        return cover_field
    if isinstance(cover_field, dict):
        return cover_field.get("extraLarge") or cover_field.get("large") or cover_field.get("medium")
    return None


def parse_media_payload(media: Dict[str, Any], *, page_url: str) -> AdapterResult:
    """Map one ``Media`` node to an ``AdapterResult``.

    Episodes count for anime; chapters for everything else. A missing count
    stays ``0`` ("length unknown"), it is not an error.
    """
    media_type = classify_media_type(media.get("type"), media.get("countryOfOrigin"))
    if media_type == MEDIA_TYPE_ANIME:
        total = media.get("episodes")
    else:
        total = media.get("chapters")

    return AdapterResult(
        source=SOURCE_NAME,
        page_url=page_url,
        title=select_title(media.get("title")),
        image_url=select_cover(media.get("coverImage")),
        total=total if total is not None else 0,
        media_type=media_type,
    )


def extract_page_media(data: Dict[str, Any]) -> List[Dict[str, Any]]:
    page = data.get("Page") or {}
    media = page.get("media") or []
    return [item for item in media if isinstance(item, dict)]


@transient_retry
async def fetch_graphql(
    session: aiohttp.ClientSession,
    query: str,
    variables: Dict[str, Any],
) -> Dict[str, Any]:
    payload = {"query": query, "variables": variables}
    headers = {
        **config.CRAWLER_HEADERS,
        "Content-Type": "application/json",
        "Accept": "application/json",
    }

    async with session.post(config.ANILIST_GRAPHQL_URL, json=payload, headers=headers) as resp:
        resp.raise_for_status()
        data = await resp.json(content_type=None)
        if not isinstance(data, dict):
            raise AniListGraphQLError("AniList response is not a JSON object")
        if data.get("errors"):
            raise AniListGraphQLError(str(data["errors"]))
        return data.get("data") or {}
