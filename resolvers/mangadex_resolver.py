# resolvers/mangadex_resolver.py
import asyncio
import logging
import re
from typing import Any, Dict, Optional
from urllib.parse import ParseResult

import aiohttp

import config
from services.title_info_errors import InvalidIdentifierError, MediaNotFoundError, SourceFetchError
from services.title_info_models import MEDIA_TYPE_MANGA, AdapterResult, SourceMatch
from .base_resolver import TitleSourceResolver

LOGGER = logging.getLogger(__name__)

DEFAULT_CHAPTER_TOTAL = 1


class MangaDexResolver(TitleSourceResolver):
    """MangaDex catalog API: manga record, cover art and chapter count."""

    SOURCE_NAME = "mangadex"
    DISPLAY_NAME = "MangaDex"
    HOSTNAMES = ("mangadex.org",)
    URL_EXAMPLE = "https://mangadex.org/title/<uuid>/<slug>"
    PLACEHOLDER_TITLE = "Unknown Title"
    DEFAULT_MEDIA_TYPE = MEDIA_TYPE_MANGA

    TITLE_ID_RE = re.compile(r"/title/([a-f0-9-]+)", re.IGNORECASE)

    def matches(self, parsed_url: ParseResult) -> Optional[SourceMatch]:
        match = super().matches(parsed_url)
        if match is None:
            return None
        id_match = self.TITLE_ID_RE.search(parsed_url.path or "")
        return SourceMatch(
            source=self.SOURCE_NAME,
            url=match.url,
            parsed=parsed_url,
            identifier=id_match.group(1).lower() if id_match else None,
        )

    @staticmethod
    def _select_title(attributes: Dict[str, Any]) -> Optional[str]:
        titles = attributes.get("title")
        if not isinstance(titles, dict):
            return None
        english = titles.get("en")
        if isinstance(english, str) and english.strip():
            return english
        for value in titles.values():
            if isinstance(value, str) and value.strip():
                return value
        return None

    @staticmethod
    def _find_cover_relationship(relationships: Any) -> Optional[Dict[str, Any]]:
        if not isinstance(relationships, list):
            return None
        for relationship in relationships:
            if isinstance(relationship, dict) and relationship.get("type") == "cover_art":
                return relationship
        return None

    @staticmethod
    def _cover_file_url(manga_id: str, file_name: Any) -> Optional[str]:
        if not isinstance(file_name, str) or not file_name.strip():
            return None
        return f"{config.MANGADEX_UPLOADS_URL}/covers/{manga_id}/{file_name.strip()}"

    async def _fetch_manga(self, session: aiohttp.ClientSession, manga_id: str) -> Dict[str, Any]:
        url = f"{config.MANGADEX_API_URL}/manga/{manga_id}"
        try:
            payload = await self._fetch_json(session, url)
        except aiohttp.ClientResponseError as exc:
            if exc.status == 404:
                raise MediaNotFoundError(
                    f"MangaDex has no manga with id {manga_id}.",
                    source=self.SOURCE_NAME,
                ) from exc
            raise SourceFetchError(
                f"MangaDex manga fetch failed (HTTP {exc.status}).",
                source=self.SOURCE_NAME,
            ) from exc

        data = payload.get("data")
        if not isinstance(data, dict):
            raise MediaNotFoundError(
                f"MangaDex returned no manga record for id {manga_id}.",
                source=self.SOURCE_NAME,
            )
        return data

    async def _fetch_cover_url(
        self,
        session: aiohttp.ClientSession,
        manga_id: str,
        relationships: Any,
    ) -> str:
        relationship = self._find_cover_relationship(relationships)
        if not relationship:
            return config.MANGADEX_PLACEHOLDER_IMAGE_URL

        # Expanded relationships already carry the file name.
        embedded = relationship.get("attributes")
        if isinstance(embedded, dict):
            embedded_url = self._cover_file_url(manga_id, embedded.get("fileName"))
            if embedded_url:
                return embedded_url

        cover_id = relationship.get("id")
        if not cover_id:
            return config.MANGADEX_PLACEHOLDER_IMAGE_URL

        try:
            payload = await self._fetch_json(session, f"{config.MANGADEX_API_URL}/cover/{cover_id}")
        except Exception as exc:
            LOGGER.warning("MangaDex cover fetch failed for manga=%s cover=%s: %s", manga_id, cover_id, exc)
            return config.MANGADEX_PLACEHOLDER_IMAGE_URL

        data = payload.get("data") if isinstance(payload, dict) else None
        attributes = data.get("attributes") if isinstance(data, dict) else None
        if not isinstance(attributes, dict):
            LOGGER.warning("MangaDex cover %s has no attributes for manga=%s", cover_id, manga_id)
            return config.MANGADEX_PLACEHOLDER_IMAGE_URL
        return self._cover_file_url(manga_id, attributes.get("fileName")) or config.MANGADEX_PLACEHOLDER_IMAGE_URL

    async def _fetch_chapter_total(self, session: aiohttp.ClientSession, manga_id: str) -> int:
        try:
            payload = await self._fetch_json(
                session,
                f"{config.MANGADEX_API_URL}/chapter",
                params={"manga": manga_id, "limit": 1},
            )
        except Exception as exc:
            LOGGER.warning("MangaDex chapter count failed for manga=%s: %s", manga_id, exc)
            return DEFAULT_CHAPTER_TOTAL

        total = payload.get("total") if isinstance(payload, dict) else None
        if isinstance(total, bool) or not isinstance(total, int):
            return DEFAULT_CHAPTER_TOTAL
        return total

    async def fetch_result(self, session: aiohttp.ClientSession, match: SourceMatch) -> AdapterResult:
        manga_id = match.identifier
        if not manga_id:
            raise InvalidIdentifierError(
                f"Invalid MangaDex URL: no title id found in {match.url}.",
                source=self.SOURCE_NAME,
            )

        manga = await self._fetch_manga(session, manga_id)
        attributes = manga.get("attributes") if isinstance(manga.get("attributes"), dict) else {}

        image_url, total = await asyncio.gather(
            self._fetch_cover_url(session, manga_id, manga.get("relationships")),
            self._fetch_chapter_total(session, manga_id),
        )

        return AdapterResult(
            source=self.SOURCE_NAME,
            page_url=match.url,
            title=self._select_title(attributes),
            image_url=image_url,
            total=total,
            media_type=MEDIA_TYPE_MANGA,
        )
