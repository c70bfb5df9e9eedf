# resolvers/anilist_resolver.py
import re
from typing import Optional
from urllib.parse import ParseResult

import aiohttp

from services import anilist_graphql
from services.title_info_errors import InvalidIdentifierError, MediaNotFoundError, SourceFetchError
from services.title_info_models import AdapterResult, SourceMatch
from .base_resolver import TitleSourceResolver


class AniListResolver(TitleSourceResolver):
    """AniList community database, one GraphQL round trip per title."""

    SOURCE_NAME = anilist_graphql.SOURCE_NAME
    DISPLAY_NAME = "AniList"
    HOSTNAMES = ("anilist.co",)
    URL_EXAMPLE = "https://anilist.co/anime/<id>"

    MEDIA_PATH_RE = re.compile(r"^/(?:anime|manga)/(\d+)(?:/|$)", re.IGNORECASE)

    def matches(self, parsed_url: ParseResult) -> Optional[SourceMatch]:
        match = super().matches(parsed_url)
        if match is None:
            return None
        path_match = self.MEDIA_PATH_RE.match(parsed_url.path or "")
        return SourceMatch(
            source=self.SOURCE_NAME,
            url=match.url,
            parsed=parsed_url,
            identifier=path_match.group(1) if path_match else None,
        )

    async def fetch_result(self, session: aiohttp.ClientSession, match: SourceMatch) -> AdapterResult:
        if not match.identifier:
            raise InvalidIdentifierError(
                f"Invalid AniList URL: expected /anime/<id> or /manga/<id> in {match.url}.",
                source=self.SOURCE_NAME,
            )
        media_id = int(match.identifier)

        try:
            data = await anilist_graphql.fetch_graphql(
                session,
                anilist_graphql.MEDIA_QUERY,
                {"id": media_id},
            )
        except aiohttp.ClientResponseError as exc:
            if exc.status == 404:
                raise MediaNotFoundError(
                    f"AniList has no media with id {media_id}.",
                    source=self.SOURCE_NAME,
                ) from exc
            raise SourceFetchError(
                f"AniList request failed (HTTP {exc.status}).",
                source=self.SOURCE_NAME,
            ) from exc
        except anilist_graphql.AniListGraphQLError as exc:
            raise SourceFetchError(
                f"AniList rejected the query: {exc}",
                source=self.SOURCE_NAME,
            ) from exc

        media = data.get("Media")
        if not isinstance(media, dict):
            raise MediaNotFoundError(
                f"AniList has no media with id {media_id}.",
                source=self.SOURCE_NAME,
            )

        return anilist_graphql.parse_media_payload(media, page_url=match.url)
