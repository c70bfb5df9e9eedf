# resolvers/generic_resolver.py
from typing import Optional
from urllib.parse import ParseResult

import aiohttp

from services.html_title_parser import parse_social_metadata
from services.title_info_models import MEDIA_TYPE_MANGA, AdapterResult, SourceMatch
from .base_resolver import HtmlPageResolver

DEFAULT_GENERIC_TOTAL = 1


class GenericPageResolver(HtmlPageResolver):
    """
    Last-resort reader for any http(s) page, driven by ``og:*`` metadata.

    Never part of the priority registry: the orchestrator only consults it
    when no specific source claims the URL and the fallback is enabled.
    """

    SOURCE_NAME = "generic"
    DISPLAY_NAME = "Generic page"
    URL_EXAMPLE = "https://example.com/series/<slug>"
    DEFAULT_MEDIA_TYPE = MEDIA_TYPE_MANGA

    def matches(self, parsed_url: ParseResult) -> Optional[SourceMatch]:
        if parsed_url.scheme not in ("http", "https") or not parsed_url.hostname:
            return None
        return SourceMatch(source=self.SOURCE_NAME, url=parsed_url.geturl(), parsed=parsed_url)

    async def fetch_result(self, session: aiohttp.ClientSession, match: SourceMatch) -> AdapterResult:
        html = await self._fetch_html(session, match.url)
        parsed = parse_social_metadata(html, page_url=match.url)
        return AdapterResult(
            source=self.SOURCE_NAME,
            page_url=match.url,
            title=parsed["title"],
            image_url=parsed["image_url"],
            total=DEFAULT_GENERIC_TOTAL,
            type_hint=parsed["type_hint"],
        )
