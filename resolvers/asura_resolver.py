# resolvers/asura_resolver.py
import aiohttp

from services.html_title_parser import parse_asura_detail
from services.title_info_errors import ParsePatternMismatchError
from services.title_info_models import MEDIA_TYPE_MANHWA, AdapterResult, SourceMatch
from .base_resolver import HtmlPageResolver


class AsuraResolver(HtmlPageResolver):
    """
    Scanlation site publishing manhwa, manhua and manga side by side.

    The page is client-rendered, so the series record is read from the JSON
    embedded in the Next.js payload rather than from the markup.
    """

    SOURCE_NAME = "asura"
    DISPLAY_NAME = "Asura Scans"
    HOSTNAMES = ("asuracomic.net", "asurascans.com", "asuratoon.com")
    URL_EXAMPLE = "https://asuracomic.net/series/<slug>"
    DEFAULT_MEDIA_TYPE = MEDIA_TYPE_MANHWA

    async def fetch_result(self, session: aiohttp.ClientSession, match: SourceMatch) -> AdapterResult:
        html = await self._fetch_html(session, match.url)
        parsed = parse_asura_detail(html, page_url=match.url)
        if parsed is None:
            raise ParsePatternMismatchError(
                "Could not find the series data on the Asura Scans page; "
                "the site layout may have changed.",
                source=self.SOURCE_NAME,
            )

        return AdapterResult(
            source=self.SOURCE_NAME,
            page_url=match.url,
            title=parsed["title"],
            image_url=parsed["image_url"],
            total=parsed["total"],
            media_type=parsed["type_label"],
            type_hint=parsed["type_hint"],
        )
