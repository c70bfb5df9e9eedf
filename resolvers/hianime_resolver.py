# resolvers/hianime_resolver.py
import aiohttp

from services.html_title_parser import parse_hianime_detail
from services.title_info_models import MEDIA_TYPE_ANIME, AdapterResult, SourceMatch
from .base_resolver import HtmlPageResolver


class HiAnimeResolver(HtmlPageResolver):
    """Anime-only streaming aggregator; every page is an anime."""

    SOURCE_NAME = "hianime"
    DISPLAY_NAME = "HiAnime"
    HOSTNAMES = ("hianime.to", "hianime.sx", "hianimez.to", "aniwatchtv.to")
    URL_EXAMPLE = "https://hianime.to/<slug>-<id>"
    DEFAULT_MEDIA_TYPE = MEDIA_TYPE_ANIME

    async def fetch_result(self, session: aiohttp.ClientSession, match: SourceMatch) -> AdapterResult:
        html = await self._fetch_html(session, match.url)
        parsed = parse_hianime_detail(html, page_url=match.url)
        return AdapterResult(
            source=self.SOURCE_NAME,
            page_url=match.url,
            title=parsed["title"],
            image_url=parsed["image_url"],
            total=parsed["total"],
            media_type=MEDIA_TYPE_ANIME,
        )
