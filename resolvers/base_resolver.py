# resolvers/base_resolver.py
import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Tuple
from urllib.parse import ParseResult

import aiohttp

import config
from services.title_info_errors import FetchBlockedError, SourceFetchError, TitleInfoError
from services.title_info_models import AdapterResult, SourceMatch, TitleInfo
from services.title_normalizer import normalize_title_info
from utils.http import transient_retry

LOGGER = logging.getLogger(__name__)


def hostname_matches(hostname: Optional[str], domains) -> bool:
    host = (hostname or "").lower().rstrip(".")
    if not host:
        return False
    for domain in domains:
        if host == domain or host.endswith("." + domain):
            return True
    return False


class TitleSourceResolver(ABC):
    """
    Base class for every title-info source.

    A resolver answers two questions: does this URL belong to me
    (``matches``), and what does my source say about it (``fetch_result``).
    ``resolve`` ties the two to the normalizer and turns leaked transport
    errors into ``SourceFetchError`` so the orchestrator only ever sees the
    classified taxonomy.
    """

    SOURCE_NAME = ""
    DISPLAY_NAME = ""
    HOSTNAMES: Tuple[str, ...] = ()
    URL_EXAMPLE = ""

    # Normalizer policy; subclasses override per source.
    PLACEHOLDER_TITLE: Optional[str] = None
    DEFAULT_MEDIA_TYPE: Optional[str] = None

    def matches(self, parsed_url: ParseResult) -> Optional[SourceMatch]:
        if not hostname_matches(parsed_url.hostname, self.HOSTNAMES):
            return None
        return SourceMatch(source=self.SOURCE_NAME, url=parsed_url.geturl(), parsed=parsed_url)

    @abstractmethod
    async def fetch_result(self, session: aiohttp.ClientSession, match: SourceMatch) -> AdapterResult:
        """
        Query the source and return whatever fields it yielded.
        """
        raise NotImplementedError

    async def resolve(self, session: aiohttp.ClientSession, match: SourceMatch) -> TitleInfo:
        try:
            result = await self.fetch_result(session, match)
        except TitleInfoError:
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as exc:
            LOGGER.warning("[%s] fetch failed for %s: %s", self.SOURCE_NAME, match.url, exc)
            raise SourceFetchError(
                f"{self.DISPLAY_NAME} could not be reached ({type(exc).__name__}: {exc}).",
                source=self.SOURCE_NAME,
            ) from exc

        return normalize_title_info(
            result,
            placeholder_title=self.PLACEHOLDER_TITLE,
            default_type=self.DEFAULT_MEDIA_TYPE,
        )

    def describe(self) -> Dict[str, str]:
        return {
            "source": self.SOURCE_NAME,
            "name": self.DISPLAY_NAME,
            "url_example": self.URL_EXAMPLE,
        }

    def _build_headers(self) -> Dict[str, str]:
        return {**config.CRAWLER_HEADERS, "Accept": "application/json"}

    @transient_retry
    async def _fetch_json(
        self,
        session: aiohttp.ClientSession,
        url: str,
        params: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        async with session.get(url, params=params, headers=self._build_headers()) as response:
            response.raise_for_status()
            payload = await response.json(content_type=None)
            if not isinstance(payload, dict):
                raise ValueError(f"{self.DISPLAY_NAME} response is not a JSON object")
            return payload


class HtmlPageResolver(TitleSourceResolver):
    """Base for sources scraped from their public HTML pages."""

    @transient_retry
    async def _fetch_page(self, session: aiohttp.ClientSession, url: str) -> Tuple[int, str]:
        headers = {
            **config.CRAWLER_HEADERS,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        }
        async with session.get(url, headers=headers) as response:
            text = await response.text(errors="replace")
            return response.status, text

    async def _fetch_html(self, session: aiohttp.ClientSession, url: str) -> str:
        status, html = await self._fetch_page(session, url)
        content_length = len(html or "")
        if not 200 <= status < 300 or content_length < config.HTML_MIN_CONTENT_LENGTH:
            LOGGER.warning(
                "[%s] page looks blocked: url=%s status=%s length=%s",
                self.SOURCE_NAME,
                url,
                status,
                content_length,
            )
            raise FetchBlockedError(
                f"{self.DISPLAY_NAME} returned HTTP {status} with {content_length} bytes; "
                "the request was likely blocked.",
                source=self.SOURCE_NAME,
            )
        return html
