"""Resolve an arbitrary title URL into a canonical ``TitleInfo``.

Sources are tried in a fixed priority order: structured APIs first, the
GraphQL aggregator next, HTML scraping last. The first source whose predicate
claims the URL owns the request; its errors are surfaced unchanged and no
other source is tried afterwards.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple
from urllib.parse import urlparse

import aiohttp

import config
from resolvers.anilist_resolver import AniListResolver
from resolvers.asura_resolver import AsuraResolver
from resolvers.base_resolver import TitleSourceResolver
from resolvers.generic_resolver import GenericPageResolver
from resolvers.hianime_resolver import HiAnimeResolver
from resolvers.mangadex_resolver import MangaDexResolver
from services.title_info_errors import UnsupportedSourceError
from services.title_info_models import SourceMatch, TitleInfo
from utils.http import client_timeout

LOGGER = logging.getLogger(__name__)


def build_default_registry() -> tuple:
    return (
        MangaDexResolver(),
        AniListResolver(),
        HiAnimeResolver(),
        AsuraResolver(),
    )


DEFAULT_REGISTRY = build_default_registry()


def _default_fallback() -> Optional[TitleSourceResolver]:
    if config.TITLE_INFO_GENERIC_FALLBACK_ENABLED:
        return GenericPageResolver()
    return None


def _select(
    url: str,
    registry: Sequence[TitleSourceResolver],
    fallback: Optional[TitleSourceResolver],
) -> Tuple[TitleSourceResolver, SourceMatch]:
    candidate = (url or "").strip()
    parsed = urlparse(candidate)
    if parsed.scheme not in ("http", "https") or not parsed.hostname:
        raise UnsupportedSourceError(f"'{candidate}' is not a valid http(s) URL.")

    for resolver in registry:
        match = resolver.matches(parsed)
        if match is not None:
            return resolver, match

    if fallback is not None:
        match = fallback.matches(parsed)
        if match is not None:
            return fallback, match

    raise UnsupportedSourceError(f"No supported source recognises {parsed.hostname}.")


def select_source(
    url: str,
    *,
    registry: Optional[Sequence[TitleSourceResolver]] = None,
    fallback: Optional[TitleSourceResolver] = None,
) -> SourceMatch:
    registry = DEFAULT_REGISTRY if registry is None else registry
    _, match = _select(url, registry, fallback)
    return match


async def resolve_title_info(
    url: str,
    *,
    session: Optional[aiohttp.ClientSession] = None,
    registry: Optional[Sequence[TitleSourceResolver]] = None,
    fallback: Optional[TitleSourceResolver] = None,
) -> TitleInfo:
    registry = DEFAULT_REGISTRY if registry is None else registry
    if fallback is None:
        fallback = _default_fallback()

    resolver, match = _select(url, registry, fallback)
    LOGGER.info("Resolving %s via %s", match.url, resolver.SOURCE_NAME)

    if session is not None:
        return await resolver.resolve(session, match)

    async with aiohttp.ClientSession(timeout=client_timeout()) as own_session:
        return await resolver.resolve(own_session, match)


def resolve_title_info_sync(url: str, **kwargs: Any) -> TitleInfo:
    """Blocking entry point for request handlers."""
    return asyncio.run(resolve_title_info(url, **kwargs))


def list_supported_sources(
    registry: Optional[Sequence[TitleSourceResolver]] = None,
) -> List[Dict[str, str]]:
    registry = DEFAULT_REGISTRY if registry is None else registry
    sources = [resolver.describe() for resolver in registry]
    fallback = _default_fallback()
    if fallback is not None:
        sources.append(fallback.describe())
    return sources
