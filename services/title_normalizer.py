"""Map resolver output onto the canonical ``TitleInfo`` shape.

Everything here is pure: no I/O, no configuration beyond the placeholder
image constant.
"""

from __future__ import annotations

import re
from typing import Optional
from urllib.parse import urljoin, urlparse

import config
from services.title_info_errors import ParsePatternMismatchError
from services.title_info_models import (
    MEDIA_TYPE_ANIME,
    MEDIA_TYPE_MANGA,
    MEDIA_TYPE_MANHWA,
    MEDIA_TYPES,
    AdapterResult,
    TitleInfo,
)
from utils.text import clean_text, parse_first_int

_MANHWA_CUE_RE = re.compile(r"\b(manhwa|manhua|webtoons?)\b", re.IGNORECASE)
_ANIME_CUE_RE = re.compile(r"\b(anime|episodes?|tv series|ova|ona)\b", re.IGNORECASE)
_MANGA_CUE_RE = re.compile(r"\b(manga|chapters?|one[- ]shot)\b", re.IGNORECASE)


def classify_media_type(media_format: Optional[str], country_of_origin: Optional[str]) -> str:
    """AniList style classification: ANIME wins, then KR origin means Manhwa."""
    if (media_format or "").strip().upper() == "ANIME":
        return MEDIA_TYPE_ANIME
    if (country_of_origin or "").strip().upper() == "KR":
        return MEDIA_TYPE_MANHWA
    return MEDIA_TYPE_MANGA


def classify_by_keywords(text: Optional[str]) -> Optional[str]:
    """Guess the media type from free text; ``None`` when nothing matches."""
    value = clean_text(text)
    if not value:
        return None
    for canonical in MEDIA_TYPES:
        if value.lower() == canonical.lower():
            return canonical
    if _MANHWA_CUE_RE.search(value):
        return MEDIA_TYPE_MANHWA
    if _ANIME_CUE_RE.search(value):
        return MEDIA_TYPE_ANIME
    if _MANGA_CUE_RE.search(value):
        return MEDIA_TYPE_MANGA
    return None


def coerce_total(value) -> int:
    parsed = parse_first_int(value)
    if parsed is None or parsed < 0:
        return 0
    return parsed


def _is_absolute_http_url(value: str) -> bool:
    parsed = urlparse(value)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def absolutize_image_url(image_url: Optional[str], page_url: Optional[str]) -> str:
    candidate = clean_text(image_url)
    if not candidate:
        return config.PLACEHOLDER_IMAGE_URL
    if not _is_absolute_http_url(candidate) and page_url:
        candidate = urljoin(page_url, candidate)
    if not _is_absolute_http_url(candidate):
        return config.PLACEHOLDER_IMAGE_URL
    return candidate


def normalize_title_info(
    result: AdapterResult,
    *,
    placeholder_title: Optional[str] = None,
    default_type: Optional[str] = None,
) -> TitleInfo:
    title = clean_text(result.title)
    if not title:
        if not placeholder_title:
            raise ParsePatternMismatchError(
                f"No title could be found on {result.page_url}; the site layout may have changed.",
                source=result.source,
            )
        title = placeholder_title

    media_type = (
        classify_by_keywords(result.media_type)
        or classify_by_keywords(result.type_hint)
        or default_type
    )
    if media_type not in MEDIA_TYPES:
        raise ParsePatternMismatchError(
            f"Could not tell whether {result.page_url} is an anime, manga or manhwa.",
            source=result.source,
        )

    return TitleInfo(
        title=title,
        image_url=absolutize_image_url(result.image_url, result.page_url),
        total=coerce_total(result.total),
        type=media_type,
    )
