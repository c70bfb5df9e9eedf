"""Value types shared by the resolvers, the normalizer and the refresh task."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional
from urllib.parse import ParseResult

MEDIA_TYPE_ANIME = "Anime"
MEDIA_TYPE_MANGA = "Manga"
MEDIA_TYPE_MANHWA = "Manhwa"
MEDIA_TYPES = (MEDIA_TYPE_ANIME, MEDIA_TYPE_MANGA, MEDIA_TYPE_MANHWA)


@dataclass(frozen=True)
class TitleInfo:
    """Canonical resolution result.

    ``image_url`` is always absolute and ``total`` is never negative; 0 means
    the source does not know the length yet.
    """

    title: str
    image_url: str
    total: int
    type: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "imageUrl": self.image_url,
            "total": self.total,
            "type": self.type,
        }


@dataclass(frozen=True)
class SourceMatch:
    source: str
    url: str
    parsed: ParseResult
    identifier: Optional[str] = None


@dataclass
class AdapterResult:
    """What a resolver managed to read, before normalization."""

    source: str
    page_url: str
    title: Optional[str] = None
    image_url: Optional[str] = None
    total: Any = None
    media_type: Optional[str] = None
    type_hint: Optional[str] = None
