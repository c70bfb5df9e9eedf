"""HTML parsing helpers for title pages of sites without an API.

Each field is recovered by an ordered list of attempts, most reliable marker
first, with the page's social metadata (``og:*``) as the last resort.
"""

from __future__ import annotations

import json
import re
from typing import Any, Dict, Iterable, Optional
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup

from utils.text import clean_text, parse_first_int

_WATCH_PREFIX_RE = re.compile(r"^\s*watch\s+", re.IGNORECASE)
_HIANIME_ONLINE_SUFFIX_RE = re.compile(
    r"\s*(?:english\s+sub\s*/\s*dub\s+)?online\s+free\s+on\s+\S+\s*$",
    re.IGNORECASE,
)
_HIANIME_SITE_SUFFIX_RE = re.compile(r"\s*[-|–]\s*(?:hianime|aniwatch)\b.*$", re.IGNORECASE)
_ASURA_SITE_SUFFIX_RE = re.compile(r"\s*[-|–]\s*asura\s*(?:scans|comics?|toon)?\b.*$", re.IGNORECASE)

_COVER_KEY_RE = re.compile(r'"cover"\s*:\s*"')
_NAME_FIELD_RE = re.compile(r'"name"\s*:\s*"([^"]+)"')
_COVER_FIELD_RE = re.compile(r'"cover"\s*:\s*"([^"]+)"')
_COUNT_FIELD_RE = re.compile(r'"(?:chapter_count|chapters_count|total_chapters|chapterCount)"\s*:\s*"?(\d+)')
_TYPE_FIELD_RE = re.compile(r'"(?:series_type|seriesType|type)"\s*:\s*(?:\{[^{}]*?"name"\s*:\s*)?"([^"]+)"')

SERIES_COUNT_KEYS = ("chapter_count", "chapters_count", "total_chapters", "chapterCount")
SERIES_TYPE_KEYS = ("type", "series_type", "seriesType")

# Window scanned around a "cover" key when the enclosing object is not valid JSON.
_FIELD_SCAN_WINDOW = 4000


def page_origin(page_url: str) -> str:
    parsed = urlparse(page_url or "")
    if not parsed.scheme or not parsed.netloc:
        return ""
    return f"{parsed.scheme}://{parsed.netloc}/"


def absolutize_against_origin(value: Optional[str], page_url: str) -> Optional[str]:
    """Resolve ``value`` against the page's scheme+host, keeping absolute URLs as-is."""
    candidate = clean_text(value)
    if not candidate:
        return None
    parsed = urlparse(candidate)
    if parsed.scheme in ("http", "https") and parsed.netloc:
        return candidate
    if candidate.startswith("//"):
        scheme = urlparse(page_url or "").scheme or "https"
        return f"{scheme}:{candidate}"
    origin = page_origin(page_url)
    if not origin:
        return candidate
    return urljoin(origin, candidate)


def meta_content(soup: BeautifulSoup, *keys: str) -> str:
    for key in keys:
        node = soup.find("meta", attrs={"property": key}) or soup.find("meta", attrs={"name": key})
        if node is None:
            continue
        content = clean_text(node.get("content"))
        if content:
            return content
    return ""


def _node_text(node) -> str:
    if node is None:
        return ""
    return clean_text(node.get_text(" ", strip=True)) or clean_text(node.get("content"))


def _first_text(soup: BeautifulSoup, selectors: Iterable[str]) -> str:
    for selector in selectors:
        for node in soup.select(selector):
            text = _node_text(node)
            if text:
                return text
    return ""


def _image_source(node) -> str:
    if node is None:
        return ""
    for attr in ("src", "data-src", "data-lazy-src", "content"):
        value = clean_text(node.get(attr))
        if value and not value.startswith("data:"):
            return value
    return ""


def _first_image(soup: BeautifulSoup, selectors: Iterable[str]) -> str:
    for selector in selectors:
        for node in soup.select(selector):
            value = _image_source(node)
            if value:
                return value
    return ""


def strip_hianime_title(title: str) -> str:
    value = clean_text(title)
    value = _WATCH_PREFIX_RE.sub("", value)
    value = _HIANIME_ONLINE_SUFFIX_RE.sub("", value)
    value = _HIANIME_SITE_SUFFIX_RE.sub("", value)
    return value.strip()


def strip_asura_title(title: str) -> str:
    value = clean_text(title)
    return _ASURA_SITE_SUFFIX_RE.sub("", value).strip()


def parse_hianime_detail(html: str, *, page_url: str) -> Dict[str, Any]:
    """Title, poster and episode count from an anime-only aggregator page.

    The count is the subbed-episode badge; a page with only a format badge
    (movie, special) counts as a single unit, and a page with neither as 0.
    """
    soup = BeautifulSoup(html or "", "lxml")

    title = _first_text(
        soup,
        ('h2[itemprop="name"]', 'h1[itemprop="name"]', '[itemprop="name"]', ".film-name"),
    ) or meta_content(soup, "og:title", "twitter:title")

    image = _first_image(
        soup,
        ('img[itemprop="image"]', ".anisc-poster img", ".film-poster img", ".film-poster-img"),
    ) or meta_content(soup, "og:image", "twitter:image")

    sub_count = None
    for node in soup.select(".tick-sub"):
        sub_count = parse_first_int(node.get_text(" ", strip=True))
        if sub_count is not None:
            break

    has_type_badge = bool(_first_text(soup, (".film-stats .item", ".tick-type")))

    if sub_count is not None:
        total = sub_count
    elif has_type_badge:
        total = 1
    else:
        total = 0

    return {
        "title": strip_hianime_title(title),
        "image_url": absolutize_against_origin(image, page_url),
        "total": total,
    }


def _unescape_embedded_json(html: str) -> str:
    # Next.js flight chunks carry JSON inside JS strings: \"key\":\"value\"
    return (html or "").replace('\\"', '"').replace("\\/", "/")


def _is_escaped(text: str, index: int) -> bool:
    backslashes = 0
    index -= 1
    while index >= 0 and text[index] == "\\":
        backslashes += 1
        index -= 1
    return backslashes % 2 == 1


def _enclosing_object_start(text: str, position: int) -> Optional[int]:
    """Index of the ``{`` that opens the object containing ``position``.

    ``position`` must sit outside a string literal. Braces inside quoted
    strings are ignored.
    """
    depth = 0
    in_string = False
    for index in range(position - 1, -1, -1):
        char = text[index]
        if char == '"' and not _is_escaped(text, index):
            in_string = not in_string
        elif in_string:
            continue
        elif char == "}":
            depth += 1
        elif char == "{":
            if depth == 0:
                return index
            depth -= 1
    return None


def _scrape_series_fields(text: str, start: int) -> Dict[str, Any]:
    window = text[start:start + _FIELD_SCAN_WINDOW]
    fields: Dict[str, Any] = {}
    name_match = _NAME_FIELD_RE.search(window)
    cover_match = _COVER_FIELD_RE.search(window)
    if name_match:
        fields["name"] = name_match.group(1)
    if cover_match:
        fields["cover"] = cover_match.group(1)
    count_match = _COUNT_FIELD_RE.search(window)
    if count_match:
        fields["chapter_count"] = int(count_match.group(1))
    type_match = _TYPE_FIELD_RE.search(window)
    if type_match:
        fields["type"] = type_match.group(1)
    return fields


def _looks_like_series(candidate: Any) -> bool:
    if not isinstance(candidate, dict):
        return False
    name = candidate.get("name")
    cover = candidate.get("cover")
    return isinstance(name, str) and bool(name.strip()) and isinstance(cover, str) and bool(cover.strip())


def _find_series_node(candidate: Any) -> Optional[Dict[str, Any]]:
    if isinstance(candidate, dict):
        if _looks_like_series(candidate):
            return candidate
        children = candidate.values()
    elif isinstance(candidate, list):
        children = candidate
    else:
        return None
    for child in children:
        found = _find_series_node(child)
        if found is not None:
            return found
    return None


def extract_embedded_series(html: str) -> Optional[Dict[str, Any]]:
    """Find the first embedded JSON object carrying both ``name`` and ``cover``.

    Objects are decoded with ``json`` when they are well formed; otherwise the
    fields are picked out of the surrounding text with tolerant patterns. A
    decoded object that is not the series itself is searched for a nested one.
    """
    text = _unescape_embedded_json(html)
    decoder = json.JSONDecoder()
    for cover_match in _COVER_KEY_RE.finditer(text):
        start = _enclosing_object_start(text, cover_match.start())
        if start is None:
            continue
        try:
            candidate, _ = decoder.raw_decode(text, start)
        except ValueError:
            candidate = _scrape_series_fields(text, start)
        series = _find_series_node(candidate)
        if series is not None:
            return series
    return None


def series_chapter_count(series: Dict[str, Any]) -> Optional[int]:
    for key in SERIES_COUNT_KEYS:
        value = parse_first_int(series.get(key))
        if value is not None:
            return value
    chapters = series.get("chapters")
    if isinstance(chapters, list):
        return len(chapters)
    return parse_first_int(chapters)


def series_type_label(series: Dict[str, Any]) -> Optional[str]:
    for key in SERIES_TYPE_KEYS:
        value = series.get(key)
        if isinstance(value, dict):
            value = value.get("name")
        label = clean_text(value)
        if label:
            return label
    return None


def parse_asura_detail(html: str, *, page_url: str) -> Optional[Dict[str, Any]]:
    """Series fields from a mixed-format scanlation page, or ``None`` if no block matched."""
    series = extract_embedded_series(html)
    if series is None:
        return None

    soup = BeautifulSoup(html or "", "lxml")
    title = clean_text(series.get("name")) or strip_asura_title(meta_content(soup, "og:title"))
    hint_parts = [
        meta_content(soup, "og:description", "description"),
        meta_content(soup, "keywords"),
        meta_content(soup, "og:title"),
    ]

    return {
        "title": title,
        "image_url": absolutize_against_origin(series.get("cover"), page_url),
        "total": series_chapter_count(series),
        "type_label": series_type_label(series),
        "type_hint": " ".join(part for part in hint_parts if part),
    }


def parse_social_metadata(html: str, *, page_url: str) -> Dict[str, Any]:
    soup = BeautifulSoup(html or "", "lxml")
    title = meta_content(soup, "og:title", "twitter:title") or _first_text(soup, ("h1", "title"))

    image = meta_content(soup, "og:image", "og:image:url", "twitter:image")
    if not image:
        link = soup.find("link", attrs={"rel": "image_src"})
        image = clean_text(link.get("href")) if link is not None else ""

    hint_parts = [
        meta_content(soup, "og:type"),
        meta_content(soup, "og:description", "description"),
        meta_content(soup, "keywords"),
        title,
    ]

    return {
        "title": title,
        "image_url": absolutize_against_origin(image, page_url),
        "type_hint": " ".join(part for part in hint_parts if part),
    }
