import sys
from pathlib import Path
from urllib.parse import urlparse

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

import config
from services.title_info_errors import ParsePatternMismatchError
from services.title_info_models import AdapterResult
from services.title_normalizer import (
    absolutize_image_url,
    classify_by_keywords,
    classify_media_type,
    coerce_total,
    normalize_title_info,
)


def _result(**overrides):
    fields = {
        "source": "test",
        "page_url": "https://site.example/series/solo-leveling",
        "title": "Solo Leveling",
        "image_url": "https://cdn.example/cover.jpg",
        "total": 10,
        "media_type": "Manhwa",
    }
    fields.update(overrides)
    return AdapterResult(**fields)


@pytest.mark.parametrize(
    "media_format, country, expected",
    [
        ("ANIME", "JP", "Anime"),
        ("ANIME", "KR", "Anime"),
        ("MANGA", "KR", "Manhwa"),
        ("MANGA", "JP", "Manga"),
        ("MANGA", None, "Manga"),
    ],
)
def test_classify_media_type(media_format, country, expected):
    assert classify_media_type(media_format, country) == expected


def test_classify_by_keywords_prefers_manhwa_cues():
    assert classify_by_keywords("MANGA") == "Manga"
    assert classify_by_keywords("Manhua") == "Manhwa"
    assert classify_by_keywords("Read the webtoon chapters online") == "Manhwa"
    assert classify_by_keywords("Watch all episodes") == "Anime"
    assert classify_by_keywords("Latest chapters") == "Manga"
    assert classify_by_keywords("Unrelated words") is None
    assert classify_by_keywords(None) is None


def test_coerce_total_handles_strings_and_negatives():
    assert coerce_total("12 eps") == 12
    assert coerce_total("1,024") == 1024
    assert coerce_total(-4) == 0
    assert coerce_total(None) == 0
    assert coerce_total("unknown") == 0
    assert coerce_total(True) == 0


def test_absolutize_image_url_resolves_relative_paths():
    page = "https://site.example/series/solo-leveling"

    assert absolutize_image_url("/covers/a.jpg", page) == "https://site.example/covers/a.jpg"
    assert absolutize_image_url("//cdn.example/a.jpg", page) == "https://cdn.example/a.jpg"
    assert absolutize_image_url("https://other.example/a.jpg", page) == "https://other.example/a.jpg"


def test_absolutize_image_url_falls_back_to_placeholder():
    assert absolutize_image_url("", "https://site.example/") == config.PLACEHOLDER_IMAGE_URL
    assert absolutize_image_url("covers/a.jpg", None) == config.PLACEHOLDER_IMAGE_URL


def test_normalize_title_info_returns_absolute_image():
    info = normalize_title_info(_result(image_url="/storage/cover.webp", total="201"))

    parsed = urlparse(info.image_url)
    assert parsed.scheme == "https"
    assert parsed.netloc == "site.example"
    assert info.total == 201
    assert info.type == "Manhwa"


def test_normalize_title_info_rejects_empty_title_without_placeholder():
    with pytest.raises(ParsePatternMismatchError):
        normalize_title_info(_result(title="   "))


def test_normalize_title_info_uses_placeholder_title():
    info = normalize_title_info(_result(title=None), placeholder_title="Unknown Title")

    assert info.title == "Unknown Title"


def test_normalize_title_info_type_resolution_order():
    assert normalize_title_info(_result(media_type=None, type_hint="manga chapters")).type == "Manga"
    assert normalize_title_info(_result(media_type=None), default_type="Anime").type == "Anime"

    with pytest.raises(ParsePatternMismatchError):
        normalize_title_info(_result(media_type="novel"))


def test_title_info_to_dict_uses_wire_keys():
    info = normalize_title_info(_result())

    assert info.to_dict() == {
        "title": "Solo Leveling",
        "imageUrl": "https://cdn.example/cover.jpg",
        "total": 10,
        "type": "Manhwa",
    }
