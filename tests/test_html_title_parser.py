import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

from services.html_title_parser import (
    absolutize_against_origin,
    extract_embedded_series,
    parse_asura_detail,
    parse_hianime_detail,
    parse_social_metadata,
    strip_asura_title,
    strip_hianime_title,
)

HIANIME_URL = "https://hianime.to/frieren-beyond-journeys-end-18542"
ASURA_URL = "https://asuracomic.net/series/solo-leveling-8a1b2c3d"

HIANIME_DETAIL_HTML = """
<html><head>
<meta property="og:title" content="Watch Frieren: Beyond Journey's End English Sub/Dub online Free on HiAnime.to">
<meta property="og:image" content="https://cdn.hianime.to/og/frieren.jpg">
</head><body>
<div class="anis-content">
  <div class="anisc-poster"><div class="film-poster">
    <img class="film-poster-img" src="/images/frieren.jpg" alt="poster">
  </div></div>
  <div class="anisc-detail">
    <h2 class="film-name dynamic-name" itemprop="name">Frieren: Beyond Journey's End</h2>
    <div class="film-stats"><div class="tick">
      <div class="tick-item tick-pg">PG-13</div>
      <div class="tick-item tick-sub"><i class="fas fa-closed-captioning"></i>28</div>
      <div class="tick-item tick-eps">28</div>
      <span class="dot"></span><span class="item">TV</span>
      <span class="dot"></span><span class="item">24m</span>
    </div></div>
  </div>
</div>
</body></html>
"""

ASURA_DETAIL_HTML = r"""
<html><head>
<meta property="og:title" content="Solo Leveling - Asura Scans">
<meta property="og:description" content="Read Solo Leveling manhwa online.">
</head><body><div id="__next"></div>
<script>self.__next_f.push([1,"5:[\"$\",\"div\",null,{\"comic\":{\"id\":42,\"name\":\"Solo Leveling\",\"cover\":\"/storage/media/42/cover.webp\",\"chapter_count\":201,\"type\":{\"id\":1,\"name\":\"Manhwa\"}}}]"])</script>
</body></html>
"""


def test_strip_hianime_title_removes_site_decoration():
    assert strip_hianime_title("Watch One Piece English Sub/Dub online Free on HiAnime.to") == "One Piece"
    assert strip_hianime_title("Bleach - HiAnime") == "Bleach"
    assert strip_hianime_title("  Frieren  ") == "Frieren"


def test_strip_asura_title_removes_site_suffix():
    assert strip_asura_title("Solo Leveling - Asura Scans") == "Solo Leveling"
    assert strip_asura_title("Nano Machine | Asura Comic") == "Nano Machine"


def test_absolutize_against_origin():
    assert absolutize_against_origin("/a/b.jpg", "https://site.example/x/y") == "https://site.example/a/b.jpg"
    assert absolutize_against_origin("//cdn.example/b.jpg", "http://site.example/") == "http://cdn.example/b.jpg"
    assert absolutize_against_origin("https://cdn.example/c.jpg", "https://site.example/") == "https://cdn.example/c.jpg"
    assert absolutize_against_origin("", "https://site.example/") is None


def test_parse_hianime_detail_reads_markup():
    parsed = parse_hianime_detail(HIANIME_DETAIL_HTML, page_url=HIANIME_URL)

    assert parsed["title"] == "Frieren: Beyond Journey's End"
    assert parsed["image_url"] == "https://hianime.to/images/frieren.jpg"
    assert parsed["total"] == 28


def test_parse_hianime_detail_movie_badge_counts_as_one():
    html = """
    <html><head><meta property="og:title" content="Watch Your Name English Sub/Dub online Free on HiAnime.to">
    <meta property="og:image" content="https://cdn.hianime.to/og/your-name.jpg"></head>
    <body><div class="film-stats"><div class="tick"><span class="item">Movie</span></div></div></body></html>
    """

    parsed = parse_hianime_detail(html, page_url="https://hianime.to/your-name-8")

    assert parsed["title"] == "Your Name"
    assert parsed["image_url"] == "https://cdn.hianime.to/og/your-name.jpg"
    assert parsed["total"] == 1


def test_parse_hianime_detail_without_badges_counts_zero():
    html = '<html><body><h2 itemprop="name">Mystery Show</h2></body></html>'

    parsed = parse_hianime_detail(html, page_url=HIANIME_URL)

    assert parsed["title"] == "Mystery Show"
    assert parsed["total"] == 0
    assert parsed["image_url"] is None


def test_extract_embedded_series_decodes_flight_payload():
    series = extract_embedded_series(ASURA_DETAIL_HTML)

    assert series["name"] == "Solo Leveling"
    assert series["cover"] == "/storage/media/42/cover.webp"
    assert series["chapter_count"] == 201


def test_extract_embedded_series_scrapes_malformed_object():
    html = '<script>{"name":"Omniscient Reader","cover":"https://cdn.example/orv.webp","chapters_count":"250","broken": }</script>'

    series = extract_embedded_series(html)

    assert series == {
        "name": "Omniscient Reader",
        "cover": "https://cdn.example/orv.webp",
        "chapter_count": 250,
    }


def test_extract_embedded_series_skips_objects_without_name():
    html = (
        '<script>{"cover":"/banner.png"}'
        '{"name":"Nano Machine","cover":"/nano.webp","chapters":[{"n":1},{"n":2},{"n":3}]}</script>'
    )

    series = extract_embedded_series(html)

    assert series["name"] == "Nano Machine"
    assert len(series["chapters"]) == 3


def test_parse_asura_detail_reads_embedded_series():
    parsed = parse_asura_detail(ASURA_DETAIL_HTML, page_url=ASURA_URL)

    assert parsed["title"] == "Solo Leveling"
    assert parsed["image_url"] == "https://asuracomic.net/storage/media/42/cover.webp"
    assert parsed["total"] == 201
    assert parsed["type_label"] == "Manhwa"
    assert "manhwa" in parsed["type_hint"]


def test_parse_asura_detail_returns_none_without_series_block():
    html = '<html><head><meta property="og:title" content="Asura Scans"></head><body></body></html>'

    assert parse_asura_detail(html, page_url=ASURA_URL) is None


def test_parse_social_metadata_uses_og_tags():
    html = """
    <html><head>
    <meta property="og:title" content="Some Webtoon">
    <meta property="og:image" content="/og/cover.png">
    <meta property="og:type" content="video.tv_show">
    <meta name="description" content="Read the webtoon online">
    </head><body><h1>Ignored</h1></body></html>
    """

    parsed = parse_social_metadata(html, page_url="https://reader.example/series/some-webtoon")

    assert parsed["title"] == "Some Webtoon"
    assert parsed["image_url"] == "https://reader.example/og/cover.png"
    assert "webtoon" in parsed["type_hint"]


def test_extract_embedded_series_ignores_braces_inside_strings():
    html = (
        r'<script>self.__next_f.push([1,"{\"comic\":{\"name\":\"Solo Leveling\",'
        r'\"description\":\"Arc 2 :} begins { again\",'
        r'\"cover\":\"/storage/media/42/cover.webp\",\"chapter_count\":201}}"])</script>'
    )

    series = extract_embedded_series(html)

    assert series["name"] == "Solo Leveling"
    assert series["description"] == "Arc 2 :} begins { again"
    assert series["chapter_count"] == 201


def test_extract_embedded_series_searches_nested_objects():
    html = '<script>{"cover":"/banner.png","series":{"name":"Nano Machine","cover":"/nano.webp"}}</script>'

    series = extract_embedded_series(html)

    assert series == {"name": "Nano Machine", "cover": "/nano.webp"}
