# config.py
import json
import os


def _parse_bool_env(name, default=False):
    raw = os.getenv(name)
    if raw is None:
        return default
    normalized = raw.strip().lower()
    if normalized in {'1', 'true', 't', 'yes', 'y', 'on'}:
        return True
    if normalized in {'0', 'false', 'f', 'no', 'n', 'off'}:
        return False
    return default


def _parse_origins_env(name):
    raw = (os.getenv(name) or '').strip()
    if not raw:
        return None
    if raw.startswith('['):
        try:
            parsed = json.loads(raw)
        except ValueError:
            parsed = None
        if isinstance(parsed, list):
            origins = [str(item).strip() for item in parsed if str(item).strip()]
            return origins or None
    origins = [part.strip() for part in raw.split(',') if part.strip()]
    return origins or None


# --- Crawler ---
CRAWLER_HEADERS = {
    'User-Agent': 'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/108.0.0.0 Safari/537.36'
}

# --- HTTP Client Defaults (per resolution) ---
TITLE_INFO_HTTP_TOTAL_TIMEOUT_SECONDS = int(os.getenv('TITLE_INFO_HTTP_TOTAL_TIMEOUT_SECONDS', 20))
TITLE_INFO_HTTP_CONNECT_TIMEOUT_SECONDS = int(os.getenv('TITLE_INFO_HTTP_CONNECT_TIMEOUT_SECONDS', 5))
TITLE_INFO_HTTP_SOCK_READ_TIMEOUT_SECONDS = int(os.getenv('TITLE_INFO_HTTP_SOCK_READ_TIMEOUT_SECONDS', 15))
TITLE_INFO_FETCH_ATTEMPTS = max(1, int(os.getenv('TITLE_INFO_FETCH_ATTEMPTS', 3)))

# Off by default: unknown hosts fail with UnsupportedSourceError.
TITLE_INFO_GENERIC_FALLBACK_ENABLED = _parse_bool_env('TITLE_INFO_GENERIC_FALLBACK_ENABLED', False)

# Pages shorter than this are treated as a bot wall.
HTML_MIN_CONTENT_LENGTH = int(os.getenv('HTML_MIN_CONTENT_LENGTH', 500))

# --- MangaDex API ---
MANGADEX_API_URL = os.getenv('MANGADEX_API_URL', 'https://api.mangadex.org').rstrip('/')
MANGADEX_UPLOADS_URL = os.getenv('MANGADEX_UPLOADS_URL', 'https://uploads.mangadex.org').rstrip('/')
MANGADEX_PLACEHOLDER_IMAGE_URL = 'https://picsum.photos/seed/mangadex-fallback/400/600'

# --- AniList GraphQL ---
ANILIST_GRAPHQL_URL = os.getenv('ANILIST_GRAPHQL_URL', 'https://graphql.anilist.co')

# Used when a source yields no usable cover.
PLACEHOLDER_IMAGE_URL = os.getenv('PLACEHOLDER_IMAGE_URL', 'https://picsum.photos/seed/title-fallback/400/600')

# --- Catalog (top titles / search) ---
CATALOG_TOP_PAGE_SIZE = int(os.getenv('CATALOG_TOP_PAGE_SIZE', 5))
CATALOG_SEARCH_PAGE_SIZE = int(os.getenv('CATALOG_SEARCH_PAGE_SIZE', 10))
CATALOG_SEARCH_LIMIT = int(os.getenv('CATALOG_SEARCH_LIMIT', 10))

# --- Database ---
DATABASE_URL = os.getenv('DATABASE_URL', 'postgresql://localhost:5432/title_tracker')

# --- Web ---
CORS_ALLOW_ORIGINS = _parse_origins_env('CORS_ALLOW_ORIGINS')
CORS_SUPPORTS_CREDENTIALS = _parse_bool_env('CORS_SUPPORTS_CREDENTIALS', False)
