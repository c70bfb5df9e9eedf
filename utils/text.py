"""Text normalization utilities for scraped titles and counts."""

import re
import unicodedata

_WS_RE = re.compile(r"\s+", re.UNICODE)
_INT_RE = re.compile(r"\d[\d,]*")


def clean_text(value):
    """Collapse whitespace and apply NFKC; non-strings become ``""``."""
    if not isinstance(value, str):
        return ""
    text = unicodedata.normalize("NFKC", value)
    return _WS_RE.sub(" ", text).strip()


def parse_first_int(value):
    """Return the first integer found in ``value`` ("1,024 eps" -> 1024), else None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    if not isinstance(value, str):
        return None
    match = _INT_RE.search(value)
    if not match:
        return None
    return int(match.group(0).replace(",", ""))
