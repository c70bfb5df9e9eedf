"""Error taxonomy for title-info resolution.

Every error carries a stable ``code`` (used by the HTTP layer), the ``source``
that raised it (``None`` before a source was selected) and a user-facing
``message`` that already embeds the root cause.
"""

from __future__ import annotations

from typing import Optional


class TitleInfoError(RuntimeError):
    code = "TITLE_INFO_ERROR"

    def __init__(self, message: str, *, source: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.source = source


class UnsupportedSourceError(TitleInfoError):
    """No registered source recognises the URL."""

    code = "UNSUPPORTED_SOURCE"


class InvalidIdentifierError(TitleInfoError):
    """The host matched but the title id could not be read from the path."""

    code = "INVALID_IDENTIFIER"


class MediaNotFoundError(TitleInfoError):
    """The upstream has no record for a well-formed id."""

    code = "MEDIA_NOT_FOUND"


class FetchBlockedError(TitleInfoError):
    """The page came back but looks like a bot wall or an error page."""

    code = "FETCH_BLOCKED"


class ParsePatternMismatchError(TitleInfoError):
    """Heuristic extraction found nothing it recognises."""

    code = "PARSE_PATTERN_MISMATCH"


class SourceFetchError(TitleInfoError):
    """Transport failure or non-success status on a load-bearing fetch."""

    code = "SOURCE_FETCH_FAILED"


def format_user_error(exc: BaseException) -> str:
    if isinstance(exc, UnsupportedSourceError):
        return f"{exc.message} Please enter the title details manually."
    if isinstance(exc, FetchBlockedError):
        return (
            "The website appears to be blocking automated requests. "
            f"Please enter the title details manually. Reason: {exc.message}"
        )
    if isinstance(exc, TitleInfoError):
        return f"Could not extract title information. Reason: {exc.message}"
    return f"Could not extract title information. Reason: {exc}"
