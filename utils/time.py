"""Time utilities for ``updated_at`` bookkeeping.

Stored timestamps are ``TIMESTAMPTZ`` values; everything written by the
application is an aware UTC datetime so that records refreshed from a
background thread compare correctly with those written by request handlers.
"""

from datetime import datetime, timezone


def now_utc() -> datetime:
    """Return the current time as an aware UTC datetime."""

    return datetime.now(timezone.utc)
