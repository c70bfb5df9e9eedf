"""Background refresh of a saved title's episode/chapter count.

Runs after a user-visible action, so nothing here may raise into the caller:
every failure is logged and the stored record is left as it was. Counts only
ever grow; a source that temporarily reports fewer units is ignored.
"""

from __future__ import annotations

import asyncio
import logging
import threading

from database import create_standalone_connection
from repositories.title_records_repo import get_title_record, update_title_record_progress
from services.title_info_service import resolve_title_info
from utils.time import now_utc

LOGGER = logging.getLogger(__name__)


def _stored_total(record) -> int:
    try:
        return int(record.get("total") or 0)
    except (TypeError, ValueError):
        return 0


async def _refresh_with_connection(conn, owner_id, record_id, resolve) -> None:
    record = get_title_record(conn, owner_id, record_id)
    # End the read transaction before the network round trip.
    conn.rollback()
    if record is None:
        LOGGER.warning("Refresh skipped: record %s/%s does not exist", owner_id, record_id)
        return

    source_url = (record.get("source_url") or "").strip()
    if not source_url:
        LOGGER.info("Refresh skipped: record %s/%s has no source URL", owner_id, record_id)
        return

    try:
        latest = await resolve(source_url)
    except Exception:
        LOGGER.warning("Refresh failed to resolve %s for %s/%s", source_url, owner_id, record_id, exc_info=True)
        return

    stored_total = _stored_total(record)
    if latest.total <= stored_total:
        LOGGER.info(
            "Refresh %s/%s: total already up to date (stored=%s, fetched=%s)",
            owner_id,
            record_id,
            stored_total,
            latest.total,
        )
        return

    image_url = latest.image_url if latest.image_url != record.get("image_url") else None
    try:
        updated = update_title_record_progress(
            conn,
            owner_id,
            record_id,
            total=latest.total,
            image_url=image_url,
            updated_at=now_utc(),
        )
        conn.commit()
    except Exception:
        conn.rollback()
        raise

    LOGGER.info(
        "Refresh %s/%s: total %s -> %s (updated=%s)",
        owner_id,
        record_id,
        stored_total,
        latest.total,
        updated,
    )


async def refresh_title_record(owner_id, record_id, *, conn=None, resolve=resolve_title_info) -> None:
    """Re-resolve a stored record's source URL and raise its total if it grew."""
    own_conn = None
    try:
        if conn is None:
            own_conn = create_standalone_connection()
            conn = own_conn
        await _refresh_with_connection(conn, owner_id, record_id, resolve)
    except Exception:
        LOGGER.exception("Refresh of %s/%s failed", owner_id, record_id)
    finally:
        if own_conn is not None:
            try:
                own_conn.close()
            except Exception:
                LOGGER.warning("Closing refresh connection failed", exc_info=True)


def schedule_title_refresh(owner_id, record_id, **kwargs) -> threading.Thread:
    """Start the refresh on a daemon thread and return immediately."""
    thread = threading.Thread(
        target=asyncio.run,
        args=(refresh_title_record(owner_id, record_id, **kwargs),),
        name=f"title-refresh-{owner_id}-{record_id}",
        daemon=True,
    )
    thread.start()
    return thread
