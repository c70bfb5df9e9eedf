"""Repository for the per-user ``title_records`` table."""

from database import get_cursor


def get_title_record(conn, owner_id, record_id):
    """Return the stored record as a dict, or ``None`` if it does not exist."""
    cursor = get_cursor(conn)
    cursor.execute(
        """
        SELECT owner_id, record_id, title, media_type, source_url, total, image_url, updated_at
        FROM title_records
        WHERE owner_id = %s AND record_id = %s
        """,
        (str(owner_id), str(record_id)),
    )
    row = cursor.fetchone()
    cursor.close()
    return dict(row) if row is not None else None


def update_title_record_progress(conn, owner_id, record_id, *, total, image_url, updated_at) -> bool:
    """
    Raise the stored total (and optionally swap the cover) for one record.

    The ``total < %s`` guard keeps the update monotonic even if two refreshes
    race. ``image_url=None`` leaves the cover untouched.

    Returns True if a row was updated.
    """
    cursor = get_cursor(conn)
    cursor.execute(
        """
        UPDATE title_records
        SET total = %s,
            image_url = COALESCE(%s, image_url),
            updated_at = %s
        WHERE owner_id = %s AND record_id = %s AND total < %s
        RETURNING record_id
        """,
        (total, image_url, updated_at, str(owner_id), str(record_id), total),
    )
    updated = cursor.fetchone() is not None
    cursor.close()
    return updated
