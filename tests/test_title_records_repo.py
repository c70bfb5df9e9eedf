import sys
from datetime import datetime, timezone
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

from repositories import title_records_repo


class ScriptedCursor:
    def __init__(self, fetchone_results=None):
        self.fetchone_results = list(fetchone_results or [])
        self.executed = []
        self.closed = False

    def execute(self, query, params=None):
        self.executed.append((" ".join(query.split()), params))

    def fetchone(self):
        if self.fetchone_results:
            return self.fetchone_results.pop(0)
        return None

    def close(self):
        self.closed = True


class FakeConnection:
    def __init__(self, cursor):
        self._cursor = cursor
        self.cursor_kwargs = None

    def cursor(self, **kwargs):
        self.cursor_kwargs = kwargs
        return self._cursor


def test_get_title_record_returns_dict():
    row = {"owner_id": "1", "record_id": "7", "source_url": "https://anilist.co/anime/1", "total": 3}
    cursor = ScriptedCursor([row])
    conn = FakeConnection(cursor)

    record = title_records_repo.get_title_record(conn, 1, 7)

    assert record == row
    assert cursor.executed[0][1] == ("1", "7")
    assert "FROM title_records" in cursor.executed[0][0]
    assert "cursor_factory" in conn.cursor_kwargs
    assert cursor.closed is True


def test_get_title_record_missing_returns_none():
    cursor = ScriptedCursor([])

    assert title_records_repo.get_title_record(FakeConnection(cursor), "u", "r") is None


def test_update_progress_is_guarded_by_current_total():
    cursor = ScriptedCursor([{"record_id": "7"}])
    updated_at = datetime(2026, 1, 1, tzinfo=timezone.utc)

    updated = title_records_repo.update_title_record_progress(
        FakeConnection(cursor),
        "1",
        "7",
        total=12,
        image_url=None,
        updated_at=updated_at,
    )

    query, params = cursor.executed[0]
    assert updated is True
    assert "total < %s" in query
    assert "COALESCE(%s, image_url)" in query
    assert params == (12, None, updated_at, "1", "7", 12)
    assert cursor.closed is True


def test_update_progress_reports_no_row():
    cursor = ScriptedCursor([])

    updated = title_records_repo.update_title_record_progress(
        FakeConnection(cursor),
        "1",
        "7",
        total=2,
        image_url="https://cdn.example/c.jpg",
        updated_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
    )

    assert updated is False
