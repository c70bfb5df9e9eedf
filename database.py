# database.py

import psycopg2
import psycopg2.extras
from flask import g

import config


def create_standalone_connection():
    """Flask 컨텍스트 밖(백그라운드 갱신 스레드, 스크립트)에서 쓰는 독립 연결을 만듭니다."""
    return psycopg2.connect(config.DATABASE_URL)


def get_db():
    """Application Context 내에서 유일한 DB 연결을 가져옵니다."""
    if 'db' not in g:
        g.db = create_standalone_connection()
    return g.db


def get_cursor(conn):
    """컬럼 이름으로 접근 가능한 RealDictCursor를 돌려줍니다."""
    return conn.cursor(cursor_factory=psycopg2.extras.RealDictCursor)


def close_db(exception=None):
    """요청(request)이 끝나면 자동으로 호출되어 DB 연결을 닫습니다."""
    db = g.pop('db', None)
    if db is not None:
        db.close()


def setup_database_standalone():
    """title_records 테이블을 (없으면) 생성합니다."""
    conn = create_standalone_connection()
    try:
        cursor = get_cursor(conn)
        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS title_records (
                owner_id TEXT NOT NULL,
                record_id TEXT NOT NULL,
                title TEXT NOT NULL,
                media_type TEXT NOT NULL,
                source_url TEXT,
                total INTEGER NOT NULL DEFAULT 0,
                image_url TEXT,
                created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
                updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
                PRIMARY KEY (owner_id, record_id)
            )
            """
        )
        conn.commit()
        cursor.close()
    finally:
        conn.close()
