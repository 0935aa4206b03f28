"""DDL for the content tables the admin tools manage."""

from __future__ import annotations

from .pool import ConnectionPool

NEWS_EVENTS_DDL = """
    CREATE TABLE IF NOT EXISTS news_events (
        id TEXT PRIMARY KEY,
        title TEXT NOT NULL,
        excerpt TEXT,
        content TEXT,
        category TEXT NOT NULL DEFAULT 'news',
        image_url TEXT,
        is_published INTEGER NOT NULL DEFAULT 0,
        published_at TEXT,
        event_date TEXT,
        event_time TEXT,
        event_location TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
"""

NEWS_EVENTS_INDEX_DDL = """
    CREATE INDEX IF NOT EXISTS idx_news_events_category_date
    ON news_events (category, event_date)
"""


def ensure_schema(pool: ConnectionPool) -> None:
    """Create the content tables when they do not exist yet."""

    with pool.connection() as conn:
        conn.execute(NEWS_EVENTS_DDL)
        conn.execute(NEWS_EVENTS_INDEX_DDL)
