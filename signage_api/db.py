from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy import text
import logging
import os

logger = logging.getLogger(__name__)

DATABASE_URL = os.getenv("SIGNAGE_DATABASE_URL", "sqlite:///./signage.db")  # ganti ke postgres nanti

_connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}
engine = create_engine(DATABASE_URL, connect_args=_connect_args)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)

Base = declarative_base()


# table -> [(column, DDL type/default)] added after the first public release
_LATE_COLUMNS: dict[str, list[tuple[str, str]]] = {
    "display": [
        ("orientation", "VARCHAR DEFAULT 'LANDSCAPE'"),
        ("layout_id", "VARCHAR"),
        ("playlist_id", "VARCHAR"),
    ],
    "schedule": [
        ("description", "VARCHAR"),
        ("orientation", "VARCHAR"),
        ("priority", "INTEGER DEFAULT 1"),
        ("is_active", "BOOLEAN DEFAULT 1"),
        ("start_date", "DATE"),
        ("end_date", "DATE"),
        ("layout_id", "VARCHAR"),
    ],
    "playlist_item": [
        ("loop_video", "BOOLEAN DEFAULT 0"),
        ("orientation", "VARCHAR"),
        ("resize_mode", "VARCHAR"),
        ("rotation", "INTEGER"),
    ],
    "layout_section": [
        ("loop_enabled", "BOOLEAN DEFAULT 1"),
        ("frequency", "INTEGER"),
    ],
    "layout_section_item": [
        ("orientation", "VARCHAR"),
        ("resize_mode", "VARCHAR"),
        ("rotation", "INTEGER"),
    ],
    "media": [
        ("mime_type", "VARCHAR"),
        ("width", "INTEGER"),
        ("height", "INTEGER"),
    ],
}


def ensure_sqlite_schema(bind=None):
    """
    Lightweight runtime schema patching for SQLite.

    `Base.metadata.create_all()` won't add new columns to existing tables.
    This keeps local/dev installs working without requiring Alembic.
    """
    bind = bind if bind is not None else engine
    if not str(bind.url).startswith("sqlite"):
        return

    with bind.begin() as conn:
        for table, columns in _LATE_COLUMNS.items():
            cols = conn.execute(text(f"PRAGMA table_info({table})")).fetchall()
            if not cols:
                continue
            col_names = {row[1] for row in cols}  # (cid, name, type, notnull, dflt_value, pk)
            for name, ddl in columns:
                if name not in col_names:
                    logger.info("Adding column %s.%s", table, name)
                    conn.execute(text(f"ALTER TABLE {table} ADD COLUMN {name} {ddl}"))

        schedule_cols = conn.execute(text("PRAGMA table_info(schedule)")).fetchall()
        if schedule_cols:
            conn.execute(text("UPDATE schedule SET priority=1 WHERE priority IS NULL"))
            conn.execute(text("UPDATE schedule SET is_active=1 WHERE is_active IS NULL"))
            conn.execute(
                text(
                    "UPDATE schedule SET repeat_days=lower(repeat_days) "
                    "WHERE repeat_days IS NOT NULL AND repeat_days <> lower(repeat_days)"
                )
            )

        display_cols = conn.execute(text("PRAGMA table_info(display)")).fetchall()
        if display_cols:
            conn.execute(
                text(
                    "UPDATE display SET device_token=NULL "
                    "WHERE device_token IS NOT NULL AND trim(device_token)=''"
                )
            )
