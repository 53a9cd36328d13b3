"""
Pytest configuration and fixtures for signage-api tests.

This module provides shared fixtures for testing:
- In-memory SQLite database with all tables created
- FastAPI test client wired to that database and to a frozen clock
- Factories for displays, schedules, playlists, layouts and media
- Signed device tokens
"""

from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import jwt
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from signage_api.api import player
from signage_api.db import Base
from signage_api.main import app
from signage_api.models.display import Display
from signage_api.models.layout import Layout, LayoutSection, LayoutSectionItem
from signage_api.models.media import Media
from signage_api.models.playlist import Playlist, PlaylistItem
from signage_api.models.schedule import Schedule, ScheduleDisplay
from signage_api.services import device_auth, storage
from signage_api.services.clock import normalize_instant

KOLKATA = ZoneInfo("Asia/Kolkata")


def at(day: str, clock: str, tz: ZoneInfo = KOLKATA):
    """Normalized time for a local wall-clock reading, e.g. ``at("2025-06-09", "12:00")``."""
    local = datetime.fromisoformat(f"{day}T{clock}").replace(tzinfo=tz)
    return normalize_instant(local, tz)


def make_token(subject: str = "display", expires_in: timedelta = timedelta(days=1), secret: str | None = None) -> str:
    now = datetime.now(timezone.utc)
    payload = {"sub": subject, "iat": now, "exp": now + expires_in}
    return jwt.encode(payload, secret or device_auth.JWT_SECRET, algorithm="HS256")


@pytest.fixture(scope="function")
def engine():
    """In-memory SQLite engine shared across threads for the duration of one test."""
    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    Base.metadata.drop_all(bind=test_engine)
    test_engine.dispose()


@pytest.fixture(scope="function")
def db_session(engine):
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def frozen_now():
    """Monday 2025-06-09 12:00 in Asia/Kolkata; tests may reassign ``frozen_now.value``."""

    class _Clock:
        value = at("2025-06-09", "12:00")

    return _Clock


@pytest.fixture(scope="function")
def client(db_session, frozen_now):
    def _get_db():
        yield db_session

    app.dependency_overrides[player.get_db] = _get_db
    app.dependency_overrides[player.get_current_time] = lambda: frozen_now.value
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def media_root(tmp_path, monkeypatch):
    """Temporary media root that media URLs resolve against."""
    root = tmp_path / "public"
    (root / "uploads").mkdir(parents=True)
    monkeypatch.setattr(storage, "MEDIA_ROOT", str(root))
    return root


@pytest.fixture(scope="function")
def factory(db_session):
    """Small helpers that persist model rows and return them."""

    class Factory:
        @staticmethod
        def media(name="Clip", type="image", url="/uploads/clip.png", **kwargs):
            media = Media(name=name, type=type, url=url, **kwargs)
            db_session.add(media)
            db_session.commit()
            return media

        @staticmethod
        def playlist(name="Playlist", items=(), **kwargs):
            playlist = Playlist(name=name, **kwargs)
            db_session.add(playlist)
            db_session.commit()
            for index, entry in enumerate(items):
                fields = dict(entry)
                fields.setdefault("order", index)
                db_session.add(PlaylistItem(playlist_id=playlist.id, **fields))
            db_session.commit()
            return playlist

        @staticmethod
        def layout(name="Layout", sections=(), **kwargs):
            layout = Layout(name=name, **kwargs)
            db_session.add(layout)
            db_session.commit()
            for index, section_items in enumerate(sections):
                section = LayoutSection(layout_id=layout.id, name=f"Section {index + 1}", order=index)
                db_session.add(section)
                db_session.commit()
                for item_index, entry in enumerate(section_items):
                    fields = dict(entry)
                    fields.setdefault("order", item_index)
                    db_session.add(LayoutSectionItem(section_id=section.id, **fields))
            db_session.commit()
            return layout

        @staticmethod
        def display(name="Display", token=None, **kwargs):
            display = Display(name=name, device_token=token, **kwargs)
            db_session.add(display)
            db_session.commit()
            return display

        @staticmethod
        def schedule(displays=(), **kwargs):
            fields = {
                "name": "Schedule",
                "start_time": "09:00",
                "end_time": "17:00",
                "repeat_days": ["monday"],
                "priority": 1,
                "is_active": True,
            }
            fields.update(kwargs)
            schedule = Schedule(**fields)
            db_session.add(schedule)
            db_session.commit()
            for display in displays:
                db_session.add(ScheduleDisplay(schedule_id=schedule.id, display_id=display.id))
            db_session.commit()
            return schedule

    return Factory
