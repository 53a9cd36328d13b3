import base64
import os
import uuid
from datetime import datetime, timedelta, timezone
import jwt
from sqlalchemy.orm import Session
from signage_api.db import SessionLocal, Base, engine, ensure_sqlite_schema
from signage_api.models.display import Display
from signage_api.models.layout import Layout, LayoutSection, LayoutSectionItem
from signage_api.models.playlist import Playlist, PlaylistItem
from signage_api.models.schedule import Schedule, ScheduleDisplay
from signage_api.models.media import Media
from signage_api.services.clock import WEEKDAY_NAMES
from signage_api.services.device_auth import JWT_ALGORITHMS, JWT_SECRET
from signage_api.services.storage import MEDIA_ROOT

DEVICE_TOKEN_TTL_DAYS = int(os.getenv("SIGNAGE_DEVICE_TOKEN_TTL_DAYS", "365"))


def issue_demo_token(display_id: str) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": display_id,
        "type": "device",
        "jti": str(uuid.uuid4()),
        "iat": now,
        "exp": now + timedelta(days=DEVICE_TOKEN_TTL_DAYS),
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHMS[0])


def seed() -> str:
    Base.metadata.create_all(bind=engine)
    ensure_sqlite_schema(engine)
    db: Session = SessionLocal()
    try:
        os.makedirs(os.path.join(MEDIA_ROOT, "uploads"), exist_ok=True)

        png_bytes = base64.b64decode(
            "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAQAAAC1HAwCAAAAC0lEQVR4nGNgYAAAAAMAASsJTYQAAAAASUVORK5CYII="
        )
        media_entries = []
        for filename, label in [("welcome.png", "Welcome Slide"), ("menu.png", "Lunch Menu")]:
            path = os.path.join(MEDIA_ROOT, "uploads", filename)
            with open(path, "wb") as f:
                f.write(png_bytes)
            media = Media(name=label, type="image", url=f"/uploads/{filename}", duration=10, mime_type="image/png")
            db.add(media)
            media_entries.append(media)
        db.commit()

        playlist = Playlist(name="Default Loop")
        layout = Layout(name="Lunch Split", width=1920, height=1080, orientation="LANDSCAPE")
        db.add(playlist)
        db.add(layout)
        db.commit()

        db.add(PlaylistItem(playlist_id=playlist.id, media_id=media_entries[0].id, order=1, duration=10))
        db.add(PlaylistItem(playlist_id=playlist.id, media_id=media_entries[1].id, order=2, duration=10))

        left = LayoutSection(layout_id=layout.id, name="Left", order=0, x=0, y=0, width=50, height=100)
        right = LayoutSection(layout_id=layout.id, name="Right", order=1, x=50, y=0, width=50, height=100)
        db.add(left)
        db.add(right)
        db.commit()
        db.add(LayoutSectionItem(section_id=left.id, media_id=media_entries[0].id, order=0, duration=15))
        db.add(LayoutSectionItem(section_id=right.id, media_id=media_entries[1].id, order=0, duration=15))

        display = Display(name="Display 1", location="Main Location", playlist_id=playlist.id)
        db.add(display)
        db.commit()
        display.device_token = issue_demo_token(str(display.id))

        lunch = Schedule(
            name="Lunch",
            start_time="11:30",
            end_time="14:00",
            repeat_days=list(WEEKDAY_NAMES[:5]),
            priority=5,
            layout_id=layout.id,
        )
        db.add(lunch)
        db.commit()
        db.add(ScheduleDisplay(schedule_id=lunch.id, display_id=display.id))
        db.commit()
        return display.device_token
    finally:
        db.close()


if __name__ == "__main__":
    print(seed())
