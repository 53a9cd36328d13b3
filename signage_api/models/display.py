import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime
from signage_api.db import Base

class Display(Base):
    __tablename__ = "display"
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, nullable=False)
    location = Column(String)
    # Stored verbatim after pairing; bearer tokens are high-entropy, not passwords.
    device_token = Column(String, nullable=True, unique=True, index=True)
    # No FK constraints: the referenced content may be deleted while still assigned.
    layout_id = Column(String(36), nullable=True)
    playlist_id = Column(String(36), nullable=True)
    orientation = Column(String, default="LANDSCAPE")
    status = Column(String, default="offline")
    last_seen = Column(DateTime)
    created_at = Column(DateTime, default=datetime.utcnow)
