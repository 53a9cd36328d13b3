import uuid
from datetime import datetime
from sqlalchemy import JSON, Boolean, Column, Date, DateTime, ForeignKey, Integer, String, UniqueConstraint
from signage_api.db import Base

class Schedule(Base):
    __tablename__ = "schedule"
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, nullable=False)
    description = Column(String, nullable=True)
    start_time = Column(String(5), nullable=False)  # HH:MM
    end_time = Column(String(5), nullable=False)  # HH:MM
    repeat_days = Column(JSON, nullable=False, default=list)  # ["monday", "tuesday", ...]
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    priority = Column(Integer, nullable=False, default=1)
    is_active = Column(Boolean, nullable=False, default=True)
    orientation = Column(String, nullable=True)
    playlist_id = Column(String(36), nullable=True)
    layout_id = Column(String(36), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class ScheduleDisplay(Base):
    __tablename__ = "schedule_display"
    __table_args__ = (UniqueConstraint("schedule_id", "display_id", name="ux_schedule_display"),)

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    schedule_id = Column(String(36), ForeignKey("schedule.id"), nullable=False, index=True)
    display_id = Column(String(36), ForeignKey("display.id"), nullable=False, index=True)
