import uuid
from datetime import datetime
from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Integer, String
from signage_api.db import Base


class Layout(Base):
    __tablename__ = "layout"
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, nullable=False)
    description = Column(String, nullable=True)
    width = Column(Integer, nullable=False, default=1920)
    height = Column(Integer, nullable=False, default=1080)
    orientation = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)


class LayoutSection(Base):
    __tablename__ = "layout_section"
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    layout_id = Column(String(36), ForeignKey("layout.id"), nullable=False)
    name = Column(String, nullable=False, default="Section")
    order = Column(Integer, nullable=False, default=0)
    # Rectangle in percent of the canvas.
    x = Column(Float, nullable=False, default=0)
    y = Column(Float, nullable=False, default=0)
    width = Column(Float, nullable=False, default=100)
    height = Column(Float, nullable=False, default=100)
    loop_enabled = Column(Boolean, default=True)
    frequency = Column(Integer, nullable=True)


class LayoutSectionItem(Base):
    __tablename__ = "layout_section_item"
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    section_id = Column(String(36), ForeignKey("layout_section.id"), nullable=False)
    media_id = Column(String(36), nullable=True)
    order = Column(Integer, nullable=False, default=0)
    duration = Column(Integer)
    orientation = Column(String, nullable=True)
    resize_mode = Column(String, nullable=True)
    rotation = Column(Integer, nullable=True)
