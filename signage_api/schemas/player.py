from pydantic import BaseModel, Field


class MediaOut(BaseModel):
    id: str
    name: str
    type: str
    url: str | None = None
    duration: int | None = None
    mime_type: str | None = Field(default=None, alias="mimeType")
    # Present only when the stored file could be read.
    file_size: int | None = Field(default=None, alias="fileSize")
    checksum: str | None = None

    class Config:
        populate_by_name = True


class ContentItemOut(BaseModel):
    id: str
    order: int
    duration: int | None = None
    orientation: str = "LANDSCAPE"
    resize_mode: str = Field(default="FIT", alias="resizeMode")
    rotation: int = 0
    media: MediaOut

    class Config:
        populate_by_name = True


class PlaylistItemOut(ContentItemOut):
    loop_video: bool = Field(default=False, alias="loopVideo")


class PlaylistOut(BaseModel):
    id: str
    name: str
    description: str | None = None
    items: list[PlaylistItemOut]


class SectionOut(BaseModel):
    id: str
    name: str
    order: int
    x: float
    y: float
    width: float
    height: float
    loop_enabled: bool | None = Field(default=None, alias="loopEnabled")
    frequency: int | None = None
    items: list[ContentItemOut]

    class Config:
        populate_by_name = True


class LayoutOut(BaseModel):
    id: str
    name: str
    width: int
    height: int
    orientation: str = "LANDSCAPE"
    sections: list[SectionOut]


class ActiveScheduleOut(BaseModel):
    id: str
    name: str
    priority: int
    orientation: str = "LANDSCAPE"


class PlayerConfigOut(BaseModel):
    playlist: PlaylistOut | None = None
    layout: LayoutOut | None = None
    active_schedule: ActiveScheduleOut | None = Field(default=None, alias="activeSchedule")

    class Config:
        populate_by_name = True
