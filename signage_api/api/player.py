import asyncio
import logging

from fastapi import APIRouter, Depends, Header, HTTPException
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from signage_api.db import SessionLocal
from signage_api.errors import DeviceAuthError
from signage_api.models.display import Display
from signage_api.models.layout import Layout
from signage_api.models.playlist import Playlist
from signage_api.models.schedule import Schedule
from signage_api.schemas.player import PlayerConfigOut
from signage_api.services.clock import NormalizedTime, current_time
from signage_api.services.device_auth import authenticate_device
from signage_api.services.formatter import ENRICH_MAX_PARALLEL, format_layout, format_playlist
from signage_api.services.resolver import (
    ActiveSchedule,
    DirectLayout,
    DirectPlaylist,
    LoadedLayout,
    NoContent,
    Resolution,
    diagnose_display,
    resolve_content,
)
from signage_api.services.scheduling import repeat_day_names

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/player", tags=["player"])

UNAUTHORIZED = "Unauthorized"


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_current_time() -> NormalizedTime:
    return current_time()


def _authenticate(db: Session, authorization: str | None) -> Display:
    try:
        return authenticate_device(db, authorization)
    except DeviceAuthError as exc:
        logger.info("Rejected player request: %s", exc)
        raise HTTPException(status_code=401, detail=UNAUTHORIZED) from exc


def _schedule_summary(schedule: Schedule) -> dict:
    return {
        "id": str(schedule.id),
        "name": schedule.name,
        "priority": schedule.priority,
        "orientation": schedule.orientation or "LANDSCAPE",
    }


def _content_label(schedule: Schedule, names: dict[str, str]) -> str:
    if schedule.layout_id and str(schedule.layout_id) in names:
        return f"Layout: {names[str(schedule.layout_id)]}"
    if schedule.playlist_id and str(schedule.playlist_id) in names:
        return f"Playlist: {names[str(schedule.playlist_id)]}"
    return "No content"


def _resolved_via(resolution: Resolution) -> str:
    match resolution:
        case ActiveSchedule():
            return "schedule"
        case DirectLayout():
            return "layout"
        case DirectPlaylist():
            return "playlist"
        case NoContent():
            return "none"


async def build_player_config(resolution: Resolution) -> dict:
    limiter = asyncio.Semaphore(ENRICH_MAX_PARALLEL)
    match resolution:
        case ActiveSchedule(schedule=schedule, content=content):
            summary = _schedule_summary(schedule)
            if isinstance(content, LoadedLayout):
                return {"playlist": None, "layout": await format_layout(content, limiter), "activeSchedule": summary}
            return {"playlist": await format_playlist(content, limiter), "layout": None, "activeSchedule": summary}
        case DirectLayout(layout=layout):
            return {"playlist": None, "layout": await format_layout(layout, limiter), "activeSchedule": None}
        case DirectPlaylist(playlist=playlist):
            return {"playlist": await format_playlist(playlist, limiter), "layout": None, "activeSchedule": None}
        case NoContent():
            return {"playlist": None, "layout": None, "activeSchedule": None}
    raise TypeError(f"Unknown resolution {resolution!r}")


@router.get("/config", response_model=PlayerConfigOut, response_model_exclude_unset=True)
async def player_config(
    authorization: str | None = Header(default=None),
    now: NormalizedTime = Depends(get_current_time),
    db: Session = Depends(get_db),
):
    display = await run_in_threadpool(_authenticate, db, authorization)
    try:
        resolution = await run_in_threadpool(resolve_content, db, display, now)
        return await build_player_config(resolution)
    except Exception as exc:
        logger.exception("Player config failed for display %s", display.id)
        raise HTTPException(status_code=500, detail="Failed to load config") from exc


def _debug_payload(db: Session, display: Display, now: NormalizedTime) -> dict:
    resolution, verdicts = diagnose_display(db, display, now)

    content_ids = set()
    for verdict in verdicts:
        if verdict.schedule.playlist_id:
            content_ids.add(str(verdict.schedule.playlist_id))
        if verdict.schedule.layout_id:
            content_ids.add(str(verdict.schedule.layout_id))
    names = _content_names(db, content_ids)

    winner = resolution.schedule if isinstance(resolution, ActiveSchedule) else None
    return {
        "display": {
            "id": str(display.id),
            "name": display.name,
            "assignedPlaylist": display.playlist_id,
            "assignedLayout": display.layout_id,
            "status": display.status,
            "lastSeen": display.last_seen.isoformat() if display.last_seen else None,
        },
        "currentTime": now.clock,
        "currentDay": now.day,
        "currentDate": now.date,
        "timezone": now.timezone,
        "allSchedules": [
            {
                "id": str(v.schedule.id),
                "name": v.schedule.name,
                "startTime": v.schedule.start_time,
                "endTime": v.schedule.end_time,
                "repeatDays": repeat_day_names(v.schedule.repeat_days),
                "startDate": v.schedule.start_date.isoformat() if v.schedule.start_date else None,
                "endDate": v.schedule.end_date.isoformat() if v.schedule.end_date else None,
                "isActive": bool(v.schedule.is_active),
                "priority": v.schedule.priority,
                "content": _content_label(v.schedule, names),
                "reason": v.reason,
            }
            for v in verdicts
        ],
        "activeSchedule": (
            {**_schedule_summary(winner), "content": _content_label(winner, names)}
            if winner is not None
            else None
        ),
        "resolvedVia": _resolved_via(resolution),
    }


def _content_names(db: Session, content_ids: set[str]) -> dict[str, str]:
    if not content_ids:
        return {}
    names: dict[str, str] = {}
    for model in (Playlist, Layout):
        for row in db.query(model.id, model.name).filter(model.id.in_(list(content_ids))).all():
            names[str(row[0])] = row[1]
    return names


@router.get("/debug")
async def player_debug(
    authorization: str | None = Header(default=None),
    now: NormalizedTime = Depends(get_current_time),
    db: Session = Depends(get_db),
):
    display = await run_in_threadpool(_authenticate, db, authorization)
    try:
        return await run_in_threadpool(_debug_payload, db, display, now)
    except Exception as exc:
        logger.exception("Player debug failed for display %s", display.id)
        raise HTTPException(status_code=500, detail="Failed to get debug info") from exc
