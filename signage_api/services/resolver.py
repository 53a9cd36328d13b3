import logging
from dataclasses import dataclass, field

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from signage_api.errors import ResolutionError
from signage_api.models.display import Display
from signage_api.models.layout import Layout, LayoutSection, LayoutSectionItem
from signage_api.models.media import Media
from signage_api.models.playlist import Playlist, PlaylistItem
from signage_api.models.schedule import Schedule, ScheduleDisplay
from signage_api.services.clock import NormalizedTime
from signage_api.services.scheduling import (
    CONTENT_MISSING,
    WINNER,
    ScheduleVerdict,
    explain_schedules,
    filter_eligible,
    pick_winner,
)

logger = logging.getLogger(__name__)


@dataclass
class LoadedItem:
    item: PlaylistItem | LayoutSectionItem
    media: Media | None


@dataclass
class LoadedPlaylist:
    playlist: Playlist
    items: list[LoadedItem] = field(default_factory=list)


@dataclass
class LoadedSection:
    section: LayoutSection
    items: list[LoadedItem] = field(default_factory=list)


@dataclass
class LoadedLayout:
    layout: Layout
    sections: list[LoadedSection] = field(default_factory=list)


@dataclass
class ActiveSchedule:
    schedule: Schedule
    content: LoadedLayout | LoadedPlaylist


@dataclass
class DirectLayout:
    layout: LoadedLayout


@dataclass
class DirectPlaylist:
    playlist: LoadedPlaylist


@dataclass
class NoContent:
    pass


Resolution = ActiveSchedule | DirectLayout | DirectPlaylist | NoContent


def _media_by_id(db: Session, media_ids: set[str]) -> dict[str, Media]:
    if not media_ids:
        return {}
    rows = db.query(Media).filter(Media.id.in_(list(media_ids))).all()
    return {str(row.id): row for row in rows}


def _attach_media(db: Session, items: list) -> list[LoadedItem]:
    media_ids = {str(it.media_id) for it in items if it.media_id}
    media = _media_by_id(db, media_ids)
    return [
        LoadedItem(item=it, media=media.get(str(it.media_id)) if it.media_id else None)
        for it in items
    ]


def load_playlist(db: Session, playlist_id: str | None) -> LoadedPlaylist | None:
    playlist_id = str(playlist_id or "").strip()
    if not playlist_id:
        return None
    playlist = db.get(Playlist, playlist_id)
    if playlist is None:
        return None
    items = (
        db.query(PlaylistItem)
        .filter(PlaylistItem.playlist_id == playlist_id)
        .order_by(PlaylistItem.order.asc(), PlaylistItem.id.asc())
        .all()
    )
    return LoadedPlaylist(playlist=playlist, items=_attach_media(db, items))


def load_layout(db: Session, layout_id: str | None) -> LoadedLayout | None:
    layout_id = str(layout_id or "").strip()
    if not layout_id:
        return None
    layout = db.get(Layout, layout_id)
    if layout is None:
        return None
    sections = (
        db.query(LayoutSection)
        .filter(LayoutSection.layout_id == layout_id)
        .order_by(LayoutSection.order.asc(), LayoutSection.id.asc())
        .all()
    )
    loaded = LoadedLayout(layout=layout)
    for section in sections:
        items = (
            db.query(LayoutSectionItem)
            .filter(LayoutSectionItem.section_id == section.id)
            .order_by(LayoutSectionItem.order.asc(), LayoutSectionItem.id.asc())
            .all()
        )
        loaded.sections.append(LoadedSection(section=section, items=_attach_media(db, items)))
    return loaded


def linked_schedules(db: Session, display_id: str) -> list[Schedule]:
    """Every schedule linked to the display, enabled or not."""
    return (
        db.query(Schedule)
        .join(ScheduleDisplay, ScheduleDisplay.schedule_id == Schedule.id)
        .filter(ScheduleDisplay.display_id == display_id)
        .order_by(Schedule.priority.desc(), Schedule.id.asc())
        .all()
    )


def load_candidate_schedules(db: Session, display_id: str) -> list[Schedule]:
    try:
        return (
            db.query(Schedule)
            .join(ScheduleDisplay, ScheduleDisplay.schedule_id == Schedule.id)
            .filter(
                ScheduleDisplay.display_id == display_id,
                Schedule.is_active.is_(True),
            )
            .all()
        )
    except SQLAlchemyError as exc:
        raise ResolutionError(f"Could not load schedules for display {display_id}") from exc


def _schedule_content(db: Session, schedule: Schedule) -> LoadedLayout | LoadedPlaylist | None:
    # Layout wins when a schedule references both.
    if schedule.layout_id and schedule.playlist_id:
        logger.warning("Schedule %s references both a layout and a playlist; using the layout", schedule.id)
    layout = load_layout(db, schedule.layout_id)
    if layout is not None:
        return layout
    return load_playlist(db, schedule.playlist_id)


def resolve_content(db: Session, display: Display, now: NormalizedTime) -> Resolution:
    """Decide what the display shows at ``now``.

    Tiers, first match wins: active schedule, directly assigned layout,
    directly assigned playlist, nothing. Deleted content referenced by any
    tier is skipped, never reported as an error.
    """
    candidates = load_candidate_schedules(db, str(display.id))
    try:
        winner = pick_winner(filter_eligible(candidates, now))
        if winner is not None:
            content = _schedule_content(db, winner)
            if content is not None:
                return ActiveSchedule(schedule=winner, content=content)
            logger.debug("Schedule %s won but its content no longer exists", winner.id)

        layout = load_layout(db, display.layout_id)
        if layout is not None:
            return DirectLayout(layout=layout)
        if display.layout_id:
            logger.debug("Display %s has a dangling layout %s", display.id, display.layout_id)

        playlist = load_playlist(db, display.playlist_id)
        if playlist is not None:
            return DirectPlaylist(playlist=playlist)
        if display.playlist_id:
            logger.debug("Display %s has a dangling playlist %s", display.id, display.playlist_id)
    except SQLAlchemyError as exc:
        raise ResolutionError(f"Could not resolve content for display {display.id}") from exc

    return NoContent()


def diagnose_display(
    db: Session,
    display: Display,
    now: NormalizedTime,
) -> tuple[Resolution, list[ScheduleVerdict]]:
    """Resolve the display and report why each linked schedule did or did not win."""
    try:
        schedules = linked_schedules(db, str(display.id))
    except SQLAlchemyError as exc:
        raise ResolutionError(f"Could not load schedules for display {display.id}") from exc
    _, verdicts = explain_schedules(schedules, now)
    resolution = resolve_content(db, display, now)
    if not isinstance(resolution, ActiveSchedule):
        for verdict in verdicts:
            if verdict.reason == WINNER:
                verdict.reason = CONTENT_MISSING
    return resolution, verdicts
