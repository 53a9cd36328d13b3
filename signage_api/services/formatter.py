import asyncio
import logging
import os

from signage_api.models.media import Media
from signage_api.services import storage
from signage_api.services.resolver import LoadedItem, LoadedLayout, LoadedPlaylist

logger = logging.getLogger(__name__)

ENRICH_MAX_PARALLEL = max(1, int(os.getenv("SIGNAGE_ENRICH_MAX_PARALLEL", "4")))
ENRICH_TIMEOUT_SEC = float(os.getenv("SIGNAGE_ENRICH_TIMEOUT_SEC", "5"))

DEFAULT_ORIENTATION = "LANDSCAPE"
DEFAULT_RESIZE_MODE = "FIT"
DEFAULT_ROTATION = 0


def apply_item_defaults(item: dict) -> dict:
    output = dict(item)
    if not output.get("orientation"):
        output["orientation"] = DEFAULT_ORIENTATION
    if not output.get("resizeMode"):
        output["resizeMode"] = DEFAULT_RESIZE_MODE
    if output.get("rotation") is None:
        output["rotation"] = DEFAULT_ROTATION
    return output


def _media_payload(media: Media) -> dict:
    return {
        "id": str(media.id),
        "name": media.name,
        "type": media.type,
        "url": media.url,
        "duration": media.duration,
        "mimeType": media.mime_type,
    }


def _read_metadata(url: str | None) -> storage.FileMetadata | None:
    path = storage.media_file_path(url)
    if path is None or not os.path.isfile(path):
        return None
    return storage.file_metadata(path)


def _release_when_done(limiter: asyncio.Semaphore):
    def _done(job: asyncio.Future) -> None:
        limiter.release()
        if not job.cancelled():
            job.exception()

    return _done


async def enrich_media(payload: dict, limiter: asyncio.Semaphore) -> dict:
    """Add ``fileSize`` and ``checksum`` to a media payload.

    Any failure, including the per-item timeout, returns the payload
    unchanged so one bad file never fails the whole response. A read that
    outlives its timeout keeps its limiter slot until the worker thread
    finishes.
    """
    try:
        await asyncio.wait_for(limiter.acquire(), timeout=ENRICH_TIMEOUT_SEC)
        job = asyncio.ensure_future(asyncio.to_thread(_read_metadata, payload.get("url")))
        job.add_done_callback(_release_when_done(limiter))
        metadata = await asyncio.wait_for(asyncio.shield(job), timeout=ENRICH_TIMEOUT_SEC)
    except asyncio.TimeoutError:
        logger.warning("Timed out reading metadata for media %s", payload.get("id"))
        return payload
    except (OSError, ValueError) as exc:
        logger.warning("Could not read metadata for media %s: %s", payload.get("id"), exc)
        return payload
    if metadata is None:
        return payload
    return {**payload, "fileSize": metadata.size, "checksum": metadata.checksum}


async def _format_items(
    loaded: list[LoadedItem],
    limiter: asyncio.Semaphore,
    with_loop_flag: bool,
) -> list[dict]:
    rows: list[dict] = []
    for entry in loaded:
        media = entry.media
        if media is None:
            continue
        if with_loop_flag and not media.url:
            continue
        it = entry.item
        row = {
            "id": str(it.id),
            "order": it.order,
            "duration": it.duration,
            "orientation": it.orientation,
            "resizeMode": it.resize_mode,
            "rotation": it.rotation,
            "media": _media_payload(media),
        }
        if with_loop_flag:
            row["loopVideo"] = it.loop_video is True
        rows.append(apply_item_defaults(row))

    enriched = await asyncio.gather(*(enrich_media(row["media"], limiter) for row in rows))
    for row, media in zip(rows, enriched):
        row["media"] = media
    return rows


async def format_playlist(loaded: LoadedPlaylist, limiter: asyncio.Semaphore | None = None) -> dict:
    limiter = limiter or asyncio.Semaphore(ENRICH_MAX_PARALLEL)
    playlist = loaded.playlist
    return {
        "id": str(playlist.id),
        "name": playlist.name,
        "description": playlist.description,
        "items": await _format_items(loaded.items, limiter, with_loop_flag=True),
    }


async def format_layout(loaded: LoadedLayout, limiter: asyncio.Semaphore | None = None) -> dict:
    limiter = limiter or asyncio.Semaphore(ENRICH_MAX_PARALLEL)
    layout = loaded.layout
    section_items = await asyncio.gather(
        *(_format_items(sec.items, limiter, with_loop_flag=False) for sec in loaded.sections)
    )
    return {
        "id": str(layout.id),
        "name": layout.name,
        "width": layout.width,
        "height": layout.height,
        "orientation": layout.orientation or DEFAULT_ORIENTATION,
        "sections": [
            {
                "id": str(sec.section.id),
                "name": sec.section.name,
                "order": sec.section.order,
                "x": sec.section.x,
                "y": sec.section.y,
                "width": sec.section.width,
                "height": sec.section.height,
                "loopEnabled": sec.section.loop_enabled,
                "frequency": sec.section.frequency,
                "items": items,
            }
            for sec, items in zip(loaded.sections, section_items)
        ],
    }
