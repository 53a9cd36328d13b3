import logging
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)

SIGNAGE_TIMEZONE = (os.getenv("SIGNAGE_TIMEZONE", "Asia/Kolkata") or "").strip() or "UTC"

WEEKDAY_NAMES = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


def _load_zone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown timezone %r, schedules will be evaluated in UTC", name)
        return ZoneInfo("UTC")


_SIGNAGE_TZ = _load_zone(SIGNAGE_TIMEZONE)


@dataclass(frozen=True)
class NormalizedTime:
    """One reading of the clock, expressed in the signage timezone.

    Every component of a resolution call receives the same instance so
    that no two schedules are evaluated against different instants.
    """

    day: str  # lower-case weekday name
    clock: str  # HH:MM
    date: str  # YYYY-MM-DD
    instant: datetime  # aware, UTC
    timezone: str

    @property
    def minutes(self) -> int:
        return time_to_minutes(self.clock)


def normalize_instant(instant: datetime, tz: ZoneInfo | None = None) -> NormalizedTime:
    zone = tz or _SIGNAGE_TZ
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    local = instant.astimezone(zone)
    return NormalizedTime(
        day=WEEKDAY_NAMES[local.weekday()],
        clock=local.strftime("%H:%M"),
        date=local.strftime("%Y-%m-%d"),
        instant=instant.astimezone(timezone.utc),
        timezone=str(zone.key),
    )


def current_time() -> NormalizedTime:
    return normalize_instant(datetime.now(timezone.utc))


def time_to_minutes(value: str) -> int:
    """Convert ``HH:MM`` (seconds are tolerated and ignored) to minutes since midnight."""
    raw = (value or "").strip()
    parts = raw.split(":")
    if len(parts) not in (2, 3):
        raise ValueError(f"Invalid clock value: {value!r}")
    try:
        hour = int(parts[0])
        minute = int(parts[1])
    except ValueError as exc:
        raise ValueError(f"Invalid clock value: {value!r}") from exc
    if hour < 0 or hour > 23 or minute < 0 or minute > 59:
        raise ValueError(f"Clock value out of range: {value!r}")
    return hour * 60 + minute


def minutes_to_time(minutes: int) -> str:
    hours, mins = divmod(int(minutes), 60)
    return f"{hours:02d}:{mins:02d}"
