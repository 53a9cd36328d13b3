"""Window filter and priority arbiter for display schedules.

A schedule is eligible when today's weekday is in its ``repeat_days``, the
calendar date lies within ``[start_date, end_date]`` and the clock lies
within ``[start_time, end_time]``. All bounds are inclusive. Date bounds
are compared as ``YYYY-MM-DD`` strings, so a date-only ``end_date`` covers
its whole day. Windows never wrap past midnight: ``22:00-02:00`` matches
nothing.

Among eligible schedules the highest ``priority`` wins; ties go to the most
recently created schedule, then to the lowest id.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable

from signage_api.models.schedule import Schedule
from signage_api.services.clock import WEEKDAY_NAMES, NormalizedTime, time_to_minutes

logger = logging.getLogger(__name__)

ELIGIBLE = "eligible"
WINNER = "winner"
PRIORITY_LOSS = "priority_loss"
INACTIVE = "inactive"
NO_REPEAT_DAYS = "no_repeat_days"
DAY_MISMATCH = "day_mismatch"
NOT_STARTED = "not_started"
EXPIRED = "expired"
INVALID_TIME = "invalid_time"
OUTSIDE_WINDOW = "outside_window"
# Won arbitration but its layout and playlist are both gone.
CONTENT_MISSING = "content_missing"


@dataclass
class ScheduleVerdict:
    schedule: Schedule
    reason: str

    @property
    def eligible(self) -> bool:
        return self.reason in {ELIGIBLE, WINNER, PRIORITY_LOSS}


def _calendar_day(value) -> str | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    raw = str(value).strip()
    return raw[:10] or None


def _normalized_days(repeat_days) -> set[str]:
    if not repeat_days:
        return set()
    if isinstance(repeat_days, str):
        repeat_days = repeat_days.split(",")
    return {str(day).strip().lower() for day in repeat_days if str(day).strip()}


def repeat_day_names(repeat_days) -> list[str]:
    """Lower-cased day names in week order; unrecognised names follow, sorted."""
    days = _normalized_days(repeat_days)
    return [d for d in WEEKDAY_NAMES if d in days] + sorted(days - set(WEEKDAY_NAMES))


def evaluate_schedule(schedule: Schedule, now: NormalizedTime) -> ScheduleVerdict:
    if not schedule.is_active:
        return ScheduleVerdict(schedule, INACTIVE)

    days = _normalized_days(schedule.repeat_days)
    if not days:
        return ScheduleVerdict(schedule, NO_REPEAT_DAYS)
    if now.day not in days:
        return ScheduleVerdict(schedule, DAY_MISMATCH)

    start_day = _calendar_day(schedule.start_date)
    if start_day is not None and start_day > now.date:
        return ScheduleVerdict(schedule, NOT_STARTED)
    end_day = _calendar_day(schedule.end_date)
    if end_day is not None and now.date > end_day:
        return ScheduleVerdict(schedule, EXPIRED)

    try:
        start_minutes = time_to_minutes(schedule.start_time)
        end_minutes = time_to_minutes(schedule.end_time)
    except ValueError:
        logger.warning(
            "Schedule %s has an unreadable window %r-%r",
            schedule.id,
            schedule.start_time,
            schedule.end_time,
        )
        return ScheduleVerdict(schedule, INVALID_TIME)
    if not (start_minutes <= now.minutes <= end_minutes):
        return ScheduleVerdict(schedule, OUTSIDE_WINDOW)

    return ScheduleVerdict(schedule, ELIGIBLE)


def filter_eligible(schedules: Iterable[Schedule], now: NormalizedTime) -> list[Schedule]:
    return [sc for sc in schedules if evaluate_schedule(sc, now).eligible]


def _arbiter_key(schedule: Schedule) -> tuple:
    created = schedule.created_at
    # Newest first; rows without a timestamp sort after every dated row.
    created_rank = -created.timestamp() if created is not None else float("inf")
    return (-int(schedule.priority or 0), created_rank, str(schedule.id))


def rank_schedules(schedules: Iterable[Schedule]) -> list[Schedule]:
    return sorted(schedules, key=_arbiter_key)


def pick_winner(eligible: Iterable[Schedule]) -> Schedule | None:
    ranked = rank_schedules(eligible)
    return ranked[0] if ranked else None


def explain_schedules(
    schedules: Iterable[Schedule],
    now: NormalizedTime,
) -> tuple[Schedule | None, list[ScheduleVerdict]]:
    """Evaluate every schedule and mark the winner and the priority losers."""
    verdicts = [evaluate_schedule(sc, now) for sc in schedules]
    winner = pick_winner(v.schedule for v in verdicts if v.eligible)
    for verdict in verdicts:
        if not verdict.eligible:
            continue
        verdict.reason = WINNER if verdict.schedule is winner else PRIORITY_LOSS
    return winner, verdicts
