"""Simulated clock and working-time predicates."""

from datetime import datetime, time, timedelta
from enum import StrEnum

WORKING_HOURS_START = 8
WORKING_HOURS_END = 17  # exclusive
EVENING_END = 22  # exclusive


class HourBand(StrEnum):
    WORKING = "working"  # 08:00-16:59
    EVENING = "evening"  # 17:00-21:59
    NIGHT = "night"


def is_working_day(moment: datetime) -> bool:
    """Monday-Friday."""
    return moment.weekday() < 5


def is_working_hours(moment: datetime) -> bool:
    return WORKING_HOURS_START <= moment.hour < WORKING_HOURS_END


def hour_band(moment: datetime) -> HourBand:
    if is_working_hours(moment):
        return HourBand.WORKING
    if WORKING_HOURS_END <= moment.hour < EVENING_END:
        return HourBand.EVENING
    return HourBand.NIGHT


def next_working_day(day: datetime) -> datetime:
    """First Monday-Friday date strictly after ``day``'s date (at midnight)."""
    candidate = datetime.combine(day.date(), time.min) + timedelta(days=1)
    while not is_working_day(candidate):
        candidate += timedelta(days=1)
    return candidate


def one_working_day_forward(moment: datetime) -> datetime:
    """End (23:59:59) of the next working day after ``moment``.

    Weekdays roll to the following weekday (Friday -> Monday); weekend days
    roll forward to Monday.
    """
    return next_working_day(moment).replace(hour=23, minute=59, second=59)


def floor_to_slot(moment: datetime, slot_minutes: int) -> datetime:
    """Round down to the start of the enclosing slot."""
    minute = moment.minute - moment.minute % slot_minutes
    return moment.replace(minute=minute, second=0, microsecond=0)


class SimClock:
    """Maps tick deltas (scaled by the time-speed multiplier) onto simulated time."""

    def __init__(self, start: datetime | None = None, speed_multiplier: float = 1.0) -> None:
        if speed_multiplier <= 0:
            raise ValueError(f"speed multiplier must be positive, got {speed_multiplier}")
        self.now: datetime = start if start is not None else datetime.now().replace(second=0, microsecond=0)
        self.speed_multiplier = speed_multiplier
        self.tick: int = 0

    def advance(self, delta_minutes: float) -> datetime:
        """Advance by ``delta_minutes`` of wall-clock tick, scaled by the multiplier."""
        self.now += timedelta(minutes=delta_minutes * self.speed_multiplier)
        self.tick += 1
        return self.now
