"""Occupancy models - who is in each room and when the motion sensor fires."""

import logging
import random
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Protocol

from core.models import EnvironmentEvent, Room
from simulation.clock import HourBand, hour_band, is_working_day
from simulation.config import OccupancyModelKind, SimConfig
from simulation.room_state import RoomState

logger = logging.getLogger(__name__)


@dataclass
class OccupancyUpdate:
    """Result of one occupancy step for one room."""

    people: int
    motion: bool
    arrivals: int = 0


# ---------------------------------------------------------------------------
# Probability tables
# ---------------------------------------------------------------------------


def arrival_probability(moment: datetime) -> float:
    """Per-tick chance that a group walks into a room."""
    band = hour_band(moment)
    if not is_working_day(moment):
        return 0.02 if band == HourBand.WORKING else 0.01
    if band == HourBand.NIGHT:
        return 0.01
    if band == HourBand.EVENING:
        return 0.03 if moment.hour == 17 else 0.02
    match moment.hour:
        case 8:
            return 0.15  # morning arrival peak
        case 9 | 10 | 11:
            return 0.10
        case 12:
            return 0.06  # lunch
        case _:
            return 0.08


def redraw_motion_probability(moment: datetime) -> float:
    """Base motion probability of the stateless redraw model."""
    if hour_band(moment) != HourBand.WORKING:
        return 0.05
    hour = moment.hour
    if hour <= 10:
        return 0.3
    if hour <= 12:
        return 0.4
    if hour <= 14:
        return 0.2  # lunch
    return 0.3


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------


class OccupancyModel(Protocol):
    def step(self, room: Room, state: RoomState, now: datetime) -> OccupancyUpdate:
        """Compute the room's headcount and motion flag for this tick."""
        ...


class StayDurationOccupancy:
    """Arrivals join with a stay deadline; once it passes, occupants leave in batches."""

    def __init__(self, rng: random.Random, config: SimConfig) -> None:
        self.rng = rng
        self.config = config

    def step(self, room: Room, state: RoomState, now: datetime) -> OccupancyUpdate:
        cfg = self.config
        people = room.people_count

        if people > 0 and state.stay_until is not None and now >= state.stay_until:
            fraction = self.rng.uniform(cfg.min_departure_fraction, 1.0)
            leaving = min(people, max(1, int(people * fraction)))
            people -= leaving
            if people > 0:
                extension = self.rng.uniform(cfg.departure_extension_min_minutes, cfg.departure_extension_max_minutes)
                state.stay_until = now + timedelta(minutes=extension)
            else:
                state.stay_until = None
            logger.debug("%s: %d left, %d remain", room.id, leaving, people)

        arrivals = 0
        if people < cfg.max_occupants and self.rng.random() < arrival_probability(now):
            arrivals = min(self.rng.randint(cfg.min_arrivals, cfg.max_arrivals), cfg.max_occupants - people)
            people += arrivals
            stay = self.rng.uniform(cfg.arrival_stay_min_minutes, cfg.arrival_stay_max_minutes)
            deadline = now + timedelta(minutes=stay)
            if state.stay_until is None or deadline > state.stay_until:
                state.stay_until = deadline

        if arrivals > 0:
            motion = True
        elif people > 0:
            motion = self.rng.random() < cfg.motion_trigger_probability
        else:
            motion = False
        return OccupancyUpdate(people=people, motion=motion, arrivals=arrivals)


class RedrawOccupancy:
    """Stateless model: each tick either fires motion with 1-4 people or empties the room."""

    def __init__(self, rng: random.Random, config: SimConfig) -> None:
        self.rng = rng
        self.config = config

    def step(self, room: Room, state: RoomState, now: datetime) -> OccupancyUpdate:
        motion = self.rng.random() < redraw_motion_probability(now)
        people = self.rng.randint(1, 4) if motion else 0
        return OccupancyUpdate(people=people, motion=motion, arrivals=people)


def create_occupancy_model(rng: random.Random, config: SimConfig) -> OccupancyModel:
    match config.occupancy_model:
        case OccupancyModelKind.STAY_DURATION:
            return StayDurationOccupancy(rng, config)
        case OccupancyModelKind.REDRAW:
            return RedrawOccupancy(rng, config)


def apply_occupancy(room: Room, update: OccupancyUpdate, now: datetime) -> EnvironmentEvent | None:
    """Write an occupancy update into the room; returns the motion event, if any."""
    room.people_count = max(0, update.people)
    sensor = room.motion_sensor
    sensor.motion_detected = update.motion
    if update.motion:
        sensor.last_motion_time = now
    if update.arrivals <= 0:
        return None
    return EnvironmentEvent(
        type="motion",
        room_id=room.id,
        device_id=sensor.id,
        timestamp=now,
        description=f"Motion detected in {room.name} ({update.arrivals} arriving)",
    )
