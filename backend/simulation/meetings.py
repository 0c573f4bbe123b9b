"""Meeting scheduler - slot-based meeting generation over a one-working-day horizon."""

import logging
import random
from datetime import datetime, timedelta

from core.models import Meeting, Room
from simulation.clock import floor_to_slot, one_working_day_forward
from simulation.config import SimConfig

logger = logging.getLogger(__name__)

_MEETING_TITLES: list[str] = [
    "Team sync",
    "Project review",
    "Sprint planning",
    "Client call",
    "Design workshop",
    "One-on-one",
    "Budget meeting",
    "Seminar",
]


class MeetingScheduler:
    """Books 30-minute meetings, deciding each (room, slot) pair exactly once."""

    def __init__(self, rng: random.Random, config: SimConfig) -> None:
        self.rng = rng
        self.config = config
        self._evaluated: dict[str, set[datetime]] = {}

    def booking_probability(self, slot_start: datetime) -> float:
        hour = slot_start.hour
        if 8 <= hour <= 15:
            return self.config.meeting_core_probability
        if 16 <= hour <= 21:
            return self.config.meeting_evening_probability
        return 0.0

    def was_evaluated(self, room_id: str, slot_start: datetime) -> bool:
        return slot_start in self._evaluated.get(room_id, set())

    def evaluated_slots(self, room_id: str) -> set[datetime]:
        return set(self._evaluated.get(room_id, set()))

    def update_room(self, room: Room, now: datetime) -> None:
        """Refresh ``room.scheduled_meetings`` for the horizon starting at ``now``."""
        horizon_end = one_working_day_forward(now)
        slot_length = timedelta(minutes=self.config.meeting_slot_minutes)
        evaluated = set(self._evaluated.get(room.id, set()))

        meetings = [m for m in room.scheduled_meetings if m.end_time > now and m.start_time <= horizon_end]

        slot = floor_to_slot(now, self.config.meeting_slot_minutes)
        booked = 0
        while slot <= horizon_end:
            if slot not in evaluated:
                slot_end = slot + slot_length
                free = not any(m.overlaps(slot, slot_end) for m in meetings)
                if free and self.rng.random() < self.booking_probability(slot):
                    meetings.append(Meeting(start_time=slot, end_time=slot_end, title=self.rng.choice(_MEETING_TITLES)))
                    booked += 1
                evaluated.add(slot)
            slot += slot_length

        cutoff = now - timedelta(days=self.config.evaluated_slot_retention_days)
        evaluated.difference_update({s for s in evaluated if s < cutoff})

        meetings.sort(key=lambda m: m.start_time)
        room.scheduled_meetings = meetings
        self._evaluated[room.id] = evaluated
        if booked:
            logger.debug("%s: booked %d new meetings", room.id, booked)
