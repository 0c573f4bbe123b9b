"""Room state - per-room bookkeeping that is not part of the public snapshot."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class RoomState:
    """Hidden per-room state the tick stages read and update."""

    heating_on: bool = True  # requested heating; inert during a power outage
    stay_until: datetime | None = None  # when the current occupants start leaving
