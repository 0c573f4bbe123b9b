"""Environmental model - room temperatures, daylight, external weather and power."""

import logging
import random
from dataclasses import dataclass
from datetime import datetime

from core.models import EnvironmentEvent, EnvironmentState, Room
from simulation.config import SimConfig

logger = logging.getLogger(__name__)


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


# ---------------------------------------------------------------------------
# Temperature relaxation
# ---------------------------------------------------------------------------


def next_room_temperature(
    current: float,
    external: float,
    heating: bool,
    rng: random.Random,
    cfg: SimConfig,
) -> float:
    """One relaxation step of a room temperature.

    With heating the room moves towards the heating target, noise pointing the
    same way as the adjustment. Without heating the room can only cool: towards
    the external temperature, or by a small drift once it is already below it.
    """
    if heating:
        adjustment = (cfg.heating_target_c - current) * cfg.heating_coefficient
        noise = rng.uniform(0.0, cfg.heating_noise_c)
        if adjustment < 0:
            noise = -noise
        elif adjustment == 0:
            noise = 0.0
        new_temp = current + adjustment + noise
    elif current > external:
        cooling = (current - external) * cfg.cooling_coefficient + rng.uniform(0.0, cfg.cooling_noise_c)
        new_temp = current - min(cooling, current - external)
    else:
        new_temp = current - rng.uniform(0.0, cfg.below_external_drift_c)
    return _clamp(new_temp, cfg.room_temp_min_c, cfg.room_temp_max_c)


def update_room_temperature(
    room: Room,
    external: float,
    heating: bool,
    rng: random.Random,
    cfg: SimConfig,
) -> None:
    sensor = room.temperature_sensor
    sensor.temperature = next_room_temperature(sensor.temperature, external, heating, rng, cfg)


# ---------------------------------------------------------------------------
# Macro events
# ---------------------------------------------------------------------------


@dataclass
class MacroEventRoller:
    """Random walk of external temperature and daylight plus the power on/off toggle."""

    rng: random.Random
    config: SimConfig

    def roll(
        self,
        state: EnvironmentState,
        now: datetime,
        forced_outage: bool | None = None,
    ) -> list[EnvironmentEvent]:
        """Mutate ``state`` in place and return the events that happened."""
        cfg = self.config
        events: list[EnvironmentEvent] = []

        if self.rng.random() < cfg.external_temp_jump_probability:
            jump = self.rng.uniform(cfg.external_temp_jump_min_c, cfg.external_temp_jump_max_c)
            state.external_temperature = _clamp(
                state.external_temperature + jump, cfg.external_temp_min_c, cfg.external_temp_max_c
            )
            events.append(
                _office_event(
                    "temperature_spike",
                    now,
                    f"Sudden external temperature change to {state.external_temperature:.1f}°C",
                )
            )

        if self.rng.random() < cfg.daylight_change_probability:
            state.daylight_intensity = self.rng.uniform(cfg.daylight_min, cfg.daylight_max)
            events.append(
                _office_event(
                    "daylight_change",
                    now,
                    f"Daylight intensity changed to {state.daylight_intensity * 100:.1f}%",
                )
            )

        if forced_outage is not None:
            outage = forced_outage
        elif not state.power_outage:
            outage = self.rng.random() < cfg.power_failure_probability
        else:
            outage = self.rng.random() >= cfg.power_restore_probability

        if outage and not state.power_outage:
            logger.info("Power outage at %s", now.isoformat(timespec="minutes"))
            events.append(_office_event("power_outage", now, "Power outage"))
        elif not outage and state.power_outage:
            logger.info("Power restored at %s", now.isoformat(timespec="minutes"))
            events.append(_office_event("power_restored", now, "Power restored"))
        state.power_outage = outage

        return events


def _office_event(event_type: str, now: datetime, description: str) -> EnvironmentEvent:
    return EnvironmentEvent(type=event_type, room_id=None, device_id=None, timestamp=now, description=description)
