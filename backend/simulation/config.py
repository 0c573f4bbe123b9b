"""Centralised simulation tunables.

Every magic number that controls the office simulation lives here.
Create a custom ``SimConfig`` to tweak values for testing::

    cfg = SimConfig(failure_probability=0.0, power_failure_probability=0.0)
    engine = OfficeSimulator(DEFAULT_ROOMS, config=cfg, seed=1)
"""

from dataclasses import dataclass
from enum import StrEnum


class OccupancyModelKind(StrEnum):
    STAY_DURATION = "stay_duration"  # arrivals/departures with stay deadlines
    REDRAW = "redraw"  # headcount redrawn from scratch every tick


@dataclass(frozen=True)
class SimConfig:
    """All simulation tunables, grouped by category."""

    # --- Tick timing ---
    time_speed_multiplier: float = 1.0

    # --- Occupancy ---
    occupancy_model: OccupancyModelKind = OccupancyModelKind.STAY_DURATION
    max_occupants: int = 8
    min_arrivals: int = 1
    max_arrivals: int = 3
    arrival_stay_min_minutes: float = 30.0
    arrival_stay_max_minutes: float = 180.0
    departure_extension_min_minutes: float = 5.0
    departure_extension_max_minutes: float = 15.0
    min_departure_fraction: float = 0.5
    motion_trigger_probability: float = 0.3  # per tick while people are present

    # --- Temperature ---
    heating_target_c: float = 22.0
    heating_coefficient: float = 0.1
    heating_noise_c: float = 0.5
    cooling_coefficient: float = 0.05
    cooling_noise_c: float = 0.2
    below_external_drift_c: float = 0.05
    room_temp_min_c: float = 15.0
    room_temp_max_c: float = 28.0
    initial_external_temp_c: float = 15.0
    initial_room_temp_min_c: float = 18.0
    initial_room_temp_max_c: float = 22.0

    # --- Macro events ---
    external_temp_jump_probability: float = 0.01
    external_temp_jump_min_c: float = -5.0
    external_temp_jump_max_c: float = 10.0
    external_temp_min_c: float = -10.0
    external_temp_max_c: float = 35.0
    daylight_change_probability: float = 0.02
    daylight_min: float = 0.3
    daylight_max: float = 1.0
    power_failure_probability: float = 0.005
    power_restore_probability: float = 0.1

    # --- Device failures ---
    failure_probability: float = 0.01  # divided by 60 for the per-tick rate

    # --- Lights ---
    motion_driven_lights: bool = False  # False: lights belong to an external controller

    # --- Printers ---
    printer_consumption: bool = False  # False: levels change only through explicit calls
    initial_resource_min: int = 50
    initial_resource_max: int = 100
    toner_use_occupied: tuple[float, float] = (0.5, 1.5)  # % per tick
    paper_use_occupied: tuple[float, float] = (1.0, 2.5)
    toner_use_empty: tuple[float, float] = (0.15, 0.45)
    paper_use_empty: tuple[float, float] = (0.3, 0.75)
    replenish_delay_minutes: float = 60.0

    # --- Meetings ---
    meeting_slot_minutes: int = 30
    meeting_core_probability: float = 0.5  # hours 8-15
    meeting_evening_probability: float = 0.2  # hours 16-21
    evaluated_slot_retention_days: float = 2.0

    # --- Logs ---
    alert_capacity: int = 100
    message_capacity: int = 200


DEFAULT = SimConfig()
