"""Process settings, read once from environment variables (and ``.env``)."""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from simulation.config import OccupancyModelKind


@dataclass(frozen=True)
class Settings:
    tick_interval_s: float = 1.0  # real seconds between ticks
    delta_minutes: float = 1.0  # simulated minutes per tick, before the multiplier
    time_speed_multiplier: float = 1.0
    failure_probability: float = 0.01
    occupancy_model: OccupancyModelKind = OccupancyModelKind.STAY_DURATION
    motion_driven_lights: bool = False
    printer_consumption: bool = False
    seed: int | None = None
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8080


def _flag(name: str, default: bool) -> bool:
    return os.getenv(name, str(default)).lower() in ("1", "true", "yes")


def load_settings() -> Settings:
    """Load settings from environment variables with defaults."""
    load_dotenv()
    seed = os.getenv("OFFICESIM_SEED")
    return Settings(
        tick_interval_s=float(os.getenv("OFFICESIM_TICK_INTERVAL_S", str(Settings.tick_interval_s))),
        delta_minutes=float(os.getenv("OFFICESIM_DELTA_MINUTES", str(Settings.delta_minutes))),
        time_speed_multiplier=float(os.getenv("OFFICESIM_SPEED", str(Settings.time_speed_multiplier))),
        failure_probability=float(os.getenv("OFFICESIM_FAILURE_PROBABILITY", str(Settings.failure_probability))),
        occupancy_model=OccupancyModelKind(os.getenv("OFFICESIM_OCCUPANCY_MODEL", Settings.occupancy_model.value)),
        motion_driven_lights=_flag("OFFICESIM_MOTION_LIGHTS", Settings.motion_driven_lights),
        printer_consumption=_flag("OFFICESIM_PRINTER_CONSUMPTION", Settings.printer_consumption),
        seed=int(seed) if seed else None,
        log_level=os.getenv("OFFICESIM_LOG_LEVEL", Settings.log_level).upper(),
        host=os.getenv("OFFICESIM_HOST", Settings.host),
        port=int(os.getenv("OFFICESIM_PORT", str(Settings.port))),
    )
