"""Simulation module - the office engine, its stages and the tick driver."""

from simulation.clock import HourBand, SimClock, hour_band, is_working_day, is_working_hours, one_working_day_forward
from simulation.config import DEFAULT as DEFAULT_SIM_CONFIG
from simulation.config import OccupancyModelKind, SimConfig
from simulation.devices import PrinterLedger, PrinterResource
from simulation.driver import TickDriver
from simulation.engine import OfficeSimulator
from simulation.logs import AlertLog, EventLog, MessageLog
from simulation.meetings import MeetingScheduler
from simulation.occupancy import OccupancyModel, RedrawOccupancy, StayDurationOccupancy
from simulation.room_config import RoomConfig
from simulation.room_state import RoomState
from simulation.scenarios import (
    ActiveScenario,
    ExternalTempOverride,
    ForceOccupancy,
    ForcePowerOutage,
    ForceTemperature,
    HeatingStuckOff,
    Scenario,
)

__all__ = [
    "DEFAULT_SIM_CONFIG",
    "ActiveScenario",
    "AlertLog",
    "EventLog",
    "ExternalTempOverride",
    "ForceOccupancy",
    "ForcePowerOutage",
    "ForceTemperature",
    "HeatingStuckOff",
    "HourBand",
    "MeetingScheduler",
    "MessageLog",
    "OccupancyModel",
    "OccupancyModelKind",
    "OfficeSimulator",
    "PrinterLedger",
    "PrinterResource",
    "RedrawOccupancy",
    "RoomConfig",
    "RoomState",
    "Scenario",
    "SimClock",
    "SimConfig",
    "StayDurationOccupancy",
    "TickDriver",
    "hour_band",
    "is_working_day",
    "is_working_hours",
    "one_working_day_forward",
]
