"""Core domain models and command results."""

from core.commands import CommandResult, CommandStatus
from core.models import (
    BROADCAST,
    AgentMessage,
    Alert,
    AlertSeverity,
    BlindsDevice,
    BlindState,
    DeviceInfo,
    DeviceState,
    EnvironmentEvent,
    EnvironmentState,
    LightDevice,
    Meeting,
    MessageType,
    MotionSensor,
    PrinterDevice,
    Room,
    RoomHeating,
    RoomMotion,
    RoomTemperature,
    TemperatureSensor,
    TemperatureSummary,
)
from core.serialization import to_jsonable

__all__ = [
    "BROADCAST",
    "AgentMessage",
    "Alert",
    "AlertSeverity",
    "BlindState",
    "BlindsDevice",
    "CommandResult",
    "CommandStatus",
    "DeviceInfo",
    "DeviceState",
    "EnvironmentEvent",
    "EnvironmentState",
    "LightDevice",
    "Meeting",
    "MessageType",
    "MotionSensor",
    "PrinterDevice",
    "Room",
    "RoomHeating",
    "RoomMotion",
    "RoomTemperature",
    "TemperatureSensor",
    "TemperatureSummary",
    "to_jsonable",
]
