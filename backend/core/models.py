"""Core data models for the office environment."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum

BROADCAST = "broadcast"


class DeviceState(StrEnum):
    ON = "ON"
    OFF = "OFF"
    BROKEN = "BROKEN"


class BlindState(StrEnum):
    OPEN = "OPEN"
    CLOSED = "CLOSED"


class AlertSeverity(StrEnum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class MessageType(StrEnum):
    REQUEST = "REQUEST"
    INFORM = "INFORM"
    QUERY = "QUERY"
    RESPONSE = "RESPONSE"


# ---------------------------------------------------------------------------
# Devices
# ---------------------------------------------------------------------------


@dataclass
class LightDevice:
    id: str
    room_id: str
    state: DeviceState = DeviceState.OFF
    brightness: int = 100  # 0-100


@dataclass
class PrinterDevice:
    """A printer. ON implies both toner and paper are above zero."""

    id: str
    room_id: str
    state: DeviceState = DeviceState.OFF
    toner_level: int = 100  # 0-100
    paper_level: int = 100  # 0-100

    @property
    def has_resources(self) -> bool:
        return self.toner_level > 0 and self.paper_level > 0


@dataclass
class MotionSensor:
    id: str
    room_id: str
    motion_detected: bool = False
    last_motion_time: datetime | None = None


@dataclass
class TemperatureSensor:
    id: str
    room_id: str
    temperature: float  # °C


@dataclass
class BlindsDevice:
    id: str
    room_id: str
    state: BlindState = BlindState.CLOSED


@dataclass
class Meeting:
    start_time: datetime
    end_time: datetime
    title: str = "Meeting"

    def overlaps(self, start: datetime, end: datetime) -> bool:
        """Half-open interval overlap with [start, end)."""
        return self.start_time < end and start < self.end_time


# ---------------------------------------------------------------------------
# Rooms and the aggregate state
# ---------------------------------------------------------------------------


@dataclass
class Room:
    id: str
    name: str
    lights: list[LightDevice]
    printer: PrinterDevice | None
    motion_sensor: MotionSensor
    temperature_sensor: TemperatureSensor
    blinds: BlindsDevice | None = None
    people_count: int = 0
    scheduled_meetings: list[Meeting] = field(default_factory=list)


@dataclass
class EnvironmentState:
    """Complete snapshot of the simulated office."""

    simulation_time: datetime
    rooms: list[Room]
    external_temperature: float
    time_speed_multiplier: float = 1.0
    power_outage: bool = False
    daylight_intensity: float = 1.0  # 0.0-1.0

    def find_room(self, room_id: str) -> Room | None:
        for room in self.rooms:
            if room.id == room_id:
                return room
        return None


# ---------------------------------------------------------------------------
# Log entries
# ---------------------------------------------------------------------------


@dataclass
class EnvironmentEvent:
    type: str  # "motion", "device_failure", "power_outage", ...
    room_id: str | None
    device_id: str | None
    timestamp: datetime
    description: str


@dataclass
class Alert:
    id: str
    type: str  # "low_toner", "low_paper", "printer_failure", ...
    printer_id: str
    room_id: str | None
    room_name: str | None
    message: str
    timestamp: datetime
    severity: AlertSeverity = AlertSeverity.WARNING


@dataclass
class AgentMessage:
    """Natural-language message exchanged between control agents."""

    id: str
    sender: str
    recipient: str  # agent id or BROADCAST
    type: MessageType
    content: str
    timestamp: datetime
    context: dict[str, str] | None = None

    @property
    def is_broadcast(self) -> bool:
        return self.recipient == BROADCAST


# ---------------------------------------------------------------------------
# Query views
# ---------------------------------------------------------------------------


@dataclass
class RoomTemperature:
    room_id: str
    room_name: str
    temperature: float


@dataclass
class TemperatureSummary:
    external_temperature: float
    rooms: list[RoomTemperature]


@dataclass
class RoomMotion:
    room_id: str
    room_name: str
    motion_detected: bool
    people_count: int
    last_motion_time: datetime | None


@dataclass
class RoomHeating:
    room_id: str
    is_heating: bool


@dataclass
class DeviceInfo:
    id: str
    type: str  # "light", "printer", "blinds"
    room_id: str
    room_name: str
    state: str
    brightness: int | None = None
    toner_level: int | None = None
    paper_level: int | None = None
