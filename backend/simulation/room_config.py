"""Static room configuration - which devices each room is built with."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class RoomConfig:
    """Device layout of a single room."""

    id: str
    name: str
    light_ids: list[str] = field(default_factory=list)
    printer_id: str | None = None
    has_blinds: bool = False

    @property
    def motion_sensor_id(self) -> str:
        return f"sensor_{self.id}"

    @property
    def temperature_sensor_id(self) -> str:
        return f"temp_{self.id}"

    @property
    def blinds_id(self) -> str:
        return f"blinds_{self.id}"
