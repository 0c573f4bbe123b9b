"""Sample office layout used by the default engine."""

from simulation.room_config import RoomConfig


def create_sample_office() -> list[RoomConfig]:
    """Three lecture rooms and one office; three of the four have a printer."""
    return [
        RoomConfig(
            id="room_208",
            name="Room 208",
            light_ids=["light_208_1", "light_208_2"],
            printer_id="printer_208",
            has_blinds=True,
        ),
        RoomConfig(
            id="room_209",
            name="Room 209",
            light_ids=["light_209_1"],
            printer_id="printer_209",
            has_blinds=True,
        ),
        RoomConfig(
            id="room_210",
            name="Room 210",
            light_ids=["light_210_1", "light_210_2", "light_210_3"],
            has_blinds=False,
        ),
        RoomConfig(
            id="office_101",
            name="Office 101",
            light_ids=["light_101_1"],
            printer_id="printer_101",
            has_blinds=True,
        ),
    ]


DEFAULT_ROOMS = create_sample_office()
