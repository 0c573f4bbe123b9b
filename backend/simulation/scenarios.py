"""Simulation scenarios - forced conditions for tests and demos."""

from dataclasses import dataclass

# ---------------------------------------------------------------------------
# Room overrides - pin a room's state
# ---------------------------------------------------------------------------


@dataclass
class ForceOccupancy:
    """Pin the room's headcount; motion is reported whenever people are present."""

    people: int


@dataclass
class ForceTemperature:
    """Pin the room temperature (useful for testing)."""

    temperature: float


@dataclass
class HeatingStuckOff:
    """Heating valve stuck closed - the room behaves as if heating were off."""

    pass


@dataclass
class ExternalTempOverride:
    """Override the external temperature this room relaxes towards."""

    temperature: float


type RoomScenario = ForceOccupancy | ForceTemperature | HeatingStuckOff | ExternalTempOverride


# ---------------------------------------------------------------------------
# Office-wide overrides
# ---------------------------------------------------------------------------


@dataclass
class ForcePowerOutage:
    """Hold the power-outage flag at a fixed value, bypassing the random toggle."""

    active: bool = True


type OfficeScenario = ForcePowerOutage

type Scenario = RoomScenario | OfficeScenario


@dataclass
class ActiveScenario:
    """A scenario applied to a room (or the whole office) with optional tick bounds."""

    scenario: Scenario
    room_id: str | None = None  # None = whole office
    start_tick: int | None = None  # None = always active
    end_tick: int | None = None  # None = no end


def is_scenario_active(active: ActiveScenario, tick: int) -> bool:
    """Check if a scenario is active at the given tick."""
    if active.start_tick is not None and tick < active.start_tick:
        return False
    return not (active.end_tick is not None and tick >= active.end_tick)


def scenarios_by_room(scenarios: list[ActiveScenario], tick: int) -> dict[str | None, list[Scenario]]:
    """Group the scenarios active at ``tick`` by room id (None for office-wide)."""
    grouped: dict[str | None, list[Scenario]] = {}
    for active in scenarios:
        if is_scenario_active(active, tick):
            grouped.setdefault(active.room_id, []).append(active.scenario)
    return grouped
