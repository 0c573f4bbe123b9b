"""Integration tests for the office simulator: tick pipeline, scenarios, queries and commands."""

from datetime import UTC, datetime, timedelta

import pytest

import simulation.engine as engine_module
from core.commands import CommandStatus
from core.models import AlertSeverity, BlindState, DeviceState, EnvironmentState, MessageType
from data.sample_office import create_sample_office
from simulation.config import SimConfig
from simulation.devices import PrinterResource
from simulation.engine import OfficeSimulator
from simulation.scenarios import (
    ExternalTempOverride,
    ForceOccupancy,
    ForcePowerOutage,
    ForceTemperature,
    HeatingStuckOff,
)

START = datetime(2025, 1, 15, 7, 0)  # Wednesday

QUIET = SimConfig(
    failure_probability=0.0,
    power_failure_probability=0.0,
    external_temp_jump_probability=0.0,
    daylight_change_probability=0.0,
)


def make_engine(config: SimConfig = QUIET, seed: int = 7) -> OfficeSimulator:
    return OfficeSimulator(create_sample_office(), config=config, seed=seed, start_time=START)


def run(engine: OfficeSimulator, ticks: int) -> None:
    for _ in range(ticks):
        engine.update()


def check_invariants(state: EnvironmentState, cfg: SimConfig) -> None:
    for room in state.rooms:
        assert cfg.room_temp_min_c <= room.temperature_sensor.temperature <= cfg.room_temp_max_c
        assert 0 <= room.people_count <= cfg.max_occupants
        if state.power_outage:
            assert all(light.state != DeviceState.ON for light in room.lights)
        if room.printer is not None:
            assert 0 <= room.printer.toner_level <= 100
            assert 0 <= room.printer.paper_level <= 100
            if room.printer.state == DeviceState.ON:
                assert room.printer.has_resources
                assert not state.power_outage
        meetings = room.scheduled_meetings
        for earlier, later in zip(meetings, meetings[1:], strict=False):
            assert earlier.end_time <= later.start_time


# ---------------------------------------------------------------------------
# Initial state
# ---------------------------------------------------------------------------


def test_initial_state() -> None:
    engine = make_engine()
    state = engine.get_state()

    assert state.simulation_time == START
    assert engine.tick == 0
    assert state.external_temperature == 15.0
    assert not state.power_outage
    assert state.daylight_intensity == 1.0
    assert [r.id for r in state.rooms] == ["room_208", "room_209", "room_210", "office_101"]

    for room in state.rooms:
        assert 18.0 <= room.temperature_sensor.temperature <= 22.0
        assert room.people_count == 0
        assert all(light.state == DeviceState.OFF and light.brightness == 100 for light in room.lights)
        if room.blinds is not None:
            assert room.blinds.state == BlindState.CLOSED
        if room.printer is not None:
            assert room.printer.state == DeviceState.OFF
            assert 50 <= room.printer.toner_level <= 100
            assert 50 <= room.printer.paper_level <= 100

    assert len(engine.get_devices()) == 13
    assert engine.get_events() == []


def test_update_advances_the_clock() -> None:
    engine = make_engine()
    run(engine, 3)
    assert engine.tick == 3
    assert engine.now == START + timedelta(minutes=3)
    assert engine.get_state().simulation_time == engine.now


def test_same_seed_same_history() -> None:
    first, second = make_engine(seed=3), make_engine(seed=3)
    run(first, 120)
    run(second, 120)
    assert first.get_state() == second.get_state()
    assert first.get_events() == second.get_events()


def test_invariants_hold_under_stress() -> None:
    cfg = SimConfig(
        failure_probability=0.6,
        power_failure_probability=0.05,
        power_restore_probability=0.2,
        motion_driven_lights=True,
        printer_consumption=True,
    )
    engine = make_engine(cfg, seed=11)
    for _ in range(600):
        for printer_id in ("printer_208", "printer_209", "printer_101"):
            engine.set_printer_state(printer_id, DeviceState.ON)
        engine.update()
        check_invariants(engine.get_state(), cfg)

    timestamps = [e.timestamp for e in engine.get_events()]
    assert timestamps == sorted(timestamps)


# ---------------------------------------------------------------------------
# Printers
# ---------------------------------------------------------------------------


def test_printer_runs_until_toner_is_gone() -> None:
    engine = make_engine()
    engine.set_printer_paper("printer_208", 50)
    assert engine.set_printer_toner("printer_208", 1).success
    assert engine.set_printer_state("printer_208", DeviceState.ON).success

    engine.set_printer_toner("printer_208", 0)
    printer = engine.get_printer("printer_208")
    assert printer is not None
    assert printer.state == DeviceState.OFF
    assert engine.get_depletion_time("printer_208", PrinterResource.TONER) == engine.now
    assert "printer_auto_off" in [e.type for e in engine.get_events()]

    result = engine.set_printer_state("printer_208", DeviceState.ON)
    assert result.status == CommandStatus.REJECTED


def test_printer_levels_are_clamped() -> None:
    engine = make_engine()
    engine.set_printer_toner("printer_209", 250)
    engine.set_printer_paper("printer_209", -10)
    printer = engine.get_printer("printer_209")
    assert printer is not None
    assert printer.toner_level == 100
    assert printer.paper_level == 0


def test_printers_cannot_be_broken_on_command() -> None:
    engine = make_engine()
    assert engine.set_printer_state("printer_101", DeviceState.BROKEN).status == CommandStatus.REJECTED


def test_depleted_printer_is_replenished_once_someone_is_around() -> None:
    engine = make_engine()
    engine.add_scenario(ForceOccupancy(people=0), room_id="room_208")
    engine.set_printer_toner("printer_208", 0)

    run(engine, 70)
    printer = engine.get_printer("printer_208")
    assert printer is not None and printer.toner_level == 0

    engine.clear_scenarios("room_208")
    engine.add_scenario(ForceOccupancy(people=2), room_id="room_208")
    engine.update()

    printer = engine.get_printer("printer_208")
    assert printer is not None and printer.toner_level == 100
    assert engine.get_depletion_time("printer_208", PrinterResource.TONER) is None
    assert "printer_replenished" in [e.type for e in engine.get_events()]


# ---------------------------------------------------------------------------
# Scenarios
# ---------------------------------------------------------------------------


def test_power_outage_switches_lights_off_for_good() -> None:
    engine = make_engine()
    assert engine.set_light_state("light_208_1", DeviceState.ON).success

    engine.add_scenario(ForcePowerOutage(active=True))
    engine.update()
    state = engine.get_state()
    assert state.power_outage
    light = engine.get_light("light_208_1")
    assert light is not None and light.state == DeviceState.OFF
    assert engine.set_light_state("light_208_1", DeviceState.ON).status == CommandStatus.REJECTED
    assert engine.set_printer_state("printer_209", DeviceState.ON).status == CommandStatus.REJECTED
    assert not any(h.is_heating for h in engine.get_heating())

    engine.clear_scenarios()
    engine.add_scenario(ForcePowerOutage(active=False))
    engine.update()
    assert not engine.get_state().power_outage
    light = engine.get_light("light_208_1")
    assert light is not None and light.state == DeviceState.OFF
    assert any(h.is_heating for h in engine.get_heating())

    types = [e.type for e in engine.get_events()]
    assert types.index("power_outage") < types.index("power_restored")


def test_scenario_tick_window() -> None:
    engine = make_engine()
    engine.add_scenario(ForceOccupancy(people=5), room_id="room_210", start_tick=3, end_tick=5)

    run(engine, 3)
    room = engine.get_room("room_210")
    assert room is not None
    assert room.people_count == 5
    assert room.motion_sensor.motion_detected
    assert room.motion_sensor.last_motion_time == engine.now

    engine.update()  # tick 4
    room = engine.get_room("room_210")
    assert room is not None and room.people_count == 5
    assert [s.end_tick for s in engine.scenarios] == [5]


def test_forced_temperature_is_clamped() -> None:
    engine = make_engine()
    engine.add_scenario(ForceTemperature(temperature=40.0), room_id="room_210")
    engine.update()
    assert engine.get_temperatures().rooms[2].temperature == 28.0


def test_heating_off_lets_rooms_cool() -> None:
    engine = make_engine()
    before = {r.room_id: r.temperature for r in engine.get_temperatures().rooms}
    assert engine.set_heating(False).success

    run(engine, 30)
    after = {r.room_id: r.temperature for r in engine.get_temperatures().rooms}
    for room_id, temperature in after.items():
        assert temperature <= before[room_id]
    assert not any(h.is_heating for h in engine.get_heating())


def test_stuck_heating_and_external_override() -> None:
    engine = make_engine()
    engine.add_scenario(HeatingStuckOff(), room_id="room_209")
    engine.add_scenario(ExternalTempOverride(temperature=-10.0), room_id="room_209")

    assert engine.get_heating("room_209")[0].is_heating is False
    assert engine.get_heating("room_208")[0].is_heating is True

    before = engine.get_temperatures().rooms[1].temperature
    run(engine, 10)
    assert engine.get_temperatures().rooms[1].temperature < before


# ---------------------------------------------------------------------------
# Stage containment and snapshots
# ---------------------------------------------------------------------------


def test_failing_stage_keeps_last_good_room(monkeypatch: pytest.MonkeyPatch) -> None:
    engine = make_engine()
    original = engine_module.update_room_temperature

    def flaky(room, *args, **kwargs):
        if room.id == "room_209":
            raise RuntimeError("sensor exploded")
        return original(room, *args, **kwargs)

    monkeypatch.setattr(engine_module, "update_room_temperature", flaky)
    before = engine.get_room("room_209")
    assert before is not None

    engine.update()

    after = engine.get_room("room_209")
    assert after is not None
    assert after.temperature_sensor.temperature == before.temperature_sensor.temperature
    assert engine.tick == 1
    # later stages still ran for the same room
    assert engine._meetings.evaluated_slots("room_209")


def test_snapshots_are_isolated() -> None:
    engine = make_engine()
    snapshot = engine.get_state()
    snapshot.rooms[0].people_count = 99
    snapshot.rooms[0].lights[0].state = DeviceState.BROKEN

    fresh = engine.get_state()
    assert fresh.rooms[0].people_count == 0
    assert fresh.rooms[0].lights[0].state == DeviceState.OFF

    run(engine, 5)
    assert snapshot.simulation_time == START


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def test_unknown_ids_are_not_found() -> None:
    engine = make_engine()
    assert engine.set_light_state("light_999", DeviceState.ON).status == CommandStatus.NOT_FOUND
    assert engine.set_light_brightness("light_999", 50).status == CommandStatus.NOT_FOUND
    assert engine.set_blinds_state("blinds_room_210", BlindState.OPEN).status == CommandStatus.NOT_FOUND
    assert engine.set_printer_state("printer_210", DeviceState.ON).status == CommandStatus.NOT_FOUND
    assert engine.set_printer_toner("printer_210", 50).status == CommandStatus.NOT_FOUND
    assert engine.set_heating(True, "room_999").status == CommandStatus.NOT_FOUND
    assert engine.repair_device("light_999").status == CommandStatus.NOT_FOUND
    assert engine.get_room("room_999") is None
    assert engine.get_light("light_999") is None
    assert engine.get_printer("printer_210") is None


def test_light_and_blinds_commands() -> None:
    engine = make_engine()
    assert engine.set_light_brightness("light_210_2", 35).success
    assert engine.set_blinds_state("blinds_room_208", BlindState.OPEN).success

    light = engine.get_light("light_210_2")
    blinds = engine.get_blinds("blinds_room_208")
    assert light is not None and light.brightness == 35
    assert blinds is not None and blinds.state == BlindState.OPEN


def test_repair_broken_light() -> None:
    engine = make_engine(SimConfig(failure_probability=60.0, power_failure_probability=0.0))
    engine.update()
    light = engine.get_light("light_101_1")
    assert light is not None and light.state == DeviceState.BROKEN
    assert engine.set_light_state("light_101_1", DeviceState.ON).status == CommandStatus.REJECTED

    assert engine.repair_device("light_101_1").success
    light = engine.get_light("light_101_1")
    assert light is not None and light.state == DeviceState.OFF
    assert engine.repair_device("light_101_1").status == CommandStatus.REJECTED


def test_external_temperature_and_speed() -> None:
    engine = make_engine()
    engine.set_external_temperature(50.0)
    assert engine.get_temperatures().external_temperature == 35.0

    assert engine.set_time_speed_multiplier(0).status == CommandStatus.REJECTED
    assert engine.set_time_speed_multiplier(2.5).success
    engine.update()
    assert engine.now == START + timedelta(minutes=2.5)
    assert engine.get_state().time_speed_multiplier == 2.5


def test_alerts() -> None:
    engine = make_engine(SimConfig(alert_capacity=3))
    result = engine.add_alert("low_toner", "printer_208", "Toner below 10%")
    assert result.success and result.created_id

    alert = engine.get_alerts()[0]
    assert alert.id == result.created_id
    assert alert.room_id == "room_208"
    assert alert.room_name == "Room 208"
    assert alert.severity == AlertSeverity.WARNING
    assert alert.timestamp == engine.now

    engine.add_alert("custom", "printer_x", "Unknown printer", severity=AlertSeverity.ERROR)
    assert engine.get_alerts()[1].room_id is None

    for n in range(3):
        engine.add_alert("low_paper", "printer_209", f"Paper alert {n}")
    alerts = engine.get_alerts()
    assert len(alerts) == 3
    assert alerts[0].message == "Paper alert 0"

    engine.clear_alerts()
    assert engine.get_alerts() == []


def test_messages() -> None:
    engine = make_engine()
    engine.add_message("lights", "printers", MessageType.REQUEST, "Status?", {"room": "room_208"})
    engine.update()
    engine.add_message("printers", "broadcast", MessageType.INFORM, "All good")

    assert [m.content for m in engine.get_messages(recipient="printers")] == ["Status?", "All good"]
    assert [m.content for m in engine.get_messages(recipient="printers", include_broadcast=False)] == ["Status?"]
    assert [m.content for m in engine.get_messages(after=START)] == ["All good"]
    assert engine.get_messages(sender="lights")[0].context == {"room": "room_208"}

    engine.clear_messages()
    assert engine.get_messages() == []


def test_clear_events() -> None:
    engine = make_engine()
    engine.set_printer_state("printer_208", DeviceState.ON)
    engine.set_printer_paper("printer_208", 0)
    assert engine.get_events()
    engine.clear_events()
    assert engine.get_events() == []


def test_failed_occupancy_step_keeps_stay_deadlines(monkeypatch: pytest.MonkeyPatch) -> None:
    engine = make_engine()

    def half_done(room, state, now):
        state.stay_until = now + timedelta(hours=1)
        raise RuntimeError("occupancy model crashed")

    monkeypatch.setattr(engine._occupancy, "step", half_done)
    engine.update()

    assert all(state.stay_until is None for state in engine._room_states.values())
    assert all(m.people_count == 0 for m in engine.get_motion())


def test_forced_occupants_get_a_stay_deadline() -> None:
    engine = make_engine()
    engine.add_scenario(ForceOccupancy(people=3), room_id="room_210", end_tick=2)
    engine.add_scenario(ForceOccupancy(people=0), room_id="room_208", end_tick=2)
    engine.update()

    assert engine._room_states["room_210"].stay_until == engine.now + timedelta(minutes=30)
    assert engine._room_states["room_208"].stay_until is None


def test_aware_after_filter() -> None:
    engine = make_engine()
    engine.add_message("lights", "printers", MessageType.INFORM, "hello")

    assert len(engine.get_messages(after=datetime(2000, 1, 1, tzinfo=UTC))) == 1
    assert engine.get_messages(after=datetime(2100, 1, 1, tzinfo=UTC)) == []
