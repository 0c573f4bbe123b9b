"""Office simulator - the per-tick update pipeline plus queries and control commands.

One ``OfficeSimulator`` owns the whole mutable office. Every public method
takes the same lock, so a tick, a command and a query never interleave, and
queries hand out deep copies that later ticks cannot touch.
"""

import copy
import logging
import random
import threading
import uuid
from collections.abc import Callable
from datetime import datetime, timedelta

from core.commands import CommandResult
from core.models import (
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
from simulation import devices
from simulation.clock import SimClock
from simulation.config import DEFAULT, SimConfig
from simulation.devices import PrinterLedger, PrinterResource
from simulation.environment import MacroEventRoller, update_room_temperature
from simulation.logs import AlertLog, EventLog, MessageLog
from simulation.meetings import MeetingScheduler
from simulation.occupancy import OccupancyUpdate, apply_occupancy, create_occupancy_model
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
    scenarios_by_room,
)

logger = logging.getLogger(__name__)

type RoomStage = Callable[[Room, list[Scenario]], list[EnvironmentEvent]]


class OfficeSimulator:
    """Simulated multi-room office driven by ``update`` once per tick."""

    def __init__(
        self,
        rooms: list[RoomConfig],
        config: SimConfig = DEFAULT,
        seed: int | None = None,
        start_time: datetime | None = None,
    ) -> None:
        self.config = config
        self._lock = threading.RLock()
        self._rng = random.Random(seed)
        self._clock = SimClock(start_time, config.time_speed_multiplier)

        self._room_configs = list(rooms)
        self._room_states: dict[str, RoomState] = {rc.id: RoomState() for rc in rooms}
        self._ledger = PrinterLedger()

        self._events = EventLog()
        self._alerts = AlertLog(config.alert_capacity)
        self._messages = MessageLog(config.message_capacity)

        self._occupancy = create_occupancy_model(self._rng, config)
        self._macro_events = MacroEventRoller(self._rng, config)
        self._meetings = MeetingScheduler(self._rng, config)

        self.scenarios: list[ActiveScenario] = []
        self._state = self._create_initial_state()

    def _create_initial_state(self) -> EnvironmentState:
        cfg = self.config
        rooms: list[Room] = []
        for rc in self._room_configs:
            printer = None
            if rc.printer_id is not None:
                printer = PrinterDevice(
                    id=rc.printer_id,
                    room_id=rc.id,
                    toner_level=self._rng.randint(cfg.initial_resource_min, cfg.initial_resource_max),
                    paper_level=self._rng.randint(cfg.initial_resource_min, cfg.initial_resource_max),
                )
            rooms.append(
                Room(
                    id=rc.id,
                    name=rc.name,
                    lights=[LightDevice(id=light_id, room_id=rc.id) for light_id in rc.light_ids],
                    printer=printer,
                    motion_sensor=MotionSensor(id=rc.motion_sensor_id, room_id=rc.id),
                    temperature_sensor=TemperatureSensor(
                        id=rc.temperature_sensor_id,
                        room_id=rc.id,
                        temperature=self._rng.uniform(cfg.initial_room_temp_min_c, cfg.initial_room_temp_max_c),
                    ),
                    blinds=BlindsDevice(id=rc.blinds_id, room_id=rc.id) if rc.has_blinds else None,
                )
            )
        return EnvironmentState(
            simulation_time=self._clock.now,
            rooms=rooms,
            external_temperature=cfg.initial_external_temp_c,
            time_speed_multiplier=self._clock.speed_multiplier,
        )

    # ------------------------------------------------------------------
    # Tick pipeline
    # ------------------------------------------------------------------

    def update(self, delta_minutes: float = 1.0) -> None:
        """Advance the simulation by one tick of ``delta_minutes`` (before the speed multiplier)."""
        with self._lock:
            now = self._clock.advance(delta_minutes)
            self._state.simulation_time = now
            self._state.time_speed_multiplier = self._clock.speed_multiplier
            grouped = scenarios_by_room(self.scenarios, self._clock.tick)
            events_before = len(self._events)

            self._run_room_stage("occupancy", self._occupancy_stage, grouped)
            self._run_room_stage("temperature", self._temperature_stage, grouped)
            self._run_room_stage("failures", self._failure_stage, grouped)
            self._run_office_stage("macro_events", lambda: self._macro_event_stage(grouped.get(None, [])))
            self._run_room_stage("device_states", self._device_state_stage, grouped)
            self._run_room_stage("replenishment", self._replenishment_stage, grouped)
            self._run_room_stage("meetings", self._meeting_stage, grouped)

            logger.debug(
                "Tick %d at %s: %d new events",
                self._clock.tick,
                now.isoformat(timespec="minutes"),
                len(self._events) - events_before,
            )

    def _run_room_stage(self, name: str, stage: RoomStage, grouped: dict[str | None, list[Scenario]]) -> None:
        """Run a stage room by room; a room whose step raises keeps its last-good value."""
        for index, room in enumerate(self._state.rooms):
            candidate = copy.deepcopy(room)
            saved_state = copy.deepcopy(self._room_states[room.id])
            try:
                events = stage(candidate, grouped.get(room.id, []))
            except Exception:
                logger.exception("Stage %s failed for room %s", name, room.id)
                self._room_states[room.id] = saved_state
                continue
            self._state.rooms[index] = candidate
            self._events.extend(events)

    def _run_office_stage(self, name: str, stage: Callable[[], list[EnvironmentEvent]]) -> None:
        state = self._state
        saved = (state.external_temperature, state.daylight_intensity, state.power_outage)
        try:
            events = stage()
        except Exception:
            logger.exception("Stage %s failed", name)
            state.external_temperature, state.daylight_intensity, state.power_outage = saved
            return
        self._events.extend(events)

    def _occupancy_stage(self, room: Room, scenarios: list[Scenario]) -> list[EnvironmentEvent]:
        now = self._clock.now
        update: OccupancyUpdate | None = None
        for scenario in scenarios:
            match scenario:
                case ForceOccupancy(people=people):
                    update = OccupancyUpdate(people=people, motion=people > 0)
                    self._room_states[room.id].stay_until = self._forced_stay_deadline(people, now)
                case _:
                    pass
        if update is None:
            update = self._occupancy.step(room, self._room_states[room.id], now)
        event = apply_occupancy(room, update, now)
        return [event] if event is not None else []

    def _forced_stay_deadline(self, people: int, now: datetime) -> datetime | None:
        """Forced occupants get the shortest arrival stay once the override lifts."""
        if people <= 0:
            return None
        return now + timedelta(minutes=self.config.arrival_stay_min_minutes)

    def _temperature_stage(self, room: Room, scenarios: list[Scenario]) -> list[EnvironmentEvent]:
        cfg = self.config
        external = self._state.external_temperature
        for scenario in scenarios:
            match scenario:
                case ForceTemperature(temperature=temp):
                    room.temperature_sensor.temperature = max(cfg.room_temp_min_c, min(cfg.room_temp_max_c, temp))
                    return []
                case ExternalTempOverride(temperature=temp):
                    external = temp
                case _:
                    pass
        heating = self._heating_active(room.id, scenarios)
        update_room_temperature(room, external, heating, self._rng, cfg)
        return []

    def _heating_active(self, room_id: str, scenarios: list[Scenario]) -> bool:
        if self._state.power_outage:
            return False
        if any(isinstance(s, HeatingStuckOff) for s in scenarios):
            return False
        return self._room_states[room_id].heating_on

    def _failure_stage(self, room: Room, scenarios: list[Scenario]) -> list[EnvironmentEvent]:
        return devices.inject_failures(room, self._rng, self.config, self._clock.now)

    def _macro_event_stage(self, office_scenarios: list[Scenario]) -> list[EnvironmentEvent]:
        forced: bool | None = None
        for scenario in office_scenarios:
            match scenario:
                case ForcePowerOutage(active=active):
                    forced = active
                case _:
                    pass
        return self._macro_events.roll(self._state, self._clock.now, forced_outage=forced)

    def _device_state_stage(self, room: Room, scenarios: list[Scenario]) -> list[EnvironmentEvent]:
        now = self._clock.now
        outage = self._state.power_outage
        events: list[EnvironmentEvent] = []
        if self.config.printer_consumption:
            events.extend(devices.consume_printer_resources(room, self._ledger, self._rng, self.config, now, outage))
        events.extend(devices.derive_device_states(room, outage, self.config, now))
        return events

    def _replenishment_stage(self, room: Room, scenarios: list[Scenario]) -> list[EnvironmentEvent]:
        return devices.replenish_printer(room, self._ledger, self.config, self._clock.now)

    def _meeting_stage(self, room: Room, scenarios: list[Scenario]) -> list[EnvironmentEvent]:
        self._meetings.update_room(room, self._clock.now)
        return []

    # ------------------------------------------------------------------
    # Scenarios
    # ------------------------------------------------------------------

    def add_scenario(
        self,
        scenario: Scenario,
        room_id: str | None = None,
        start_tick: int | None = None,
        end_tick: int | None = None,
    ) -> None:
        """Add a scenario to the simulation (``room_id=None`` for office-wide ones)."""
        with self._lock:
            self.scenarios.append(
                ActiveScenario(scenario=scenario, room_id=room_id, start_tick=start_tick, end_tick=end_tick)
            )

    def clear_scenarios(self, room_id: str | None = None) -> None:
        """Clear scenarios, optionally for a specific room only."""
        with self._lock:
            if room_id is None:
                self.scenarios.clear()
            else:
                self.scenarios = [s for s in self.scenarios if s.room_id != room_id]

    # ------------------------------------------------------------------
    # Lookups (caller holds the lock)
    # ------------------------------------------------------------------

    def _find_light(self, light_id: str) -> LightDevice | None:
        for room in self._state.rooms:
            for light in room.lights:
                if light.id == light_id:
                    return light
        return None

    def _find_printer(self, printer_id: str) -> tuple[Room, PrinterDevice] | None:
        for room in self._state.rooms:
            if room.printer is not None and room.printer.id == printer_id:
                return room, room.printer
        return None

    def _find_blinds(self, blinds_id: str) -> BlindsDevice | None:
        for room in self._state.rooms:
            if room.blinds is not None and room.blinds.id == blinds_id:
                return room.blinds
        return None

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def now(self) -> datetime:
        with self._lock:
            return self._clock.now

    @property
    def tick(self) -> int:
        with self._lock:
            return self._clock.tick

    def get_state(self) -> EnvironmentState:
        with self._lock:
            return copy.deepcopy(self._state)

    def get_events(self) -> list[EnvironmentEvent]:
        with self._lock:
            return copy.deepcopy(self._events.all())

    def get_room(self, room_id: str) -> Room | None:
        with self._lock:
            return copy.deepcopy(self._state.find_room(room_id))

    def get_temperatures(self) -> TemperatureSummary:
        with self._lock:
            return TemperatureSummary(
                external_temperature=self._state.external_temperature,
                rooms=[
                    RoomTemperature(room_id=r.id, room_name=r.name, temperature=r.temperature_sensor.temperature)
                    for r in self._state.rooms
                ],
            )

    def get_motion(self) -> list[RoomMotion]:
        with self._lock:
            return [
                RoomMotion(
                    room_id=r.id,
                    room_name=r.name,
                    motion_detected=r.motion_sensor.motion_detected,
                    people_count=r.people_count,
                    last_motion_time=r.motion_sensor.last_motion_time,
                )
                for r in self._state.rooms
            ]

    def get_devices(self) -> list[DeviceInfo]:
        """Every light, printer and blinds device as one flat list."""
        with self._lock:
            result: list[DeviceInfo] = []
            for room in self._state.rooms:
                for light in room.lights:
                    result.append(
                        DeviceInfo(
                            id=light.id,
                            type="light",
                            room_id=room.id,
                            room_name=room.name,
                            state=light.state.value,
                            brightness=light.brightness,
                        )
                    )
                if room.printer is not None:
                    result.append(
                        DeviceInfo(
                            id=room.printer.id,
                            type="printer",
                            room_id=room.id,
                            room_name=room.name,
                            state=room.printer.state.value,
                            toner_level=room.printer.toner_level,
                            paper_level=room.printer.paper_level,
                        )
                    )
                if room.blinds is not None:
                    result.append(
                        DeviceInfo(
                            id=room.blinds.id,
                            type="blinds",
                            room_id=room.id,
                            room_name=room.name,
                            state=room.blinds.state.value,
                        )
                    )
            return result

    def get_light(self, light_id: str) -> LightDevice | None:
        with self._lock:
            return copy.deepcopy(self._find_light(light_id))

    def get_printer(self, printer_id: str) -> PrinterDevice | None:
        with self._lock:
            found = self._find_printer(printer_id)
            return copy.deepcopy(found[1]) if found is not None else None

    def get_blinds(self, blinds_id: str) -> BlindsDevice | None:
        with self._lock:
            return copy.deepcopy(self._find_blinds(blinds_id))

    def get_heating(self, room_id: str | None = None) -> list[RoomHeating]:
        """Effective heating per room; an outage or a stuck valve reads as off."""
        with self._lock:
            grouped = scenarios_by_room(self.scenarios, self._clock.tick)
            return [
                RoomHeating(room_id=r.id, is_heating=self._heating_active(r.id, grouped.get(r.id, [])))
                for r in self._state.rooms
                if room_id is None or r.id == room_id
            ]

    def get_depletion_time(self, printer_id: str, resource: PrinterResource) -> datetime | None:
        with self._lock:
            return self._ledger.depletion_time(printer_id, resource)

    def get_alerts(self) -> list[Alert]:
        with self._lock:
            return copy.deepcopy(self._alerts.all())

    def get_messages(
        self,
        recipient: str | None = None,
        sender: str | None = None,
        include_broadcast: bool = True,
        after: datetime | None = None,
    ) -> list[AgentMessage]:
        """Filtered agent messages; an aware ``after`` is compared in local time."""
        if after is not None and after.tzinfo is not None:
            after = after.astimezone().replace(tzinfo=None)
        with self._lock:
            return copy.deepcopy(self._messages.query(recipient, sender, include_broadcast, after))

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def set_external_temperature(self, temperature: float) -> CommandResult:
        cfg = self.config
        with self._lock:
            self._state.external_temperature = max(cfg.external_temp_min_c, min(cfg.external_temp_max_c, temperature))
            return CommandResult.ok(f"External temperature set to {self._state.external_temperature:.1f}°C")

    def set_heating(self, on: bool, room_id: str | None = None) -> CommandResult:
        """Switch heating for one room, or for every room when ``room_id`` is None."""
        with self._lock:
            if room_id is None:
                for state in self._room_states.values():
                    state.heating_on = on
                target = "all rooms"
            elif room_id in self._room_states:
                self._room_states[room_id].heating_on = on
                target = room_id
            else:
                return CommandResult.not_found(f"Room {room_id} not found")
            suffix = " (inactive until power returns)" if on and self._state.power_outage else ""
            return CommandResult.ok(f"Heating {'on' if on else 'off'} for {target}{suffix}")

    def set_time_speed_multiplier(self, multiplier: float) -> CommandResult:
        with self._lock:
            if multiplier <= 0:
                return CommandResult.rejected(f"Time speed multiplier must be positive, got {multiplier}")
            self._clock.speed_multiplier = multiplier
            self._state.time_speed_multiplier = multiplier
            return CommandResult.ok(f"Time speed multiplier set to {multiplier}")

    def set_light_state(self, light_id: str, state: DeviceState) -> CommandResult:
        with self._lock:
            light = self._find_light(light_id)
            if light is None:
                return CommandResult.not_found(f"Light {light_id} not found")
            return devices.set_light_state(light, state, self._state.power_outage)

    def set_light_brightness(self, light_id: str, brightness: int) -> CommandResult:
        with self._lock:
            light = self._find_light(light_id)
            if light is None:
                return CommandResult.not_found(f"Light {light_id} not found")
            return devices.set_light_brightness(light, brightness)

    def set_blinds_state(self, blinds_id: str, state: BlindState) -> CommandResult:
        with self._lock:
            blinds = self._find_blinds(blinds_id)
            if blinds is None:
                return CommandResult.not_found(f"Blinds {blinds_id} not found")
            return devices.set_blinds_state(blinds, state)

    def set_printer_state(self, printer_id: str, state: DeviceState) -> CommandResult:
        with self._lock:
            found = self._find_printer(printer_id)
            if found is None:
                return CommandResult.not_found(f"Printer {printer_id} not found")
            _, printer = found
            match state:
                case DeviceState.ON:
                    return devices.turn_on_printer(printer, self._state.power_outage)
                case DeviceState.OFF:
                    return devices.turn_off_printer(printer)
                case DeviceState.BROKEN:
                    return CommandResult.rejected("Printers cannot be broken on command")

    def set_printer_level(self, printer_id: str, resource: PrinterResource, level: int) -> CommandResult:
        with self._lock:
            found = self._find_printer(printer_id)
            if found is None:
                return CommandResult.not_found(f"Printer {printer_id} not found")
            room, printer = found
            events = devices.set_resource_level(room, printer, resource, level, self._ledger, self._clock.now)
            self._events.extend(events)
            new_level = printer.toner_level if resource == PrinterResource.TONER else printer.paper_level
            return CommandResult.ok(f"Printer {printer_id} {resource} set to {new_level}%")

    def set_printer_toner(self, printer_id: str, level: int) -> CommandResult:
        return self.set_printer_level(printer_id, PrinterResource.TONER, level)

    def set_printer_paper(self, printer_id: str, level: int) -> CommandResult:
        return self.set_printer_level(printer_id, PrinterResource.PAPER, level)

    def repair_device(self, device_id: str) -> CommandResult:
        """Return a broken light or printer to OFF."""
        with self._lock:
            device: LightDevice | PrinterDevice | None = self._find_light(device_id)
            if device is None:
                found = self._find_printer(device_id)
                device = found[1] if found is not None else None
            if device is None:
                return CommandResult.not_found(f"Device {device_id} not found")
            return devices.repair_device(device)

    def add_alert(
        self,
        alert_type: str,
        printer_id: str,
        message: str,
        severity: AlertSeverity = AlertSeverity.WARNING,
        room_id: str | None = None,
        room_name: str | None = None,
    ) -> CommandResult:
        """Append an alert; room details are filled in from the printer when omitted."""
        with self._lock:
            found = self._find_printer(printer_id)
            if found is not None:
                room = found[0]
                room_id = room_id or room.id
                room_name = room_name or room.name
            alert = Alert(
                id=str(uuid.uuid4()),
                type=alert_type,
                printer_id=printer_id,
                room_id=room_id,
                room_name=room_name,
                message=message,
                timestamp=self._clock.now,
                severity=severity,
            )
            self._alerts.append(alert)
            return CommandResult.ok("Alert added", created_id=alert.id)

    def add_message(
        self,
        sender: str,
        recipient: str,
        message_type: MessageType,
        content: str,
        context: dict[str, str] | None = None,
    ) -> CommandResult:
        with self._lock:
            message = AgentMessage(
                id=str(uuid.uuid4()),
                sender=sender,
                recipient=recipient,
                type=message_type,
                content=content,
                timestamp=self._clock.now,
                context=dict(context) if context is not None else None,
            )
            self._messages.append(message)
            return CommandResult.ok("Message sent", created_id=message.id)

    def clear_events(self) -> CommandResult:
        with self._lock:
            self._events.clear()
            return CommandResult.ok("Events cleared")

    def clear_alerts(self) -> CommandResult:
        with self._lock:
            self._alerts.clear()
            return CommandResult.ok("Alerts cleared")

    def clear_messages(self) -> CommandResult:
        with self._lock:
            self._messages.clear()
            return CommandResult.ok("Messages cleared")
