"""Device lifecycle - failures, derived device states and printer resources."""

import logging
import random
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import StrEnum

from core.commands import CommandResult
from core.models import (
    BlindsDevice,
    BlindState,
    DeviceState,
    EnvironmentEvent,
    LightDevice,
    PrinterDevice,
    Room,
)
from simulation.config import SimConfig

logger = logging.getLogger(__name__)


class PrinterResource(StrEnum):
    TONER = "toner"
    PAPER = "paper"


def clamp_level(level: int) -> int:
    """Percentages are integers in [0, 100]; out-of-range input is clamped."""
    return max(0, min(100, int(level)))


def _level(printer: PrinterDevice, resource: PrinterResource) -> int:
    match resource:
        case PrinterResource.TONER:
            return printer.toner_level
        case PrinterResource.PAPER:
            return printer.paper_level


def _write_level(printer: PrinterDevice, resource: PrinterResource, level: int) -> None:
    match resource:
        case PrinterResource.TONER:
            printer.toner_level = level
        case PrinterResource.PAPER:
            printer.paper_level = level


@dataclass
class PrinterLedger:
    """Side tables keyed by printer id: depletion timestamps and fractional consumption."""

    depleted_at: dict[PrinterResource, dict[str, datetime]] = field(
        default_factory=lambda: {resource: {} for resource in PrinterResource}
    )
    carry: dict[tuple[str, PrinterResource], float] = field(default_factory=dict)

    def depletion_time(self, printer_id: str, resource: PrinterResource) -> datetime | None:
        return self.depleted_at[resource].get(printer_id)

    def forget(self, printer_id: str, resource: PrinterResource) -> None:
        self.depleted_at[resource].pop(printer_id, None)


# ---------------------------------------------------------------------------
# Printer resources
# ---------------------------------------------------------------------------


def _auto_off_event(room: Room, printer: PrinterDevice, now: datetime, reason: str) -> EnvironmentEvent:
    logger.info("Printer %s forced off: %s", printer.id, reason)
    return EnvironmentEvent(
        type="printer_auto_off",
        room_id=room.id,
        device_id=printer.id,
        timestamp=now,
        description=f"Printer {printer.id} in {room.name} switched off: {reason}",
    )


def set_resource_level(
    room: Room,
    printer: PrinterDevice,
    resource: PrinterResource,
    level: int,
    ledger: PrinterLedger,
    now: datetime,
) -> list[EnvironmentEvent]:
    """Set a resource level, keeping the depletion table and the ON invariant in step."""
    previous = _level(printer, resource)
    level = clamp_level(level)
    _write_level(printer, resource, level)

    if level == 0 and previous > 0:
        ledger.depleted_at[resource][printer.id] = now
    elif level > 0:
        ledger.forget(printer.id, resource)

    if printer.state == DeviceState.ON and not printer.has_resources:
        printer.state = DeviceState.OFF
        return [_auto_off_event(room, printer, now, f"{resource} depleted")]
    return []


def turn_on_printer(printer: PrinterDevice, power_outage: bool) -> CommandResult:
    if printer.state == DeviceState.BROKEN:
        return CommandResult.rejected(f"Printer {printer.id} is broken")
    if power_outage:
        return CommandResult.rejected("Cannot turn on printer during a power outage")
    if not printer.has_resources:
        return CommandResult.rejected(
            f"Printer {printer.id} lacks resources (toner={printer.toner_level}%, paper={printer.paper_level}%)"
        )
    printer.state = DeviceState.ON
    return CommandResult.ok(f"Printer {printer.id} turned on")


def turn_off_printer(printer: PrinterDevice) -> CommandResult:
    if printer.state == DeviceState.ON:
        printer.state = DeviceState.OFF
    return CommandResult.ok(f"Printer {printer.id} turned off")


def consume_printer_resources(
    room: Room,
    ledger: PrinterLedger,
    rng: random.Random,
    cfg: SimConfig,
    now: datetime,
    power_outage: bool,
) -> list[EnvironmentEvent]:
    """Engine-driven usage of a running printer; heavier while the room is occupied."""
    printer = room.printer
    if printer is None or printer.state != DeviceState.ON or power_outage or not printer.has_resources:
        return []

    if room.people_count > 0:
        rates = {PrinterResource.TONER: cfg.toner_use_occupied, PrinterResource.PAPER: cfg.paper_use_occupied}
    else:
        rates = {PrinterResource.TONER: cfg.toner_use_empty, PrinterResource.PAPER: cfg.paper_use_empty}

    # both resources are charged for the tick once the printer qualifies
    used = {resource: rng.uniform(*bounds) for resource, bounds in rates.items()}

    events: list[EnvironmentEvent] = []
    for resource, amount in used.items():
        key = (printer.id, resource)
        total = ledger.carry.get(key, 0.0) + amount
        whole = int(total)
        ledger.carry[key] = total - whole
        if whole > 0:
            level = _level(printer, resource) - whole
            events.extend(set_resource_level(room, printer, resource, level, ledger, now))
    return events


def replenish_printer(room: Room, ledger: PrinterLedger, cfg: SimConfig, now: datetime) -> list[EnvironmentEvent]:
    """Refill depleted resources once an hour has passed and someone is in the room."""
    printer = room.printer
    if printer is None:
        return []

    events: list[EnvironmentEvent] = []
    for resource in PrinterResource:
        depleted_at = ledger.depletion_time(printer.id, resource)
        if depleted_at is None or _level(printer, resource) > 0:
            continue
        if now - depleted_at < timedelta(minutes=cfg.replenish_delay_minutes):
            continue
        if room.people_count <= 0:
            continue
        set_resource_level(room, printer, resource, 100, ledger, now)
        logger.info("Printer %s %s replenished", printer.id, resource)
        events.append(
            EnvironmentEvent(
                type="printer_replenished",
                room_id=room.id,
                device_id=printer.id,
                timestamp=now,
                description=f"{resource.capitalize()} replenished in printer {printer.id} ({room.name})",
            )
        )
    return events


# ---------------------------------------------------------------------------
# Failures and derived states
# ---------------------------------------------------------------------------


def _failure_event(room: Room, device_id: str, now: datetime, what: str) -> EnvironmentEvent:
    return EnvironmentEvent(
        type="device_failure",
        room_id=room.id,
        device_id=device_id,
        timestamp=now,
        description=f"{what} {device_id} failed in {room.name}",
    )


def inject_failures(room: Room, rng: random.Random, cfg: SimConfig, now: datetime) -> list[EnvironmentEvent]:
    """Break lights and printers, and silence motion sensors, at random."""
    per_tick = cfg.failure_probability / 60.0
    events: list[EnvironmentEvent] = []

    for light in room.lights:
        if light.state != DeviceState.BROKEN and rng.random() < per_tick:
            light.state = DeviceState.BROKEN
            events.append(_failure_event(room, light.id, now, "Light"))

    printer = room.printer
    if printer is not None and printer.state != DeviceState.BROKEN and rng.random() < per_tick:
        printer.state = DeviceState.BROKEN
        events.append(_failure_event(room, printer.id, now, "Printer"))

    if rng.random() < per_tick / 2:
        room.motion_sensor.motion_detected = False
        events.append(_failure_event(room, room.motion_sensor.id, now, "Motion sensor"))

    return events


def derive_device_states(room: Room, power_outage: bool, cfg: SimConfig, now: datetime) -> list[EnvironmentEvent]:
    """Force devices into states consistent with power, breakage and resources."""
    for light in room.lights:
        if light.state == DeviceState.BROKEN:
            continue
        if power_outage:
            light.state = DeviceState.OFF
        elif cfg.motion_driven_lights:
            light.state = DeviceState.ON if room.motion_sensor.motion_detected else DeviceState.OFF

    printer = room.printer
    if printer is None or printer.state != DeviceState.ON:
        return []
    if power_outage:
        printer.state = DeviceState.OFF
        return [_auto_off_event(room, printer, now, "power outage")]
    if not printer.has_resources:
        printer.state = DeviceState.OFF
        return [_auto_off_event(room, printer, now, "out of toner or paper")]
    return []


# ---------------------------------------------------------------------------
# Lights, blinds and repair
# ---------------------------------------------------------------------------


def set_light_state(light: LightDevice, state: DeviceState, power_outage: bool) -> CommandResult:
    match state:
        case DeviceState.ON:
            if light.state == DeviceState.BROKEN:
                return CommandResult.rejected(f"Light {light.id} is broken")
            if power_outage:
                return CommandResult.rejected("Cannot turn on lights during a power outage")
            light.state = DeviceState.ON
            return CommandResult.ok(f"Light {light.id} turned on")
        case DeviceState.OFF:
            if light.state == DeviceState.ON:
                light.state = DeviceState.OFF
            return CommandResult.ok(f"Light {light.id} turned off")
        case DeviceState.BROKEN:
            return CommandResult.rejected("Lights cannot be broken on command")


def set_light_brightness(light: LightDevice, brightness: int) -> CommandResult:
    light.brightness = clamp_level(brightness)
    return CommandResult.ok(f"Light {light.id} brightness set to {light.brightness}%")


def set_blinds_state(blinds: BlindsDevice, state: BlindState) -> CommandResult:
    blinds.state = state
    return CommandResult.ok(f"Blinds {blinds.id} {state.value.lower()}")


def repair_device(device: LightDevice | PrinterDevice) -> CommandResult:
    """External repair: a broken device comes back switched off."""
    if device.state != DeviceState.BROKEN:
        return CommandResult.rejected(f"Device {device.id} is not broken")
    device.state = DeviceState.OFF
    return CommandResult.ok(f"Device {device.id} repaired")
