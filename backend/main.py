"""FastAPI entry point - thin layer over the office simulator."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, Literal

import uvicorn
from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from core.commands import CommandResult, CommandStatus
from core.models import AlertSeverity, BlindState, DeviceState, MessageType
from core.serialization import to_jsonable
from data import DEFAULT_ROOMS
from settings import Settings, load_settings
from simulation import OfficeSimulator, SimConfig, TickDriver

settings = load_settings()

logging.basicConfig(level=logging.WARNING, format="%(name)s | %(message)s")
logging.getLogger("simulation").setLevel(settings.log_level)
logging.getLogger("main").setLevel(settings.log_level)
logger = logging.getLogger("main")


# ---------------------------------------------------------------------------
# Request / response schemas
# ---------------------------------------------------------------------------


class ApiResponse(BaseModel):
    success: bool
    message: str | None = None
    error: str | None = None
    id: str | None = None


class ExternalTemperatureRequest(BaseModel):
    temperature: float


class HeatingControlRequest(BaseModel):
    is_heating: bool


class SpeedRequest(BaseModel):
    multiplier: float


class LightControlRequest(BaseModel):
    state: DeviceState | None = None
    brightness: int | None = None


class BlindsControlRequest(BaseModel):
    state: BlindState


class PrinterControlRequest(BaseModel):
    action: Literal["turn_on", "turn_off", "set_toner", "set_paper"]
    level: int | None = None


class AlertRequest(BaseModel):
    type: str
    printer_id: str
    message: str
    severity: AlertSeverity = AlertSeverity.WARNING
    room_id: str | None = None
    room_name: str | None = None


class AgentMessageRequest(BaseModel):
    sender: str
    recipient: str
    type: MessageType
    content: str
    context: dict[str, str] | None = None


_STATUS_CODES: dict[CommandStatus, int] = {
    CommandStatus.OK: 200,
    CommandStatus.NOT_FOUND: 404,
    CommandStatus.REJECTED: 409,
}


def _respond(result: CommandResult) -> JSONResponse:
    body = ApiResponse(
        success=result.success,
        message=result.message if result.success else None,
        error=None if result.success else result.message,
        id=result.created_id,
    )
    return JSONResponse(status_code=_STATUS_CODES[result.status], content=body.model_dump())


def _found(value: Any, what: str) -> Any:
    if value is None:
        raise HTTPException(status_code=404, detail=f"{what} not found")
    return to_jsonable(value)


def get_engine(request: Request) -> OfficeSimulator:
    return request.app.state.engine


# ---------------------------------------------------------------------------
# App factory
# ---------------------------------------------------------------------------


def build_engine(cfg: Settings) -> OfficeSimulator:
    sim_config = SimConfig(
        time_speed_multiplier=cfg.time_speed_multiplier,
        failure_probability=cfg.failure_probability,
        occupancy_model=cfg.occupancy_model,
        motion_driven_lights=cfg.motion_driven_lights,
        printer_consumption=cfg.printer_consumption,
    )
    return OfficeSimulator(DEFAULT_ROOMS, config=sim_config, seed=cfg.seed)


def create_app(
    engine: OfficeSimulator | None = None,
    cfg: Settings = settings,
    start_driver: bool = True,
) -> FastAPI:
    """Build the API around one engine; the tick driver runs for the app's lifetime."""
    engine = engine if engine is not None else build_engine(cfg)
    driver = TickDriver(engine, interval_s=cfg.tick_interval_s, delta_minutes=cfg.delta_minutes)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if start_driver:
            driver.start()
        yield
        await driver.stop()

    app = FastAPI(title="Office Environment Simulator", lifespan=lifespan)
    app.state.engine = engine
    app.state.driver = driver
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    _register_queries(app)
    _register_commands(app)
    return app


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


def _register_queries(app: FastAPI) -> None:
    @app.get("/state")
    def get_state(engine: OfficeSimulator = Depends(get_engine)) -> Any:
        return to_jsonable(engine.get_state())

    @app.get("/events")
    def get_events(engine: OfficeSimulator = Depends(get_engine)) -> Any:
        return to_jsonable(engine.get_events())

    @app.get("/rooms")
    def get_rooms(engine: OfficeSimulator = Depends(get_engine)) -> Any:
        return to_jsonable(engine.get_state().rooms)

    @app.get("/rooms/{room_id}")
    def get_room(room_id: str, engine: OfficeSimulator = Depends(get_engine)) -> Any:
        return _found(engine.get_room(room_id), f"Room {room_id}")

    @app.get("/temperature")
    def get_temperature(engine: OfficeSimulator = Depends(get_engine)) -> Any:
        return to_jsonable(engine.get_temperatures())

    @app.get("/motion")
    def get_motion(engine: OfficeSimulator = Depends(get_engine)) -> Any:
        return to_jsonable(engine.get_motion())

    @app.get("/devices")
    def get_devices(engine: OfficeSimulator = Depends(get_engine)) -> Any:
        return to_jsonable(engine.get_devices())

    @app.get("/lights/{light_id}")
    def get_light(light_id: str, engine: OfficeSimulator = Depends(get_engine)) -> Any:
        return _found(engine.get_light(light_id), f"Light {light_id}")

    @app.get("/printers/{printer_id}")
    def get_printer(printer_id: str, engine: OfficeSimulator = Depends(get_engine)) -> Any:
        return _found(engine.get_printer(printer_id), f"Printer {printer_id}")

    @app.get("/blinds/{blinds_id}")
    def get_blinds(blinds_id: str, engine: OfficeSimulator = Depends(get_engine)) -> Any:
        return _found(engine.get_blinds(blinds_id), f"Blinds {blinds_id}")

    @app.get("/heating")
    def get_heating(engine: OfficeSimulator = Depends(get_engine)) -> Any:
        return to_jsonable(engine.get_heating())

    @app.get("/rooms/{room_id}/heating")
    def get_room_heating(room_id: str, engine: OfficeSimulator = Depends(get_engine)) -> Any:
        status = engine.get_heating(room_id)
        return _found(status[0] if status else None, f"Room {room_id}")

    @app.get("/alerts")
    def get_alerts(engine: OfficeSimulator = Depends(get_engine)) -> Any:
        return to_jsonable(engine.get_alerts())

    @app.get("/messages")
    def get_messages(
        recipient: str | None = None,
        sender: str | None = None,
        include_broadcast: bool = True,
        after: datetime | None = None,
        engine: OfficeSimulator = Depends(get_engine),
    ) -> Any:
        return to_jsonable(engine.get_messages(recipient, sender, include_broadcast, after))


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def _register_commands(app: FastAPI) -> None:
    @app.post("/temperature/external")
    def set_external_temperature(
        body: ExternalTemperatureRequest, engine: OfficeSimulator = Depends(get_engine)
    ) -> JSONResponse:
        return _respond(engine.set_external_temperature(body.temperature))

    @app.post("/heating")
    def set_heating(body: HeatingControlRequest, engine: OfficeSimulator = Depends(get_engine)) -> JSONResponse:
        return _respond(engine.set_heating(body.is_heating))

    @app.post("/rooms/{room_id}/heating")
    def set_room_heating(
        room_id: str, body: HeatingControlRequest, engine: OfficeSimulator = Depends(get_engine)
    ) -> JSONResponse:
        return _respond(engine.set_heating(body.is_heating, room_id))

    @app.post("/simulation/speed")
    def set_speed(body: SpeedRequest, engine: OfficeSimulator = Depends(get_engine)) -> JSONResponse:
        return _respond(engine.set_time_speed_multiplier(body.multiplier))

    @app.post("/lights/{light_id}")
    def control_light(
        light_id: str, body: LightControlRequest, engine: OfficeSimulator = Depends(get_engine)
    ) -> JSONResponse:
        if body.state is None and body.brightness is None:
            raise HTTPException(status_code=422, detail="Provide state and/or brightness")
        if body.state is not None:
            result = engine.set_light_state(light_id, body.state)
            if not result.success or body.brightness is None:
                return _respond(result)
        return _respond(engine.set_light_brightness(light_id, body.brightness))

    @app.post("/blinds/{blinds_id}")
    def control_blinds(
        blinds_id: str, body: BlindsControlRequest, engine: OfficeSimulator = Depends(get_engine)
    ) -> JSONResponse:
        return _respond(engine.set_blinds_state(blinds_id, body.state))

    @app.post("/printers/{printer_id}")
    def control_printer(
        printer_id: str, body: PrinterControlRequest, engine: OfficeSimulator = Depends(get_engine)
    ) -> JSONResponse:
        match body.action:
            case "turn_on":
                return _respond(engine.set_printer_state(printer_id, DeviceState.ON))
            case "turn_off":
                return _respond(engine.set_printer_state(printer_id, DeviceState.OFF))
            case "set_toner" | "set_paper" if body.level is None:
                raise HTTPException(status_code=422, detail=f"{body.action} requires a level")
            case "set_toner":
                return _respond(engine.set_printer_toner(printer_id, body.level))
            case "set_paper":
                return _respond(engine.set_printer_paper(printer_id, body.level))

    @app.post("/devices/{device_id}/repair")
    def repair_device(device_id: str, engine: OfficeSimulator = Depends(get_engine)) -> JSONResponse:
        return _respond(engine.repair_device(device_id))

    @app.post("/alerts")
    def add_alert(body: AlertRequest, engine: OfficeSimulator = Depends(get_engine)) -> JSONResponse:
        return _respond(
            engine.add_alert(
                body.type,
                body.printer_id,
                body.message,
                severity=body.severity,
                room_id=body.room_id,
                room_name=body.room_name,
            )
        )

    @app.post("/messages")
    def add_message(body: AgentMessageRequest, engine: OfficeSimulator = Depends(get_engine)) -> JSONResponse:
        return _respond(engine.add_message(body.sender, body.recipient, body.type, body.content, body.context))

    @app.delete("/events")
    def clear_events(engine: OfficeSimulator = Depends(get_engine)) -> JSONResponse:
        return _respond(engine.clear_events())

    @app.delete("/alerts")
    def clear_alerts(engine: OfficeSimulator = Depends(get_engine)) -> JSONResponse:
        return _respond(engine.clear_alerts())

    @app.delete("/messages")
    def clear_messages(engine: OfficeSimulator = Depends(get_engine)) -> JSONResponse:
        return _respond(engine.clear_messages())


app = create_app()


if __name__ == "__main__":
    uvicorn.run(app, host=settings.host, port=settings.port)
