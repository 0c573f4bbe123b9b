"""Tests for the event, alert and message logs."""

from datetime import datetime, timedelta

from core.models import BROADCAST, AgentMessage, Alert, EnvironmentEvent, MessageType
from simulation.logs import AlertLog, EventLog, MessageLog

T = datetime(2025, 1, 15, 10, 0)


def make_alert(n: int) -> Alert:
    return Alert(
        id=f"alert-{n}",
        type="low_toner",
        printer_id="printer_208",
        room_id=None,
        room_name=None,
        message=f"alert {n}",
        timestamp=T,
    )


def make_message(n: int, sender: str = "a", recipient: str = "b", minutes: int = 0) -> AgentMessage:
    return AgentMessage(
        id=f"msg-{n}",
        sender=sender,
        recipient=recipient,
        type=MessageType.INFORM,
        content=f"message {n}",
        timestamp=T + timedelta(minutes=minutes),
    )


def test_event_log_only_clears_on_request() -> None:
    log = EventLog()
    for n in range(500):
        log.append(EnvironmentEvent("motion", "r1", "s1", T, f"event {n}"))
    assert len(log) == 500
    log.clear()
    assert log.all() == []


def test_alert_ring_buffer_evicts_oldest() -> None:
    log = AlertLog(capacity=100)
    for n in range(105):
        log.append(make_alert(n))
    alerts = log.all()
    assert len(alerts) == 100
    assert alerts[0].id == "alert-5"
    assert alerts[-1].id == "alert-104"


def test_message_ring_buffer_evicts_oldest() -> None:
    log = MessageLog(capacity=200)
    for n in range(205):
        log.append(make_message(n))
    messages = log.query()
    assert len(messages) == 200
    assert messages[0].id == "msg-5"


def test_message_filters() -> None:
    log = MessageLog()
    log.append(make_message(1, sender="lights", recipient="printers", minutes=1))
    log.append(make_message(2, sender="printers", recipient=BROADCAST, minutes=2))
    log.append(make_message(3, sender="heating", recipient="lights", minutes=3))
    log.append(make_message(4, sender="lights", recipient="printers", minutes=4))

    assert [m.id for m in log.query(recipient="printers")] == ["msg-1", "msg-2", "msg-4"]
    assert [m.id for m in log.query(recipient="printers", include_broadcast=False)] == ["msg-1", "msg-4"]
    assert [m.id for m in log.query(sender="lights")] == ["msg-1", "msg-4"]
    assert [m.id for m in log.query(after=T + timedelta(minutes=2))] == ["msg-3", "msg-4"]
    assert [m.id for m in log.query(include_broadcast=False)] == ["msg-1", "msg-3", "msg-4"]
    assert [m.id for m in log.query(recipient="heating")] == ["msg-2"]
