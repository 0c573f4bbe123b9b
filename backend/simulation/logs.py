"""Log stores - the event log and the bounded alert and agent-message buffers."""

from collections import deque
from collections.abc import Iterable
from datetime import datetime

from core.models import BROADCAST, AgentMessage, Alert, EnvironmentEvent


class EventLog:
    """Append-only; only an explicit clear removes entries."""

    def __init__(self) -> None:
        self._events: list[EnvironmentEvent] = []

    def __len__(self) -> int:
        return len(self._events)

    def append(self, event: EnvironmentEvent) -> None:
        self._events.append(event)

    def extend(self, events: Iterable[EnvironmentEvent]) -> None:
        self._events.extend(events)

    def all(self) -> list[EnvironmentEvent]:
        return list(self._events)

    def clear(self) -> None:
        self._events.clear()


class AlertLog:
    """Ring buffer; the oldest alert is evicted once capacity is reached."""

    def __init__(self, capacity: int = 100) -> None:
        self._alerts: deque[Alert] = deque(maxlen=capacity)

    def __len__(self) -> int:
        return len(self._alerts)

    @property
    def capacity(self) -> int:
        return self._alerts.maxlen or 0

    def append(self, alert: Alert) -> None:
        self._alerts.append(alert)

    def all(self) -> list[Alert]:
        return list(self._alerts)

    def clear(self) -> None:
        self._alerts.clear()


class MessageLog:
    """Ring buffer of agent messages with recipient/sender/time filters."""

    def __init__(self, capacity: int = 200) -> None:
        self._messages: deque[AgentMessage] = deque(maxlen=capacity)

    def __len__(self) -> int:
        return len(self._messages)

    @property
    def capacity(self) -> int:
        return self._messages.maxlen or 0

    def append(self, message: AgentMessage) -> None:
        self._messages.append(message)

    def query(
        self,
        recipient: str | None = None,
        sender: str | None = None,
        include_broadcast: bool = True,
        after: datetime | None = None,
    ) -> list[AgentMessage]:
        """Messages matching every given filter, oldest first.

        ``recipient`` matches messages addressed to that agent and, unless
        ``include_broadcast`` is False, broadcast messages. ``after`` keeps
        messages strictly newer than the timestamp.
        """
        result: list[AgentMessage] = []
        for message in self._messages:
            if recipient is not None:
                addressed = message.recipient == recipient
                if not addressed and not (include_broadcast and message.recipient == BROADCAST):
                    continue
            elif not include_broadcast and message.is_broadcast:
                continue
            if sender is not None and message.sender != sender:
                continue
            if after is not None and message.timestamp <= after:
                continue
            result.append(message)
        return result

    def clear(self) -> None:
        self._messages.clear()
