"""Outcome of an external control command."""

from dataclasses import dataclass
from enum import StrEnum


class CommandStatus(StrEnum):
    OK = "ok"
    NOT_FOUND = "not_found"
    REJECTED = "rejected"


@dataclass(frozen=True)
class CommandResult:
    """Success/failure of a command plus a human-readable reason.

    ``NOT_FOUND`` means the referenced room or device does not exist,
    ``REJECTED`` means the command would break a device invariant.
    """

    status: CommandStatus
    message: str
    created_id: str | None = None

    @property
    def success(self) -> bool:
        return self.status == CommandStatus.OK

    @classmethod
    def ok(cls, message: str, created_id: str | None = None) -> "CommandResult":
        return cls(CommandStatus.OK, message, created_id)

    @classmethod
    def not_found(cls, message: str) -> "CommandResult":
        return cls(CommandStatus.NOT_FOUND, message)

    @classmethod
    def rejected(cls, message: str) -> "CommandResult":
        return cls(CommandStatus.REJECTED, message)
