"""Convert domain dataclasses into JSON-ready structures."""

import dataclasses
from datetime import datetime
from enum import Enum
from typing import Any


def _encode(value: Any) -> Any:
    match value:
        case datetime():
            return value.isoformat(timespec="seconds")
        case Enum():
            return value.value
        case list():
            return [_encode(v) for v in value]
        case dict():
            return {k: _encode(v) for k, v in value.items()}
        case _:
            return value


def _dict_factory(items: list[tuple[str, Any]]) -> dict[str, Any]:
    return {key: _encode(value) for key, value in items}


def to_jsonable(obj: Any) -> Any:
    """Dataclass (or list of them) -> dicts with ISO timestamps and enum values."""
    if isinstance(obj, list):
        return [to_jsonable(item) for item in obj]
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return dataclasses.asdict(obj, dict_factory=_dict_factory)
    return _encode(obj)
