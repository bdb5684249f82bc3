from __future__ import annotations

from dataclasses import dataclass, field
from json import loads
from typing import Any

RELOAD = "reload"


class MalformedMessageError(ValueError):
    pass


@dataclass(frozen=True, slots=True)
class Notification:
    type: str | None
    payload: dict[str, Any] = field(default_factory=dict)

    @property
    def is_reload(self) -> bool:
        return self.type == RELOAD


def parse_notification(data: str | bytes) -> Notification:
    try:
        decoded = loads(data)
    except (ValueError, RecursionError) as e:  # ValueError also covers UnicodeDecodeError for binary frames
        raise MalformedMessageError(str(e)) from e

    if not isinstance(decoded, dict):
        raise MalformedMessageError(f"Expected a JSON object, got {type(decoded).__name__}")

    kind = decoded.get("type")
    return Notification(type=kind if isinstance(kind, str) else None, payload=decoded)
