"""
Transient alert messages.

An alert is set by an event handler and shown on the next render, after
which it is gone.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, MutableMapping, Optional


ALERT_KEY = "alert"


class AlertKind(str, Enum):
    SUCCESS = "SUCCESS"
    ERROR = "ERROR"


@dataclass(frozen=True)
class Alert:
    kind: AlertKind
    message: str


class AlertState:
    def __init__(self, store: MutableMapping[str, Any], key: str = ALERT_KEY) -> None:
        self._store = store
        self._key = key

    @property
    def alert(self) -> Optional[Alert]:
        return self._store.get(self._key)

    def set_alert(self, kind: AlertKind, message: str) -> None:
        self._store[self._key] = Alert(kind=kind, message=message)

    def pop(self) -> Optional[Alert]:
        return self._store.pop(self._key, None)


def use_alert(store: MutableMapping[str, Any]) -> AlertState:
    return AlertState(store)


__all__ = ["Alert", "AlertKind", "AlertState", "use_alert", "ALERT_KEY"]
