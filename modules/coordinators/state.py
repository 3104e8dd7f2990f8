"""Explicit state structs and change subscriptions shared by coordinators."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, List, Optional

logger = logging.getLogger(__name__)


class OperationStatus(str, Enum):
    """Lifecycle of the single operation a coordinator tracks."""

    IDLE = "idle"
    IN_FLIGHT = "in-flight"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class PendingOperation:
    """Status of the most recent operation plus its error message, if any."""

    status: OperationStatus = OperationStatus.IDLE
    error: Optional[str] = None

    @property
    def in_flight(self) -> bool:
        return self.status is OperationStatus.IN_FLIGHT

    @classmethod
    def started(cls) -> "PendingOperation":
        return cls(OperationStatus.IN_FLIGHT)

    @classmethod
    def succeeded(cls) -> "PendingOperation":
        return cls(OperationStatus.SUCCEEDED)

    @classmethod
    def failed(cls, message: str) -> "PendingOperation":
        return cls(OperationStatus.FAILED, message)


Listener = Callable[[Any], None]


class Observable:
    """Minimal subscription mechanism; listeners receive the coordinator."""

    def __init__(self) -> None:
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener`` and return a function that removes it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:  # noqa: BLE001
                # A broken render hook must not corrupt coordinator state.
                logger.exception("State listener %r failed", listener)
