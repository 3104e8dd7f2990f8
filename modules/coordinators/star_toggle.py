"""Optimistic favorite toggling with rollback."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Protocol

from modules.coordinators.state import Observable, PendingOperation
from modules.services.errors import TransportError
from modules.services.models import Generation

logger = logging.getLogger(__name__)


class StarClient(Protocol):
    async def toggle_star(self, generation_id: int, starred: bool) -> Generation: ...


@dataclass(slots=True)
class StarToggle:
    """Result of a toggle request.

    ``optimistic`` is the value shown immediately; awaiting ``settled`` yields
    the value the server acknowledged once every queued toggle for the id has
    resolved.
    """

    generation_id: int
    optimistic: bool
    settled: "asyncio.Future[bool]"


class StarToggleCoordinator(Observable):
    """Owns the displayed ``starred`` flag of every generation it has seen.

    At most one request per generation id is in flight. Toggles made while a
    request is pending only update the latest intent; the worker sends one
    follow-up request if that intent differs from the acknowledged value.
    """

    def __init__(self, client: StarClient) -> None:
        super().__init__()
        self.client = client
        self._displayed: Dict[int, bool] = {}
        self._acknowledged: Dict[int, bool] = {}
        self._intent: Dict[int, bool] = {}
        self._workers: Dict[int, "asyncio.Task[bool]"] = {}
        self._confirmed_callbacks: List[Callable[[int, bool], None]] = []
        self.operations: Dict[int, PendingOperation] = {}
        self.last_error: Optional[str] = None

    def is_starred(self, generation_id: int, default: bool = False) -> bool:
        return self._displayed.get(generation_id, default)

    def is_pending(self, generation_id: int) -> bool:
        return generation_id in self._workers

    def on_confirmed(self, callback: Callable[[int, bool], None]) -> None:
        """Register a callback run after the server acknowledges a toggle."""
        self._confirmed_callbacks.append(callback)

    def reconcile(self, generations: Iterable[Generation]) -> None:
        """Adopt server values for ids without a toggle in flight."""
        changed = False
        for generation in generations:
            if generation.id in self._workers:
                continue
            self._acknowledged[generation.id] = generation.starred
            if self._displayed.get(generation.id) != generation.starred:
                self._displayed[generation.id] = generation.starred
                changed = True
        if changed:
            self._notify()

    def toggle_star(self, generation_id: int, current_starred: bool) -> StarToggle:
        """Flip the flag optimistically and schedule the server update.

        Must be called from within a running event loop.
        """
        if generation_id not in self._displayed:
            self._displayed[generation_id] = bool(current_starred)
            self._acknowledged.setdefault(generation_id, bool(current_starred))

        new_value = not self._displayed[generation_id]
        self._displayed[generation_id] = new_value
        self._intent[generation_id] = new_value

        worker = self._workers.get(generation_id)
        if worker is None:
            worker = asyncio.get_running_loop().create_task(self._run(generation_id))
            self._workers[generation_id] = worker
            self.operations[generation_id] = PendingOperation.started()
        else:
            logger.debug("Queued star toggle for %s (intent=%s)", generation_id, new_value)

        self._notify()
        return StarToggle(generation_id=generation_id, optimistic=new_value, settled=worker)

    async def _run(self, generation_id: int) -> bool:
        try:
            while True:
                target = self._intent[generation_id]
                if target == self._acknowledged.get(generation_id):
                    break
                try:
                    updated = await self.client.toggle_star(generation_id, target)
                except TransportError as exc:
                    self._roll_back(generation_id, exc.message)
                    break
                self._acknowledged[generation_id] = updated.starred
                if self._intent[generation_id] == target:
                    self._intent[generation_id] = updated.starred
                self.operations[generation_id] = PendingOperation.succeeded()
                for callback in list(self._confirmed_callbacks):
                    callback(generation_id, updated.starred)
        except asyncio.CancelledError:
            self._roll_back(generation_id, "Star update cancelled")
            raise
        finally:
            self._workers.pop(generation_id, None)
            self._intent.pop(generation_id, None)
            self._displayed[generation_id] = self._acknowledged[generation_id]
            self._notify()
        return self._acknowledged[generation_id]

    def _roll_back(self, generation_id: int, message: str) -> None:
        # Low severity: logged and recorded, never raised to the caller.
        logger.warning("Failed to toggle star for generation %s: %s", generation_id, message)
        self.last_error = message
        self.operations[generation_id] = PendingOperation.failed(message)
        self._intent[generation_id] = self._acknowledged[generation_id]
