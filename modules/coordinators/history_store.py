"""Paginated, searchable generation history."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Protocol

from config.settings import AppConfig
from modules.coordinators.state import Observable, PendingOperation
from modules.services.errors import TransportError
from modules.services.models import Generation

logger = logging.getLogger(__name__)


class HistoryClient(Protocol):
    async def list_history(self, page: int = 1, search: str = "") -> List[Generation]: ...


@dataclass(frozen=True, slots=True)
class HistoryQuery:
    page: int = 1
    search: str = ""


class HistoryQueryStore(Observable):
    """Owns the visible history page.

    Every query change or invalidation issues a request tagged with an
    increasing sequence number. Only the response for the latest sequence
    number is applied; older responses are dropped when they arrive.

    The server reports no total count, so ``has_next_page`` is inferred from
    whether the last accepted page was full.
    """

    def __init__(self, config: AppConfig, client: HistoryClient) -> None:
        super().__init__()
        self.config = config
        self.client = client
        self.query = HistoryQuery()
        self.operation = PendingOperation()
        self.accepted_query: Optional[HistoryQuery] = None
        self._results: List[Generation] = []
        self._issued = 0
        self._tasks: Dict[int, "asyncio.Task[None]"] = {}

    @property
    def page_size(self) -> int:
        return self.config.history_page_size

    @property
    def loading(self) -> bool:
        return self.operation.in_flight

    @property
    def has_next_page(self) -> bool:
        return len(self._results) >= self.page_size

    @property
    def has_previous_page(self) -> bool:
        return self.query.page > 1

    def get_results(self) -> List[Generation]:
        return list(self._results)

    def find(self, generation_id: int) -> Optional[Generation]:
        for generation in self._results:
            if generation.id == generation_id:
                return generation
        return None

    def set_query(self, page: Optional[int] = None, search: Optional[str] = None) -> "asyncio.Task[None]":
        """Replace the query and fetch it.

        A changed search resets to page 1 unless ``page`` is given explicitly.
        """
        current = self.query
        new_search = current.search if search is None else search
        if page is not None:
            new_page = page
        elif new_search != current.search:
            new_page = 1
        else:
            new_page = current.page
        self.query = HistoryQuery(page=max(1, int(new_page)), search=new_search)
        return self._issue()

    def set_search(self, search: str) -> "asyncio.Task[None]":
        return self.set_query(search=search)

    def set_page(self, page: int) -> "asyncio.Task[None]":
        return self.set_query(page=page)

    def next_page(self) -> "asyncio.Task[None]":
        return self.set_query(page=self.query.page + 1)

    def previous_page(self) -> "asyncio.Task[None]":
        return self.set_query(page=max(1, self.query.page - 1))

    def invalidate(self) -> "asyncio.Task[None]":
        """Re-fetch the current query without changing page or search."""
        return self._issue()

    async def settle(self) -> None:
        """Wait until the most recently issued request has resolved."""
        while True:
            task = self._tasks.get(self._issued)
            if task is None:
                return
            try:
                await asyncio.shield(task)
            except asyncio.CancelledError:
                if not task.cancelled():
                    raise

    # Internal helpers ---------------------------------------------------------
    def _issue(self) -> "asyncio.Task[None]":
        self._issued += 1
        sequence = self._issued
        query = self.query

        if self.config.cancel_superseded_requests:
            for task in self._tasks.values():
                task.cancel()
            self._tasks.clear()

        self.operation = PendingOperation.started()
        task = asyncio.get_running_loop().create_task(self._fetch(sequence, query))
        self._tasks[sequence] = task
        self._notify()
        return task

    async def _fetch(self, sequence: int, query: HistoryQuery) -> None:
        try:
            results = await self.client.list_history(query.page, query.search)
        except asyncio.CancelledError:
            logger.debug("History request #%s cancelled", sequence)
            raise
        except TransportError as exc:
            if self._is_stale(sequence):
                return
            logger.warning("History request failed for %s: %s", query, exc.message)
            self.operation = PendingOperation.failed(exc.message)
            self._notify()
            return
        finally:
            self._tasks.pop(sequence, None)

        if self._is_stale(sequence):
            return
        self._results = list(results)
        self.accepted_query = query
        self.operation = PendingOperation.succeeded()
        self._notify()

    def _is_stale(self, sequence: int) -> bool:
        if sequence != self._issued:
            logger.debug("Discarding stale history response #%s (latest #%s)", sequence, self._issued)
            return True
        return False
