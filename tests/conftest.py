"""Shared test doubles for coordinator tests."""

from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Tuple

import pytest

from config.settings import AppConfig
from modules.services.errors import TransportError
from modules.services.models import Generation, LanguageRef


def _generation(generation_id: int = 1, **overrides: Any) -> Generation:
    fields = {
        "id": generation_id,
        "prompt": f"write a function #{generation_id}",
        "code": f"def f{generation_id}(): pass",
        "created_at": "2025-01-05T15:04:00Z",
        "language": LanguageRef(3, "Python"),
        "starred": False,
    }
    fields.update(overrides)
    return Generation(**fields)


class FakeApi:
    """Scriptable stand-in for SyncClient.

    Calls are recorded in ``calls``. ``gate(*key)`` returns an event the
    matching call waits on, which lets tests choose completion order.
    """

    def __init__(self) -> None:
        self.calls: List[Tuple[Any, ...]] = []
        self.generate_outcome: Any = _generation(1)
        self.history: Dict[Tuple[int, str], Any] = {}
        self.star_failures: set[int] = set()
        self.gates: Dict[Tuple[Any, ...], asyncio.Event] = {}

    def gate(self, *key: Any) -> asyncio.Event:
        event = asyncio.Event()
        self.gates[key] = event
        return event

    def count(self, operation: str) -> int:
        return sum(1 for call in self.calls if call[0] == operation)

    async def _pass(self, key: Tuple[Any, ...]) -> None:
        event = self.gates.get(key)
        if event is not None:
            await event.wait()

    async def generate(self, prompt: str, language: str) -> Generation:
        self.calls.append(("generate", prompt, language))
        await self._pass(("generate",))
        if isinstance(self.generate_outcome, Exception):
            raise self.generate_outcome
        return self.generate_outcome

    async def list_history(self, page: int = 1, search: str = "") -> List[Generation]:
        self.calls.append(("list_history", page, search))
        await self._pass(("history", page, search))
        outcome = self.history.get((page, search), [])
        if isinstance(outcome, Exception):
            raise outcome
        return list(outcome)

    async def toggle_star(self, generation_id: int, starred: bool) -> Generation:
        self.calls.append(("toggle_star", generation_id, starred))
        await self._pass(("star", generation_id, starred))
        if generation_id in self.star_failures:
            raise TransportError(
                "Failed to update star status", operation="toggle_star", status_code=500
            )
        for key, page in self.history.items():
            if isinstance(page, list):
                self.history[key] = [
                    item.with_starred(starred) if item.id == generation_id else item
                    for item in page
                ]
        return _generation(generation_id, starred=starred)


@pytest.fixture
def make_generation():
    return _generation


@pytest.fixture
def fake_api() -> FakeApi:
    return FakeApi()


@pytest.fixture
def config(tmp_path) -> AppConfig:
    return AppConfig(log_dir=tmp_path / "logs", assets_dir=tmp_path / "assets", copy_ack_seconds=0.05)


async def _drain() -> None:
    """Let every ready task run a step or two."""
    for _ in range(5):
        await asyncio.sleep(0)


@pytest.fixture
def drain():
    return _drain
