"""Gradio UI callback tests."""

from __future__ import annotations

import asyncio

import pytest

from modules.coordinators.generation import ADVISORY_MESSAGE, GenerationRequestCoordinator
from modules.coordinators.history_store import HistoryQueryStore
from modules.coordinators.star_toggle import StarToggleCoordinator
from modules.services.errors import TransportError
from modules.ui import callbacks
from modules.utils.formatting import format_timestamp, preview


def build_callbacks(config, api, clipboard=None):
    generator = GenerationRequestCoordinator(config, api, clipboard=clipboard)
    stars = StarToggleCoordinator(api)
    history = HistoryQueryStore(config, api)
    return callbacks.build_callbacks(config, generator, stars, history), generator, stars, history


@pytest.mark.asyncio
async def test_on_generate_success(config, fake_api):
    cb, *_ = build_callbacks(config, fake_api)

    code, status, advisory, star = await cb["on_generate"]("write a function", "Python")

    assert code == "def f1(): pass"
    assert "Generated Python code" in status
    assert advisory == ""
    assert star == "☆ Star"
    assert fake_api.calls == [("generate", "write a function", "python")]


@pytest.mark.asyncio
async def test_on_generate_shows_advisory_then_force(config, fake_api):
    cb, generator, *_ = build_callbacks(config, fake_api)

    code, status, advisory, _ = await cb["on_generate"]("Hello there", "python")
    assert advisory == ADVISORY_MESSAGE
    assert code == ""
    assert fake_api.count("generate") == 0

    code, status, advisory, _ = await cb["on_force_generate"]("Hello there", "python")
    assert advisory == ""
    assert code == "def f1(): pass"

    await cb["on_generate"]("Hello there", "python")
    _, status, advisory, _ = cb["on_dismiss_advisory"]()
    assert advisory == ""
    assert status == "Ready."


@pytest.mark.asyncio
async def test_on_generate_reports_errors(config, fake_api):
    cb, *_ = build_callbacks(config, fake_api)

    _, status, _, _ = await cb["on_generate"]("   ", "python")
    assert status == "Error: Please enter a prompt"

    fake_api.generate_outcome = TransportError("rate limited", status_code=429)
    _, status, _, _ = await cb["on_generate"]("write a function", "python")
    assert status == "Error: rate limited"


@pytest.mark.asyncio
async def test_copy_and_star_current_result(config, fake_api):
    clipboard = []
    cb, *_ = build_callbacks(config, fake_api, clipboard=clipboard.append)

    assert await cb["on_copy"]() == "Nothing to copy yet."
    assert await cb["on_toggle_current_star"]() == "☆ Star"

    await cb["on_generate"]("write a function", "python")
    assert await cb["on_copy"]("def f1(): pass") == "✓ Copied!"
    assert clipboard == ["def f1(): pass"]

    assert await cb["on_toggle_current_star"]() == "★ Starred"
    assert fake_api.calls[-1] == ("toggle_star", 1, True)
    # History was never opened, so nothing is refetched.
    assert fake_api.count("list_history") == 0


@pytest.mark.asyncio
async def test_copy_acknowledgement_clears_after_delay(config, fake_api):
    cb, generator, _, _ = build_callbacks(config, fake_api)
    await cb["on_generate"]("write a function", "python")
    notifications = []
    generator.subscribe(lambda c: notifications.append(c.copied))

    assert await cb["on_copy"]("def f1(): pass") == "✓ Copied!"
    assert generator.copied is True

    await asyncio.sleep(config.copy_ack_seconds * 3)

    assert generator.copied is False
    assert notifications == [True, False]


@pytest.mark.asyncio
async def test_star_failure_on_current_result_rolls_back(config, fake_api):
    fake_api.star_failures.add(1)
    cb, _, stars, _ = build_callbacks(config, fake_api)
    await cb["on_generate"]("write a function", "python")

    assert await cb["on_toggle_current_star"]() == "☆ Star"
    assert stars.last_error == "Failed to update star status"


@pytest.mark.asyncio
async def test_history_load_search_and_paging(config, fake_api, make_generation):
    fake_api.history[(1, "")] = [make_generation(i) for i in range(1, 11)]
    fake_api.history[(2, "")] = [make_generation(11)]
    fake_api.history[(1, "sort")] = [make_generation(42, prompt="sort   a\nlist")]
    cb, *_ = build_callbacks(config, fake_api)

    rows, page_label, status = await cb["on_load_history"]()
    assert len(rows) == 10
    assert rows[0] == [1, "", "Python", format_timestamp("2025-01-05T15:04:00Z"), "write a function #1"]
    assert page_label == "Page 1"
    assert status == "10 generation(s)."

    rows, page_label, status = await cb["on_next_page"]()
    assert [row[0] for row in rows] == [11]
    assert page_label == "Page 2"
    assert "No more pages" in status

    calls_before = fake_api.count("list_history")
    await cb["on_next_page"]()
    assert fake_api.count("list_history") == calls_before

    rows, page_label, _ = await cb["on_search"](" sort ")
    assert page_label.startswith("Page 1")
    assert "sort" in page_label
    assert rows[0][4] == "sort a list"

    rows, page_label, _ = await cb["on_prev_page"]()
    assert page_label.startswith("Page 1")


@pytest.mark.asyncio
async def test_history_star_toggle_refreshes_page(config, fake_api, make_generation):
    fake_api.history[(1, "")] = [make_generation(1), make_generation(2)]
    cb, *_ = build_callbacks(config, fake_api)
    await cb["on_load_history"]()

    selected_id, meta, prompt, code, star = cb["on_select_history"](1)
    assert selected_id == 2
    assert "Python" in meta
    assert prompt == "write a function #2"
    assert code == "def f2(): pass"
    assert star == "☆ Star"

    rows, _, _, star = await cb["on_toggle_history_star"](selected_id)

    assert star == "★ Starred"
    assert rows[1][1] == "★"
    assert fake_api.count("list_history") == 2


@pytest.mark.asyncio
async def test_history_star_failure_keeps_server_value(config, fake_api, make_generation):
    fake_api.history[(1, "")] = [make_generation(1)]
    fake_api.star_failures.add(1)
    cb, *_ = build_callbacks(config, fake_api)
    await cb["on_load_history"]()

    rows, _, _, star = await cb["on_toggle_history_star"](1)

    assert star == "☆ Star"
    assert rows[0][1] == ""
    assert fake_api.count("list_history") == 1


def test_select_out_of_range_returns_empty_detail(config, fake_api):
    cb, *_ = build_callbacks(config, fake_api)

    assert cb["on_select_history"](3) == (None, "", "", "", "☆ Star")


def test_formatting_helpers():
    assert format_timestamp("2025-01-05T15:04:00Z") == "Jan 5, 2025, 03:04 PM"
    assert format_timestamp("not a date") == "not a date"
    assert format_timestamp("") == ""
    assert preview("a" * 100, limit=10) == "a" * 9 + "…"
