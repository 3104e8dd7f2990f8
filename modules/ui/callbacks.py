"""Callback implementations for the Gradio interface."""

from __future__ import annotations

import logging
from typing import Any, List, Optional

from config.settings import AppConfig
from modules.coordinators.generation import (
    ADVISORY_MESSAGE,
    GenerationPhase,
    GenerationRequestCoordinator,
)
from modules.coordinators.history_store import HistoryQueryStore
from modules.coordinators.star_toggle import StarToggleCoordinator
from modules.coordinators.state import OperationStatus
from modules.prompting.languages import LanguageRegistry
from modules.services.errors import CopilotError
from modules.services.models import Generation
from modules.utils.formatting import format_timestamp, preview

logger = logging.getLogger(__name__)

HISTORY_COLUMNS = ["ID", "★", "Language", "Created", "Prompt"]


def star_label(starred: bool) -> str:
    return "★ Starred" if starred else "☆ Star"


def build_callbacks(
    config: AppConfig,
    generator: GenerationRequestCoordinator,
    stars: StarToggleCoordinator,
    history: HistoryQueryStore,
    languages: Optional[LanguageRegistry] = None,
) -> dict[str, Any]:
    """Return a dictionary of Gradio callback functions.

    Each callback triggers one coordinator operation and returns plain display
    values; the layout maps them onto components.
    """

    registry = languages or generator.languages

    def _on_star_confirmed(generation_id: int, starred: bool) -> None:
        # Star state is part of the history sort order; refresh once loaded.
        if history.accepted_query is not None:
            history.invalidate()

    def _on_history_changed(store: HistoryQueryStore) -> None:
        if store.operation.status is OperationStatus.SUCCEEDED:
            stars.reconcile(store.get_results())

    stars.on_confirmed(_on_star_confirmed)
    history.subscribe(_on_history_changed)

    def _generator_view() -> tuple[str, str, str, str]:
        current = generator.current
        code = current.code if current is not None else ""
        advisory = ADVISORY_MESSAGE if generator.advisory else ""
        if generator.phase is GenerationPhase.FAILED or (
            generator.phase is GenerationPhase.REJECTED and generator.error
        ):
            status = f"Error: {generator.error}"
        elif generator.phase is GenerationPhase.SUCCEEDED and current is not None:
            status = f"Generated {current.language.name} code (#{current.id})."
        elif generator.advisory:
            status = "Prompt does not look like a coding question."
        else:
            status = "Ready."
        starred = stars.is_starred(current.id, current.starred) if current is not None else False
        return code, status, advisory, star_label(starred)

    def _history_rows() -> List[List[Any]]:
        rows: List[List[Any]] = []
        for item in history.get_results():
            starred = stars.is_starred(item.id, item.starred)
            rows.append(
                [
                    item.id,
                    "★" if starred else "",
                    item.language.name,
                    format_timestamp(item.created_at),
                    preview(item.prompt),
                ]
            )
        return rows

    def _history_view() -> tuple[List[List[Any]], str, str]:
        query = history.query
        page_label = f"Page {query.page}"
        if query.search:
            page_label += f" · search: “{query.search}”"
        if history.operation.error:
            status = f"Error: {history.operation.error}"
        elif not history.get_results():
            status = "No generations found."
        else:
            status = f"{len(history.get_results())} generation(s)."
        if not history.has_next_page:
            status += " No more pages."
        return _history_rows(), page_label, status

    def _detail_view(item: Optional[Generation]) -> tuple[str, str, str, str]:
        if item is None:
            return "", "", "", star_label(False)
        meta = f"**{item.language.name}** · {format_timestamp(item.created_at)}"
        return meta, item.prompt, item.code, star_label(stars.is_starred(item.id, item.starred))

    async def on_generate(prompt: str, language: str) -> tuple[str, str, str, str]:
        try:
            await generator.submit(prompt, registry.value_for(language))
        except CopilotError as exc:
            logger.info("Generate rejected: %s", exc.message)
            current_view = _generator_view()
            return current_view[0], f"Error: {exc.message}", current_view[2], current_view[3]
        return _generator_view()

    async def on_force_generate(prompt: str, language: str) -> tuple[str, str, str, str]:
        try:
            await generator.force_submit(prompt, registry.value_for(language))
        except CopilotError as exc:
            current_view = _generator_view()
            return current_view[0], f"Error: {exc.message}", current_view[2], current_view[3]
        return _generator_view()

    def on_dismiss_advisory() -> tuple[str, str, str, str]:
        generator.dismiss_advisory()
        return _generator_view()

    async def on_copy(displayed_code: str = "") -> str:
        # async so the copied-flag timer is scheduled on the event loop
        if generator.copy_current_code():
            return "✓ Copied!"
        return "Nothing to copy yet."

    async def on_toggle_current_star() -> str:
        current = generator.current
        if current is None:
            return star_label(False)
        ticket = stars.toggle_star(current.id, stars.is_starred(current.id, current.starred))
        await ticket.settled
        return star_label(stars.is_starred(current.id, current.starred))

    async def _await_history() -> tuple[List[List[Any]], str, str]:
        await history.settle()
        return _history_view()

    async def on_load_history() -> tuple[List[List[Any]], str, str]:
        history.invalidate()
        return await _await_history()

    async def on_search(text: str) -> tuple[List[List[Any]], str, str]:
        history.set_search((text or "").strip())
        return await _await_history()

    async def on_next_page() -> tuple[List[List[Any]], str, str]:
        if history.has_next_page:
            history.next_page()
        return await _await_history()

    async def on_prev_page() -> tuple[List[List[Any]], str, str]:
        if history.has_previous_page:
            history.previous_page()
        return await _await_history()

    def on_select_history(row_index: int) -> tuple[Optional[int], str, str, str, str]:
        results = history.get_results()
        if row_index < 0 or row_index >= len(results):
            return (None, *_detail_view(None))
        item = results[row_index]
        return (item.id, *_detail_view(item))

    async def on_toggle_history_star(
        generation_id: Optional[int],
    ) -> tuple[List[List[Any]], str, str, str]:
        item = history.find(generation_id) if generation_id is not None else None
        if item is None:
            rows, page_label, status = _history_view()
            return rows, page_label, status, star_label(False)
        ticket = stars.toggle_star(item.id, stars.is_starred(item.id, item.starred))
        await ticket.settled
        rows, page_label, status = await _await_history()
        return rows, page_label, status, star_label(stars.is_starred(item.id, item.starred))

    return {
        "on_generate": on_generate,
        "on_force_generate": on_force_generate,
        "on_dismiss_advisory": on_dismiss_advisory,
        "on_copy": on_copy,
        "on_toggle_current_star": on_toggle_current_star,
        "on_load_history": on_load_history,
        "on_search": on_search,
        "on_next_page": on_next_page,
        "on_prev_page": on_prev_page,
        "on_select_history": on_select_history,
        "on_toggle_history_star": on_toggle_history_star,
    }
