"""Gradio layout composition for the generator and history views."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

try:
    import gradio as gr
except ImportError:  # pragma: no cover
    gr = None  # type: ignore

from config.settings import AppConfig
from modules.coordinators.generation import GenerationRequestCoordinator
from modules.coordinators.history_store import HistoryQueryStore
from modules.coordinators.star_toggle import StarToggleCoordinator
from modules.prompting.classifier import PromptClassifier
from modules.prompting.languages import LanguageRegistry
from modules.services.sync_client import SyncClient
from modules.ui.callbacks import HISTORY_COLUMNS, build_callbacks

_THEME_JS = {
    "dark": "() => { document.body.classList.add('dark'); }",
    "light": "() => { document.body.classList.remove('dark'); }",
}

_COPY_JS = "(code) => { if (code) { navigator.clipboard.writeText(code); } return [code]; }"


def _load_languages(config: AppConfig) -> LanguageRegistry:
    registry = LanguageRegistry()
    registry.load_from_file(Path(config.assets_dir) / "languages.json")
    return registry


def build_app(config: AppConfig, client: Optional[SyncClient] = None) -> Any:
    """Compose and return the Gradio application."""
    if gr is None:
        raise RuntimeError("Gradio is not installed; install the project dependencies first.")

    client = client or SyncClient(config)
    languages = _load_languages(config)
    generator = GenerationRequestCoordinator(
        config,
        client,
        classifier=PromptClassifier(),
        languages=languages,
    )
    stars = StarToggleCoordinator(client)
    history = HistoryQueryStore(config, client)
    callbacks_map = build_callbacks(config, generator, stars, history, languages)

    language_choices = [(option.label, option.value) for option in languages.list_languages()]
    default_language = (
        config.default_language if config.default_language in languages else language_choices[0][1]
    )

    def _advisory_update(message: str) -> Any:
        return gr.update(value=message, visible=bool(message))

    async def _generate(prompt: str, language: str):
        code, status, advisory, star = await callbacks_map["on_generate"](prompt, language)
        return code, status, _advisory_update(advisory), star

    async def _force_generate(prompt: str, language: str):
        code, status, advisory, star = await callbacks_map["on_force_generate"](prompt, language)
        return code, status, _advisory_update(advisory), star

    def _dismiss():
        code, status, advisory, star = callbacks_map["on_dismiss_advisory"]()
        return code, status, _advisory_update(advisory), star

    def _dismiss_and_clear():
        return ("", *_dismiss())

    def _select_row(evt: gr.SelectData):
        row = evt.index[0] if isinstance(evt.index, (list, tuple)) else evt.index
        return callbacks_map["on_select_history"](int(row))

    with gr.Blocks(title="Mini Code Copilot", js=_THEME_JS.get(config.ui_theme)) as demo:
        gr.Markdown("## Mini Code Copilot\nGenerate code with AI assistance")

        with gr.Tab("Generator"):
            with gr.Row():
                with gr.Column():
                    language = gr.Dropdown(
                        label="Language",
                        choices=language_choices,
                        value=default_language,
                    )
                    prompt = gr.Textbox(
                        label="Prompt",
                        lines=8,
                        placeholder="e.g., Create a function to reverse a string...",
                    )
                    generate_btn = gr.Button("✨ Generate Code", variant="primary")
                    advisory = gr.Markdown(visible=False)
                    with gr.Row():
                        acknowledge_btn = gr.Button("Got it")
                        force_btn = gr.Button("Generate anyway")
                        clear_btn = gr.Button("Clear Prompt")

                with gr.Column():
                    output_code = gr.Code(label="Output", interactive=False)
                    with gr.Row():
                        star_btn = gr.Button("☆ Star")
                        copy_btn = gr.Button("📋 Copy")
                    status = gr.Markdown("Ready.")
                    copy_status = gr.Markdown()

            generator_outputs = [output_code, status, advisory, star_btn]
            generate_btn.click(
                fn=_generate,
                inputs=[prompt, language],
                outputs=generator_outputs,
                trigger_mode="once",
            )
            prompt.submit(
                fn=_generate,
                inputs=[prompt, language],
                outputs=generator_outputs,
                trigger_mode="once",
            )
            force_btn.click(
                fn=_force_generate,
                inputs=[prompt, language],
                outputs=generator_outputs,
                trigger_mode="once",
            )
            acknowledge_btn.click(fn=_dismiss, outputs=generator_outputs)
            clear_btn.click(fn=_dismiss_and_clear, outputs=[prompt, *generator_outputs])
            star_btn.click(fn=callbacks_map["on_toggle_current_star"], outputs=star_btn)
            copy_btn.click(
                fn=callbacks_map["on_copy"],
                inputs=[output_code],
                outputs=copy_status,
                js=_COPY_JS,
            )

        with gr.Tab("History") as history_tab:
            search = gr.Textbox(label="Search", placeholder="Search by prompt or code...")
            history_table = gr.Dataframe(
                headers=HISTORY_COLUMNS,
                interactive=False,
                wrap=True,
            )
            with gr.Row():
                prev_btn = gr.Button("← Previous")
                page_label = gr.Markdown("Page 1")
                next_btn = gr.Button("Next →")
            history_status = gr.Markdown()

            selected_id = gr.State(None)
            with gr.Accordion("Details", open=True):
                detail_meta = gr.Markdown()
                detail_prompt = gr.Textbox(label="Prompt", interactive=False, lines=3)
                detail_code = gr.Code(label="Code", interactive=False)
                detail_star_btn = gr.Button("☆ Star")

            history_outputs = [history_table, page_label, history_status]
            history_tab.select(fn=callbacks_map["on_load_history"], outputs=history_outputs)
            search.change(
                fn=callbacks_map["on_search"],
                inputs=search,
                outputs=history_outputs,
                concurrency_limit=None,
            )
            prev_btn.click(fn=callbacks_map["on_prev_page"], outputs=history_outputs)
            next_btn.click(fn=callbacks_map["on_next_page"], outputs=history_outputs)
            history_table.select(
                fn=_select_row,
                outputs=[selected_id, detail_meta, detail_prompt, detail_code, detail_star_btn],
            )
            detail_star_btn.click(
                fn=callbacks_map["on_toggle_history_star"],
                inputs=selected_id,
                outputs=[*history_outputs, detail_star_btn],
            )

    return demo
