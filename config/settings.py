"""Configuration helpers for the Mini Code Copilot client."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

DEFAULT_API_BASE = "http://localhost:5000"


@dataclass(slots=True)
class AppConfig:
    """Centralized application configuration."""

    api_base_url: str = DEFAULT_API_BASE
    request_timeout: float = 30.0
    history_page_size: int = 10
    copy_ack_seconds: float = 2.0
    cancel_superseded_requests: bool = True
    default_language: str = "javascript"
    assets_dir: Path = Path("assets")
    log_dir: Path = Path("logs")
    log_level: str = "INFO"
    ui_theme: str = "dark"
    metadata: dict[str, Any] = field(default_factory=dict)


def _load_env_file(path: Path) -> None:
    """Populate environment variables from a simple KEY=VALUE .env file."""
    if not path.exists():
        return

    for line in path.read_text(encoding="utf-8").splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#") or "=" not in stripped:
            continue
        key, value = stripped.split("=", 1)
        os.environ[key.strip()] = value.strip()


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw in (None, ""):
        return default
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return default
    return value if value > 0 else default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw in (None, ""):
        return default
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return default
    return value if value > 0 else default


def load_config(config_path: Optional[str] = None) -> AppConfig:
    """Return an AppConfig instance with environment-aware settings."""
    env_path = Path(config_path) if config_path else Path(".env")
    _load_env_file(env_path)

    api_base_url = (os.getenv("COPILOT_API_BASE") or DEFAULT_API_BASE).rstrip("/")
    theme = (os.getenv("COPILOT_UI_THEME") or "dark").strip().lower()
    if theme not in ("dark", "light"):
        theme = "dark"

    log_level = (os.getenv("COPILOT_LOG_LEVEL") or "INFO").strip().upper()
    if log_level not in ("DEBUG", "INFO", "WARNING", "ERROR"):
        log_level = "INFO"

    metadata: dict[str, Any] = {}
    user_agent = os.getenv("COPILOT_USER_AGENT")
    if user_agent:
        metadata["user_agent"] = user_agent

    return AppConfig(
        api_base_url=api_base_url,
        request_timeout=_env_float("COPILOT_REQUEST_TIMEOUT", 30.0),
        history_page_size=_env_int("COPILOT_HISTORY_PAGE_SIZE", 10),
        log_dir=Path(os.getenv("COPILOT_LOG_DIR", "logs")),
        log_level=log_level,
        assets_dir=Path(os.getenv("COPILOT_ASSETS_DIR", "assets")),
        ui_theme=theme,
        metadata=metadata,
    )
