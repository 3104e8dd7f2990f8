"""Target language table."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List


@dataclass(frozen=True, slots=True)
class LanguageOption:
    """A language identifier sent to the server plus its display label."""

    value: str
    label: str


DEFAULT_LANGUAGES: tuple[LanguageOption, ...] = (
    LanguageOption("javascript", "JavaScript"),
    LanguageOption("typescript", "TypeScript"),
    LanguageOption("python", "Python"),
    LanguageOption("java", "Java"),
    LanguageOption("cpp", "C++"),
    LanguageOption("csharp", "C#"),
    LanguageOption("go", "Go"),
    LanguageOption("rust", "Rust"),
    LanguageOption("php", "PHP"),
    LanguageOption("ruby", "Ruby"),
    LanguageOption("swift", "Swift"),
    LanguageOption("kotlin", "Kotlin"),
)


class LanguageRegistry:
    """In-memory registry of supported target languages."""

    def __init__(self, defaults: bool = True) -> None:
        self._languages: Dict[str, LanguageOption] = {}
        if defaults:
            for option in DEFAULT_LANGUAGES:
                self.add(option)

    def load_from_file(self, path: Path) -> None:
        """Load extra languages from a JSON list of ``{value, label}`` objects."""
        if not path.exists():
            return
        with path.open("r", encoding="utf-8") as fp:
            data = json.load(fp)
        for entry in data:
            value = str(entry["value"]).strip().lower()
            self.add(LanguageOption(value=value, label=entry.get("label") or value))

    def add(self, option: LanguageOption) -> None:
        """Register a language, replacing any entry with the same value."""
        self._languages[option.value] = option

    def list_languages(self) -> List[LanguageOption]:
        """Return all registered languages in registration order."""
        return list(self._languages.values())

    def __contains__(self, value: object) -> bool:
        return value in self._languages

    def get(self, value: str) -> LanguageOption:
        """Retrieve a language by identifier."""
        try:
            return self._languages[value]
        except KeyError as exc:
            raise KeyError(f"Language '{value}' not found") from exc

    def label_for(self, value: str) -> str:
        """Return the display label, or the identifier itself when unknown."""
        option = self._languages.get(value)
        return option.label if option else value

    def value_for(self, label_or_value: str) -> str:
        """Resolve a dropdown selection (label or identifier) to an identifier."""
        if label_or_value in self._languages:
            return label_or_value
        for option in self._languages.values():
            if option.label == label_or_value:
                return option.value
        return label_or_value
