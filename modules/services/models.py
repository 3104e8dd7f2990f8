"""Generation records exchanged with the API."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Dict, Mapping


@dataclass(frozen=True, slots=True)
class LanguageRef:
    """Language embedded in a generation record."""

    id: int
    name: str


@dataclass(frozen=True, slots=True)
class Generation:
    """One persisted prompt to code result."""

    id: int
    prompt: str
    code: str
    created_at: str
    language: LanguageRef
    starred: bool = False

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "Generation":
        """Build a record from API JSON; raises ValueError on malformed data."""
        if not isinstance(payload, Mapping):
            raise ValueError(f"expected a generation object, got {type(payload).__name__}")
        try:
            generation_id = int(payload["id"])
        except (KeyError, TypeError, ValueError) as exc:
            raise ValueError("generation payload is missing a valid 'id'") from exc

        language = payload.get("language") or {}
        if isinstance(language, Mapping):
            language_ref = LanguageRef(
                id=int(language.get("id") or 0),
                name=str(language.get("name") or ""),
            )
        else:
            language_ref = LanguageRef(id=0, name=str(language))

        return cls(
            id=generation_id,
            prompt=str(payload.get("prompt") or ""),
            code=str(payload.get("code") or ""),
            created_at=str(payload.get("createdAt") or ""),
            language=language_ref,
            starred=bool(payload.get("starred") or False),
        )

    def to_payload(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "prompt": self.prompt,
            "code": self.code,
            "createdAt": self.created_at,
            "starred": self.starred,
            "language": {"id": self.language.id, "name": self.language.name},
        }

    def with_starred(self, starred: bool) -> "Generation":
        return replace(self, starred=starred)
