"""Exception hierarchy for the copilot client."""

from __future__ import annotations

from typing import Optional


class CopilotError(Exception):
    """Base class for every error raised by the client core."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class PromptValidationError(CopilotError):
    """Local validation failure; no network call was made."""


class EmptyPromptError(PromptValidationError):
    def __init__(self, message: str = "Please enter a prompt") -> None:
        super().__init__(message)


class UnsupportedLanguageError(PromptValidationError):
    def __init__(self, language: str) -> None:
        super().__init__(f"Unsupported language: {language}")
        self.language = language


class GenerationInProgressError(CopilotError):
    def __init__(self, message: str = "A generation request is already in progress") -> None:
        super().__init__(message)


class TransportError(CopilotError):
    """Network or server failure for one of the API operations."""

    def __init__(
        self,
        message: str,
        *,
        operation: str = "",
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.operation = operation
        self.status_code = status_code

    def __repr__(self) -> str:
        return (
            f"TransportError(message={self.message!r}, operation={self.operation!r}, "
            f"status_code={self.status_code!r})"
        )
