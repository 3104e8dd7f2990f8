"""Generate-code request lifecycle."""

from __future__ import annotations

import asyncio
import logging
import time
from enum import Enum
from typing import Any, Callable, Optional, Protocol

from config.settings import AppConfig
from modules.coordinators.state import Observable, OperationStatus, PendingOperation
from modules.prompting.classifier import PromptClassifier
from modules.prompting.languages import LanguageRegistry
from modules.services.errors import (
    EmptyPromptError,
    GenerationInProgressError,
    TransportError,
    UnsupportedLanguageError,
)
from modules.services.models import Generation

logger = logging.getLogger(__name__)

ADVISORY_MESSAGE = (
    "Please ask questions related to code generation only. "
    "Your prompt doesn't seem to be about programming or coding."
)


class GenerateClient(Protocol):
    async def generate(self, prompt: str, language: str) -> Generation: ...


class GenerationPhase(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    REJECTED = "rejected"
    IN_FLIGHT = "in-flight"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


_PHASE_STATUS = {
    GenerationPhase.IDLE: OperationStatus.IDLE,
    GenerationPhase.VALIDATING: OperationStatus.IDLE,
    GenerationPhase.REJECTED: OperationStatus.IDLE,
    GenerationPhase.IN_FLIGHT: OperationStatus.IN_FLIGHT,
    GenerationPhase.SUCCEEDED: OperationStatus.SUCCEEDED,
    GenerationPhase.FAILED: OperationStatus.FAILED,
}


class GenerationRequestCoordinator(Observable):
    """Drives one generate-code operation at a time.

    ``submit`` validates the prompt, consults the classifier and only then
    calls the API. A prompt that does not look like a coding task leaves the
    coordinator in ``REJECTED`` with ``advisory`` set; ``force_submit`` skips
    the classifier for callers that acknowledged the advisory.
    """

    def __init__(
        self,
        config: AppConfig,
        client: GenerateClient,
        classifier: Optional[PromptClassifier] = None,
        languages: Optional[LanguageRegistry] = None,
        clipboard: Optional[Callable[[str], Any]] = None,
    ) -> None:
        super().__init__()
        self.config = config
        self.client = client
        self.classifier = classifier or PromptClassifier()
        self.languages = languages or LanguageRegistry()
        self.clipboard = clipboard

        self.phase = GenerationPhase.IDLE
        self.error: Optional[str] = None
        self.advisory = False
        self.current: Optional[Generation] = None
        self._copied_until = 0.0
        self._copy_timer: Optional[asyncio.TimerHandle] = None

    @property
    def operation(self) -> PendingOperation:
        return PendingOperation(_PHASE_STATUS[self.phase], self.error)

    @property
    def in_flight(self) -> bool:
        return self.phase is GenerationPhase.IN_FLIGHT

    @property
    def copied(self) -> bool:
        return time.monotonic() < self._copied_until

    async def submit(self, prompt: str, language: str) -> Optional[Generation]:
        """Validate, classify and generate.

        Returns the new generation, or None when the prompt was rejected by
        the classifier or the request failed (see ``error``).
        """
        self._validate(prompt, language)
        if not self.classifier.is_coding_prompt(prompt):
            logger.info("Prompt rejected by classifier; waiting for user override")
            self.advisory = True
            self._transition(GenerationPhase.REJECTED)
            return None
        return await self._generate(prompt, language)

    async def force_submit(self, prompt: str, language: str) -> Optional[Generation]:
        """Generate without consulting the classifier."""
        self._validate(prompt, language)
        return await self._generate(prompt, language)

    def dismiss_advisory(self) -> None:
        if self.advisory:
            self.advisory = False
            self._transition(GenerationPhase.IDLE)

    def copy_current_code(self) -> bool:
        """Copy the current result's code and raise the ``copied`` flag."""
        if self.current is None:
            return False
        if self.clipboard is not None:
            self.clipboard(self.current.code)

        delay = self.config.copy_ack_seconds
        self._copied_until = time.monotonic() + delay
        if self._copy_timer is not None:
            self._copy_timer.cancel()
            self._copy_timer = None
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None
        if loop is not None:
            self._copy_timer = loop.call_later(delay, self._clear_copied)
        self._notify()
        return True

    # Internal helpers ---------------------------------------------------------
    def _validate(self, prompt: str, language: str) -> None:
        if self.in_flight:
            raise GenerationInProgressError()

        self.advisory = False
        self.error = None
        self._transition(GenerationPhase.VALIDATING)

        if not (prompt or "").strip():
            exc = EmptyPromptError()
            self.error = exc.message
            self._transition(GenerationPhase.REJECTED)
            raise exc
        if language not in self.languages:
            exc = UnsupportedLanguageError(language)
            self.error = exc.message
            self._transition(GenerationPhase.REJECTED)
            raise exc

    async def _generate(self, prompt: str, language: str) -> Optional[Generation]:
        self.current = None
        self.error = None
        self._transition(GenerationPhase.IN_FLIGHT)
        try:
            generation = await self.client.generate(prompt, language)
        except TransportError as exc:
            logger.warning("Generation failed: %s", exc.message)
            self.error = exc.message
            self._transition(GenerationPhase.FAILED)
            return None
        except BaseException:
            self.error = "Failed to generate code"
            self._transition(GenerationPhase.FAILED)
            raise

        logger.info("Generated code for generation %s (%s)", generation.id, language)
        self.current = generation
        self._transition(GenerationPhase.SUCCEEDED)
        return generation

    def _clear_copied(self) -> None:
        self._copy_timer = None
        self._copied_until = 0.0
        self._notify()

    def _transition(self, phase: GenerationPhase) -> None:
        self.phase = phase
        self._notify()
