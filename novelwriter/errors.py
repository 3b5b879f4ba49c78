"""Error taxonomy shared by the generation services and the provider layer."""

from __future__ import annotations

from typing import Optional


UNAVAILABLE_MESSAGE = "AI service is temporarily unavailable, please retry later."


class GenerationError(RuntimeError):
    """Base class for every failure raised by the generation subsystem."""


class UnsupportedProvider(GenerationError):
    """Raised when a model id is not present in the provider registry."""

    def __init__(self, model_id: str) -> None:
        super().__init__(f"Unsupported AI model: {model_id!r}")
        self.model_id = model_id


class InvalidPromptInput(GenerationError):
    """Raised when a prompt builder is missing a required field."""

    def __init__(self, field: str, message: Optional[str] = None) -> None:
        super().__init__(message or f"A value for '{field}' is required.")
        self.field = field


class GenerationUnavailable(GenerationError):
    """Raised for transport failures, bad provider replies, missing credentials and timeouts.

    The message is always generic; the underlying cause is chained and logged
    by the provider layer instead of being shown to end users.
    """

    def __init__(self, provider_id: Optional[str] = None) -> None:
        super().__init__(UNAVAILABLE_MESSAGE)
        self.provider_id = provider_id


class OutlineParseError(GenerationError):
    """Raised when an outline response cannot be coerced into a JSON object."""

    def __init__(self, raw_text: str) -> None:
        super().__init__("The AI response could not be parsed as an outline JSON object.")
        self.raw_text = raw_text


class GenerationCancelled(GenerationError):
    """Raised when the caller cancels a generation before its result is used."""

    def __init__(self) -> None:
        super().__init__("The generation request was cancelled.")
