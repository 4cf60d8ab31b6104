"""Domain-specific exceptions for the generation pipeline."""

from __future__ import annotations

from enum import StrEnum


class FailureKind(StrEnum):
    """Structured classification used by the resolution fallback."""

    CONTENT_FILTERED = "content_filtered"
    INSUFFICIENT_CREDITS = "insufficient_credits"
    TIMEOUT = "timeout"
    GENERIC = "generic"


class GenerationError(Exception):
    """Base class for generation-related errors."""

    kind: FailureKind = FailureKind.GENERIC
    default_message = "image generation failed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class APIRequestFailed(GenerationError):
    """Raised when a provider call fails at the transport or envelope level."""

    default_message = "provider request failed"


class ReferenceUploadFailed(APIRequestFailed):
    """Raised when the reference image could not be uploaded."""

    default_message = "reference image upload failed"


class GenerationFailed(GenerationError):
    """Raised for malformed or unexpected provider responses."""


class RecordMissing(GenerationFailed):
    """Raised when the provider no longer knows the submitted history record."""

    default_message = "history record does not exist"


class GenerationTimeout(GenerationError):
    """Raised when polling exhausts its attempt budget."""

    kind = FailureKind.TIMEOUT
    default_message = "image generation timed out"


class ContentFiltered(GenerationError):
    """Raised when the provider rejects the prompt or image on policy grounds."""

    kind = FailureKind.CONTENT_FILTERED
    default_message = "content was rejected by the provider's content policy"


class InsufficientCredits(GenerationError):
    """Raised when the account balance cannot pay for the requested tier."""

    kind = FailureKind.INSUFFICIENT_CREDITS
    default_message = "insufficient credits"
