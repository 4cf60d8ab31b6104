"""Generation pipeline: resolve, build, submit, poll, fall back."""

from .generation_errors import (
    APIRequestFailed,
    ContentFiltered,
    FailureKind,
    GenerationError,
    GenerationFailed,
    GenerationTimeout,
    InsufficientCredits,
    RecordMissing,
    ReferenceUploadFailed,
)
from .generation_models import GenerationRequest, JobHandle, ResolvedGeometry
from .generation_service import ImageGenerationService

__all__ = [
    "APIRequestFailed",
    "ContentFiltered",
    "FailureKind",
    "GenerationError",
    "GenerationFailed",
    "GenerationRequest",
    "GenerationTimeout",
    "ImageGenerationService",
    "InsufficientCredits",
    "JobHandle",
    "RecordMissing",
    "ReferenceUploadFailed",
    "ResolvedGeometry",
]
