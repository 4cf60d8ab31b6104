"""Generation service: one pipeline attempt plus resolution fallback."""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field

from ..providers.providers_base import ProviderGateway
from .ability_graph import AbilityGraphBuilder
from .generation_errors import (
    APIRequestFailed,
    FailureKind,
    GenerationError,
    GenerationFailed,
    InsufficientCredits,
    ReferenceUploadFailed,
)
from .generation_models import RESOLUTION_TIERS, GenerationRequest
from .geometry import get_model, model_class_for, resolve_geometry
from .polling import JobPoller
from .submission import submit_draft

logger = logging.getLogger(__name__)

# Markers of balance errors that only surface as message text.
INSUFFICIENT_CREDIT_MARKERS: tuple[str, ...] = ("积分不足", "2039", "1006")

INSUFFICIENT_CREDITS_GUIDANCE = (
    "Insufficient credits even at the lowest resolution; top up credits at "
    "https://jimeng.jianying.com and try again"
)

# Errors whose message may still carry a provider balance code.
MARKER_CHECKED_ERRORS: tuple[type[GenerationError], ...] = (APIRequestFailed, GenerationFailed)


def is_insufficient_credits(exc: Exception) -> bool:
    """Decide whether a failure should trigger a lower-resolution retry."""
    if isinstance(exc, GenerationError):
        if exc.kind is not FailureKind.GENERIC:
            return exc.kind is FailureKind.INSUFFICIENT_CREDITS
        # Subclasses such as RecordMissing or ReferenceUploadFailed are final.
        if type(exc) not in MARKER_CHECKED_ERRORS:
            return False
    return _message_signals_insufficient_credits(str(exc))


def _message_signals_insufficient_credits(message: str) -> bool:
    # Compatibility path for errors raised without a structured kind.
    return any(marker in message for marker in INSUFFICIENT_CREDIT_MARKERS)


@dataclass(slots=True)
class ImageGenerationService:
    """Run image generation jobs against a provider gateway."""

    gateway: ProviderGateway
    builder: AbilityGraphBuilder = field(default_factory=AbilityGraphBuilder)
    poller: JobPoller | None = None
    resolution_tiers: tuple[str, ...] = RESOLUTION_TIERS
    log: logging.Logger = field(default_factory=lambda: logger)

    def __post_init__(self) -> None:
        if self.poller is None:
            self.poller = JobPoller(gateway=self.gateway)

    async def generate(self, request: GenerationRequest) -> list[str | None]:
        """Run one full attempt: upload, resolve, credit check, submit and poll."""
        reference_uri = None
        if request.has_reference:
            reference_uri = await self._upload_reference(request)

        geometry = resolve_geometry(
            request.prompt,
            request.ratio,
            request.resolution,
            model_class_for(request.model),
        )
        self.log.info(
            "generation.request.start",
            extra={
                "model": request.model,
                "model_key": get_model(request.model),
                "ratio": geometry.ratio,
                "width": geometry.width,
                "height": geometry.height,
                "resolution": geometry.resolution,
                "sample_strength": request.sample_strength,
                "mode": "blend" if reference_uri else "generate",
            },
        )

        balance = await self.gateway.get_credit(request.token)
        if balance.total_credit <= 0:
            await self.gateway.receive_credit(request.token)

        draft = self.builder.build(request, geometry, reference_uri=reference_uri)
        handle = await submit_draft(self.gateway, draft.payload, request.token)
        assert self.poller is not None
        return await self.poller.wait(handle, request.token)

    async def generate_with_fallback(self, request: GenerationRequest) -> list[str | None]:
        """Generate, stepping down the resolution tier while credits run short."""
        tiers = self.resolution_tiers
        index = tiers.index(request.resolution) if request.resolution in tiers else 0

        while index < len(tiers):
            attempt = dataclasses.replace(request, resolution=tiers[index])
            self.log.info("generation.attempt", extra={"resolution": attempt.resolution})
            try:
                return await self.generate(attempt)
            except Exception as exc:
                if not is_insufficient_credits(exc):
                    raise
                if index < len(tiers) - 1:
                    index += 1
                    self.log.warning(
                        "generation.fallback.downgrade",
                        extra={"from": attempt.resolution, "to": tiers[index]},
                    )
                    continue
                raise InsufficientCredits(INSUFFICIENT_CREDITS_GUIDANCE) from exc

        raise GenerationFailed("image generation failed")

    async def _upload_reference(self, request: GenerationRequest) -> str:
        source = request.reference_image or ""
        description = (
            f"data-uri({len(source)} chars)" if source.startswith("data:") else source[:80]
        )
        try:
            result = await self.gateway.upload_file(request.token, source)
        except ReferenceUploadFailed:
            raise
        except Exception as exc:
            self.log.error(
                "generation.reference.upload_failed",
                extra={"source": description, "error": str(exc)},
            )
            raise ReferenceUploadFailed(f"reference image upload failed: {exc}") from exc
        image_uri = result.get("image_uri")
        if not image_uri:
            raise ReferenceUploadFailed("reference image upload returned no image uri")
        self.log.info(
            "generation.reference.uploaded",
            extra={"source": description, "image_uri": image_uri},
        )
        return image_uri
