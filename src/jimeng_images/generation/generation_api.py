"""HTTP routes for image generation."""

from __future__ import annotations

import logging
import time

from fastapi import APIRouter, Depends, Header, Request

from ..api.errors import error_from_generation, unauthorized_error
from ..tokens.token_service import pick_token, token_split
from .generation_errors import GenerationError
from .generation_models import GenerationRequest
from .generation_schemas import ImageData, ImageGenerationBody, ImageGenerationResponse
from .generation_service import ImageGenerationService

router = APIRouter(prefix="/v1/images", tags=["images"])
logger = logging.getLogger(__name__)


def get_generation_service(request: Request) -> ImageGenerationService:
    """Fetch generation service from application state."""
    try:
        return request.app.state.generation_service  # type: ignore[attr-defined]
    except AttributeError as exc:  # pragma: no cover - defensive path
        raise RuntimeError("ImageGenerationService is not configured") from exc


@router.post("/generations", response_model=ImageGenerationResponse)
async def create_images(
    body: ImageGenerationBody,
    http_request: Request,
    authorization: str | None = Header(None),
    service: ImageGenerationService = Depends(get_generation_service),
) -> ImageGenerationResponse:
    """Generate images and return their URLs in provider order."""
    tokens = token_split(authorization)
    if not tokens:
        raise unauthorized_error("Authorization header with a session token is required")

    generation_request = GenerationRequest(
        model=body.model or http_request.app.state.settings.default_model,
        prompt=body.prompt,
        token=pick_token(tokens),
        negative_prompt=body.negative_prompt,
        ratio=body.ratio,
        resolution=body.resolution,
        sample_strength=body.sample_strength,
        reference_image=body.image,
    )
    try:
        urls = await service.generate_with_fallback(generation_request)
    except GenerationError as exc:
        logger.warning(
            "generation.request.failed",
            extra={"kind": exc.kind.value, "error": exc.message},
        )
        raise error_from_generation(exc) from exc

    return ImageGenerationResponse(
        created=int(time.time()),
        data=[ImageData(url=url) for url in urls],
    )
