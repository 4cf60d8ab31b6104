"""Dependency wiring helpers."""

from __future__ import annotations

from fastapi import FastAPI

from .api.errors import ApiError, api_error_handler
from .config import Settings
from .generation.ability_graph import AbilityGraphBuilder
from .generation.generation_api import router as generation_router
from .generation.generation_service import ImageGenerationService
from .generation.polling import JobPoller
from .providers.providers_base import ProviderGateway
from .providers.providers_jimeng import JimengGateway
from .tokens.token_api import router as token_router
from .tokens.token_service import TokenService


def build_gateway(settings: Settings) -> ProviderGateway:
    """Instantiate the httpx-backed Jimeng gateway."""
    return JimengGateway(
        base_url=settings.base_url,
        assistant_id=settings.assistant_id,
        timeout_seconds=settings.request_timeout_seconds,
    )


def include_routers(
    app: FastAPI,
    settings: Settings,
    gateway: ProviderGateway | None = None,
) -> None:
    """Mount module routers and attach services."""
    gateway = gateway or build_gateway(settings)
    generation_service = ImageGenerationService(
        gateway=gateway,
        builder=AbilityGraphBuilder(assistant_id=settings.assistant_id),
        poller=JobPoller(
            gateway=gateway,
            poll_interval_seconds=settings.poll_interval_seconds,
            max_attempts=settings.max_poll_attempts,
            assistant_id=settings.assistant_id,
        ),
    )

    app.state.settings = settings
    app.state.gateway = gateway
    app.state.generation_service = generation_service
    app.state.token_service = TokenService(gateway=gateway)

    app.add_exception_handler(ApiError, api_error_handler)  # type: ignore[arg-type]
    app.include_router(generation_router)
    app.include_router(token_router)
