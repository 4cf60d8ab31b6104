"""FastAPI application entry point."""

from fastapi import FastAPI

from .config import Settings
from .dependencies import include_routers
from .logging import configure_logging
from .providers.providers_base import ProviderGateway


def create_app(
    settings: Settings | None = None,
    gateway: ProviderGateway | None = None,
) -> FastAPI:
    """Build FastAPI instance with configured dependencies."""
    cfg = settings or Settings.build_default()
    configure_logging(cfg.log_level)
    app = FastAPI(title="Jimeng Image Orchestrator")
    include_routers(app, cfg, gateway)
    return app


app = create_app()
