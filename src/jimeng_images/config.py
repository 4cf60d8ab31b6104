"""Application configuration for the Jimeng orchestration service.

Values are read from ``JIMENG_``-prefixed environment variables. Polling
defaults give a job roughly two minutes to finish.
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .generation.ability_graph import DEFAULT_ASSISTANT_ID
from .generation.generation_models import DEFAULT_MODEL
from .providers.providers_jimeng import DEFAULT_BASE_URL


class Settings(BaseSettings):
    """Pydantic settings container for the service layer."""

    model_config = SettingsConfigDict(env_prefix="JIMENG_")

    base_url: str = Field(
        default=DEFAULT_BASE_URL,
        description="Root URL of the Jimeng web API.",
    )
    default_model: str = Field(
        default=DEFAULT_MODEL,
        description="Model used when a request does not name one.",
    )
    assistant_id: int = Field(
        default=DEFAULT_ASSISTANT_ID,
        description="Application id sent as ``aid`` with every request.",
    )
    request_timeout_seconds: float = Field(
        default=30.0,
        ge=0.1,
        description="Timeout applied to each provider request in seconds.",
    )
    poll_interval_seconds: float = Field(
        default=1.0,
        ge=0.0,
        description="Delay between job status polls in seconds.",
    )
    max_poll_attempts: int = Field(
        default=120,
        ge=1,
        description="Maximum status polls before a job is reported as timed out.",
    )
    log_level: str = Field(
        default="INFO",
        description="Root logging level.",
    )

    @classmethod
    def build_default(cls) -> "Settings":
        """Construct configuration from the environment."""

        return cls()


__all__ = ["Settings"]
