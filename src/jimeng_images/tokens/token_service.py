"""Session token parsing and balance lookups."""

from __future__ import annotations

import asyncio
import random
from dataclasses import dataclass
from typing import Any

import structlog

from ..providers.providers_base import ProviderGateway
from ..providers.providers_jimeng import mask_token

logger = structlog.get_logger(__name__)


def token_split(authorization: str | None) -> list[str]:
    """Split an ``Authorization: Bearer a,b`` header into individual tokens."""
    if not authorization:
        return []
    value = authorization.strip()
    if value[:7].lower() == "bearer ":
        value = value[7:]
    return [token.strip() for token in value.split(",") if token.strip()]


def pick_token(tokens: list[str]) -> str:
    """Choose one token to spread load across accounts."""
    return random.choice(tokens)


@dataclass(slots=True)
class TokenService:
    """Inspect session tokens against the provider."""

    gateway: ProviderGateway

    async def check(self, token: str) -> bool:
        live = await self.gateway.get_token_live_status(token)
        logger.info("token.check", token=mask_token(token), live=live)
        return live

    async def points(self, tokens: list[str]) -> list[dict[str, Any]]:
        """Fetch balances for all tokens concurrently, keeping input order."""
        balances = await asyncio.gather(
            *(self.gateway.get_credit(token) for token in tokens)
        )
        logger.info("token.points", count=len(tokens))
        return [
            {"token": token, "points": balance.to_dict()}
            for token, balance in zip(tokens, balances)
        ]
