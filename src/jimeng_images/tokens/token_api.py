"""HTTP routes for session token inspection."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Header, Request

from ..api.errors import error_from_generation, unauthorized_error
from ..generation.generation_errors import GenerationError
from .token_schemas import TokenCheckRequest, TokenCheckResponse, TokenPoints
from .token_service import TokenService, token_split

router = APIRouter(prefix="/token", tags=["token"])


def get_token_service(request: Request) -> TokenService:
    """Fetch token service from application state."""
    try:
        return request.app.state.token_service  # type: ignore[attr-defined]
    except AttributeError as exc:  # pragma: no cover - defensive path
        raise RuntimeError("TokenService is not configured") from exc


@router.post("/check", response_model=TokenCheckResponse)
async def check_token(
    body: TokenCheckRequest,
    service: TokenService = Depends(get_token_service),
) -> TokenCheckResponse:
    """Report whether a session token is still accepted by the provider."""
    return TokenCheckResponse(live=await service.check(body.token))


@router.post("/points", response_model=list[TokenPoints])
async def token_points(
    authorization: str | None = Header(None),
    service: TokenService = Depends(get_token_service),
) -> list[TokenPoints]:
    """Return the credit balance of every token in the Authorization header."""
    tokens = token_split(authorization)
    if not tokens:
        raise unauthorized_error("Authorization header with at least one token is required")
    try:
        entries = await service.points(tokens)
    except GenerationError as exc:
        raise error_from_generation(exc) from exc
    return [TokenPoints(**entry) for entry in entries]
