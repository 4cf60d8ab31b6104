"""Reusable error primitives for API exception handling."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from fastapi import Request, status
from fastapi.responses import JSONResponse

from ..generation.generation_errors import (
    APIRequestFailed,
    ContentFiltered,
    GenerationError,
    GenerationTimeout,
    InsufficientCredits,
)


@dataclass(slots=True)
class ApiError(Exception):
    """Structured application-level error for HTTP handlers."""

    status_code: int
    code: str
    message: str
    headers: Mapping[str, str] | None = None

    def to_response(self) -> JSONResponse:
        """Materialise the error into a ``JSONResponse`` instance."""

        return JSONResponse(
            status_code=self.status_code,
            content={"error": {"code": self.code, "message": self.message}},
            headers=dict(self.headers or {}),
        )


async def api_error_handler(_: Request, exc: ApiError) -> JSONResponse:
    """Convert :class:`ApiError` exceptions into JSON payloads."""

    return exc.to_response()


def unauthorized_error(message: str) -> ApiError:
    """Return an :class:`ApiError` representing an authentication failure."""

    return ApiError(
        status.HTTP_401_UNAUTHORIZED,
        "unauthorized",
        message,
        headers={"WWW-Authenticate": "Bearer"},
    )


def error_from_generation(exc: GenerationError) -> ApiError:
    """Translate a pipeline failure into its HTTP representation."""

    if isinstance(exc, InsufficientCredits):
        return ApiError(status.HTTP_402_PAYMENT_REQUIRED, "insufficient_credits", exc.message)
    if isinstance(exc, ContentFiltered):
        return ApiError(
            status.HTTP_422_UNPROCESSABLE_ENTITY, "content_filtered", exc.message
        )
    if isinstance(exc, GenerationTimeout):
        return ApiError(status.HTTP_504_GATEWAY_TIMEOUT, "generation_timeout", exc.message)
    if isinstance(exc, APIRequestFailed):
        return ApiError(status.HTTP_502_BAD_GATEWAY, "provider_request_failed", exc.message)
    return ApiError(status.HTTP_502_BAD_GATEWAY, "generation_failed", exc.message)


__all__ = ["ApiError", "api_error_handler", "error_from_generation", "unauthorized_error"]
