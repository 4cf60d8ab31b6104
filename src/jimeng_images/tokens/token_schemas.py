"""Pydantic schemas for token routes."""

from pydantic import BaseModel, Field


class TokenCheckRequest(BaseModel):
    token: str = Field(min_length=1)


class TokenCheckResponse(BaseModel):
    live: bool


class TokenPoints(BaseModel):
    token: str
    points: dict[str, int]
