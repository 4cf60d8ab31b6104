"""Data structures for the generation pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

DEFAULT_MODEL = "jimeng-image-4.5"

RESOLUTION_TIERS: tuple[str, ...] = ("2k", "1k")


class ModelClass(StrEnum):
    """Capability class of a public model name."""

    CURRENT = "current"  # 4.x, 2k by default
    PREVIOUS = "previous"  # 3.x, 1k by default
    LEGACY_FIXED = "legacy_fixed"  # 2.0-pro, 1k only


@dataclass(frozen=True, slots=True)
class GenerationRequest:
    """Caller input for a single generation job."""

    model: str
    prompt: str
    token: str
    negative_prompt: str = ""
    ratio: str = "1:1"
    resolution: str = "2k"
    sample_strength: float = 0.5
    reference_image: str | None = None

    def __post_init__(self) -> None:
        if not 0.0 <= self.sample_strength <= 1.0:
            raise ValueError("sample_strength must be within [0, 1]")

    @property
    def has_reference(self) -> bool:
        return bool(self.reference_image)


@dataclass(frozen=True, slots=True)
class ResolvedGeometry:
    """Output ratio and pixel size derived for one pipeline attempt."""

    ratio: str
    image_ratio: int
    width: int
    height: int
    resolution: str


@dataclass(frozen=True, slots=True)
class JobHandle:
    """Opaque provider reference used as the polling key."""

    history_id: str


@dataclass(slots=True)
class JobStatus:
    """Latest known state of a submitted job, updated on every poll."""

    status: int
    fail_code: str | None = None
    item_list: list[dict[str, Any]] = field(default_factory=list)
    attempts: int = 0
