"""Aspect ratio and resolution tier selection for Jimeng drafts.

Ratios come from the caller hint or, failing that, from the prompt itself
(``16:9``, ``16：9``, ``横屏`` and the like). The resolution tier picks one of
two fixed dimension tables.
"""

from __future__ import annotations

import logging
import re

from .generation_models import DEFAULT_MODEL, ModelClass, ResolvedGeometry

logger = logging.getLogger(__name__)

MODEL_MAP: dict[str, str] = {
    "jimeng-image-4.5": "high_aes_general_v40l",
    "jimeng-image-4.1": "high_aes_general_v41",
    "jimeng-image-4.0": "high_aes_general_v40",
    "jimeng-image-3.1": "high_aes_general_v30l_art_fangzhou:general_v3.0_18b",
    "jimeng-image-3.0": "high_aes_general_v30l:general_v3.0_18b",
    "jimeng-image-2.0-pro": "high_aes_general_v20_L:general_v2.0_L",
}

LEGACY_FIXED_MODELS = frozenset({"jimeng-image-2.0-pro"})

ASPECT_RATIOS: tuple[str, ...] = ("21:9", "16:9", "3:2", "4:3", "1:1", "3:4", "2:3", "9:16")

DEFAULT_RATIO = "1:1"

# Provider-side image_ratio index per aspect code.
RATIO_VALUES: dict[str, int] = {
    "21:9": 0,
    "16:9": 1,
    "3:2": 2,
    "4:3": 3,
    "1:1": 8,
    "3:4": 4,
    "2:3": 5,
    "9:16": 6,
}

DIMENSIONS_1K: dict[str, tuple[int, int]] = {
    "21:9": (2016, 846),
    "16:9": (1664, 936),
    "3:2": (1584, 1056),
    "4:3": (1472, 1104),
    "1:1": (1328, 1328),
    "3:4": (1104, 1472),
    "2:3": (1056, 1584),
    "9:16": (936, 1664),
}

DIMENSIONS_2K: dict[str, tuple[int, int]] = {
    "21:9": (3024, 1296),
    "16:9": (2560, 1440),
    "3:2": (2496, 1664),
    "4:3": (2304, 1728),
    "1:1": (2048, 2048),
    "3:4": (1728, 2304),
    "2:3": (1664, 2496),
    "9:16": (1440, 2560),
}

_RATIO_PATTERN = re.compile(r"(\d+)\s*[:：]\s*(\d+)")
_LANDSCAPE_PATTERN = re.compile(r"横屏|横版|宽屏|landscape|widescreen", re.IGNORECASE)
_PORTRAIT_PATTERN = re.compile(r"竖屏|竖版|手机|portrait", re.IGNORECASE)
_SQUARE_PATTERN = re.compile(r"方形|正方|square", re.IGNORECASE)


def get_model(name: str) -> str:
    """Map a public model name to the provider's model key."""
    return MODEL_MAP.get(name) or MODEL_MAP[DEFAULT_MODEL]


def model_class_for(name: str) -> ModelClass:
    if name in LEGACY_FIXED_MODELS:
        return ModelClass.LEGACY_FIXED
    if "image-4." in name:
        return ModelClass.CURRENT
    return ModelClass.PREVIOUS


def detect_aspect_ratio(prompt: str) -> str | None:
    """Return the first supported aspect code mentioned in ``prompt``."""
    for match in _RATIO_PATTERN.finditer(prompt):
        key = f"{match.group(1)}:{match.group(2)}"
        if key in RATIO_VALUES:
            logger.info("geometry.ratio.detected", extra={"ratio": key, "source": "numeric"})
            return key

    for pattern, key in (
        (_LANDSCAPE_PATTERN, "16:9"),
        (_PORTRAIT_PATTERN, "9:16"),
        (_SQUARE_PATTERN, "1:1"),
    ):
        if pattern.search(prompt):
            logger.info("geometry.ratio.detected", extra={"ratio": key, "source": "keyword"})
            return key
    return None


def resolve_resolution(resolution: str | None, model_class: ModelClass) -> str:
    if model_class is ModelClass.LEGACY_FIXED:
        if resolution != "1k":
            logger.warning(
                "geometry.resolution.forced",
                extra={"requested": resolution, "resolution": "1k"},
            )
        return "1k"
    if resolution in ("1k", "2k"):
        return resolution
    return "2k" if model_class is ModelClass.CURRENT else "1k"


def resolve_geometry(
    prompt: str,
    ratio: str | None,
    resolution: str | None,
    model_class: ModelClass,
) -> ResolvedGeometry:
    """Derive ratio code, provider index and pixel size for one attempt.

    A caller ratio equal to the default ``"1:1"`` cannot be told apart from an
    unset one, so a ratio found in the prompt replaces it.
    """
    tier = resolve_resolution(resolution, model_class)

    valid_ratio = ratio if ratio in RATIO_VALUES else DEFAULT_RATIO
    detected = detect_aspect_ratio(prompt)
    if detected and valid_ratio == DEFAULT_RATIO:
        valid_ratio = detected

    table = DIMENSIONS_2K if tier == "2k" else DIMENSIONS_1K
    width, height = table[valid_ratio]
    return ResolvedGeometry(
        ratio=valid_ratio,
        image_ratio=RATIO_VALUES[valid_ratio],
        width=width,
        height=height,
        resolution=tier,
    )
