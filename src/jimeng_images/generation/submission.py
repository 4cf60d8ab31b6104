"""Draft submission against the Jimeng generate endpoint."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from ..providers.providers_base import ProviderGateway
from .ability_graph import DRAFT_VERSION
from .generation_errors import GenerationFailed
from .generation_models import JobHandle

logger = logging.getLogger(__name__)

GENERATE_PATH = "/mweb/v1/aigc_draft/generate"


async def submit_draft(
    gateway: ProviderGateway,
    payload: Mapping[str, Any],
    token: str,
) -> JobHandle:
    """Create the generation job and return its history record handle."""
    data = await gateway.request(
        "post",
        GENERATE_PATH,
        token,
        params={
            "da_version": DRAFT_VERSION,
            "web_component_open_flag": 1,
            "web_version": DRAFT_VERSION,
        },
        data=payload,
    )
    aigc_data = data.get("aigc_data") if isinstance(data, dict) else None
    history_id = aigc_data.get("history_record_id") if isinstance(aigc_data, dict) else None
    if isinstance(history_id, bool) or not isinstance(history_id, (str, int)) or not history_id:
        raise GenerationFailed("history record id is missing from the submit response")
    logger.info("generation.submit.accepted", extra={"history_id": history_id})
    return JobHandle(history_id=str(history_id))
