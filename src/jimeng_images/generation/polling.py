"""Status polling for submitted Jimeng jobs.

Status codes reported by the history endpoint:

* ``20`` - submitted / queued
* ``42``, ``45`` - processing
* ``50`` - finished with results
* ``21`` - finished (older models)
* ``30`` - failed, see ``fail_code``
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any

from ..providers.providers_base import ProviderGateway
from .ability_graph import DEFAULT_ASSISTANT_ID
from .generation_errors import (
    ContentFiltered,
    GenerationFailed,
    GenerationTimeout,
    RecordMissing,
)
from .generation_models import JobHandle, JobStatus

logger = logging.getLogger(__name__)

HISTORY_PATH = "/mweb/v1/get_history_by_ids"

STATUS_SUBMITTED = 20
PROCESSING_STATES = frozenset({STATUS_SUBMITTED, 42, 45})
FAIL_STATE = 30
CONTENT_FILTERED_FAIL_CODE = "2038"


def _scene(scene: str, width: int, height: int, uniq_key: str) -> dict[str, Any]:
    return {
        "scene": scene,
        "width": width,
        "height": height,
        "uniq_key": uniq_key,
        "format": "webp",
    }


# Renditions the provider pre-renders for each result image.
IMAGE_SCENE_LIST: tuple[dict[str, Any], ...] = (
    _scene("smart_crop", 360, 360, "smart_crop-w:360-h:360"),
    _scene("smart_crop", 480, 480, "smart_crop-w:480-h:480"),
    _scene("smart_crop", 720, 720, "smart_crop-w:720-h:720"),
    _scene("smart_crop", 720, 480, "smart_crop-w:720-h:480"),
    _scene("smart_crop", 360, 240, "smart_crop-w:360-h:240"),
    _scene("smart_crop", 240, 320, "smart_crop-w:240-h:320"),
    _scene("smart_crop", 480, 640, "smart_crop-w:480-h:640"),
    _scene("normal", 2400, 2400, "2400"),
    _scene("normal", 1080, 1080, "1080"),
    _scene("normal", 720, 720, "720"),
    _scene("normal", 480, 480, "480"),
    _scene("normal", 360, 360, "360"),
)


def extract_image_url(item: dict[str, Any] | None) -> str | None:
    """Return the large image URL of a result item, or its cover as fallback."""
    if not isinstance(item, dict):
        return None
    image = item.get("image")
    large_images = image.get("large_images") if isinstance(image, dict) else None
    if isinstance(large_images, list) and large_images:
        first = large_images[0]
        if isinstance(first, dict) and first.get("image_url"):
            return first["image_url"]
    common_attr = item.get("common_attr")
    if isinstance(common_attr, dict):
        return common_attr.get("cover_url") or None
    return None


@dataclass(slots=True)
class JobPoller:
    """Poll the history endpoint until a job reaches a terminal state."""

    gateway: ProviderGateway
    poll_interval_seconds: float = 1.0
    max_attempts: int = 120
    assistant_id: int = DEFAULT_ASSISTANT_ID
    log: logging.Logger = field(default_factory=lambda: logger)

    async def wait(self, handle: JobHandle, token: str) -> list[str | None]:
        state = JobStatus(status=STATUS_SUBMITTED)
        while (
            state.status in PROCESSING_STATES
            and not state.item_list
            and state.attempts < self.max_attempts
        ):
            await asyncio.sleep(self.poll_interval_seconds)
            state.attempts += 1
            await self._refresh(handle, token, state)
            if state.attempts % 5 == 0 or state.item_list:
                self.log.info(
                    "generation.poll.progress",
                    extra={
                        "history_id": handle.history_id,
                        "attempt": state.attempts,
                        "status": state.status,
                        "items": len(state.item_list),
                    },
                )

        if state.status in PROCESSING_STATES and not state.item_list:
            self.log.warning(
                "generation.poll.timeout",
                extra={"history_id": handle.history_id, "attempts": state.attempts},
            )
            raise GenerationTimeout(
                f"image generation timed out after {state.attempts} polls"
            )

        if state.status == FAIL_STATE:
            self.log.warning(
                "generation.poll.failed",
                extra={"history_id": handle.history_id, "fail_code": state.fail_code},
            )
            if state.fail_code == CONTENT_FILTERED_FAIL_CODE:
                raise ContentFiltered()
            raise GenerationFailed(f"image generation failed (fail_code={state.fail_code})")

        if not state.item_list:
            raise GenerationFailed(
                f"job finished with status {state.status} but returned no images"
            )
        return [extract_image_url(item) for item in state.item_list]

    async def _refresh(self, handle: JobHandle, token: str, state: JobStatus) -> None:
        data = await self.gateway.request(
            "post",
            HISTORY_PATH,
            token,
            data={
                "history_ids": [handle.history_id],
                "image_info": {
                    "width": 2048,
                    "height": 2048,
                    "format": "webp",
                    "image_scene_list": [dict(scene) for scene in IMAGE_SCENE_LIST],
                },
                "http_common_info": {"aid": self.assistant_id},
            },
        )
        record = data.get(handle.history_id) if isinstance(data, dict) else None
        if not record:
            self.log.warning(
                "generation.poll.record_missing",
                extra={"history_id": handle.history_id},
            )
            raise RecordMissing()
        if not isinstance(record, dict):
            raise GenerationFailed("history record has an unexpected shape")

        status = record.get("status", state.status)
        if isinstance(status, bool) or not isinstance(status, (int, str)):
            raise GenerationFailed("history record carries an invalid status")
        try:
            state.status = int(status)
        except ValueError as exc:
            raise GenerationFailed("history record carries an invalid status") from exc

        items = record.get("item_list") or []
        if not isinstance(items, list):
            raise GenerationFailed("history record carries an invalid item list")
        fail_code = record.get("fail_code")
        state.fail_code = str(fail_code) if fail_code not in (None, "") else None
        state.item_list = items
