"""Draft payload construction for Jimeng generation jobs.

A job is described by an ability graph of one of two shapes:

* ``generate`` - plain text-to-image, seeded with a random value so the
  provider does not serve a cached result;
* ``blend`` - conditioned on a previously uploaded reference image.

The graph is wrapped in a versioned draft envelope. Every structural node
carries its own identifier; the provider rejects payloads that reuse one, so
identifiers come from an injected factory and are never shared.
"""

from __future__ import annotations

import json
import random
import time
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, ClassVar

from .generation_models import GenerationRequest, ModelClass, ResolvedGeometry
from .geometry import get_model, model_class_for

IdFactory = Callable[[], str]

DRAFT_VERSION = "3.3.8"
MIN_VERSION = "3.0.2"
DEFAULT_ASSISTANT_ID = 513695
SEED_OFFSET = 2_500_000_000
SEED_SPAN = 100_000_000
BLEND_STRENGTH = 0.5


def _uuid() -> str:
    return str(uuid.uuid4())


def _random_seed() -> int:
    return random.randrange(SEED_OFFSET, SEED_OFFSET + SEED_SPAN)


def _now_ms() -> int:
    return int(time.time() * 1000)


def _node(new_id: IdFactory, **fields: Any) -> dict[str, Any]:
    return {"type": "", "id": new_id(), **fields}


@dataclass(frozen=True, slots=True)
class CoreParams:
    """Parameters shared by both ability shapes."""

    model: str
    prompt: str
    sample_strength: float
    geometry: ResolvedGeometry

    def render(self, new_id: IdFactory, **extra: Any) -> dict[str, Any]:
        return _node(
            new_id,
            model=self.model,
            prompt=self.prompt,
            **extra,
            sample_strength=self.sample_strength,
            image_ratio=self.geometry.image_ratio,
            large_image_info=_node(
                new_id,
                height=self.geometry.height,
                width=self.geometry.width,
                resolution_type=self.geometry.resolution,
            ),
        )


@dataclass(frozen=True, slots=True)
class GenerateAbilities:
    """Text-to-image ability graph."""

    kind: ClassVar[str] = "generate"

    core: CoreParams
    negative_prompt: str
    seed: int

    def render(self, new_id: IdFactory) -> dict[str, Any]:
        return _node(
            new_id,
            generate=_node(
                new_id,
                core_param=self.core.render(
                    new_id, negative_prompt=self.negative_prompt, seed=self.seed
                ),
                history_option=_node(new_id),
            ),
        )


@dataclass(frozen=True, slots=True)
class BlendAbilities:
    """Reference-conditioned ability graph."""

    kind: ClassVar[str] = "blend"

    core: CoreParams
    image_uri: str
    strength: float = BLEND_STRENGTH

    def render(self, new_id: IdFactory) -> dict[str, Any]:
        image = {
            "type": "image",
            "id": new_id(),
            "source_from": "upload",
            "platform_type": 1,
            "name": "",
            "image_uri": self.image_uri,
            "width": 0,
            "height": 0,
            "format": "",
            "uri": self.image_uri,
        }
        return _node(
            new_id,
            blend=_node(
                new_id,
                min_features=[],
                core_param=self.core.render(new_id),
                ability_list=[
                    _node(
                        new_id,
                        name="byte_edit",
                        image_uri_list=[self.image_uri],
                        image_list=[image],
                        strength=self.strength,
                    )
                ],
                history_option=_node(new_id),
                prompt_placeholder_info_list=[_node(new_id, ability_index=0)],
                postedit_param=_node(new_id, generate_type=0),
            ),
        )


AbilityGraph = GenerateAbilities | BlendAbilities


@dataclass(frozen=True, slots=True)
class DraftRequest:
    """Ability graph together with the rendered submission body."""

    abilities: AbilityGraph
    submit_id: str
    payload: dict[str, Any]


@dataclass(slots=True)
class AbilityGraphBuilder:
    """Build draft submission bodies with injectable id, seed and clock sources."""

    id_factory: IdFactory = _uuid
    seed_factory: Callable[[], int] = _random_seed
    clock_ms: Callable[[], int] = _now_ms
    assistant_id: int = DEFAULT_ASSISTANT_ID

    def build(
        self,
        request: GenerationRequest,
        geometry: ResolvedGeometry,
        *,
        reference_uri: str | None = None,
    ) -> DraftRequest:
        model = get_model(request.model)
        abilities: AbilityGraph
        if reference_uri:
            abilities = BlendAbilities(
                core=CoreParams(
                    model=model,
                    prompt=request.prompt + "##",
                    sample_strength=request.sample_strength,
                    geometry=geometry,
                ),
                image_uri=reference_uri,
            )
        else:
            abilities = GenerateAbilities(
                core=CoreParams(
                    model=model,
                    prompt=request.prompt,
                    sample_strength=request.sample_strength,
                    geometry=geometry,
                ),
                negative_prompt=request.negative_prompt,
                seed=self.seed_factory(),
            )

        component_id = self.id_factory()
        rendered = abilities.render(self.id_factory)
        submit_id = self.id_factory()

        payload: dict[str, Any] = {
            "extend": {"root_model": model},
            "submit_id": submit_id,
        }
        if isinstance(abilities, GenerateAbilities):
            payload["metrics_extra"] = self._metrics_extra(
                model=model,
                resolution=geometry.resolution,
                model_class=model_class_for(request.model),
                submit_id=submit_id,
            )
        payload["draft_content"] = json.dumps(
            {
                "type": "draft",
                "id": self.id_factory(),
                "min_version": MIN_VERSION,
                "min_features": [],
                "is_from_tsn": True,
                "version": DRAFT_VERSION,
                "main_component_id": component_id,
                "component_list": [
                    {
                        "type": "image_base_component",
                        "id": component_id,
                        "min_version": MIN_VERSION,
                        "metadata": {
                            "type": "",
                            "id": self.id_factory(),
                            "created_platform": 3,
                            "created_platform_version": "",
                            "created_time_in_ms": str(self.clock_ms()),
                            "created_did": "",
                        },
                        "generate_type": abilities.kind,
                        "aigc_mode": "workbench",
                        "abilities": rendered,
                    }
                ],
            },
            ensure_ascii=False,
        )
        payload["http_common_info"] = {"aid": self.assistant_id}
        return DraftRequest(abilities=abilities, submit_id=submit_id, payload=payload)

    @staticmethod
    def _metrics_extra(
        *, model: str, resolution: str, model_class: ModelClass, submit_id: str
    ) -> str:
        benefit_count = 4 if model_class is ModelClass.CURRENT and resolution == "2k" else 1
        scene_options = [
            {
                "type": "image",
                "scene": "ImageBasicGenerate",
                "modelReqKey": model,
                "resolutionType": resolution,
                "abilityList": [],
                "benefitCount": benefit_count,
                "reportParams": {
                    "enterSource": "generate",
                    "vipSource": "generate",
                    "extraVipFunctionKey": f"{model}-{resolution}",
                    "useVipFunctionDetailsReporterHoc": True,
                },
            }
        ]
        return json.dumps(
            {
                "promptSource": "custom",
                "generateCount": 1,
                "enterFrom": "click",
                "sceneOptions": json.dumps(scene_options),
                "isBoxSelect": False,
                "isCutout": False,
                "generateId": submit_id,
                "isRegenerate": False,
            }
        )
