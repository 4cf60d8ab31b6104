from __future__ import annotations

import json
from typing import Any

import pytest

from jimeng_images.generation.ability_graph import (
    DRAFT_VERSION,
    MIN_VERSION,
    SEED_OFFSET,
    SEED_SPAN,
    AbilityGraphBuilder,
    BlendAbilities,
    GenerateAbilities,
)
from jimeng_images.generation.generation_models import ModelClass
from jimeng_images.generation.geometry import resolve_geometry

pytestmark = pytest.mark.unit

FIXED_CLOCK_MS = 1_700_000_000_000
ID_KEYS = {"id", "seed", "main_component_id", "submit_id", "generateId"}


def _draft(payload: dict[str, Any]) -> dict[str, Any]:
    return json.loads(payload["draft_content"])


def _component(payload: dict[str, Any]) -> dict[str, Any]:
    return _draft(payload)["component_list"][0]


def _collect_ids(node: Any) -> list[str]:
    ids: list[str] = []
    if isinstance(node, dict):
        for key, value in node.items():
            if key == "id":
                ids.append(value)
            else:
                ids.extend(_collect_ids(value))
    elif isinstance(node, list):
        for value in node:
            ids.extend(_collect_ids(value))
    return ids


def _scrub(node: Any) -> Any:
    if isinstance(node, dict):
        return {key: _scrub(value) for key, value in node.items() if key not in ID_KEYS}
    if isinstance(node, list):
        return [_scrub(value) for value in node]
    return node


def _normalise(payload: dict[str, Any]) -> dict[str, Any]:
    expanded = dict(payload)
    expanded["draft_content"] = _draft(payload)
    if "metrics_extra" in expanded:
        metrics = json.loads(expanded["metrics_extra"])
        metrics["sceneOptions"] = json.loads(metrics["sceneOptions"])
        expanded["metrics_extra"] = metrics
    return _scrub(expanded)


@pytest.fixture
def geometry_2k():
    return resolve_geometry("a lighthouse", "16:9", "2k", ModelClass.CURRENT)


def test_generate_shape(make_request, geometry_2k, counter_ids) -> None:
    builder = AbilityGraphBuilder(
        id_factory=counter_ids, seed_factory=lambda: 2_512_345_678, clock_ms=lambda: FIXED_CLOCK_MS
    )
    request = make_request(negative_prompt="blurry", sample_strength=0.7)

    draft = builder.build(request, geometry_2k)

    assert isinstance(draft.abilities, GenerateAbilities)
    payload = draft.payload
    assert payload["extend"] == {"root_model": "high_aes_general_v40l"}
    assert payload["submit_id"] == draft.submit_id
    assert payload["http_common_info"] == {"aid": 513695}

    draft_content = _draft(payload)
    assert draft_content["version"] == DRAFT_VERSION
    assert draft_content["min_version"] == MIN_VERSION
    component = draft_content["component_list"][0]
    assert component["type"] == "image_base_component"
    assert component["id"] == draft_content["main_component_id"]
    assert component["generate_type"] == "generate"
    assert component["aigc_mode"] == "workbench"
    assert component["metadata"]["created_time_in_ms"] == str(FIXED_CLOCK_MS)

    abilities = component["abilities"]
    assert "blend" not in abilities
    core = abilities["generate"]["core_param"]
    assert core["model"] == "high_aes_general_v40l"
    assert core["prompt"] == "a lighthouse at dusk"
    assert core["negative_prompt"] == "blurry"
    assert core["seed"] == 2_512_345_678
    assert core["sample_strength"] == 0.7
    assert core["image_ratio"] == 1
    assert core["large_image_info"]["width"] == 2560
    assert core["large_image_info"]["height"] == 1440
    assert core["large_image_info"]["resolution_type"] == "2k"


def test_generate_metrics_extra(make_request, geometry_2k) -> None:
    draft = AbilityGraphBuilder().build(make_request(), geometry_2k)

    metrics = json.loads(draft.payload["metrics_extra"])
    assert metrics["generateId"] == draft.submit_id
    scene = json.loads(metrics["sceneOptions"])[0]
    assert scene["modelReqKey"] == "high_aes_general_v40l"
    assert scene["resolutionType"] == "2k"
    assert scene["benefitCount"] == 4
    assert scene["reportParams"]["extraVipFunctionKey"] == "high_aes_general_v40l-2k"


def test_benefit_count_for_previous_models(make_request) -> None:
    geometry = resolve_geometry("x", "1:1", "1k", ModelClass.PREVIOUS)
    draft = AbilityGraphBuilder().build(make_request(model="jimeng-image-3.0"), geometry)

    scene = json.loads(json.loads(draft.payload["metrics_extra"])["sceneOptions"])[0]
    assert scene["benefitCount"] == 1


def test_blend_shape(make_request, geometry_2k, counter_ids) -> None:
    builder = AbilityGraphBuilder(id_factory=counter_ids, clock_ms=lambda: FIXED_CLOCK_MS)

    draft = builder.build(
        make_request(reference_image="https://example.com/ref.png"),
        geometry_2k,
        reference_uri="tos-cn-i-ref/abc",
    )

    assert isinstance(draft.abilities, BlendAbilities)
    assert "metrics_extra" not in draft.payload
    component = _component(draft.payload)
    assert component["generate_type"] == "blend"
    abilities = component["abilities"]
    assert "generate" not in abilities
    blend = abilities["blend"]
    assert blend["core_param"]["prompt"] == "a lighthouse at dusk##"
    assert "seed" not in blend["core_param"]
    assert blend["core_param"]["large_image_info"]["width"] == 2560
    ability = blend["ability_list"][0]
    assert ability["name"] == "byte_edit"
    assert ability["strength"] == 0.5
    assert ability["image_uri_list"] == ["tos-cn-i-ref/abc"]
    assert ability["image_list"][0]["image_uri"] == "tos-cn-i-ref/abc"
    assert ability["image_list"][0]["uri"] == "tos-cn-i-ref/abc"
    assert blend["postedit_param"]["generate_type"] == 0
    assert blend["prompt_placeholder_info_list"][0]["ability_index"] == 0


@pytest.mark.parametrize("reference_uri", [None, "tos-cn-i-ref/abc"])
def test_node_identifiers_are_unique(make_request, geometry_2k, reference_uri) -> None:
    draft = AbilityGraphBuilder().build(make_request(), geometry_2k, reference_uri=reference_uri)

    ids = _collect_ids(_draft(draft.payload)) + [draft.submit_id]
    assert len(ids) == len(set(ids))


def test_seed_in_offset_range(make_request, geometry_2k) -> None:
    builder = AbilityGraphBuilder()
    for _ in range(20):
        draft = builder.build(make_request(), geometry_2k)
        assert isinstance(draft.abilities, GenerateAbilities)
        assert SEED_OFFSET <= draft.abilities.seed < SEED_OFFSET + SEED_SPAN


@pytest.mark.parametrize("reference_uri", [None, "tos-cn-i-ref/abc"])
def test_builds_differ_only_in_identifiers_and_seed(
    make_request, geometry_2k, reference_uri
) -> None:
    builder = AbilityGraphBuilder(clock_ms=lambda: FIXED_CLOCK_MS)
    request = make_request()

    first = builder.build(request, geometry_2k, reference_uri=reference_uri)
    second = builder.build(request, geometry_2k, reference_uri=reference_uri)

    assert first.payload != second.payload
    assert _normalise(first.payload) == _normalise(second.payload)


def test_deterministic_factories_give_identical_payloads(make_request, geometry_2k) -> None:
    def build():
        counter = iter(range(1, 1000))
        builder = AbilityGraphBuilder(
            id_factory=lambda: f"id-{next(counter)}",
            seed_factory=lambda: SEED_OFFSET,
            clock_ms=lambda: FIXED_CLOCK_MS,
        )
        return builder.build(make_request(), geometry_2k)

    assert build().payload == build().payload
