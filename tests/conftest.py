from __future__ import annotations

import itertools
from collections.abc import Callable

import pytest

from jimeng_images.generation.generation_models import GenerationRequest


@pytest.fixture
def counter_ids() -> Callable[[], str]:
    counter = itertools.count(1)
    return lambda: f"id-{next(counter)}"


@pytest.fixture
def make_request() -> Callable[..., GenerationRequest]:
    def factory(**overrides) -> GenerationRequest:
        values = {
            "model": "jimeng-image-4.5",
            "prompt": "a lighthouse at dusk",
            "token": "session-token-0001",
        }
        values.update(overrides)
        return GenerationRequest(**values)

    return factory
