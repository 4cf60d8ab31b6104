from __future__ import annotations

from fastapi import FastAPI
from fastapi.testclient import TestClient

import pytest

from jimeng_images.api.errors import ApiError, api_error_handler
from jimeng_images.generation.generation_errors import APIRequestFailed
from jimeng_images.providers.providers_base import CreditBalance
from jimeng_images.tokens.token_api import router
from jimeng_images.tokens.token_service import TokenService, pick_token, token_split
from tests.mocks.providers import FakeGateway

pytestmark = pytest.mark.unit


def build_client(gateway: FakeGateway) -> TestClient:
    app = FastAPI()
    app.state.token_service = TokenService(gateway=gateway)
    app.add_exception_handler(ApiError, api_error_handler)
    app.include_router(router)
    return TestClient(app)


@pytest.mark.parametrize(
    ("header", "expected"),
    [
        ("Bearer a,b , c", ["a", "b", "c"]),
        ("bearer single", ["single"]),
        ("raw-token", ["raw-token"]),
        ("Bearer ,", []),
        ("", []),
        (None, []),
    ],
)
def test_token_split(header, expected) -> None:
    assert token_split(header) == expected


def test_pick_token_returns_member() -> None:
    assert pick_token(["a", "b"]) in {"a", "b"}


def test_check_reports_live_status() -> None:
    client = build_client(FakeGateway(live_tokens={"live-token"}))

    assert client.post("/token/check", json={"token": "live-token"}).json() == {"live": True}
    assert client.post("/token/check", json={"token": "dead-token"}).json() == {"live": False}


def test_points_lists_balances_in_header_order() -> None:
    gateway = FakeGateway(balances={"tok-a": 5, "tok-b": 0})
    client = build_client(gateway)

    response = client.post("/token/points", headers={"Authorization": "Bearer tok-a,tok-b"})

    assert response.status_code == 200
    assert response.json() == [
        {"token": "tok-a", "points": CreditBalance(gift_credit=5).to_dict()},
        {"token": "tok-b", "points": CreditBalance().to_dict()},
    ]
    assert sorted(gateway.credit_checks) == ["tok-a", "tok-b"]


def test_points_requires_authorization() -> None:
    response = build_client(FakeGateway()).post("/token/points")

    assert response.status_code == 401


def test_points_provider_failure_maps_to_bad_gateway() -> None:
    class FailingGateway(FakeGateway):
        async def get_credit(self, token: str) -> CreditBalance:
            raise APIRequestFailed("provider down")

    response = build_client(FailingGateway()).post(
        "/token/points", headers={"Authorization": "Bearer tok-a"}
    )

    assert response.status_code == 502
    assert response.json()["error"]["code"] == "provider_request_failed"
