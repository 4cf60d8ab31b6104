"""Jimeng provider gateway over httpx.

Requests are authenticated by the session token carried in cookies. Every
response body is an envelope ``{"ret": "0", "errmsg": "", "data": {...}}``;
a non-zero ``ret`` is turned into a pipeline exception whose message keeps
the code so callers can still recognise it.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import httpx

from ..generation.generation_errors import (
    APIRequestFailed,
    InsufficientCredits,
    ReferenceUploadFailed,
)
from .providers_base import CreditBalance, ProviderGateway, ReferenceUploader

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://jimeng.jianying.com"
WEB_VERSION = "7.5.0"
INSUFFICIENT_CREDIT_RETS = frozenset({"1006", "5000"})


@dataclass(slots=True)
class JimengGateway(ProviderGateway):
    """Call the Jimeng web API with a session token."""

    base_url: str = DEFAULT_BASE_URL
    assistant_id: int = 513695
    timeout_seconds: float = 30.0
    uploader: ReferenceUploader | None = None
    log: logging.Logger = field(default_factory=lambda: logger)

    async def request(
        self,
        method: str,
        path: str,
        token: str,
        *,
        params: Mapping[str, Any] | None = None,
        data: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        query = {
            "aid": self.assistant_id,
            "device_platform": "web",
            "region": "cn",
            "web_version": WEB_VERSION,
            **(params or {}),
        }
        url = self.base_url.rstrip("/") + path
        async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
            try:
                response = await client.request(
                    method.upper(),
                    url,
                    params=query,
                    json=dict(data) if data is not None else None,
                    headers=self._headers(token),
                )
            except httpx.HTTPError as exc:
                raise APIRequestFailed(f"jimeng request to {path} failed: {exc}") from exc

        if response.status_code != 200:
            raise APIRequestFailed(
                f"jimeng request to {path} failed with status {response.status_code}"
            )
        try:
            body = response.json()
        except ValueError as exc:
            raise APIRequestFailed(f"jimeng response from {path} is not JSON") from exc
        return self._unwrap(path, body)

    async def upload_file(self, token: str, source: str) -> dict[str, str]:
        if self.uploader is None:
            raise ReferenceUploadFailed("reference image upload is not configured")
        image_uri = await self.uploader(token, source)
        if not image_uri:
            raise ReferenceUploadFailed("uploader returned an empty image uri")
        return {"image_uri": image_uri}

    async def get_credit(self, token: str) -> CreditBalance:
        data = await self.request(
            "post",
            "/commerce/v1/benefits/user_credit",
            token,
            data={},
        )
        credit = data.get("credit") or {}
        balance = CreditBalance(
            gift_credit=int(credit.get("gift_credit") or 0),
            purchase_credit=int(credit.get("purchase_credit") or 0),
            vip_credit=int(credit.get("vip_credit") or 0),
        )
        self.log.info(
            "jimeng.credit.balance",
            extra={"token": mask_token(token), "total_credit": balance.total_credit},
        )
        return balance

    async def receive_credit(self, token: str) -> None:
        data = await self.request(
            "post",
            "/commerce/v1/benefits/credit_receive",
            token,
            data={"time_zone": "Asia/Shanghai"},
        )
        self.log.info(
            "jimeng.credit.received",
            extra={"token": mask_token(token), "receive_quota": data.get("receive_quota")},
        )

    async def get_token_live_status(self, token: str) -> bool:
        try:
            data = await self.request(
                "post",
                "/passport/account/info/v2",
                token,
                params={"account_sdk_source": "web"},
            )
        except APIRequestFailed as exc:
            self.log.info(
                "jimeng.token.dead",
                extra={"token": mask_token(token), "reason": str(exc)},
            )
            return False
        return bool(data.get("user_id"))

    def _headers(self, token: str) -> dict[str, str]:
        cookie = "; ".join(
            [
                f"sessionid={token}",
                f"sessionid_ss={token}",
                f"sid_tt={token}",
                f"uid_tt={uuid.uuid4().hex}",
            ]
        )
        return {
            "Accept": "application/json, text/plain, */*",
            "Appid": str(self.assistant_id),
            "Origin": self.base_url,
            "Referer": self.base_url.rstrip("/") + "/ai-tool/image/generate",
            "Cookie": cookie,
        }

    def _unwrap(self, path: str, body: Any) -> dict[str, Any]:
        if not isinstance(body, dict):
            raise APIRequestFailed(f"jimeng response from {path} has unexpected shape")
        ret = str(body.get("ret", "0"))
        if ret != "0":
            message = (body.get("errmsg") or "").strip() or "unknown error"
            self.log.warning(
                "jimeng.response.error",
                extra={"path": path, "ret": ret, "errmsg": message},
            )
            if ret in INSUFFICIENT_CREDIT_RETS:
                raise InsufficientCredits(f"[ret={ret}] {message}")
            raise APIRequestFailed(f"jimeng request to {path} failed [ret={ret}]: {message}")
        data = body.get("data")
        return data if isinstance(data, dict) else {}


def mask_token(token: str) -> str:
    """Keep only the edges of a token for log output."""
    if len(token) <= 8:
        return "***"
    return f"{token[:4]}...{token[-4:]}"
