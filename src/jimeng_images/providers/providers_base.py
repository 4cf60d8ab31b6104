"""Abstract provider gateway definition."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Protocol


@dataclass(slots=True)
class CreditBalance:
    """Account balance split by credit source."""

    gift_credit: int = 0
    purchase_credit: int = 0
    vip_credit: int = 0

    @property
    def total_credit(self) -> int:
        return self.gift_credit + self.purchase_credit + self.vip_credit

    def to_dict(self) -> dict[str, int]:
        return {
            "giftCredit": self.gift_credit,
            "purchaseCredit": self.purchase_credit,
            "vipCredit": self.vip_credit,
            "totalCredit": self.total_credit,
        }


class ReferenceUploader(Protocol):
    """Callable that uploads a reference image and returns its provider URI."""

    async def __call__(self, token: str, source: str) -> str: ...


class ProviderGateway(ABC):
    """Authenticated access to the generation provider."""

    @abstractmethod
    async def request(
        self,
        method: str,
        path: str,
        token: str,
        *,
        params: Mapping[str, Any] | None = None,
        data: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Issue one call and return the unwrapped ``data`` section."""

    @abstractmethod
    async def upload_file(self, token: str, source: str) -> dict[str, str]:
        """Upload a local path, URL or data URI and return ``{"image_uri": ...}``."""

    @abstractmethod
    async def get_credit(self, token: str) -> CreditBalance:
        """Return the current credit balance."""

    @abstractmethod
    async def receive_credit(self, token: str) -> None:
        """Claim the daily free credits."""

    @abstractmethod
    async def get_token_live_status(self, token: str) -> bool:
        """Report whether ``token`` still authenticates."""
