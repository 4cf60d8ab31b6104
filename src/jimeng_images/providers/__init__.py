"""Provider gateways used by the generation pipeline."""

from .providers_base import CreditBalance, ProviderGateway, ReferenceUploader
from .providers_jimeng import JimengGateway

__all__ = ["CreditBalance", "JimengGateway", "ProviderGateway", "ReferenceUploader"]
