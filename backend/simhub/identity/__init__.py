"""External identity verification (TUM Online) adapters."""

from typing import Optional

from ..config import settings
from .adapters.base import ExternalCredentials, IdentityProvider
from .adapters.mock_adapter import MockIdentityProvider
from .adapters.tum_online_adapter import TumOnlineIdentityProvider

__all__ = [
    "ExternalCredentials",
    "IdentityProvider",
    "MockIdentityProvider",
    "TumOnlineIdentityProvider",
    "pick_identity_provider",
]


def pick_identity_provider() -> Optional[IdentityProvider]:
    """Return the provider selected by ``IDENTITY_MODE``; None when disabled."""

    if settings.identity_mode == "mock":
        return MockIdentityProvider(settings.mock_identity_accounts)
    if settings.identity_mode == "tum_online":
        return TumOnlineIdentityProvider.from_settings()
    return None
