"""Deterministic adapter for local development and repeatable tests."""

from typing import Optional

from .base import ExternalCredentials, IdentityProvider


class MockIdentityProvider(IdentityProvider):
    """Accepts exactly the configured ``external_id -> password`` pairs."""

    def __init__(self, accounts: Optional[dict[str, str]] = None) -> None:
        self.accounts = dict(accounts or {})

    def verify(self, credentials: ExternalCredentials) -> bool:
        expected = self.accounts.get(credentials.external_id)
        return expected is not None and expected == credentials.password
