"""Shared contract for pluggable external identity verification."""

from dataclasses import dataclass


@dataclass
class ExternalCredentials:
    """Credentials the caller supplies for the external identity system."""

    external_id: str
    password: str


class IdentityProvider:
    """Minimal interface implemented by all identity backends.

    ``verify`` returns True when the provider accepts the credentials and
    False when it rejects them. Transport or provider faults raise
    :class:`~simhub.errors.UpstreamError`.
    """

    def verify(self, credentials: ExternalCredentials) -> bool:
        raise NotImplementedError
