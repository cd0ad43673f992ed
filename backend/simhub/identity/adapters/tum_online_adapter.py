"""TUM Online backed identity adapter.

Posts the caller's credentials together with this service's client id and
secret to ``{api_url}/authenticate``. A 200 answer is an accept, any other
4xx a reject; 5xx answers and network failures are upstream errors.
"""

import logging
from typing import Optional

import requests

from ...config import settings
from ...errors import UpstreamError
from .base import ExternalCredentials, IdentityProvider

logger = logging.getLogger(__name__)


class TumOnlineIdentityProvider(IdentityProvider):
    def __init__(
        self,
        api_url: str,
        client_id: str,
        client_secret: str,
        *,
        timeout_ms: int = 10000,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.api_url = api_url.rstrip("/")
        self.client_id = client_id
        self.client_secret = client_secret
        self.timeout = timeout_ms / 1000
        self._session = session or requests.Session()

    @classmethod
    def from_settings(cls) -> "TumOnlineIdentityProvider":
        return cls(
            settings.tum_online_api_url,
            settings.tum_online_client_id,
            settings.tum_online_client_secret,
            timeout_ms=settings.tum_online_timeout_ms,
        )

    def verify(self, credentials: ExternalCredentials) -> bool:
        try:
            response = self._session.post(
                f"{self.api_url}/authenticate",
                json={
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                    "username": credentials.external_id,
                    "password": credentials.password,
                },
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as exc:
            logger.warning("identity provider unreachable: %s", type(exc).__name__)
            raise UpstreamError() from exc
        if response.status_code == 200:
            return True
        if 400 <= response.status_code < 500:
            logger.info("identity provider rejected %s with status %i", credentials.external_id, response.status_code)
            return False
        logger.warning("identity provider responded with status %i", response.status_code)
        raise UpstreamError()
