"""Signed, time-limited bearer tokens.

Tokens are HS256 JWTs carrying the user id (``sub``) and email. Nothing is
stored server-side, so a token stays valid until its ``exp`` passes.
"""

import logging
from dataclasses import dataclass
from datetime import timedelta

import jwt

from .config import settings
from .errors import InvalidToken
from .models import User
from .utils import utc_now

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Identity:
    """Caller identity resolved from a verified token."""

    user_id: int
    email: str


class TokenService:
    def __init__(self, secret: str, *, algorithm: str = "HS256", ttl: timedelta = timedelta(days=7)) -> None:
        if not secret:
            raise ValueError("token signing secret must not be empty")
        self._secret = secret
        self._algorithm = algorithm
        self._ttl = ttl

    def issue(self, user: User) -> str:
        now = utc_now()
        payload = {
            "sub": str(user.id),
            "email": user.email,
            "iat": now,
            "exp": now + self._ttl,
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> Identity:
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["sub", "exp"]},
            )
        except jwt.PyJWTError as exc:
            logger.debug("token rejected: %s", type(exc).__name__)
            raise InvalidToken(str(exc)) from exc
        try:
            user_id = int(payload["sub"])
        except (TypeError, ValueError) as exc:
            raise InvalidToken("subject is not a user id") from exc
        return Identity(user_id=user_id, email=str(payload.get("email", "")))


def token_service_from_settings() -> TokenService:
    return TokenService(
        settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        ttl=timedelta(days=settings.token_ttl_days),
    )
