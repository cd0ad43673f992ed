"""Runtime configuration loaded from environment variables.

This module centralizes backend settings such as database URL, token
signing options, CORS origins, and the external identity provider.
"""

import os
from dotenv import load_dotenv

load_dotenv()


def _parse_accounts(raw: str) -> dict[str, str]:
    accounts: dict[str, str] = {}
    for pair in raw.split(","):
        ident, sep, password = pair.strip().partition(":")
        if sep and ident:
            accounts[ident] = password
    return accounts


class Settings:
    """Typed settings object used across the backend."""

    env: str = os.getenv("ENV", "dev")
    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./data/dev.db")
    jwt_secret: str = os.getenv("JWT_SECRET", "dev-secret-change-me")
    jwt_algorithm: str = os.getenv("JWT_ALGORITHM", "HS256")
    token_ttl_days: int = int(os.getenv("TOKEN_TTL_DAYS", "7"))
    password_min_length: int = int(os.getenv("PASSWORD_MIN_LENGTH", "8"))
    bcrypt_rounds: int = int(os.getenv("BCRYPT_ROUNDS", "12"))
    cors_origins: list[str] = [
        x.strip()
        for x in os.getenv(
            "CORS_ORIGINS",
            "http://localhost:5173,http://localhost:3000,http://127.0.0.1:5173",
        ).split(",")
        if x.strip()
    ]
    identity_mode: str = os.getenv("IDENTITY_MODE", "tum_online").lower()
    tum_online_api_url: str = os.getenv("TUM_ONLINE_API_URL", "https://campus.tum.de/tumonline/rest/v1")
    tum_online_client_id: str = os.getenv("TUM_ONLINE_CLIENT_ID", "")
    tum_online_client_secret: str = os.getenv("TUM_ONLINE_CLIENT_SECRET", "")
    tum_online_timeout_ms: int = int(os.getenv("TUM_ONLINE_TIMEOUT_MS", "10000"))
    mock_identity_accounts: dict[str, str] = _parse_accounts(os.getenv("MOCK_IDENTITY_ACCOUNTS", ""))


settings = Settings()
