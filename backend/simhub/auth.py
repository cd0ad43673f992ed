"""Registration, login, current-user lookup and external verification.

Every function takes the database session and, where needed, the token
service or identity provider explicitly so nothing here reads the signing
key or the store from module state.
"""

import logging
from typing import Any, Optional

from sqlmodel import Session

from .config import settings
from .credentials import (
    check_password,
    create_user,
    find_user_by_email,
    find_user_by_id,
    find_user_by_tum_id,
    hash_password,
    serialize_user,
    update_user,
)
from .errors import Conflict, DuplicateKey, InvalidCredentials, InvalidToken, Unauthorized, ValidationFailed
from .identity import ExternalCredentials, IdentityProvider
from .models import User
from .tokens import TokenService

logger = logging.getLogger(__name__)

_MAX_PASSWORD_BYTES = 72  # bcrypt input limit

# Checked against on an unknown email so both login failures cost one bcrypt round.
_DUMMY_HASH = hash_password("dummy-password-for-timing")


def register(
    session: Session,
    tokens: TokenService,
    *,
    name: str,
    email: str,
    password: str,
    password_confirmation: Optional[str],
    tum_id: Optional[str] = None,
    min_password_length: Optional[int] = None,
) -> dict[str, Any]:
    errors = _registration_errors(name, email, password, password_confirmation, min_password_length)
    if errors:
        raise ValidationFailed(errors=errors)
    try:
        user = create_user(
            session,
            name=name.strip(),
            email=email,
            password_hash=hash_password(password),
            tum_id=tum_id,
        )
    except DuplicateKey as exc:
        if exc.field == "tum_id":
            raise Conflict("TUM ID already in use") from exc
        raise Conflict("Email already in use") from exc
    logger.info("registered user id=%s", user.id)
    return {"user": serialize_user(user), "token": tokens.issue(user)}


def login(session: Session, tokens: TokenService, *, email: str, password: str) -> dict[str, Any]:
    user = find_user_by_email(session, email)
    if user is None:
        check_password(password, _DUMMY_HASH)
        logger.info("login failed for unknown email")
        raise InvalidCredentials()
    if not check_password(password, user.password_hash):
        logger.info("login failed for user id=%s", user.id)
        raise InvalidCredentials()
    return {"user": serialize_user(user), "token": tokens.issue(user)}


def current_user(session: Session, tokens: TokenService, token: Optional[str]) -> User:
    if not token:
        raise Unauthorized()
    try:
        identity = tokens.verify(token)
    except InvalidToken as exc:
        raise Unauthorized() from exc
    user = find_user_by_id(session, identity.user_id)
    if user is None:
        raise Unauthorized()
    return user


def verify_external_identity(
    session: Session,
    provider: IdentityProvider,
    user: User,
    *,
    tum_id: str,
    password: str,
) -> dict[str, Any]:
    owner = find_user_by_tum_id(session, tum_id)
    if owner is not None and owner.id != user.id:
        raise Conflict("TUM ID already in use")
    if not provider.verify(ExternalCredentials(external_id=tum_id, password=password)):
        logger.info("external verification rejected for user id=%s", user.id)
        raise Unauthorized("TUM verification failed")
    try:
        user = update_user(session, user, {"tum_id": tum_id, "is_tum_verified": True})
    except DuplicateKey as exc:
        raise Conflict("TUM ID already in use") from exc
    logger.info("external verification succeeded for user id=%s", user.id)
    return serialize_user(user)


def _registration_errors(
    name: str,
    email: str,
    password: str,
    password_confirmation: Optional[str],
    min_password_length: Optional[int],
) -> dict[str, list[str]]:
    errors: dict[str, list[str]] = {}
    if not name or not name.strip():
        errors["name"] = ["The name field is required."]
    if not email:
        errors["email"] = ["The email field is required."]
    if not password:
        errors["password"] = ["The password field is required."]
        return errors
    if password != password_confirmation:
        errors.setdefault("password", []).append("The password confirmation does not match.")
    minimum = settings.password_min_length if min_password_length is None else min_password_length
    if len(password) < minimum:
        errors.setdefault("password", []).append(f"The password must be at least {minimum} characters.")
    if len(password.encode("utf-8")) > _MAX_PASSWORD_BYTES:
        errors.setdefault("password", []).append(
            f"The password must not be greater than {_MAX_PASSWORD_BYTES} bytes."
        )
    return errors
