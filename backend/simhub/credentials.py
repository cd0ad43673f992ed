"""Persisted user records and password hashing.

The password hash never leaves this module: callers that need to answer a
client go through :func:`serialize_user`.
"""

from typing import Any, Optional

import bcrypt
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from .config import settings
from .errors import DuplicateKey
from .models import User
from .utils import as_utc, utc_now

_UPDATABLE_FIELDS = {"name", "tum_id", "is_tum_verified"}


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=settings.bcrypt_rounds)).decode("utf-8")


def check_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


def find_user_by_email(session: Session, email: str) -> Optional[User]:
    return session.exec(select(User).where(User.email == email)).first()


def find_user_by_id(session: Session, user_id: int) -> Optional[User]:
    return session.get(User, user_id)


def find_user_by_tum_id(session: Session, tum_id: str) -> Optional[User]:
    return session.exec(select(User).where(User.tum_id == tum_id)).first()


def create_user(
    session: Session,
    *,
    name: str,
    email: str,
    password_hash: str,
    tum_id: Optional[str] = None,
) -> User:
    if find_user_by_email(session, email) is not None:
        raise DuplicateKey("email")
    if tum_id and find_user_by_tum_id(session, tum_id) is not None:
        raise DuplicateKey("tum_id")
    user = User(
        name=name,
        email=email,
        password_hash=password_hash,
        tum_id=tum_id or None,
        is_tum_verified=False,
    )
    session.add(user)
    try:
        session.commit()
    except IntegrityError as exc:
        # Lost a race against a concurrent registration.
        session.rollback()
        raise DuplicateKey("email") from exc
    session.refresh(user)
    return user


def update_user(session: Session, user: User, fields: dict[str, Any]) -> User:
    unknown = set(fields) - _UPDATABLE_FIELDS
    if unknown:
        raise ValueError(f"fields not updatable: {sorted(unknown)}")
    for key, value in fields.items():
        setattr(user, key, value)
    user.updated_at = utc_now()
    session.add(user)
    try:
        session.commit()
    except IntegrityError as exc:
        session.rollback()
        raise DuplicateKey("tum_id") from exc
    session.refresh(user)
    return user


def serialize_user(user: User) -> dict[str, Any]:
    data = user.model_dump(exclude={"password_hash"})
    data["created_at"] = as_utc(user.created_at)
    data["updated_at"] = as_utc(user.updated_at)
    return data
