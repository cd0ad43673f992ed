from datetime import datetime
from typing import Any, Optional

import sqlalchemy as sa
from sqlmodel import Field, JSON, SQLModel

from .utils import utc_now


class User(SQLModel, table=True):
    __tablename__ = "users"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=255)
    email: str = Field(max_length=255, unique=True, index=True)
    password_hash: str
    tum_id: Optional[str] = Field(default=None, unique=True, index=True)
    is_tum_verified: bool = Field(default=False)
    created_at: datetime = Field(default_factory=utc_now, sa_type=sa.DateTime(timezone=True))
    updated_at: datetime = Field(default_factory=utc_now, sa_type=sa.DateTime(timezone=True))


class Simulation(SQLModel, table=True):
    __tablename__ = "simulations"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(
        sa_column=sa.Column(
            sa.Integer,
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        )
    )
    name: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = Field(default=None, sa_type=sa.Text)
    configuration: dict[str, Any] = Field(default_factory=dict, sa_type=JSON)
    results: Optional[Any] = Field(default=None, sa_type=JSON)
    notes: Optional[str] = Field(default=None, sa_type=sa.Text)
    created_at: datetime = Field(default_factory=utc_now, sa_type=sa.DateTime(timezone=True), index=True)
    updated_at: datetime = Field(default_factory=utc_now, sa_type=sa.DateTime(timezone=True))
