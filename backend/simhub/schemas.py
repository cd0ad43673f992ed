"""Pydantic request schemas for the auth and simulation endpoints."""

from typing import Any, Optional, Union

from pydantic import BaseModel, Field

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"

StructuredData = Union[dict[str, Any], list[Any]]


class RegisterRequest(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    email: str = Field(min_length=3, max_length=255, pattern=EMAIL_PATTERN)
    password: str = Field(min_length=1)
    password_confirmation: Optional[str] = None
    tum_id: Optional[str] = Field(default=None, max_length=255)


class LoginRequest(BaseModel):
    email: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1)


class VerifyTumRequest(BaseModel):
    tum_id: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1)


class SimulationCreate(BaseModel):
    name: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = Field(default=None, max_length=1000)
    configuration: dict[str, Any]
    results: Optional[StructuredData] = None
    notes: Optional[str] = None


class SimulationUpdate(BaseModel):
    """Every field is optional; only keys sent by the client are applied."""

    name: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = Field(default=None, max_length=1000)
    configuration: Optional[dict[str, Any]] = None
    results: Optional[StructuredData] = None
    notes: Optional[str] = None


class BulkDeleteRequest(BaseModel):
    ids: list[Any] = Field(min_length=1)
