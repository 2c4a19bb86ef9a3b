"""Pydantic schemas for the HTTP API layer."""

from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class RegisterRequest(BaseModel):
    """Registration body; presence and format are checked by the auth service."""

    email: Optional[str] = None
    password: Optional[str] = None
    name: Optional[str] = None


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class User(BaseModel):
    """Public view of a user record. The password hash is never part of it."""

    id: str
    email: str
    name: str
    created_at: datetime


class AuthResponse(BaseModel):
    user: User
    token: str


class ProfileResponse(BaseModel):
    user: User


class ReadingCreate(BaseModel):
    # Left untyped so that non-numeric values reach the service's own check.
    temperature: Any = None
    threshold_value: Any = None


class Reading(BaseModel):
    id: str
    temperature: float
    threshold_value: Optional[float] = None
    recorded_at: datetime


class ThresholdCreate(BaseModel):
    threshold_value: Any = None


class Threshold(BaseModel):
    id: str
    threshold_value: float
    created_at: datetime


class Pagination(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    page: int = Field(..., ge=1)
    limit: int = Field(..., ge=1, le=100)
    total: int = Field(..., ge=0)
    total_pages: int = Field(..., ge=0, alias="totalPages")


class ReadingPage(BaseModel):
    data: List[Reading] = Field(default_factory=list)
    pagination: Pagination


class ThresholdPage(BaseModel):
    data: List[Threshold] = Field(default_factory=list)
    pagination: Pagination


class ErrorResponse(BaseModel):
    error: str
