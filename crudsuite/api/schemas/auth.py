"""
Authentication request/response schemas.
Pydantic models shared by every role's join, login and refresh endpoints.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, field_validator


USERNAME_PATTERN = r"^[A-Za-z0-9_-]+$"
MAX_PASSWORD_BYTES = 72


def check_password_strength(v: str) -> str:
    """Require mixed case and a digit."""
    if not any(c.isupper() for c in v):
        raise ValueError("Password must contain at least one uppercase letter")

    if not any(c.islower() for c in v):
        raise ValueError("Password must contain at least one lowercase letter")

    if not any(c.isdigit() for c in v):
        raise ValueError("Password must contain at least one digit")

    return v


def check_password_bytes(v: str) -> str:
    """bcrypt hashes at most 72 bytes of UTF-8."""
    if len(v.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes when UTF-8 encoded")
    return v


class JoinRequest(BaseModel):
    """Base request schema for account registration."""

    email: EmailStr = Field(..., description="Account email address")
    password: str = Field(..., min_length=8, description="Account password, at most 72 UTF-8 bytes")
    username: Optional[str] = Field(
        None, min_length=3, max_length=30, pattern=USERNAME_PATTERN, description="Public handle"
    )

    @field_validator("password")
    @classmethod
    def validate_password_bytes(cls, v: str) -> str:
        return check_password_bytes(v)


class StrongJoinRequest(JoinRequest):
    """Registration that enforces password strength."""

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        """Validate password strength."""
        return check_password_strength(v)


class LoginRequest(BaseModel):
    """Request schema for login."""

    email: EmailStr = Field(..., description="Account email address")
    password: str = Field(..., description="Account password")

    @field_validator("password")
    @classmethod
    def validate_password_bytes(cls, v: str) -> str:
        return check_password_bytes(v)


class RefreshRequest(BaseModel):
    """Request schema for token refresh."""

    refresh_token: str = Field(..., description="Refresh token")


class AuthorizationToken(BaseModel):
    """Access/refresh pair with fixed expiries."""

    access: str = Field(..., description="JWT access token")
    refresh: str = Field(..., description="JWT refresh token")
    expired_at: datetime = Field(..., description="Access token expiry")
    refreshable_until: datetime = Field(..., description="Refresh token expiry")


class Authorized(BaseModel):
    """Response for join, login and refresh."""

    id: UUID = Field(..., description="Account unique identifier")
    email: str = Field(..., description="Account email address")
    username: Optional[str] = Field(None, description="Public handle")
    created_at: datetime = Field(..., description="Account creation timestamp")
    token: AuthorizationToken

    model_config = {"from_attributes": True}


class ErrorDetail(BaseModel):
    message: str = Field(..., description="Error message")
    type: str = Field(..., description="Error class, e.g. ForbiddenError")
    details: Any = Field(default_factory=dict, description="Additional error details")


class ErrorResponse(BaseModel):
    """Body of every non-2xx response."""

    error: ErrorDetail
